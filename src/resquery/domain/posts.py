"""Post record returned by the fetch-by-numbers provider.

Mirrors one row of the ``res`` table. ``id`` is the poster's opaque
author identifier, not the post number (that is ``no``).
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel


class Post(BaseModel):
    """A single numbered board post."""

    model_config = {"frozen": True}

    no: int
    name_and_trip: str
    datetime: dt.datetime
    datetime_text: str
    id: str
    main_text: str
    main_text_html: str = ""
    oekaki_id: int | None = None

    def header(self) -> str:
        return f"### __{self.no} {self.name_and_trip} {self.datetime_text} ID: {self.id}__"

    def render(self, *, oekaki_url_template: str | None = None) -> str:
        """Render the post as a chat reply block.

        Header line, body, and (when the post has an oekaki and a URL
        template is configured) the image URL on its own line.
        """
        text = f"{self.header()}\n{self.main_text}\n"
        url = self.oekaki_url(oekaki_url_template)
        if url:
            text += f"{url}\n"
        return text

    def oekaki_url(self, template: str | None) -> str | None:
        """Image URL for this post's oekaki, or None."""
        if self.oekaki_id is None or not template:
            return None
        return template.format(oekaki_id=self.oekaki_id, no=self.no)
