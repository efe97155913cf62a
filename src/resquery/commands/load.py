"""Command: import posts from a JSON file."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from resquery.commands._base import ResCommand
from resquery.services.posts import PostService

if TYPE_CHECKING:
    from resquery.commands._context import AppContext

_LOAD_EXAMPLES = """\
  resquery load posts.json
  resquery --db sqlite:///board.db load dump.json

  File format: a JSON array of objects with no, name_and_trip, datetime,
  datetime_text, id, main_text, and optional main_text_html / oekaki_id."""


@click.command("load", cls=ResCommand, examples=_LOAD_EXAMPLES)
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def load(app: AppContext, file: Path) -> None:
    """Import posts from a JSON file."""
    app.emit(PostService(app.board).load(file))
