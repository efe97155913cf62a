"""Chat mention cleanup for incoming bot messages."""

from __future__ import annotations

import re

# <@123> (user) and <@!123> (nickname) mention tokens.
_MENTION_PATTERN = re.compile(r"<@!?\d+>")


def strip_mentions(content: str) -> str:
    """Remove mention tokens from *content* and trim the remainder."""
    return _MENTION_PATTERN.sub("", content).strip()
