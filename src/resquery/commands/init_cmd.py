"""Command: post store initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from resquery.commands._base import ResCommand
from resquery.services.store import StoreService

if TYPE_CHECKING:
    from resquery.commands._context import AppContext

_INIT_EXAMPLES = """\
  resquery init
  resquery --db sqlite:///board.db init
  RESQUERY_DATABASE__PATH=/srv/res.db resquery init"""


@click.command("init", cls=ResCommand, examples=_INIT_EXAMPLES)
@click.pass_obj
def init_cmd(app: AppContext) -> None:
    """Create the post table if it does not exist."""
    app.emit(StoreService(app.board).init_database())
