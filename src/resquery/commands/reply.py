"""Command: preview the bot's reply to a chat message."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from resquery.commands._base import ResCommand
from resquery.services.reply import ReplyService

if TYPE_CHECKING:
    from resquery.commands._context import AppContext

_REPLY_EXAMPLES = """\
  resquery reply "<@123456> 10,20-25"
  resquery reply "?324-326"
  resquery --json reply '<@!42> 1-'"""


@click.command("reply", cls=ResCommand, examples=_REPLY_EXAMPLES)
@click.argument("message")
@click.pass_obj
def reply(app: AppContext, message: str) -> None:
    """Print the reply messages the bot would send for MESSAGE."""
    app.emit(ReplyService(app.board).reply(message))
