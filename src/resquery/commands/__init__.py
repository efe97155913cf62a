"""Subcommand modules for resquery.

Provides register_commands() which uses deferred imports to keep
``resquery --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the command group and standalone commands on the root CLI group."""
    # --- Groups ---
    from resquery.commands.query import query

    cli.add_command(query)

    # --- Standalone commands ---
    from resquery.commands.init_cmd import init_cmd
    from resquery.commands.load import load
    from resquery.commands.reply import reply

    cli.add_command(init_cmd)
    cli.add_command(load)
    cli.add_command(reply)
