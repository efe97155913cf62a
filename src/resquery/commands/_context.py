"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy Board initialization and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from resquery.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from resquery.config.settings import ResSettings
    from resquery.infrastructure.board import Board
    from resquery.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The board is lazily
    initialized on first use so ``--help``, ``--version`` and database-free
    commands never open the post store.
    """

    def __init__(self, settings: ResSettings) -> None:
        self.settings = settings
        self._board: Board | None = None

        from resquery.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            sql_echo=settings.database.echo,
        )

        if settings.verbose:
            from resquery.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def board(self) -> Board:
        """The board instance (created lazily on first access)."""
        if self._board is None:
            from resquery.infrastructure.board import Board

            self._board = Board(self.settings)
        return self._board

    def close(self) -> None:
        """Release the board's database connections, if any were opened."""
        if self._board is not None:
            self._board.close()
            self._board = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
