"""Rich Console factory and theme for resquery output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

RES_THEME = Theme(
    {
        "res.ok": "bold green",
        "res.error": "bold red",
        "res.warning": "bold yellow",
        "res.op": "bold cyan",
        "res.key": "dim",
        "res.no": "bold blue",
        "res.name": "green",
        "res.author": "magenta",
        "res.date": "dim",
        "res.include": "green",
        "res.exclude": "red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=RES_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Return the Rich style name for a range spec kind."""
    return "res.exclude" if "exclude" in kind else "res.include"
