"""Click base classes shared by every resquery command.

``ResCommand`` and ``ResGroup`` accept an ``examples`` string shown by an
eager ``--examples`` flag, which keeps ``--help`` short. Commands taking
an expression (``EXPR`` or a chat ``MESSAGE``) also print the token
legend after their examples. Every command binds its path into the
structlog context, so log lines say which command produced them.
"""

from __future__ import annotations

from typing import Any

import click
import structlog

EXPRESSION_SYNTAX = """\
Expression tokens (comma-separated):
  123       post 123
  123-128   posts 123 to 128
  123-      post 123 to the latest post
  ^126      exclude 126 (also ^126-127, ^126-)
  ?324      the post ending in 324 nearest the latest (also ?324-326, ?300-)
  ?^325     relative exclude (also ?^325-327, ?^300-)"""

expression_argument = click.argument("expression", metavar="EXPR")


# parameters whose value holds a range expression
_EXPRESSION_PARAMS = frozenset({"expression", "message"})


def _takes_expression(cmd: click.Command) -> bool:
    return any(param.name in _EXPRESSION_PARAMS for param in cmd.params)


def _show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value:
        return
    cmd = ctx.command
    click.echo(f"Examples for '{ctx.command_path}':\n")
    click.echo(getattr(cmd, "examples", ""))
    if _takes_expression(cmd):
        click.echo(f"\n{EXPRESSION_SYNTAX}")
    ctx.exit(0)


class _ExamplesMixin:
    """Adds the ``examples`` keyword and the eager ``--examples`` flag."""

    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=_show_examples,
                    help="Show usage examples.",
                )
            )


class ResCommand(_ExamplesMixin, click.Command):
    """Leaf command with ``--examples`` and a ``command`` log field."""

    def invoke(self, ctx: click.Context) -> Any:
        with structlog.contextvars.bound_contextvars(command=ctx.command_path):
            return super().invoke(ctx)


class ResGroup(_ExamplesMixin, click.Group):
    """Command group whose subcommands default to :class:`ResCommand`."""

    command_class = ResCommand
