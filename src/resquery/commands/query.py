"""Command group: parse, resolve, and fetch range expressions."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from resquery.commands._base import ResGroup, expression_argument
from resquery.services.posts import PostService

if TYPE_CHECKING:
    from resquery.commands._context import AppContext

_QUERY_EXAMPLES = """\
  resquery query parse "10,20-25,^23,?324,?^326"
  resquery query resolve "?320-330,?^325" --max 123340
  resquery query fetch "123-128,^126"
  resquery query fetch "?50-"
  resquery query latest"""


@click.group(cls=ResGroup, examples=_QUERY_EXAMPLES)
@click.pass_obj
def query(app: AppContext) -> None:
    """Parse, resolve, and fetch posts by range expression."""


@query.command(
    examples="""\
  resquery query parse "123"
  resquery query parse "123-,^125"
  resquery --json query parse '?324,?^326'"""
)
@expression_argument
@click.pass_obj
def parse(app: AppContext, expression: str) -> None:
    """Show how an expression is parsed (no database access)."""
    app.emit(PostService(app.board).parse(expression))


@query.command(
    examples="""\
  resquery query resolve "10-20,^15"
  resquery query resolve "?456" --max 2345
  resquery -q query resolve '?300-'"""
)
@expression_argument
@click.option(
    "--max",
    "max_value",
    type=click.IntRange(min=0),
    default=None,
    help="Upper bound for open-ended and relative tokens (default: latest post).",
)
@click.pass_obj
def resolve(app: AppContext, expression: str, max_value: int | None) -> None:
    """Resolve an expression into post numbers."""
    app.emit(PostService(app.board).resolve(expression, max_value=max_value))


@query.command(
    examples="""\
  resquery query fetch "123"
  resquery query fetch "123,124-128,^126-127"
  resquery --json query fetch '?324'"""
)
@expression_argument
@click.pass_obj
def fetch(app: AppContext, expression: str) -> None:
    """Fetch the posts selected by an expression."""
    app.emit(PostService(app.board).fetch(expression))


@query.command(
    examples="""\
  resquery query latest
  resquery -q query latest"""
)
@click.pass_obj
def latest(app: AppContext) -> None:
    """Show the highest stored post number."""
    app.emit(PostService(app.board).latest())
