"""PostService — range expressions in, posts out.

Five surfaces:
- parse: expression → range specs (never fails)
- resolve: expression → sorted post numbers
- fetch: expression → posts, ascending by number
- latest: highest stored post number
- load: import posts from a JSON file

The maximum post number is queried at most once per expression, and
only when the expression contains open-ended or relative tokens.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from resquery.domain.parser import parse_range_specifications
from resquery.domain.posts import Post
from resquery.domain.resolver import (
    calculate_post_numbers,
    needs_upper_bound,
    relative_to_absolute,
)
from resquery.domain.specs import (
    Include,
    IncludeFrom,
    RangeSpec,
    RelativeInclude,
    RelativeIncludeFrom,
    spec_to_dict,
)
from resquery.services.base import BaseService
from resquery.services.result import ServiceError, ServiceResult
from resquery.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)


def _invalid_expression(op: str, expression: str) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="INVALID_EXPRESSION",
            message="No usable range expression was supplied",
            detail={"expression": expression},
        ),
    )


def _database_error(op: str, exc: SQLAlchemyError) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="DATABASE_ERROR",
            message="Database query failed",
            detail={"exception": type(exc).__name__},
        ),
    )


class RangeTooLargeError(Exception):
    """An expression includes more numbers than the caller allows."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"{size} numbers exceed the limit of {limit}")
        self.size = size
        self.limit = limit


def included_size(specs: Sequence[RangeSpec], max_value: int) -> int:
    """Upper bound on how many numbers *specs* include, without building them.

    Overlaps are counted twice and exclusions are ignored.
    """
    total = 0
    for spec in specs:
        if isinstance(spec, Include):
            end = spec.start if spec.end is None else spec.end
            total += len(range(spec.start, end + 1))
        elif isinstance(spec, IncludeFrom):
            total += len(range(spec.start, max_value + 1))
        elif isinstance(spec, RelativeInclude):
            if spec.end is None:
                total += 1
            else:
                start = relative_to_absolute(spec.start, spec.digit_count, max_value)
                end = relative_to_absolute(spec.end, spec.digit_count, max_value)
                total += len(range(start, end + 1))
        elif isinstance(spec, RelativeIncludeFrom):
            start = relative_to_absolute(spec.start, spec.digit_count, max_value)
            total += len(range(start, max_value + 1))
    return total


class PostService(BaseService):
    """Parses, resolves, and fetches range expressions against the post store."""

    # ------------------------------------------------------------------
    # parse
    # ------------------------------------------------------------------

    @traced
    def parse(self, expression: str) -> ServiceResult:
        """Parse *expression* into range specs without touching the database."""
        specs = parse_range_specifications(expression)
        warnings: list[str] = []
        if not specs:
            warnings.append("No usable range expression was supplied")
        return ServiceResult(
            ok=True,
            op="parse",
            data={
                "expression": expression,
                "specs": [spec_to_dict(spec) for spec in specs],
                "count": len(specs),
                "needs_upper_bound": needs_upper_bound(specs),
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # resolve
    # ------------------------------------------------------------------

    @traced
    def resolve(self, expression: str, *, max_value: int | None = None) -> ServiceResult:
        """Resolve *expression* into post numbers.

        Args:
            expression: Range expression, e.g. ``"10,20-25,^23,?324"``.
            max_value: Upper bound to resolve against. When None and the
                expression needs one, the store's maximum is queried.
        """
        specs = parse_range_specifications(expression)
        if not specs:
            return _invalid_expression("resolve", expression)

        try:
            numbers, used_max = self._resolve_specs(specs, max_value)
        except SQLAlchemyError as exc:
            return _database_error("resolve", exc)

        warnings: list[str] = []
        if not numbers:
            warnings.append("Expression matched no post numbers")
        return ServiceResult(
            ok=True,
            op="resolve",
            data={
                "expression": expression,
                "numbers": numbers,
                "count": len(numbers),
                "max_value": used_max,
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # fetch
    # ------------------------------------------------------------------

    @traced
    def fetch(self, expression: str, *, max_numbers: int | None = None) -> ServiceResult:
        """Fetch the posts selected by *expression*, ascending by number.

        Numbers with no stored post are skipped; a resolved range with no
        stored posts at all is still a success with ``count == 0``.
        With *max_numbers* set, an expression whose included ranges span
        more numbers than that fails with ``TOO_MANY_NUMBERS`` before any
        number is resolved.
        """
        specs = parse_range_specifications(expression)
        if not specs:
            return _invalid_expression("fetch", expression)

        try:
            numbers, used_max = self._resolve_specs(specs, None, max_numbers=max_numbers)
            if not numbers:
                return ServiceResult(
                    ok=False,
                    op="fetch",
                    error=ServiceError(
                        code="EMPTY_RANGE",
                        message="The expression matched no post numbers",
                        detail={"expression": expression, "max_value": used_max},
                    ),
                )
            with trace_span("fetch_posts") as span:
                rows = self._board.posts.get_posts_by_numbers(numbers)
                if span:
                    span.annotate("requested", len(numbers))
                    span.annotate("found", len(rows))
        except RangeTooLargeError as exc:
            return ServiceResult(
                ok=False,
                op="fetch",
                error=ServiceError(
                    code="TOO_MANY_NUMBERS",
                    message=f"The expression spans {exc.size} numbers (limit {exc.limit})",
                    detail={"expression": expression, "size": exc.size, "limit": exc.limit},
                ),
            )
        except SQLAlchemyError as exc:
            return _database_error("fetch", exc)

        posts = [Post.model_validate(row) for row in rows]
        return ServiceResult(
            ok=True,
            op="fetch",
            data={
                "expression": expression,
                "numbers": numbers,
                "max_value": used_max,
                "items": [post.model_dump(mode="json") for post in posts],
                "count": len(posts),
            },
        )

    # ------------------------------------------------------------------
    # latest
    # ------------------------------------------------------------------

    @traced
    def latest(self) -> ServiceResult:
        """Report the highest stored post number (0 for an empty store)."""
        try:
            max_value = self._board.posts.get_max_post_number()
        except SQLAlchemyError as exc:
            return _database_error("latest", exc)
        return ServiceResult(ok=True, op="latest", data={"max_value": max_value})

    # ------------------------------------------------------------------
    # load
    # ------------------------------------------------------------------

    @traced
    def load(self, path: Path) -> ServiceResult:
        """Import posts from a JSON file holding an array of post objects."""
        if not path.is_file():
            return ServiceResult(
                ok=False,
                op="load_posts",
                error=ServiceError(
                    code="FILE_NOT_FOUND",
                    message=f"No such file: {path}",
                    detail={"path": str(path)},
                ),
            )

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(payload, list):
                msg = "expected a JSON array of post objects"
                raise ValueError(msg)
            posts = [Post.model_validate(item) for item in payload]
        except (ValueError, ValidationError) as exc:
            # JSONDecodeError and ValidationError are both ValueErrors
            return ServiceResult(
                ok=False,
                op="load_posts",
                error=ServiceError(
                    code="INVALID_INPUT",
                    message=f"Invalid post file {path.name}: {exc}",
                    detail={"path": str(path)},
                ),
            )

        try:
            inserted = self._board.posts.insert_posts([post.model_dump() for post in posts])
        except SQLAlchemyError as exc:
            return _database_error("load_posts", exc)

        logger.debug("Loaded %d posts from %s", inserted, path)
        return ServiceResult(
            ok=True,
            op="load_posts",
            data={"path": str(path), "inserted": inserted},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_specs(
        self,
        specs: Sequence[RangeSpec],
        max_value: int | None,
        *,
        max_numbers: int | None = None,
    ) -> tuple[list[int], int | None]:
        """Resolve *specs*, querying the store maximum only when required.

        Returns the numbers and the maximum actually used (None when the
        expression never needed one). Raises :class:`RangeTooLargeError`
        when the included ranges exceed *max_numbers*.
        """
        if max_value is None and needs_upper_bound(specs):
            with trace_span("max_post_number") as span:
                max_value = self._board.posts.get_max_post_number()
                if span:
                    span.annotate("max_value", max_value)

        if max_numbers is not None:
            size = included_size(specs, max_value or 0)
            if size > max_numbers:
                raise RangeTooLargeError(size, max_numbers)

        with trace_span("calculate_post_numbers") as span:
            numbers = calculate_post_numbers(specs, max_value or 0)
            if span:
                span.annotate("specs", len(specs))
                span.annotate("numbers", len(numbers))
        return numbers, max_value

    @staticmethod
    def posts_from_result(result: ServiceResult) -> list[Post]:
        """Rebuild :class:`Post` models from a successful ``fetch`` result."""
        items: list[dict[str, Any]] = result.data.get("items", [])
        return [Post.model_validate(item) for item in items]
