"""Parse range expressions such as ``10,20-25,^23,?324,?^326``.

Grammar per comma-separated token (whitespace around tokens is ignored)::

    token    := ["?"] ["^"] number ["-" [number]]
    number   := ["+"] ASCII decimal digits, at most 2147483647

``?`` marks a relative token, ``^`` an exclusion, a trailing ``-`` an
open-ended range. Only the first ``-`` separates start from end.
A relative token's anchor width is the length of its start text as
written, so ``?+24`` anchors on three digits.

Parsing is lenient: a token that does not fit the grammar is dropped and
logged at DEBUG, never reported to the caller.
"""

from __future__ import annotations

import logging

from resquery.domain.specs import (
    Exclude,
    ExcludeFrom,
    Include,
    IncludeFrom,
    RangeSpec,
    RelativeExclude,
    RelativeExcludeFrom,
    RelativeInclude,
    RelativeIncludeFrom,
)

logger = logging.getLogger(__name__)

MAX_NUMBER = 2**31 - 1


def parse_number(token: str) -> int | None:
    """Parse a non-negative decimal token, or return None.

    ASCII digits with at most one leading ``+``: no minus sign, no
    underscores, no surrounding whitespace. Values above
    :data:`MAX_NUMBER` are rejected.
    """
    digits = token[1:] if token.startswith("+") else token
    if not digits or not digits.isascii() or not digits.isdigit():
        return None
    value = int(digits)
    if value > MAX_NUMBER:
        return None
    return value


def _parse_token(token: str) -> RangeSpec | None:
    is_relative = token.startswith("?")
    if is_relative:
        token = token[1:]
    is_exclude = token.startswith("^")
    if is_exclude:
        token = token[1:]

    start_str, dash, end_str = token.partition("-")
    start = parse_number(start_str)
    if start is None:
        return None
    digit_count = len(start_str)

    if dash and not end_str:
        if is_relative:
            if is_exclude:
                return RelativeExcludeFrom(start, digit_count)
            return RelativeIncludeFrom(start, digit_count)
        return ExcludeFrom(start) if is_exclude else IncludeFrom(start)

    end: int | None = None
    if dash:
        end = parse_number(end_str)
        if end is None:
            return None

    if is_relative:
        if is_exclude:
            return RelativeExclude(start, end, digit_count)
        return RelativeInclude(start, end, digit_count)
    return Exclude(start, end) if is_exclude else Include(start, end)


def parse_range_specifications(text: str) -> list[RangeSpec]:
    """Parse *text* into range specs, preserving token order.

    Never raises. Empty and malformed tokens are skipped, so an empty
    list means no usable expression was supplied.
    """
    specs: list[RangeSpec] = []
    for part in text.split(","):
        token = part.strip()
        if not token:
            continue
        spec = _parse_token(token)
        if spec is None:
            logger.debug("Dropping unparseable range token %r", token)
            continue
        specs.append(spec)
    return specs
