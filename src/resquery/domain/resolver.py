"""Resolve parsed range specs into a sorted list of post numbers.

Resolution accumulates two sets, ``included`` and ``excluded``, over every
spec and returns ``sorted(included - excluded)``. An exclusion therefore
wins over any inclusion regardless of position in the expression.

Relative specs are anchored on ``max_value`` (the highest existing post
number) by :func:`relative_to_absolute`. Open-ended specs run up to
``max_value``. Nothing here raises: inverted or out-of-range bounds
contribute nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import assert_never

from resquery.domain.specs import (
    OPEN_ENDED_SPECS,
    RELATIVE_SPECS,
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


def relative_to_absolute(relative_num: int, digit_count: int, max_value: int) -> int:
    """Map the low-order digits *relative_num* onto a number near *max_value*.

    The anchor ``base`` is *max_value* with its lowest *digit_count* digits
    zeroed. If ``base + relative_num`` lies beyond *max_value* the previous
    digit-group is used instead, once. When that would go below zero, or
    when no maximum is known (``max_value <= 0``), *relative_num* is
    returned unchanged.

    Examples:
        >>> relative_to_absolute(324, 3, 123340)
        123324
        >>> relative_to_absolute(456, 3, 2345)
        1456
        >>> relative_to_absolute(500, 3, 456)
        500
    """
    if max_value <= 0:
        return relative_num

    divisor = 10**digit_count
    base = (max_value // divisor) * divisor
    candidate = base + relative_num

    if candidate > max_value:
        prev_base = base - divisor
        result = prev_base + relative_num if prev_base >= 0 else relative_num
    else:
        result = candidate

    logger.debug(
        "relative_to_absolute: max=%d relative=%d digits=%d base=%d candidate=%d result=%d",
        max_value,
        relative_num,
        digit_count,
        base,
        candidate,
        result,
    )
    return result


def _closed(start: int, end: int | None) -> range:
    """Inclusive range ``start..=end`` (just ``start`` when *end* is None)."""
    return range(start, (start if end is None else end) + 1)


def calculate_post_numbers(specs: Iterable[RangeSpec], max_value: int) -> list[int]:
    """Resolve *specs* against *max_value* into ascending unique numbers.

    *max_value* is only read by open-ended and relative specs; for an
    expression made of absolute specs alone the result does not depend on it.
    """
    included: set[int] = set()
    excluded: set[int] = set()

    for spec in specs:
        if isinstance(spec, Include):
            included.update(_closed(spec.start, spec.end))
        elif isinstance(spec, Exclude):
            excluded.update(_closed(spec.start, spec.end))
        elif isinstance(spec, IncludeFrom):
            included.update(range(spec.start, max_value + 1))
        elif isinstance(spec, ExcludeFrom):
            excluded.update(range(spec.start, max_value + 1))
        elif isinstance(spec, RelativeInclude | RelativeExclude):
            target = included if isinstance(spec, RelativeInclude) else excluded
            abs_start = relative_to_absolute(spec.start, spec.digit_count, max_value)
            if spec.end is None:
                target.add(abs_start)
            else:
                # The end shares the start token's anchor width.
                abs_end = relative_to_absolute(spec.end, spec.digit_count, max_value)
                target.update(range(abs_start, abs_end + 1))
        elif isinstance(spec, RelativeIncludeFrom | RelativeExcludeFrom):
            target = included if isinstance(spec, RelativeIncludeFrom) else excluded
            abs_start = relative_to_absolute(spec.start, spec.digit_count, max_value)
            target.update(range(abs_start, max_value + 1))
        else:
            assert_never(spec)

    result = sorted(included - excluded)
    logger.debug(
        "Resolved post numbers: included=%d excluded=%d result=%d max=%d",
        len(included),
        len(excluded),
        len(result),
        max_value,
    )
    return result


def needs_upper_bound(specs: Sequence[RangeSpec]) -> bool:
    """True when resolving *specs* reads the maximum post number.

    Callers use this to skip the maximum-value query for fully absolute
    expressions such as ``123`` or ``10-20``.
    """
    return any(isinstance(spec, OPEN_ENDED_SPECS + RELATIVE_SPECS) for spec in specs)
