"""Domain layer — range expressions, posts, and message text rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""

from resquery.domain.parser import parse_range_specifications
from resquery.domain.resolver import (
    calculate_post_numbers,
    needs_upper_bound,
    relative_to_absolute,
)
from resquery.domain.specs import RangeSpec

parse = parse_range_specifications
resolve = calculate_post_numbers

__all__ = [
    "RangeSpec",
    "calculate_post_numbers",
    "needs_upper_bound",
    "parse",
    "parse_range_specifications",
    "relative_to_absolute",
    "resolve",
]
