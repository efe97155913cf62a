"""Range specification variants — one per comma-separated token.

A parsed expression is an ordered list of these values. Each variant is a
frozen dataclass; :data:`RangeSpec` is their closed union. Consumers
dispatch with ``isinstance`` chains ending in ``assert_never`` so a new
variant is caught by the type checker at every consumption site.

Relative variants carry ``digit_count``: the textual length of the start
token (leading zeros included), which fixes the anchor width used when
the token is resolved against the current maximum post number.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, assert_never


@dataclass(frozen=True)
class Include:
    """Include ``start`` (or ``start..=end``)."""

    start: int
    end: int | None = None


@dataclass(frozen=True)
class Exclude:
    """Exclude ``start`` (or ``start..=end``)."""

    start: int
    end: int | None = None


@dataclass(frozen=True)
class IncludeFrom:
    """Include ``start..=max`` (``123-``)."""

    start: int


@dataclass(frozen=True)
class ExcludeFrom:
    """Exclude ``start..=max`` (``^123-``)."""

    start: int


@dataclass(frozen=True)
class RelativeInclude:
    """Include ``?324`` / ``?324-326``, anchored on the maximum."""

    start: int
    end: int | None
    digit_count: int


@dataclass(frozen=True)
class RelativeExclude:
    """Exclude ``?^324`` / ``?^324-326``, anchored on the maximum."""

    start: int
    end: int | None
    digit_count: int


@dataclass(frozen=True)
class RelativeIncludeFrom:
    """Include ``?300-``: anchored start through the maximum."""

    start: int
    digit_count: int


@dataclass(frozen=True)
class RelativeExcludeFrom:
    """Exclude ``?^300-``: anchored start through the maximum."""

    start: int
    digit_count: int


RangeSpec = (
    Include
    | Exclude
    | IncludeFrom
    | ExcludeFrom
    | RelativeInclude
    | RelativeExclude
    | RelativeIncludeFrom
    | RelativeExcludeFrom
)

RELATIVE_SPECS: tuple[type, ...] = (
    RelativeInclude,
    RelativeExclude,
    RelativeIncludeFrom,
    RelativeExcludeFrom,
)

OPEN_ENDED_SPECS: tuple[type, ...] = (IncludeFrom, ExcludeFrom)

_KINDS: dict[type, str] = {
    Include: "include",
    Exclude: "exclude",
    IncludeFrom: "include_from",
    ExcludeFrom: "exclude_from",
    RelativeInclude: "relative_include",
    RelativeExclude: "relative_exclude",
    RelativeIncludeFrom: "relative_include_from",
    RelativeExcludeFrom: "relative_exclude_from",
}


def spec_kind(spec: RangeSpec) -> str:
    """Snake-case discriminator for *spec* (``"relative_include"`` etc.)."""
    return _KINDS[type(spec)]


def _span(start: int, end: int | None) -> str:
    return str(start) if end is None else f"{start}-{end}"


def format_spec(spec: RangeSpec) -> str:
    """Render *spec* back into expression syntax.

    Relative tokens are zero-padded to ``digit_count`` so that
    ``?024`` round-trips with the same anchor width.
    """
    if isinstance(spec, Include):
        return _span(spec.start, spec.end)
    elif isinstance(spec, Exclude):
        return "^" + _span(spec.start, spec.end)
    elif isinstance(spec, IncludeFrom):
        return f"{spec.start}-"
    elif isinstance(spec, ExcludeFrom):
        return f"^{spec.start}-"
    elif isinstance(spec, RelativeInclude | RelativeExclude):
        prefix = "?^" if isinstance(spec, RelativeExclude) else "?"
        start = str(spec.start).zfill(spec.digit_count)
        if spec.end is None:
            return f"{prefix}{start}"
        return f"{prefix}{start}-{spec.end}"
    elif isinstance(spec, RelativeIncludeFrom | RelativeExcludeFrom):
        prefix = "?^" if isinstance(spec, RelativeExcludeFrom) else "?"
        return f"{prefix}{str(spec.start).zfill(spec.digit_count)}-"
    else:
        assert_never(spec)


def spec_to_dict(spec: RangeSpec) -> dict[str, Any]:
    """JSON-ready mapping of *spec* with a ``kind`` discriminator."""
    data: dict[str, Any] = {"kind": spec_kind(spec), "start": spec.start}
    if isinstance(spec, Include | Exclude | RelativeInclude | RelativeExclude):
        data["end"] = spec.end
    if isinstance(spec, RELATIVE_SPECS):
        data["digit_count"] = spec.digit_count  # type: ignore[union-attr]
    data["text"] = format_spec(spec)
    return data
