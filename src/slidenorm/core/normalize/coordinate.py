from __future__ import annotations

import re
from typing import Any, Sequence, Union

from slidenorm.core.errors import InvalidPositionError
from slidenorm.core.model import TRBL

# number (inches) or "<digits>%"
Position = Union[float, int, str]

_PERCENTAGE_RE = re.compile(r"[0-9]+%")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_coordinate(value: Any, default: Position, *, path: str | None = None) -> Position:
    """Validate a coordinate; percentages pass through unresolved, None takes `default`."""
    if value is None:
        return default
    if _is_number(value):
        return value
    if isinstance(value, str):
        if not _PERCENTAGE_RE.fullmatch(value):
            raise InvalidPositionError(
                f"{value!r} is invalid position; string positions must be of format '[0-9]+%'",
                path=path,
            )
        return value
    raise InvalidPositionError(f"{value!r} is invalid position; expected a number or percentage string", path=path)


def normalize_position(value: Any, default: Position, reference: float, *, path: str | None = None) -> float:
    """Resolve a coordinate to inches; percentages are taken of `reference`."""
    normalized = normalize_coordinate(value, default, path=path)
    if isinstance(normalized, str):
        percentage = float(normalized.rstrip("%"))
        return reference * (percentage / 100)
    return normalized


def normalize_trbl(value: Any, *, path: str | None = None) -> TRBL:
    """Expand box shorthand to (top, right, bottom, left).

    - `v`            -> (v, v, v, v)
    - `[v, h]`       -> (v, h, v, h)
    - `[t, r, b, l]` -> unchanged
    """
    if _is_number(value):
        return (value, value, value, value)
    if isinstance(value, Sequence) and not isinstance(value, str):
        items = list(value)
        if not all(_is_number(v) for v in items):
            raise InvalidPositionError(f"box values must be numbers, got {value!r}", path=path)
        if len(items) == 4:
            return (items[0], items[1], items[2], items[3])
        if len(items) == 2:
            return (items[0], items[1], items[0], items[1])
    raise InvalidPositionError(
        f"{value!r} is invalid box; expected a number, [vertical, horizontal] or [top, right, bottom, left]",
        path=path,
    )


__all__ = [
    "Position",
    "normalize_coordinate",
    "normalize_position",
    "normalize_trbl",
]
