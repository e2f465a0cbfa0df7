"""Document normalization package.

Turns an authored presentation document (percent/absolute positions, free-form
colors, nested rich text) into a fully resolved output tree.

Public API:
- `normalize_presentation(document, options=None)`
- `normalize_hex_color(expr)` / `normalize_hex_or_complex_color(expr)`
- `normalize_coordinate(value, default)` / `normalize_position(value, default, reference)`
- `normalize_trbl(value)`
- `flatten_text(children)`

Keep this module as a thin re-export layer so callers can import a stable path:

    from slidenorm.core.normalize import normalize_presentation
"""

from __future__ import annotations

from .color import normalize_hex_color, normalize_hex_or_complex_color
from .coordinate import normalize_coordinate, normalize_position, normalize_trbl
from .text_runs import flatten_text
from .tree import normalize_presentation, normalize_slide_object

__all__ = [
    "flatten_text",
    "normalize_coordinate",
    "normalize_hex_color",
    "normalize_hex_or_complex_color",
    "normalize_position",
    "normalize_presentation",
    "normalize_slide_object",
    "normalize_trbl",
]
