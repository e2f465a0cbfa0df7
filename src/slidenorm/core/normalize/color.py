"""
color.py — Color expression parsing.

Accepted grammars:
- bare `RRGGBB` (the canonical output form, so canonical values are fixed points)
- named colors, `transparent`, `#rgb`, `#rgba`, `#rrggbb`, `#rrggbbaa` (via Pillow's ImageColor)
- `rgb()` / `rgba()` with 0..255 or percent channels and a 0..1 or percent alpha
- `hsl()` / `hsla()` with a hue in degrees and percent saturation/lightness
- an already structured `ComplexColor` or `{"type": "solid", "color": ..., "alpha": ...}`

Functional forms take comma separated arguments or the space separated form
with an optional `/ alpha`, e.g. `rgb(255 0 0 / 50%)`.

Output is a bare upper-case hex string when fully opaque, otherwise a
`ComplexColor` whose `alpha` is percent *transparency* (100 - opacity%).
"""
from __future__ import annotations

import math
import re
from typing import Any, Mapping

from PIL import ImageColor
from pptx.dml.color import RGBColor

from slidenorm.core.errors import InvalidColorError
from slidenorm.core.model import Color, ComplexColor

_BARE_HEX_RE = re.compile(r"[0-9A-Fa-f]{6}")
_FUNC_RE = re.compile(r"(?P<name>rgba?|hsla?)\((?P<args>[^()]*)\)", re.IGNORECASE)
_CHANNEL_RE = re.compile(r"(?P<num>[0-9]+(?:\.[0-9]+)?)(?P<pct>%?)")
_ALPHA_RE = re.compile(r"(?P<num>[0-9]*\.?[0-9]+)(?P<pct>%?)")
_HUE_RE = re.compile(r"(?P<num>[0-9]+(?:\.[0-9]+)?)(?:deg)?", re.IGNORECASE)
_PERCENT_RE = re.compile(r"(?P<num>[0-9]+(?:\.[0-9]+)?)%")


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _hex(r: int, g: int, b: int) -> str:
    return str(RGBColor(r, g, b))


def _parse_channel(token: str, expr: str) -> int:
    m = _CHANNEL_RE.fullmatch(token)
    if not m:
        raise InvalidColorError(f"Unable to parse color {expr!r}: bad channel {token!r}")
    v = float(m.group("num"))
    if m.group("pct"):
        if v > 100:
            raise InvalidColorError(f"Unable to parse color {expr!r}: channel {token!r} out of range")
        v = v * 255 / 100
    if v > 255:
        raise InvalidColorError(f"Unable to parse color {expr!r}: channel {token!r} out of range")
    return _round_half_up(v)


def _parse_alpha(token: str, expr: str) -> float:
    m = _ALPHA_RE.fullmatch(token)
    if not m:
        raise InvalidColorError(f"Unable to parse color {expr!r}: bad alpha {token!r}")
    a = float(m.group("num"))
    if m.group("pct"):
        a = a / 100
    if a > 1:
        raise InvalidColorError(f"Unable to parse color {expr!r}: alpha {token!r} out of range")
    return a


def _hsl_to_hex(parts: list[str], expr: str) -> str:
    hue = _HUE_RE.fullmatch(parts[0])
    sat = _PERCENT_RE.fullmatch(parts[1])
    light = _PERCENT_RE.fullmatch(parts[2])
    if not (hue and sat and light):
        raise InvalidColorError(f"Unable to parse color {expr!r}: hsl needs a hue and two percentages")
    s, l = float(sat.group("num")), float(light.group("num"))
    if s > 100 or l > 100:
        raise InvalidColorError(f"Unable to parse color {expr!r}: percentage out of range")
    r, g, b = ImageColor.getrgb(f"hsl({float(hue.group('num')) % 360}, {s}%, {l}%)")
    return _hex(r, g, b)


def _split_args(args: str) -> list[str]:
    args = args.strip()
    if "," in args:
        return [p.strip() for p in args.split(",")]
    head, slash, alpha = args.partition("/")
    parts = head.split()
    if slash:
        parts.append(alpha.strip())
    return parts


def _parse_functional(expr: str) -> tuple[str, float] | None:
    m = _FUNC_RE.fullmatch(expr)
    if not m:
        return None
    parts = _split_args(m.group("args"))
    if len(parts) not in (3, 4):
        raise InvalidColorError(f"Unable to parse color {expr!r}: expected 3 or 4 components")
    if m.group("name").lower().startswith("hsl"):
        hex_color = _hsl_to_hex(parts, expr)
    else:
        r, g, b = (_parse_channel(p, expr) for p in parts[:3])
        hex_color = _hex(r, g, b)
    alpha = _parse_alpha(parts[3], expr) if len(parts) == 4 else 1.0
    return (hex_color, alpha)


def _parse(expr: str) -> tuple[str, float]:
    """Parse a color string into (hex, alpha01)."""
    s = expr.strip()
    if not s:
        raise InvalidColorError(f"Unable to parse color {expr!r}")
    if _BARE_HEX_RE.fullmatch(s):
        return (s.upper(), 1.0)
    if s.lower() == "transparent":
        return ("000000", 0.0)
    if s.lower().startswith(("rgb", "hsl")):
        parsed = _parse_functional(s)
        if parsed is None:
            raise InvalidColorError(f"Unable to parse color {expr!r}")
        return parsed
    try:
        r, g, b, a = ImageColor.getcolor(s, "RGBA")
    except ValueError as e:
        raise InvalidColorError(f"Unable to parse color {expr!r}") from e
    return (_hex(r, g, b), a / 255)


def _complex_from_mapping(value: Mapping[str, Any]) -> ComplexColor:
    if value.get("type", "solid") != "solid":
        raise InvalidColorError(f"Unsupported color type {value.get('type')!r}")
    alpha = value.get("alpha", 0)
    if isinstance(alpha, bool) or not isinstance(alpha, (int, float)) or not 0 <= alpha <= 100:
        raise InvalidColorError(f"Complex color alpha must be a number in [0, 100], got {alpha!r}")
    color = value.get("color")
    if not isinstance(color, str):
        raise InvalidColorError(f"Complex color needs a string 'color', got {color!r}")
    inner = _resolve(color)
    hex_color = inner.color if isinstance(inner, ComplexColor) else inner
    return ComplexColor(color=hex_color, alpha=_round_half_up(alpha))


def _resolve(value: Any) -> Color:
    if isinstance(value, ComplexColor):
        return value
    if isinstance(value, Mapping):
        return _complex_from_mapping(value)
    if not isinstance(value, str):
        raise InvalidColorError(f"Unable to parse color {value!r}: expected a string")
    hex_color, alpha = _parse(value)
    if alpha == 1:
        return hex_color
    return ComplexColor(color=hex_color, alpha=100 - _round_half_up(alpha * 100))


def normalize_hex_or_complex_color(value: Any, *, path: str | None = None) -> Color:
    """Resolve a color expression, keeping translucency as a `ComplexColor`."""
    try:
        return _resolve(value)
    except InvalidColorError as e:
        if path is None or e.path is not None:
            raise
        raise InvalidColorError(e.message, path=path) from e


def normalize_hex_color(value: Any, *, path: str | None = None) -> str:
    """Resolve a color expression to a bare opaque hex string, discarding alpha."""
    resolved = normalize_hex_or_complex_color(value, path=path)
    if isinstance(resolved, ComplexColor):
        return resolved.color
    return resolved


__all__ = [
    "normalize_hex_color",
    "normalize_hex_or_complex_color",
]
