"""
nodes.py — Access helpers for input document nodes and the reference frame type.

Input nodes are plain mappings: ``{"kind": ..., "style": {...}, "children": [...]}``.
Structural properties are looked up on the node first, then on its style.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from slidenorm.core.errors import MissingStyleError, UnknownNodeKindError
from slidenorm.core.model import TRBL, Box
from slidenorm.core.normalize.coordinate import normalize_position, normalize_trbl

ZERO_TRBL: TRBL = (0, 0, 0, 0)


@dataclass(frozen=True)
class Frame:
    """The box a node's children are positioned in.

    `x, y, w, h` is the inner (padded) box; `origin_x, origin_y` is the
    enclosing container's own box origin, which line endpoints are offset by.
    """

    x: float
    y: float
    w: float
    h: float
    origin_x: float = 0
    origin_y: float = 0
    clamp: bool = False
    owner: str = "slide"


def node_kind(node: Any, path: str) -> str:
    if not isinstance(node, Mapping):
        raise UnknownNodeKindError(f"expected a node mapping, got {type(node).__name__}", path=path)
    kind = node.get("kind")
    if not isinstance(kind, str):
        raise UnknownNodeKindError(f"node has no string 'kind' (got {kind!r})", path=path)
    return kind


def node_attr(node: Mapping[str, Any], key: str, default: Any = None) -> Any:
    if node.get(key) is not None:
        return node[key]
    style = node.get("style")
    if isinstance(style, Mapping) and style.get(key) is not None:
        return style[key]
    return default


def require_style(node: Mapping[str, Any], path: str) -> Mapping[str, Any]:
    style = node.get("style")
    if not isinstance(style, Mapping):
        raise MissingStyleError(f"A {node.get('kind')} object is missing style attribute", path=path, kind=node.get("kind"))
    return style


def node_trbl(node: Mapping[str, Any], key: str, path: str) -> TRBL:
    value = node_attr(node, key)
    if value is None:
        return ZERO_TRBL
    return normalize_trbl(value, path=f"{path}.{key}")


def iter_children(node: Mapping[str, Any], path: str) -> Iterator[tuple[str, Any]]:
    """Yield (path, child) for node children, flattening nested lists.

    Raw strings, numbers, booleans and None are not valid slide-level content
    and are skipped.
    """

    def walk(items: Any, p: str) -> Iterator[tuple[str, Any]]:
        if isinstance(items, (list, tuple)):
            for i, item in enumerate(items):
                yield from walk(item, f"{p}[{i}]")
        elif items is None or isinstance(items, (str, int, float, bool)):
            return
        else:
            yield (p, items)

    yield from walk(node.get("children"), f"{path}.children")


def resolve_box(style: Mapping[str, Any], frame: Frame, path: str) -> Box:
    """Resolve a node's x/y/w/h against `frame`, clamping size inside containers."""
    x = normalize_position(style.get("x"), 0, frame.w, path=f"{path}.style.x")
    y = normalize_position(style.get("y"), 0, frame.h, path=f"{path}.style.y")
    w = normalize_position(style.get("w"), 1, frame.w, path=f"{path}.style.w")
    h = normalize_position(style.get("h"), 1, frame.h, path=f"{path}.style.h")
    if frame.clamp:
        w = min(w, frame.w)
        h = min(h, frame.h)
    return Box(frame.x + x, frame.y + y, w, h)


def inset(box: Box, trbl: TRBL) -> Box:
    t, r, b, l = trbl
    return Box(box.x + l, box.y + t, box.w - (l + r), box.h - (t + b))


__all__ = [
    "ZERO_TRBL",
    "Frame",
    "inset",
    "iter_children",
    "node_attr",
    "node_kind",
    "node_trbl",
    "require_style",
    "resolve_box",
]
