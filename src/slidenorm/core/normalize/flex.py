"""
flex.py — Single-axis flow layout.

Children are placed one after another along the main axis (`row` =
horizontal, `column` = vertical) starting at the flex box's padded origin.
A child's own x/y are ignored; its w/h are resolved against the inner box
and clamped to it. The cursor advances by the child's main-axis size plus
`gap`. `alignItems` is carried on the output but does not move children.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from slidenorm.core.errors import InvalidPositionError, UnsupportedNodeError
from slidenorm.core.model import Box, FlexContainer, SlideObject
from slidenorm.core.normalize.coordinate import normalize_position
from slidenorm.core.normalize.nodes import Frame, inset, iter_children, node_attr, node_kind, node_trbl, require_style

logger = logging.getLogger(__name__)

DIRECTIONS = frozenset({"row", "column"})
ALIGN_ITEMS = frozenset({"start", "center", "end", "stretch"})

# (child node, frame, allocated box, path) -> normalized object
NormalizeChild = Callable[[Mapping[str, Any], Frame, Box, str], SlideObject]


def _flex_settings(node: Mapping[str, Any], path: str) -> tuple[str, float, str]:
    direction = node_attr(node, "direction", "column")
    if direction not in DIRECTIONS:
        raise UnsupportedNodeError(f"flex direction must be 'row' or 'column', got {direction!r}", path=path, kind="flex")
    gap = node_attr(node, "gap", 0)
    if isinstance(gap, bool) or not isinstance(gap, (int, float)):
        raise InvalidPositionError(f"flex gap must be a number, got {gap!r}", path=f"{path}.gap", kind="flex")
    align_items = node_attr(node, "alignItems", "start")
    if align_items not in ALIGN_ITEMS:
        raise UnsupportedNodeError(
            f"flex alignItems must be one of {sorted(ALIGN_ITEMS)}, got {align_items!r}", path=path, kind="flex"
        )
    return (direction, gap, align_items)


def layout_flex(
    node: Mapping[str, Any],
    box: Box,
    path: str,
    normalize_child: NormalizeChild,
) -> FlexContainer:
    """Lay out a flex box whose allocated (pre-margin) box is `box`."""
    direction, gap, align_items = _flex_settings(node, path)
    margin = node_trbl(node, "margin", path)
    padding = node_trbl(node, "padding", path)

    outer = inset(box, margin)
    inner = inset(outer, padding)
    frame = Frame(inner.x, inner.y, inner.w, inner.h, origin_x=outer.x, origin_y=outer.y, clamp=True, owner="flex")

    logger.debug("flex %s: %s at %s, inner %s", path, direction, tuple(outer), tuple(inner))

    cursor_x, cursor_y = inner.x, inner.y
    objects: list[SlideObject] = []
    for child_path, child in iter_children(node, path):
        kind = node_kind(child, child_path)
        if kind == "line":
            raise UnsupportedNodeError("Node type line is not supported inside Flex", path=child_path, kind=kind)
        style = require_style(child, child_path)
        w = min(normalize_position(style.get("w"), 1, inner.w, path=f"{child_path}.style.w"), inner.w)
        h = min(normalize_position(style.get("h"), 1, inner.h, path=f"{child_path}.style.h"), inner.h)
        objects.append(normalize_child(child, frame, Box(cursor_x, cursor_y, w, h), child_path))
        if direction == "row":
            cursor_x += w + gap
        else:
            cursor_y += h + gap

    return FlexContainer(
        x=outer.x,
        y=outer.y,
        w=outer.w,
        h=outer.h,
        margin=margin,
        padding=padding,
        objects=tuple(objects),
        direction=direction,
        gap=gap,
        align_items=align_items,
    )


__all__ = ["ALIGN_ITEMS", "DIRECTIONS", "layout_flex"]
