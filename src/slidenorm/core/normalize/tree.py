"""
tree.py — Recursive normalization of a presentation document.

Entry point: `normalize_presentation(document, options=None)`.

Every node's box is resolved against the frame of its parent, which is
already absolute. A derived record is built per node; the input mappings
are only read, so one document may be normalized repeatedly or from several
threads.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping

from slidenorm.core.config import NormalizeOptions, layout_preset_inches
from slidenorm.core.errors import (
    DuplicateMasterSlideError,
    InvalidImageSourceError,
    InvalidLayoutError,
    InvalidPositionError,
    NormalizeError,
    UnknownNodeKindError,
    UnsupportedMasterSlideObjectError,
    UnsupportedNodeError,
)
from slidenorm.core.model import (
    Box,
    Container,
    CustomLayout,
    Dimensions,
    Image,
    ImageSizing,
    ImageSource,
    Line,
    MasterSlide,
    Presentation,
    Shape,
    Slide,
    SlideObject,
    Table,
    TableCell,
    Text,
    TextRun,
)
from slidenorm.core.normalize.color import normalize_hex_color, normalize_hex_or_complex_color
from slidenorm.core.normalize.coordinate import normalize_trbl
from slidenorm.core.normalize.flex import layout_flex
from slidenorm.core.normalize.nodes import (
    Frame,
    inset,
    iter_children,
    node_attr,
    node_kind,
    node_trbl,
    require_style,
    resolve_box,
)
from slidenorm.core.normalize.text_runs import flatten_text

logger = logging.getLogger(__name__)

# Style keys consumed into dedicated Text fields.
_TEXT_STYLE_FIELDS = frozenset({"x", "y", "w", "h", "color", "backgroundColor", "fontFace", "fontSize"})
_SIZING_FITS = frozenset({"contain", "cover", "crop"})
_METADATA_KEYS = ("author", "company", "revision", "subject", "title")


# ---------------------------------------------------------------------------
# Small field resolvers
# ---------------------------------------------------------------------------


def _opt_hex(style: Mapping[str, Any], key: str, path: str) -> str | None:
    value = style.get(key)
    if not value:
        return None
    return normalize_hex_color(value, path=f"{path}.style.{key}")


def _opt_color(style: Mapping[str, Any], key: str, path: str):
    value = style.get(key)
    if not value:
        return None
    return normalize_hex_or_complex_color(value, path=f"{path}.style.{key}")


def _opt_number(value: Any, path: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPositionError(f"expected a number, got {value!r}", path=path)
    return value


def normalize_image_src(src: Any, *, path: str = "$") -> ImageSource:
    """A string is a path (or URL); mappings must be `{kind: path, path}` or `{kind: data, data}`."""
    if isinstance(src, str) and src:
        return ImageSource(kind="path", path=src)
    if isinstance(src, ImageSource):
        return src
    if isinstance(src, Mapping):
        kind = src.get("kind")
        if kind == "path" and isinstance(src.get("path"), str):
            return ImageSource(kind="path", path=src["path"])
        if kind == "data" and isinstance(src.get("data"), str):
            return ImageSource(kind="data", data=src["data"])
    raise InvalidImageSourceError(
        f"image source must be a path string, {{kind: 'path', path}} or {{kind: 'data', data}}; got {src!r}",
        path=path,
    )


def _image_sizing(value: Any, path: str) -> ImageSizing | None:
    if value is None:
        return None
    if not isinstance(value, Mapping) or value.get("fit") not in _SIZING_FITS:
        raise InvalidImageSourceError(f"sizing.fit must be one of {sorted(_SIZING_FITS)}, got {value!r}", path=path)
    return ImageSizing(
        fit=value["fit"],
        image_width=_opt_number(value.get("imageWidth"), f"{path}.imageWidth"),
        image_height=_opt_number(value.get("imageHeight"), f"{path}.imageHeight"),
    )


# ---------------------------------------------------------------------------
# Slide objects
# ---------------------------------------------------------------------------


def _text_fields(node: Mapping[str, Any], style: Mapping[str, Any], box: Box, options: NormalizeOptions, path: str) -> dict:
    children = node.get("children")
    runs = flatten_text(children, path=f"{path}.children") if children is not None else []
    font_size = style.get("fontSize")
    return {
        "x": box.x,
        "y": box.y,
        "w": box.w,
        "h": box.h,
        "runs": tuple(runs),
        "font_face": style.get("fontFace") or options.default_font_face,
        "font_size": font_size if font_size is not None else options.default_font_size,
        "color": _opt_hex(style, "color", path),
        "background_color": _opt_color(style, "backgroundColor", path),
        "style": {k: copy.deepcopy(v) for k, v in style.items() if k not in _TEXT_STYLE_FIELDS},
    }


def _normalize_text(node, style, box, frame, options, path) -> Text:
    return Text(**_text_fields(node, style, box, options, path))


def _normalize_table_cell(node, style, box, frame, options, path) -> TableCell:
    return TableCell(
        **_text_fields(node, style, box, options, path),
        col_span=node_attr(node, "colSpan"),
        row_span=node_attr(node, "rowSpan"),
    )


def _normalize_image(node, style, box, frame, options, path) -> Image:
    src = node_attr(node, "src")
    return Image(
        x=box.x,
        y=box.y,
        w=box.w,
        h=box.h,
        src=normalize_image_src(src, path=f"{path}.src"),
        sizing=_image_sizing(node_attr(node, "sizing"), f"{path}.sizing"),
    )


def _normalize_shape(node, style, box, frame, options, path) -> Shape:
    shape_type = node_attr(node, "type")
    if not isinstance(shape_type, str) or not shape_type:
        raise UnsupportedNodeError(f"shape needs a string 'type', got {shape_type!r}", path=path, kind="shape")
    children = node.get("children")
    return Shape(
        x=box.x,
        y=box.y,
        w=box.w,
        h=box.h,
        shape_type=shape_type,
        runs=tuple(flatten_text(children, path=f"{path}.children")) if children is not None else None,
        background_color=_opt_color(style, "backgroundColor", path),
        border_color=_opt_hex(style, "borderColor", path),
        border_width=_opt_number(style.get("borderWidth"), f"{path}.style.borderWidth"),
    )


def _string_cell(text: str, options: NormalizeOptions) -> TableCell:
    return TableCell(
        x=0,
        y=0,
        w=0,
        h=0,
        runs=(TextRun(text=text),),
        font_face=options.default_font_face,
        font_size=options.default_font_size,
    )


def _normalize_table(node, style, box, frame, options, path) -> Table:
    rows = node_attr(node, "rows", [])
    if not isinstance(rows, (list, tuple)):
        raise UnsupportedNodeError("table rows must be a list of lists", path=f"{path}.rows", kind="table")
    cell_frame = Frame(box.x, box.y, box.w, box.h, origin_x=box.x, origin_y=box.y, clamp=True, owner="table")
    out_rows: list[tuple[TableCell, ...]] = []
    for r, row in enumerate(rows):
        row_path = f"{path}.rows[{r}]"
        if not isinstance(row, (list, tuple)):
            raise UnsupportedNodeError("table row must be a list of cells", path=row_path, kind="table")
        cells: list[TableCell] = []
        for c, cell in enumerate(row):
            cell_path = f"{row_path}[{c}]"
            if isinstance(cell, str):
                cells.append(_string_cell(cell, options))
                continue
            kind = node_kind(cell, cell_path)
            if kind not in ("table-cell", "text"):
                raise UnsupportedNodeError(f"Node type {kind} is not supported as a table cell", path=cell_path, kind=kind)
            cell_style = require_style(cell, cell_path)
            cell_box = resolve_box(cell_style, cell_frame, cell_path)
            cells.append(_normalize_table_cell(cell, cell_style, cell_box, cell_frame, options, cell_path))
        out_rows.append(tuple(cells))

    margin = node_attr(node, "margin")
    if isinstance(margin, (list, tuple)):
        margin = normalize_trbl(margin, path=f"{path}.margin")
    else:
        margin = _opt_number(margin, f"{path}.margin")
    return Table(
        x=box.x,
        y=box.y,
        w=box.w,
        h=box.h,
        rows=tuple(out_rows),
        border_color=_opt_hex(style, "borderColor", path),
        border_width=_opt_number(style.get("borderWidth"), f"{path}.style.borderWidth"),
        margin=margin,
    )


def _normalize_line(node: Mapping[str, Any], frame: Frame, path: str) -> Line:
    if frame.owner == "master-slide":
        raise UnsupportedMasterSlideObjectError("line is not supported directly on a master slide", path=path, kind="line")
    if frame.owner == "flex":
        raise UnsupportedNodeError("Node type line is not supported inside Flex", path=path, kind="line")
    style = require_style(node, path)
    coords: list[float] = []
    for key in ("x1", "y1", "x2", "y2"):
        value = node_attr(node, key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidPositionError(f"line {key} must be a number in inches, got {value!r}", path=f"{path}.{key}", kind="line")
        coords.append(value)
    x1, y1, x2, y2 = coords
    return Line(
        x1=x1 + frame.origin_x,
        y1=y1 + frame.origin_y,
        x2=x2 + frame.origin_x,
        y2=y2 + frame.origin_y,
        color=_opt_hex(style, "color", path),
        width=_opt_number(style.get("width"), f"{path}.style.width"),
    )


def _container_background(style: Mapping[str, Any], outer: Box, path: str) -> Shape | None:
    if not style.get("backgroundColor") and not style.get("borderColor"):
        return None
    return Shape(
        x=outer.x,
        y=outer.y,
        w=outer.w,
        h=outer.h,
        shape_type="rect",
        background_color=_opt_color(style, "backgroundColor", path),
        border_color=_opt_hex(style, "borderColor", path),
        border_width=_opt_number(style.get("borderWidth"), f"{path}.style.borderWidth"),
    )


def _normalize_container(node, style, box, frame, options, path) -> Container:
    margin = node_trbl(node, "margin", path)
    padding = node_trbl(node, "padding", path)
    outer = inset(box, margin)
    inner = inset(outer, padding)
    child_frame = Frame(inner.x, inner.y, inner.w, inner.h, origin_x=outer.x, origin_y=outer.y, clamp=True, owner="container")
    logger.debug("container %s: box %s, inner %s", path, tuple(outer), tuple(inner))

    objects = [
        normalize_slide_object(child, child_frame, options, path=child_path)
        for child_path, child in iter_children(node, path)
    ]
    background = _container_background(style, outer, path)
    if background is not None:
        if options.background_paint_order == "before":
            objects.insert(0, background)
        else:
            objects.append(background)

    return Container(
        x=outer.x,
        y=outer.y,
        w=outer.w,
        h=outer.h,
        margin=margin,
        padding=padding,
        objects=tuple(objects),
    )


def _normalize_flex(node, style, box, frame, options, path):
    def normalize_child(child: Mapping[str, Any], child_frame: Frame, child_box: Box, child_path: str) -> SlideObject:
        return normalize_slide_object(child, child_frame, options, path=child_path, box=child_box)

    return layout_flex(node, box, path, normalize_child)


_Handler = Callable[[Mapping[str, Any], Mapping[str, Any], Box, Frame, NormalizeOptions, str], SlideObject]

_POSITIONED: dict[str, _Handler] = {
    "container": _normalize_container,
    "flex": _normalize_flex,
    "text": _normalize_text,
    "table-cell": _normalize_table_cell,
    "image": _normalize_image,
    "shape": _normalize_shape,
    "table": _normalize_table,
}


def normalize_slide_object(
    node: Any,
    frame: Frame,
    options: NormalizeOptions,
    *,
    path: str = "$",
    box: Box | None = None,
) -> SlideObject:
    """Normalize one slide object positioned in `frame`.

    `box` is the already allocated box (flex placement); when omitted the
    node's own x/y/w/h are resolved against the frame.
    """
    kind = node_kind(node, path)
    if kind == "line":
        return _normalize_line(node, frame, path)
    handler = _POSITIONED.get(kind)
    if handler is None:
        raise UnknownNodeKindError(f"unknown slide object kind {kind!r}", path=path, kind=kind)
    style = require_style(node, path)
    if box is None:
        box = resolve_box(style, frame, path)
    return handler(node, style, box, frame, options, path)


# ---------------------------------------------------------------------------
# Slides and presentation
# ---------------------------------------------------------------------------


def _slide_objects(node: Mapping[str, Any], frame: Frame, options: NormalizeOptions, path: str) -> tuple[SlideObject, ...]:
    return tuple(
        normalize_slide_object(child, frame, options, path=child_path)
        for child_path, child in iter_children(node, path)
    )


def _background_image(node: Mapping[str, Any], path: str) -> ImageSource | None:
    src = node_attr(node, "backgroundImage")
    if src is None:
        return None
    return normalize_image_src(src, path=f"{path}.backgroundImage")


def _node_style(node: Mapping[str, Any]) -> Mapping[str, Any]:
    style = node.get("style")
    return style if isinstance(style, Mapping) else {}


def normalize_slide(node: Mapping[str, Any], dimensions: Dimensions, options: NormalizeOptions, *, path: str = "$") -> Slide:
    frame = Frame(0, 0, dimensions.width, dimensions.height, owner="slide")
    notes = node_attr(node, "notes")
    master_name = node_attr(node, "masterName")
    hidden = node_attr(node, "hidden", False)
    if not isinstance(hidden, bool):
        raise NormalizeError(f"slide 'hidden' must be a boolean, got {hidden!r}", path=f"{path}.hidden", kind="slide")
    logger.debug("slide %s (master=%s)", path, master_name)
    return Slide(
        objects=_slide_objects(node, frame, options, path),
        dimensions=dimensions,
        background_color=_opt_color(_node_style(node), "backgroundColor", path),
        background_image=_background_image(node, path),
        hidden=hidden,
        notes=notes,
        master_name=master_name,
    )


def normalize_master_slide(
    node: Mapping[str, Any], dimensions: Dimensions, options: NormalizeOptions, *, path: str = "$"
) -> MasterSlide:
    name = node_attr(node, "name")
    if not isinstance(name, str) or not name:
        raise NormalizeError(f"master slide needs a non-empty string 'name', got {name!r}", path=path, kind="master-slide")
    frame = Frame(0, 0, dimensions.width, dimensions.height, owner="master-slide")
    logger.debug("master slide %s (%s)", path, name)
    return MasterSlide(
        name=name,
        objects=_slide_objects(node, frame, options, path),
        dimensions=dimensions,
        background_color=_opt_color(_node_style(node), "backgroundColor", path),
        background_image=_background_image(node, path),
    )


def _resolve_layout(value: Any, path: str) -> tuple[str | CustomLayout, Dimensions]:
    if isinstance(value, str):
        dims = layout_preset_inches(value)
        if dims is None:
            raise InvalidLayoutError(f"unknown layout {value!r}", path=f"{path}.layout")
        return (value, Dimensions(*dims))
    if isinstance(value, Mapping):
        w, h = value.get("width"), value.get("height")
        if all(isinstance(v, (int, float)) and not isinstance(v, bool) and v > 0 for v in (w, h)):
            return (CustomLayout(width=w, height=h), Dimensions(w, h))
    raise InvalidLayoutError(
        f"layout must be a preset name or {{width, height}} in inches, got {value!r}", path=f"{path}.layout"
    )


def normalize_presentation(document: Any, options: NormalizeOptions | None = None) -> Presentation:
    """Normalize a presentation document into a fully resolved `Presentation`.

    Raises a `NormalizeError` subclass on the first malformed node.
    """
    options = options or NormalizeOptions()
    path = "$"
    kind = node_kind(document, path)
    if kind != "presentation":
        raise UnknownNodeKindError(f"root node must be a presentation, got {kind!r}", path=path, kind=kind)

    layout, dimensions = _resolve_layout(node_attr(document, "layout", options.default_layout), path)

    slides: list[Slide] = []
    masters: dict[str, MasterSlide] = {}
    for child_path, child in iter_children(document, path):
        child_kind = node_kind(child, child_path)
        if child_kind == "slide":
            slides.append(normalize_slide(child, dimensions, options, path=child_path))
        elif child_kind == "master-slide":
            master = normalize_master_slide(child, dimensions, options, path=child_path)
            if master.name in masters:
                if options.duplicate_master_names == "error":
                    raise DuplicateMasterSlideError(
                        f"duplicate master slide name {master.name!r}", path=child_path, kind=child_kind
                    )
                logger.warning("master slide %r at %s overwrites an earlier one", master.name, child_path)
            masters[master.name] = master
        else:
            raise UnknownNodeKindError(
                f"presentation children must be slides or master slides, got {child_kind!r}",
                path=child_path,
                kind=child_kind,
            )

    for i, slide in enumerate(slides):
        if slide.master_name is not None and slide.master_name not in masters:
            logger.warning("slide %d references unknown master slide %r", i, slide.master_name)

    metadata = {key: node_attr(document, key) for key in _METADATA_KEYS}
    logger.debug("presentation: %d slides, %d master slides", len(slides), len(masters))
    return Presentation(
        layout=layout,
        dimensions=dimensions,
        slides=tuple(slides),
        master_slides=masters,
        **metadata,
    )


__all__ = [
    "normalize_image_src",
    "normalize_master_slide",
    "normalize_presentation",
    "normalize_slide",
    "normalize_slide_object",
]
