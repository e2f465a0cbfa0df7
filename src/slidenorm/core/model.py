"""
model.py — Normalized output tree.

All records are frozen dataclasses built fresh for each normalization call.
Positions are inches, colors are canonical (`RRGGBB` or `ComplexColor`).
Dataclass fields are snake_case; authored style dicts keep their keys.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, NamedTuple, Union

TRBL = tuple[float, float, float, float]


class Box(NamedTuple):
    """An absolute rectangle in inches."""

    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True)
class ComplexColor:
    color: str
    alpha: int  # percent transparency, 0 = opaque
    type: str = "solid"


Color = Union[str, ComplexColor]


@dataclass(frozen=True)
class Dimensions:
    width: float
    height: float


@dataclass(frozen=True)
class CustomLayout:
    width: float
    height: float


@dataclass(frozen=True)
class Link:
    url: str | None = None
    slide: int | None = None
    tooltip: str | None = None


@dataclass(frozen=True)
class TextRun:
    text: str
    # Partial: unset keys are inherited from the enclosing text block.
    style: dict[str, Any] = field(default_factory=dict)
    link: Link | None = None
    bullet: bool | dict[str, Any] | None = None
    line_break: bool | None = None
    rtl_mode: bool | None = None
    lang: str | None = None


@dataclass(frozen=True)
class ImageSource:
    kind: str  # "path" | "data"
    path: str | None = None
    data: str | None = None


@dataclass(frozen=True)
class ImageSizing:
    fit: str  # "contain" | "cover" | "crop"
    image_width: float | None = None
    image_height: float | None = None


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    w: float
    h: float
    runs: tuple[TextRun, ...]
    font_face: str
    font_size: float
    color: str | None = None
    background_color: Color | None = None
    style: dict[str, Any] = field(default_factory=dict)
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class TableCell(Text):
    kind: str = field(default="table-cell", init=False)
    col_span: int | None = None
    row_span: int | None = None


@dataclass(frozen=True)
class Image:
    x: float
    y: float
    w: float
    h: float
    src: ImageSource
    sizing: ImageSizing | None = None
    kind: str = field(default="image", init=False)


@dataclass(frozen=True)
class Shape:
    x: float
    y: float
    w: float
    h: float
    shape_type: str
    runs: tuple[TextRun, ...] | None = None
    background_color: Color | None = None
    border_color: str | None = None
    border_width: float | None = None
    kind: str = field(default="shape", init=False)


@dataclass(frozen=True)
class Table:
    x: float
    y: float
    w: float
    h: float
    rows: tuple[tuple[TableCell, ...], ...]
    border_color: str | None = None
    border_width: float | None = None
    margin: float | TRBL | None = None  # cell margin
    kind: str = field(default="table", init=False)


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str | None = None
    width: float | None = None
    kind: str = field(default="line", init=False)


@dataclass(frozen=True)
class Container:
    x: float
    y: float
    w: float
    h: float
    margin: TRBL
    padding: TRBL
    objects: tuple[SlideObject, ...]
    kind: str = field(default="container", init=False)

    @property
    def inner(self) -> Box:
        t, r, b, l = self.padding
        return Box(self.x + l, self.y + t, self.w - (l + r), self.h - (t + b))


@dataclass(frozen=True)
class FlexContainer(Container):
    kind: str = field(default="flex", init=False)
    direction: str = "column"
    gap: float = 0
    align_items: str = "start"


SlideObject = Union[Text, TableCell, Image, Shape, Table, Line, Container, FlexContainer]


@dataclass(frozen=True)
class Slide:
    objects: tuple[SlideObject, ...]
    dimensions: Dimensions
    background_color: Color | None = None
    background_image: ImageSource | None = None
    hidden: bool = False
    notes: str | None = None
    master_name: str | None = None
    kind: str = field(default="slide", init=False)


@dataclass(frozen=True)
class MasterSlide:
    name: str
    objects: tuple[SlideObject, ...]
    dimensions: Dimensions
    background_color: Color | None = None
    background_image: ImageSource | None = None
    kind: str = field(default="master-slide", init=False)


@dataclass(frozen=True)
class Presentation:
    layout: str | CustomLayout
    dimensions: Dimensions
    slides: tuple[Slide, ...] = ()
    master_slides: dict[str, MasterSlide] = field(default_factory=dict)
    author: str | None = None
    company: str | None = None
    revision: str | None = None
    subject: str | None = None
    title: str | None = None


def to_dict(obj: Any) -> Any:
    """Convert an output tree (or any part of it) into plain JSON-compatible values."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {str(k): to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(v) for v in obj]
    return obj


__all__ = [
    "TRBL",
    "Box",
    "Color",
    "ComplexColor",
    "Container",
    "CustomLayout",
    "Dimensions",
    "FlexContainer",
    "Image",
    "ImageSizing",
    "ImageSource",
    "Line",
    "Link",
    "MasterSlide",
    "Presentation",
    "Shape",
    "Slide",
    "SlideObject",
    "Table",
    "TableCell",
    "Text",
    "TextRun",
    "to_dict",
]
