from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pptx.util import Emu, Inches

DEFAULT_FONT_FACE = "Arial"
DEFAULT_FONT_SIZE = 18
DEFAULT_LAYOUT = "16x9"

# Preset slide sizes as PowerPoint stores them (EMU), width x height.
LAYOUT_PRESETS_EMU: dict[str, tuple[Emu, Emu]] = {
    "16x9": (Inches(10), Emu(5143500)),
    "16x10": (Inches(10), Emu(5715000)),
    "4x3": (Inches(10), Emu(6858000)),
    "WIDE": (Emu(12192000), Emu(6858000)),
}

BackgroundPaintOrder = Literal["after", "before"]
DuplicateMasterPolicy = Literal["overwrite", "error"]


def layout_preset_inches(name: str) -> tuple[float, float] | None:
    """Return (width, height) in inches for a preset layout name, or None if unknown."""
    dims = LAYOUT_PRESETS_EMU.get(name)
    if dims is None:
        return None
    w, h = dims
    return (w.inches, h.inches)


@dataclass(frozen=True)
class NormalizeOptions:
    default_font_face: str = DEFAULT_FONT_FACE
    default_font_size: float = DEFAULT_FONT_SIZE
    default_layout: str = DEFAULT_LAYOUT
    # "after" keeps the synthesized container background behind the children in
    # array order, i.e. painted on top of them by array-order renderers.
    background_paint_order: BackgroundPaintOrder = "after"
    duplicate_master_names: DuplicateMasterPolicy = "overwrite"

    def __post_init__(self) -> None:
        if self.background_paint_order not in ("after", "before"):
            raise ValueError(f"background_paint_order must be 'after' or 'before', got {self.background_paint_order!r}")
        if self.duplicate_master_names not in ("overwrite", "error"):
            raise ValueError(
                f"duplicate_master_names must be 'overwrite' or 'error', got {self.duplicate_master_names!r}"
            )
        if layout_preset_inches(self.default_layout) is None:
            raise ValueError(f"default_layout must be one of {sorted(LAYOUT_PRESETS_EMU)}, got {self.default_layout!r}")


__all__ = [
    "DEFAULT_FONT_FACE",
    "DEFAULT_FONT_SIZE",
    "DEFAULT_LAYOUT",
    "LAYOUT_PRESETS_EMU",
    "NormalizeOptions",
    "layout_preset_inches",
]
