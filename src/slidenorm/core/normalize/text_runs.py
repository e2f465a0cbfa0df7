"""
text_runs.py — Flatten nested rich-text markup into styled runs.

Accepted text children:
- str / int / float                   -> one run, empty style
- list / tuple (arbitrarily nested)   -> concatenation of the flattened items
- {"kind": "span", "style": {...}, "children": ...}
- {"kind": "link", "url": ... | "slide": n, "tooltip"?: ..., "children": ...}
- {"kind": "bullet", "children": ..., **bullet_options}

Enclosing markup supplies style *defaults*: a run's own style keys win.
"""
from __future__ import annotations

import copy
from dataclasses import replace
from typing import Any, Mapping

from slidenorm.core.errors import InvalidTextChildError
from slidenorm.core.model import Link, TextRun
from slidenorm.core.normalize.color import normalize_hex_color, normalize_hex_or_complex_color

# Keys on a bullet element that are not bullet options.
_BULLET_RESERVED = frozenset({"kind", "children", "style", "rtlMode", "lang"})


def _markup_style(el: Mapping[str, Any], path: str) -> dict[str, Any]:
    style = el.get("style")
    if style is None:
        return {}
    if not isinstance(style, Mapping):
        raise InvalidTextChildError(f"style must be a mapping, got {type(style).__name__}", path=path, kind=el.get("kind"))
    out = copy.deepcopy(dict(style))
    if out.get("color") is not None:
        out["color"] = normalize_hex_color(out["color"], path=f"{path}.style.color")
    if out.get("backgroundColor") is not None:
        out["backgroundColor"] = normalize_hex_or_complex_color(
            out["backgroundColor"], path=f"{path}.style.backgroundColor"
        )
    return out


def _inherit(run: TextRun, el: Mapping[str, Any], style: dict[str, Any]) -> TextRun:
    rtl_mode = run.rtl_mode if run.rtl_mode is not None else el.get("rtlMode")
    lang = run.lang if run.lang is not None else el.get("lang")
    return replace(run, style={**style, **run.style}, rtl_mode=rtl_mode, lang=lang)


def _link_from(el: Mapping[str, Any], path: str) -> Link:
    tooltip = el.get("tooltip")
    url = el.get("url")
    if isinstance(url, str) and url:
        return Link(url=url, tooltip=tooltip)
    slide = el.get("slide")
    if isinstance(slide, int) and not isinstance(slide, bool):
        return Link(slide=slide, tooltip=tooltip)
    raise InvalidTextChildError("link needs a string 'url' or an integer 'slide'", path=path, kind="link")


def _flatten_span(el: Mapping[str, Any], path: str) -> list[TextRun]:
    style = _markup_style(el, path)
    return [_inherit(run, el, style) for run in _flatten(el.get("children", []), f"{path}.children")]


def _flatten_link(el: Mapping[str, Any], path: str) -> list[TextRun]:
    link = _link_from(el, path)
    runs = _flatten_span(el, path)
    # an inner link is more specific than the enclosing one
    return [run if run.link is not None else replace(run, link=link) for run in runs]


def _flatten_bullet(el: Mapping[str, Any], path: str) -> list[TextRun]:
    options = {k: copy.deepcopy(v) for k, v in el.items() if k not in _BULLET_RESERVED}
    bullet: bool | dict[str, Any] = options if options else True
    runs = _flatten_span(el, path)
    out: list[TextRun] = []
    last = len(runs) - 1
    for i, run in enumerate(runs):
        marker = run.bullet
        if i == 0 and marker is None:
            marker = bullet
        # keep every run of the group inside the same bullet point
        out.append(replace(run, bullet=marker, line_break=(i == last)))
    return out


def _number_text(value: int | float) -> str:
    # 1.0 renders as "1"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


_MARKUP = {
    "span": _flatten_span,
    "link": _flatten_link,
    "bullet": _flatten_bullet,
}


def _flatten(value: Any, path: str) -> list[TextRun]:
    if isinstance(value, bool) or value is None:
        raise InvalidTextChildError(f"invalid text child {value!r}", path=path)
    if isinstance(value, str):
        return [TextRun(text=value)]
    if isinstance(value, (int, float)):
        return [TextRun(text=_number_text(value))]
    if isinstance(value, (list, tuple)):
        runs: list[TextRun] = []
        for i, item in enumerate(value):
            runs.extend(_flatten(item, f"{path}[{i}]"))
        return runs
    if isinstance(value, Mapping):
        kind = value.get("kind")
        handler = _MARKUP.get(kind) if isinstance(kind, str) else None
        if handler is None:
            raise InvalidTextChildError(
                "invalid text child; only strings, numbers, lists and span/link/bullet markup are accepted",
                path=path,
                kind=kind if isinstance(kind, str) else None,
            )
        return handler(value, path)
    raise InvalidTextChildError(f"invalid text child of type {type(value).__name__}", path=path)


def _separate_bullet_lines(runs: list[TextRun]) -> list[TextRun]:
    has_bullet = any(run.bullet for run in runs)
    has_plain = any(not run.bullet for run in runs)
    if not (has_bullet and has_plain):
        return runs
    return [
        replace(run, line_break=True) if run.link is None and run.line_break is None else run
        for run in runs
    ]


def flatten_text(value: Any, *, path: str = "$") -> list[TextRun]:
    """Flatten a text-children value of one text block into an ordered run list.

    When bulleted and plain runs are mixed, every non-link run without an
    explicit line break gets `line_break=True` so they stay on separate lines.
    """
    return _separate_bullet_lines(_flatten(value, path))


__all__ = ["flatten_text"]
