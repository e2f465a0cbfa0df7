from __future__ import annotations

from typing import Any

import pytest


def make_node(kind: str, style: dict[str, Any] | None = None, children: Any = None, **props: Any) -> dict[str, Any]:
    node: dict[str, Any] = {"kind": kind, **props}
    if style is not None:
        node["style"] = style
    if children is not None:
        node["children"] = children
    return node


def make_deck(*children: Any, layout: Any = None, **props: Any) -> dict[str, Any]:
    deck: dict[str, Any] = {"kind": "presentation", "children": list(children), **props}
    if layout is not None:
        deck["layout"] = layout
    return deck


@pytest.fixture
def node():
    return make_node


@pytest.fixture
def deck():
    return make_deck


@pytest.fixture
def square_deck():
    """A deck on a 10x10 inch custom layout with one slide holding `objects`."""

    def _build(*objects: Any) -> dict[str, Any]:
        return make_deck(make_node("slide", children=list(objects)), layout={"width": 10, "height": 10})

    return _build
