import copy
import logging

import pytest

from slidenorm import NormalizeOptions, normalize_presentation, to_dict
from slidenorm.core.errors import (
    DuplicateMasterSlideError,
    InvalidImageSourceError,
    InvalidLayoutError,
    InvalidPositionError,
    MissingStyleError,
    NormalizeError,
    UnknownNodeKindError,
    UnsupportedMasterSlideObjectError,
    UnsupportedNodeError,
)
from slidenorm.core.model import (
    ComplexColor,
    Container,
    CustomLayout,
    Dimensions,
    Image,
    ImageSizing,
    ImageSource,
    Line,
    Shape,
    TableCell,
    Text,
    TextRun,
)


def _objects(pres, slide=0):
    return pres.slides[slide].objects


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------


def test_nested_container_resolution(node, square_deck):
    container = node("container", {"x": "10%", "y": "10%", "w": "80%", "h": "80%"}, [], padding=1, margin=0)
    (obj,) = _objects(normalize_presentation(square_deck(container)))
    assert isinstance(obj, Container)
    assert (obj.x, obj.y, obj.w, obj.h) == (pytest.approx(1), pytest.approx(1), pytest.approx(8), pytest.approx(8))
    assert obj.inner == (pytest.approx(2), pytest.approx(2), pytest.approx(6), pytest.approx(6))
    assert obj.padding == (1, 1, 1, 1)
    assert obj.margin == (0, 0, 0, 0)


def test_container_children_resolve_against_inner_box(node, square_deck):
    text = node("text", {"x": "50%", "y": 1, "w": "50%", "h": 20}, "hi")
    container = node("container", {"x": 1, "y": 1, "w": 8, "h": 8}, [text], padding=1)
    (obj,) = _objects(normalize_presentation(square_deck(container)))
    (child,) = obj.objects
    assert (child.x, child.y) == (pytest.approx(5), pytest.approx(3))
    assert child.w == pytest.approx(3)
    # clamped to the 6in inner height
    assert child.h == pytest.approx(6)


def test_container_margin(node, square_deck):
    container = node("container", {"x": 0, "y": 0, "w": 10, "h": 10}, [], margin=[1, 2])
    (obj,) = _objects(normalize_presentation(square_deck(container)))
    assert (obj.x, obj.y, obj.w, obj.h) == (2, 1, 6, 8)


def test_nested_containers_stack_frames(node, square_deck):
    text = node("text", {"x": 0, "y": 0, "w": "100%", "h": "100%"}, "x")
    inner = node("container", {"x": 1, "y": 1, "w": 4, "h": 4}, [text], padding=0.5)
    outer = node("container", {"x": 1, "y": 1, "w": 8, "h": 8}, [inner], padding=1)
    (obj,) = _objects(normalize_presentation(square_deck(outer)))
    (nested,) = obj.objects
    assert (nested.x, nested.y) == (3, 3)
    (leaf,) = nested.objects
    assert (leaf.x, leaf.y, leaf.w, leaf.h) == (3.5, 3.5, 3, 3)


def test_background_shape_is_appended_after_children(node, square_deck):
    text = node("text", {"w": 1, "h": 1}, "x")
    container = node(
        "container",
        {"x": 1, "y": 1, "w": 4, "h": 4, "backgroundColor": "rgba(255, 0, 0, 0.5)", "borderColor": "blue", "borderWidth": 2},
        [text],
        margin=0.5,
    )
    (obj,) = _objects(normalize_presentation(square_deck(container)))
    assert isinstance(obj.objects[0], Text)
    background = obj.objects[-1]
    assert isinstance(background, Shape)
    assert background.shape_type == "rect"
    assert (background.x, background.y, background.w, background.h) == (1.5, 1.5, 3, 3)
    assert background.background_color == ComplexColor(color="FF0000", alpha=50)
    assert background.border_color == "0000FF"
    assert background.border_width == 2


def test_background_shape_can_paint_first(node, square_deck):
    container = node("container", {"w": 4, "h": 4, "backgroundColor": "white"}, [node("text", {}, "x")])
    pres = normalize_presentation(square_deck(container), NormalizeOptions(background_paint_order="before"))
    (obj,) = _objects(pres)
    assert isinstance(obj.objects[0], Shape)
    assert isinstance(obj.objects[1], Text)


def test_no_background_without_colors(node, square_deck):
    container = node("container", {"w": 4, "h": 4}, [node("text", {}, "x")])
    (obj,) = _objects(normalize_presentation(square_deck(container)))
    assert len(obj.objects) == 1


def test_container_drops_primitive_children(node, square_deck):
    container = node("container", {"w": 4, "h": 4}, ["stray", 3, [node("text", {}, "x"), None]])
    (obj,) = _objects(normalize_presentation(square_deck(container)))
    assert len(obj.objects) == 1


# ---------------------------------------------------------------------------
# Lines
# ---------------------------------------------------------------------------


def test_line_on_slide_is_absolute(node, square_deck):
    line = node("line", {"color": "green", "width": 2}, x1=1, y1=2, x2=3, y2=4)
    (obj,) = _objects(normalize_presentation(square_deck(line)))
    assert obj == Line(x1=1, y1=2, x2=3, y2=4, color="008000", width=2)


def test_line_in_container_is_offset_by_container_origin(node, square_deck):
    line = node("line", {}, x1=0, y1=0, x2=1, y2=1)
    container = node("container", {"x": 1, "y": 2, "w": 5, "h": 5}, [line], padding=1)
    (obj,) = _objects(normalize_presentation(square_deck(container)))
    (child,) = obj.objects
    assert (child.x1, child.y1, child.x2, child.y2) == (1, 2, 2, 3)


def test_line_rejects_percentages(node, square_deck):
    line = node("line", {}, x1="10%", y1=0, x2=1, y2=1)
    with pytest.raises(InvalidPositionError):
        normalize_presentation(square_deck(line))


def test_line_on_master_slide_is_rejected(node, deck):
    master = node("master-slide", None, [node("line", {}, x1=0, y1=0, x2=1, y2=1)], name="base")
    with pytest.raises(UnsupportedMasterSlideObjectError):
        normalize_presentation(deck(master))


def test_line_in_master_container_is_allowed(node, deck):
    line = node("line", {}, x1=0, y1=0, x2=1, y2=1)
    master = node("master-slide", None, [node("container", {"x": 1, "y": 1, "w": 2, "h": 2}, [line])], name="base")
    pres = normalize_presentation(deck(master))
    (container,) = pres.master_slides["base"].objects
    assert container.objects[0].x1 == 1


# ---------------------------------------------------------------------------
# Leaf objects
# ---------------------------------------------------------------------------


def test_slide_level_percentages_resolve_against_layout(node, deck):
    text = node("text", {"x": "50%", "y": "50%", "w": "10%", "h": "10%"}, "x")
    pres = normalize_presentation(deck(node("slide", children=[text])))
    (obj,) = _objects(pres)
    assert (obj.x, obj.y) == (pytest.approx(5), pytest.approx(2.8125))
    assert (obj.w, obj.h) == (pytest.approx(1), pytest.approx(0.5625))


def test_text_defaults(node, square_deck):
    (obj,) = _objects(normalize_presentation(square_deck(node("text", {"x": 1, "y": 1, "w": 2, "h": 1}, "hello"))))
    assert obj == Text(x=1, y=1, w=2, h=1, runs=(TextRun("hello"),), font_face="Arial", font_size=18)


def test_text_missing_coordinates_use_defaults(node, square_deck):
    (obj,) = _objects(normalize_presentation(square_deck(node("text", {}, "hello"))))
    assert (obj.x, obj.y, obj.w, obj.h) == (0, 0, 1, 1)


def test_text_style_fields(node, square_deck):
    style = {
        "x": 0,
        "y": 0,
        "w": 4,
        "h": 1,
        "color": "#333",
        "backgroundColor": "rgba(0, 0, 0, 0.25)",
        "fontFace": "Helvetica",
        "fontSize": 24,
        "bold": True,
        "align": "center",
    }
    children = [{"kind": "bullet", "children": "one"}, {"kind": "bullet", "children": "two"}]
    (obj,) = _objects(normalize_presentation(square_deck(node("text", style, children))))
    assert obj.color == "333333"
    assert obj.background_color == ComplexColor(color="000000", alpha=75)
    assert (obj.font_face, obj.font_size) == ("Helvetica", 24)
    assert obj.style == {"bold": True, "align": "center"}
    assert [r.bullet for r in obj.runs] == [True, True]


def test_text_without_children_has_no_runs(node, square_deck):
    (obj,) = _objects(normalize_presentation(square_deck(node("text", {}))))
    assert obj.runs == ()


def test_default_font_is_configurable(node, square_deck):
    options = NormalizeOptions(default_font_face="Noto Sans", default_font_size=12)
    (obj,) = _objects(normalize_presentation(square_deck(node("text", {}, "x")), options))
    assert (obj.font_face, obj.font_size) == ("Noto Sans", 12)


def test_image_sources_and_sizing(node, square_deck):
    by_path = node("image", {"x": 0, "y": 0, "w": "50%", "h": 2}, src="https://example.com/a.png")
    by_data = node(
        "image",
        {"w": 1, "h": 1, "sizing": {"fit": "cover", "imageWidth": 800, "imageHeight": 600}},
        src={"kind": "data", "data": "image/png;base64,AAAA"},
    )
    first, second = _objects(normalize_presentation(square_deck(by_path, by_data)))
    assert first == Image(x=0, y=0, w=5, h=2, src=ImageSource(kind="path", path="https://example.com/a.png"))
    assert second.src == ImageSource(kind="data", data="image/png;base64,AAAA")
    assert second.sizing == ImageSizing(fit="cover", image_width=800, image_height=600)


@pytest.mark.parametrize(
    "src, sizing",
    [(None, None), ({"kind": "url", "url": "x"}, None), ("a.png", {"fit": "stretch"})],
)
def test_image_rejects_bad_descriptors(node, square_deck, src, sizing):
    style = {"w": 1, "h": 1}
    if sizing is not None:
        style["sizing"] = sizing
    with pytest.raises(InvalidImageSourceError):
        normalize_presentation(square_deck(node("image", style, src=src)))


def test_shape(node, square_deck):
    shape = node(
        "shape",
        {"x": 1, "y": 1, "w": 2, "h": 2, "backgroundColor": "#00ff0080", "borderColor": "black", "borderWidth": 1},
        ["A", {"kind": "span", "style": {"bold": True}, "children": "B"}],
        type="ellipse",
    )
    (obj,) = _objects(normalize_presentation(square_deck(shape)))
    assert obj.shape_type == "ellipse"
    assert [r.text for r in obj.runs] == ["A", "B"]
    assert obj.background_color == ComplexColor(color="00FF00", alpha=50)
    assert obj.border_color == "000000"
    assert obj.border_width == 1


def test_shape_without_text(node, square_deck):
    (obj,) = _objects(normalize_presentation(square_deck(node("shape", {"w": 1, "h": 1}, type="rect"))))
    assert obj.runs is None
    assert obj.background_color is None


def test_shape_requires_type(node, square_deck):
    with pytest.raises(UnsupportedNodeError):
        normalize_presentation(square_deck(node("shape", {"w": 1, "h": 1})))


def test_table(node, square_deck):
    cell = node("table-cell", {"color": "red"}, "B", colSpan=2)
    table = node(
        "table",
        {"x": 1, "y": 1, "w": 8, "h": 4, "borderColor": "#000", "borderWidth": 1, "margin": 0.1},
        rows=[["A", cell], ["C", "D"]],
    )
    (obj,) = _objects(normalize_presentation(square_deck(table)))
    assert (obj.x, obj.y, obj.w, obj.h) == (1, 1, 8, 4)
    assert (obj.border_color, obj.border_width, obj.margin) == ("000000", 1, 0.1)
    first, second = obj.rows[0]
    assert isinstance(first, TableCell)
    assert first.runs == (TextRun("A"),)
    assert (first.x, first.y, first.w, first.h) == (0, 0, 0, 0)
    assert second.col_span == 2
    assert second.row_span is None
    assert second.color == "FF0000"
    assert [c.runs[0].text for c in obj.rows[1]] == ["C", "D"]


def test_table_rejects_non_cell_nodes(node, square_deck):
    table = node("table", {"w": 1, "h": 1}, rows=[[node("image", {}, src="a.png")]])
    with pytest.raises(UnsupportedNodeError):
        normalize_presentation(square_deck(table))


# ---------------------------------------------------------------------------
# Slides and presentation
# ---------------------------------------------------------------------------


def test_layouts(deck):
    assert normalize_presentation(deck()).dimensions == Dimensions(10, 5.625)
    assert normalize_presentation(deck(layout="16x10")).layout == "16x10"
    assert normalize_presentation(deck(layout="4x3")).dimensions == Dimensions(10, 7.5)
    wide = normalize_presentation(deck(layout="WIDE")).dimensions
    assert (wide.width, wide.height) == (pytest.approx(13.3333, abs=1e-3), 7.5)
    custom = normalize_presentation(deck(layout={"width": 10, "height": 15}))
    assert custom.layout == CustomLayout(width=10, height=15)
    assert custom.dimensions == Dimensions(10, 15)


@pytest.mark.parametrize("layout", ["A4", {"width": 10}, {"width": -1, "height": 2}, 7])
def test_invalid_layouts(deck, layout):
    with pytest.raises(InvalidLayoutError):
        normalize_presentation(deck(layout=layout))


def test_slide_fields(node, deck):
    slide = node(
        "slide",
        {"backgroundColor": "black", "backgroundImage": "bg.png"},
        ["dropped", 12, node("text", {}, "kept")],
        hidden=True,
        notes="speaker notes",
        masterName="base",
    )
    master = node("master-slide", {"backgroundColor": "rgba(255, 255, 255, 0.9)"}, [node("text", {}, "m")], name="base")
    pres = normalize_presentation(deck(master, slide))
    (s,) = pres.slides
    assert s.background_color == "000000"
    assert s.background_image == ImageSource(kind="path", path="bg.png")
    assert s.hidden is True
    assert s.notes == "speaker notes"
    assert s.master_name == "base"
    assert len(s.objects) == 1
    assert pres.master_slides["base"].background_color == ComplexColor(color="FFFFFF", alpha=10)


def test_metadata_is_copied(deck):
    pres = normalize_presentation(deck(author="A. Author", company="ACME", revision="3", subject="S", title="T"))
    assert (pres.author, pres.company, pres.revision, pres.subject, pres.title) == ("A. Author", "ACME", "3", "S", "T")


def test_duplicate_master_names_overwrite(node, deck, caplog):
    first = node("master-slide", {"backgroundColor": "red"}, name="base")
    second = node("master-slide", {"backgroundColor": "blue"}, name="base")
    with caplog.at_level(logging.WARNING):
        pres = normalize_presentation(deck(first, second))
    assert list(pres.master_slides) == ["base"]
    assert pres.master_slides["base"].background_color == "0000FF"
    assert "overwrites" in caplog.text


def test_duplicate_master_names_can_fail(node, deck):
    first = node("master-slide", name="base")
    second = node("master-slide", name="base")
    with pytest.raises(DuplicateMasterSlideError):
        normalize_presentation(deck(first, second), NormalizeOptions(duplicate_master_names="error"))


def test_unknown_master_reference_is_logged(node, deck, caplog):
    with caplog.at_level(logging.WARNING):
        normalize_presentation(deck(node("slide", masterName="missing")))
    assert "unknown master slide 'missing'" in caplog.text


def test_missing_style_reports_location(node, square_deck):
    container = node("container", {"w": 1, "h": 1}, [node("image", src="a.png")])
    with pytest.raises(MissingStyleError) as exc:
        normalize_presentation(square_deck(container))
    assert exc.value.path == "$.children[0].children[0].children[0]"
    assert exc.value.kind == "image"


@pytest.mark.parametrize("bad", [{"kind": "video", "style": {}}, {"style": {}}, object()])
def test_unknown_kinds_raise(node, square_deck, bad):
    with pytest.raises(UnknownNodeKindError):
        normalize_presentation(square_deck(bad))


def test_root_must_be_presentation(node):
    with pytest.raises(UnknownNodeKindError):
        normalize_presentation(node("slide"))


def test_presentation_children_must_be_slides(node, deck):
    with pytest.raises(UnknownNodeKindError):
        normalize_presentation(deck(node("text", {}, "x")))


# ---------------------------------------------------------------------------
# Whole-tree properties
# ---------------------------------------------------------------------------


def _sample_deck(node, deck):
    flex = node(
        "flex",
        {"x": "5%", "y": "50%", "w": "90%", "h": "40%"},
        [node("text", {"w": "30%", "h": "100%", "color": "rgb(10, 20, 30)"}, "a"), node("image", {"w": "30%", "h": "50%"}, src="i.png")],
        direction="row",
        gap=0.2,
    )
    container = node(
        "container",
        {"x": "10%", "y": "10%", "w": "80%", "h": "30%", "backgroundColor": "rgba(0, 0, 255, 0.3)"},
        [node("shape", {"x": "50%", "y": "50%", "w": "50%", "h": "50%"}, type="rect"), flex],
        padding=[0.1, 0.2],
    )
    return deck(node("slide", children=[container, flex]), node("master-slide", children=[container], name="m"))


def _walk_strings(value):
    if isinstance(value, dict):
        for v in value.values():
            yield from _walk_strings(v)
    elif isinstance(value, list):
        for v in value:
            yield from _walk_strings(v)
    elif isinstance(value, str):
        yield value


def test_output_has_no_percentages(node, deck):
    data = to_dict(normalize_presentation(_sample_deck(node, deck)))
    assert not [s for s in _walk_strings(data) if s.endswith("%")]


def test_input_is_not_mutated_and_output_is_repeatable(node, deck):
    document = _sample_deck(node, deck)
    snapshot = copy.deepcopy(document)
    first = normalize_presentation(document)
    second = normalize_presentation(document)
    assert document == snapshot
    assert first == second
    assert first is not second


# ---------------------------------------------------------------------------
# Input hygiene
# ---------------------------------------------------------------------------


def test_table_margin_is_read_from_the_node(node, square_deck):
    table = node("table", {"w": 4, "h": 2}, rows=[["A"]], margin=[0.1, 0.2, 0.3, 0.4])
    (obj,) = _objects(normalize_presentation(square_deck(table)))
    assert obj.margin == (0.1, 0.2, 0.3, 0.4)


@pytest.mark.parametrize("hidden", ["false", 0, 1, "yes"])
def test_slide_hidden_must_be_boolean(node, deck, hidden):
    with pytest.raises(NormalizeError) as exc:
        normalize_presentation(deck(node("slide", children=[], hidden=hidden)))
    assert exc.value.path == "$.children[0].hidden"


def test_slide_hidden_false_is_kept(node, deck):
    (slide,) = normalize_presentation(deck(node("slide", children=[], hidden=False))).slides
    assert slide.hidden is False


def test_text_style_does_not_share_nested_values(node, square_deck):
    shadow = {"blur": 2, "offset": [1, 1]}
    text = node("text", {"w": 1, "h": 1, "shadow": shadow}, "t")
    (obj,) = _objects(normalize_presentation(square_deck(text)))
    assert obj.style["shadow"] == shadow
    assert obj.style["shadow"] is not shadow
    assert obj.style["shadow"]["offset"] is not shadow["offset"]


def test_percentage_with_trailing_newline_is_a_position_error(node, square_deck):
    text = node("text", {"x": "50%\n"}, "t")
    with pytest.raises(InvalidPositionError) as exc:
        normalize_presentation(square_deck(text))
    assert exc.value.path == "$.children[0].children[0].style.x"
