"""
Tests for composition normalization and IR construction.

Covers:
- normalize_composition(): enum upper-casing, legacy bounds, svg sizing, structural errors
- composition_to_ir(): node kinds, hidden nodes, fonts / assets / render union
- mask groups, effect inheritance, flex items, stroke pseudo rules
- iter_ir(): document order traversal

Run with: pytest tests/test_ir.py -v
"""

import pytest

from figma_bridge.errors import CompositionError
from figma_bridge.ir import (
    collect_image_ids,
    composition_to_ir,
    iter_ir,
    normalize_composition,
    render_union,
    unwrap_payload,
)

SVG = '<svg viewBox="0 0 12 12"><path d="M0 0L12 12"/></svg>'
SHADOW = {"type": "DROP_SHADOW", "offset": {"x": 0, "y": 4}, "radius": 8,
          "color": {"r": 0, "g": 0, "b": 0, "a": 0.25}}


def _build(composition):
    return composition_to_ir(normalize_composition(composition))


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

class TestNormalizeComposition:
    def test_upper_cases_enums(self, make_node, make_composition):
        node = make_node("1:1", "frame", layoutMode="horizontal", style={"fills": [{"type": "solid"}]})
        comp = normalize_composition(make_composition([node]))
        child = comp["children"][0]
        assert child["type"] == "FRAME"
        assert child["layoutMode"] == "HORIZONTAL"
        assert child["style"]["fills"][0]["type"] == "SOLID"
        assert child["style"]["effectTarget"] == "self"

    def test_legacy_bounds_become_render_bounds(self, make_node, make_composition):
        node = make_node("1:1")
        del node["renderBounds"]
        node["bounds"] = {"x": 1, "y": 2, "width": 3, "height": 4, "kind": "render"}
        comp = normalize_composition(make_composition([node]))
        assert comp["children"][0]["renderBounds"] == {"x": 1, "y": 2, "width": 3, "height": 4}

    def test_element_fields_fill_missing_position(self, make_node, make_composition):
        node = make_node("1:1")
        del node["x"]
        node["element"] = {"x": 5}
        comp = normalize_composition(make_composition([node]))
        assert comp["children"][0]["x"] == 5

    def test_svg_takes_render_bounds_size(self, make_node, make_composition):
        node = make_node("1:5", "VECTOR", w=12, h=0, svgId="1:5", svgContent=SVG,
                         renderBounds={"x": 0, "y": 0, "width": 12, "height": 12})
        comp = normalize_composition(make_composition([node]))
        child = comp["children"][0]
        assert (child["width"], child["height"]) == (12, 12)
        assert child["style"]["effectTarget"] == "content"

    def test_invalid_transform(self, make_node, make_composition):
        node = make_node("1:1", absoluteTransform=[[1, 0], [0, 1]])
        with pytest.raises(CompositionError):
            normalize_composition(make_composition([node]))

    def test_nested_svg_needs_absolute_render_bounds(self, make_node, make_composition):
        svg = make_node("1:5", "VECTOR", svgId="1:5", svgContent=SVG)
        frame = make_node("1:1", "FRAME", children=[svg])
        with pytest.raises(CompositionError):
            normalize_composition(make_composition([frame]))

    def test_top_level_child_needs_render_bounds(self, make_node, make_composition):
        node = make_node("1:1")
        del node["renderBounds"]
        with pytest.raises(CompositionError):
            normalize_composition(make_composition([node]))

    def test_unwrap_payload(self, make_composition):
        comp = make_composition([])
        assert unwrap_payload({"composition": comp}) is comp
        assert unwrap_payload(comp) is comp
        with pytest.raises(CompositionError):
            unwrap_payload(["not", "a", "dict"])


# ---------------------------------------------------------------------------
# IR
# ---------------------------------------------------------------------------

class TestCompositionToIr:
    def test_errors_are_value_errors(self, make_composition):
        with pytest.raises(ValueError):
            composition_to_ir(make_composition([]))

    def test_missing_bounds(self, make_node):
        with pytest.raises(CompositionError):
            composition_to_ir({"absOrigin": {"x": 0, "y": 0}, "children": [make_node("1:1")]})

    def test_kinds_fonts_and_assets(self, make_node, make_composition):
        text = make_node("2:1", "TEXT", x=10, y=10, w=50, h=20, text={
            "characters": "Hi",
            "segments": [{"start": 0, "end": 2, "fontSize": 14,
                          "fontName": {"family": "Noto Sans JP", "style": "Regular"}}],
        })
        frame = make_node("1:1", "FRAME", children=[text])
        svg = make_node("1:5", "VECTOR", x=200, y=10, w=12, h=0, svgId="1:5", svgContent=SVG,
                        renderBounds={"x": 200, "y": 10, "width": 12, "height": 12})
        rect = make_node("1:6", x=0, y=100, w=30, h=30,
                         style={"fills": [{"type": "IMAGE", "imageId": "img1"}, {"type": "IMAGE", "imageId": "img1"}]})
        ir = _build(make_composition([frame, svg, rect]))

        assert [n["kind"] for n in ir["nodes"]] == ["frame", "svg", "shape"]
        assert ir["nodes"][0]["content"]["nodes"][0]["kind"] == "text"
        svg_ir = ir["nodes"][1]
        assert svg_ir["svg_file"] == "1_5.svg"
        assert svg_ir["content"] == {"type": "svg", "svg": SVG}
        assert (svg_ir["layout"]["width"], svg_ir["layout"]["height"]) == (12, 12)

        assert ir["render_union"] == {"x": 0, "y": 0, "width": 212, "height": 130}
        assert ir["asset_meta"] == {"images": ["img1"], "svgs": ["1_5.svg"]}
        assert ir["font_meta"]["fonts"] == [{"family": "Noto Sans JP", "weights": [400], "styles": ["Regular"]}]
        assert "family=Noto+Sans+JP:wght@" in ir["font_meta"]["google_fonts_url"]

    def test_hidden_top_level_nodes_are_skipped(self, make_node, make_composition):
        ir = _build(make_composition([make_node("1:1"), make_node("1:2", visible=False)]))
        assert [n["id"] for n in ir["nodes"]] == ["1:1"]

    def test_flex_children(self, card_composition):
        ir = _build(card_composition)
        card = ir["nodes"][0]
        assert card["layout"]["display"] == "flex"
        title, badge = card["content"]["nodes"]
        assert title["layout"]["position"] == "relative"
        assert "white-space:pre;" in title["style"]["box_css"]
        assert title["style"]["box_css"].endswith("width:auto;height:auto;")
        assert badge["style"]["box_css"] == "background:rgb(255,0,0);"

    def test_mask_group(self, make_node, make_composition):
        mask = make_node("m", x=10, y=10, w=50, h=50, isMask=True)
        group = make_node("1:1", "GROUP", children=[make_node("c"), mask, make_node("a"), make_node("d", masked=False)])
        ir = _build(make_composition([group]))
        c_ir, mask_ir = ir["nodes"][0]["content"]["nodes"]
        assert mask_ir["is_mask"] is True
        assert mask_ir["kind"] == "frame"
        assert mask_ir["style"]["box_css"] == "overflow:hidden;z-index:2;"
        assert (mask_ir["layout"]["left"], mask_ir["layout"]["top"]) == (10, 10)
        assert [n["id"] for n in mask_ir["content"]["nodes"]] == ["a", "d"]
        assert c_ir["id"] == "c"
        assert c_ir["style"]["box_css"].startswith("z-index:1;")

    def test_shadow_only_frame_passes_shadow_to_children(self, make_node, make_composition, make_solid):
        child = make_node("2:1", style={"fills": [make_solid(1, 0, 0)]})
        frame = make_node("1:1", "FRAME", style={"effects": [SHADOW]}, children=[child])
        ir = _build(make_composition([frame]))
        frame_ir = ir["nodes"][0]
        assert frame_ir["effects_mode"] == "inherit"
        assert "shadow" not in frame_ir["style"]["box_css"]
        child_css = frame_ir["content"]["nodes"][0]["style"]["box_css"]
        assert "filter:drop-shadow(0px 4px 8px rgba(0,0,0,0.25));" in child_css

    def test_dashed_stroke_goes_to_css_rules(self, make_node, make_composition, make_solid):
        rect = make_node("1:9", style={
            "strokes": [make_solid(0, 0, 0)],
            "strokeWeights": {"t": 1, "r": 1, "b": 1, "l": 1},
            "strokeAlign": "INSIDE",
            "dashPattern": [4, 2],
        })
        ir = _build(make_composition([rect]))
        assert '[data-layer-id="1:9"]::before' in ir["css_rules"]
        assert "border:1px dashed rgb(0,0,0)" in ir["css_rules"]
        assert ir["nodes"][0]["style"]["raw"]["stroke_weights"] == {"t": 1, "r": 1, "b": 1, "l": 1}


class TestHelpers:
    def test_render_union_requires_bounds(self):
        with pytest.raises(CompositionError):
            render_union([{"id": "x"}])

    def test_collect_image_ids_nested(self):
        children = [{"style": {"fills": [{"type": "IMAGE", "imageId": "a"}]},
                     "children": [{"style": {"fills": [{"type": "IMAGE", "imageId": "b"}]}}]}]
        assert collect_image_ids(children) == ["a", "b"]

    def test_iter_ir_document_order(self, make_ir):
        tree = [make_ir("1", kind="frame", children=[make_ir("1.1"), make_ir("1.2")]), make_ir("2")]
        assert [n["id"] for n in iter_ir(tree)] == ["1", "1.1", "1.2", "2"]
