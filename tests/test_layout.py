"""
Tests for node → LayoutInfo.

Covers:
- determine_kind(): svg / text / frame / shape
- compute_layout(): local offsets, flex item sizing, rotated items reserving their AABB
- stretch and grow handling for flex items
- apply_container_semantics(): flex container fields, auto sizing, wrapper centering

Run with: pytest tests/test_layout.py -v
"""

import pytest

from figma_bridge.errors import CompositionError
from figma_bridge.layout import compute_layout, determine_kind, layout_axes

ORIGIN = [[1, 0, 0], [0, 1, 0]]


# ---------------------------------------------------------------------------
# Kind
# ---------------------------------------------------------------------------

class TestDetermineKind:
    def test_kinds(self):
        assert determine_kind({"type": "VECTOR", "svgId": "1:2"}) == "svg"
        assert determine_kind({"type": "TEXT", "text": {"characters": "a"}}) == "text"
        assert determine_kind({"type": "GROUP"}) == "frame"
        assert determine_kind({"type": "ELLIPSE"}) == "shape"

    def test_text_without_payload_is_shape(self):
        assert determine_kind({"type": "TEXT"}) == "shape"


# ---------------------------------------------------------------------------
# Absolute children
# ---------------------------------------------------------------------------

class TestAbsoluteLayout:
    def test_offsets_are_local_to_parent(self, make_node):
        node = make_node("1:2", x=50, y=70, w=10, h=20)
        parent = [[1, 0, 40], [0, 1, 60]]
        kind, layout = compute_layout(node, parent)
        assert kind == "shape"
        assert layout["position"] == "absolute"
        assert (layout["left"], layout["top"]) == (10, 10)
        assert (layout["width"], layout["height"]) == (10, 20)
        assert layout["origin"] == "top left"
        assert layout["transform2x2"] == {"a": 1, "b": 0, "c": 0, "d": 1}
        assert "wrapper" not in layout

    def test_missing_transform_raises(self):
        with pytest.raises(CompositionError):
            compute_layout({"id": "x", "type": "RECTANGLE"}, ORIGIN)

    def test_singular_parent_raises(self, make_node):
        with pytest.raises(CompositionError):
            compute_layout(make_node("1:2"), [[0, 0, 0], [0, 0, 0]])


# ---------------------------------------------------------------------------
# Flex items
# ---------------------------------------------------------------------------

class TestFlexItems:
    def test_plain_item(self, make_node):
        _, layout = compute_layout(make_node("1:2", x=30, y=40), ORIGIN, as_flex_item=True,
                                   parent_axes=layout_axes("HORIZONTAL"))
        assert layout["position"] == "relative"
        assert (layout["left"], layout["top"]) == (0, 0)
        assert layout["origin"] == "center"
        assert layout["flex_grow"] == 0
        assert layout["flex_shrink"] == 0

    def test_rotated_item_reserves_bounding_box(self, make_node):
        node = make_node("1:2", w=100, h=50)
        node["absoluteTransform"] = [[0, -1, 0], [1, 0, 0]]
        _, layout = compute_layout(node, ORIGIN, as_flex_item=True, parent_axes=layout_axes("HORIZONTAL"))
        assert (layout["width"], layout["height"]) == (50, 100)
        assert layout["wrapper"] == {"content_width": 100, "content_height": 50, "center_strategy": "translate"}

    def test_grow(self, make_node):
        node = make_node("1:2", layoutGrow=1)
        _, layout = compute_layout(node, ORIGIN, as_flex_item=True)
        assert layout["flex_grow"] == 1
        assert layout["flex_shrink"] == 1
        assert layout["flex_basis"] == 0

    def test_grow_text_uses_auto_basis(self, make_node):
        node = make_node("1:2", "TEXT", layoutGrow=1, text={"characters": "hi"})
        _, layout = compute_layout(node, ORIGIN, as_flex_item=True)
        assert layout["flex_basis"] == "auto"

    def test_stretch_sets_cross_axis_auto(self, make_node):
        node = make_node("1:2", layoutAlign="STRETCH")
        _, layout = compute_layout(node, ORIGIN, as_flex_item=True, parent_axes=layout_axes("HORIZONTAL"))
        assert layout["align_self"] == "stretch"
        assert layout["height"] == "auto"
        assert layout["width"] == 100

    def test_inherited_stretch_in_column(self, make_node):
        node = make_node("1:2", layoutAlign="INHERIT")
        _, layout = compute_layout(node, ORIGIN, as_flex_item=True, parent_axes=layout_axes("VERTICAL"),
                                   parent_align_items="stretch")
        assert layout["width"] == "auto"
        assert layout["align_self"] == "auto"

    def test_stretched_text_follows_auto_resize(self, make_node):
        node = make_node("1:2", "TEXT", layoutAlign="STRETCH", text={"characters": "hi", "textAutoResize": "HEIGHT"})
        _, layout = compute_layout(node, ORIGIN, as_flex_item=True, parent_axes=layout_axes("HORIZONTAL"))
        assert layout["height"] == "auto"
        assert layout["width"] == 100


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

class TestContainerSemantics:
    def test_auto_layout_frame(self, make_node):
        frame = make_node(
            "1:1", "FRAME",
            layoutMode="VERTICAL",
            primaryAxisAlignItems="CENTER",
            counterAxisAlignItems="MAX",
            itemSpacing=12,
            paddingTop=4, paddingLeft=8,
            clipsContent=True,
            strokesIncludedInLayout=True,
        )
        kind, layout = compute_layout(frame, ORIGIN)
        assert kind == "frame"
        assert layout["display"] == "flex"
        assert layout["flex_direction"] == "column"
        assert layout["justify_content"] == "center"
        assert layout["align_items"] == "flex-end"
        assert layout["gap"] == 12
        assert layout["flex_wrap"] == "nowrap"
        assert layout["padding"] == {"t": 4, "r": 0, "b": 0, "l": 8}
        assert layout["overflow"] == "hidden"
        assert layout["box_sizing"] == "border-box"

    def test_space_between_has_no_gap(self, make_node):
        frame = make_node("1:1", "FRAME", layoutMode="HORIZONTAL", primaryAxisAlignItems="SPACE_BETWEEN",
                          itemSpacing=10)
        _, layout = compute_layout(frame, ORIGIN)
        assert layout["justify_content"] == "space-between"
        assert "gap" not in layout

    def test_wrap_counter_axis_spacing(self, make_node):
        frame = make_node("1:1", "FRAME", layoutMode="HORIZONTAL", layoutWrap="WRAP", counterAxisSpacing=6)
        _, layout = compute_layout(frame, ORIGIN)
        assert layout["flex_wrap"] == "wrap"
        assert layout["row_gap"] == 6

    def test_hug_contents_becomes_auto(self, make_node):
        child = make_node("1:2")
        frame = make_node("1:1", "FRAME", layoutMode="HORIZONTAL", primaryAxisSizingMode="AUTO",
                          counterAxisSizingMode="FIXED", children=[child])
        _, layout = compute_layout(frame, ORIGIN)
        assert layout["width"] == "auto"
        assert layout["height"] == 50

    def test_hug_without_flow_children_keeps_size(self, make_node):
        child = make_node("1:2", layoutPositioning="ABSOLUTE")
        frame = make_node("1:1", "FRAME", layoutMode="HORIZONTAL", primaryAxisSizingMode="AUTO", children=[child])
        _, layout = compute_layout(frame, ORIGIN)
        assert layout["width"] == 100

    def test_rotated_flex_frame_uses_translate(self, make_node):
        frame = make_node("1:1", "FRAME", w=100, h=50, layoutMode="HORIZONTAL")
        frame["absoluteTransform"] = [[0, -1, 0], [1, 0, 0]]
        _, layout = compute_layout(frame, ORIGIN, as_flex_item=True, parent_axes=layout_axes("HORIZONTAL"))
        assert layout["wrapper"]["center_strategy"] == "translate"

    def test_plain_frame_is_block(self, make_node):
        _, layout = compute_layout(make_node("1:1", "FRAME"), ORIGIN)
        assert layout["display"] == "block"
