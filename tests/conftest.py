"""
Shared fixtures: small composition builders.

Nodes mirror what the plugin exports (camelCase fields, absoluteTransform as
[[a, c, e], [b, d, f]], renderBounds in composition space).
"""

import copy

import pytest


def solid(r, g, b, a=1, **extra):
    fill = {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}}
    fill.update(extra)
    return fill


def build_node(node_id, node_type="RECTANGLE", x=0, y=0, w=100, h=50, name=None, **extra):
    node = {
        "id": node_id,
        "name": name or node_id,
        "type": node_type,
        "x": x,
        "y": y,
        "width": w,
        "height": h,
        "absoluteTransform": [[1, 0, x], [0, 1, y]],
        "renderBounds": {"x": x, "y": y, "width": w, "height": h},
        "style": {},
    }
    node.update(extra)
    return node


def build_composition(children, width=400, height=300):
    return {
        "bounds": {"x": 0, "y": 0, "width": width, "height": height},
        "absOrigin": {"x": 0, "y": 0},
        "children": children,
    }


@pytest.fixture
def make_node():
    return build_node


@pytest.fixture
def make_composition():
    return build_composition


@pytest.fixture
def make_solid():
    return solid


@pytest.fixture
def card_composition():
    """Horizontal auto-layout card at (20, 30) holding a text and a badge."""
    title = build_node(
        "2:1", "TEXT", x=36, y=46, w=60, h=20, name="Title",
        text={
            "characters": "Hello",
            "textAutoResize": "WIDTH_AND_HEIGHT",
            "segments": [{
                "start": 0,
                "end": 5,
                "fontSize": 16,
                "fontName": {"family": "Inter", "style": "Bold"},
                "fills": [solid(0, 0, 0)],
            }],
        },
    )
    badge = build_node("2:2", "RECTANGLE", x=104, y=46, w=24, h=24, name="Badge",
                       style={"fills": [solid(1, 0, 0)]})
    card = build_node(
        "1:1", "FRAME", x=20, y=30, w=200, h=80, name="Card",
        layoutMode="HORIZONTAL",
        primaryAxisSizingMode="FIXED",
        counterAxisSizingMode="FIXED",
        counterAxisAlignItems="CENTER",
        itemSpacing=8,
        paddingTop=16, paddingRight=16, paddingBottom=16, paddingLeft=16,
        style={"fills": [solid(1, 1, 1)], "radii": {"uniform": 8}},
        children=[title, badge],
    )
    return build_composition([card])


@pytest.fixture
def card_payload(card_composition):
    return {"composition": copy.deepcopy(card_composition)}


def ir_node(node_id, kind="shape", box_css="", name="Badge", node_type="RECTANGLE",
            left=0, top=0, w=10, h=10, position="absolute", children=None, **extra):
    """Hand-built IR node (skips the composition stage)."""
    layout = {
        "display": "block",
        "position": position,
        "left": left,
        "top": top,
        "width": w,
        "height": h,
        "origin": "top left",
        "transform2x2": {"a": 1, "b": 0, "c": 0, "d": 1},
    }
    layout.update(extra.pop("layout", {}))
    if children is not None:
        content = {"type": "children", "nodes": children}
    else:
        content = {"type": "empty"}
    node = {
        "id": node_id,
        "kind": kind,
        "layout": layout,
        "style": {"box_css": box_css, "raw": None},
        "content": content,
        "effects_mode": "self",
        "name": name,
        "type": node_type,
        "svg_content": None,
        "svg_file": None,
        "text": None,
    }
    node.update(extra)
    return node


@pytest.fixture
def make_ir():
    return ir_node
