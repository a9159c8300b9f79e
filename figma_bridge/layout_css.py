"""
LayoutInfo → CSS fragments

layout_to_css() never mutates the layout record; callers combine the four
fragments depending on render mode and wrapper presence.
"""

from typing import Dict

from .cssutil import fmt_px, js_num
from .matrix import is_identity_2x2


def _is_num(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def container_css(layout: Dict) -> str:
    parts = []
    if layout.get("display") == "flex":
        parts.append("display:flex;")
        if layout.get("flex_direction"):
            parts.append(f"flex-direction:{layout['flex_direction']};")
        if _is_num(layout.get("gap")):
            parts.append(f"gap:{fmt_px(layout['gap'])};")
        if layout.get("flex_wrap") == "wrap":
            parts.append("flex-wrap:wrap;")
        if _is_num(layout.get("row_gap")):
            parts.append(f"row-gap:{fmt_px(layout['row_gap'])};")
        if _is_num(layout.get("column_gap")):
            parts.append(f"column-gap:{fmt_px(layout['column_gap'])};")
        if layout.get("justify_content"):
            parts.append(f"justify-content:{layout['justify_content']};")
        if layout.get("align_items"):
            parts.append(f"align-items:{layout['align_items']};")
    else:
        parts.append("display:block;")

    padding = layout.get("padding")
    if padding:
        t, r, b, l = (padding.get(k) or 0 for k in ("t", "r", "b", "l"))
        if t or r or b or l:
            parts.append(f"padding:{js_num(t)}px {js_num(r)}px {js_num(b)}px {js_num(l)}px;")
    if layout.get("box_sizing"):
        parts.append(f"box-sizing:{layout['box_sizing']};")
    if layout.get("overflow") and layout["overflow"] != "visible":
        parts.append("overflow:hidden;")
    return "".join(parts)


def position_css(layout: Dict) -> str:
    pos = layout.get("position") or "absolute"
    css = f"position:{pos};"
    if pos == "absolute":
        left = layout.get("left") if _is_num(layout.get("left")) else 0
        top = layout.get("top") if _is_num(layout.get("top")) else 0
        css += f"left:{fmt_px(left)};top:{fmt_px(top)};"
    return css


def sizing_css(layout: Dict) -> str:
    parts = []
    width, height = layout.get("width"), layout.get("height")
    if _is_num(width):
        parts.append(f"width:{fmt_px(width)};")
    if _is_num(height):
        parts.append(f"height:{fmt_px(height)};")

    grow = layout.get("flex_grow")
    shrink = layout.get("flex_shrink")
    if _is_num(grow) and grow > 0:
        parts.append(f"flex-grow:{js_num(grow)};")
        if _is_num(shrink) and shrink == 0:
            parts.append("flex-shrink:0;")
        basis = layout.get("flex_basis")
        parts.append(f"flex-basis:{fmt_px(basis) if _is_num(basis) else (basis or '0')};")
        parts.append("min-width:0;min-height:0;")
    elif _is_num(shrink) and shrink == 0:
        parts.append("flex-shrink:0;")

    align_self = layout.get("align_self")
    if align_self and align_self != "auto":
        parts.append(f"align-self:{align_self};")
    return "".join(parts)


def transform_css(layout: Dict) -> str:
    # translation is carried by left/top, so only the 2x2 part is emitted
    t2 = layout.get("transform2x2") or {}
    css = f"transform-origin:{layout.get('origin') or 'top left'};"
    if not is_identity_2x2(t2):
        css += "transform:matrix({},{},{},{},0,0);".format(
            js_num(t2.get("a", 1)), js_num(t2.get("b", 0)), js_num(t2.get("c", 0)), js_num(t2.get("d", 1))
        )
    return css


def layout_to_css(layout: Dict) -> Dict[str, str]:
    """Return the container / position / sizing / transform fragments for one layout."""
    return {
        "container": container_css(layout),
        "position": position_css(layout),
        "sizing": sizing_css(layout),
        "transform": transform_css(layout),
    }
