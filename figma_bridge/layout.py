"""
ノード → LayoutInfo

absoluteTransform を親の逆行列で局所座標に落とし、位置 / サイズ / 2x2 変換を決める。
オートレイアウトの子 (flex item) は relative、それ以外は absolute。
"""

from typing import Dict, List, Optional

from .errors import CompositionError
from .matrix import Matrix, has_reflection, has_rotation, mat_apply, mat_inv, mat_mul

CONTAINER_TYPES = ("FRAME", "INSTANCE", "COMPONENT", "COMPONENT_SET", "GROUP")

AXES = {
    "HORIZONTAL": {"main": "width", "cross": "height"},
    "VERTICAL": {"main": "height", "cross": "width"},
}
DEFAULT_AXES = {"main": "width", "cross": "height"}

JUSTIFY_MAP = {"MIN": "flex-start", "CENTER": "center", "MAX": "flex-end", "SPACE_BETWEEN": "space-between"}
ALIGN_ITEMS_MAP = {"MIN": "flex-start", "CENTER": "center", "MAX": "flex-end", "BASELINE": "baseline", "STRETCH": "stretch"}
ALIGN_SELF_MAP = {"INHERIT": "auto", "MIN": "flex-start", "CENTER": "center", "MAX": "flex-end", "STRETCH": "stretch"}

# svg の renderBounds と設計サイズのずれ許容量
WRAPPER_EPS = 1e-2
IDENTITY_EPS = 1e-6


def _up(value) -> str:
    return value.upper() if isinstance(value, str) else ""


def _number(value, default=0):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return default


def is_auto_layout(node: Dict) -> bool:
    return _up(node.get("layoutMode")) in AXES


def layout_axes(mode) -> Dict[str, str]:
    return AXES.get(_up(mode), DEFAULT_AXES)


def determine_kind(node: Dict) -> str:
    if node.get("svgContent") or node.get("svgId"):
        return "svg"
    if node.get("type") == "TEXT" and node.get("text"):
        return "text"
    if node.get("type") in CONTAINER_TYPES:
        return "frame"
    return "shape"


def _node_size(node: Dict):
    return _number(node.get("width")), _number(node.get("height"))


def _default_base(node: Dict, local: Matrix) -> Dict:
    w, h = _node_size(node)
    return {
        "left": local[0][2],
        "top": local[1][2],
        "width": w,
        "height": h,
        "t2": {"a": local[0][0], "b": local[1][0], "c": local[0][1], "d": local[1][1]},
    }


def _svg_base(node: Dict, parent_abs: Matrix) -> Dict:
    """svg は回転込みで焼かれた renderBounds を使い、親の回転 / 拡大だけ打ち消す"""
    rb = node.get("renderBounds")
    arb = node.get("absoluteRenderBounds")
    if not rb:
        raise CompositionError(f"svg node {node.get('id')} is missing renderBounds")
    if not arb:
        return {"left": rb["x"], "top": rb["y"], "width": rb["width"], "height": rb["height"],
                "t2": {"a": 1, "b": 0, "c": 0, "d": 1}}

    inv_parent = mat_inv(parent_abs)
    if inv_parent is None:
        raise CompositionError(f"parent transform of {node.get('id')} is not invertible")
    x, y = mat_apply(inv_parent, arb["x"], arb["y"])
    a, c = inv_parent[0][0], inv_parent[0][1]
    b, d = inv_parent[1][0], inv_parent[1][1]
    parent_identity = (abs(a - 1) < IDENTITY_EPS and abs(b) < IDENTITY_EPS
                       and abs(c) < IDENTITY_EPS and abs(d - 1) < IDENTITY_EPS)
    t2 = {"a": 1, "b": 0, "c": 0, "d": 1} if parent_identity else {"a": a, "b": b, "c": c, "d": d}
    return {"left": x, "top": y, "width": rb["width"], "height": rb["height"], "t2": t2}


def is_stretch(layout_align, parent_align_items: Optional[str]) -> bool:
    la = _up(layout_align)
    return la == "STRETCH" or (la == "INHERIT" and parent_align_items == "stretch")


def apply_container_semantics(node: Dict, layout: Dict):
    """オートレイアウト (display:flex) / padding / clip / wrapper の中央寄せ方法"""
    has_wrapper = "wrapper" in layout
    mode = _up(node.get("layoutMode")) or "NONE"
    if mode in AXES:
        layout["display"] = "flex"
        layout["flex_direction"] = "row" if mode == "HORIZONTAL" else "column"
        jc = JUSTIFY_MAP.get(_up(node.get("primaryAxisAlignItems")))
        if jc:
            layout["justify_content"] = jc
        spacing = _number(node.get("itemSpacing"))
        if jc != "space-between" and spacing > 0:
            layout["gap"] = spacing
        if _up(node.get("layoutWrap")) == "WRAP":
            layout["flex_wrap"] = "wrap"
            cas = _number(node.get("counterAxisSpacing"))
            if cas > 0:
                layout["row_gap" if mode == "HORIZONTAL" else "column_gap"] = cas
        else:
            layout["flex_wrap"] = "nowrap"
        ai = ALIGN_ITEMS_MAP.get(_up(node.get("counterAxisAlignItems")))
        if ai:
            layout["align_items"] = ai

        has_flow_children = any(
            isinstance(ch, dict) and ch.get("visible") is not False
            and _up(ch.get("layoutPositioning")) != "ABSOLUTE"
            for ch in node.get("children") or []
        )
        # wrapper があるときは外側で場所を確保済みなので auto にしない
        if has_flow_children and not has_wrapper:
            axes = AXES[mode]
            if _up(node.get("primaryAxisSizingMode")) == "AUTO":
                layout[axes["main"]] = "auto"
            if _up(node.get("counterAxisSizingMode")) == "AUTO":
                layout[axes["cross"]] = "auto"
    else:
        layout["display"] = "block"

    padding = {k: _number(node.get(f"padding{side}")) for k, side in
               (("t", "Top"), ("r", "Right"), ("b", "Bottom"), ("l", "Left"))}
    if any(padding.values()):
        layout["padding"] = padding
    if node.get("strokesIncludedInLayout"):
        layout["box_sizing"] = "border-box"
    if node.get("clipsContent"):
        layout["overflow"] = "hidden"

    if has_wrapper:
        t = layout.get("transform2x2") or {}
        has_transform = not (t.get("a") == 1 and t.get("b") == 0 and t.get("c") == 0 and t.get("d") == 1)
        # inset + margin:auto は変換が無いときだけ安全
        strategy = "inset" if layout["display"] == "flex" and not has_transform else "translate"
        layout["wrapper"]["center_strategy"] = strategy


def compute_layout(node: Dict, parent_abs: Matrix, as_flex_item: bool = False,
                   parent_axes: Optional[Dict] = None, parent_align_items: Optional[str] = None,
                   parent_wrap: Optional[str] = None):
    """Returns (kind, layout)."""
    if not node:
        raise CompositionError("compute_layout called without a node")
    kind = determine_kind(node)
    abs_t = node.get("absoluteTransform")
    if not isinstance(abs_t, list):
        raise CompositionError(f"node {node.get('id')} is missing absoluteTransform")
    inv_parent = mat_inv(parent_abs)
    if inv_parent is None:
        raise CompositionError(f"parent transform of {node.get('id')} is not invertible")
    local = mat_mul(inv_parent, abs_t)

    base = _svg_base(node, parent_abs) if kind == "svg" else _default_base(node, local)
    wrapper = None
    layout = {
        "display": "block",
        "position": "relative" if as_flex_item else "absolute",
        "left": base["left"],
        "top": base["top"],
        "width": base["width"],
        "height": base["height"],
        "origin": "top left",
        "transform2x2": dict(base["t2"]),
    }

    if as_flex_item:
        w, h = _node_size(node)
        layout["left"] = 0
        layout["top"] = 0
        layout["origin"] = "center"
        if kind == "svg":
            # 焼き込み済み renderBounds が設計サイズと違うときだけ包む
            layout["width"], layout["height"] = w, h
            if abs(base["width"] - w) > WRAPPER_EPS or abs(base["height"] - h) > WRAPPER_EPS:
                wrapper = {"content_width": base["width"], "content_height": base["height"]}
        else:
            reserve_w, reserve_h = w, h
            if has_rotation(local) or has_reflection(local):
                # 回転した子は AABB 分の場所を取り、内側は元サイズのまま回す
                a, c = local[0][0], local[0][1]
                b, d = local[1][0], local[1][1]
                reserve_w = abs(a) * w + abs(c) * h
                reserve_h = abs(b) * w + abs(d) * h
            layout["width"], layout["height"] = reserve_w, reserve_h
            if reserve_w != w or reserve_h != h:
                wrapper = {"content_width": w, "content_height": h}

        grow = _number(node.get("layoutGrow"))
        layout["flex_grow"] = grow
        layout["flex_shrink"] = 1 if grow > 0 else 0
        if grow > 0:
            if _up(parent_wrap) == "WRAP" or node.get("type") == "TEXT":
                layout["flex_basis"] = "auto"
            else:
                layout["flex_basis"] = 0
        align_self = ALIGN_SELF_MAP.get(_up(node.get("layoutAlign")))
        if align_self:
            layout["align_self"] = align_self

        if is_stretch(node.get("layoutAlign") or "AUTO", parent_align_items):
            axes = parent_axes or DEFAULT_AXES
            if kind == "text":
                # テキストのサイズは textAutoResize に従う
                auto_resize = _up((node.get("text") or {}).get("textAutoResize"))
                if axes["cross"] == "width":
                    if auto_resize in ("WIDTH", "WIDTH_AND_HEIGHT"):
                        layout["width"] = "auto"
                elif auto_resize in ("HEIGHT", "WIDTH_AND_HEIGHT"):
                    layout["height"] = "auto"
            else:
                layout[axes["cross"]] = "auto"

    if wrapper:
        layout["wrapper"] = wrapper
        if kind != "frame":
            wrapper["center_strategy"] = "translate"
    if kind == "frame":
        apply_container_semantics(node, layout)
    return kind, layout
