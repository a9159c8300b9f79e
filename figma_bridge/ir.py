#!/usr/bin/env python3
"""
Composition JSON → RenderNodeIR

1) normalize_composition(): 列挙値の大文字化・旧フォーマットの吸収・構造チェック (入力を直接書き換える)
2) composition_to_ir(): 可視ノードを IR に変換し、描画範囲・フォント・アセット一覧を集める

IR は素の dict:
  {id, kind, layout, style: {box_css, raw}, content, is_mask, name, type,
   svg_content, svg_file, text, effects_mode}
"""

import logging
import re
from typing import Dict, List, Optional

from .cssutil import js_num
from .errors import CompositionError
from .fonts import collect_fonts
from .layout import ALIGN_ITEMS_MAP, compute_layout, is_auto_layout, layout_axes
from .matrix import is_affine_2x3, mat_inv, mat_mul
from .node_style import node_box_css
from .paint import border_radius_css, collect_text_css, compute_effects_mode, parse_effects, render_text_segments
from .render_items import render_items_for_container
from .stroke import CssCollector

logger = logging.getLogger(__name__)

UPPER_FIELDS = (
    "type", "layoutMode", "layoutWrap", "layoutPositioning", "layoutAlign",
    "primaryAxisSizingMode", "counterAxisSizingMode",
    "primaryAxisAlignItems", "counterAxisAlignItems",
)
RECT_KEYS = ("x", "y", "width", "height")


def _is_num(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_rect(rect) -> bool:
    return isinstance(rect, dict) and all(_is_num(rect.get(k)) for k in RECT_KEYS)


def _upper(obj: Dict, key: str):
    if isinstance(obj, dict) and isinstance(obj.get(key), str):
        obj[key] = obj[key].upper()


def unwrap_payload(payload: Dict) -> Dict:
    """{"composition": {...}} でも composition そのものでも受け付ける"""
    if isinstance(payload, dict) and isinstance(payload.get("composition"), dict):
        return payload["composition"]
    if not isinstance(payload, dict):
        raise CompositionError("composition payload must be a JSON object")
    return payload


# ------------------------------------------------------------
# Normalization
# ------------------------------------------------------------

def normalize_node(node: Dict, top_level: bool = False):
    if not isinstance(node, dict):
        return

    # 旧フォーマットの bounds(kind=render) → renderBounds
    bounds = node.get("bounds")
    if not node.get("renderBounds") and _is_rect(bounds):
        if "kind" not in bounds or str(bounds.get("kind") or "").lower() == "render":
            node["renderBounds"] = {k: bounds[k] for k in RECT_KEYS}

    for key in UPPER_FIELDS:
        _upper(node, key)
    constraints = node.get("constraints")
    if isinstance(constraints, dict):
        _upper(constraints, "horizontal")
        _upper(constraints, "vertical")

    style = node.get("style")
    if isinstance(style, dict):
        for fill in style.get("fills") or []:
            _upper(fill, "type")
            _upper(fill, "scaleMode")
        # svg は描画内容に沿って影を落とす
        style["effectTarget"] = "content" if (node.get("svgContent") or node.get("svgId")) else "self"

    if not is_affine_2x3(node.get("absoluteTransform")):
        raise CompositionError(f"node {node.get('id', 'unknown')} has invalid absoluteTransform")

    if node.get("svgContent"):
        rb = node.get("renderBounds")
        if not _is_rect(rb):
            raise CompositionError(f"svg node {node.get('id')} is missing complete renderBounds")
        if not top_level and not node.get("absoluteRenderBounds"):
            raise CompositionError(f"nested svg node {node.get('id')} is missing absoluteRenderBounds")
        # Figma は svg の height を 0 にすることがある
        node["width"] = rb["width"]
        node["height"] = rb["height"]


def normalize_composition(composition: Dict) -> Dict:
    """入力を直接正規化して返す"""
    if not isinstance(composition, dict):
        raise CompositionError("composition must be an object")
    children = composition.get("children")
    if not isinstance(children, list):
        return composition

    for child in children:
        element = child.get("element") if isinstance(child, dict) else None
        if isinstance(element, dict):
            for key in RECT_KEYS:
                if not _is_num(child.get(key)) and _is_num(element.get(key)):
                    child[key] = element[key]

    stack = [(child, True) for child in reversed(children)]
    while stack:
        node, top_level = stack.pop()
        normalize_node(node, top_level)
        if isinstance(node, dict):
            stack.extend((ch, False) for ch in reversed(node.get("children") or []))

    for index, child in enumerate(children):
        if not _is_rect((child or {}).get("renderBounds")):
            raise CompositionError(f"child[{index}] is missing renderBounds")
    return composition


def validate_composition(composition: Dict):
    if not isinstance(composition, dict):
        raise CompositionError("invalid composition")
    bounds = composition.get("bounds")
    if not _is_rect(bounds) or bounds["width"] < 0 or bounds["height"] < 0:
        raise CompositionError("composition.bounds missing or invalid")
    origin = composition.get("absOrigin")
    if not isinstance(origin, dict) or not _is_num(origin.get("x")) or not _is_num(origin.get("y")):
        raise CompositionError("composition.absOrigin missing or invalid")
    children = composition.get("children")
    if not isinstance(children, list) or not children:
        raise CompositionError("composition has no children")


# ------------------------------------------------------------
# Style
# ------------------------------------------------------------

def collect_style(node: Dict, kind: str, collector: CssCollector,
                  inherited_shadows: Optional[List[Dict]], effects_mode: str) -> str:
    if kind != "frame":
        if not node.get("style"):
            box_css = ""
        else:
            box_css = node_box_css(node, collector, inherited_shadows=inherited_shadows or None)
        if kind == "text" and node.get("text"):
            text_css = collect_text_css(node)
            box_css += text_css["css"]
            if text_css["auto_width"]:
                box_css += "width:auto;"
            if text_css["auto_height"]:
                box_css += "height:auto;"
        return box_css

    if not node.get("style"):
        return ""
    inherit = effects_mode == "inherit"
    box_css = node_box_css(node, collector, suppress_effects=inherit)
    if inherit:
        # 影は子へ渡すが、ブラーはこのフレーム自身に残す
        effects = parse_effects(node)
        if effects["layer_blur"]:
            box_css += f"filter:blur({js_num(effects['layer_blur'] / 2)}px);"
        if effects["background_blur"]:
            blur = js_num(effects["background_blur"] / 2)
            box_css += f"backdrop-filter:blur({blur}px);-webkit-backdrop-filter:blur({blur}px);"
    return box_css


def build_raw_style(node: Dict) -> Optional[Dict]:
    style = node.get("style")
    if not style:
        return None
    weights = style.get("strokeWeights")
    if not weights and style.get("strokes"):
        weights = {"t": 0, "r": 0, "b": 0, "l": 0}
    return {
        "fills": style.get("fills"),
        "strokes": style.get("strokes"),
        "stroke_weights": weights,
        "stroke_align": style.get("strokeAlign"),
        "dash_pattern": style.get("dashPattern"),
        "effects": style.get("effects"),
        "opacity": style.get("opacity"),
        "blend_mode": style.get("blendMode"),
        "radii": style.get("radii"),
    }


def svg_file_name(node: Dict) -> Optional[str]:
    svg_id = node.get("svgId")
    if isinstance(svg_id, str) and svg_id:
        return re.sub(r"[^a-zA-Z0-9_-]", "_", svg_id) + ".svg"
    return None


# ------------------------------------------------------------
# Nodes
# ------------------------------------------------------------

def node_to_ir(node: Dict, parent_abs, collector: CssCollector,
               inherited_shadows: Optional[List[Dict]] = None, flex: Optional[Dict] = None) -> Dict:
    if not node:
        raise CompositionError("node_to_ir called without a node")
    if node.get("visible") is False:
        raise CompositionError(f"invisible node {node.get('id')} should have been filtered")

    flex = flex or {}
    kind, layout = compute_layout(
        node,
        parent_abs,
        as_flex_item=bool(flex),
        parent_axes=flex.get("parent_axes"),
        parent_align_items=flex.get("parent_align_items"),
        parent_wrap=flex.get("parent_wrap"),
    )
    mode = compute_effects_mode(node)
    box_css = collect_style(node, kind, collector, inherited_shadows, mode)
    content = build_content(node, kind, collector, inherited_shadows, mode)

    ir = {
        "id": str(node.get("id") or "unknown"),
        "kind": kind,
        "layout": layout,
        "style": {"box_css": box_css, "raw": build_raw_style(node)},
        "content": content,
        "effects_mode": mode,
        "name": node.get("name") or f"Unnamed {kind}",
        "type": node.get("type") or kind.upper(),
        "svg_content": node.get("svgContent"),
        "svg_file": svg_file_name(node),
        "text": node.get("text"),
    }
    if node.get("isMask") is True:
        ir["is_mask"] = True
    return ir


def build_content(node: Dict, kind: str, collector: CssCollector,
                  inherited_shadows: Optional[List[Dict]], effects_mode: str) -> Dict:
    if kind == "text":
        return {"type": "text", "html": render_text_segments(node.get("text"))}
    if kind == "svg" and node.get("svgContent"):
        return {"type": "svg", "svg": str(node["svgContent"])}
    if kind != "frame":
        return {"type": "empty"}

    children = node.get("children") or []
    parent_abs = node.get("absoluteTransform")
    if not children or not isinstance(parent_abs, list):
        return {"type": "children", "nodes": []}
    inv_parent = mat_inv(parent_abs)
    if inv_parent is None:
        raise CompositionError(f"transform of {node.get('id')} is not invertible")

    inherited = list(inherited_shadows or []) if effects_mode == "inherit" else []
    if effects_mode == "inherit":
        inherited += parse_effects(node)["shadows"]

    auto_layout = is_auto_layout(node)
    flex = {
        "parent_axes": layout_axes(node.get("layoutMode")),
        "parent_align_items": ALIGN_ITEMS_MAP.get(node.get("counterAxisAlignItems")),
        "parent_wrap": node.get("layoutWrap"),
    }

    nodes = []
    for item in render_items_for_container(node):
        if item["kind"] == "node":
            child = children[item["index"]]
            is_flex_item = auto_layout and child.get("layoutPositioning") != "ABSOLUTE"
            child_ir = node_to_ir(child, parent_abs, collector, inherited, flex if is_flex_item else None)
            if item["item_css"]:
                child_ir["style"]["box_css"] = item["item_css"] + child_ir["style"]["box_css"]
            nodes.append(child_ir)
        else:
            nodes.append(masked_group_to_ir(item, children, parent_abs, inv_parent, auto_layout,
                                            collector, inherited))
    return {"type": "children", "nodes": nodes}


def masked_group_to_ir(item: Dict, children: List[Dict], parent_abs, inv_parent, parent_auto_layout: bool,
                       collector: CssCollector, inherited: List[Dict]) -> Dict:
    """マスクノードをクリップ用フレームにし、被マスク兄弟をその子として並べる"""
    mask = children[item["mask_index"]]
    mask_abs = mask.get("absoluteTransform")
    if not isinstance(mask_abs, list):
        raise CompositionError(f"mask {mask.get('id')} is missing absoluteTransform")
    local = mat_mul(inv_parent, mask_abs)

    css = border_radius_css((mask.get("style") or {}).get("radii"))
    if mask.get("type") == "ELLIPSE":
        css += "border-radius:50%;overflow:hidden;"
    else:
        css += "overflow:hidden;"
    css += item["container_css"]

    in_flow = parent_auto_layout and mask.get("layoutPositioning") != "ABSOLUTE"
    layout = {
        "display": "block",
        "position": "relative" if in_flow else "absolute",
        "left": 0 if in_flow else local[0][2],
        "top": 0 if in_flow else local[1][2],
        "width": mask.get("width") if _is_num(mask.get("width")) else 0,
        "height": mask.get("height") if _is_num(mask.get("height")) else 0,
        "origin": "center" if in_flow else "top left",
        "transform2x2": {"a": local[0][0], "b": local[1][0], "c": local[0][1], "d": local[1][1]},
    }
    members = [children[i] for i in item["node_indices"]]
    return {
        "id": str(mask.get("id") or "mask"),
        "kind": "frame",
        "layout": layout,
        "style": {"box_css": css, "raw": None},
        "content": {"type": "children",
                    "nodes": [node_to_ir(ch, mask_abs, collector, inherited) for ch in members]},
        "is_mask": True,
        "name": mask.get("name") or "Mask Container",
        "type": mask.get("type") or "FRAME",
        "svg_content": mask.get("svgContent"),
        "svg_file": None,
        "text": mask.get("text"),
    }


# ------------------------------------------------------------
# Composition
# ------------------------------------------------------------

def render_union(children: List[Dict]) -> Dict:
    min_x = min_y = float("inf")
    max_x = max_y = float("-inf")
    for index, child in enumerate(children):
        rb = (child or {}).get("renderBounds")
        if not _is_rect(rb):
            raise CompositionError(f"child {index} is missing renderBounds")
        min_x = min(min_x, rb["x"])
        min_y = min(min_y, rb["y"])
        max_x = max(max_x, rb["x"] + rb["width"])
        max_y = max(max_y, rb["y"] + rb["height"])
    return {"x": min_x, "y": min_y, "width": max_x - min_x, "height": max_y - min_y}


def collect_image_ids(children: List[Dict]) -> List[str]:
    found = []
    stack = list(reversed(children))
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        for fill in (node.get("style") or {}).get("fills") or []:
            if not isinstance(fill, dict):
                continue
            image_id = fill.get("imageId")
            if str(fill.get("type") or "").upper() == "IMAGE" and isinstance(image_id, str) \
                    and image_id not in found:
                found.append(image_id)
        stack.extend(reversed(node.get("children") or []))
    return found


def iter_ir(nodes: List[Dict]):
    """IR ツリーを文書順に列挙 (明示スタック)"""
    stack = list(reversed(nodes))
    while stack:
        node = stack.pop()
        yield node
        content = node.get("content") or {}
        if content.get("type") == "children":
            stack.extend(reversed(content.get("nodes") or []))


def collect_svg_files(nodes: List[Dict]) -> List[str]:
    found = []
    for node in iter_ir(nodes):
        svg_file = node.get("svg_file")
        if node.get("kind") == "svg" and svg_file and svg_file.endswith(".svg") and svg_file not in found:
            found.append(svg_file)
    return found


def composition_to_ir(composition: Dict) -> Dict:
    """
    正規化済みコンポジションを IR に変換する。

    Returns:
        {nodes, css_rules, render_union, font_meta, asset_meta, raw_composition}
    """
    validate_composition(composition)
    origin = composition["absOrigin"]
    comp_abs = [[1, 0, origin["x"]], [0, 1, origin["y"]]]
    children = composition["children"]

    collector = CssCollector()
    nodes = [node_to_ir(child, comp_abs, collector) for child in children
             if child and child.get("visible") is not False]
    union = render_union(children)

    fonts = collect_fonts(composition)
    font_meta = {
        "google_fonts_url": fonts.google_fonts_url(),
        "fonts": [
            {"family": f["family"], "weights": sorted(f["weights"]), "styles": sorted(f["styles"])}
            for f in fonts.all_fonts()
        ],
    }
    asset_meta = {"images": collect_image_ids(children), "svgs": collect_svg_files(nodes)}
    logger.info("[IR] %d top-level nodes, %d images, %d svgs",
                len(nodes), len(asset_meta["images"]), len(asset_meta["svgs"]))
    return {
        "nodes": nodes,
        "css_rules": str(collector),
        "render_union": union,
        "font_meta": font_meta,
        "asset_meta": asset_meta,
        "raw_composition": composition,
    }
