"""ノード 1 つ分の見た目 CSS (背景 + エフェクト + 線 + 角丸 + opacity + blend)"""

from typing import Dict, List, Optional

from .cssutil import js_num
from .paint import (
    blend_mode_css,
    border_radius_css,
    collect_paint_css,
    effect_tokens,
    format_tokens,
    merge_inherited,
    parse_effects,
)
from .stroke import CssCollector, collect_stroke_style


def node_box_css(node: Dict, collector: CssCollector, host_selector: Optional[str] = None,
                 suppress_effects: bool = False, inherited_shadows: Optional[List[Dict]] = None) -> str:
    if not node:
        return ""
    style = node.get("style") or {}
    is_text = node.get("type") == "TEXT"
    is_svg = bool(node.get("svgId") or node.get("svgContent"))

    paint_css = "" if is_svg else collect_paint_css(node, is_text)
    effects = {"shadows": []} if suppress_effects else parse_effects(node)

    radius_css = border_radius_css(style.get("radii"))
    # svg 化されていない楕円は角丸で円を保つ
    if not is_svg and node.get("type") == "ELLIPSE" and "border-radius" not in radius_css:
        radius_css += "border-radius:50%;overflow:hidden;"

    stroke = collect_stroke_style(node, collector, host_selector, effects)

    tokens = effect_tokens(effects, style.get("effectTarget") or "self", is_text)
    tokens["box_shadows"].extend(stroke["box_shadow"])
    tokens = merge_inherited(tokens, inherited_shadows, is_text)

    opacity = style.get("opacity")
    opacity_css = ""
    if isinstance(opacity, (int, float)) and not isinstance(opacity, bool) and opacity != 1:
        opacity_css = f"opacity:{js_num(opacity)};"

    blend = style.get("blendMode")
    blend_css = ""
    if isinstance(blend, str) and blend_mode_css(blend) not in ("normal", "pass-through"):
        blend_css = f"mix-blend-mode:{blend_mode_css(blend)};"

    return paint_css + format_tokens(tokens) + stroke["css"] + radius_css + opacity_css + blend_css
