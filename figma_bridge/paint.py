#!/usr/bin/env python3
"""
Paint / effects / text → CSS

コンポジションのノード (camelCase の style / text をそのまま持つ dict) から
背景・角丸・シャドウ・ブラー・不透明度・テキスト系の CSS を作る。

- fills は下から上の順で来るので、CSS の background レイヤー順 (上が先) に反転する
- 単一レイヤーは最短表記 (background:rgb(...);) を使う
- 未知の paint / effect タイプは黙ってスキップ
"""

import math
from typing import Dict, List, Optional, Tuple

from .cssutil import fmt_num, js_num
from .fonts import build_font_stack, infer_weight_from_style
from .matrix import is_affine_2x3

GRADIENT_TYPES = ("GRADIENT_LINEAR", "GRADIENT_RADIAL", "GRADIENT_ANGULAR", "GRADIENT_DIAMOND")

SCALE_DEFAULTS = {
    "FIT": {"size": "contain", "repeat": "no-repeat", "position": "center"},
    "FILL": {"size": "cover", "repeat": "no-repeat", "position": "center"},
    "CROP": {"size": "cover", "repeat": "no-repeat", "position": "center"},
    "STRETCH": {"size": "100% 100%", "repeat": "no-repeat", "position": "center"},
    "TILE": {"size": "auto", "repeat": "repeat", "position": "0 0"},
}

TEXT_ALIGN = {"LEFT": "left", "CENTER": "center", "RIGHT": "right", "JUSTIFIED": "justify"}
V_ALIGN = {"TOP": "flex-start", "CENTER": "center", "BOTTOM": "flex-end"}
TEXT_CASE = {"UPPER": "uppercase", "LOWER": "lowercase", "TITLE": "capitalize"}
TEXT_DECORATION = {"UNDERLINE": "underline", "STRIKETHROUGH": "line-through"}


def _up(value) -> str:
    return value.upper() if isinstance(value, str) else ""


def _num(value, default=0):
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return value
    return default


def escape_text(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


# ------------------------------------------------------------
# Colors / gradients
# ------------------------------------------------------------

def rgba_to_css(color: Optional[Dict]) -> Optional[str]:
    """{r,g,b,a} (0..1) → rgb(r,g,b) / rgba(r,g,b,a)。alpha は 2 桁に丸める"""
    if not color:
        return None
    r = int(round(_num(color.get("r")) * 255))
    g = int(round(_num(color.get("g")) * 255))
    b = int(round(_num(color.get("b")) * 255))
    a = round(_num(color.get("a"), 1) * 100) / 100
    if abs(a) < 0.01:
        a = 0
    if a == 1:
        return f"rgb({r},{g},{b})"
    return f"rgba({r},{g},{b},{js_num(a)})"


def _angle_from_transform(m, width: float, height: float) -> Optional[int]:
    if not is_affine_2x3(m):
        return None
    a = m[0][0]
    b = m[1][0]
    vx = a * width if width > 0 else a
    vy = b * height if height > 0 else b
    deg = 90 - math.degrees(math.atan2(vy, vx))
    deg = deg % 360
    return int(math.floor(deg + 0.5)) % 360


def _angle_from_handles(handles) -> int:
    if not isinstance(handles, list) or len(handles) < 2:
        return 180
    p1, p2 = handles[0], handles[1]
    delta_y = _num(p2.get("x")) - _num(p1.get("x"))
    delta_x = _num(p2.get("y")) - _num(p1.get("y"))
    angle = 180 - math.degrees(math.atan2(delta_y, delta_x))
    if angle < 0:
        angle += 360
    return int(math.floor(angle + 0.5))


def linear_angle(fill: Dict, width: float = 0, height: float = 0) -> int:
    """gradientTransform があればそちら優先、無ければハンドル座標から"""
    deg = _angle_from_transform(fill.get("gradientTransform"), max(0, width), max(0, height))
    if deg is not None:
        return deg
    return _angle_from_handles(fill.get("gradientHandlePositions"))


def gradient_to_css(fill: Optional[Dict], width: float = 0, height: float = 0) -> Optional[str]:
    if not fill:
        return None
    stops = fill.get("gradientStops")
    if not isinstance(stops, list) or len(stops) < 2:
        return None
    fill_opacity = _num(fill.get("opacity"), 1)
    parts = []
    for stop in stops:
        color = stop.get("color") or {}
        css = rgba_to_css({
            "r": color.get("r"),
            "g": color.get("g"),
            "b": color.get("b"),
            "a": _num(color.get("a"), 1) * fill_opacity,
        })
        parts.append(f"{css} {_num(stop.get('position')) * 100:.2f}%")
    joined = ", ".join(parts)

    kind = _up(fill.get("type"))
    if kind == "GRADIENT_LINEAR":
        return f"linear-gradient({linear_angle(fill, width, height)}deg, {joined})"
    if kind == "GRADIENT_RADIAL":
        return f"radial-gradient(circle, {joined})"
    if kind == "GRADIENT_ANGULAR":
        return f"conic-gradient(from 0deg, {joined})"
    if kind == "GRADIENT_DIAMOND":
        # diamond は楕円で近似
        return f"radial-gradient(ellipse, {joined})"
    return None


def blend_mode_css(raw) -> str:
    up = _up(raw)
    if not up or up in ("NORMAL", "PASS_THROUGH"):
        return "normal"
    return raw.lower().replace("_", "-")


# ------------------------------------------------------------
# Background layers
# ------------------------------------------------------------

def _image_layer(fill: Dict, box_w: float, box_h: float) -> Dict:
    scale = _up(fill.get("scaleMode")) or "FILL"
    size = position = repeat = None

    # CROP は回転 / 斜めの無い拡大 + 平移のみ厳密に扱う
    m = fill.get("imageTransform")
    if scale == "CROP" and is_affine_2x3(m):
        a, b, tx = m[0][0], m[0][1], m[0][2]
        c, d, ty = m[1][0], m[1][1], m[1][2]
        if b == 0 and c == 0 and a > 0 and d > 0 and box_w > 0 and box_h > 0:
            full_w = box_w / a
            full_h = box_h / d
            size = f"{full_w:.2f}px {full_h:.2f}px"
            position = f"{-tx * full_w:.2f}px {-ty * full_h:.2f}px"
            repeat = "no-repeat"

    defaults = SCALE_DEFAULTS.get(scale, SCALE_DEFAULTS["FILL"])
    return {
        "kind": "image",
        "image": f"url('images/{fill['imageId']}.png')",
        "size": size or defaults["size"],
        "position": position or defaults["position"],
        "repeat": repeat or defaults["repeat"],
    }


def build_background_layers(node: Dict, skip_for_text: bool = False) -> Tuple[List[Dict], List[str]]:
    if skip_for_text and node.get("type") == "TEXT":
        return [], []
    fills = (node.get("style") or {}).get("fills")
    if not isinstance(fills, list) or not fills:
        return [], []

    box_w = _num(node.get("width"))
    box_h = _num(node.get("height"))
    layers = []
    blends = []
    for fill in reversed(fills):
        if not isinstance(fill, dict) or fill.get("visible") is False:
            continue
        kind = _up(fill.get("type"))
        if kind == "IMAGE" and fill.get("imageId"):
            layers.append(_image_layer(fill, box_w, box_h))
            blends.append(blend_mode_css(fill.get("blendMode")))
        elif kind in GRADIENT_TYPES:
            value = gradient_to_css(fill, box_w, box_h)
            if value:
                layers.append({"kind": "gradient", "image": value, "size": "auto",
                               "position": "center", "repeat": "no-repeat"})
                blends.append(blend_mode_css(fill.get("blendMode")))
        elif kind == "SOLID" and fill.get("color"):
            color = rgba_to_css(fill["color"])
            if color:
                layers.append({
                    "kind": "solid",
                    "image": f"linear-gradient(0deg, {color} 0%, {color} 100%)",
                    "size": "auto",
                    "position": "center",
                    "repeat": "no-repeat",
                    "raw_color": color,
                })
                blends.append(blend_mode_css(fill.get("blendMode")))
    return layers, blends


def collect_paint_css(node: Dict, skip_for_text: bool = False) -> str:
    layers, blends = build_background_layers(node, skip_for_text)
    if not layers:
        return ""

    if len(layers) == 1:
        layer = layers[0]
        if layer["kind"] == "solid":
            return f"background:{layer['raw_color']};"
        if layer["kind"] == "gradient":
            return f"background:{layer['image']};"
        return (
            f"background-image:{layer['image']};"
            f"background-position:{layer['position']};"
            f"background-size:{layer['size']};"
            f"background-repeat:{layer['repeat']};"
        )

    css = (
        f"background-image:{', '.join(l['image'] for l in layers)};"
        f"background-position:{', '.join(l['position'] for l in layers)};"
        f"background-size:{', '.join(l['size'] for l in layers)};"
        f"background-repeat:{', '.join(l['repeat'] for l in layers)};"
    )
    if any(b != "normal" for b in blends):
        css += f"background-blend-mode:{', '.join(blends)};"
    return css


def border_radius_css(radii: Optional[Dict]) -> str:
    if not radii:
        return ""
    uniform = radii.get("uniform")
    if isinstance(uniform, (int, float)) and uniform > 0:
        return f"border-radius:{js_num(uniform)}px;"
    corners = radii.get("corners")
    if isinstance(corners, list) and len(corners) == 4 and any(corners):
        return "border-radius:" + " ".join(f"{js_num(c)}px" for c in corners) + ";"
    return ""


# ------------------------------------------------------------
# Effects
# ------------------------------------------------------------

def parse_effects(node: Dict) -> Dict:
    """effects → {shadows: [...], layer_blur, background_blur}"""
    result = {"shadows": [], "layer_blur": 0, "background_blur": 0}
    for effect in (node.get("style") or {}).get("effects") or []:
        if not isinstance(effect, dict) or effect.get("visible") is False:
            continue
        kind = _up(effect.get("type"))
        radius = _num(effect.get("radius"))
        if kind == "LAYER_BLUR":
            if radius > 0:
                result["layer_blur"] = max(result["layer_blur"], radius)
        elif kind == "BACKGROUND_BLUR":
            if radius > 0:
                result["background_blur"] = max(result["background_blur"], radius)
        elif kind in ("DROP_SHADOW", "INNER_SHADOW"):
            offset = effect.get("offset") or {}
            result["shadows"].append({
                "type": kind,
                "x": _num(offset.get("x")),
                "y": _num(offset.get("y")),
                "blur": radius,
                "spread": _num(effect.get("spread")),
                "color": rgba_to_css(effect.get("color")) or "rgb(0,0,0)",
            })
    return result


def drop_shadow_token(s: Dict) -> str:
    return f"drop-shadow({js_num(s['x'])}px {js_num(s['y'])}px {js_num(s['blur'])}px {s['color']})"


def inset_shadow_token(s: Dict) -> str:
    return (f"inset {js_num(s['x'])}px {js_num(s['y'])}px {js_num(s['blur'])}px "
            f"{js_num(s.get('spread') or 0)}px {s['color']}")


def empty_tokens() -> Dict[str, List[str]]:
    return {"box_shadows": [], "text_shadows": [], "filters": [], "backdrop_filters": []}


def effect_tokens(effects: Optional[Dict], target: str = "self", is_text: bool = False) -> Dict[str, List[str]]:
    """
    target:
      self    → box-shadow (テキストは text-shadow、INNER_SHADOW は無視)
      content → filter:drop-shadow(...) で描画内容に沿わせる (svg など)
    ブラーは Figma の半径の半分を使う。
    """
    tokens = empty_tokens()
    if not effects:
        return tokens
    for s in effects.get("shadows") or []:
        if target == "self":
            if s["type"] == "INNER_SHADOW":
                if not is_text:
                    tokens["box_shadows"].append(inset_shadow_token(s))
            elif is_text:
                tokens["text_shadows"].append(
                    f"{js_num(s['x'])}px {js_num(s['y'])}px {js_num(s['blur'])}px {s['color']}")
            else:
                tokens["box_shadows"].append(
                    f"{js_num(s['x'])}px {js_num(s['y'])}px {js_num(s['blur'])}px "
                    f"{js_num(s['spread'])}px {s['color']}")
        elif s["type"] == "DROP_SHADOW":
            tokens["filters"].append(drop_shadow_token(s))
        else:
            tokens["box_shadows"].append(inset_shadow_token(s))

    if effects.get("layer_blur"):
        tokens["filters"].append(f"blur({js_num(effects['layer_blur'] / 2)}px)")
    if effects.get("background_blur"):
        tokens["backdrop_filters"].append(f"blur({js_num(effects['background_blur'] / 2)}px)")
    return tokens


def merge_inherited(tokens: Dict[str, List[str]], inherited: Optional[List[Dict]], is_text: bool = False):
    """親 (effects_mode=inherit) から降りてきたシャドウを drop-shadow / inset で足す"""
    if not inherited:
        return tokens
    merged = {k: list(v) for k, v in tokens.items()}
    for s in inherited:
        if s["type"] == "DROP_SHADOW":
            merged["filters"].append(drop_shadow_token(s))
        elif not is_text:
            merged["box_shadows"].append(inset_shadow_token(s))
    return merged


def format_tokens(tokens: Dict[str, List[str]]) -> str:
    css = ""
    if tokens["box_shadows"]:
        css += f"box-shadow:{','.join(tokens['box_shadows'])};"
    if tokens["text_shadows"]:
        css += f"text-shadow:{','.join(tokens['text_shadows'])};"
    if tokens["filters"]:
        css += f"filter:{' '.join(tokens['filters'])};"
    if tokens["backdrop_filters"]:
        value = " ".join(tokens["backdrop_filters"])
        css += f"backdrop-filter:{value};-webkit-backdrop-filter:{value};"
    return css


def compute_effects_mode(node: Dict) -> str:
    """塗りも線も無くシャドウだけ持つフレームは子へシャドウを渡す ('inherit')"""
    style = node.get("style") or {}

    def _any_visible(items):
        return isinstance(items, list) and any(isinstance(i, dict) and i.get("visible") is not False for i in items)

    has_shadow = any(
        isinstance(e, dict) and _up(e.get("type")) in ("DROP_SHADOW", "INNER_SHADOW")
        for e in style.get("effects") or []
    )
    if has_shadow and not _any_visible(style.get("fills")) and not _any_visible(style.get("strokes")):
        return "inherit"
    return "self"


# ------------------------------------------------------------
# Text
# ------------------------------------------------------------

def collect_text_css(node: Dict) -> Dict:
    """テキストボックス自体の CSS と auto-resize フラグ"""
    text = node.get("text")
    if not text:
        return {"css": "", "auto_width": False, "auto_height": False}

    css = ""
    auto_resize = _up(text.get("textAutoResize"))
    truncation = _up(text.get("textTruncation"))
    is_auto_size = auto_resize in ("WIDTH", "WIDTH_AND_HEIGHT")

    if truncation == "ENDING" or auto_resize == "TRUNCATE":
        css += "white-space:nowrap;overflow:hidden;text-overflow:ellipsis;"
    elif is_auto_size:
        css += "white-space:pre;"
    else:
        css += "white-space:pre-wrap;"

    align = TEXT_ALIGN.get(_up(text.get("textAlignHorizontal")))
    if align:
        css += f"text-align:{align};"

    v_align = V_ALIGN.get(_up(text.get("textAlignVertical")))
    if v_align:
        if is_auto_size:
            css += f"display:flex;align-items:{v_align};"
        else:
            css += f"display:flex;flex-direction:column;justify-content:{v_align};"

    indent = text.get("paragraphIndent")
    if isinstance(indent, (int, float)) and indent != 0:
        css += f"text-indent:{js_num(indent)}px;"

    return {
        "css": css,
        "auto_width": is_auto_size,
        "auto_height": auto_resize == "WIDTH_AND_HEIGHT",
    }


def segment_css(seg: Dict) -> str:
    parts = []
    font_size = seg.get("fontSize")
    if isinstance(font_size, (int, float)):
        parts.append(f"font-size:{js_num(font_size)}px;")

    font_name = seg.get("fontName") or {}
    if font_name.get("family"):
        parts.append(f"font-family:{build_font_stack(font_name['family'])};")
        if "italic" in (font_name.get("style") or "Regular").lower():
            parts.append("font-style:italic;")

    weight = seg.get("fontWeight")
    if isinstance(weight, (int, float)):
        parts.append(f"font-weight:{js_num(weight)};")
    elif font_name.get("style"):
        parts.append(f"font-weight:{infer_weight_from_style(font_name['style'])};")

    spacing = seg.get("letterSpacing") or {}
    if spacing:
        unit = _up(spacing.get("unit"))
        value = _num(spacing.get("value"))
        if unit == "PERCENT" and abs(round(value / 100, 2)) >= 0.01:
            parts.append(f"letter-spacing:{fmt_num(value / 100, 2)}em;")
        elif unit == "PIXELS" and abs(round(value, 2)) >= 0.01:
            parts.append(f"letter-spacing:{fmt_num(value, 2)}px;")

    line_height = seg.get("lineHeight") or {}
    lh_value = line_height.get("value")
    if isinstance(lh_value, (int, float)):
        unit = _up(line_height.get("unit"))
        if unit == "PIXELS":
            parts.append(f"line-height:{js_num(lh_value)}px;")
        elif unit == "PERCENT" and lh_value > 100:
            parts.append(f"line-height:{js_num(lh_value)}%;")

    color = None
    for fill in seg.get("fills") or []:
        if isinstance(fill, dict) and fill.get("visible") is not False \
                and _up(fill.get("type")) == "SOLID" and fill.get("color"):
            c = fill["color"]
            color = rgba_to_css({**c, "a": _num(fill.get("opacity"), 1) * _num(c.get("a"), 1)})
            break
    # 色が取れない場合は親の色を継承させない
    parts.append(f"color:{color or 'transparent'};")

    decoration = TEXT_DECORATION.get(_up(seg.get("textDecoration")))
    if decoration:
        parts.append(f"text-decoration:{decoration};")
    case = TEXT_CASE.get(_up(seg.get("textCase")))
    if case:
        parts.append(f"text-transform:{case};")
    return "".join(parts)


def render_text_segments(text: Optional[Dict]) -> str:
    """characters をセグメントごとの <span style> に分割する (改行は <br>)"""
    if not text or not isinstance(text.get("characters"), str):
        return ""
    chars = text["characters"]
    segments = text.get("segments") or []
    if not segments:
        return escape_text(chars).replace("\n", "<br>")

    spans = []
    for seg in segments:
        start = seg.get("start") or 0
        end = seg.get("end") or len(chars)
        body = escape_text(chars[start:end]).replace("\n", "<br>")
        spans.append(f'<span style="{segment_css(seg)}">{body}</span>')
    html = "".join(spans)
    return f"<div>{html}</div>" if "\n" in chars else html
