"""
Strokes → CSS

揃え位置ごとの変換:
  INSIDE  → inset box-shadow
  CENTER  → border
  OUTSIDE → outline
破線 / 点線、辺ごとに太さの違う線、グラデーション線は ::before 疑似要素で描き、
そのルールは CssCollector に溜めて <style> にまとめて出す。
"""

from typing import Dict, List, Optional

from .cssutil import js_num
from .paint import gradient_to_css, rgba_to_css

# dashPattern の先頭がこれ以下なら dotted 扱い
DOTTED_DASH_THRESHOLD = 2

PSEUDO_BASE = ["content:\"\"", "position:absolute", "z-index:0", "pointer-events:none"]


class CssCollector:
    """ノード単位で発生する追加ルール (selector { props }) の置き場"""

    def __init__(self):
        self.rules: List[str] = []

    def add_rule(self, selector: str, props: str):
        if not props.strip():
            return
        self.rules.append(f"{selector} {{ {props} }}")

    def is_empty(self) -> bool:
        return not self.rules

    def __str__(self):
        return "\n".join(self.rules)


def border_style(dash_pattern) -> str:
    if not dash_pattern:
        return "solid"
    return "dotted" if dash_pattern[0] <= DOTTED_DASH_THRESHOLD else "dashed"


def _weights(style: Dict) -> Dict:
    w = style.get("strokeWeights") or {}
    return {k: w.get(k) or 0 for k in ("t", "r", "b", "l")}


def extract_stroke_data(node: Dict) -> Optional[Dict]:
    """最初の可視ストロークを solid / gradient の形に正規化する"""
    style = node.get("style") or {}
    strokes = style.get("strokes")
    if not isinstance(strokes, list) or not strokes:
        return None
    visible = next((s for s in strokes if isinstance(s, dict) and s.get("visible") is not False), None)
    if not visible:
        return None

    align = style.get("strokeAlign") or "INSIDE"
    kind = (visible.get("type") or "").upper()
    if kind == "SOLID":
        color = rgba_to_css(visible.get("color"))
        if not color:
            return None
        dash = style.get("dashPattern")
        return {
            "kind": "solid",
            "color": color,
            "align": align,
            "weights": _weights(style),
            "dash_pattern": dash if isinstance(dash, list) and dash else None,
        }
    if kind == "GRADIENT_LINEAR":
        gradient = gradient_to_css(
            {**visible, "type": "GRADIENT_LINEAR"},
            node.get("width") or 0,
            node.get("height") or 0,
        )
        if not gradient:
            return None
        return {"kind": "gradient", "gradient": gradient, "align": align, "weights": _weights(style)}
    return None


def _radius_text(corners) -> Optional[str]:
    if not any(corners):
        return None
    return "border-radius:" + " ".join(f"{js_num(c)}px" for c in corners)


def compensated_radius(radii: Dict, align: str, w: Dict) -> Optional[str]:
    """線の外側にずらした疑似要素の角丸を、ずらした分だけ大きくする"""
    uniform = radii.get("uniform")
    if align == "INSIDE":
        if isinstance(uniform, (int, float)) and uniform > 0:
            return f"border-radius:{js_num(uniform)}px"
        corners = radii.get("corners")
        return _radius_text(corners) if isinstance(corners, list) and len(corners) == 4 else None

    if isinstance(uniform, (int, float)):
        corners = [uniform] * 4
    else:
        corners = radii.get("corners") or [0, 0, 0, 0]
    tl, tr, br, bl = corners
    factor = 0.25 if align == "CENTER" else 0.5
    final = [
        tl + (w["t"] + w["l"]) * factor if tl > 0 else 0,
        tr + (w["t"] + w["r"]) * factor if tr > 0 else 0,
        br + (w["b"] + w["r"]) * factor if br > 0 else 0,
        bl + (w["b"] + w["l"]) * factor if bl > 0 else 0,
    ]
    return _radius_text(final)


def _inset_props(align: str, w: Dict) -> List[str]:
    if align == "CENTER":
        f = 0.5
    elif align == "OUTSIDE":
        f = 1
    else:
        return ["inset:0"]
    return [
        f"top:{js_num(-w['t'] * f)}px",
        f"right:{js_num(-w['r'] * f)}px",
        f"bottom:{js_num(-w['b'] * f)}px",
        f"left:{js_num(-w['l'] * f)}px",
    ]


def pseudo_stroke_props(data: Dict, radii: Optional[Dict], effects: Optional[Dict] = None) -> str:
    w = data["weights"]
    parts = list(PSEUDO_BASE) + _inset_props(data["align"], w)
    style = border_style(data["dash_pattern"])
    if w["t"] == w["r"] == w["b"] == w["l"]:
        parts.append(f"border:{js_num(w['t'])}px {style} {data['color']}")
    else:
        parts.append(f"border-style:{style}")
        parts.append(f"border-color:{data['color']}")
        parts.append("border-width:" + " ".join(f"{js_num(w[k])}px" for k in ("t", "r", "b", "l")))
    if radii:
        radius = compensated_radius(radii, data["align"], w)
        if radius:
            parts.append(radius)
    drops = [
        f"drop-shadow({js_num(s['x'])}px {js_num(s['y'])}px {js_num(s['blur'])}px {s['color']})"
        for s in (effects or {}).get("shadows") or []
        if s["type"] == "DROP_SHADOW"
    ]
    if drops:
        parts.append(f"filter:{' '.join(drops)}")
    return "; ".join(parts)


def gradient_stroke_props(data: Dict, radii: Optional[Dict]) -> str:
    w = data["weights"]["t"]
    parts = list(PSEUDO_BASE)
    if data["align"] == "CENTER":
        parts.append(f"inset:{js_num(-w / 2)}px")
    elif data["align"] == "OUTSIDE":
        parts.append(f"inset:{js_num(-w)}px")
    else:
        parts.append("inset:0")
    parts.append(f"padding:{js_num(w)}px")
    parts.append(f"background:{data['gradient']}")
    radius = compensated_radius(radii, data["align"], data["weights"]) if radii else None
    parts.append(radius or "border-radius:inherit")
    # 枠だけ残すためのマスク
    parts.append("-webkit-mask:linear-gradient(#fff 0 0) content-box, linear-gradient(#fff 0 0)")
    parts.append("-webkit-mask-composite:xor")
    parts.append("mask-composite:exclude")
    return "; ".join(parts)


def text_stroke_css(data: Dict) -> str:
    w = data["weights"]
    width = max(w["t"], w["r"], w["b"], w["l"])
    css = f"-webkit-text-stroke:{js_num(width)}px {data['color']};"
    if data["align"] == "OUTSIDE":
        css += "paint-order:stroke fill;"
    return css


def collect_stroke_style(node: Dict, collector: CssCollector, host_selector: Optional[str] = None,
                         effects: Optional[Dict] = None) -> Dict:
    """
    Returns {"css": inline declarations, "box_shadow": [tokens]}.
    疑似要素が必要なケースは collector にルールを追加し、インラインには何も返さない。
    """
    empty = {"css": "", "box_shadow": []}
    data = extract_stroke_data(node)
    if not data:
        return empty
    w = data["weights"]
    if not any(w.values()):
        return empty

    if node.get("type") == "TEXT":
        if data["kind"] == "solid":
            return {"css": text_stroke_css(data), "box_shadow": []}
        return empty
    if node.get("svgContent") or node.get("svgId"):
        return empty

    uniform = w["t"] == w["r"] == w["b"] == w["l"]
    has_effects = bool(effects and effects.get("shadows"))
    host = host_selector or f'[data-layer-id="{node.get("id")}"]'
    radii = (node.get("style") or {}).get("radii")

    if data["kind"] == "gradient":
        if uniform:
            collector.add_rule(f"{host}::before", gradient_stroke_props(data, radii))
        return empty

    if uniform and not has_effects and border_style(data["dash_pattern"]) == "solid":
        width = js_num(w["t"])
        if data["align"] == "INSIDE":
            return {"css": "", "box_shadow": [f"inset 0 0 0 {width}px {data['color']}"]}
        if data["align"] == "CENTER":
            return {"css": f"border:{width}px solid {data['color']};", "box_shadow": []}
        if data["align"] == "OUTSIDE":
            return {"css": f"outline:{width}px solid {data['color']};outline-offset:0;", "box_shadow": []}

    collector.add_rule(f"{host}::before", pseudo_stroke_props(data, radii, effects))
    return empty
