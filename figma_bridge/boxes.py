"""
Box composition

Every rendered node becomes either

  single box   <div class style>content</div>
  wrapper box  <div outer>  <div inner>content</div>  </div>

The wrapper is used when the layout carries ``wrapper`` (a flex item whose
reserved slot differs from its drawn size, e.g. a rotated child). The outer
box holds position and flex-item sizing; the inner box is centered inside it
with the content size and holds the transform and the visual css.
"""

import re
from typing import Dict, Iterable, Optional, Union

from .cssutil import fmt_px, parse_declarations, split_class_tokens
from .errors import RenderError
from .layout_css import layout_to_css
from .matrix import is_identity_2x2
from .optimizer import optimize_box_css
from .shadow import migrate_shadows_to_outer

# 外側 (スロット) に残すプロパティ
OUTER_PROPS = {"flex-grow", "flex-shrink", "flex-basis", "min-width", "min-height", "align-self", "z-index"}

DEBUG_LAYOUT_PROPS = {
    "display", "flex-direction", "justify-content", "align-items", "gap",
    "flex-grow", "flex-shrink", "flex-basis", "align-self",
    "min-width", "min-height", "max-width", "max-height",
    "overflow", "overflow-x", "overflow-y",
    "padding", "padding-top", "padding-right", "padding-bottom", "padding-left",
    "row-gap", "column-gap",
    "box-sizing",
    "border-radius", "border-top-left-radius", "border-top-right-radius",
    "border-bottom-right-radius", "border-bottom-left-radius",
    "flex-wrap",
    "white-space", "text-align",
}

SELF_CLASSES = {"self-stretch", "self-start", "self-end", "self-center", "self-baseline"}

_W_CLASS_RE = re.compile(r"^w-\[.+\]$")
_H_CLASS_RE = re.compile(r"^h-\[.+\]$")


def esc_attr(value) -> str:
    return (str(value).replace("&", "&amp;").replace("<", "&lt;")
            .replace(">", "&gt;").replace('"', "&quot;"))


def h(tag: str, attrs: Optional[Dict] = None, children: Union[str, Iterable[str], None] = None) -> str:
    """最小の要素ビルダー。値が None / 空文字の属性は出さない"""
    attr_text = "".join(
        f' {k}="{esc_attr(v)}"' for k, v in (attrs or {}).items() if v is not None and v != ""
    )
    if children is None:
        inner = ""
    elif isinstance(children, str):
        inner = children
    else:
        inner = "".join(children)
    return f"<{tag}{attr_text}>{inner}</{tag}>"


def _drop_prop(css: str, prop: str) -> str:
    return re.sub(rf"(^|;)\s*{re.escape(prop)}\s*:[^;]+;?", r"\1", css or "", flags=re.I)


# ------------------------------------------------------------
# box_css splitting
# ------------------------------------------------------------

def split_box_css_for_wrapper(box_css: str):
    """Returns (outer_css, inner_css). width/height:auto also stay on the outer slot."""
    outer, inner = [], []
    for key, value in parse_declarations(box_css):
        if key in OUTER_PROPS:
            outer.append(f"{key}:{value};")
        elif key in ("width", "height") and value.lower() == "auto":
            outer.append(f"{key}:auto;")
        else:
            inner.append(f"{key}:{value};")
    return "".join(outer), "".join(inner)


def clean_box_css_for_single_box(box_css: str) -> Dict:
    """width/height を取り除き、最後の値が auto だったかを返す"""
    kept = []
    last_width = last_height = None
    for key, value in parse_declarations(box_css):
        if key == "width":
            last_width = value.lower()
        elif key == "height":
            last_height = value.lower()
        else:
            kept.append(f"{key}:{value};")
    return {
        "css": "".join(kept),
        "has_auto_width": last_width == "auto",
        "has_auto_height": last_height == "auto",
    }


def extract_layout_css_for_debug(box_css: str) -> str:
    kept = []
    for key, value in parse_declarations(box_css):
        if key in DEBUG_LAYOUT_PROPS:
            kept.append(f"{key}:{value};")
        elif key in ("width", "height") and value.lower() == "auto":
            kept.append(f"{key}:auto;")
    return "".join(kept)


# ------------------------------------------------------------
# Rendering
# ------------------------------------------------------------

def render_wrapper_box(class_name: str, node_id: str, layout: Dict, box_css: str, inner_html: str,
                       mode: str = "content", outer_overflow_visible: bool = False,
                       inner_class: Optional[str] = None, has_stroke: bool = False) -> str:
    wrapper = layout.get("wrapper") or {}
    strategy = wrapper.get("center_strategy")
    if not strategy:
        raise RenderError(f"wrapper of node {node_id} has no center_strategy")

    frags = layout_to_css(layout)
    outer_part, inner_part = split_box_css_for_wrapper(box_css)
    outer = frags["position"] + ("overflow:visible;" if outer_overflow_visible else "") + frags["sizing"] + outer_part

    container = frags["container"] if layout.get("display") == "flex" else ""
    width = wrapper.get("content_width") or 0
    height = wrapper.get("content_height") or 0
    size = f"width:{fmt_px(width)};height:{fmt_px(height)};"
    if strategy == "inset":
        inner = "position:absolute;left:0;top:0;right:0;bottom:0;margin:auto;" + size
    elif strategy == "translate":
        # 50% + 負マージンは変換前の座標系で中央に置く
        inner = (f"position:absolute;left:50%;top:50%;"
                 f"margin-left:{fmt_px(-width / 2)};margin-top:{fmt_px(-height / 2)};" + size)
    else:
        raise RenderError(f"unknown center_strategy {strategy!r} on node {node_id}")
    inner += container + frags["transform"] + inner_part

    transformed = not is_identity_2x2(layout.get("transform2x2") or {})
    if transformed:
        inner, outer = migrate_shadows_to_outer(inner, outer)

    display = layout.get("display") or "block"
    direction = layout.get("flex_direction") or "row"
    inner = optimize_box_css(inner, position="absolute", has_rotate_or_scale=transformed,
                             display=display, flex_direction=direction)

    inner_classes = [inner_class or "content-layer"]
    tokens = split_class_tokens(class_name)
    if mode == "content" and has_stroke:
        # outline-* は回転する内側の箱に付ける
        outlines = [t for t in tokens if t.startswith("outline")]
        if outlines:
            inner_classes += outlines
            tokens = [t for t in tokens if not t.startswith("outline")]
    tokens.append("has-wrapper")

    if mode == "content" and layout.get("flex_shrink") == 0 and "shrink-0" not in tokens:
        tokens.append("shrink-0")
        outer = _drop_prop(outer, "flex-shrink")
    if SELF_CLASSES.intersection(tokens):
        outer = _drop_prop(outer, "align-self")

    outer = optimize_box_css(outer, position=layout.get("position") or "absolute",
                             has_rotate_or_scale=transformed, display=display, flex_direction=direction)

    outer_attrs = {"class": " ".join(tokens), "style": outer}
    if mode == "debug":
        outer_attrs["data-layer-id"] = node_id
    inner_attrs = {"class": " ".join(inner_classes), "style": inner}
    if mode == "content" and has_stroke:
        inner_attrs["data-layer-id"] = node_id
    return h("div", outer_attrs, h("div", inner_attrs, inner_html))


def render_single_box(class_name: str, node_id: str, layout: Dict, box_css: str, inner_html: str,
                      mode: str = "content", omit_position: bool = False, has_stroke: bool = False) -> str:
    cleaned = clean_box_css_for_single_box(box_css)
    adjusted = dict(layout)
    # textAutoResize の auto は数値サイズで縛らない
    if cleaned["has_auto_width"]:
        adjusted["width"] = "auto"
    if cleaned["has_auto_height"]:
        adjusted["height"] = "auto"

    frags = layout_to_css(adjusted)
    transform = "" if is_identity_2x2(layout.get("transform2x2") or {}) else frags["transform"]
    position = "" if omit_position else frags["position"]

    size = frags["sizing"]
    if mode == "content" and class_name:
        tokens = set(split_class_tokens(class_name))
        if any(_W_CLASS_RE.match(t) for t in tokens):
            size = _drop_prop(size, "width")
        if any(_H_CLASS_RE.match(t) for t in tokens):
            size = _drop_prop(size, "height")
        if "shrink-0" in tokens:
            size = _drop_prop(size, "flex-shrink")
        if SELF_CLASSES.intersection(tokens):
            size = _drop_prop(size, "align-self")
        if "grow" in tokens:
            size = _drop_prop(size, "flex-grow")
        if "basis-0" in tokens or "basis-auto" in tokens:
            size = _drop_prop(size, "flex-basis")

    container = frags["container"] if mode == "debug" else ""
    attrs = {"class": class_name, "style": position + transform + size + cleaned["css"] + container}
    if mode == "debug" or (mode == "content" and has_stroke):
        attrs["data-layer-id"] = node_id
    return h("div", attrs, inner_html)


def render_box(class_name: str, node_id: str, layout: Dict, box_css: str, inner_html: str,
               mode: str = "content", outer_overflow_visible: bool = False,
               inner_class: Optional[str] = None, omit_position: bool = False,
               has_stroke: bool = False) -> str:
    """layout.wrapper の有無で wrapper / single を選ぶ"""
    if "wrapper" in layout:
        wrapper = layout["wrapper"]
        if not isinstance(wrapper, dict) or not all(
                isinstance(wrapper.get(k), (int, float)) for k in ("content_width", "content_height")):
            raise RenderError(f"wrapper of node {node_id} needs numeric content_width / content_height")
        return render_wrapper_box(class_name, node_id, layout, box_css, inner_html, mode=mode,
                                  outer_overflow_visible=outer_overflow_visible,
                                  inner_class=inner_class, has_stroke=has_stroke)
    return render_single_box(class_name, node_id, layout, box_css, inner_html, mode=mode,
                             omit_position=omit_position, has_stroke=has_stroke)
