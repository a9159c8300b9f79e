"""
IR → HTML renderer

render_node() dispatches on ``kind`` (frame / text / svg / shape). Two modes:

  content  visual css, utility classes and shared classes
  debug    layout-only css for the overlay (outlines, hover targets)

All mutable state for one build lives on BuildContext.
"""

import logging
import math
import re
from typing import Dict, List, Optional

from .boxes import extract_layout_css_for_debug, render_box
from .cssutil import js_num, last_value
from .errors import RenderError
from .matrix import is_identity_2x2
from .naming import semantic_class_name
from .optimizer import optimize_box_css
from .shared_classes import SharedClassPool
from .utility_classes import css_to_classes, layout_to_classes

logger = logging.getLogger(__name__)

_RADIUS_RE = re.compile(r"(^|;)\s*border-(top-left-|top-right-|bottom-right-|bottom-left-)?radius\s*:", re.I)
_OVERFLOW_HIDDEN_RE = re.compile(r"(^|;)\s*overflow\s*:\s*hidden\s*;?", re.I)
_SHRINK0_RE = re.compile(r"(^|;)\s*flex-shrink\s*:\s*0\s*;?", re.I)
_AUTO_W_RE = re.compile(r"width\s*:\s*auto\s*(;|$)", re.I)
_AUTO_H_RE = re.compile(r"height\s*:\s*auto\s*(;|$)", re.I)


class BuildContext:
    """1 回のビルドで共有する状態 (ユーティリティのメモ, 共有クラス, 使用クラス, サイズ頻度)"""

    def __init__(self, mode: str = "content", pool: Optional[SharedClassPool] = None,
                 size_freq: Optional[Dict] = None, utility_cache: Optional[Dict] = None):
        if mode not in ("content", "debug"):
            raise RenderError(f"unknown render mode: {mode}")
        self.mode = mode
        self.pool = pool
        self.size_freq = size_freq
        self.utility_cache = {} if utility_cache is None else utility_cache
        self.used_classes: Dict[str, None] = {}

    def use(self, names):
        for name in names:
            if name:
                self.used_classes[name] = None

    def apply_shared(self, css: str, layout: Optional[Dict] = None):
        # wrapper の css は外側と内側に分かれるので共有クラスにしない
        if self.mode != "content" or self.pool is None or "wrapper" in (layout or {}):
            return None, css
        return self.pool.apply(css)


# ------------------------------------------------------------
# Tree helpers
# ------------------------------------------------------------

def _children(node: Dict) -> List[Dict]:
    content = node.get("content") or {}
    if content.get("type") == "children":
        return content.get("nodes") or []
    return []


def has_absolute_descendant(node: Dict) -> bool:
    stack = list(_children(node)) if node else []
    while stack:
        n = stack.pop()
        if (n.get("layout") or {}).get("position") == "absolute":
            return True
        stack.extend(_children(n))
    return False


def _is_finite_num(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def collect_size_freq(nodes: List[Dict]) -> Dict[str, Dict[float, int]]:
    """数値の width / height が IR 全体で何回出るか"""
    freq = {"w": {}, "h": {}}
    stack = list(reversed(nodes or []))
    while stack:
        n = stack.pop()
        if not n:
            continue
        layout = n.get("layout")
        if layout:
            for key, bucket in (("width", "w"), ("height", "h")):
                v = layout.get(key)
                if _is_finite_num(v):
                    freq[bucket][v] = freq[bucket].get(v, 0) + 1
        stack.extend(reversed(_children(n)))
    return freq


def _size_class(prefix: str, value, bucket: str, ctx: BuildContext) -> Optional[str]:
    """1 回しか出ないサイズはクラスにしない"""
    if not _is_finite_num(value):
        return None
    if ctx.size_freq is not None and ctx.size_freq[bucket].get(value, 0) <= 1:
        return None
    rounded = math.floor(value * 100 + 0.5) / 100
    return f"{prefix}-[{js_num(rounded)}px]"


def sanitize_svg_for_outline(svg_raw: str) -> str:
    """svg の形だけを線で描くデバッグ用シルエット"""
    if not svg_raw:
        return ""
    m = re.search(r'viewBox\s*=\s*"([^"]+)"', svg_raw, re.I)
    vb = f' viewBox="{m.group(1)}"' if m else ""
    inner = re.sub(r"</?svg[^>]*>", "", svg_raw, flags=re.I)
    return (
        f'<svg{vb} fill="none" stroke="var(--bridge-debug-blue)" '
        'stroke-opacity="var(--bridge-debug-alpha)" vector-effect="non-scaling-stroke" '
        'stroke-width="var(--bridge-stroke, calc(1px/var(--bridge-scale)))" '
        f'shape-rendering="geometricPrecision">{inner}</svg>'
    )


def _has_stroke(node: Dict) -> bool:
    raw = (node.get("style") or {}).get("raw") or {}
    return bool(raw.get("strokes"))


def _omit_position(node: Dict, ctx: BuildContext, override: bool) -> bool:
    layout = node["layout"]
    return override or (
        "wrapper" not in layout
        and layout.get("position") == "relative"
        and ctx.mode == "content"
        and not has_absolute_descendant(node)
    )


def _prepare_css(node: Dict, ctx: BuildContext, is_text: bool = False) -> str:
    box_css = (node.get("style") or {}).get("box_css") or ""
    if ctx.mode == "debug":
        box_css = extract_layout_css_for_debug(box_css)
    layout = node["layout"]
    return optimize_box_css(
        box_css,
        position=layout.get("position"),
        has_rotate_or_scale=not is_identity_2x2(layout.get("transform2x2") or {}),
        display=last_value(box_css, "display"),
        flex_direction=last_value(box_css, "flex-direction"),
        is_text=is_text,
    )


def _content_classes(node: Dict, box_css: str, ctx: BuildContext, skip_w: bool = False, skip_h: bool = False):
    """layout + 残り css をユーティリティへ。w-/h- は繰り返し出るサイズだけ"""
    layout = node["layout"]
    names, remaining = layout_to_classes(layout, box_css, ctx.utility_cache)
    names = list(names)
    if not skip_w:
        names.append(_size_class("w", layout.get("width"), "w", ctx))
    if not skip_h:
        names.append(_size_class("h", layout.get("height"), "h", ctx))
    names = [n for n in names if n]
    ctx.use(names)
    return names, remaining


# ------------------------------------------------------------
# Renderers
# ------------------------------------------------------------

def render_frame(node: Dict, ctx: BuildContext, omit_position_override: bool = False) -> str:
    layout = node["layout"]
    box_css = _prepare_css(node, ctx)
    has_wrapper = "wrapper" in layout

    util = []
    if ctx.mode == "content" and not has_wrapper:
        util, box_css = _content_classes(node, box_css, ctx)

    inner_html = "".join(render_node(child, ctx) for child in _children(node))

    if ctx.mode == "debug":
        classes = ["debug-box"]
    else:
        classes = ["frame"]
        if node.get("is_mask"):
            classes.append("mask-container")
        else:
            semantic = semantic_class_name(node.get("name") or "", "frame")
            if semantic != "frame":
                classes.append(semantic)
        classes += util
        shared, box_css = ctx.apply_shared(box_css, node["layout"])
        if shared:
            classes.append(shared)

    return render_box(
        " ".join(classes), node["id"], layout, box_css, inner_html,
        mode=ctx.mode,
        outer_overflow_visible=True,
        inner_class="debug-box" if ctx.mode == "debug" else None,
        omit_position=_omit_position(node, ctx, omit_position_override),
        has_stroke=_has_stroke(node),
    )


def render_text(node: Dict, ctx: BuildContext, omit_position_override: bool = False) -> str:
    content = node.get("content") or {}
    raw_html = (content.get("html") or "") if content.get("type") == "text" else ""
    if ctx.mode == "debug":
        # 幅計算のために文字は残し、見えなくする
        text_html = f'<span style="visibility:hidden;">{raw_html}</span>' if raw_html else ""
    else:
        text_html = raw_html

    box_css = _prepare_css(node, ctx, is_text=True)
    util = []
    if ctx.mode == "content":
        util, box_css = _content_classes(
            node, box_css, ctx,
            skip_w=bool(_AUTO_W_RE.search(box_css)),
            skip_h=bool(_AUTO_H_RE.search(box_css)),
        )

    if ctx.mode == "debug":
        classes = ["debug-box"]
    else:
        classes = ["text"]
        semantic = semantic_class_name(node.get("name") or "", "text")
        if semantic != "text":
            classes.append(semantic)
        classes += util
        shared, box_css = ctx.apply_shared(box_css, node["layout"])
        if shared:
            classes.append(shared)

    return render_box(
        " ".join(classes), node["id"], node["layout"], box_css, text_html,
        mode=ctx.mode,
        inner_class="debug-box" if ctx.mode == "debug" else None,
        omit_position=_omit_position(node, ctx, omit_position_override),
        has_stroke=_has_stroke(node),
    )


def render_svg(node: Dict, ctx: BuildContext) -> str:
    svg_file = node.get("svg_file")
    svg_content = node.get("svg_content") or ""
    wants_shape = ctx.mode == "debug" and isinstance(svg_content, str) and bool(svg_content.strip())

    if ctx.mode == "debug":
        class_name = "debug-svg shape-only" if wants_shape else "debug-svg"
        if wants_shape:
            inner_html = sanitize_svg_for_outline(svg_content)
        elif svg_file:
            inner_html = (
                f'<div class="debug-svg-shape" data-svg-file="{svg_file}" '
                'style="position:absolute;left:0;top:0;right:0;bottom:0;width:100%;height:100%;'
                'pointer-events:auto;"></div>'
            )
        else:
            inner_html = ""
    else:
        semantic = semantic_class_name(node.get("name") or "", "svg-container")
        class_name = "svg-container" if semantic == "svg-container" else f"svg-container {semantic}"
        inner_html = (f'<img src="svgs/{svg_file}" alt="" style="display:block;width:100%;height:100%;" />'
                      if svg_file else "")

    item_css = (node.get("style") or {}).get("box_css") or ""
    if ctx.mode == "content":
        has_radius = bool(_RADIUS_RE.search(item_css))
        is_ellipse = node.get("type") == "ELLIPSE"
        if is_ellipse and not has_radius:
            item_css += "border-radius:50%;"
        if (has_radius or is_ellipse) and not _OVERFLOW_HIDDEN_RE.search(item_css):
            item_css += "overflow:hidden;"

        if item_css:
            names, item_css = css_to_classes(item_css, ctx.utility_cache)
            if names:
                class_name += " " + " ".join(names)
                ctx.use(names)
            if _SHRINK0_RE.search(item_css) and "shrink-0" not in class_name.split():
                class_name += " shrink-0"
                item_css = _SHRINK0_RE.sub(r"\1", item_css)
                ctx.use(["shrink-0"])

    return render_box(
        class_name, node["id"], node["layout"], item_css, inner_html,
        mode=ctx.mode,
        inner_class="debug-box" if ctx.mode == "debug" else None,
    )


def render_shape(node: Dict, ctx: BuildContext, omit_position_override: bool = False) -> str:
    box_css = _prepare_css(node, ctx)
    util = []
    if ctx.mode == "content":
        names, box_css = css_to_classes(box_css, ctx.utility_cache)
        util = list(names)
        ctx.use(util)

    if ctx.mode == "debug":
        classes = ["debug-box"]
    else:
        # "shape rect" は既存スタイルとの互換のため残す
        classes = ["shape", "rect"]
        semantic = semantic_class_name(node.get("name") or "", "shape")
        if semantic not in classes:
            classes.append(semantic)
        classes += util
        shared, box_css = ctx.apply_shared(box_css, node["layout"])
        if shared:
            classes.append(shared)

    return render_box(
        " ".join(classes), node["id"], node["layout"], box_css, "",
        mode=ctx.mode,
        inner_class="debug-box" if ctx.mode == "debug" else None,
        omit_position=_omit_position(node, ctx, omit_position_override),
        has_stroke=_has_stroke(node),
    )


def render_node(node: Dict, ctx: BuildContext, omit_position_override: bool = False) -> str:
    if not node:
        raise RenderError("render_node called without an IR node")
    if not isinstance(node.get("layout"), dict):
        raise RenderError(f"IR node {node.get('id')} has no layout")
    kind = node.get("kind")
    if kind == "svg":
        return render_svg(node, ctx)
    if kind == "frame":
        return render_frame(node, ctx, omit_position_override)
    if kind == "text":
        return render_text(node, ctx, omit_position_override)
    return render_shape(node, ctx, omit_position_override)


def render_nodes(nodes: List[Dict], mode: str = "content", min_repeat: int = 2,
                 omit_first_position: bool = False):
    """
    Render top-level IR nodes and return (html_parts, ctx).

    Content mode runs twice: the first pass only counts residual css in the
    shared pool, then the pool is frozen and the second pass emits markup
    with shared classes swapped in. Debug mode renders once.
    """
    size_freq = collect_size_freq(nodes)

    def run(ctx):
        return [render_node(n, ctx, omit_first_position and index == 0) for index, n in enumerate(nodes)]

    if mode != "content":
        ctx = BuildContext(mode, size_freq=size_freq)
        return run(ctx), ctx

    pool = SharedClassPool(min_repeat)
    probe = BuildContext("content", pool=pool, size_freq=size_freq)
    run(probe)
    pool.freeze()
    ctx = BuildContext("content", pool=pool, size_freq=size_freq, utility_cache=probe.utility_cache)
    parts = run(ctx)
    logger.info("[RENDER] %d nodes, %d utility classes, %d shared classes",
                len(nodes), len(ctx.used_classes), len(pool.names))
    return parts, ctx
