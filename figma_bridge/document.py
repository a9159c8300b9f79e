"""
Documents

- Preview:  viewport > view-offset > composition > content-layer の入れ子で
            デザインの座標系をそのまま再現する (title "Bridge Preview")
- Content:  ``.figma-export`` スコープの書き出し用フラグメント / 単体 HTML
"""

import math
import re
from typing import Dict, List, Optional

from .errors import CompositionError
from .fonts import build_font_links
from .render import render_nodes
from .utility_classes import build_utility_css

EXPORT_SCOPE = ".figma-export"


def compute_viewport(bounds: Dict, union: Dict, padding: float = 4) -> Dict:
    """
    Viewport covering both the composition bounds and the render union.

    ``padding`` leaves room for the debug outline (3px when selected).
    """
    min_x = min(0, union["x"]) - padding
    min_y = min(0, union["y"]) - padding
    max_x = max(bounds["width"], union["x"] + union["width"]) + padding
    max_y = max(bounds["height"], union["y"] + union["height"]) + padding
    return {
        "view_width": max_x - min_x,
        "view_height": max_y - min_y,
        "min_x_view": min_x,
        "min_y_view": min_y,
    }


def get_root_padding(nodes: List[Dict]) -> Optional[Dict]:
    """
    ルートが flex フレーム 1 つだけなら、その left/top を content-layer の padding に移す。
    """
    if not isinstance(nodes, list) or len(nodes) != 1:
        return None
    layout = (nodes[0] or {}).get("layout") or {}
    if layout.get("display") != "flex" or layout.get("position") != "absolute":
        return None
    left, top = layout.get("left"), layout.get("top")
    if not isinstance(left, (int, float)) or not isinstance(top, (int, float)):
        return None
    if left == 0 and top == 0:
        return None
    return {"left": left, "top": top}


def _px(n) -> str:
    if isinstance(n, float) and n.is_integer():
        n = int(n)
    return f"{n}px"


def build_base_styles(viewport: Dict, bounds: Dict) -> str:
    return f"""html, body {{
  margin: 0;
  font-family: -apple-system, BlinkMacSystemFont, "Helvetica Neue", Helvetica, Arial, sans-serif;
  font-synthesis-weight: none;
  background: transparent;
  box-sizing: border-box;
  overflow: hidden;
}}
.viewport {{
  position: relative;
  width: {_px(viewport["width"])};
  height: {_px(viewport["height"])};
  background: transparent;
  box-sizing: border-box;
  transform-origin: top left;
}}
.view-offset {{
  position: absolute;
  left: {_px(-viewport["offset_x"])};
  top: {_px(-viewport["offset_y"])};
  width: 100%;
  height: 100%;
  background: transparent;
  box-sizing: border-box;
}}
.composition {{
  position: absolute;
  left: 0px;
  top: 0px;
  width: {_px(bounds["width"])};
  height: {_px(bounds["height"])};
  background: transparent;
  box-sizing: border-box;
}}
.content-layer {{
  position: relative;
  z-index: 0;
}}
.frame, .shape, .text, .svg-container, .mask-container {{
  box-sizing: border-box;
  position: relative;
  z-index: 0;
}}
.svg-container > svg {{
  display: block;
  width: 100%;
  height: 100%;
  shape-rendering: geometricPrecision;
}}
.svg-container > img {{
  display: block;
  width: 100%;
  height: 100%;
}}"""


DEBUG_STYLES = """
:root {
  color-scheme: light;
  --bridge-debug-blue: #0499ff;
  --bridge-debug-orange: #ff9904;
  --bridge-scale: 1;
  --bridge-debug-alpha: 0.25;
  --bridge-debug-z: 999999;
}
.debug-overlay {
  position: absolute;
  left: 0;
  top: 0;
  width: 100%;
  height: 100%;
  pointer-events: none;
  z-index: var(--bridge-debug-z);
  overflow: visible;
}
.debug-box, .debug-svg {
  box-sizing: border-box;
  position: relative;
  background: transparent !important;
  border: 0 !important;
  box-shadow: none !important;
  filter: none !important;
  backdrop-filter: none !important;
  -webkit-backdrop-filter: none !important;
  mix-blend-mode: normal !important;
  opacity: 1 !important;
  overflow: visible !important;
  --bridge-stroke: calc(1px / var(--bridge-scale));
  outline: var(--bridge-stroke) solid rgba(4, 153, 255, var(--bridge-debug-alpha, 0));
  outline-offset: 0;
  pointer-events: auto;
}
.debug-svg.shape-only { outline: none !important; }
.debug-box.has-wrapper { pointer-events: none; }
.debug-box.has-wrapper > .debug-box { pointer-events: auto; }
.debug-overlay .debug-box.is-hover, .debug-overlay .debug-svg.is-hover { z-index: 2147483600 !important; }
.debug-overlay .debug-box.is-selected, .debug-overlay .debug-svg.is-selected { z-index: 2147483647 !important; }
.debug-box.is-hover, .debug-svg.is-hover { --bridge-stroke: calc(2px / var(--bridge-scale)); outline: var(--bridge-stroke) solid var(--bridge-debug-blue) !important; }
.debug-box.is-selected, .debug-svg.is-selected { --bridge-stroke: calc(3px / var(--bridge-scale)); outline: var(--bridge-stroke) solid var(--bridge-debug-blue) !important; }
.debug-svg.shape-only.is-hover { outline: var(--bridge-stroke) solid var(--bridge-debug-blue) !important; }
.debug-svg.shape-only.is-selected { outline: var(--bridge-stroke) solid var(--bridge-debug-blue) !important; }
.debug-svg.is-hover svg *, .debug-svg.is-selected svg * { stroke-opacity: 1 !important; }
.debug-box.has-wrapper { outline: none !important; }
.debug-box.has-wrapper > .debug-box { outline: calc(1px / var(--bridge-scale)) solid rgba(4, 153, 255, var(--bridge-debug-alpha, 0)); }
.debug-box.has-wrapper.is-hover { outline: none !important; }
.debug-box.has-wrapper.is-selected { outline: none !important; }
.debug-box.has-wrapper.is-hover > .debug-box { outline: calc(2px / var(--bridge-scale)) solid var(--bridge-debug-blue) !important; }
.debug-box.has-wrapper.is-selected > .debug-box { outline: calc(3px / var(--bridge-scale)) solid var(--bridge-debug-blue) !important; }
.frame.is-hover, .shape.is-hover, .text.is-hover, .svg-container.is-hover {
  outline: calc(2px / var(--bridge-scale)) solid var(--bridge-debug-blue) !important;
}
.frame.is-selected, .shape.is-selected, .text.is-selected, .svg-container.is-selected {
  outline: calc(3px / var(--bridge-scale)) solid var(--bridge-debug-blue) !important;
}
"""


def build_debug_styles() -> str:
    return DEBUG_STYLES


def _check_composition(composition: Dict) -> Dict:
    if not isinstance(composition, dict):
        raise CompositionError("invalid composition payload")
    bounds = composition.get("bounds")
    if not isinstance(bounds, dict) or not isinstance(bounds.get("width"), (int, float)) \
            or not isinstance(bounds.get("height"), (int, float)):
        raise CompositionError("composition bounds missing width/height")
    if not composition.get("children"):
        raise CompositionError("composition contains no children")
    return bounds


# ------------------------------------------------------------
# Preview
# ------------------------------------------------------------

def build_preview_pieces(composition: Dict, nodes: List[Dict], union: Dict, debug_enabled: bool = False,
                         min_repeat: int = 2, padding: float = 4, shared_scope: str = "[data-figma-render]") -> Dict:
    bounds = _check_composition(composition)
    vp = compute_viewport(bounds, union, padding)
    viewport = {
        "width": math.ceil(vp["view_width"]),
        "height": math.ceil(vp["view_height"]),
        "offset_x": vp["min_x_view"],
        "offset_y": vp["min_y_view"],
    }

    pad = get_root_padding(nodes)
    content_layer_style = f"padding:{_px(pad['top'])} 0 0 {_px(pad['left'])};" if pad else ""

    shape_html, ctx = render_nodes(nodes, "content", min_repeat, omit_first_position=bool(pad))
    debug_html = render_nodes(nodes, "debug")[0] if debug_enabled else []
    return {
        "shape_html": shape_html,
        "debug_html": debug_html,
        "used_classes": list(ctx.used_classes),
        "viewport": viewport,
        "bounds": bounds,
        "content_layer_style": content_layer_style,
        "shared_css": ctx.pool.to_css(shared_scope),
    }


def wrap_in_document(body_html: str, viewport: Dict, bounds: Dict, styles: str,
                     content_layer_style: str = "", head_links: str = "") -> str:
    layer_attr = f' style="{content_layer_style}"' if content_layer_style else ""
    return (
        "<!doctype html>\n<html lang=\"en\">\n"
        "  <head>\n    <meta charset=\"utf-8\" />\n    <title>Bridge Preview</title>\n"
        "    <base href=\"/\">\n"
        f"{head_links}"
        f"    <style>{build_base_styles(viewport, bounds)}\n{styles}</style>\n"
        "  </head>\n"
        "  <body>\n    <div class=\"viewport\">\n      <div class=\"view-offset\">\n"
        "        <div class=\"composition\" data-figma-render=\"1\">\n"
        f"<div class=\"content-layer\"{layer_attr}>\n{body_html}\n</div>\n"
        "        </div>\n      </div>\n    </div>\n  </body>\n</html>"
    )


def create_preview_html(composition: Dict, nodes: List[Dict], css_rules: str, union: Dict,
                        debug_enabled: bool = False, google_fonts_url: Optional[str] = None,
                        min_repeat: int = 2, padding: float = 4, shared_scope: str = "[data-figma-render]") -> Dict:
    """Self-contained preview document (styles inlined)."""
    pieces = build_preview_pieces(composition, nodes, union, debug_enabled, min_repeat, padding, shared_scope)
    utility_css = build_utility_css(pieces["used_classes"])
    html = wrap_in_document(
        "\n".join(pieces["shape_html"]),
        pieces["viewport"],
        pieces["bounds"],
        f"{utility_css}\n{css_rules or ''}\n{pieces['shared_css']}",
        pieces["content_layer_style"],
        build_font_links(google_fonts_url),
    )
    return {
        "html": html,
        "base_width": pieces["viewport"]["width"],
        "base_height": pieces["viewport"]["height"],
        "render_union": union,
        "debug_html": "\n".join(pieces["debug_html"]),
        "debug_css": build_debug_styles(),
    }


def create_preview_assets(composition: Dict, nodes: List[Dict], css_rules: str, union: Dict,
                          debug_enabled: bool = False, google_fonts_url: Optional[str] = None,
                          min_repeat: int = 2, padding: float = 4,
                          stylesheet_href: str = "/preview/styles.css",
                          shared_scope: str = "[data-figma-render]") -> Dict:
    """Preview document that links an external stylesheet; the css comes back as css_text."""
    pieces = build_preview_pieces(composition, nodes, union, debug_enabled, min_repeat, padding, shared_scope)
    base = build_base_styles(pieces["viewport"], pieces["bounds"])
    utility_css = build_utility_css(pieces["used_classes"])
    css_text = f"{base}\n{utility_css}\n{css_rules or ''}\n{pieces['shared_css']}"

    layer_attr = f' style="{pieces["content_layer_style"]}"' if pieces["content_layer_style"] else ""
    links = build_font_links(google_fonts_url)
    html = (
        "<!doctype html>\n<html lang=\"en\">\n  <head>\n    <meta charset=\"utf-8\" />\n"
        "    <title>Bridge Preview</title>\n    <base href=\"/\">\n"
        f"{links}"
        f"    <link rel=\"stylesheet\" href=\"{stylesheet_href}\"/>\n  </head>\n"
        "  <body>\n    <div class=\"viewport\">\n      <div class=\"view-offset\">\n"
        "        <div class=\"composition\" data-figma-render=\"1\">\n"
        f"          <div class=\"content-layer\"{layer_attr}>\n"
        + "\n".join(pieces["shape_html"])
        + "\n          </div>\n        </div>\n      </div>\n    </div>\n  </body>\n</html>"
    )
    return {
        "html": html,
        "css_text": css_text,
        "base_width": pieces["viewport"]["width"],
        "base_height": pieces["viewport"]["height"],
        "render_union": union,
        "debug_html": "\n".join(pieces["debug_html"]),
        "debug_css": build_debug_styles(),
    }


# ------------------------------------------------------------
# Content export
# ------------------------------------------------------------

CONTENT_BASE_STYLES = (
    "{scope} .svg-container > svg{{display:block;width:100%;height:100%;shape-rendering:geometricPrecision;}}\n"
    "{scope} .svg-container > img{{display:block;width:100%;height:100%;}}"
)


def create_content_assets(nodes: List[Dict], css_rules: str, min_repeat: int = 2,
                          scope: str = EXPORT_SCOPE, google_fonts_url: Optional[str] = None) -> Dict:
    """Returns {"body_html", "css_text", "head_links"} for embedding in another page."""
    parts, ctx = render_nodes(nodes, "content", min_repeat)
    utility_css = build_utility_css(ctx.used_classes, scope)
    base = CONTENT_BASE_STYLES.format(scope=scope)
    css_text = f"{base}\n{utility_css}\n{css_rules or ''}\n{ctx.pool.to_css(scope)}"
    return {
        "body_html": "\n".join(parts),
        "css_text": css_text,
        "head_links": build_font_links(google_fonts_url),
    }


def wrap_content_document(body_html: str, css_text: str, head_links: str = "", scope: str = EXPORT_SCOPE) -> str:
    # ".figma-export" → class="figma-export"
    wrapper_class = re.sub(r"^\.", "", scope) if scope.startswith(".") else "figma-export"
    return (
        "<!doctype html>\n<html lang=\"en\">\n  <head>\n    <meta charset=\"utf-8\" />\n"
        "    <title>Exported Content</title>\n"
        f"{head_links}"
        f"    <style>{css_text}</style>\n  </head>\n"
        f"  <body>\n    <div class=\"{wrapper_class}\">\n{body_html}\n    </div>\n  </body>\n</html>"
    )


def create_content_html(nodes: List[Dict], css_rules: str, min_repeat: int = 2,
                        scope: str = EXPORT_SCOPE, google_fonts_url: Optional[str] = None) -> str:
    assets = create_content_assets(nodes, css_rules, min_repeat, scope, google_fonts_url)
    return wrap_content_document(assets["body_html"], assets["css_text"], assets["head_links"], scope)
