"""
アセット URL の差し替え

HTML / CSS 中の images/<id>.png と svgs/<file> を、呼び出し側が渡す
provider(asset_id, asset_type, data=None) -> url の結果に置き換える。
"""

import base64
import logging
import re
from typing import Callable, Dict, List, Optional

from .ir import iter_ir

logger = logging.getLogger(__name__)

AssetUrlProvider = Callable[..., str]

IMAGE_URL_RE = re.compile(r"([\"'(])(?:/)?images/([a-zA-Z0-9_-]+)\.png([\"')])")
SVG_SRC_RE = re.compile(r'(src=")(?:[^"]*/)?svgs/([^"]+)(")')


def create_asset_url_provider(absolute_path: bool = False) -> AssetUrlProvider:
    """
    Default provider used by the CLI scripts.

    Images map to ``images/<id>.png`` (``/images/...`` with absolute_path);
    svgs with markup become an inline base64 data URL, otherwise ``svgs/<file>``.
    """
    prefix = "/" if absolute_path else ""

    def provider(asset_id: str, asset_type: str, data: Optional[str] = None) -> str:
        if asset_type == "image":
            return f"{prefix}images/{asset_id}.png"
        if asset_type == "svg" and data:
            encoded = base64.b64encode(data.encode("utf-8")).decode("ascii")
            return f"data:image/svg+xml;base64,{encoded}"
        return f"{prefix}svgs/{asset_id}"

    return provider


def svg_content_map(nodes: List[Dict]) -> Dict[str, str]:
    out = {}
    for node in iter_ir(nodes):
        if node.get("svg_file") and node.get("svg_content"):
            out[node["svg_file"]] = node["svg_content"]
    return out


def apply_asset_url_provider(html: str, css_text: str, nodes: List[Dict],
                             provider: Optional[AssetUrlProvider] = None) -> Dict[str, str]:
    """Returns {"html", "css_text"}. provider が無ければそのまま返す"""
    if provider is None:
        return {"html": html, "css_text": css_text}

    svgs = svg_content_map(nodes)
    counts = {"image": 0, "svg": 0}

    def image_sub(m):
        counts["image"] += 1
        return f"{m.group(1)}{provider(m.group(2), 'image')}{m.group(3)}"

    def svg_sub(m):
        counts["svg"] += 1
        file_name = m.group(2)
        return f"{m.group(1)}{provider(file_name, 'svg', svgs.get(file_name))}{m.group(3)}"

    out_css = IMAGE_URL_RE.sub(image_sub, css_text or "")
    out_html = IMAGE_URL_RE.sub(image_sub, html or "")
    out_html = SVG_SRC_RE.sub(svg_sub, out_html)
    logger.debug("[ASSETS] rewrote %d image urls, %d svg sources", counts["image"], counts["svg"])
    return {"html": out_html, "css_text": out_css}
