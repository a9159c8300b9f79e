"""
figma_to_html(): composition JSON → preview / content HTML

normalize → IR → preview + content → asset URL 差し替え → (任意) 数値の後処理
"""

import logging
from typing import Dict, Optional

from . import config
from .assets import AssetUrlProvider, apply_asset_url_provider
from .document import create_content_assets, create_preview_assets
from .errors import CompositionError
from .ir import composition_to_ir, normalize_composition, unwrap_payload
from .normalize import normalize_css_text, normalize_html

logger = logging.getLogger(__name__)


def _post_normalize(html: str, css_text: str, label: str):
    html, report = normalize_html(html)
    css_text, changes = normalize_css_text(css_text)
    for warning in report["warnings"]:
        logger.warning("[NORMALIZE] %s: %s", label, warning)
    logger.debug("[NORMALIZE] %s: %d html values, %d css blocks changed",
                 label, report["stats"]["valuesNormalized"], changes)
    return html, css_text


def figma_to_html(payload: Dict, asset_url_provider: Optional[AssetUrlProvider] = None,
                  debug_enabled: Optional[bool] = None, normalize_output: Optional[bool] = None,
                  min_repeat: Optional[int] = None, viewport_padding: Optional[float] = None,
                  stylesheet_href: str = "/preview/styles.css") -> Dict:
    """
    Build the preview document and the content export for one composition.

    ``payload`` may be the composition itself or ``{"composition": {...}}``.
    The composition is normalized in place. Options left as None fall back to
    the values in config (.env).

    Returns:
        {html, css_text, base_width, base_height, render_union, assets, fonts,
         debug_html, debug_css, content: {body_html, css_text, head_links,
         base_width, base_height}}
    """
    if not payload:
        raise CompositionError("figma_to_html: composition required")
    composition = normalize_composition(unwrap_payload(payload))
    debug_enabled = config.DEBUG_OVERLAY if debug_enabled is None else debug_enabled
    normalize_output = config.NORMALIZE_OUTPUT if normalize_output is None else normalize_output
    min_repeat = config.SHARED_CLASS_MIN_REPEAT if min_repeat is None else min_repeat
    padding = config.VIEWPORT_PADDING if viewport_padding is None else viewport_padding

    ir = composition_to_ir(composition)
    fonts_url = ir["font_meta"]["google_fonts_url"]

    preview = create_preview_assets(
        composition, ir["nodes"], ir["css_rules"], ir["render_union"],
        debug_enabled=debug_enabled, google_fonts_url=fonts_url,
        min_repeat=min_repeat, padding=padding, stylesheet_href=stylesheet_href,
        shared_scope=config.PREVIEW_SCOPE,
    )
    content = create_content_assets(
        ir["nodes"], ir["css_rules"], min_repeat=min_repeat,
        scope=config.EXPORT_SCOPE, google_fonts_url=fonts_url,
    )

    mapped_preview = apply_asset_url_provider(preview["html"], preview["css_text"], ir["nodes"], asset_url_provider)
    mapped_content = apply_asset_url_provider(content["body_html"], content["css_text"], ir["nodes"],
                                              asset_url_provider)

    html, css_text = mapped_preview["html"], mapped_preview["css_text"]
    body_html, content_css = mapped_content["html"], mapped_content["css_text"]
    if normalize_output:
        html, css_text = _post_normalize(html, css_text, "preview")
        body_html, content_css = _post_normalize(body_html, content_css, "content")

    union = ir["render_union"]
    logger.info("[RENDER] preview %dx%d, content %d chars",
                preview["base_width"], preview["base_height"], len(body_html))
    return {
        "html": html,
        "css_text": css_text,
        "base_width": preview["base_width"],
        "base_height": preview["base_height"],
        "render_union": union,
        "assets": ir["asset_meta"],
        "fonts": ir["font_meta"],
        "debug_html": preview["debug_html"],
        "debug_css": preview["debug_css"],
        "content": {
            "body_html": body_html,
            "css_text": content_css,
            "head_links": content["head_links"],
            "base_width": union["width"],
            "base_height": union["height"],
        },
    }
