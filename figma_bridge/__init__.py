"""Figma composition → HTML/CSS bridge."""

from .assets import apply_asset_url_provider, create_asset_url_provider
from .document import create_content_assets, create_content_html, create_preview_assets, create_preview_html
from .errors import BridgeError, CompositionError, RenderError
from .fonts import FontCollector, collect_fonts
from .ir import composition_to_ir, normalize_composition
from .normalize import normalize_html
from .pipeline import figma_to_html

__version__ = "0.1.0"
