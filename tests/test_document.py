"""
Tests for preview and content documents.

Covers:
- compute_viewport(): union of composition bounds and render union plus padding
- get_root_padding(): single absolute flex root moves its offset into the content layer
- create_preview_html() / create_preview_assets(): document structure, viewport size
- create_content_html(): .figma-export scoped export

Run with: pytest tests/test_document.py -v
"""

import pytest
from bs4 import BeautifulSoup

from figma_bridge.document import (
    compute_viewport,
    create_content_assets,
    create_content_html,
    create_preview_assets,
    create_preview_html,
    get_root_padding,
)
from figma_bridge.errors import CompositionError
from figma_bridge.ir import composition_to_ir, normalize_composition


@pytest.fixture
def card_ir(card_composition):
    composition = normalize_composition(card_composition)
    return composition, composition_to_ir(composition)


# ---------------------------------------------------------------------------
# Viewport
# ---------------------------------------------------------------------------

class TestViewport:
    def test_union_outside_bounds(self):
        vp = compute_viewport({"width": 400, "height": 300}, {"x": -10, "y": 5, "width": 100, "height": 400}, 4)
        assert vp == {"view_width": 418, "view_height": 413, "min_x_view": -14, "min_y_view": -4}

    def test_union_inside_bounds(self):
        vp = compute_viewport({"width": 400, "height": 300}, {"x": 10, "y": 10, "width": 20, "height": 20}, 0)
        assert vp == {"view_width": 400, "view_height": 300, "min_x_view": 0, "min_y_view": 0}


class TestRootPadding:
    def _root(self, make_ir, display="flex", left=20, top=30):
        return make_ir("1", kind="frame", node_type="FRAME", left=left, top=top,
                       children=[], layout={"display": display})

    def test_single_flex_root(self, make_ir):
        assert get_root_padding([self._root(make_ir)]) == {"left": 20, "top": 30}

    def test_block_root(self, make_ir):
        assert get_root_padding([self._root(make_ir, display="block")]) is None

    def test_two_roots(self, make_ir):
        assert get_root_padding([self._root(make_ir), self._root(make_ir)]) is None

    def test_origin(self, make_ir):
        assert get_root_padding([self._root(make_ir, left=0, top=0)]) is None


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------

class TestPreview:
    def test_document(self, card_ir):
        composition, ir = card_ir
        result = create_preview_html(composition, ir["nodes"], ir["css_rules"], ir["render_union"],
                                     google_fonts_url=ir["font_meta"]["google_fonts_url"])
        soup = BeautifulSoup(result["html"], "html.parser")
        assert soup.title.get_text() == "Bridge Preview"
        assert soup.find("div", class_="composition")["data-figma-render"] == "1"

        layer = soup.find("div", class_="content-layer")
        assert layer["style"] == "padding:30px 0 0 20px;"
        card = layer.find("div")
        assert "card" in card["class"]
        # 位置は content-layer の padding に移っている
        assert "position:absolute" not in (card.get("style") or "")
        assert "left:20px" not in (card.get("style") or "")

        assert (result["base_width"], result["base_height"]) == (408, 308)
        assert "width: 408px;" in result["html"]
        assert "fonts.googleapis.com/css2?family=Inter" in result["html"]
        assert result["debug_html"] == ""
        assert "--bridge-debug-blue" in result["debug_css"]

    def test_debug_overlay(self, card_ir):
        composition, ir = card_ir
        result = create_preview_html(composition, ir["nodes"], ir["css_rules"], ir["render_union"],
                                     debug_enabled=True)
        soup = BeautifulSoup(result["debug_html"], "html.parser")
        assert [d["data-layer-id"] for d in soup.find_all("div", class_="debug-box")] == ["1:1", "2:1", "2:2"]

    def test_linked_stylesheet(self, card_ir):
        composition, ir = card_ir
        result = create_preview_assets(composition, ir["nodes"], ir["css_rules"], ir["render_union"],
                                       stylesheet_href="/p/styles.css")
        assert '<link rel="stylesheet" href="/p/styles.css"/>' in result["html"]
        assert "<style>" not in result["html"]
        assert ".viewport {" in result["css_text"]
        assert "\n.flex{display:flex;}" in result["css_text"]

    def test_bad_bounds(self, card_ir):
        composition, ir = card_ir
        composition["bounds"] = {"x": 0, "y": 0}
        with pytest.raises(CompositionError):
            create_preview_html(composition, ir["nodes"], "", ir["render_union"])


# ---------------------------------------------------------------------------
# Content export
# ---------------------------------------------------------------------------

class TestContent:
    def test_scoped_css(self, card_ir):
        _, ir = card_ir
        assets = create_content_assets(ir["nodes"], ir["css_rules"])
        assert ".figma-export .flex{display:flex;}" in assets["css_text"]
        assert assets["css_text"].startswith(".figma-export .svg-container > svg{")
        assert 'class="frame' in assets["body_html"]
        assert assets["head_links"] == ""

    def test_document(self, card_ir):
        _, ir = card_ir
        html = create_content_html(ir["nodes"], ir["css_rules"])
        soup = BeautifulSoup(html, "html.parser")
        assert soup.title.get_text() == "Exported Content"
        wrapper = soup.find("div", class_="figma-export")
        assert wrapper.find("div", class_="card") is not None

    def test_custom_scope(self, card_ir):
        _, ir = card_ir
        html = create_content_html(ir["nodes"], "", scope=".lp-hero")
        assert '<div class="lp-hero">' in html
        assert ".lp-hero .flex{display:flex;}" in html
