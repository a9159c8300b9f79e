"""
End-to-end tests for figma_to_html().

Covers:
- result shape (preview, content export, assets, fonts)
- payload wrapping ({"composition": ...}) and empty input
- asset provider applied to both outputs
- optional number normalization of the final markup

Run with: pytest tests/test_pipeline.py -v
"""

import pytest

from figma_bridge import figma_to_html
from figma_bridge.assets import create_asset_url_provider
from figma_bridge.errors import CompositionError

RESULT_KEYS = {
    "html", "css_text", "base_width", "base_height", "render_union", "assets",
    "fonts", "debug_html", "debug_css", "content",
}


def _build(payload, **kwargs):
    kwargs.setdefault("debug_enabled", False)
    kwargs.setdefault("normalize_output", False)
    kwargs.setdefault("min_repeat", 2)
    kwargs.setdefault("viewport_padding", 4)
    return figma_to_html(payload, **kwargs)


class TestFigmaToHtml:
    def test_result_shape(self, card_payload):
        result = _build(card_payload)
        assert set(result) == RESULT_KEYS
        assert set(result["content"]) == {"body_html", "css_text", "head_links", "base_width", "base_height"}

    def test_preview(self, card_payload):
        result = _build(card_payload)
        assert '<link rel="stylesheet" href="/preview/styles.css"/>' in result["html"]
        assert 'class="frame card' in result["html"]
        assert ".flex{display:flex;}" in result["css_text"]
        assert (result["base_width"], result["base_height"]) == (408, 308)
        assert result["render_union"] == {"x": 20, "y": 30, "width": 200, "height": 80}

    def test_fonts_and_assets(self, card_payload):
        result = _build(card_payload)
        assert "family=Inter" in result["fonts"]["google_fonts_url"]
        assert result["fonts"]["fonts"][0]["family"] == "Inter"
        assert result["assets"] == {"images": [], "svgs": []}

    def test_content_export(self, card_payload):
        content = _build(card_payload)["content"]
        assert ".figma-export .flex{display:flex;}" in content["css_text"]
        assert (content["base_width"], content["base_height"]) == (200, 80)
        assert "<link" in content["head_links"]
        assert "Hello" in content["body_html"]

    def test_bare_composition(self, card_composition):
        result = _build(card_composition)
        assert result["base_width"] == 408

    def test_debug_overlay(self, card_payload):
        result = _build(card_payload, debug_enabled=True)
        assert 'data-layer-id="2:2"' in result["debug_html"]

    @pytest.mark.parametrize("payload", [None, {}])
    def test_empty_payload(self, payload):
        with pytest.raises(CompositionError):
            _build(payload)

    def test_missing_children(self, make_composition):
        with pytest.raises(CompositionError):
            _build(make_composition([]))


class TestAssetsInPipeline:
    def test_image_fill_is_rewritten(self, make_node, make_composition):
        rect = make_node("1:1", style={"fills": [{"type": "IMAGE", "imageId": "hero"}]})
        result = _build(make_composition([rect]),
                        asset_url_provider=create_asset_url_provider(absolute_path=True))
        assert result["assets"]["images"] == ["hero"]
        assert "url('/images/hero.png')" in result["html"] + result["css_text"]
        assert "url('/images/hero.png')" in result["content"]["body_html"] + result["content"]["css_text"]


class TestNormalizeOutput:
    def test_rotation_matrix_is_simplified(self, make_node, make_composition, make_solid):
        rect = make_node("1:1", x=50, y=10, w=40, h=20, name="Arrow",
                         absoluteTransform=[[0, -1, 50], [1, 0, 10]],
                         renderBounds={"x": 30, "y": 10, "width": 20, "height": 40},
                         style={"fills": [make_solid(1, 0, 0)]})
        raw = _build(make_composition([rect]))
        assert "transform:matrix(0,1,-1,0,0,0);" in raw["content"]["body_html"]

        rect = make_node("1:1", x=50, y=10, w=40, h=20, name="Arrow",
                         absoluteTransform=[[0, -1, 50], [1, 0, 10]],
                         renderBounds={"x": 30, "y": 10, "width": 20, "height": 40},
                         style={"fills": [make_solid(1, 0, 0)]})
        result = _build(make_composition([rect]), normalize_output=True)
        assert "transform:rotate(90deg)" in result["content"]["body_html"]
        assert "matrix(" not in result["content"]["body_html"]
