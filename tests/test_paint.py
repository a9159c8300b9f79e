"""
Tests for paint, effect, text and stroke CSS.

Covers:
- rgba_to_css() / gradient_to_css(): color formatting, gradient kinds and angles
- collect_paint_css(): single layer shorthand, layer order, image scale modes, hidden fills
- border_radius_css(), parse_effects(), effect_tokens(), compute_effects_mode()
- collect_text_css() / segment_css() / render_text_segments()
- collect_stroke_style(): INSIDE / CENTER / OUTSIDE mapping, pseudo-element fallback, text strokes

Run with: pytest tests/test_paint.py -v
"""

import pytest

from figma_bridge.paint import (
    border_radius_css,
    collect_paint_css,
    collect_text_css,
    compute_effects_mode,
    effect_tokens,
    gradient_to_css,
    parse_effects,
    render_text_segments,
    rgba_to_css,
    segment_css,
)
from figma_bridge.stroke import CssCollector, collect_stroke_style

RED = {"r": 1, "g": 0, "b": 0, "a": 1}
BLUE = {"r": 0, "g": 0, "b": 1, "a": 1}
SHADOW = {"type": "DROP_SHADOW", "offset": {"x": 0, "y": 4}, "radius": 8,
          "color": {"r": 0, "g": 0, "b": 0, "a": 0.25}}


# ---------------------------------------------------------------------------
# Colors and gradients
# ---------------------------------------------------------------------------

class TestColors:
    def test_opaque(self):
        assert rgba_to_css({"r": 1, "g": 1, "b": 1, "a": 1}) == "rgb(255,255,255)"

    def test_alpha(self):
        assert rgba_to_css({"r": 1, "g": 0, "b": 0, "a": 0.5}) == "rgba(255,0,0,0.5)"

    def test_tiny_alpha_is_zero(self):
        assert rgba_to_css({"r": 0, "g": 0, "b": 0, "a": 0.001}) == "rgba(0,0,0,0)"

    def test_missing(self):
        assert rgba_to_css(None) is None


class TestGradients:
    def _stops(self):
        return [{"position": 0, "color": RED}, {"position": 1, "color": BLUE}]

    def test_linear_from_handles(self):
        fill = {"type": "GRADIENT_LINEAR", "gradientStops": self._stops(),
                "gradientHandlePositions": [{"x": 0.5, "y": 0}, {"x": 0.5, "y": 1}]}
        assert gradient_to_css(fill) == "linear-gradient(180deg, rgb(255,0,0) 0.00%, rgb(0,0,255) 100.00%)"

    @pytest.mark.parametrize("kind,prefix", [
        ("GRADIENT_RADIAL", "radial-gradient(circle, "),
        ("GRADIENT_ANGULAR", "conic-gradient(from 0deg, "),
        ("GRADIENT_DIAMOND", "radial-gradient(ellipse, "),
    ])
    def test_other_kinds(self, kind, prefix):
        assert gradient_to_css({"type": kind, "gradientStops": self._stops()}).startswith(prefix)

    def test_fill_opacity_applies_to_stops(self):
        fill = {"type": "GRADIENT_RADIAL", "opacity": 0.5, "gradientStops": self._stops()}
        assert "rgba(255,0,0,0.5) 0.00%" in gradient_to_css(fill)

    def test_single_stop_is_dropped(self):
        assert gradient_to_css({"type": "GRADIENT_LINEAR", "gradientStops": [{"position": 0, "color": RED}]}) is None


# ---------------------------------------------------------------------------
# Backgrounds
# ---------------------------------------------------------------------------

class TestPaintCss:
    def test_single_solid(self, make_solid):
        assert collect_paint_css({"style": {"fills": [make_solid(1, 1, 1)]}}) == "background:rgb(255,255,255);"

    def test_hidden_fill_is_skipped(self, make_solid):
        assert collect_paint_css({"style": {"fills": [make_solid(1, 1, 1, visible=False)]}}) == ""

    def test_layers_are_reversed(self, make_solid):
        css = collect_paint_css({"style": {"fills": [make_solid(1, 0, 0), make_solid(0, 0, 1)]}})
        assert css.startswith("background-image:linear-gradient(0deg, rgb(0,0,255) 0%, rgb(0,0,255) 100%), "
                              "linear-gradient(0deg, rgb(255,0,0) 0%, rgb(255,0,0) 100%);")
        assert "background-repeat:no-repeat, no-repeat;" in css
        assert "background-blend-mode" not in css

    def test_blend_mode(self, make_solid):
        fills = [make_solid(1, 0, 0), make_solid(0, 0, 1, blendMode="MULTIPLY")]
        css = collect_paint_css({"style": {"fills": fills}})
        assert css.endswith("background-blend-mode:multiply, normal;")

    def test_image_fill(self):
        css = collect_paint_css({"style": {"fills": [{"type": "IMAGE", "imageId": "img1", "scaleMode": "FIT"}]}})
        assert css == ("background-image:url('images/img1.png');background-position:center;"
                       "background-size:contain;background-repeat:no-repeat;")

    def test_crop_uses_image_transform(self):
        fill = {"type": "IMAGE", "imageId": "img1", "scaleMode": "CROP",
                "imageTransform": [[0.5, 0, 0.25], [0, 0.5, 0]]}
        css = collect_paint_css({"width": 100, "height": 50, "style": {"fills": [fill]}})
        assert "background-size:200.00px 100.00px;" in css
        assert "background-position:-50.00px 0.00px;" in css

    def test_text_skips_fills(self, make_solid):
        node = {"type": "TEXT", "style": {"fills": [make_solid(0, 0, 0)]}}
        assert collect_paint_css(node, skip_for_text=True) == ""

    def test_border_radius(self):
        assert border_radius_css({"uniform": 8}) == "border-radius:8px;"
        assert border_radius_css({"corners": [4, 0, 4, 0]}) == "border-radius:4px 0px 4px 0px;"
        assert border_radius_css(None) == ""


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------

class TestEffects:
    def test_parse(self):
        effects = parse_effects({"style": {"effects": [
            SHADOW,
            {"type": "LAYER_BLUR", "radius": 8},
            {"type": "DROP_SHADOW", "visible": False, "radius": 2},
        ]}})
        assert effects["layer_blur"] == 8
        assert effects["shadows"] == [{"type": "DROP_SHADOW", "x": 0, "y": 4, "blur": 8, "spread": 0,
                                       "color": "rgba(0,0,0,0.25)"}]

    def test_box_shadow_tokens(self):
        tokens = effect_tokens(parse_effects({"style": {"effects": [SHADOW]}}))
        assert tokens["box_shadows"] == ["0px 4px 8px 0px rgba(0,0,0,0.25)"]

    def test_text_shadow_tokens(self):
        tokens = effect_tokens(parse_effects({"style": {"effects": [SHADOW]}}), is_text=True)
        assert tokens["text_shadows"] == ["0px 4px 8px rgba(0,0,0,0.25)"]
        assert tokens["box_shadows"] == []

    def test_content_target_uses_drop_shadow(self):
        tokens = effect_tokens(parse_effects({"style": {"effects": [SHADOW]}}), target="content")
        assert tokens["filters"] == ["drop-shadow(0px 4px 8px rgba(0,0,0,0.25))"]

    def test_blur_is_halved(self):
        tokens = effect_tokens({"shadows": [], "layer_blur": 8, "background_blur": 10})
        assert tokens["filters"] == ["blur(4px)"]
        assert tokens["backdrop_filters"] == ["blur(5px)"]

    def test_effects_mode(self, make_solid):
        assert compute_effects_mode({"style": {"effects": [SHADOW]}}) == "inherit"
        assert compute_effects_mode({"style": {"effects": [SHADOW], "fills": [make_solid(1, 1, 1)]}}) == "self"
        assert compute_effects_mode({"style": {}}) == "self"


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

class TestText:
    def test_truncation(self):
        result = collect_text_css({"text": {"characters": "a", "textTruncation": "ENDING"}})
        assert result["css"].startswith("white-space:nowrap;overflow:hidden;text-overflow:ellipsis;")

    def test_fixed_box_wraps(self):
        result = collect_text_css({"text": {"characters": "a", "textAlignHorizontal": "CENTER"}})
        assert result == {"css": "white-space:pre-wrap;text-align:center;", "auto_width": False, "auto_height": False}

    def test_auto_width_vertical_align(self):
        result = collect_text_css({"text": {"characters": "a", "textAutoResize": "WIDTH_AND_HEIGHT",
                                            "textAlignVertical": "CENTER"}})
        assert result["css"] == "white-space:pre;display:flex;align-items:center;"
        assert result["auto_width"] and result["auto_height"]

    def test_segment_css(self, make_solid):
        seg = {
            "fontSize": 16,
            "fontName": {"family": "Noto Sans JP", "style": "Bold Italic"},
            "letterSpacing": {"unit": "PERCENT", "value": 5},
            "lineHeight": {"unit": "PIXELS", "value": 24},
            "fills": [make_solid(0, 0, 0)],
            "textDecoration": "UNDERLINE",
        }
        assert segment_css(seg) == (
            "font-size:16px;font-family:'Noto Sans JP', sans-serif;font-style:italic;font-weight:700;"
            "letter-spacing:0.05em;line-height:24px;color:rgb(0,0,0);text-decoration:underline;"
        )

    def test_segment_without_fill_is_transparent(self):
        assert segment_css({"letterSpacing": {"unit": "PIXELS", "value": 0.004}}) == "color:transparent;"

    def test_plain_characters_are_escaped(self):
        assert render_text_segments({"characters": "A<B\nC"}) == "A&lt;B<br>C"

    def test_segments_with_newline_are_wrapped(self):
        html = render_text_segments({"characters": "a\nb", "segments": [{"start": 0, "end": 3}]})
        assert html == '<div><span style="color:transparent;">a<br>b</span></div>'

    def test_empty(self):
        assert render_text_segments(None) == ""


# ---------------------------------------------------------------------------
# Strokes
# ---------------------------------------------------------------------------

def _stroked(align, node_type="RECTANGLE", dash=None, weight=2):
    style = {
        "strokes": [{"type": "SOLID", "color": {"r": 0, "g": 0, "b": 0, "a": 1}}],
        "strokeWeights": {"t": weight, "r": weight, "b": weight, "l": weight},
        "strokeAlign": align,
    }
    if dash:
        style["dashPattern"] = dash
    return {"id": "n1", "type": node_type, "width": 10, "height": 10, "style": style}


class TestStrokes:
    def test_inside(self):
        assert collect_stroke_style(_stroked("INSIDE"), CssCollector()) == \
            {"css": "", "box_shadow": ["inset 0 0 0 2px rgb(0,0,0)"]}

    def test_center(self):
        assert collect_stroke_style(_stroked("CENTER"), CssCollector())["css"] == "border:2px solid rgb(0,0,0);"

    def test_outside(self):
        assert collect_stroke_style(_stroked("OUTSIDE"), CssCollector())["css"] == \
            "outline:2px solid rgb(0,0,0);outline-offset:0;"

    def test_dashed_uses_pseudo_element(self):
        collector = CssCollector()
        result = collect_stroke_style(_stroked("CENTER", dash=[4, 4]), collector)
        assert result == {"css": "", "box_shadow": []}
        rule = str(collector)
        assert rule.startswith('[data-layer-id="n1"]::before { ')
        assert "border:2px dashed rgb(0,0,0)" in rule
        assert "top:-1px" in rule

    def test_dotted(self):
        collector = CssCollector()
        collect_stroke_style(_stroked("INSIDE", dash=[1, 2]), collector)
        assert "dotted" in str(collector)

    def test_text_stroke(self):
        result = collect_stroke_style(_stroked("OUTSIDE", node_type="TEXT"), CssCollector())
        assert result["css"] == "-webkit-text-stroke:2px rgb(0,0,0);paint-order:stroke fill;"

    def test_zero_weight(self):
        collector = CssCollector()
        assert collect_stroke_style(_stroked("INSIDE", weight=0), collector) == {"css": "", "box_shadow": []}
        assert collector.is_empty()
