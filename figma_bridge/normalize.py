#!/usr/bin/env python3
"""
数値の正規化と transform 行列の分解

- normalize_length / normalize_angle / normalize_scale: px・deg・倍率の丸め
- decompose_matrix: 2D アフィン行列を最短の CSS transform 関数列に変換
- normalize_html: 生成済み HTML の style 属性と <style> ブロックを後処理
"""

import logging
import math
import re
from typing import Dict, Tuple

from .cssutil import fmt_num

logger = logging.getLogger(__name__)

EPSILON = 1e-6
SNAP = 1e-3


def normalize_length(value: float) -> str:
    """長さを px 文字列に (ゼロは単位なしの "0")"""
    if abs(value) < 1e-10:
        return "0"
    rounded = round(value)
    if abs(value - rounded) < SNAP:
        return f"{int(rounded)}px"
    return f"{fmt_num(value, 3)}px"


def normalize_angle(angle: float) -> str:
    a = ((angle % 360) + 360) % 360
    if abs(a) < 1e-10:
        return "0deg"
    rounded = round(a)
    if abs(a - rounded) < SNAP:
        return f"{int(rounded) % 360}deg"
    return f"{fmt_num(a, 2)}deg"


def normalize_scale(value: float) -> str:
    rounded = round(value)
    if abs(value - rounded) < SNAP:
        return str(int(rounded))
    return fmt_num(value, 3)


def _close(x: float, target: float) -> bool:
    return abs(x - target) < EPSILON


def _translate_arg(value: float) -> str:
    text = normalize_length(value)
    return "0px" if text == "0" else text


def _translate(e: float, f: float) -> str:
    """translate(...) or '' when both offsets vanish."""
    if normalize_length(e) == "0" and normalize_length(f) == "0":
        return ""
    return f"translate({_translate_arg(e)}, {_translate_arg(f)})"


def _snap_angle(sin: float, cos: float) -> float:
    angle = math.degrees(math.atan2(sin, cos))
    while angle > 180:
        angle -= 360
    while angle <= -180:
        angle += 360
    rounded = round(angle)
    if abs(angle - rounded) < SNAP:
        return float(rounded)
    return round(angle, 2)


def _fmt_angle(angle: float) -> str:
    return fmt_num(angle, 2)


def decompose_matrix(a: float, b: float, c: float, d: float, e: float, f: float) -> str:
    """
    Classify ``matrix(a,b,c,d,e,f)`` and return the simplest equivalent
    transform list. First match wins:
    identity → translation → uniform scale → rotation → rotation+scale → matrix().
    """
    if all(_close(v, t) for v, t in ((a, 1), (b, 0), (c, 0), (d, 1), (e, 0), (f, 0))):
        return ""

    # translation
    if _close(a, 1) and _close(b, 0) and _close(c, 0) and _close(d, 1):
        return _translate(e, f)

    # uniform scale
    if _close(b, 0) and _close(c, 0) and _close(a, d) and a > 0:
        move = _translate(e, f)
        if _close(a, 1):
            return move
        scale = f"scale({normalize_scale(a)})"
        return f"{move} {scale}" if move else scale

    if _close(a, d) and _close(b, -c):
        # pure rotation
        if _close(a * a + b * b, 1):
            angle = _snap_angle(b, a)
            move = _translate(e, f)
            if _close(angle, 0):
                return move
            rotate = f"rotate({_fmt_angle(angle)}deg)"
            return f"{move} {rotate}" if move else rotate

        # rotation + uniform scale
        magnitude = math.sqrt(a * a + b * b)
        if magnitude > EPSILON and not _close(magnitude, 1):
            angle = _snap_angle(b / magnitude, a / magnitude)
            parts = []
            move = _translate(e, f)
            if move:
                parts.append(move)
            if not _close(angle, 0):
                parts.append(f"rotate({_fmt_angle(angle)}deg)")
            parts.append(f"scale({normalize_scale(magnitude)})")
            return " ".join(parts)

    en = normalize_length(e).replace("px", "")
    fn = normalize_length(f).replace("px", "")
    return "matrix({},{},{},{},{},{})".format(
        normalize_scale(a), normalize_scale(b), normalize_scale(c), normalize_scale(d), en, fn
    )


# ---------------------------------------------------------------------------
# HTML post-normalization
# ---------------------------------------------------------------------------

_PX_RE = re.compile(r"(?<![\w.\[\\-])(-?\d+(?:\.\d+)?)px\b")
_DEG_RE = re.compile(r"(?<![\w.\[\\-])(-?\d+(?:\.\d+)?)deg\b")
_MATRIX_RE = re.compile(r"matrix\(([^)]+)\)")
_SHORTHAND_RE = re.compile(r"(padding|margin|border-radius):\s*([^\s;]+)\s+\2\s+\2\s+\2(?=\s*(?:;|$|\"|'|\}))")
_EMPTY_DECL_RE = re.compile(r"(?<![\w-])[a-z-]+:\s*;")

_STYLE_DQ_RE = re.compile(r'style="([^"]*)"')
_STYLE_SQ_RE = re.compile(r"style='([^']*)'")
_STYLE_BLOCK_RE = re.compile(r"<style([^>]*)>(.*?)</style>", re.I | re.S)


def collapse_shorthand(css: str) -> str:
    """padding / margin / border-radius の 4 値同一指定を 1 値にまとめる"""
    return _SHORTHAND_RE.sub(lambda m: f"{m.group(1)}: {m.group(2)}", css)


def normalize_css_text(css: str) -> Tuple[str, int]:
    """Normalize one CSS blob. Returns (text, number of rewrites)."""
    changes = 0

    def _matrix(m):
        nonlocal changes
        try:
            nums = [float(s.strip()) for s in m.group(1).split(",")]
        except ValueError:
            return m.group(0)
        if len(nums) != 6:
            return m.group(0)
        out = decompose_matrix(*nums)
        if out != m.group(0):
            changes += 1
        return out

    def _px(m):
        nonlocal changes
        out = normalize_length(float(m.group(1)))
        if out != m.group(0):
            changes += 1
        return out

    def _deg(m):
        nonlocal changes
        out = normalize_angle(float(m.group(1)))
        if out != m.group(0):
            changes += 1
        return out

    text = _MATRIX_RE.sub(_matrix, css)
    # transform:matrix(identity) -> "transform:;" which is removed below
    text = _PX_RE.sub(_px, text)
    text = _DEG_RE.sub(_deg, text)

    collapsed = collapse_shorthand(text)
    if collapsed != text:
        changes += 1
        text = collapsed

    cleaned = _EMPTY_DECL_RE.sub("", text)
    if cleaned != text:
        changes += 1
    return cleaned, changes


def normalize_html(html: str) -> Tuple[str, Dict]:
    """
    Normalize CSS values inside ``style="..."``, ``style='...'`` and
    ``<style>`` blocks only. Class names and text are never touched.

    Returns (html, report). On failure the input html is returned unchanged
    and the report carries a warning.
    """
    report = {
        "steps": [],
        "warnings": [],
        "changed": False,
        "stats": {"elementsProcessed": 0, "valuesNormalized": 0},
    }
    total = 0
    elements = 0

    def _blob(text):
        nonlocal total, elements
        out, changes = normalize_css_text(text)
        if changes:
            total += changes
            elements += 1
        return out

    try:
        result = _STYLE_DQ_RE.sub(lambda m: f'style="{_blob(m.group(1))}"', html)
        result = _STYLE_SQ_RE.sub(lambda m: f"style='{_blob(m.group(1))}'", result)
        result = _STYLE_BLOCK_RE.sub(lambda m: f"<style{m.group(1)}>{_blob(m.group(2))}</style>", result)
    except (ValueError, TypeError, re.error) as exc:
        logger.warning("[NORMALIZE] failed, keeping original html: %s", exc)
        report["warnings"].append(f"Normalization failed: {exc}")
        report["steps"].append("Fallback to original HTML")
        return html, report

    report["stats"]["valuesNormalized"] = total
    report["stats"]["elementsProcessed"] = elements
    if total > 0:
        report["changed"] = True
        report["steps"].append(f"Regex normalization: {total} values")
        report["steps"].append("Normalization completed successfully")
    else:
        report["steps"].append("No changes needed")
    return result, report
