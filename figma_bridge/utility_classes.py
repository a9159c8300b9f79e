#!/usr/bin/env python3
"""
CSS 宣言 → ユーティリティクラス変換

css_to_classes() は 2 パスで処理する:
  1) display / justify / align / overflow などの列挙値 → 固定クラス名
  2) gap / padding / margin / サイズ / フォント系のスカラー値
     → 4px 刻み (半ステップ可) のスケールクラス、無ければ任意値クラス (gap-[9px])

結果は入力文字列そのものをキーにビルド単位のキャッシュへ保存する。
生成したクラスに対応する宣言は残り CSS から必ず取り除く。
"""

import re
from typing import Dict, Iterable, List, Optional, Tuple

from .cssutil import fmt_num, js_num, join_declarations, parse_declarations

UtilityResult = Tuple[Tuple[str, ...], str]

JUSTIFY = {
    "center": "justify-center",
    "flex-end": "justify-end",
    "space-between": "justify-between",
    "space-around": "justify-around",
    "space-evenly": "justify-evenly",
}
ITEMS = {
    "center": "items-center",
    "flex-start": "items-start",
    "flex-end": "items-end",
    "baseline": "items-baseline",
}
SELF = {
    "stretch": "self-stretch",
    "center": "self-center",
    "flex-start": "self-start",
    "flex-end": "self-end",
    "baseline": "self-baseline",
}
TEXT_ALIGN = {"left": "text-left", "center": "text-center", "right": "text-right", "justify": "text-justify"}
WHITESPACE = {
    "normal": "whitespace-normal",
    "nowrap": "whitespace-nowrap",
    "pre": "whitespace-pre",
    "pre-wrap": "whitespace-pre-wrap",
}
WRAP = {"wrap": "flex-wrap", "nowrap": "flex-nowrap", "wrap-reverse": "flex-wrap-reverse"}
BOX_SIZING = {"border-box": "box-border", "content-box": "box-content"}
FONT_WEIGHTS = {
    100: "thin", 200: "extralight", 300: "light", 400: "normal", 500: "medium",
    600: "semibold", 700: "bold", 800: "extrabold", 900: "black",
}
OVERFLOW_VALUES = ("visible", "hidden", "auto", "scroll")
PADDING_SIDES = {"padding-top": "pt", "padding-right": "pr", "padding-bottom": "pb", "padding-left": "pl"}
MARGIN_SIDES = {"margin-top": "mt", "margin-right": "mr", "margin-bottom": "mb", "margin-left": "ml"}

_PX_RE = re.compile(r"^(-)?(\d+(?:\.\d+)?)px$", re.I)
_RADIUS_RE = re.compile(r"^(\d+(?:\.\d+)?)px(?:\s+\1px){0,3}$")
_OUTLINE_RE = re.compile(r"^(\d+(?:\.\d+)?)px\s+solid\s+(.+)$", re.I)
_TRACKING_RE = re.compile(r"^(-?\d+(?:\.\d+)?)(px|em)$", re.I)
_INT_RE = re.compile(r"^\s*(-?\d+)")

_SCALE = r"(?:\d+|\d+\.5)"
_ARB = r"\[(?:\d+(?:\.\d+)?)px\]"
_NUM = r"(\d+(?:\.\d+)?)"
_GAP_CLASS_RE = re.compile(rf"^gap-(?:[xy]-)?(?:{_SCALE}|{_ARB})$")
_GAP_MAIN_RE = re.compile(rf"^gap-(?:{_SCALE}|{_ARB})$")
_PAD_SCALE_RE = re.compile(rf"^(p|px|py|pt|pr|pb|pl)-{_SCALE}$")
_MARGIN_SCALE_RE = re.compile(rf"^-?(m|mx|my|mt|mr|mb|ml)-{_SCALE}$")


def _family_re(prefixes: str) -> re.Pattern:
    return re.compile(rf"^-?(?:{prefixes})-(?:{_SCALE}|{_ARB})$")


_PAD_ANY_RE = re.compile(rf"^(?:p|px|py|pt|pr|pb|pl)-(?:{_SCALE}|{_ARB})$")
_PAD_SIDE_RE = {
    "padding-top": re.compile(rf"^(?:p|py|pt)-(?:{_SCALE}|{_ARB})$"),
    "padding-right": re.compile(rf"^(?:p|px|pr)-(?:{_SCALE}|{_ARB})$"),
    "padding-bottom": re.compile(rf"^(?:p|py|pb)-(?:{_SCALE}|{_ARB})$"),
    "padding-left": re.compile(rf"^(?:p|px|pl)-(?:{_SCALE}|{_ARB})$"),
}
_MARGIN_ANY_RE = _family_re("m|mx|my|mt|mr|mb|ml")
_MARGIN_SIDE_RE = {
    "margin-top": _family_re("mt|my|m"),
    "margin-right": _family_re("mr|mx|m"),
    "margin-bottom": _family_re("mb|my|m"),
    "margin-left": _family_re("ml|mx|m"),
}


def parse_px(value: str) -> Optional[float]:
    m = _PX_RE.match(value.strip())
    if not m:
        return None
    n = float(m.group(2))
    return -n if m.group(1) else n


def px_to_scale(n: float) -> Optional[str]:
    """4px = 1 のスケールに変換 (半ステップまで)。表現できなければ None"""
    doubled = n / 4 * 2
    snapped = round(doubled)
    if abs(doubled - snapped) < 1e-6:
        return js_num(snapped / 2)
    return None


def _scale_of(part: str, allow_negative: bool = False) -> Tuple[Optional[str], str]:
    n = parse_px(part)
    if n is None or (n < 0 and not allow_negative):
        return None, ""
    return px_to_scale(abs(n)), ("-" if n < 0 else "")


class _Classes:
    """Insertion-ordered class set."""

    def __init__(self):
        self.items: Dict[str, None] = {}

    def add(self, name: str):
        if name:
            self.items[name] = None

    def has(self, name: str) -> bool:
        return name in self.items

    def any(self, pattern: re.Pattern) -> bool:
        return any(pattern.match(c) for c in self.items)

    def names(self) -> Tuple[str, ...]:
        return tuple(self.items)


def _enum_pass(entries, classes: _Classes):
    for key, raw in entries:
        v = raw.lower().strip()
        if key == "display" and v in ("flex", "inline-flex"):
            classes.add(v)
        elif key == "flex-direction" and v == "column":
            classes.add("flex-col")
        elif key == "flex-wrap":
            classes.add(WRAP.get(v))
        elif key == "justify-content":
            classes.add(JUSTIFY.get(v))
        elif key == "align-items":
            classes.add(ITEMS.get(v))
        elif key == "align-self":
            classes.add(SELF.get(v))
        elif key == "flex-basis":
            if v in ("0", "0px"):
                classes.add("basis-0")
            elif v == "auto":
                classes.add("basis-auto")
        elif key == "flex-grow" and v == "1":
            classes.add("grow")
        elif key == "flex-shrink" and v == "0":
            classes.add("shrink-0")
        elif key == "box-sizing":
            classes.add(BOX_SIZING.get(v))
        elif key in ("overflow", "overflow-x", "overflow-y") and v in OVERFLOW_VALUES:
            classes.add(f"{key}-{v}")
        elif key == "text-align":
            classes.add(TEXT_ALIGN.get(v))
        elif key == "white-space":
            classes.add(WHITESPACE.get(v))
        elif key == "gap":
            scale, _ = _scale_of(raw)
            if scale is not None:
                classes.add(f"gap-{scale}")
        elif key == "padding":
            _padding_scale(raw.split(), classes)
        elif key in PADDING_SIDES:
            scale, _ = _scale_of(raw)
            if scale is not None:
                classes.add(f"{PADDING_SIDES[key]}-{scale}")
        elif key == "margin":
            _margin_scale(raw.split(), classes)
        elif key in MARGIN_SIDES:
            scale, sign = _scale_of(raw, allow_negative=True)
            if scale is not None:
                classes.add(f"{sign}{MARGIN_SIDES[key]}-{scale}")


def _padding_scale(parts: List[str], classes: _Classes):
    names = {1: ("p",), 2: ("py", "px"), 4: ("pt", "pr", "pb", "pl")}.get(len(parts))
    if not names:
        return
    scales = [_scale_of(p)[0] for p in parts]
    if all(s is not None for s in scales):
        for name, scale in zip(names, scales):
            classes.add(f"{name}-{scale}")


def _margin_scale(parts: List[str], classes: _Classes):
    names = {1: ("m",), 2: ("my", "mx"), 4: ("mt", "mr", "mb", "ml")}.get(len(parts))
    if not names:
        return
    scales = [_scale_of(p, allow_negative=True) for p in parts]
    if all(s is not None for s, _ in scales):
        for name, (scale, sign) in zip(names, scales):
            classes.add(f"{sign}{name}-{scale}")


def _scalar_pass(entries, classes: _Classes):
    has_gap_scale = classes.any(re.compile(rf"^gap-{_SCALE}$"))
    has_padding_scale = classes.any(_PAD_SCALE_RE)
    has_margin_scale = classes.any(_MARGIN_SCALE_RE)

    for key, raw in entries:
        v = raw.strip()
        n = parse_px(v)
        if key in ("width", "height", "font-size", "line-height"):
            if n is not None and n >= 0:
                prefix = {"width": "w", "height": "h", "font-size": "text", "line-height": "leading"}[key]
                classes.add(f"{prefix}-[{js_num(n)}px]")
        elif key == "letter-spacing":
            m = _TRACKING_RE.match(v)
            if m:
                classes.add(f"tracking-[{m.group(1)}{m.group(2).lower()}]")
        elif key == "font-weight":
            m = _INT_RE.match(v)
            if m:
                weight = int(m.group(1))
                classes.add(f"font-{FONT_WEIGHTS[weight]}" if weight in FONT_WEIGHTS else f"font-[{weight}]")
        elif key == "border-radius":
            m = _RADIUS_RE.match(v)
            if m:
                classes.add(f"rounded-[{fmt_num(float(m.group(1)), 3)}px]")
        elif key == "outline":
            m = _OUTLINE_RE.match(v)
            color = re.sub(r"\s*,\s*", ",", m.group(2).strip()) if m else ""
            # class 名に空白は入れられないので、残る場合は inline のまま
            if m and not re.search(r"\s", color):
                classes.add(f"outline-{js_num(float(m.group(1)))}")
                classes.add(f"outline-[{color}]")
        elif key == "outline-offset":
            if n is not None and n >= 0:
                classes.add(f"outline-offset-{js_num(n)}")
        elif key == "gap":
            if n is not None and n >= 0 and not has_gap_scale:
                classes.add(f"gap-[{js_num(n)}px]")
        elif key == "padding" and not has_padding_scale:
            parts = v.split()
            names = {1: ("p",), 2: ("py", "px"), 4: ("pt", "pr", "pb", "pl")}.get(len(parts), ())
            for name, part in zip(names, parts):
                pn = parse_px(part)
                if pn is not None and pn >= 0:
                    classes.add(f"{name}-[{js_num(pn)}px]")
        elif key in PADDING_SIDES and not has_padding_scale:
            if n is not None and n >= 0:
                classes.add(f"{PADDING_SIDES[key]}-[{js_num(n)}px]")
        elif key == "margin" and not has_margin_scale:
            parts = v.split()
            names = {1: ("m",), 2: ("my", "mx"), 4: ("mt", "mr", "mb", "ml")}.get(len(parts), ())
            for name, part in zip(names, parts):
                mn = parse_px(part)
                if mn is not None:
                    classes.add(f"{'-' if mn < 0 else ''}{name}-[{js_num(abs(mn))}px]")
        elif key in MARGIN_SIDES and not has_margin_scale:
            if n is not None:
                classes.add(f"{'-' if n < 0 else ''}{MARGIN_SIDES[key]}-[{js_num(abs(n))}px]")


def _is_consumed(key: str, v: str, classes: _Classes) -> bool:
    """True when a generated class already expresses this declaration."""
    if key == "width":
        return classes.any(re.compile(r"^w-\[.+\]$"))
    if key == "height":
        return classes.any(re.compile(r"^h-\[.+\]$"))
    if key == "font-size":
        return classes.any(re.compile(r"^text-\[.+\]$"))
    if key == "line-height":
        return classes.any(re.compile(r"^leading-\[.+\]$"))
    if key == "letter-spacing":
        return classes.any(re.compile(r"^tracking-\[.+\]$"))
    if key == "font-weight":
        return classes.any(re.compile(r"^font-(?:thin|extralight|light|normal|medium|semibold|bold|extrabold|black|\[\d+\])$"))
    if key == "border-radius":
        return classes.any(re.compile(r"^rounded-\[.+\]$"))
    if key == "outline":
        return classes.any(re.compile(r"^outline-(?:\d+(?:\.\d+)?|\[.+\])$"))
    if key == "outline-offset":
        return classes.any(re.compile(r"^outline-offset-\d+(?:\.\d+)?$"))
    if key == "display":
        return v in ("flex", "inline-flex") and classes.has(v)
    if key == "flex-direction":
        return v == "row" or (v == "column" and classes.has("flex-col"))
    if key == "flex-wrap":
        return v in WRAP and classes.has(WRAP[v])
    if key == "justify-content":
        return v == "flex-start" or (v in JUSTIFY and classes.has(JUSTIFY[v]))
    if key == "align-items":
        return v == "stretch" or (v in ITEMS and classes.has(ITEMS[v]))
    if key == "align-self":
        return v in SELF and classes.has(SELF[v])
    if key == "gap":
        return classes.any(_GAP_MAIN_RE)
    if key == "row-gap":
        return classes.any(re.compile(rf"^gap-y-(?:{_SCALE}|{_ARB})$"))
    if key == "column-gap":
        return classes.any(re.compile(rf"^gap-x-(?:{_SCALE}|{_ARB})$"))
    if key == "flex-basis":
        return (v in ("0", "0px") and classes.has("basis-0")) or (v == "auto" and classes.has("basis-auto"))
    if key == "flex-shrink":
        return v == "0" and classes.has("shrink-0")
    if key == "flex-grow":
        return v == "1" and classes.has("grow")
    if key == "text-align":
        return v in TEXT_ALIGN and classes.has(TEXT_ALIGN[v])
    if key == "white-space":
        return v in WHITESPACE and classes.has(WHITESPACE[v])
    if key == "box-sizing":
        return v in BOX_SIZING and classes.has(BOX_SIZING[v])
    if key in ("overflow", "overflow-x", "overflow-y"):
        return classes.has(f"{key}-{v}")
    if key == "padding":
        return classes.any(_PAD_ANY_RE)
    if key in _PAD_SIDE_RE:
        return classes.any(_PAD_SIDE_RE[key])
    if key == "margin":
        return classes.any(_MARGIN_ANY_RE)
    if key in _MARGIN_SIDE_RE:
        return classes.any(_MARGIN_SIDE_RE[key])
    return False


def css_to_classes(css: str, cache: Optional[Dict[str, UtilityResult]] = None) -> UtilityResult:
    """
    Map a ``k:v;`` string to (class_names, remaining_css).

    The result is cached under the exact input string, so calling twice
    with the same css returns the very same tuple.
    """
    key = css or ""
    if cache is not None and key in cache:
        return cache[key]
    if not key.strip():
        result: UtilityResult = ((), "")
    else:
        entries = parse_declarations(key)
        classes = _Classes()
        _enum_pass(entries, classes)
        _scalar_pass(entries, classes)
        kept = [(k, v) for k, v in entries if not _is_consumed(k, v.lower(), classes)]
        result = (classes.names(), join_declarations(kept))
    if cache is not None:
        cache[key] = result
    return result


def _fmt2(n: float) -> str:
    return js_num(n) if float(n).is_integer() else fmt_num(n, 2)


def layout_to_classes(layout: Dict, extra_css: str, cache=None) -> UtilityResult:
    """LayoutInfo の flex/padding/item 属性を直接クラスに変換し、extra_css の変換結果とマージ"""
    classes = _Classes()
    if layout.get("display") == "flex":
        classes.add("flex")
        if layout.get("flex_direction") == "column":
            classes.add("flex-col")
        wraps = layout.get("flex_wrap") == "wrap"
        if wraps:
            classes.add("flex-wrap")
        gap = layout.get("gap")
        if isinstance(gap, (int, float)) and gap > 0:
            classes.add(f"gap-[{_fmt2(gap)}px]")
        if wraps:
            row_gap, column_gap = layout.get("row_gap"), layout.get("column_gap")
            if isinstance(row_gap, (int, float)) and row_gap > 0:
                classes.add(f"gap-y-[{_fmt2(row_gap)}px]")
            if isinstance(column_gap, (int, float)) and column_gap > 0:
                classes.add(f"gap-x-[{_fmt2(column_gap)}px]")
        classes.add(JUSTIFY.get(layout.get("justify_content")))
        classes.add(ITEMS.get(layout.get("align_items")))

    padding = layout.get("padding")
    if padding:
        t, r, b, l = (padding.get(k) or 0 for k in ("t", "r", "b", "l"))
        if t == r == b == l and t != 0:
            classes.add(f"p-[{_fmt2(t)}px]")
        elif t == b and r == l and (t != 0 or r != 0):
            if t != 0:
                classes.add(f"py-[{_fmt2(t)}px]")
            if r != 0:
                classes.add(f"px-[{_fmt2(r)}px]")
        else:
            for name, value in (("pt", t), ("pr", r), ("pb", b), ("pl", l)):
                if value != 0:
                    classes.add(f"{name}-[{_fmt2(value)}px]")

    classes.add(BOX_SIZING.get(layout.get("box_sizing")))
    if layout.get("overflow") == "hidden":
        classes.add("overflow-hidden")

    grow, shrink, basis = layout.get("flex_grow"), layout.get("flex_shrink"), layout.get("flex_basis")
    if isinstance(grow, (int, float)) and grow > 0:
        classes.add("grow")
    if isinstance(shrink, (int, float)) and shrink == 0:
        classes.add("shrink-0")
    if basis == 0 and not isinstance(basis, bool):
        classes.add("basis-0")
    if basis == "auto":
        classes.add("basis-auto")
    classes.add(SELF.get(layout.get("align_self")))

    names, remaining = css_to_classes(extra_css or "", cache)
    for name in names:
        classes.add(name)
    return classes.names(), remaining


# ---------------------------------------------------------------------------
# Utility CSS generation
# ---------------------------------------------------------------------------

_ESCAPE_RE = re.compile(r"([!\"#$%&'()*+,./:;<=>?@\[\\\]^`{|}~])")

SIMPLE_RULES = {
    "flex": "display:flex;",
    "inline-flex": "display:inline-flex;",
    "flex-col": "flex-direction:column;",
    "flex-wrap": "flex-wrap:wrap;",
    "flex-nowrap": "flex-wrap:nowrap;",
    "flex-wrap-reverse": "flex-wrap:wrap-reverse;",
    "justify-center": "justify-content:center;",
    "justify-end": "justify-content:flex-end;",
    "justify-between": "justify-content:space-between;",
    "justify-around": "justify-content:space-around;",
    "justify-evenly": "justify-content:space-evenly;",
    "items-start": "align-items:flex-start;",
    "items-center": "align-items:center;",
    "items-end": "align-items:flex-end;",
    "items-baseline": "align-items:baseline;",
    "self-start": "align-self:flex-start;",
    "self-end": "align-self:flex-end;",
    "self-center": "align-self:center;",
    "self-stretch": "align-self:stretch;",
    "self-baseline": "align-self:baseline;",
    "shrink-0": "flex-shrink:0;",
    "grow": "flex-grow:1;",
    "basis-0": "flex-basis:0px;",
    "basis-auto": "flex-basis:auto;",
    "w-auto": "width:auto;",
    "h-auto": "height:auto;",
    "box-border": "box-sizing:border-box;",
    "box-content": "box-sizing:content-box;",
    "text-left": "text-align:left;",
    "text-center": "text-align:center;",
    "text-right": "text-align:right;",
    "text-justify": "text-align:justify;",
    "whitespace-normal": "white-space:normal;",
    "whitespace-nowrap": "white-space:nowrap;",
    "whitespace-pre": "white-space:pre;",
    "whitespace-pre-wrap": "white-space:pre-wrap;",
}
for _axis in ("overflow", "overflow-x", "overflow-y"):
    for _value in OVERFLOW_VALUES:
        SIMPLE_RULES[f"{_axis}-{_value}"] = f"{_axis}:{_value};"

# (pattern, properties, unit)。unit "scale" は 4px 刻みのスケール値
_PATTERN_RULES = [
    (re.compile(rf"^gap-(\d+(?:\.5)?)$"), ["gap"], "scale"),
    (re.compile(rf"^gap-x-(\d+(?:\.5)?)$"), ["column-gap"], "scale"),
    (re.compile(rf"^gap-y-(\d+(?:\.5)?)$"), ["row-gap"], "scale"),
    (re.compile(rf"^gap-\[{_NUM}px\]$"), ["gap"], "px"),
    (re.compile(rf"^rounded-\[{_NUM}px\]$"), ["border-radius"], "px"),
    (re.compile(rf"^text-\[{_NUM}px\]$"), ["font-size"], "px"),
    (re.compile(rf"^leading-\[{_NUM}px\]$"), ["line-height"], "px"),
    (re.compile(r"^tracking-\[(-?\d+(?:\.\d+)?)px\]$"), ["letter-spacing"], "px"),
    (re.compile(r"^tracking-\[(-?\d+(?:\.\d+)?)em\]$"), ["letter-spacing"], "em"),
    (re.compile(rf"^gap-x-\[{_NUM}px\]$"), ["column-gap"], "px"),
    (re.compile(rf"^gap-y-\[{_NUM}px\]$"), ["row-gap"], "px"),
    (re.compile(rf"^w-\[{_NUM}px\]$"), ["width"], "px"),
    (re.compile(rf"^h-\[{_NUM}px\]$"), ["height"], "px"),
]
_SPACING_PROPS = {
    "p": ["padding"], "px": ["padding-left", "padding-right"], "py": ["padding-top", "padding-bottom"],
    "pt": ["padding-top"], "pr": ["padding-right"], "pb": ["padding-bottom"], "pl": ["padding-left"],
    "m": ["margin"], "mx": ["margin-left", "margin-right"], "my": ["margin-top", "margin-bottom"],
    "mt": ["margin-top"], "mr": ["margin-right"], "mb": ["margin-bottom"], "ml": ["margin-left"],
}
_SPACING_SCALE_RE = re.compile(r"^(-)?(p|px|py|pt|pr|pb|pl|m|mx|my|mt|mr|mb|ml)-(\d+(?:\.5)?)$")
_SPACING_ARB_RE = re.compile(rf"^(-)?(p|px|py|pt|pr|pb|pl|m|mx|my|mt|mr|mb|ml)-\[{_NUM}px\]$")


def escape_class(name: str) -> str:
    return _ESCAPE_RE.sub(r"\\\1", name)


def _spacing_px(token: str) -> float:
    return float(token) * 4


def build_utility_css(classes: Iterable[str], scope: str = "") -> str:
    """Emit one rule per used utility class (unknown names are ignored)."""
    pre = f"{scope} " if scope else ""
    used = {}
    for c in classes or ():
        if c:
            used[c] = None
    lines = []

    def push(name, decls):
        lines.append(f"{pre}.{escape_class(name)}{{{decls}}}")

    for name, decls in SIMPLE_RULES.items():
        if name in used:
            push(name, decls)

    for pattern, props, unit in _PATTERN_RULES:
        for c in used:
            m = pattern.match(c)
            if not m:
                continue
            if unit == "scale":
                value = f"{js_num(_spacing_px(m.group(1)))}px"
            else:
                value = f"{js_num(float(m.group(1)))}{unit}"
            push(c, "".join(f"{p}:{value};" for p in props))

    for c in used:
        m = re.match(r"^outline-(\d+(?:\.\d+)?)$", c)
        if m:
            push(c, f"outline-width:{js_num(float(m.group(1)))}px;outline-style:solid;")
            continue
        m = re.match(r"^outline-offset-(\d+(?:\.\d+)?)$", c)
        if m:
            push(c, f"outline-offset:{js_num(float(m.group(1)))}px;")
            continue
        m = re.match(r"^outline-\[(.+)\]$", c)
        if m:
            push(c, f"outline-color:{m.group(1)};")

    for weight, label in FONT_WEIGHTS.items():
        if f"font-{label}" in used:
            push(f"font-{label}", f"font-weight:{weight};")
    for c in used:
        m = re.match(r"^font-\[(\d+)\]$", c)
        if m:
            push(c, f"font-weight:{int(m.group(1))};")

    for regex, to_px in ((_SPACING_SCALE_RE, _spacing_px), (_SPACING_ARB_RE, float)):
        for c in used:
            m = regex.match(c)
            if not m:
                continue
            value = f"{'-' if m.group(1) else ''}{js_num(to_px(m.group(3)))}px"
            if m.group(1) and not m.group(2).startswith("m"):
                continue
            push(c, ";".join(f"{p}:{value}" for p in _SPACING_PROPS[m.group(2)]) + ";")
    return "\n".join(lines)
