"""
Small helpers for the flat ``k:v;`` declaration strings this package emits.

These only understand the declarations generated here (no comments, no
nested blocks); they are not a general CSS parser.
"""

import math
import re
from typing import List, Optional, Tuple


def js_num(value) -> str:
    """数値を JS の String(n) と同じ見た目で文字列化 (2.0 -> "2")"""
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def fmt_num(value: float, digits: int = 3) -> str:
    """固定小数で丸めて末尾の 0 を落とす"""
    text = f"{value:.{digits}f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def fmt_px(value) -> str:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
        return "0px"
    return fmt_num(round(value * 100) / 100, 2) + "px"


def parse_declarations(css: str) -> List[Tuple[str, str]]:
    """``a:b;c:d;`` → [(a, b), (c, d)] (keys lowercased, order kept)"""
    out = []
    for part in (css or "").split(";"):
        part = part.strip()
        if not part or ":" not in part:
            continue
        key, value = part.split(":", 1)
        key = key.strip().lower()
        value = value.strip()
        if key and value:
            out.append((key, value))
    return out


def join_declarations(entries) -> str:
    return "".join(f"{k}:{v};" for k, v in entries)


def last_value(css: str, prop: str) -> Optional[str]:
    """Value of the last ``prop`` declaration in css, or None."""
    found = None
    for key, value in parse_declarations(css):
        if key == prop:
            found = value
    return found


def remove_props(css: str, props) -> str:
    drop = set(props)
    return join_declarations((k, v) for k, v in parse_declarations(css) if k not in drop)


def split_shadow_list(text: str) -> List[str]:
    """Comma split that ignores commas inside parentheses (rgba(...) etc.)."""
    out = []
    current = ""
    depth = 0
    for ch in text or "":
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif ch == "," and depth == 0:
            out.append(current.strip())
            current = ""
            continue
        current += ch
    if current.strip():
        out.append(current.strip())
    return out


def split_class_tokens(text: str) -> List[str]:
    """Whitespace split that keeps bracketed values such as ``outline-[rgb(0, 0, 0)]`` whole."""
    tokens = []
    current = ""
    depth = 0
    for ch in text or "":
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth = max(0, depth - 1)
        if ch.isspace() and depth == 0:
            if current.strip():
                tokens.append(current.strip())
            current = ""
        else:
            current += ch
    if current.strip():
        tokens.append(current.strip())
    return tokens


_WIDTH_AUTO_RE = re.compile(r"(?:^|;)\s*width\s*:\s*auto\s*(?:;|$)", re.I)
_HEIGHT_AUTO_RE = re.compile(r"(?:^|;)\s*height\s*:\s*auto\s*(?:;|$)", re.I)


def has_auto_width(css: str) -> bool:
    return bool(_WIDTH_AUTO_RE.search(css or ""))


def has_auto_height(css: str) -> bool:
    return bool(_HEIGHT_AUTO_RE.search(css or ""))
