"""
フォント収集

テキストセグメントの fontName からファミリー / ウェイト / スタイルを集め、
Google Fonts (css2) の URL と <link> タグを組み立てる。
"""

from typing import Dict, List, Optional

STANDARD_FONT_WEIGHTS = [100, 200, 300, 400, 500, 600, 700, 800, 900]
GOOGLE_FONTS_ORIGIN = "https://fonts.googleapis.com"
GSTATIC_ORIGIN = "https://fonts.gstatic.com"


def infer_weight_from_style(style: Optional[str]) -> int:
    """"Semi Bold Italic" → 600. 解釈できないものは 400"""
    if not style or not isinstance(style, str):
        return 400
    s = " ".join(style.lower().replace("-", " ").replace("_", " ").split())
    if "thin" in s or "hairline" in s:
        return 100
    if any(k in s for k in ("extra light", "ultra light", "extralight", "ultralight")):
        return 200
    if "light" in s:
        return 300
    if "medium" in s:
        return 500
    if any(k in s for k in ("semi bold", "semibold", "demi bold", "demibold")):
        return 600
    if any(k in s for k in ("extra bold", "ultra bold", "extrabold", "ultrabold")):
        return 800
    if "black" in s or "heavy" in s:
        return 900
    if "bold" in s:
        return 700
    return 400


def build_font_stack(family: str) -> str:
    if " " in family or "-" in family:
        return f"'{family}', sans-serif"
    return f"{family}, sans-serif"


class FontCollector:
    """ビルド単位のフォント集合 (family → weights / styles)"""

    def __init__(self):
        self.fonts: Dict[str, Dict] = {}

    def add(self, family: str, weight: Optional[int] = None, style: Optional[str] = None):
        if not family:
            return
        info = self.fonts.setdefault(family, {"family": family, "weights": set(), "styles": set()})
        if weight:
            info["weights"].add(int(weight))
        if style:
            info["styles"].add(style)

    def all_fonts(self) -> List[Dict]:
        return list(self.fonts.values())

    def google_fonts_url(self) -> Optional[str]:
        specs = []
        for info in self.fonts.values():
            google_name = "+".join(info["family"].split())
            has_italic = any("italic" in s.lower() for s in info["styles"])
            weights = sorted(set(STANDARD_FONT_WEIGHTS) | info["weights"])
            if has_italic:
                axes = "ital,wght"
                # css2 API は (ital, wght) の組が昇順でないとエラーになる
                values = [f"0,{w}" for w in weights] + [f"1,{w}" for w in weights]
            else:
                axes = "wght"
                values = [str(w) for w in weights]
            specs.append(f"family={google_name}:{axes}@{';'.join(values)}")
        if not specs:
            return None
        return f"{GOOGLE_FONTS_ORIGIN}/css2?{'&'.join(specs)}&display=swap"


def collect_fonts(composition: Dict, collector: Optional[FontCollector] = None) -> FontCollector:
    """コンポジション全体のテキストセグメントからフォントを集める"""
    collector = collector or FontCollector()
    stack = list(reversed(composition.get("children") or []))
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        for seg in (node.get("text") or {}).get("segments") or []:
            font_name = seg.get("fontName") or {}
            family = font_name.get("family")
            if family:
                weight = seg.get("fontWeight") or infer_weight_from_style(font_name.get("style"))
                collector.add(family, weight, font_name.get("style"))
        stack.extend(reversed(node.get("children") or []))
    return collector


def build_font_links(google_fonts_url: Optional[str]) -> str:
    if not google_fonts_url:
        return ""
    lines = [
        f'    <link rel="preconnect" href="{GOOGLE_FONTS_ORIGIN}">',
        f'    <link rel="preconnect" href="{GSTATIC_ORIGIN}" crossorigin>',
        f'    <link href="{google_fonts_url}" rel="stylesheet">',
    ]
    return "\n".join(lines) + "\n"
