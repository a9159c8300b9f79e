#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import re
from pathlib import Path

from bs4 import BeautifulSoup

# .w-\[120px\] のようなエスケープ済みクラスも 1 つのセレクタとして拾う
CLASS_SELECTOR_RE = re.compile(r"\.((?:\\.|[a-zA-Z0-9_-])+)")
UNESCAPE_RE = re.compile(r"\\(.)")

# ベーススタイル / デバッグ用は常に残す
IGNORE_EXACT = {
    'viewport', 'view-offset', 'composition', 'content-layer', 'figma-export',
    'frame', 'shape', 'text', 'svg-container', 'mask-container',
}
IGNORE_PREFIXES = ('debug-', 'is-', 'has-')


def collect_used_classes_from_html(html_text: str) -> set[str]:
    soup = BeautifulSoup(html_text, 'html.parser')
    used = set()
    for el in soup.find_all(class_=True):
        for c in el.get('class') or []:
            if c:
                used.add(c)
    return used


def collect_inline_css(html_text: str) -> str:
    soup = BeautifulSoup(html_text, 'html.parser')
    return "\n".join(tag.get_text() for tag in soup.find_all('style'))


def parse_class_rules(css_text: str) -> dict[str, int]:
    """class -> number of rule selectors mentioning it"""
    found = {}
    for block in re.finditer(r"([^{}]+)\{[^{}]*\}", css_text):
        selector = block.group(1)
        for m in CLASS_SELECTOR_RE.finditer(selector):
            c = UNESCAPE_RE.sub(r"\1", m.group(1))
            found[c] = found.get(c, 0) + 1
    return found


def build_report(html_text: str, css_text: str) -> dict:
    used = collect_used_classes_from_html(html_text)
    defined = parse_class_rules(css_text + "\n" + collect_inline_css(html_text))

    unused = []
    for cls in defined:
        if cls in used or cls in IGNORE_EXACT:
            continue
        if any(cls.startswith(p) for p in IGNORE_PREFIXES):
            continue
        unused.append(cls)

    return {
        'total_class_rules': len(defined),
        'used_classes_in_html': len([c for c in defined if c in used]),
        'unused_classes': sorted(unused)[:1000],
        'unused_count': len(unused),
        'shared_unused': sorted(c for c in unused if c.startswith('fr-')),
    }


def main():
    ap = argparse.ArgumentParser(description='Report utility/shared CSS classes that index.html never references')
    ap.add_argument('--root', required=True)
    ap.add_argument('--html', default='index.html')
    ap.add_argument('--css', default='style.css')
    args = ap.parse_args()

    root = Path(args.root)
    html_path = root / args.html
    css_path = root / args.css
    if not html_path.exists():
        raise SystemExit(f'[ERROR] Missing {html_path}')

    html_text = html_path.read_text(encoding='utf-8', errors='ignore')
    css_text = css_path.read_text(encoding='utf-8', errors='ignore') if css_path.exists() else ''

    report = build_report(html_text, css_text)
    out = root / 'unused_css_report.json'
    out.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding='utf-8')
    print(f"[UNUSED-CSS] Report: {out} (unused={report['unused_count']}/{report['total_class_rules']})")


if __name__ == '__main__':
    main()
