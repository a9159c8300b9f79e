#!/usr/bin/env python3
"""
Step 03: 生成済み HTML の数値を後処理で整える (px/deg の丸め, matrix() の分解, 4 値 shorthand の畳み込み)

  python figma_03_normalize_html.py --input bridge_output/<name>/index.html [--in-place]
"""

import argparse
import json
import os

from figma_bridge import config
from figma_bridge.normalize import normalize_html


def main():
    parser = argparse.ArgumentParser(description="Normalize px/deg/matrix values inside an existing HTML file")
    parser.add_argument("--input", required=True, help="HTML file to normalize")
    parser.add_argument("--output", help="Write result here (default: <input>.normalized.html)")
    parser.add_argument("--in-place", action="store_true", help="Overwrite the input file")
    parser.add_argument("--log-level", help="Logging level (fallback: env LOG_LEVEL)")
    args = parser.parse_args()
    config.setup_logging(args.log_level)

    if not os.path.exists(args.input):
        raise SystemExit(f"[ERROR] Input not found: {args.input}")
    with open(args.input, "r", encoding="utf-8") as f:
        html = f.read()

    result, report = normalize_html(html)
    if args.in_place:
        out_path = args.input
    else:
        out_path = args.output or os.path.splitext(args.input)[0] + ".normalized.html"
    with open(out_path, "w", encoding="utf-8") as f:
        f.write(result)

    for warning in report["warnings"]:
        print(f"[WARN] {warning}")
    print(json.dumps(report, ensure_ascii=False, indent=2))
    print(f"[LOG] Saved: {out_path} (changed={report['changed']})")


if __name__ == "__main__":
    main()
