#!/usr/bin/env python3
"""
Step 02: composition JSON → index.html / style.css / content.html

  python figma_02_build_from_json.py --input composition.json [--debug] [--absolute-paths]

svg は既定で data URL として埋め込む。--no-inline-svgs (INLINE_SVGS=false) のときは
svgs/<file> に書き出して相対パスで参照する。
"""

import argparse
import json
import os
import re

from figma_bridge import config
from figma_bridge.assets import create_asset_url_provider
from figma_bridge.document import wrap_content_document
from figma_bridge.errors import BridgeError
from figma_bridge.pipeline import figma_to_html


def _sanitize_filename(name: str) -> str:
    return re.sub(r'[\\/:*?"<>|]', '_', name)


def _collect_svgs(composition: dict) -> dict:
    """svgId → svgContent (svg_file 名は IR と同じ規則)"""
    found = {}
    stack = list(composition.get("children") or [])
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        svg_id = node.get("svgId")
        if isinstance(svg_id, str) and svg_id and node.get("svgContent"):
            found[re.sub(r"[^a-zA-Z0-9_-]", "_", svg_id) + ".svg"] = node["svgContent"]
        stack.extend(node.get("children") or [])
    return found


def main():
    parser = argparse.ArgumentParser(description="Build HTML/CSS from a saved composition JSON (offline)")
    parser.add_argument("--input", help="Path to composition JSON (fallback: env INPUT_JSON_FILE)")
    parser.add_argument("--output-dir", help="Output root (fallback: env OUTPUT_DIR)")
    parser.add_argument("--name", help="Sub directory name (default: input file stem)")
    parser.add_argument("--debug", action="store_true", help="Write debug.html overlay (fallback: env DEBUG_OVERLAY=true)")
    parser.add_argument("--absolute-paths", action="store_true", help="Reference assets as /images/... (fallback: env ASSET_ABSOLUTE_PATHS=true)")
    parser.add_argument("--no-inline-svgs", action="store_true", help="Write svgs/<file> instead of data URLs (fallback: env INLINE_SVGS=false)")
    parser.add_argument("--no-normalize", action="store_true", help="Skip px/deg/matrix post-normalization (fallback: env NORMALIZE_OUTPUT=false)")
    parser.add_argument("--min-repeat", type=int, help="Shared class threshold (fallback: env SHARED_CLASS_MIN_REPEAT)")
    parser.add_argument("--log-level", help="Logging level (fallback: env LOG_LEVEL)")
    args = parser.parse_args()

    # Resolve inputs (CLI > env)
    input_path = args.input or os.getenv("INPUT_JSON_FILE")
    out_root = args.output_dir or config.OUTPUT_DIR
    debug_enabled = args.debug or config.DEBUG_OVERLAY
    absolute_paths = args.absolute_paths or config.ASSET_ABSOLUTE_PATHS
    inline_svgs = config.INLINE_SVGS and not args.no_inline_svgs
    normalize_output = config.NORMALIZE_OUTPUT and not args.no_normalize
    min_repeat = args.min_repeat if args.min_repeat is not None else config.SHARED_CLASS_MIN_REPEAT
    config.setup_logging(args.log_level)

    if not input_path:
        raise SystemExit("[ERROR] Missing input: pass --input or set INPUT_JSON_FILE in .env")
    if not os.path.exists(input_path):
        raise SystemExit(f"[ERROR] Input not found: {input_path}")

    with open(input_path, "r", encoding="utf-8") as f:
        payload = json.load(f)

    name = args.name or os.path.splitext(os.path.basename(input_path))[0]
    out_dir = os.path.join(out_root, _sanitize_filename(name))
    os.makedirs(out_dir, exist_ok=True)

    base_provider = create_asset_url_provider(absolute_paths)
    if inline_svgs:
        provider = base_provider
    else:
        def provider(asset_id, asset_type, data=None):
            # data を渡さなければパス参照になる
            return base_provider(asset_id, asset_type)

    try:
        result = figma_to_html(
            payload,
            asset_url_provider=provider,
            debug_enabled=debug_enabled,
            normalize_output=normalize_output,
            min_repeat=min_repeat,
            stylesheet_href="style.css",
        )
    except BridgeError as e:
        raise SystemExit(f"[ERROR] {e}")

    files = {
        "index.html": result["html"],
        "style.css": result["css_text"],
        "content.html": wrap_content_document(
            result["content"]["body_html"],
            result["content"]["css_text"],
            result["content"]["head_links"],
            config.EXPORT_SCOPE,
        ),
    }
    if debug_enabled and result["debug_html"]:
        files["debug.html"] = (f"<style>{result['debug_css']}</style>\n"
                               f"<div class=\"debug-overlay\">\n{result['debug_html']}\n</div>\n")
    for file_name, text in files.items():
        path = os.path.join(out_dir, file_name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"[LOG] Saved: {path}")

    if not inline_svgs:
        composition = payload.get("composition") if isinstance(payload.get("composition"), dict) else payload
        svgs = _collect_svgs(composition)
        if svgs:
            svg_dir = os.path.join(out_dir, "svgs")
            os.makedirs(svg_dir, exist_ok=True)
            for file_name, markup in svgs.items():
                with open(os.path.join(svg_dir, file_name), "w", encoding="utf-8") as f:
                    f.write(markup)
            print(f"[LOG] Saved {len(svgs)} svgs under {svg_dir}")

    missing = [i for i in result["assets"]["images"]
               if not os.path.exists(os.path.join(out_dir, "images", f"{i}.png"))]
    if missing:
        print(f"[WARN] {len(missing)} image fills have no local file under images/ (e.g. {missing[0]}.png)")
    print(f"[INFO] Preview size: {result['base_width']}x{result['base_height']}")


if __name__ == "__main__":
    main()
