#!/usr/bin/env python3
"""
Step 01: composition JSON → 正規化済み composition / IR / 確認用 HTML

  python figma_01_build_ir.py --input composition.json

出力 (OUTPUT_DIR/<name>/):
  01_composition.json   正規化後の composition
  02_ir.json            RenderNodeIR ツリーと css_rules / フォント / アセット情報
  03_render.html        スタイルを埋め込んだプレビュー
"""

import argparse
import json
import os
import re

from figma_bridge import config
from figma_bridge.document import create_preview_html
from figma_bridge.errors import BridgeError
from figma_bridge.ir import composition_to_ir, normalize_composition, unwrap_payload


def _sanitize_filename(name: str) -> str:
    return re.sub(r'[\\/:*?"<>|]', '_', name)


def main():
    parser = argparse.ArgumentParser(description="Build normalized composition + IR + preview HTML from a composition JSON")
    parser.add_argument("--input", help="Path to composition JSON (fallback: env INPUT_JSON_FILE)")
    parser.add_argument("--output-dir", help="Output root (fallback: env OUTPUT_DIR)")
    parser.add_argument("--name", help="Sub directory name (default: input file stem)")
    parser.add_argument("--debug", action="store_true", help="Also write the debug overlay markup (fallback: env DEBUG_OVERLAY=true)")
    parser.add_argument("--log-level", help="Logging level (fallback: env LOG_LEVEL)")
    args = parser.parse_args()

    # CLI > env
    input_path = args.input or os.getenv("INPUT_JSON_FILE")
    out_root = args.output_dir or config.OUTPUT_DIR
    debug_enabled = args.debug or config.DEBUG_OVERLAY
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

    try:
        composition = normalize_composition(unwrap_payload(payload))
        ir = composition_to_ir(composition)
        preview = create_preview_html(
            composition,
            ir["nodes"],
            ir["css_rules"],
            ir["render_union"],
            debug_enabled=debug_enabled,
            google_fonts_url=ir["font_meta"]["google_fonts_url"],
            min_repeat=config.SHARED_CLASS_MIN_REPEAT,
            padding=config.VIEWPORT_PADDING,
            shared_scope=config.PREVIEW_SCOPE,
        )
    except BridgeError as e:
        raise SystemExit(f"[ERROR] {e}")

    with open(os.path.join(out_dir, "01_composition.json"), "w", encoding="utf-8") as f:
        json.dump(composition, f, ensure_ascii=False, indent=2)
    print(f"[LOG] Saved: {os.path.join(out_dir, '01_composition.json')}")

    ir_dump = {k: v for k, v in ir.items() if k != "raw_composition"}
    with open(os.path.join(out_dir, "02_ir.json"), "w", encoding="utf-8") as f:
        json.dump(ir_dump, f, ensure_ascii=False, indent=2)
    print(f"[LOG] Saved: {os.path.join(out_dir, '02_ir.json')}")

    with open(os.path.join(out_dir, "03_render.html"), "w", encoding="utf-8") as f:
        f.write(preview["html"])
    print(f"[LOG] Saved: {os.path.join(out_dir, '03_render.html')} ({preview['base_width']}x{preview['base_height']})")

    if debug_enabled and preview["debug_html"]:
        with open(os.path.join(out_dir, "03_debug.html"), "w", encoding="utf-8") as f:
            f.write(f"<style>{preview['debug_css']}</style>\n<div class=\"debug-overlay\">\n{preview['debug_html']}\n</div>\n")
        print(f"[LOG] Saved: {os.path.join(out_dir, '03_debug.html')}")

    print(f"[INFO] nodes={len(ir['nodes'])} images={len(ir['asset_meta']['images'])} svgs={len(ir['asset_meta']['svgs'])}")


if __name__ == "__main__":
    main()
