"""
環境変数 (.env) から読み込む設定値とログ初期化

CLI 引数があればそちらを優先する (CLI > env)。
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()

OUTPUT_DIR = os.getenv("OUTPUT_DIR", "bridge_output")
LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "")
DEBUG_OVERLAY = os.getenv("DEBUG_OVERLAY", "false").lower() == "true"
NORMALIZE_OUTPUT = os.getenv("NORMALIZE_OUTPUT", "true").lower() == "true"
SHARED_CLASS_MIN_REPEAT = int(os.getenv("SHARED_CLASS_MIN_REPEAT", "2") or 2)
VIEWPORT_PADDING = float(os.getenv("VIEWPORT_PADDING", "4") or 4)
ASSET_ABSOLUTE_PATHS = os.getenv("ASSET_ABSOLUTE_PATHS", "false").lower() == "true"
INLINE_SVGS = os.getenv("INLINE_SVGS", "true").lower() == "true"
EXPORT_SCOPE = os.getenv("EXPORT_SCOPE", ".figma-export")
PREVIEW_SCOPE = os.getenv("PREVIEW_SCOPE", "[data-figma-render]")

LOG_FORMAT = "[%(levelname)s] %(message)s"


def setup_logging(level=None, log_dir=None):
    """Root logger を設定する。LOG_DIR があれば bridge.log にも出力"""
    level_name = (level or LOG_LEVEL).upper()
    handlers = [logging.StreamHandler()]
    target_dir = LOG_DIR if log_dir is None else log_dir
    if target_dir:
        os.makedirs(target_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(target_dir, "bridge.log"), encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(asctime)s " + LOG_FORMAT))
        handlers.append(file_handler)
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    return logging.getLogger("figma_bridge")
