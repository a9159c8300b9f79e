"""ノード名からセマンティックなクラス名を作る"""

import re

GENERIC_NAMES = {
    "frame", "group", "rectangle", "ellipse", "vector", "polygon",
    "star", "line", "text", "component", "instance",
}


def sanitize_class_name(name: str) -> str:
    """CSSクラスとして安全な識別子へ変換 (小文字, 英数字/-/_ のみ, 50文字まで)"""
    if not name or not isinstance(name, str):
        return ""
    safe = name.lower().strip()
    safe = re.sub(r"[\s()\[\]{}/\\,.]+", "-", safe)
    safe = re.sub(r"[^a-z0-9\-_]", "", safe)
    safe = re.sub(r"--+", "-", safe).strip("-")
    return safe[:50]


def should_use_semantic_name(name: str) -> bool:
    safe = sanitize_class_name(name)
    if len(safe) < 2 or safe.isdigit():
        return False
    if safe in GENERIC_NAMES:
        return False
    # "frame-7", "rectangle-12"
    m = re.match(r"^([a-z]+)-\d+$", safe)
    if m and m.group(1) in GENERIC_NAMES:
        return False
    return True


def semantic_class_name(name: str, fallback: str = "frame") -> str:
    return sanitize_class_name(name) if should_use_semantic_name(name) else fallback
