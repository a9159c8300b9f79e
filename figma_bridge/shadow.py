"""
box-shadow → filter: drop-shadow() migration for wrapped, transformed nodes.

Once a node is split into an outer slot and an independently centered inner
box, an outer box-shadow no longer follows the rotated content; a
drop-shadow filter on the outer element does.
"""

import re
from typing import Tuple

from .cssutil import split_shadow_list

_BOX_SHADOW_RE = re.compile(r"(^|;)\s*box-shadow\s*:\s*([^;]+);?", re.I)
_FILTER_RE = re.compile(r"(^|;)\s*filter\s*:\s*([^;]+);?", re.I)
_SHADOW_ENTRY_RE = re.compile(
    r"^(?:inset\s+)?(-?\d+(?:\.\d+)?(?:px)?)\s+(-?\d+(?:\.\d+)?(?:px)?)\s+(\d+(?:\.\d+)?(?:px)?)"
    r"(?:\s+(-?\d+(?:\.\d+)?(?:px)?))?\s+"
    r"(rgba?\([^)]*\)|hsla?\([^)]*\)|#[0-9a-fA-F]{3,8}|[a-zA-Z]+)",
    re.I,
)
_INSET_RE = re.compile(r"^inset\b", re.I)


def migrate_shadows_to_outer(inner_css: str, outer_css: str) -> Tuple[str, str]:
    """
    Move every non-inset box-shadow entry of inner_css to the outer filter.

    Inset entries stay on the inner box-shadow. Spread is dropped because
    drop-shadow() has no spread argument. Returns (new_inner, new_outer).
    """
    inner = inner_css or ""
    outer = outer_css or ""
    match = _BOX_SHADOW_RE.search(inner)
    if not match:
        return inner, outer

    drops, keep = [], []
    for item in split_shadow_list(match.group(2).strip()):
        if _INSET_RE.match(item):
            keep.append(item)
            continue
        m = _SHADOW_ENTRY_RE.match(item)
        if m:
            drops.append(f"drop-shadow({m.group(1)} {m.group(2)} {m.group(3)} {m.group(5)})")
    if not drops:
        return inner, outer

    existing = _FILTER_RE.search(outer)
    new_filter = " ".join(drops)
    if existing:
        new_filter = f"{existing.group(2).strip()} {new_filter}"
    outer = _FILTER_RE.sub(r"\1", outer) + f"filter:{new_filter};"

    if keep:
        inner = _BOX_SHADOW_RE.sub(lambda m: f"{m.group(1)}box-shadow:{','.join(keep)};", inner, count=1)
    else:
        inner = _BOX_SHADOW_RE.sub(r"\1", inner)
    return inner, outer
