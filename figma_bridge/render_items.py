"""
Mask / z-order segmentation of a sibling list.

A mask node opens a masked segment that takes every following non-mask
sibling up to (but excluding) the next mask. Hidden siblings never take part
in flow or z counting.
"""

from typing import Dict, List

from .cssutil import js_num


def is_visible(node) -> bool:
    return bool(node) and node.get("visible") is not False


def _segments(children):
    segments = []
    current = {"mask_index": None, "node_indices": []}
    for index, child in enumerate(children):
        if child and child.get("isMask"):
            if current["node_indices"] or current["mask_index"] is not None:
                segments.append(current)
            current = {"mask_index": index, "node_indices": []}
        else:
            current["node_indices"].append(index)
    if current["node_indices"] or current["mask_index"] is not None:
        segments.append(current)
    return segments


def build_render_items(children: List[Dict], parent_is_auto_layout: bool = False,
                       parent_layout_mode: str = "NONE", item_spacing: float = 0,
                       reverse_z_index: bool = False) -> List[Dict]:
    """
    Split children into render items.

    Returns ``{"kind": "node", "index", "item_css"}`` and
    ``{"kind": "masked", "mask_index", "node_indices", "container_css"}``
    records in document order.
    """
    if not children:
        return []

    items = []
    for seg in _segments(children):
        if seg["mask_index"] is not None:
            visible = [i for i in seg["node_indices"] if is_visible(children[i])]
            if visible:
                items.append({
                    "kind": "masked",
                    "mask_index": seg["mask_index"],
                    "node_indices": visible,
                    "container_css": "",
                })
            continue
        for index in seg["node_indices"]:
            if is_visible(children[index]):
                items.append({"kind": "node", "index": index, "item_css": ""})

    total = len(items)
    negative_gap = item_spacing < 0
    # heuristic kept as-is: z-index only outside auto layout or when items overlap
    needs_z = not parent_is_auto_layout or negative_gap or reverse_z_index
    flow_index = 0
    for i, item in enumerate(items):
        z_css = ""
        if needs_z:
            z_css = f"z-index:{total - i if reverse_z_index else i + 1};"
        if item["kind"] == "masked":
            item["container_css"] = z_css
            continue
        margin = ""
        if negative_gap and parent_is_auto_layout and flow_index > 0:
            prop = "margin-top" if parent_layout_mode == "VERTICAL" else "margin-left"
            margin = f"{prop}:{js_num(item_spacing)}px;"
        item["item_css"] = margin + z_css
        flow_index += 1
    return items


def render_items_for_container(container: Dict) -> List[Dict]:
    """Render items for a composition node, read from its auto-layout fields."""
    mode = container.get("layoutMode") or "NONE"
    spacing = container.get("itemSpacing")
    return build_render_items(
        container.get("children") or [],
        parent_is_auto_layout=mode != "NONE",
        parent_layout_mode=mode,
        item_spacing=spacing if isinstance(spacing, (int, float)) else 0,
        reverse_z_index=container.get("itemReverseZIndex") is True,
    )
