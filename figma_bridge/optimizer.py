"""Drop declarations that only restate browser defaults for a box."""

from .cssutil import join_declarations, parse_declarations

DO_NOT_TOUCH = {
    "flex", "flex-grow", "flex-shrink", "flex-basis",
    "transform", "z-index", "line-height", "letter-spacing",
}


def optimize_box_css(css, position=None, has_rotate_or_scale=False, display=None,
                     flex_direction=None, is_text=False):
    if not css:
        return css
    is_relative = (position or "").lower() == "relative"
    is_flex = (display or "").lower() == "flex"
    out = []
    for key, value in parse_declarations(css):
        if key in DO_NOT_TOUCH:
            out.append((key, value))
            continue
        low = value.lower()
        if is_relative and key in ("left", "top") and low in ("0", "0px", "0%"):
            continue
        if key == "transform-origin" and not has_rotate_or_scale:
            continue
        if is_flex:
            if not is_text and key == "justify-content" and low == "flex-start":
                continue
            if key == "align-items" and low == "stretch":
                continue
            if key == "flex-direction" and low == "row":
                continue
        out.append((key, value))
    return join_declarations(out)
