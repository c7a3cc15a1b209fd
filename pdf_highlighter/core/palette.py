from typing import Dict, Tuple

# Field name -> highlight color. Every consumer goes through field_color().
FIELD_COLORS: Dict[str, str] = {
    "employee": "#FFFF00",   # yellow
    "employer": "#90EE90",   # light green
    "payment": "#ADD8E6",    # light blue
    "ytd": "#FFA07A",        # light salmon
}
FALLBACK_COLOR = "#D8BFD8"   # thistle
USER_HIGHLIGHT_COLOR = "#FFCC00"

HIGHLIGHT_OPACITY = 0.3


def field_color(field: str) -> str:
    return FIELD_COLORS.get(field, FALLBACK_COLOR)


def hex_to_rgba(color: str, opacity: float = HIGHLIGHT_OPACITY) -> Tuple[int, int, int, int]:
    """'#RRGGBB' -> (r, g, b, a) with alpha taken from `opacity` (0..1)."""
    value = color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid color: {color}")
    r, g, b = (int(value[i:i + 2], 16) for i in (0, 2, 4))
    return r, g, b, int(round(opacity * 255))
