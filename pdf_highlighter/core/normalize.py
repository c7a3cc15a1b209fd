import math
from typing import Any, Mapping, Optional

from pdf_highlighter.core.errors import InvalidPosition
from pdf_highlighter.core.types import CanonicalPosition

# Percent-space sizes used when a descriptor carries no width/height
DEFAULT_WIDTH = 10.0
DEFAULT_HEIGHT = 2.0


def _to_percent(value: float) -> float:
    """Fraction values (<= 1) are scaled to percent; larger values pass through.

    The source schema has no unit tag, so a legitimate value between 0 and 1
    that is meant as percent (or pixels) is indistinguishable from a fraction.
    """
    return value * 100 if value <= 1 else value


def _component(position: Mapping[str, Any], key: str) -> Optional[float]:
    raw = position.get(key)
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise InvalidPosition(f"'{key}' must be a number, got {raw!r}", field=key)
    value = float(raw)
    if not math.isfinite(value):
        raise InvalidPosition(f"'{key}' must be finite, got {raw!r}", field=key)
    if value < 0:
        raise InvalidPosition(f"'{key}' must not be negative, got {raw!r}", field=key)
    return value


def _page_index(position: Mapping[str, Any]) -> int:
    page_number = position.get("page_number")
    if page_number is None:
        raise InvalidPosition("position has no page_number", field="page_number")
    if isinstance(page_number, bool) or not isinstance(page_number, (int, float)):
        raise InvalidPosition(f"page_number must be an integer, got {page_number!r}", field="page_number")
    if isinstance(page_number, float) and not page_number.is_integer():
        raise InvalidPosition(f"page_number must be an integer, got {page_number!r}", field="page_number")
    if page_number < 1:
        raise InvalidPosition(f"page_number must be positive, got {page_number!r}", field="page_number")
    return int(page_number) - 1


def normalize(descriptor: Optional[Mapping[str, Any]]) -> Optional[CanonicalPosition]:
    """Turn a raw position descriptor into a percent-space position.

    Returns None when there is no descriptor at all; callers skip the field.
    Raises InvalidPosition when a descriptor is present but unusable.
    """
    if descriptor is None:
        return None
    if not isinstance(descriptor, Mapping):
        raise InvalidPosition(f"position must be an object, got {type(descriptor).__name__}", field="position")

    page_index = _page_index(descriptor)

    left = _component(descriptor, "left")
    x = left if left is not None else _component(descriptor, "x")
    top = _component(descriptor, "top")
    y = top if top is not None else _component(descriptor, "y")
    if x is None or y is None:
        raise InvalidPosition("position needs x/left and y/top", field="left" if x is None else "top")

    # zero sizes count as absent, same as the producers of this schema expect
    width = _component(descriptor, "width") or None
    height = _component(descriptor, "height") or None

    return {
        "page_index": page_index,
        "left": _to_percent(x),
        "top": _to_percent(y),
        "width": _to_percent(width) if width is not None else DEFAULT_WIDTH,
        "height": _to_percent(height) if height is not None else DEFAULT_HEIGHT,
    }
