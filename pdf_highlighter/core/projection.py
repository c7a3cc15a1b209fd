import math
from typing import Tuple

from pdf_highlighter.core.types import Point, Position, RenderedRect, Viewport

# --- Coordinate helpers ---
#
# Percent-space: origin top-left, both axes 0..100 of the page dimension.
# Pixel-space: origin top-left, viewport size (at scale 1.0) times the zoom.
# PDF user space: origin bottom-left, y up.


def _check(viewport: Viewport, scale: float) -> None:
    if viewport["width"] <= 0 or viewport["height"] <= 0:
        raise ValueError(f"Viewport must have positive dimensions, got {viewport['width']}x{viewport['height']}")
    if not (math.isfinite(scale) and scale > 0):
        raise ValueError(f"Scale must be positive, got {scale}")


def to_pixels(position: Position, viewport: Viewport, scale: float) -> RenderedRect:
    """Project a percent-space position onto the viewport at `scale`."""
    _check(viewport, scale)
    page_w = viewport["width"] * scale
    page_h = viewport["height"] * scale
    return {
        "left": position["left"] / 100 * page_w,
        "top": position["top"] / 100 * page_h,
        "width": position["width"] / 100 * page_w,
        "height": position["height"] / 100 * page_h,
    }


def to_percent(offset: Tuple[float, float], viewport: Viewport, scale: float) -> Point:
    """Inverse of to_pixels for a single (x, y) pixel offset."""
    _check(viewport, scale)
    x, y = offset
    return {
        "left": x / (viewport["width"] * scale) * 100,
        "top": y / (viewport["height"] * scale) * 100,
    }


def rect_to_percent(rect: RenderedRect, viewport: Viewport, scale: float) -> Position:
    """Inverse of to_pixels for a whole rectangle."""
    corner = to_percent((rect["left"], rect["top"]), viewport, scale)
    size = to_percent((rect["width"], rect["height"]), viewport, scale)
    return {
        "left": corner["left"],
        "top": corner["top"],
        "width": size["left"],
        "height": size["top"],
    }


def pdf_to_top_left_y(page_height: float, y_pdf: float) -> float:
    """Convert PDF user-space Y (origin bottom-left, y up) to a
    top-left origin Y (y down). The conversion is its own inverse."""
    return float(page_height) - float(y_pdf)


def _unrotate(u: float, v: float, page_width: float, page_height: float, rotation: int) -> Tuple[float, float]:
    # (u, v): displayed page, origin top-left. Returns unrotated user space, origin bottom-left.
    if rotation == 90:
        return v, u
    if rotation == 180:
        return page_width - u, v
    if rotation == 270:
        return page_width - v, page_height - u
    return u, pdf_to_top_left_y(page_height, v)


def to_pdf_rect(
    position: Position,
    page_width: float,
    page_height: float,
    origin: Tuple[float, float] = (0.0, 0.0),
    rotation: int = 0,
) -> Tuple[float, float, float, float]:
    """Percent-space position -> PDF user-space (x0, y0, x1, y1), x0 < x1, y0 < y1.

    `page_width`/`page_height` are the unrotated page box size and `origin`
    its lower-left corner, which is not always (0, 0). Percentages refer to
    the page as displayed, i.e. after `/Rotate` (clockwise, multiple of 90).
    """
    rotation = int(rotation) % 360
    if rotation % 90:
        raise ValueError(f"Page rotation must be a multiple of 90, got {rotation}")
    shown_w, shown_h = (page_height, page_width) if rotation in (90, 270) else (page_width, page_height)

    u0 = position["left"] / 100 * shown_w
    v0 = position["top"] / 100 * shown_h
    u1 = u0 + position["width"] / 100 * shown_w
    v1 = v0 + position["height"] / 100 * shown_h

    xa, ya = _unrotate(u0, v0, page_width, page_height, rotation)
    xb, yb = _unrotate(u1, v1, page_width, page_height, rotation)
    ox, oy = origin
    return ox + min(xa, xb), oy + min(ya, yb), ox + max(xa, xb), oy + max(ya, yb)
