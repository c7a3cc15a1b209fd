"""Drag-to-select state machine.

Fed with pixel offsets relative to the rendered page, independent of any
event loop or widget toolkit. The page, viewport and zoom in effect at
pointer-down stay fixed for the whole drag; the session cancels the drag if
any of them changes.
"""

import enum
import logging
from typing import Optional

from pdf_highlighter.core.projection import to_percent
from pdf_highlighter.core.store import HighlightStore
from pdf_highlighter.core.types import CanonicalHighlight, Point, Position, Viewport

logger = logging.getLogger(__name__)

# Minimum committed size on both axes, in percent of the page
COMMIT_THRESHOLD = 0.5


class SelectionState(enum.Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def selection_rect(start: Point, end: Point) -> Position:
    return {
        "left": min(start["left"], end["left"]),
        "top": min(start["top"], end["top"]),
        "width": abs(end["left"] - start["left"]),
        "height": abs(end["top"] - start["top"]),
    }


class SelectionController:
    def __init__(self, store: HighlightStore, threshold: float = COMMIT_THRESHOLD):
        self.store = store
        self.threshold = threshold
        self.state = SelectionState.IDLE
        self._enabled = False
        self._page_index: Optional[int] = None
        self._viewport: Optional[Viewport] = None
        self._scale = 1.0
        self._start: Optional[Point] = None
        self._end: Optional[Point] = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = bool(value)
        if not self._enabled:
            self.cancel()

    @property
    def page_index(self) -> Optional[int]:
        return self._page_index

    def _project(self, x: float, y: float) -> Point:
        point = to_percent((x, y), self._viewport, self._scale)
        return {"left": _clamp(point["left"]), "top": _clamp(point["top"])}

    def pointer_down(self, x: float, y: float, page_index: int, viewport: Viewport, scale: float) -> bool:
        """Start a drag. Returns False when the event was ignored."""
        if not self._enabled:
            return False
        if self.state is SelectionState.DRAGGING:
            # a lost pointer-up; restart from here
            self.cancel()
        self._page_index = page_index
        self._viewport = viewport
        self._scale = scale
        self._start = self._project(x, y)
        self._end = None
        self.state = SelectionState.DRAGGING
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        if not self._enabled or self.state is not SelectionState.DRAGGING:
            return False
        self._end = self._project(x, y)
        return True

    def preview(self) -> Optional[Position]:
        """The uncommitted rectangle of the drag in progress, if any."""
        if self.state is not SelectionState.DRAGGING or self._end is None:
            return None
        return selection_rect(self._start, self._end)

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> Optional[CanonicalHighlight]:
        """Finish the drag and commit it if it is large enough.

        Coordinates are optional; without them the last move position is used.
        """
        if not self._enabled or self.state is not SelectionState.DRAGGING:
            return None
        if x is not None and y is not None:
            self._end = self._project(x, y)

        rect = self.preview()
        page_index = self._page_index
        self.cancel()

        if rect is None or rect["width"] <= self.threshold or rect["height"] <= self.threshold:
            logger.debug(f"Selection discarded (below {self.threshold}% threshold): {rect}")
            return None
        return self.store.add_user_highlight(page_index, rect)

    def cancel(self) -> None:
        self.state = SelectionState.IDLE
        self._page_index = None
        self._viewport = None
        self._start = None
        self._end = None
