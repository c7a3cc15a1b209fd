import logging
from typing import Dict, Iterable, Iterator, List, Optional

from pdf_highlighter.core.palette import USER_HIGHLIGHT_COLOR
from pdf_highlighter.core.types import CanonicalHighlight, Position, ORIGIN_USER

logger = logging.getLogger(__name__)


class HighlightStore:
    """Imported and user-created highlights for one session.

    Iteration order is imported first, then user-created, each in insertion
    order; later entries paint on top of earlier ones.
    """

    def __init__(self):
        self._imported: Dict[str, CanonicalHighlight] = {}
        self._user: Dict[str, CanonicalHighlight] = {}
        self._user_seq = 0

    # --- imported subset ---

    def import_batch(self, highlights: Iterable[CanonicalHighlight]) -> int:
        """Replace the imported subset; user highlights stay as they are."""
        batch: Dict[str, CanonicalHighlight] = {}
        for h in highlights:
            if h["id"] in batch:
                logger.warning(f"Duplicate highlight id in batch, keeping the last one: {h['id']}")
            batch[h["id"]] = h
        self._imported = batch
        return len(batch)

    @property
    def imported(self) -> List[CanonicalHighlight]:
        return list(self._imported.values())

    # --- user subset ---

    def add_user_highlight(self, page_index: int, position: Position) -> CanonicalHighlight:
        if page_index < 0:
            raise ValueError(f"page_index must be >= 0, got {page_index}")
        # sequence keeps counting across clears so ids are never reused
        self._user_seq += 1
        n = self._user_seq
        highlight: CanonicalHighlight = {
            "id": f"user-highlight-{n}",
            "page_index": page_index,
            "position": {
                "left": position["left"],
                "top": position["top"],
                "width": position["width"],
                "height": position["height"],
            },
            "color": USER_HIGHLIGHT_COLOR,
            "label": f"Selection {n}",
            "note": "",
            "origin": ORIGIN_USER,
        }
        self._user[highlight["id"]] = highlight
        logger.info(f"Created highlight {highlight['id']} on page {page_index + 1}")
        return highlight

    @property
    def user_highlights(self) -> List[CanonicalHighlight]:
        return list(self._user.values())

    def clear_user_highlights(self) -> int:
        removed = len(self._user)
        self._user = {}
        return removed

    # --- read views ---

    def by_page(self, page_index: int) -> List[CanonicalHighlight]:
        return [h for h in self if h["page_index"] == page_index]

    def get(self, highlight_id: str) -> Optional[CanonicalHighlight]:
        return self._imported.get(highlight_id) or self._user.get(highlight_id)

    def clear(self) -> None:
        """Drop both subsets. The user id sequence is kept."""
        self._imported = {}
        self._user = {}

    def __iter__(self) -> Iterator[CanonicalHighlight]:
        yield from self._imported.values()
        yield from self._user.values()

    def __len__(self) -> int:
        return len(self._imported) + len(self._user)
