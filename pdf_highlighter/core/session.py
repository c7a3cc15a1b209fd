"""Viewer session: the one owner of all mutable viewer state.

Current page, zoom, selection mode, highlights and the open document live
here and change only through the methods below. Document decoding and page
rendering are the only awaited calls; everything else is synchronous.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pdf_highlighter.core.errors import DocumentLoadError, NoDocumentError
from pdf_highlighter.core.export import export_highlights, write_export
from pdf_highlighter.core.extract import DEFAULT_CONTAINER, extract_with_report, parse_highlight_json
from pdf_highlighter.core.page_range import resolve_page
from pdf_highlighter.core.paths import DEFAULT_MAX_ZOOM, DEFAULT_MIN_ZOOM, DEFAULT_ZOOM_STEP
from pdf_highlighter.core.projection import to_pixels
from pdf_highlighter.core.selection import SelectionController, SelectionState
from pdf_highlighter.core.store import HighlightStore
from pdf_highlighter.core.types import CanonicalHighlight, ExtractionReport, RenderedRect, Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoomSettings:
    minimum: float = DEFAULT_MIN_ZOOM
    maximum: float = DEFAULT_MAX_ZOOM
    step: float = DEFAULT_ZOOM_STEP

    def clamp(self, scale: float) -> float:
        # rounding keeps repeated +/- steps from drifting (1.2000000000000002)
        return round(min(max(scale, self.minimum), self.maximum), 4)


def _default_opener(source):
    from pdf_highlighter.backends.pdfplumber_backend import open_document
    return open_document(source)


class _OpenDocument:
    """An open backend document shared by overlapping requests.

    Backend calls run one at a time. release() closes the document right
    away when it is idle, otherwise after the last pending call returns.
    """

    def __init__(self, document):
        self.document = document
        self.name = getattr(document, "name", None) or "Document"
        self.released = False
        self._lock = asyncio.Lock()
        self._pending = 0
        self._closed = False

    async def run(self, method: str, *args):
        self._pending += 1
        try:
            async with self._lock:
                if self.released:
                    raise NoDocumentError(f"{self.name} was closed")
                return await getattr(self.document, method)(*args)
        finally:
            self._pending -= 1
            if self.released and not self._pending:
                self._close()

    def release(self) -> None:
        self.released = True
        if not self._pending:
            self._close()

    def _close(self) -> None:
        if not self._closed:
            self._closed = True
            self.document.close()
            logger.info(f"Closed {self.name}")


class ViewerSession:
    def __init__(
        self,
        opener: Optional[Callable[[Any], Any]] = None,
        zoom: Optional[ZoomSettings] = None,
        container: str = DEFAULT_CONTAINER,
    ):
        self._opener = opener or _default_opener
        self.zoom_settings = zoom or ZoomSettings()
        self.container = container
        self.store = HighlightStore()
        self.selection = SelectionController(self.store)
        self.document = None
        self._handle: Optional[_OpenDocument] = None
        self.source = None
        self.document_name: Optional[str] = None
        self.page_count = 0
        self.current_page = 0
        self.scale = 1.0
        self.last_report: Optional[ExtractionReport] = None
        self._viewports: Dict[int, Viewport] = {}
        self._render_generation = 0

    # --- document lifecycle ---

    async def load_document(self, source: Union[str, bytes, Any], name: Optional[str] = None) -> int:
        """Open a new document, releasing the current one first.

        On failure the session is left empty with nothing held open.
        Returns the page count.
        """
        self._release_document()
        try:
            document = self._opener(source)
        except DocumentLoadError:
            self._reset_view()
            raise
        except Exception as e:
            self._reset_view()
            raise DocumentLoadError(f"Could not load document: {e}") from e

        self.document = document
        self._handle = _OpenDocument(document)
        self.source = source
        self.document_name = name or getattr(document, "name", None)
        self.page_count = int(document.page_count)
        self._reset_view()
        logger.info(f"Loaded {self.document_name} ({self.page_count} pages)")
        if self.page_count:
            try:
                await self.ensure_viewport(0)
            except Exception as e:
                self._release_document()
                raise DocumentLoadError(f"Could not read page 1 of {self.document_name}: {e}") from e
        return self.page_count

    def _release_document(self) -> None:
        handle, self._handle = self._handle, None
        self.document = None
        if handle is not None:
            handle.release()
        self.source = None
        self.document_name = None
        self.page_count = 0
        self._reset_view()

    def _reset_view(self) -> None:
        self.current_page = 0
        self._viewports = {}
        self._render_generation += 1
        self.selection.cancel()

    def close(self) -> None:
        self._release_document()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _require_document(self) -> _OpenDocument:
        if self._handle is None:
            raise NoDocumentError("No document is loaded")
        return self._handle

    # --- highlight data ---

    def apply_highlight_data(self, data: Mapping[str, Any]) -> int:
        """Replace the imported highlights with those found in `data`."""
        highlights, report = extract_with_report(data, self.container)
        self.store.import_batch(highlights)
        self.last_report = report
        return len(highlights)

    def apply_highlight_json(self, text: str) -> int:
        # parse fully before touching the store
        return self.apply_highlight_data(parse_highlight_json(text, self.container))

    def clear_user_highlights(self) -> int:
        removed = self.store.clear_user_highlights()
        logger.info(f"Cleared {removed} user highlights")
        return removed

    def export_user_highlights(self) -> List[Dict[str, Any]]:
        return export_highlights(self.store.user_highlights)

    def write_user_highlights(self, dest):
        return write_export(dest, self.store.user_highlights)

    # --- viewports ---

    async def ensure_viewport(self, page_index: int) -> Viewport:
        """Viewport of a page at scale 1.0, fetched from the backend once per page."""
        viewport = self._viewports.get(page_index)
        if viewport is None:
            handle = self._require_document()
            viewport = await handle.run("get_page_viewport", page_index, 1.0)
            # a different document may have been opened meanwhile
            if handle is self._handle:
                self._viewports[page_index] = viewport
        return viewport

    def current_viewport(self) -> Optional[Viewport]:
        return self._viewports.get(self.current_page)

    # --- navigation and zoom ---

    async def go_to_page(self, target: Union[str, int]) -> int:
        self._require_document()
        page = resolve_page(self.page_count, self.current_page, target)
        if page != self.current_page:
            self.selection.cancel()
            self.current_page = page
        await self.ensure_viewport(page)
        return page

    async def next_page(self) -> int:
        return await self.go_to_page("next")

    async def previous_page(self) -> int:
        return await self.go_to_page("prev")

    def set_zoom(self, scale: float) -> float:
        if not math.isfinite(scale):
            raise ValueError(f"Zoom must be a finite number, got {scale}")
        new_scale = self.zoom_settings.clamp(scale)
        if new_scale != self.scale:
            self.selection.cancel()
            self.scale = new_scale
        return self.scale

    def zoom_in(self) -> float:
        return self.set_zoom(self.scale + self.zoom_settings.step)

    def zoom_out(self) -> float:
        return self.set_zoom(self.scale - self.zoom_settings.step)

    # --- selection ---

    @property
    def selection_mode(self) -> bool:
        return self.selection.enabled

    def set_selection_mode(self, enabled: bool) -> bool:
        self.selection.enabled = enabled
        return self.selection.enabled

    def pointer_down(self, x: float, y: float) -> bool:
        viewport = self.current_viewport()
        if viewport is None:
            return False
        return self.selection.pointer_down(x, y, self.current_page, viewport, self.scale)

    def pointer_move(self, x: float, y: float) -> bool:
        return self.selection.pointer_move(x, y)

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> Optional[CanonicalHighlight]:
        return self.selection.pointer_up(x, y)

    def selection_preview(self) -> Optional[RenderedRect]:
        """Pixel rectangle of the drag in progress, for visual feedback."""
        rect = self.selection.preview()
        viewport = self.current_viewport()
        if rect is None or viewport is None:
            return None
        return to_pixels(rect, viewport, self.scale)

    # --- projection for display ---

    def rendered_highlights(self) -> List[Tuple[CanonicalHighlight, RenderedRect]]:
        """Highlights of the current page with their pixel rectangles at the current zoom."""
        viewport = self.current_viewport()
        if viewport is None:
            return []
        return [(h, to_pixels(h["position"], viewport, self.scale)) for h in self.store.by_page(self.current_page)]

    async def render_current_page(self, sink) -> bool:
        """Render the current page with its highlights into `sink`.

        Returns False when the result was superseded while rendering (a newer
        render, another page or zoom, or a new document); the caller should
        drop what was written. Renders on one document never overlap, and a
        document replaced mid-render is closed only once the render returns.
        """
        handle = self._require_document()
        self._render_generation += 1
        generation = self._render_generation
        page, scale = self.current_page, self.scale
        overlays = [(h["position"], h["color"]) for h in self.store.by_page(page)]

        try:
            await handle.run("render_page", page, scale, sink, overlays)
        except NoDocumentError:
            if handle is self._handle:
                raise
            # closed while this render waited for its turn
            logger.debug(f"Render of page {page + 1} dropped, document was closed")
            return False

        current = (
            generation == self._render_generation
            and handle is self._handle
            and (page, scale) == (self.current_page, self.scale)
        )
        if not current:
            logger.debug(f"Render of page {page + 1} at {scale}x superseded")
        return current

    # --- display helpers ---

    def describe_highlight(self, highlight_id: str) -> Optional[Dict[str, Any]]:
        h = self.store.get(highlight_id)
        if h is None:
            return None
        p = h["position"]
        info = {
            "id": h["id"],
            "text": h["label"] or "N/A",
            "page": h["page_index"] + 1,
            "position": f"left:{p['left']:.1f}, top:{p['top']:.1f}",
            "size": f"w:{p['width']:.1f}, h:{p['height']:.1f}",
            "origin": h["origin"],
        }
        if h["note"]:
            info["note"] = h["note"]
        return info

    def state_summary(self) -> Dict[str, Any]:
        return {
            "document": self.document_name,
            "total_pages": self.page_count,
            "current_page": self.current_page + 1 if self.document is not None else None,
            "scale": self.scale,
            "selection_mode": self.selection_mode,
            "dragging": self.selection.state is SelectionState.DRAGGING,
            "viewport": self.current_viewport(),
            "imported_highlights": len(self.store.imported),
            "user_highlights": len(self.store.user_highlights),
        }
