import asyncio
import io
import logging
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Tuple, Union

import pdfplumber

from pdf_highlighter.core.errors import DocumentLoadError
from pdf_highlighter.core.palette import hex_to_rgba
from pdf_highlighter.core.projection import to_pixels
from pdf_highlighter.core.types import Position, Viewport

logger = logging.getLogger(__name__)

DocumentSource = Union[str, Path, bytes]
Sink = Union[str, Path, BinaryIO]
Overlay = Tuple[Position, str]   # (percent-space position, "#RRGGBB")

# PDF points per inch; scale 1.0 renders one pixel per point
BASE_RESOLUTION = 72


class PdfplumberDocument:
    """An open PDF, used as the page viewport and pixel source.

    Holds the pdfplumber handle (and, for uploaded bytes, the in-memory
    buffer behind it) until close(), which is safe to call more than once.
    """

    def __init__(self, source: DocumentSource):
        self.name = Path(source).name if isinstance(source, (str, Path)) else "<upload>"
        self._buffer: Optional[io.BytesIO] = None
        self._pdf = None
        try:
            if isinstance(source, (bytes, bytearray)):
                self._buffer = io.BytesIO(bytes(source))
                self._pdf = pdfplumber.open(self._buffer)
            else:
                self._pdf = pdfplumber.open(Path(source))
            self.page_count = len(self._pdf.pages)
        except Exception as e:
            logger.error(f"pdfplumber could not open {self.name}: {e}")
            self.close()
            raise DocumentLoadError(f"Could not load PDF '{self.name}': {e}") from e

    @property
    def closed(self) -> bool:
        return self._pdf is None and self._buffer is None

    def close(self) -> None:
        pdf, self._pdf = self._pdf, None
        buffer, self._buffer = self._buffer, None
        if pdf is not None:
            pdf.close()
            logger.debug(f"Released document {self.name}")
        if buffer is not None:
            buffer.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _page(self, page_index: int):
        if self._pdf is None:
            raise DocumentLoadError(f"Document '{self.name}' is closed")
        if not 0 <= page_index < self.page_count:
            raise ValueError(f"Page {page_index + 1} out of range (1-{self.page_count})")
        return self._pdf.pages[page_index]

    def page_viewport(self, page_index: int, scale: float = 1.0) -> Viewport:
        page = self._page(page_index)
        return {
            "page_index": page_index,
            "width": float(page.width) * scale,
            "height": float(page.height) * scale,
        }

    async def get_page_viewport(self, page_index: int, scale: float = 1.0) -> Viewport:
        return await asyncio.to_thread(self.page_viewport, page_index, scale)

    def render_page_sync(self, page_index: int, scale: float, sink: Sink, overlays: Iterable[Overlay] = ()) -> None:
        """Render one page as PNG into `sink`, with translucent highlight boxes on top."""
        page = self._page(page_index)
        image = page.to_image(resolution=BASE_RESOLUTION * scale)

        # PageImage.draw_rect works in page coordinates (points, top-left origin)
        viewport = self.page_viewport(page_index, 1.0)
        x_off, top_off = float(page.bbox[0]), float(page.bbox[1])
        for position, color in overlays:
            rect = to_pixels(position, viewport, 1.0)
            bbox = (
                x_off + rect["left"],
                top_off + rect["top"],
                x_off + rect["left"] + rect["width"],
                top_off + rect["top"] + rect["height"],
            )
            image.draw_rect(bbox, fill=hex_to_rgba(color), stroke=hex_to_rgba(color, 1.0), stroke_width=1)

        image.save(sink, format="PNG")

    async def render_page(self, page_index: int, scale: float, sink: Sink, overlays: Iterable[Overlay] = ()) -> None:
        await asyncio.to_thread(self.render_page_sync, page_index, scale, sink, list(overlays))


def open_document(source: DocumentSource) -> PdfplumberDocument:
    return PdfplumberDocument(source)
