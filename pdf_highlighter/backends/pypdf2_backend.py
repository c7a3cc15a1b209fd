from pathlib import Path
from typing import Iterable, Union
import logging
import PyPDF2
from PyPDF2.generic import AnnotationBuilder

from pdf_highlighter.core.projection import to_pdf_rect
from pdf_highlighter.core.types import CanonicalHighlight

logger = logging.getLogger(__name__)


def _page_box(page):
    box = page.mediabox
    left, bottom = float(box.left), float(box.bottom)
    # /Rotate is inherited from the page tree when the reader flattens it
    rotation = int(page["/Rotate"]) if "/Rotate" in page else 0
    return left, bottom, float(box.right) - left, float(box.top) - bottom, rotation


def write_annotated_copy(
    source: Union[str, Path],
    dest: Union[str, Path],
    highlights: Iterable[CanonicalHighlight],
) -> int:
    """Copy `source` to `dest` with each highlight added as a filled
    rectangle annotation. Returns the number of annotations written;
    highlights pointing past the last page are skipped."""
    written = 0
    try:
        with open(source, "rb") as f:
            reader = PyPDF2.PdfReader(f)
            writer = PyPDF2.PdfWriter()
            for page in reader.pages:
                writer.add_page(page)

            total = len(reader.pages)
            for h in highlights:
                page_index = h["page_index"]
                if page_index >= total:
                    logger.warning(f"Highlight {h['id']} is on page {page_index + 1}, document has {total}; skipped")
                    continue
                left, bottom, width, height, rotation = _page_box(reader.pages[page_index])
                rect = to_pdf_rect(h["position"], width, height, origin=(left, bottom), rotation=rotation)
                annotation = AnnotationBuilder.rectangle(
                    rect=rect,
                    interiour_color=h["color"].lstrip("#"),
                )
                writer.add_annotation(page_number=page_index, annotation=annotation)
                written += 1

            with open(dest, "wb") as out:
                writer.write(out)
    except Exception as e:
        logger.error(f"PyPDF2 could not write annotated copy of {source}: {e}")
        raise
    logger.info(f"Wrote {written} highlight annotations to {dest}")
    return written
