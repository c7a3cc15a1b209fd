import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from pdf_highlighter.core.types import CanonicalHighlight, ExportedHighlight

logger = logging.getLogger(__name__)

DEFAULT_EXPORT_NAME = "highlights.json"


def export_highlights(highlights: Iterable[CanonicalHighlight]) -> List[ExportedHighlight]:
    """Percent-space highlights -> fractional descriptors with 1-based pages.

    The output feeds straight back into normalize() and yields the same
    positions, since every value lands in the fraction (<= 1) branch.
    """
    out: List[ExportedHighlight] = []
    for h in highlights:
        p = h["position"]
        out.append({
            "id": h["id"],
            "position": {
                "page_number": h["page_index"] + 1,
                "left": p["left"] / 100,
                "top": p["top"] / 100,
                "width": p["width"] / 100,
                "height": p["height"] / 100,
            },
        })
    return out


def export_json(highlights: Iterable[CanonicalHighlight]) -> str:
    return json.dumps(export_highlights(highlights), indent=2, ensure_ascii=False)


def write_export(dest: Union[str, Path], highlights: Iterable[CanonicalHighlight]) -> Optional[Path]:
    """Write the export to `dest` (a file, or a directory to hold highlights.json).

    Returns None and writes nothing when there is nothing to export.
    """
    data = export_highlights(highlights)
    if not data:
        logger.info("No user highlights to export")
        return None
    path = Path(dest)
    if path.is_dir():
        path = path / DEFAULT_EXPORT_NAME
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Exported {len(data)} highlights to {path}")
    return path
