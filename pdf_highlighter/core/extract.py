import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pdf_highlighter.core.errors import HighlightDataError, InvalidPosition
from pdf_highlighter.core.normalize import normalize
from pdf_highlighter.core.palette import field_color
from pdf_highlighter.core.types import CanonicalHighlight, ExtractionReport, ORIGIN_IMPORTED

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER = "pay_stubs"

# Estimates computed from other fields; they never sit anywhere on the page.
DERIVED_FIELDS = frozenset({"annual_income_estimation"})


def _is_derived(field: str, data: Any) -> bool:
    if field in DERIVED_FIELDS:
        return True
    return isinstance(data, Mapping) and data.get("derived") is True


def _is_group(data: Any) -> bool:
    """A record without its own position whose children are records."""
    if not isinstance(data, Mapping) or "position" in data:
        return False
    return any(isinstance(v, Mapping) for v in data.values())


def _label(field: str, data: Mapping[str, Any]) -> str:
    value = data.get("value")
    return str(value) if value else field


def _build_highlight(field: str, data: Mapping[str, Any], sub_field: str = "") -> Optional[CanonicalHighlight]:
    position = normalize(data.get("position"))
    if position is None:
        return None
    return {
        "id": f"highlight-{field}-{sub_field}",
        "page_index": position["page_index"],
        "position": {
            "left": position["left"],
            "top": position["top"],
            "width": position["width"],
            "height": position["height"],
        },
        "color": field_color(field),
        "label": _label(field, data),
        "note": f"{field}: {sub_field}" if sub_field else field,
        "origin": ORIGIN_IMPORTED,
    }


def _candidates(fields: Mapping[str, Any]):
    """Yield (field, sub_field, record) for every record that may carry a position."""
    for field, data in fields.items():
        if _is_derived(field, data):
            logger.debug(f"Skipping derived field: {field}")
            continue
        if not isinstance(data, Mapping):
            continue
        if _is_group(data):
            for sub_field, sub_data in data.items():
                if isinstance(sub_data, Mapping) and sub_data.get("position") is not None:
                    yield field, sub_field, sub_data
        elif data.get("position") is not None:
            yield field, "", data


def extract_with_report(
    document: Mapping[str, Any],
    container: str = DEFAULT_CONTAINER,
) -> Tuple[List[CanonicalHighlight], ExtractionReport]:
    """Collect highlights from the document's field map.

    A field with a bad position is skipped and listed under ``invalid``;
    the remaining fields still import.
    """
    fields = document.get(container) if isinstance(document, Mapping) else None
    if not isinstance(fields, Mapping):
        raise HighlightDataError(f"JSON data should contain a {container} object")

    report: ExtractionReport = {"container": container, "skipped": [], "invalid": []}
    highlights: List[CanonicalHighlight] = []
    placed, failed = set(), set()

    for field, sub_field, data in _candidates(fields):
        name = f"{field}.{sub_field}" if sub_field else field
        try:
            highlight = _build_highlight(field, data, sub_field)
        except InvalidPosition as e:
            logger.warning(f"Invalid position for field '{name}': {e}")
            report["invalid"].append({"field": name, "key": e.field, "error": str(e)})
            failed.add(field)
            continue
        if highlight is not None:
            placed.add(field)
            highlights.append(highlight)

    report["skipped"] = [f for f in fields if f not in placed and f not in failed]

    logger.info(f"Processed {len(highlights)} highlights")
    for h in highlights:
        p = h["position"]
        logger.debug(
            f"  {h['id']}: page {h['page_index'] + 1}, position ({p['left']:.1f}%, {p['top']:.1f}%), "
            f"size {p['width']:.1f}% x {p['height']:.1f}%"
        )
    return highlights, report


def extract(document: Mapping[str, Any], container: str = DEFAULT_CONTAINER) -> List[CanonicalHighlight]:
    highlights, _ = extract_with_report(document, container)
    return highlights


def count_highlightable_fields(document: Mapping[str, Any], container: str = DEFAULT_CONTAINER) -> int:
    """Number of records that carry a position, valid or not."""
    fields = document.get(container) if isinstance(document, Mapping) else None
    if not isinstance(fields, Mapping):
        return 0
    return sum(1 for _ in _candidates(fields))


def parse_highlight_json(text: str, container: str = DEFAULT_CONTAINER) -> Dict[str, Any]:
    """Parse raw JSON text at the input boundary.

    Raises HighlightDataError with a user-facing message; nothing downstream
    is touched when it does.
    """
    if not text or not text.strip():
        raise HighlightDataError("Please enter JSON data")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise HighlightDataError(f"Error parsing JSON: {e}") from e
    if not isinstance(data, dict) or container not in data:
        raise HighlightDataError(f"JSON data should contain a {container} object")
    return data
