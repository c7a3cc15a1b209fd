from typing import List, Optional, Union


def resolve_page(total_pages: int, current: int, target: Union[str, int]) -> int:
    """Return the zero-based page index a navigation request points at.

    Supports: "first", "last", "next", "prev"/"previous", "current", or a
    1-based page number. "next"/"prev" stop at the document edges.
    """
    if total_pages <= 0:
        raise ValueError("Document has no pages")
    t = str(target).strip().lower()
    if t == "first":
        return 0
    if t == "last":
        return total_pages - 1
    if t == "current":
        return current
    if t == "next":
        return min(current + 1, total_pages - 1)
    if t in ("prev", "previous"):
        return max(current - 1, 0)
    try:
        p = int(t)
    except ValueError:
        raise ValueError(f"Invalid page: {target}") from None
    if p < 1 or p > total_pages:
        raise ValueError(f"Page {p} out of range (1-{total_pages})")
    return p - 1


def parse_page_range(total_pages: int, page_range: Optional[str], current: int = 0) -> List[int]:
    """Return zero-based page indices for a range string.
    Supports: None(all), any single page accepted by resolve_page, "S-E".
    """
    if total_pages <= 0:
        return []
    if page_range is None or str(page_range).strip().lower() == "all":
        return list(range(total_pages))

    pr = str(page_range).strip().lower()
    if "-" in pr:
        s, e = pr.split("-", 1)
        s_i = int(s) if s else 1
        e_i = int(e) if e else total_pages
        if s_i < 1 or e_i < s_i or s_i > total_pages:
            raise ValueError(f"Invalid page range: {page_range}")
        return list(range(s_i - 1, min(e_i, total_pages)))
    return [resolve_page(total_pages, current, pr)]
