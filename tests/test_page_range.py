from __future__ import annotations

import pytest

from pdf_highlighter.core.page_range import parse_page_range, resolve_page


@pytest.mark.parametrize(
    "target,expected",
    [("first", 0), ("last", 4), ("next", 3), ("prev", 1), ("previous", 1), ("current", 2), ("4", 3), (1, 0)],
)
def test_resolve_page(target, expected: int) -> None:
    assert resolve_page(5, 2, target) == expected


def test_next_and_prev_stop_at_edges() -> None:
    assert resolve_page(5, 4, "next") == 4
    assert resolve_page(5, 0, "prev") == 0


@pytest.mark.parametrize("target", ["0", "6", "abc", ""])
def test_resolve_page_rejects_out_of_range(target: str) -> None:
    with pytest.raises(ValueError):
        resolve_page(5, 0, target)


def test_parse_page_range() -> None:
    assert parse_page_range(5, None) == [0, 1, 2, 3, 4]
    assert parse_page_range(5, "all") == [0, 1, 2, 3, 4]
    assert parse_page_range(5, "2-3") == [1, 2]
    assert parse_page_range(5, "4-") == [3, 4]
    assert parse_page_range(5, "-2") == [0, 1]
    assert parse_page_range(5, "current", current=3) == [3]
    assert parse_page_range(0, "1") == []


@pytest.mark.parametrize("bad_range", ["0-2", "3-2", "9-10"])
def test_parse_page_range_rejects_bad_ranges(bad_range: str) -> None:
    with pytest.raises(ValueError):
        parse_page_range(5, bad_range)
