from __future__ import annotations

import json
from pathlib import Path

import pytest

from pdf_highlighter.core.export import export_highlights, export_json, write_export
from pdf_highlighter.core.normalize import normalize
from pdf_highlighter.core.selection import SelectionController
from pdf_highlighter.core.store import HighlightStore


def _user_highlights() -> list:
    store = HighlightStore()
    store.add_user_highlight(0, {"left": 12.5, "top": 40.25, "width": 30.0, "height": 4.75})
    store.add_user_highlight(3, {"left": 0.0, "top": 0.0, "width": 100.0, "height": 100.0})
    store.add_user_highlight(1, {"left": 99.3, "top": 0.1, "width": 0.6, "height": 0.51})
    return store.user_highlights


def test_export_converts_to_fractions_and_1_based_pages() -> None:
    (first, *_rest) = export_highlights(_user_highlights())
    assert first == {
        "id": "user-highlight-1",
        "position": {
            "page_number": 1,
            "left": 0.125,
            "top": pytest.approx(0.4025),
            "width": 0.3,
            "height": 0.0475,
        },
    }


def test_export_round_trips_through_normalize() -> None:
    for h in _user_highlights():
        (exported,) = export_highlights([h])
        pos = normalize(exported["position"])
        assert pos["page_index"] == h["page_index"]
        for key in ("left", "top", "width", "height"):
            assert pos[key] == pytest.approx(h["position"][key], abs=1e-9)


def test_round_trip_for_drawn_selection() -> None:
    viewport = {"page_index": 0, "width": 612.0, "height": 792.0}
    controller = SelectionController(HighlightStore())
    controller.enabled = True
    controller.pointer_down(61.2, 79.2, 0, viewport, 1.4)
    controller.pointer_move(400.7, 333.3)
    h = controller.pointer_up()

    pos = normalize(export_highlights([h])[0]["position"])
    for key in ("left", "top", "width", "height"):
        assert pos[key] == pytest.approx(h["position"][key], abs=1e-9)


def test_empty_export_is_a_no_op(tmp_path: Path) -> None:
    assert export_highlights([]) == []
    assert write_export(tmp_path / "out.json", []) is None
    assert not (tmp_path / "out.json").exists()


def test_write_export_into_directory_uses_default_name(tmp_path: Path) -> None:
    path = write_export(tmp_path, _user_highlights())
    assert path == tmp_path / "highlights.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert [d["id"] for d in data] == ["user-highlight-1", "user-highlight-2", "user-highlight-3"]
    assert json.loads(export_json(_user_highlights())) == data
