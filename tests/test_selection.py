from __future__ import annotations

import pytest

from pdf_highlighter.core.selection import SelectionController, SelectionState
from pdf_highlighter.core.store import HighlightStore

# 1000x1000 px page at scale 1: 1% of the page is 10 px
SQUARE = {"page_index": 2, "width": 1000.0, "height": 1000.0}


@pytest.fixture
def controller() -> SelectionController:
    c = SelectionController(HighlightStore())
    c.enabled = True
    return c


def _drag(c: SelectionController, start: tuple, end: tuple, scale: float = 1.0):
    c.pointer_down(start[0], start[1], SQUARE["page_index"], SQUARE, scale)
    c.pointer_move(end[0], end[1])
    return c.pointer_up()


def test_drag_commits_a_user_highlight(controller: SelectionController) -> None:
    h = _drag(controller, (100, 200), (350, 260))
    assert h is not None
    assert h["page_index"] == 2
    assert h["position"]["left"] == pytest.approx(10)
    assert h["position"]["top"] == pytest.approx(20)
    assert h["position"]["width"] == pytest.approx(25)
    assert h["position"]["height"] == pytest.approx(6)
    assert controller.store.user_highlights == [h]
    assert controller.state is SelectionState.IDLE


def test_reverse_drag_normalizes_the_rectangle(controller: SelectionController) -> None:
    h = _drag(controller, (350, 260), (100, 200))
    assert h["position"]["left"] == pytest.approx(10)
    assert h["position"]["top"] == pytest.approx(20)
    assert h["position"]["width"] == pytest.approx(25)
    assert h["position"]["height"] == pytest.approx(6)


def test_zoom_is_undone_by_inverse_projection(controller: SelectionController) -> None:
    h = _drag(controller, (200, 400), (700, 520), scale=2.0)
    assert h["position"]["left"] == pytest.approx(10)
    assert h["position"]["top"] == pytest.approx(20)
    assert h["position"]["width"] == pytest.approx(25)
    assert h["position"]["height"] == pytest.approx(6)


@pytest.mark.parametrize(
    "end",
    [
        (104, 300),   # width 0.4%
        (300, 204),   # height 0.4%
        (100, 200),   # plain click
        (102, 201),
    ],
)
def test_drag_at_or_below_threshold_is_discarded(controller: SelectionController, end: tuple) -> None:
    assert _drag(controller, (100, 200), end) is None
    assert controller.store.user_highlights == []
    assert controller.state is SelectionState.IDLE


def test_drag_just_above_threshold_is_kept(controller: SelectionController) -> None:
    h = _drag(controller, (100, 200), (106, 206))
    assert h is not None
    assert h["position"]["width"] == pytest.approx(0.6)
    assert h["position"]["height"] == pytest.approx(0.6)


def test_events_are_ignored_while_selection_mode_is_off() -> None:
    c = SelectionController(HighlightStore())
    assert c.pointer_down(10, 10, 0, SQUARE, 1.0) is False
    assert c.pointer_move(500, 500) is False
    assert c.pointer_up(500, 500) is None
    assert c.state is SelectionState.IDLE
    assert c.store.user_highlights == []


def test_disabling_mid_drag_cancels_without_commit(controller: SelectionController) -> None:
    controller.pointer_down(100, 100, 0, SQUARE, 1.0)
    controller.pointer_move(500, 500)
    controller.enabled = False
    assert controller.state is SelectionState.IDLE
    controller.enabled = True
    assert controller.pointer_up(600, 600) is None
    assert controller.store.user_highlights == []


def test_pointer_up_without_drag_has_no_effect(controller: SelectionController) -> None:
    assert controller.pointer_up(10, 10) is None
    assert controller.state is SelectionState.IDLE


def test_pointer_up_coordinates_update_the_end_point(controller: SelectionController) -> None:
    controller.pointer_down(100, 100, 0, SQUARE, 1.0)
    h = controller.pointer_up(300, 300)
    assert h["position"]["width"] == pytest.approx(20)


def test_pointer_up_without_any_end_point_is_discarded(controller: SelectionController) -> None:
    controller.pointer_down(100, 100, 0, SQUARE, 1.0)
    assert controller.pointer_up() is None
    assert controller.state is SelectionState.IDLE


def test_preview_tracks_the_move(controller: SelectionController) -> None:
    controller.pointer_down(100, 100, 0, SQUARE, 1.0)
    assert controller.preview() is None
    controller.pointer_move(200, 150)
    assert controller.preview() == pytest.approx({"left": 10, "top": 10, "width": 10, "height": 5})
    assert controller.store.user_highlights == []


def test_points_outside_the_page_are_clamped(controller: SelectionController) -> None:
    h = _drag(controller, (-50, -50), (1500, 1200))
    assert h["position"] == pytest.approx({"left": 0, "top": 0, "width": 100, "height": 100})
