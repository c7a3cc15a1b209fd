from __future__ import annotations

import math

import pytest

from pdf_highlighter.core.errors import InvalidPosition
from pdf_highlighter.core.normalize import DEFAULT_HEIGHT, DEFAULT_WIDTH, normalize


def test_missing_descriptor_is_not_an_error() -> None:
    assert normalize(None) is None


@pytest.mark.parametrize("x,y", [(0.0, 0.0), (0.166, 0.53), (0.5, 1.0), (1.0, 0.25)])
def test_fractions_scale_to_percent(x: float, y: float) -> None:
    pos = normalize({"page_number": 1, "x": x, "y": y, "width": 0.2, "height": 0.05})
    assert pos["left"] == x * 100
    assert pos["top"] == y * 100
    assert pos["width"] == 0.2 * 100
    assert pos["height"] == 0.05 * 100


@pytest.mark.parametrize("x", [1.5, 16.6, 70, 180])
def test_values_above_one_pass_through(x: float) -> None:
    pos = normalize({"page_number": 1, "x": x, "y": 0.5})
    assert pos["left"] == x


def test_left_top_override_x_y() -> None:
    pos = normalize({"page_number": 2, "x": 0.9, "y": 0.9, "left": 0.1, "top": 20})
    assert pos["left"] == pytest.approx(10)
    assert pos["top"] == 20


def test_left_zero_still_overrides_x() -> None:
    pos = normalize({"page_number": 1, "x": 0.9, "y": 0.9, "left": 0, "top": 0})
    assert pos["left"] == 0
    assert pos["top"] == 0


def test_page_number_is_converted_to_index() -> None:
    assert normalize({"page_number": 4, "x": 0.1, "y": 0.1})["page_index"] == 3
    assert normalize({"page_number": 1, "x": 0.1, "y": 0.1})["page_index"] == 0


def test_defaults_when_size_absent() -> None:
    pos = normalize({"page_number": 1, "x": 0.1, "y": 0.1})
    assert pos["width"] == DEFAULT_WIDTH == 10
    assert pos["height"] == DEFAULT_HEIGHT == 2


def test_zero_size_counts_as_absent() -> None:
    pos = normalize({"page_number": 1, "x": 0.1, "y": 0.1, "width": 0, "height": 0})
    assert pos["width"] == DEFAULT_WIDTH
    assert pos["height"] == DEFAULT_HEIGHT


def test_sample_employee_keeps_ambiguous_width() -> None:
    pos = normalize({"page_number": 4, "x": 0.166, "y": 0.53, "width": 180, "height": 18})
    assert pos["page_index"] == 3
    assert pos["left"] == pytest.approx(16.6)
    assert pos["top"] == pytest.approx(53)
    assert pos["width"] == 180
    assert pos["height"] == 18


@pytest.mark.parametrize(
    "descriptor",
    [
        {"x": 0.1, "y": 0.1},
        {"page_number": 0, "x": 0.1, "y": 0.1},
        {"page_number": -2, "x": 0.1, "y": 0.1},
        {"page_number": 1.5, "x": 0.1, "y": 0.1},
        {"page_number": "3", "x": 0.1, "y": 0.1},
        {"page_number": True, "x": 0.1, "y": 0.1},
    ],
)
def test_bad_page_number_is_invalid(descriptor: dict) -> None:
    with pytest.raises(InvalidPosition):
        normalize(descriptor)


@pytest.mark.parametrize(
    "descriptor",
    [
        {"page_number": 1, "y": 0.1},
        {"page_number": 1, "x": 0.1},
        {"page_number": 1, "x": "0.1", "y": 0.1},
        {"page_number": 1, "x": -0.1, "y": 0.1},
        {"page_number": 1, "x": math.nan, "y": 0.1},
        {"page_number": 1, "x": 0.1, "y": 0.1, "width": math.inf},
    ],
)
def test_unplaceable_descriptor_is_invalid(descriptor: dict) -> None:
    with pytest.raises(InvalidPosition):
        normalize(descriptor)


def test_non_mapping_descriptor_is_invalid() -> None:
    with pytest.raises(InvalidPosition):
        normalize([1, 0.1, 0.1])


def test_float_page_number_with_integral_value_is_accepted() -> None:
    assert normalize({"page_number": 2.0, "x": 0.1, "y": 0.1})["page_index"] == 1


@pytest.mark.parametrize(
    "descriptor,key",
    [
        ({"x": 0.1, "y": 0.1}, "page_number"),
        ({"page_number": 1, "y": 0.1}, "left"),
        ({"page_number": 1, "x": 0.1}, "top"),
        ({"page_number": 1, "x": 0.1, "y": 0.1, "height": -3}, "height"),
        ("4, 0.1, 0.1", "position"),
    ],
)
def test_invalid_position_names_the_offending_key(descriptor, key: str) -> None:
    with pytest.raises(InvalidPosition) as excinfo:
        normalize(descriptor)
    assert excinfo.value.field == key
