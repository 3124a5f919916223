from __future__ import annotations

import uuid

import pytest

from src.schemas import SalesOrderLine
from src.services.quantities import build_quantity_map, diff_quantity_maps, split_delta


@pytest.mark.unit
def test_build_quantity_map_sums_lines_per_item() -> None:
    lines = [
        {"item_id": "a", "quantity": 2},
        {"item_id": "b", "quantity": 1},
        {"item_id": "a", "quantity": 3},
    ]
    assert build_quantity_map(lines) == {"a": 5, "b": 1}


@pytest.mark.unit
def test_build_quantity_map_skips_free_text_and_bad_quantities() -> None:
    lines = [
        {"item_id": None, "free_text": "Gift wrap", "quantity": 1},
        {"item_id": "", "quantity": 4},
        {"item_id": "a", "quantity": 0},
        {"item_id": "a", "quantity": -3},
        {"item_id": "a", "quantity": "abc"},
        {"item_id": "a", "quantity": float("nan")},
        {"item_id": "a", "quantity": float("inf")},
        {"item_id": "a", "quantity": None},
        {"item_id": "b", "quantity": "2"},
        {"quantity": 7},
    ]
    assert build_quantity_map(lines) == {"b": 2}


@pytest.mark.unit
def test_build_quantity_map_ignores_line_order() -> None:
    lines = [
        {"item_id": "c", "quantity": 0.1},
        {"item_id": "a", "quantity": 1},
        {"item_id": "c", "quantity": 0.2},
        {"item_id": "b", "quantity": 2},
        {"item_id": "c", "quantity": 0.3},
    ]
    forward = build_quantity_map(lines)
    backward = build_quantity_map(list(reversed(lines)))

    assert forward == backward
    assert list(forward) == list(backward) == ["a", "b", "c"]


@pytest.mark.unit
def test_build_quantity_map_accepts_line_models() -> None:
    item_id = uuid.uuid4()
    lines = [
        SalesOrderLine(item_id=item_id, quantity=2),
        SalesOrderLine(item_id=item_id, quantity=1),
        SalesOrderLine(free_text="Delivery", quantity=1),
    ]
    assert build_quantity_map(lines) == {str(item_id): 3}


@pytest.mark.unit
def test_diff_quantity_maps_drops_unchanged_items() -> None:
    assert diff_quantity_maps({"A": 5, "B": 2}, {"A": 3, "B": 2, "C": 4}) == {"A": -2, "C": 4}


@pytest.mark.unit
def test_diff_quantity_maps_treats_missing_keys_as_zero() -> None:
    assert diff_quantity_maps({"A": 1}, {}) == {"A": -1}
    assert diff_quantity_maps({}, {"A": 1}) == {"A": 1}
    assert diff_quantity_maps({}, {}) == {}


@pytest.mark.unit
def test_split_delta() -> None:
    decrease, increase = split_delta({"A": -2, "B": 3, "C": 0})
    assert decrease == {"B": 3}
    assert increase == {"A": 2}
