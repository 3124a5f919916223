from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable, Mapping
from typing import Any

from src.schemas.sales_order import to_number

QuantityMap = dict[str, float]


def _field(line: Any, name: str) -> Any:
    if isinstance(line, Mapping):
        return line.get(name)
    return getattr(line, name, None)


def build_quantity_map(lines: Iterable[Any]) -> QuantityMap:
    """Sum line quantities per item id.

    Lines may be stored JSON documents or ``SalesOrderLine`` models. Lines
    without an item, or whose quantity is not a positive finite number, are
    skipped. Keys come out sorted so callers touch items in a stable order.
    """
    per_item: dict[str, list[float]] = defaultdict(list)
    for line in lines:
        item_id = _field(line, "item_id")
        if item_id is None or str(item_id).strip() == "":
            continue
        quantity = to_number(_field(line, "quantity"))
        if quantity <= 0:
            continue
        per_item[str(item_id).strip()].append(quantity)

    # fsum is exact, so the total does not depend on line order
    return {item_id: math.fsum(per_item[item_id]) for item_id in sorted(per_item)}


def diff_quantity_maps(old: Mapping[str, float], new: Mapping[str, float]) -> QuantityMap:
    """Signed ``new - old`` per item, keeping only non-zero deltas."""
    delta: QuantityMap = {}
    for item_id in sorted(set(old) | set(new)):
        change = new.get(item_id, 0) - old.get(item_id, 0)
        if change != 0:
            delta[item_id] = change
    return delta


def split_delta(delta: Mapping[str, float]) -> tuple[QuantityMap, QuantityMap]:
    """Split a signed delta into (to_decrease, to_increase), both positive."""
    decrease = {k: v for k, v in delta.items() if v > 0}
    increase = {k: -v for k, v in delta.items() if v < 0}
    return decrease, increase
