"""Cross-aggregate check of the reservation invariant.

For every fabric, ``stock.reserved`` should equal the total quantity of
order lines still holding a reservation on it.  Both functions here are
pure; repairing is left to the caller.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from fabricshop.domain.model.fabric import Fabric
from fabricshop.domain.model.order import Order


@dataclass(frozen=True)
class StockDrift:
    fabric_id: str
    ledger_reserved: int
    expected_reserved: int

    @property
    def delta(self) -> int:
        return self.ledger_reserved - self.expected_reserved


def expected_reservations(orders: Iterable[Order]) -> dict[str, int]:
    held: dict[str, int] = defaultdict(int)
    for order in orders:
        for line in order.reserved_items:
            held[line.product_id] += line.quantity.value
    return dict(held)


def find_drift(fabrics: Iterable[Fabric], orders: Iterable[Order]) -> list[StockDrift]:
    expected = expected_reservations(orders)
    drift = []
    for fabric in fabrics:
        want = expected.pop(fabric.id, 0)
        if fabric.stock.reserved != want:
            drift.append(StockDrift(fabric.id, fabric.stock.reserved, want))
    # Holds on fabrics missing from the catalog
    for fabric_id, want in sorted(expected.items()):
        drift.append(StockDrift(fabric_id, 0, want))
    return drift
