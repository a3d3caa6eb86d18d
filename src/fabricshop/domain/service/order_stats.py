"""Order statistics as a pure fold over a collection of orders."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from fabricshop.domain.model.order import Order
from fabricshop.domain.model.value_objects import Money


@dataclass(frozen=True)
class OrderStats:
    total_orders: int
    total_spent: Money
    average_order_value: Money
    status_counts: dict[str, int] = field(default_factory=dict)


def summarize_orders(orders: Iterable[Order], currency: str = "USD") -> OrderStats:
    """Count, total, average and per-status counts.

    Every order counts, cancelled ones included; only statuses that occur
    appear in ``status_counts``.
    """
    count = 0
    spent = Money.zero(currency)
    statuses: Counter[str] = Counter()
    for order in orders:
        count += 1
        spent = spent + order.total
        statuses[order.status.value] += 1

    average = spent / count if count else Money.zero(currency)
    return OrderStats(
        total_orders=count,
        total_spent=spent,
        average_order_value=average,
        status_counts=dict(statuses),
    )
