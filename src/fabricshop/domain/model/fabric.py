"""Fabric aggregate and its Stock Ledger.

Each fabric SKU owns one StockLedger holding how much stock is on hand
(``available``) and how much of it is held by open orders (``reserved``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import structlog

from fabricshop.domain.exceptions import InsufficientStockError, ValidationError
from fabricshop.domain.model.value_objects import Money

logger = structlog.get_logger(__name__)


class FabricType(Enum):
    COTTON = "cotton"
    POLYESTER = "polyester"
    SILK = "silk"
    LINEN = "linen"
    BLEND = "blend"
    WOOL = "wool"


class FabricStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"


@dataclass
class StockLedger:
    """Available vs. reserved counters for one fabric.

    Invariant: ``0 <= reserved <= available``.
    """

    available: int
    reserved: int = 0
    reorder_point: int = 0

    def __post_init__(self) -> None:
        if self.available < 0 or self.reserved < 0:
            raise ValidationError("Stock counters cannot be negative")
        if self.reserved > self.available:
            raise ValidationError(
                f"Reserved stock ({self.reserved}) exceeds available ({self.available})"
            )

    @property
    def available_quantity(self) -> int:
        return self.available - self.reserved


@dataclass
class Fabric:
    """Aggregate root for a fabric SKU.

    The ledger methods below are the in-memory half of a reservation; the
    repository applies them atomically (see ``FabricRepository.reserve_stock``).
    """

    id: str
    name: str
    fabric_type: FabricType
    price: Money
    stock: StockLedger
    min_order_quantity: int = 50
    status: FabricStatus = FabricStatus.ACTIVE
    description: str = ""
    colors: list[str] = field(default_factory=list)

    @property
    def available_quantity(self) -> int:
        return self.stock.available_quantity

    @property
    def needs_reorder(self) -> bool:
        return self.available_quantity <= self.stock.reorder_point

    def is_available(self, quantity: int) -> bool:
        return self.available_quantity >= quantity

    def reserve(self, quantity: int) -> None:
        """Hold *quantity* units for an order.

        Raises InsufficientStockError if fewer than *quantity* units are
        unreserved.
        """
        _require_positive(quantity, "Reservation")
        if not self.is_available(quantity):
            raise InsufficientStockError(self.id, quantity, self.available_quantity)
        self.stock.reserved += quantity

    def release(self, quantity: int) -> None:
        """Give back *quantity* reserved units.

        Floors ``reserved`` at zero.  An underflow means the bookkeeping went
        wrong upstream, so it is logged instead of raised.
        """
        _require_positive(quantity, "Release")
        self.stock.reserved = self._drain_reserved(quantity, "release")

    def commit(self, quantity: int) -> None:
        """Turn *quantity* reserved units into a sale.

        Both ``reserved`` and ``available`` go down by the same amount.
        """
        _require_positive(quantity, "Commit")
        held = min(quantity, self.stock.reserved)
        self.stock.reserved = self._drain_reserved(quantity, "commit")
        self.stock.available -= held

    def restock(self, available: int) -> None:
        """Set the on-hand quantity (inventory management)."""
        if available < 0:
            raise ValidationError("Available stock cannot be negative")
        if available < self.stock.reserved:
            raise ValidationError(
                f"Cannot set available stock of {self.name} to {available} "
                f"while {self.stock.reserved} is reserved"
            )
        self.stock.available = available

    def _drain_reserved(self, quantity: int, operation: str) -> int:
        if quantity > self.stock.reserved:
            logger.warning(
                "stock_ledger_underflow",
                fabric_id=self.id,
                operation=operation,
                requested=quantity,
                reserved=self.stock.reserved,
            )
            return 0
        return self.stock.reserved - quantity


def _require_positive(quantity: int, what: str) -> None:
    if quantity <= 0:
        raise ValidationError(f"{what} quantity must be positive")
