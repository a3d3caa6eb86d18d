"""Business policies the composition root hands to the domain.

They are plain immutable objects built once from Settings, so the domain
never reads configuration on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum

from fabricshop.domain.exceptions import ValidationError
from fabricshop.domain.model.value_objects import Money


class PaidStockPolicy(Enum):
    """What a successful payment does to a fabric reservation.

    RELEASE drops the hold and leaves ``available`` alone; stock is
    decremented elsewhere when it physically ships.
    COMMIT drops the hold and decrements ``available`` in the same step.
    """

    RELEASE = "release"
    COMMIT = "commit"


@dataclass(frozen=True)
class OrderPricing:
    """Tax, shipping and delivery-estimate rules applied at order creation."""

    tax_rate: Decimal = Decimal("0.08")
    shipping_fee: Decimal = Decimal("15.00")
    free_shipping_threshold: Decimal | None = Decimal("500.00")
    estimated_delivery_days: int = 14

    def __post_init__(self) -> None:
        if self.tax_rate < 0 or self.shipping_fee < 0:
            raise ValidationError("Tax rate and shipping fee cannot be negative")
        if self.estimated_delivery_days < 0:
            raise ValidationError("Estimated delivery days cannot be negative")

    def tax_for(self, subtotal: Money) -> Money:
        return subtotal.apply_rate(self.tax_rate)

    def shipping_for(self, subtotal: Money) -> Money:
        if (
            self.free_shipping_threshold is not None
            and subtotal.amount >= self.free_shipping_threshold
        ):
            return Money.zero(subtotal.currency)
        return Money(self.shipping_fee, subtotal.currency)

    def estimated_delivery(self, placed_at: datetime) -> datetime:
        return placed_at + timedelta(days=self.estimated_delivery_days)
