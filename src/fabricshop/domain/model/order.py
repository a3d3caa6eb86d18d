"""Order aggregate, the core of the domain.

The Order owns its line items and two independent state machines:
fulfillment (``status``) and payment (``payment_status``).  Legal moves
for both live in the transition tables below.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from fabricshop.domain.exceptions import (
    InvalidPaymentStatusError,
    InvalidTransitionError,
    ValidationError,
)
from fabricshop.domain.model.policy import OrderPricing
from fabricshop.domain.model.value_objects import (
    Customizations,
    Money,
    PaymentDetails,
    Quantity,
    ShippingAddress,
)


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: OrderStatus | str) -> OrderStatus:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidTransitionError(f"Unknown order status: {value!r}") from None


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"

    @classmethod
    def parse(cls, value: PaymentStatus | str) -> PaymentStatus:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise InvalidPaymentStatusError(
                f"Invalid payment status {value!r} (allowed: {allowed})"
            ) from None


class LineItemKind(Enum):
    FABRIC = "fabric"
    CLOTHING = "clothing"


class ReservationState(Enum):
    NONE = "none"  # clothing items never reserve
    RESERVED = "reserved"
    RELEASED = "released"
    COMMITTED = "committed"


STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in STATUS_TRANSITIONS[current]


def can_transition_payment(current: PaymentStatus, new: PaymentStatus) -> bool:
    return new in PAYMENT_TRANSITIONS[current]


@dataclass
class OrderLineItem:
    """One ordered product with its price locked at creation time.

    Fabric lines carry a reservation state so a hold is given back at most
    once, whichever of cancellation or payment gets there first.
    """

    kind: LineItemKind
    product_id: str
    quantity: Quantity
    unit_price: Money
    customizations: Customizations = field(default_factory=Customizations)
    line_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    reservation: ReservationState = ReservationState.NONE

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def is_fabric(self) -> bool:
        return self.kind is LineItemKind.FABRIC

    @property
    def holds_reservation(self) -> bool:
        return self.reservation is ReservationState.RESERVED

    def mark_reserved(self) -> None:
        if not self.is_fabric:
            raise ValidationError("Only fabric line items reserve stock")
        if self.reservation is not ReservationState.NONE:
            raise ValidationError(
                f"Line {self.line_id} already has reservation state "
                f"{self.reservation.value}"
            )
        self.reservation = ReservationState.RESERVED

    def settle(self, outcome: ReservationState) -> bool:
        """Move a held reservation to *outcome*.

        Returns False (and changes nothing) if there is no hold to settle,
        which is what makes a second release a no-op.
        """
        if outcome not in (ReservationState.RELEASED, ReservationState.COMMITTED):
            raise ValidationError(f"Cannot settle a reservation as {outcome.value}")
        if not self.holds_reservation:
            return False
        self.reservation = outcome
        return True


MAX_LINE_ITEMS = 50


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use ``Order.create()`` for new orders.  The plain constructor exists so
    repositories can reconstitute persisted orders without re-validating.
    ``version`` is the optimistic-concurrency token maintained by the
    repository on every save.
    """

    id: int | None
    user_id: str
    items: list[OrderLineItem]
    shipping_address: ShippingAddress
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_details: PaymentDetails | None = None
    notes: str | None = None
    estimated_delivery: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        items: list[OrderLineItem],
        shipping_address: ShippingAddress,
        pricing: OrderPricing,
        payment_details: PaymentDetails | None = None,
        notes: str | None = None,
    ) -> Order:
        """Create a new pending order, computing its totals."""
        if not user_id or not str(user_id).strip():
            raise ValidationError("Order must belong to a user")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if len(items) > MAX_LINE_ITEMS:
            raise ValidationError(f"Maximum {MAX_LINE_ITEMS} items per order")

        subtotal = Money.zero(items[0].unit_price.currency)
        for item in items:
            subtotal = subtotal + item.line_total
        tax = pricing.tax_for(subtotal)
        shipping = pricing.shipping_for(subtotal)

        now = _utcnow()
        return Order(
            id=None,
            user_id=str(user_id).strip(),
            items=list(items),
            shipping_address=shipping_address,
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=subtotal + tax + shipping,
            payment_details=payment_details,
            notes=notes,
            estimated_delivery=pricing.estimated_delivery(now),
            created_at=now,
            updated_at=now,
        )

    # --- Fulfillment state machine ----------------------------------------------

    def transition_to(self, new_status: OrderStatus) -> None:
        if not can_transition(self.status, new_status):
            raise InvalidTransitionError(
                f"Cannot move order from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        self.updated_at = _utcnow()

    def cancel(self) -> None:
        """Transition to CANCELLED.

        Reservations are not touched here; the coordinator settles them
        so the ledger moves in step with the persisted order.
        """
        if not can_transition(self.status, OrderStatus.CANCELLED):
            raise InvalidTransitionError(
                f"Cannot cancel order in {self.status.value} status"
            )
        self.transition_to(OrderStatus.CANCELLED)

    # --- Payment state machine ----------------------------------------------------

    def change_payment_status(self, new_status: PaymentStatus) -> bool:
        """Apply a payment status change.

        Returns False when *new_status* is already current (a repeated
        processor notification).  Illegal moves raise InvalidTransitionError.
        """
        if new_status is self.payment_status:
            return False
        if not can_transition_payment(self.payment_status, new_status):
            raise InvalidTransitionError(
                f"Cannot move payment from {self.payment_status.value} "
                f"to {new_status.value}"
            )
        self.payment_status = new_status
        self.updated_at = _utcnow()
        return True

    # --- Reservations ---------------------------------------------------------

    @property
    def fabric_items(self) -> list[OrderLineItem]:
        return [item for item in self.items if item.is_fabric]

    @property
    def reserved_items(self) -> list[OrderLineItem]:
        return [item for item in self.items if item.holds_reservation]

    def settle_reservations(self, outcome: ReservationState) -> list[OrderLineItem]:
        """Settle every held reservation, returning the lines that changed."""
        settled = [item for item in self.items if item.settle(outcome)]
        if settled:
            self.updated_at = _utcnow()
        return settled
