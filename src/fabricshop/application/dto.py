"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fabricshop.domain.exceptions import DomainException
from fabricshop.domain.model.fabric import Fabric
from fabricshop.domain.model.order import Order
from fabricshop.domain.service.order_stats import OrderStats


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one requested line.

    ``unit_price`` is only read for clothing; fabric is always priced from
    the catalog.
    """

    kind: str
    product_id: str
    quantity: int
    unit_price: str | None = None
    customizations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OrderLineItemDTO:
    line_id: str
    kind: str
    product_id: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str
    reservation: str
    customizations: dict[str, str]


@dataclass(frozen=True)
class OrderDTO:
    id: int
    user_id: str
    status: str
    payment_status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    tax: str
    shipping: str
    total: str
    created_at: str
    estimated_delivery: str | None


@dataclass(frozen=True)
class FabricDTO:
    id: str
    name: str
    fabric_type: str
    status: str
    price: str
    available: int
    reserved: int
    available_quantity: int
    reorder_point: int
    needs_reorder: bool


@dataclass(frozen=True)
class OrderStatsDTO:
    total_orders: int
    total_spent: str
    average_order_value: str
    status_counts: dict[str, int]


@dataclass(frozen=True)
class FailureDTO:
    """Output: a request-scoped failure as reported to the caller."""

    kind: str
    message: str

    @staticmethod
    def from_exception(exc: DomainException) -> FailureDTO:
        return FailureDTO(kind=exc.kind, message=str(exc))

    def __str__(self) -> str:
        return f"[{self.kind}] {self.message}"


# --- Mapping -----------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        user_id=order.user_id,
        status=order.status.value,
        payment_status=order.payment_status.value,
        items=[
            OrderLineItemDTO(
                line_id=item.line_id,
                kind=item.kind.value,
                product_id=item.product_id,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
                reservation=item.reservation.value,
                customizations=item.customizations.to_dict(),
            )
            for item in order.items
        ],
        subtotal=str(order.subtotal),
        tax=str(order.tax),
        shipping=str(order.shipping),
        total=str(order.total),
        created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        estimated_delivery=(
            order.estimated_delivery.strftime("%Y-%m-%d")
            if order.estimated_delivery
            else None
        ),
    )


def fabric_to_dto(fabric: Fabric) -> FabricDTO:
    return FabricDTO(
        id=fabric.id,
        name=fabric.name,
        fabric_type=fabric.fabric_type.value,
        status=fabric.status.value,
        price=str(fabric.price),
        available=fabric.stock.available,
        reserved=fabric.stock.reserved,
        available_quantity=fabric.available_quantity,
        reorder_point=fabric.stock.reorder_point,
        needs_reorder=fabric.needs_reorder,
    )


def stats_to_dto(stats: OrderStats) -> OrderStatsDTO:
    return OrderStatsDTO(
        total_orders=stats.total_orders,
        total_spent=str(stats.total_spent),
        average_order_value=str(stats.average_order_value),
        status_counts=dict(stats.status_counts),
    )
