"""Application service: Create Order use case.

Resolves the requested lines against the fabric catalog, lets the Order
aggregate compute totals, then hands the order to the ReservationCoordinator
which reserves fabric stock and persists it as one unit.
"""

from __future__ import annotations

from fabricshop.application.dto import OrderDTO, OrderItemSpec, order_to_dto
from fabricshop.domain.exceptions import NotFoundError, ValidationError
from fabricshop.domain.model.fabric import FabricStatus
from fabricshop.domain.model.order import LineItemKind, Order, OrderLineItem
from fabricshop.domain.model.policy import OrderPricing
from fabricshop.domain.model.value_objects import (
    Customizations,
    Money,
    PaymentDetails,
    Quantity,
    ShippingAddress,
)
from fabricshop.domain.repository.fabric_repository import FabricRepository
from fabricshop.domain.service.reservation_coordinator import ReservationCoordinator


class CreateOrderHandler:

    def __init__(
        self,
        fabric_repo: FabricRepository,
        coordinator: ReservationCoordinator,
        pricing: OrderPricing,
    ) -> None:
        self._fabric_repo = fabric_repo
        self._coordinator = coordinator
        self._pricing = pricing

    def handle(
        self,
        user_id: str,
        item_specs: list[OrderItemSpec],
        shipping_address: dict[str, str],
        payment_details: dict[str, str] | None = None,
        notes: str | None = None,
    ) -> OrderDTO:
        """Create a pending order for *user_id*.

        Steps:
        1. Build line items, snapshotting fabric prices from the catalog.
        2. Let the Order aggregate validate and price the order.
        3. Reserve fabric stock and persist (all or nothing).
        """
        line_items = [self._build_line(spec) for spec in item_specs]

        order = Order.create(
            user_id=user_id,
            items=line_items,
            shipping_address=ShippingAddress.from_dict(shipping_address),
            pricing=self._pricing,
            payment_details=PaymentDetails.from_dict(payment_details),
            notes=notes,
        )
        self._coordinator.place_order(order)

        return order_to_dto(order)

    def _build_line(self, spec: OrderItemSpec) -> OrderLineItem:
        try:
            kind = LineItemKind(spec.kind.strip().lower())
        except ValueError:
            raise ValidationError(
                f"Unknown item kind '{spec.kind}' (expected fabric or clothing)"
            ) from None

        if kind is LineItemKind.FABRIC:
            fabric = self._fabric_repo.get_by_id(spec.product_id)
            if fabric is None:
                raise NotFoundError(f"Fabric not found: '{spec.product_id}'")
            if fabric.status is not FabricStatus.ACTIVE:
                raise ValidationError(
                    f"Fabric '{fabric.name}' is {fabric.status.value} and cannot be ordered"
                )
            unit_price = fabric.price  # price snapshot
        else:
            if spec.unit_price is None:
                raise ValidationError(
                    f"Clothing item '{spec.product_id}' needs a unit price"
                )
            unit_price = Money.of(spec.unit_price)

        return OrderLineItem(
            kind=kind,
            product_id=spec.product_id,
            quantity=Quantity(spec.quantity),
            unit_price=unit_price,
            customizations=Customizations.from_dict(spec.customizations),
        )
