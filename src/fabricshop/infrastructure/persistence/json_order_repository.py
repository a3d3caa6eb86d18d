"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from fabricshop.domain.exceptions import StorageConflictError
from fabricshop.domain.model.order import (
    LineItemKind,
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentStatus,
    ReservationState,
)
from fabricshop.domain.model.value_objects import (
    Customizations,
    Money,
    PaymentDetails,
    Quantity,
    ShippingAddress,
)
from fabricshop.domain.repository.order_repository import OrderRepository
from fabricshop.infrastructure.persistence.json_file import JsonFile


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._file.load()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_by_user(self, user_id: str) -> list[Order]:
        orders = [self._to_domain(raw) for raw in self._file.load() if raw["user_id"] == user_id]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, order: Order) -> None:
        with self._file.lock:
            orders = self._file.load()
            order_id = order.id if order.id is not None else self.next_id()

            index = next((i for i, raw in enumerate(orders) if raw["id"] == order_id), None)
            stored_version = orders[index].get("version", 0) if index is not None else 0
            if stored_version != order.version:
                raise StorageConflictError(
                    f"Order #{order_id} was modified concurrently "
                    f"(stored version {stored_version}, ours {order.version})"
                )

            raw = self._to_raw(order)
            raw["id"] = order_id
            raw["version"] = order.version + 1
            if index is None:
                orders.append(raw)
            else:
                orders[index] = raw
            self._file.persist(orders)
            # Only a stored order gets its id and new version
            order.id = order_id
            order.version += 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "version": order.version,
            "user_id": order.user_id,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "payment_details": order.payment_details.to_dict() if order.payment_details else None,
            "shipping_address": order.shipping_address.to_dict(),
            "currency": order.total.currency,
            "subtotal": str(order.subtotal.amount),
            "tax": str(order.tax.amount),
            "shipping": str(order.shipping.amount),
            "total": str(order.total.amount),
            "notes": order.notes,
            "estimated_delivery": (
                order.estimated_delivery.isoformat() if order.estimated_delivery else None
            ),
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
            "items": [
                {
                    "line_id": item.line_id,
                    "kind": item.kind.value,
                    "product_id": item.product_id,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "customizations": item.customizations.to_dict(),
                    "reservation": item.reservation.value,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")

        def money(key: str) -> Money:
            return Money(Decimal(raw[key]), currency)

        items = [
            OrderLineItem(
                kind=LineItemKind(i["kind"]),
                product_id=i["product_id"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), currency),
                customizations=Customizations.from_dict(i.get("customizations")),
                line_id=i["line_id"],
                reservation=ReservationState(i.get("reservation", "none")),
            )
            for i in raw["items"]
        ]
        delivery = raw.get("estimated_delivery")
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            items=items,
            shipping_address=ShippingAddress.from_dict(raw["shipping_address"]),
            subtotal=money("subtotal"),
            tax=money("tax"),
            shipping=money("shipping"),
            total=money("total"),
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw["payment_status"]),
            payment_details=PaymentDetails.from_dict(raw.get("payment_details")),
            notes=raw.get("notes"),
            estimated_delivery=datetime.fromisoformat(delivery) if delivery else None,
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
            version=raw.get("version", 0),
        )
