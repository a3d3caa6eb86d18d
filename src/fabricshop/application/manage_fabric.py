"""Application services: fabric catalog management.

Adding a fabric, changing its price or status, and restocking.  None of
these touch reservations; restocking refuses to drop on-hand stock below
what open orders already hold.
"""

from __future__ import annotations

from fabricshop.application.dto import FabricDTO, fabric_to_dto
from fabricshop.domain.exceptions import NotFoundError, ValidationError
from fabricshop.domain.model.fabric import Fabric, FabricStatus, FabricType, StockLedger
from fabricshop.domain.model.value_objects import Money
from fabricshop.domain.repository.fabric_repository import FabricRepository


def _parse_type(value: str) -> FabricType:
    try:
        return FabricType(value.strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in FabricType)
        raise ValidationError(f"Unknown fabric type '{value}' (allowed: {allowed})") from None


def _parse_status(value: str) -> FabricStatus:
    try:
        return FabricStatus(value.strip().lower())
    except ValueError:
        allowed = ", ".join(s.value for s in FabricStatus)
        raise ValidationError(f"Unknown fabric status '{value}' (allowed: {allowed})") from None


class AddFabricHandler:

    def __init__(self, fabric_repo: FabricRepository) -> None:
        self._fabric_repo = fabric_repo

    def handle(
        self,
        fabric_id: str,
        name: str,
        fabric_type: str,
        price: str,
        available: int,
        reorder_point: int = 0,
        min_order_quantity: int = 50,
        description: str = "",
    ) -> FabricDTO:
        """Add a new fabric to the catalog with an empty reservation ledger."""
        if not fabric_id or not fabric_id.strip():
            raise ValidationError("Fabric ID is required")
        if not name or not name.strip():
            raise ValidationError("Fabric name is required")
        if self._fabric_repo.get_by_id(fabric_id.strip()) is not None:
            raise ValidationError(f"Fabric '{fabric_id}' already exists")

        price_money = Money.of(price)
        if price_money.amount <= 0:
            raise ValidationError("Fabric price must be greater than zero")

        fabric = Fabric(
            id=fabric_id.strip(),
            name=name.strip(),
            fabric_type=_parse_type(fabric_type),
            price=price_money,
            stock=StockLedger(available=available, reorder_point=reorder_point),
            min_order_quantity=min_order_quantity,
            description=description,
        )
        self._fabric_repo.save(fabric)
        return fabric_to_dto(fabric)


class UpdateFabricHandler:

    def __init__(self, fabric_repo: FabricRepository) -> None:
        self._fabric_repo = fabric_repo

    def handle(
        self,
        fabric_id: str,
        price: str | None = None,
        status: str | None = None,
    ) -> FabricDTO:
        """Change a fabric's price and/or status.

        Existing orders keep the price they were created with.
        """
        fabric = self._fabric_repo.get_by_id(fabric_id)
        if fabric is None:
            raise NotFoundError(f"Fabric not found: '{fabric_id}'")

        if price is not None:
            new_price = Money.of(price)
            if new_price.amount <= 0:
                raise ValidationError("Fabric price must be greater than zero")
            fabric.price = new_price
        if status is not None:
            fabric.status = _parse_status(status)

        self._fabric_repo.save(fabric)
        return fabric_to_dto(fabric)


class RestockFabricHandler:

    def __init__(self, fabric_repo: FabricRepository) -> None:
        self._fabric_repo = fabric_repo

    def handle(self, fabric_id: str, available: int) -> FabricDTO:
        """Set the on-hand quantity for a fabric."""
        fabric = self._fabric_repo.get_by_id(fabric_id)
        if fabric is None:
            raise NotFoundError(f"Fabric not found: '{fabric_id}'")

        fabric.restock(available)
        self._fabric_repo.save(fabric)
        return fabric_to_dto(fabric)
