"""Application service: fabric queries (catalog listing and availability)."""

from __future__ import annotations

from dataclasses import dataclass

from fabricshop.application.dto import FabricDTO, fabric_to_dto
from fabricshop.domain.exceptions import NotFoundError, ValidationError
from fabricshop.domain.model.fabric import FabricStatus
from fabricshop.domain.repository.fabric_repository import FabricRepository


@dataclass(frozen=True)
class AvailabilityDTO:
    fabric_id: str
    requested_quantity: int
    available_quantity: int
    is_available: bool


class ListFabricsHandler:

    def __init__(self, fabric_repo: FabricRepository) -> None:
        self._fabric_repo = fabric_repo

    def handle(self, include_inactive: bool = False) -> list[FabricDTO]:
        fabrics = self._fabric_repo.list_all()
        if not include_inactive:
            fabrics = [f for f in fabrics if f.status is FabricStatus.ACTIVE]
        return [fabric_to_dto(f) for f in sorted(fabrics, key=lambda f: f.id)]


class CheckAvailabilityHandler:

    def __init__(self, fabric_repo: FabricRepository) -> None:
        self._fabric_repo = fabric_repo

    def handle(self, fabric_id: str, quantity: int) -> AvailabilityDTO:
        """Answer whether *quantity* could be reserved right now (no side effect)."""
        if quantity <= 0:
            raise ValidationError("Quantity must be positive")
        fabric = self._fabric_repo.get_by_id(fabric_id)
        if fabric is None:
            raise NotFoundError(f"Fabric not found: '{fabric_id}'")
        return AvailabilityDTO(
            fabric_id=fabric.id,
            requested_quantity=quantity,
            available_quantity=fabric.available_quantity,
            is_available=fabric.is_available(quantity),
        )
