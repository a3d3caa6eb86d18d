"""JSON-file-backed implementation of FabricRepository."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from pathlib import Path

from fabricshop.domain.exceptions import NotFoundError
from fabricshop.domain.model.fabric import Fabric, FabricStatus, FabricType, StockLedger
from fabricshop.domain.model.value_objects import Money
from fabricshop.domain.repository.fabric_repository import FabricRepository
from fabricshop.infrastructure.persistence.json_file import JsonFile


class JsonFabricRepository(FabricRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- FabricRepository interface -------------------------------------------

    def get_by_id(self, fabric_id: str) -> Fabric | None:
        for raw in self._file.load():
            if raw["id"] == fabric_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Fabric]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, fabric: Fabric) -> None:
        with self._file.lock:
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == fabric.id:
                    records[i] = self._to_raw(fabric)
                    break
            else:
                records.append(self._to_raw(fabric))
            self._file.persist(records)

    def reserve_stock(self, fabric_id: str, quantity: int) -> Fabric:
        return self._apply(fabric_id, lambda fabric: fabric.reserve(quantity))

    def release_stock(self, fabric_id: str, quantity: int) -> Fabric:
        return self._apply(fabric_id, lambda fabric: fabric.release(quantity))

    def commit_stock(self, fabric_id: str, quantity: int) -> Fabric:
        return self._apply(fabric_id, lambda fabric: fabric.commit(quantity))

    # --- Atomic ledger update -------------------------------------------------

    def _apply(self, fabric_id: str, mutate: Callable[[Fabric], None]) -> Fabric:
        """Load, mutate and write one fabric while holding the file lock."""
        with self._file.lock:
            records = self._file.load()
            for i, raw in enumerate(records):
                if raw["id"] == fabric_id:
                    fabric = self._to_domain(raw)
                    mutate(fabric)  # raises before anything is written
                    records[i] = self._to_raw(fabric)
                    self._file.persist(records)
                    return fabric
        raise NotFoundError(f"Fabric not found: '{fabric_id}'")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(fabric: Fabric) -> dict:
        return {
            "id": fabric.id,
            "name": fabric.name,
            "type": fabric.fabric_type.value,
            "description": fabric.description,
            "colors": list(fabric.colors),
            "price": str(fabric.price.amount),
            "currency": fabric.price.currency,
            "min_order_quantity": fabric.min_order_quantity,
            "status": fabric.status.value,
            "stock": {
                "available": fabric.stock.available,
                "reserved": fabric.stock.reserved,
                "reorder_point": fabric.stock.reorder_point,
            },
        }

    @staticmethod
    def _to_domain(raw: dict) -> Fabric:
        stock = raw["stock"]
        return Fabric(
            id=raw["id"],
            name=raw["name"],
            fabric_type=FabricType(raw["type"]),
            price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
            stock=StockLedger(
                available=stock["available"],
                reserved=stock.get("reserved", 0),
                reorder_point=stock.get("reorder_point", 0),
            ),
            min_order_quantity=raw.get("min_order_quantity", 50),
            status=FabricStatus(raw.get("status", "active")),
            description=raw.get("description", ""),
            colors=list(raw.get("colors", [])),
        )
