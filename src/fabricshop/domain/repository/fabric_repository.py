"""Abstract repository for the Fabric aggregate.

Besides plain load/save, the repository owns the *atomic* ledger updates:
each of ``reserve_stock``, ``release_stock`` and ``commit_stock`` must run
its check and its write as one indivisible step against the store, so two
concurrent reservations can never both pass the availability check.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabricshop.domain.model.fabric import Fabric


class FabricRepository(ABC):

    @abstractmethod
    def get_by_id(self, fabric_id: str) -> Fabric | None:
        """Return a fabric by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Fabric]:
        """Return every fabric."""

    @abstractmethod
    def save(self, fabric: Fabric) -> None:
        """Persist a new or updated fabric."""

    @abstractmethod
    def reserve_stock(self, fabric_id: str, quantity: int) -> Fabric:
        """Atomically reserve *quantity* if that much is unreserved.

        Raises NotFoundError, InsufficientStockError, or StorageConflictError
        when the store detects a concurrent write.
        """

    @abstractmethod
    def release_stock(self, fabric_id: str, quantity: int) -> Fabric:
        """Atomically give back *quantity* reserved units (floored at 0)."""

    @abstractmethod
    def commit_stock(self, fabric_id: str, quantity: int) -> Fabric:
        """Atomically turn *quantity* reserved units into a sale."""
