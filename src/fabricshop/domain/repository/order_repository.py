"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from fabricshop.domain.model.order import Order


class OrderRepository(ABC):

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Order]:
        """Return a user's orders, newest first."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order.

        Saves are optimistic: if the stored version differs from
        ``order.version`` a StorageConflictError is raised and nothing is
        written.  On success ``order.version`` is incremented.
        """
