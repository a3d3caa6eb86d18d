"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the JSON repositories but
keep everything in a dict.  They store and hand out copies, so two loads of
the same order are independent objects the way they are with a real store.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Callable

from fabricshop.domain.exceptions import NotFoundError, StorageConflictError
from fabricshop.domain.model.fabric import Fabric, FabricType, StockLedger
from fabricshop.domain.model.order import Order
from fabricshop.domain.model.value_objects import Money, ShippingAddress
from fabricshop.domain.repository.fabric_repository import FabricRepository
from fabricshop.domain.repository.order_repository import OrderRepository


def make_fabric(
    fabric_id: str = "cotton",
    available: int = 100,
    reserved: int = 0,
    price: str = "5.00",
    reorder_point: int = 10,
) -> Fabric:
    return Fabric(
        id=fabric_id,
        name=fabric_id.title(),
        fabric_type=FabricType.COTTON,
        price=Money.of(price),
        stock=StockLedger(available=available, reserved=reserved, reorder_point=reorder_point),
        min_order_quantity=1,
    )


ADDRESS = {
    "name": "Ada Lovelace",
    "company_name": "Analytical Tees",
    "address": "12 Engine St",
    "city": "London",
    "state": "LDN",
    "zip_code": "N1 9GU",
    "country": "UK",
    "phone_number": "+44 20 0000 0000",
}


def make_address() -> ShippingAddress:
    return ShippingAddress.from_dict(ADDRESS)


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[int, Order] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.fail_next_save: Exception | None = None

    def next_id(self) -> int:
        return self._next_id

    def get_by_id(self, order_id: int) -> Order | None:
        order = self._store.get(order_id)
        return copy.deepcopy(order) if order else None

    def list_by_user(self, user_id: str) -> list[Order]:
        orders = [copy.deepcopy(o) for o in self._store.values() if o.user_id == user_id]
        return sorted(orders, key=lambda o: (o.created_at, o.id), reverse=True)

    def list_all(self) -> list[Order]:
        return [copy.deepcopy(o) for o in self._store.values()]

    def save(self, order: Order) -> None:
        with self._lock:
            if self.fail_next_save is not None:
                exc, self.fail_next_save = self.fail_next_save, None
                raise exc
            order_id = order.id if order.id is not None else self.next_id()
            stored = self._store.get(order_id)
            stored_version = stored.version if stored else 0
            if stored_version != order.version:
                raise StorageConflictError(f"Order #{order_id} was modified concurrently")
            if order.id is None:
                self._next_id += 1
            order.id = order_id
            order.version += 1
            self._store[order_id] = copy.deepcopy(order)

    def __len__(self) -> int:
        return len(self._store)


class FakeFabricRepository(FabricRepository):

    def __init__(self, fabrics: list[Fabric] | None = None) -> None:
        self._store: dict[str, Fabric] = {}
        self._lock = threading.Lock()
        for fabric in fabrics or []:
            self._store[fabric.id] = fabric

    def get_by_id(self, fabric_id: str) -> Fabric | None:
        fabric = self._store.get(fabric_id)
        return copy.deepcopy(fabric) if fabric else None

    def list_all(self) -> list[Fabric]:
        return [copy.deepcopy(f) for f in self._store.values()]

    def save(self, fabric: Fabric) -> None:
        with self._lock:
            self._store[fabric.id] = copy.deepcopy(fabric)

    def reserve_stock(self, fabric_id: str, quantity: int) -> Fabric:
        return self._apply(fabric_id, lambda f: f.reserve(quantity))

    def release_stock(self, fabric_id: str, quantity: int) -> Fabric:
        return self._apply(fabric_id, lambda f: f.release(quantity))

    def commit_stock(self, fabric_id: str, quantity: int) -> Fabric:
        return self._apply(fabric_id, lambda f: f.commit(quantity))

    def _apply(self, fabric_id: str, mutate: Callable[[Fabric], None]) -> Fabric:
        with self._lock:
            fabric = self._store.get(fabric_id)
            if fabric is None:
                raise NotFoundError(f"Fabric not found: '{fabric_id}'")
            working = copy.deepcopy(fabric)
            mutate(working)
            self._store[fabric_id] = working
            return copy.deepcopy(working)

    def reserved(self, fabric_id: str) -> int:
        return self._store[fabric_id].stock.reserved

    def available(self, fabric_id: str) -> int:
        return self._store[fabric_id].stock.available


class ConflictingFabricRepository(FakeFabricRepository):
    """Raises StorageConflictError on the first *conflicts* release/commit calls."""

    def __init__(self, fabrics: list[Fabric] | None = None, conflicts: int = 1) -> None:
        super().__init__(fabrics)
        self.conflicts_left = conflicts
        self.mutation_calls = 0

    def release_stock(self, fabric_id: str, quantity: int) -> Fabric:
        self._maybe_conflict(fabric_id)
        return super().release_stock(fabric_id, quantity)

    def commit_stock(self, fabric_id: str, quantity: int) -> Fabric:
        self._maybe_conflict(fabric_id)
        return super().commit_stock(fabric_id, quantity)

    def _maybe_conflict(self, fabric_id: str) -> None:
        self.mutation_calls += 1
        if self.conflicts_left > 0:
            self.conflicts_left -= 1
            raise StorageConflictError(f"Fabric '{fabric_id}' was modified concurrently")


class FailingFabricRepository(FakeFabricRepository):
    """Raises a fixed error whenever a chosen (operation, fabric) pair is hit.

    ``failures`` maps e.g. ``("release", "cotton")`` to the exception to raise.
    """

    def __init__(
        self,
        fabrics: list[Fabric] | None = None,
        failures: dict[tuple[str, str], Exception] | None = None,
    ) -> None:
        super().__init__(fabrics)
        self.failures = dict(failures or {})

    def reserve_stock(self, fabric_id: str, quantity: int) -> Fabric:
        self._maybe_fail("reserve", fabric_id)
        return super().reserve_stock(fabric_id, quantity)

    def release_stock(self, fabric_id: str, quantity: int) -> Fabric:
        self._maybe_fail("release", fabric_id)
        return super().release_stock(fabric_id, quantity)

    def commit_stock(self, fabric_id: str, quantity: int) -> Fabric:
        self._maybe_fail("commit", fabric_id)
        return super().commit_stock(fabric_id, quantity)

    def _maybe_fail(self, operation: str, fabric_id: str) -> None:
        exc = self.failures.get((operation, fabric_id))
        if exc is not None:
            raise exc
