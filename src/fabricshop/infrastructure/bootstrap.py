"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
``build_context`` runs once per process; the resulting AppContext is
passed by reference to whoever needs it.
"""

from __future__ import annotations

from dataclasses import dataclass

from fabricshop.domain.repository.fabric_repository import FabricRepository
from fabricshop.domain.repository.order_repository import OrderRepository
from fabricshop.domain.service.reservation_coordinator import ReservationCoordinator
from fabricshop.infrastructure.config import Settings
from fabricshop.infrastructure.persistence.json_fabric_repository import (
    JsonFabricRepository,
)
from fabricshop.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    fabric_repo: FabricRepository
    order_repo: OrderRepository
    coordinator: ReservationCoordinator


def build_context(settings: Settings) -> AppContext:
    fabric_repo = JsonFabricRepository(settings.data_dir / "fabrics.json")
    order_repo = JsonOrderRepository(settings.data_dir / "orders.json")
    coordinator = ReservationCoordinator(
        fabric_repo,
        order_repo,
        paid_policy=settings.paid_stock_policy,
        retry_attempts=settings.ledger_retry_attempts,
    )
    return AppContext(
        settings=settings,
        fabric_repo=fabric_repo,
        order_repo=order_repo,
        coordinator=coordinator,
    )
