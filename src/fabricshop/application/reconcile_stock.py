"""Application service: Reconcile Stock use case (maintenance).

Reports fabrics whose ledger disagrees with the orders holding stock on
them, for instance after a ReservationSyncError.  With ``repair=True`` the
ledger is reset to the value implied by the orders.  Run it while no
orders are being placed; the repair is a plain save, not an atomic delta.
"""

from __future__ import annotations

import structlog

from fabricshop.domain.repository.fabric_repository import FabricRepository
from fabricshop.domain.repository.order_repository import OrderRepository
from fabricshop.domain.service.stock_reconciliation import StockDrift, find_drift

logger = structlog.get_logger(__name__)


class ReconcileStockHandler:

    def __init__(
        self,
        fabric_repo: FabricRepository,
        order_repo: OrderRepository,
    ) -> None:
        self._fabric_repo = fabric_repo
        self._order_repo = order_repo

    def handle(self, repair: bool = False) -> list[StockDrift]:
        drift = find_drift(self._fabric_repo.list_all(), self._order_repo.list_all())
        for entry in drift:
            logger.warning(
                "stock_drift_detected",
                fabric_id=entry.fabric_id,
                ledger_reserved=entry.ledger_reserved,
                expected_reserved=entry.expected_reserved,
            )
            if repair:
                self._repair(entry)
        return drift

    def _repair(self, entry: StockDrift) -> None:
        fabric = self._fabric_repo.get_by_id(entry.fabric_id)
        if fabric is None:
            logger.error("stock_drift_unrepairable", fabric_id=entry.fabric_id)
            return
        target = min(entry.expected_reserved, fabric.stock.available)
        if target != entry.expected_reserved:
            logger.warning(
                "stock_drift_clamped",
                fabric_id=fabric.id,
                expected_reserved=entry.expected_reserved,
                available=fabric.stock.available,
            )
        fabric.stock.reserved = target
        self._fabric_repo.save(fabric)
        logger.info("stock_drift_repaired", fabric_id=fabric.id, reserved=target)
