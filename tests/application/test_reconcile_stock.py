"""Integration tests for the ReconcileStock maintenance use case."""

from structlog.testing import capture_logs

from fabricshop.application.create_order import CreateOrderHandler
from fabricshop.application.dto import OrderItemSpec
from fabricshop.application.reconcile_stock import ReconcileStockHandler
from fabricshop.domain.model.policy import OrderPricing
from fabricshop.domain.service.reservation_coordinator import ReservationCoordinator
from tests.fakes import ADDRESS, FakeFabricRepository, FakeOrderRepository, make_fabric


def _setup(*fabrics):
    fabric_repo = FakeFabricRepository(list(fabrics))
    order_repo = FakeOrderRepository()
    coordinator = ReservationCoordinator(fabric_repo, order_repo)
    create = CreateOrderHandler(fabric_repo, coordinator, OrderPricing())
    return create, ReconcileStockHandler(fabric_repo, order_repo), fabric_repo


def test_consistent_store_reports_nothing():
    create, reconcile, _ = _setup(make_fabric("cotton"))
    create.handle("alice", [OrderItemSpec("fabric", "cotton", 10)], ADDRESS)
    assert reconcile.handle() == []


def test_leaked_hold_is_reported_but_not_changed_without_repair():
    create, reconcile, fabrics = _setup(make_fabric("cotton", reserved=15))
    create.handle("alice", [OrderItemSpec("fabric", "cotton", 10)], ADDRESS)

    with capture_logs() as logs:
        drift = reconcile.handle()

    assert [(d.fabric_id, d.ledger_reserved, d.expected_reserved) for d in drift] == [
        ("cotton", 25, 10)
    ]
    assert logs[0]["event"] == "stock_drift_detected"
    assert fabrics.reserved("cotton") == 25


def test_repair_resets_ledger_to_open_holds():
    create, reconcile, fabrics = _setup(make_fabric("cotton", reserved=15))
    create.handle("alice", [OrderItemSpec("fabric", "cotton", 10)], ADDRESS)

    reconcile.handle(repair=True)

    assert fabrics.reserved("cotton") == 10
    assert reconcile.handle() == []
