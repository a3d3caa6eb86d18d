"""Integration tests for the order use cases after creation.

Cancel, status and payment updates, queries and statistics.
"""

import pytest

from fabricshop.application.cancel_order import CancelOrderHandler
from fabricshop.application.create_order import CreateOrderHandler
from fabricshop.application.dto import OrderItemSpec
from fabricshop.application.order_stats import OrderStatsHandler
from fabricshop.application.show_order import ListOrdersHandler, ShowOrderHandler
from fabricshop.application.update_payment_status import UpdatePaymentStatusHandler
from fabricshop.application.update_status import UpdateOrderStatusHandler
from fabricshop.domain.exceptions import (
    InsufficientStockError,
    InvalidPaymentStatusError,
    InvalidTransitionError,
    NotFoundError,
)
from fabricshop.domain.model.policy import OrderPricing, PaidStockPolicy
from fabricshop.domain.service.reservation_coordinator import ReservationCoordinator
from tests.fakes import ADDRESS, FakeFabricRepository, FakeOrderRepository, make_fabric


class Shop:
    """All handlers wired to one pair of fake repositories."""

    def __init__(self, policy: PaidStockPolicy = PaidStockPolicy.RELEASE) -> None:
        self.fabrics = FakeFabricRepository([make_fabric("cotton", available=100)])
        self.orders = FakeOrderRepository()
        coordinator = ReservationCoordinator(self.fabrics, self.orders, paid_policy=policy)
        self.create = CreateOrderHandler(self.fabrics, coordinator, OrderPricing())
        self.cancel = CancelOrderHandler(self.orders, coordinator)
        self.status = UpdateOrderStatusHandler(self.orders, coordinator)
        self.payment = UpdatePaymentStatusHandler(self.orders, coordinator)
        self.show = ShowOrderHandler(self.orders)
        self.list = ListOrdersHandler(self.orders)
        self.stats = OrderStatsHandler(self.orders)

    def place(self, user_id: str = "alice", qty: int = 10) -> int:
        return self.create.handle(user_id, [OrderItemSpec("fabric", "cotton", qty)], ADDRESS).id


@pytest.fixture
def shop() -> Shop:
    return Shop()


class TestCancelOrder:

    def test_cancel_releases_reservation(self, shop):
        order_id = shop.place(qty=30)

        dto = shop.cancel.handle(order_id, "alice")

        assert dto.status == "cancelled"
        assert dto.items[0].reservation == "released"
        assert shop.fabrics.reserved("cotton") == 0

    def test_cancel_processing_order(self, shop):
        order_id = shop.place(qty=30)
        shop.status.handle(order_id, "processing")

        shop.cancel.handle(order_id, "alice")

        assert shop.fabrics.reserved("cotton") == 0

    def test_cancel_twice_fails_and_releases_once(self, shop):
        shop.place(user_id="bob", qty=20)
        order_id = shop.place(qty=30)
        shop.cancel.handle(order_id, "alice")

        with pytest.raises(InvalidTransitionError, match="in cancelled status"):
            shop.cancel.handle(order_id, "alice")
        assert shop.fabrics.reserved("cotton") == 20

    def test_cannot_cancel_someone_elses_order(self, shop):
        order_id = shop.place(user_id="bob")
        with pytest.raises(NotFoundError, match=f"Order #{order_id} not found"):
            shop.cancel.handle(order_id, "alice")
        assert shop.fabrics.reserved("cotton") == 10

    def test_cancel_missing_order(self, shop):
        with pytest.raises(NotFoundError):
            shop.cancel.handle(99, "alice")


class TestStockScenario:

    def test_cancel_frees_stock_for_a_rejected_order(self, shop):
        first = shop.place(user_id="alice", qty=60)
        assert shop.fabrics.reserved("cotton") == 60

        with pytest.raises(InsufficientStockError, match="need 50, have 40"):
            shop.place(user_id="bob", qty=50)
        assert shop.fabrics.reserved("cotton") == 60
        assert len(shop.orders) == 1

        shop.cancel.handle(first, "alice")
        assert shop.fabrics.reserved("cotton") == 0

        second = shop.place(user_id="bob", qty=50)
        assert shop.fabrics.reserved("cotton") == 50
        assert shop.fabrics.available("cotton") == 100
        assert shop.show.handle(second, "bob").items[0].reservation == "reserved"


class TestUpdateStatus:

    def test_walks_the_fulfillment_path(self, shop):
        order_id = shop.place()
        for status in ("processing", "shipped", "delivered"):
            dto = shop.status.handle(order_id, status)
            assert dto.status == status

    def test_illegal_transition_leaves_order_untouched(self, shop):
        order_id = shop.place()
        with pytest.raises(InvalidTransitionError):
            shop.status.handle(order_id, "delivered")
        assert shop.show.handle(order_id, "alice").status == "pending"

    def test_unknown_status(self, shop):
        order_id = shop.place()
        with pytest.raises(InvalidTransitionError, match="Unknown order status"):
            shop.status.handle(order_id, "lost")

    def test_status_cancelled_releases(self, shop):
        order_id = shop.place(qty=40)
        shop.status.handle(order_id, "cancelled")
        assert shop.fabrics.reserved("cotton") == 0


class TestUpdatePaymentStatus:

    def test_paid_releases_reservation_by_default(self, shop):
        order_id = shop.place(qty=30)

        dto = shop.payment.handle(order_id, "paid")

        assert dto.payment_status == "paid"
        assert dto.status == "pending"
        assert shop.fabrics.reserved("cotton") == 0
        assert shop.fabrics.available("cotton") == 100

    def test_paid_commits_under_commit_policy(self):
        shop = Shop(PaidStockPolicy.COMMIT)
        order_id = shop.place(qty=30)

        shop.payment.handle(order_id, "paid")

        assert shop.fabrics.reserved("cotton") == 0
        assert shop.fabrics.available("cotton") == 70

    def test_unknown_value_leaves_status_unchanged(self, shop):
        order_id = shop.place()
        with pytest.raises(InvalidPaymentStatusError, match="allowed: pending, paid, failed, refunded"):
            shop.payment.handle(order_id, "chargeback")
        assert shop.show.handle(order_id, "alice").payment_status == "pending"

    def test_illegal_payment_move(self, shop):
        order_id = shop.place()
        with pytest.raises(InvalidTransitionError):
            shop.payment.handle(order_id, "refunded")

    def test_cancel_then_paid_releases_once(self, shop):
        shop.place(user_id="bob", qty=5)
        order_id = shop.place(qty=30)
        shop.cancel.handle(order_id, "alice")

        shop.payment.handle(order_id, "paid")

        assert shop.fabrics.reserved("cotton") == 5

    def test_missing_order(self, shop):
        with pytest.raises(NotFoundError):
            shop.payment.handle(42, "paid")


class TestQueries:

    def test_show_is_owner_scoped(self, shop):
        order_id = shop.place(user_id="bob")
        assert shop.show.handle(order_id, "bob").id == order_id
        with pytest.raises(NotFoundError):
            shop.show.handle(order_id, "alice")

    def test_list_is_newest_first_and_owner_scoped(self, shop):
        first = shop.place()
        shop.place(user_id="bob")
        second = shop.place()

        ids = [dto.id for dto in shop.list.handle("alice")]

        assert ids == [second, first]

    def test_list_empty(self, shop):
        assert shop.list.handle("nobody") == []


class TestOrderStats:

    def test_stats_for_user(self, shop):
        shop.place(qty=10)  # 50 + 4 tax + 15 shipping
        cancelled = shop.place(qty=20)  # 100 + 8 + 15
        shop.cancel.handle(cancelled, "alice")
        shop.place(user_id="bob", qty=50)

        stats = shop.stats.handle("alice")

        assert stats.total_orders == 2
        assert stats.total_spent == "$192.00"
        assert stats.average_order_value == "$96.00"
        assert stats.status_counts == {"pending": 1, "cancelled": 1}

    def test_stats_with_no_orders(self, shop):
        stats = shop.stats.handle("alice")
        assert stats.total_orders == 0
        assert stats.total_spent == "$0.00"
        assert stats.average_order_value == "$0.00"
