"""Domain service: Reservation Coordinator.

The only component allowed to move the stock ledger, and only as a
consequence of an order transition.  It keeps every fabric's ``reserved``
counter equal to the quantity held by that fabric's order lines.

Two orderings are used:

* creating an order reserves on the ledger *first* and persists the order
  only once every hold succeeded; any failure rolls the holds back;
* settling (cancel, paid) persists the order *first*, claiming its held
  lines through the optimistic version check, then moves the ledger.
  Only the request whose save wins touches the ledger, so a cancel racing a
  payment notification cannot release the same hold twice.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from fabricshop.domain.exceptions import (
    DomainException,
    OrderCreationError,
    ReservationSyncError,
    StorageConflictError,
    ValidationError,
)
from fabricshop.domain.model.fabric import Fabric
from fabricshop.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    PaymentStatus,
    ReservationState,
)
from fabricshop.domain.model.policy import PaidStockPolicy
from fabricshop.domain.repository.fabric_repository import FabricRepository
from fabricshop.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)

LedgerAction = Callable[[str, int], Fabric]


class ReservationCoordinator:

    def __init__(
        self,
        fabric_repo: FabricRepository,
        order_repo: OrderRepository,
        paid_policy: PaidStockPolicy = PaidStockPolicy.RELEASE,
        retry_attempts: int = 1,
    ) -> None:
        self._fabric_repo = fabric_repo
        self._order_repo = order_repo
        self._paid_policy = paid_policy
        self._retry_attempts = max(0, retry_attempts)

    # --- Order creation -------------------------------------------------------

    def place_order(self, order: Order) -> None:
        """Reserve every fabric line, then persist the new order.

        On a reservation failure the holds made so far are rolled back and
        the original error propagates.  If the order cannot be saved after
        reserving, the holds are rolled back and OrderCreationError is raised.
        """
        self.reserve_for_order(order)
        try:
            self._order_repo.save(order)
        except (DomainException, OSError) as exc:
            self._roll_back(order.reserved_items)
            raise OrderCreationError(f"Could not save order: {exc}") from exc

        logger.info(
            "order_placed",
            order_id=order.id,
            user_id=order.user_id,
            reserved_lines=len(order.reserved_items),
        )

    def reserve_for_order(self, order: Order) -> None:
        """Hold stock for each fabric line, all or nothing."""
        if any(line.reservation is not ReservationState.NONE for line in order.fabric_items):
            raise ValidationError("Order already has reservation history")

        held: list[OrderLineItem] = []
        try:
            for line in order.fabric_items:
                self._fabric_repo.reserve_stock(line.product_id, line.quantity.value)
                held.append(line)
                line.mark_reserved()
                logger.debug(
                    "stock_reserved",
                    fabric_id=line.product_id,
                    quantity=line.quantity.value,
                )
        except (DomainException, OSError):
            self._roll_back(held)
            raise

    def _roll_back(self, held: list[OrderLineItem]) -> None:
        """Release every hold in *held*, newest first.

        A line that cannot be released does not stop the others; the failures
        are reported together once every line has been tried.
        """
        failures: list[str] = []
        first_error: Exception | None = None
        for line in reversed(held):
            try:
                self._with_retry(
                    self._fabric_repo.release_stock, line.product_id, line.quantity.value
                )
            except (DomainException, OSError) as exc:
                logger.error(
                    "reservation_rollback_failed",
                    fabric_id=line.product_id,
                    quantity=line.quantity.value,
                    error=str(exc),
                )
                failures.append(f"{line.quantity} on fabric '{line.product_id}' ({exc})")
                if first_error is None:
                    first_error = exc
                continue
            line.reservation = ReservationState.NONE
            logger.info(
                "reservation_rolled_back",
                fabric_id=line.product_id,
                quantity=line.quantity.value,
            )

        if failures:
            raise OrderCreationError(
                f"Could not roll back reservation of {', '.join(failures)}"
            ) from first_error

    # --- Transitions that settle reservations ----------------------------------

    def cancel_order(self, order: Order) -> None:
        """Cancel *order* and give back every hold it still has."""
        order.cancel()
        self._settle(order, ReservationState.RELEASED)
        logger.info("order_cancelled", order_id=order.id)

    def change_status(self, order: Order, new_status: OrderStatus) -> None:
        if new_status is OrderStatus.CANCELLED:
            self.cancel_order(order)
            return
        previous = order.status
        order.transition_to(new_status)
        self._order_repo.save(order)
        logger.info(
            "order_status_changed",
            order_id=order.id,
            previous=previous.value,
            status=new_status.value,
        )

    def change_payment_status(self, order: Order, new_status: PaymentStatus) -> None:
        previous = order.payment_status
        if not order.change_payment_status(new_status):
            logger.info(
                "payment_status_unchanged", order_id=order.id, status=new_status.value
            )
            return

        if new_status is PaymentStatus.PAID:
            outcome = (
                ReservationState.COMMITTED
                if self._paid_policy is PaidStockPolicy.COMMIT
                else ReservationState.RELEASED
            )
            self._settle(order, outcome)
        else:
            self._order_repo.save(order)

        logger.info(
            "payment_status_changed",
            order_id=order.id,
            previous=previous.value,
            status=new_status.value,
        )

    def _settle(self, order: Order, outcome: ReservationState) -> None:
        settled = order.settle_reservations(outcome)
        # Persisting first is the release-once guard: a concurrent settle
        # of the same order fails here with StorageConflictError.
        self._order_repo.save(order)

        action = (
            self._fabric_repo.commit_stock
            if outcome is ReservationState.COMMITTED
            else self._fabric_repo.release_stock
        )
        failures: list[str] = []
        for line in settled:
            try:
                self._with_retry(action, line.product_id, line.quantity.value)
            except (DomainException, OSError) as exc:
                logger.error(
                    "reservation_sync_failed",
                    order_id=order.id,
                    line_id=line.line_id,
                    fabric_id=line.product_id,
                    quantity=line.quantity.value,
                    outcome=outcome.value,
                    error=str(exc),
                )
                failures.append(f"{line.product_id} x{line.quantity}")

        if failures:
            raise ReservationSyncError(
                f"Order #{order.id} was saved but the stock ledger could not be "
                f"updated for: {', '.join(failures)}"
            )

    def _with_retry(self, action: LedgerAction, fabric_id: str, quantity: int) -> Fabric:
        """Run a ledger mutation, retrying the same delta on conflicts or I/O errors."""
        attempt = 0
        while True:
            try:
                return action(fabric_id, quantity)
            except (StorageConflictError, OSError) as exc:
                if attempt >= self._retry_attempts:
                    raise
                attempt += 1
                logger.warning(
                    "ledger_update_retry",
                    fabric_id=fabric_id,
                    quantity=quantity,
                    attempt=attempt,
                    error=str(exc),
                )
