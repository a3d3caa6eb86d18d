"""Application service: Update Payment Status use case.

Driven by the payment processor's notifications.  A ``paid`` notification
settles the order's fabric reservations under the configured policy.
"""

from __future__ import annotations

from fabricshop.application.dto import OrderDTO, order_to_dto
from fabricshop.domain.exceptions import NotFoundError
from fabricshop.domain.model.order import PaymentStatus
from fabricshop.domain.repository.order_repository import OrderRepository
from fabricshop.domain.service.reservation_coordinator import ReservationCoordinator


class UpdatePaymentStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        coordinator: ReservationCoordinator,
    ) -> None:
        self._order_repo = order_repo
        self._coordinator = coordinator

    def handle(self, order_id: int, payment_status: str) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")

        # Unrecognized values fail here, before anything is touched
        new_status = PaymentStatus.parse(payment_status)
        self._coordinator.change_payment_status(order, new_status)
        return order_to_dto(order)
