"""Application service: Cancel Order use case.

Owner-scoped.  The coordinator persists the cancellation and then releases
every fabric reservation the order still holds.
"""

from __future__ import annotations

from fabricshop.application.dto import OrderDTO, order_to_dto
from fabricshop.domain.exceptions import NotFoundError
from fabricshop.domain.repository.order_repository import OrderRepository
from fabricshop.domain.service.reservation_coordinator import ReservationCoordinator


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        coordinator: ReservationCoordinator,
    ) -> None:
        self._order_repo = order_repo
        self._coordinator = coordinator

    def handle(self, order_id: int, user_id: str) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None or order.user_id != user_id:
            raise NotFoundError(f"Order #{order_id} not found")

        self._coordinator.cancel_order(order)
        return order_to_dto(order)
