"""Application service: Update Order Status use case (administrative)."""

from __future__ import annotations

from fabricshop.application.dto import OrderDTO, order_to_dto
from fabricshop.domain.exceptions import NotFoundError
from fabricshop.domain.model.order import OrderStatus
from fabricshop.domain.repository.order_repository import OrderRepository
from fabricshop.domain.service.reservation_coordinator import ReservationCoordinator


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        coordinator: ReservationCoordinator,
    ) -> None:
        self._order_repo = order_repo
        self._coordinator = coordinator

    def handle(self, order_id: int, status: str) -> OrderDTO:
        """Move the order along the fulfillment table.

        Moving to ``cancelled`` releases reservations exactly like a
        customer cancellation.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")

        self._coordinator.change_status(order, OrderStatus.parse(status))
        return order_to_dto(order)
