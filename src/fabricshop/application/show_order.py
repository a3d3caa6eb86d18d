"""Application service: Show Order and List Orders use cases (queries)."""

from __future__ import annotations

from fabricshop.application.dto import OrderDTO, order_to_dto
from fabricshop.domain.exceptions import NotFoundError
from fabricshop.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, order_id: int, user_id: str) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        # Someone else's order looks exactly like a missing one
        if order is None or order.user_id != user_id:
            raise NotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order)


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, user_id: str) -> list[OrderDTO]:
        return [order_to_dto(order) for order in self._order_repo.list_by_user(user_id)]
