"""Application service: Order Statistics use case (query)."""

from __future__ import annotations

from fabricshop.application.dto import OrderStatsDTO, stats_to_dto
from fabricshop.domain.repository.order_repository import OrderRepository
from fabricshop.domain.service.order_stats import summarize_orders


class OrderStatsHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, user_id: str) -> OrderStatsDTO:
        return stats_to_dto(summarize_orders(self._order_repo.list_by_user(user_id)))
