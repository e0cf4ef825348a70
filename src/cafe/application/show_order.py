"""Application service: Show / List Orders use cases (queries)."""

from __future__ import annotations

from cafe.application.dto import OrderDTO, order_to_dto
from cafe.domain.exceptions import EntityNotFoundError, ValidationError
from cafe.domain.model.order import OrderStatus
from cafe.domain.repository.order_store import OrderStore


class ShowOrderHandler:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_store.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order)


class ListOrdersHandler:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self, status: str | None = None) -> list[OrderDTO]:
        wanted: OrderStatus | None = None
        if status is not None:
            try:
                wanted = OrderStatus(status.lower())
            except ValueError as exc:
                raise ValidationError(f"Unknown order status '{status}'") from exc
        return [
            order_to_dto(order)
            for order in self._order_store.list_all()
            if wanted is None or order.status == wanted
        ]
