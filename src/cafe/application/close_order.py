"""Application service: Close Order use case."""

from __future__ import annotations

from cafe.application.dto import OrderDTO, order_to_dto
from cafe.application.fulfillment_engine import OrderFulfillmentEngine


class CloseOrderHandler:

    def __init__(self, engine: OrderFulfillmentEngine) -> None:
        self._engine = engine

    def handle(self, order_id: int) -> OrderDTO:
        return order_to_dto(self._engine.close_order(order_id))
