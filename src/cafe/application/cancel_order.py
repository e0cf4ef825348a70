"""Application service: Cancel Order use case.

Only OPEN orders can be cancelled.  The stock the order consumed is
returned to the inventory in the same transaction as the status change,
using the recipe amounts recorded on the order when it was placed.
"""

from __future__ import annotations

from cafe.application.dto import OrderDTO, order_to_dto
from cafe.application.fulfillment_engine import OrderFulfillmentEngine


class CancelOrderHandler:

    def __init__(self, engine: OrderFulfillmentEngine) -> None:
        self._engine = engine

    def handle(self, order_id: int) -> OrderDTO:
        return order_to_dto(self._engine.cancel_order(order_id))
