"""Application service: Create Order use case.

Thin adapter over the fulfillment engine that maps the committed
order to a DTO for the outer layer.
"""

from __future__ import annotations

from cafe.application.cancel_token import CancelToken
from cafe.application.dto import OrderDTO, order_to_dto
from cafe.application.fulfillment_engine import OrderFulfillmentEngine
from cafe.domain.model.order_request import OrderLineRequest


class CreateOrderHandler:

    def __init__(self, engine: OrderFulfillmentEngine) -> None:
        self._engine = engine

    def handle(
        self,
        customer_name: str,
        lines: list[OrderLineRequest],
        idempotency_key: str | None = None,
        timeout: float | None = None,
    ) -> OrderDTO:
        """Create a new order.

        Steps (inside the engine):
        1. Validate the request shape.
        2. Resolve every product and total up ingredient needs.
        3. Deduct stock and write the order in one transaction.
        """
        token = CancelToken(timeout=timeout) if timeout is not None else None
        order = self._engine.create_order(
            customer_name,
            lines,
            idempotency_key=idempotency_key,
            cancel_token=token,
        )
        return order_to_dto(order)
