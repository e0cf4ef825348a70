"""Application service: Delete Order use case.

A hard delete.  Stock consumed by the order is NOT returned: an order
that was served has used its ingredients for good.  Use cancel for
orders that should give their stock back.
"""

from __future__ import annotations

import structlog

from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.repository.order_store import OrderStore

logger = structlog.get_logger(__name__)


class DeleteOrderHandler:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self, order_id: int) -> None:
        if not self._order_store.delete(order_id):
            raise EntityNotFoundError(f"Order #{order_id} not found")
        logger.info("Order deleted", order_id=order_id)
