"""Domain service: Order Persistence.

Writes the order inside the same scope as the stock deduction.  Prices
and recipes come from the aggregation step, not from a fresh menu read,
so a price change committed meanwhile cannot alter an in-flight total.
"""

from __future__ import annotations

from cafe.domain.model.order import Order, OrderLine, OrderStatus
from cafe.domain.model.value_objects import Quantity
from cafe.domain.repository.order_store import OrderStore
from cafe.domain.repository.unit_of_work import TransactionalScope
from cafe.domain.service.ingredient_aggregator import AggregatedOrder


class OrderPersister:

    def __init__(self, orders: OrderStore) -> None:
        self._orders = orders

    def persist(
        self,
        scope: TransactionalScope,
        customer_name: str,
        aggregated: AggregatedOrder,
        idempotency_key: str | None = None,
    ) -> Order:
        lines = [
            OrderLine(
                product_id=r.request.product_id,
                product_name=r.menu_item.name,
                quantity=Quantity(r.request.quantity),
                unit_price=r.menu_item.price,  # <-- price snapshot
                recipe=tuple(r.menu_item.ingredients),
            )
            for r in aggregated.lines
        ]
        order = Order(
            id=None,
            customer_name=customer_name.strip(),
            lines=lines,
            total_price=Order.compute_total(lines),
            status=OrderStatus.OPEN,
            idempotency_key=idempotency_key,
        )
        order.id, order.created_at = self._orders.insert(scope, order)
        return order
