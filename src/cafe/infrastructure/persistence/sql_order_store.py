"""SQL-backed implementation of OrderStore."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError

from cafe.domain.exceptions import DuplicateOrderError
from cafe.domain.model.menu import RecipeLine
from cafe.domain.model.order import Order, OrderLine, OrderStatus
from cafe.domain.model.value_objects import Money, Quantity
from cafe.domain.repository.order_store import OrderStore
from cafe.domain.repository.unit_of_work import TransactionalScope
from cafe.infrastructure.persistence.sql_database import (
    SqlDatabase,
    order_items,
    orders,
    utc,
)

CENTS = Decimal("0.01")


class SqlOrderStore(OrderStore):

    def __init__(self, database: SqlDatabase) -> None:
        self._db = database

    # --- OrderStore interface -------------------------------------------------

    def insert(self, scope: TransactionalScope, order: Order) -> tuple[int, datetime]:
        conn = SqlDatabase.connection_of(scope)
        created_at = datetime.now(timezone.utc)
        try:
            result = conn.execute(
                sa.insert(orders).values(
                    customer_name=order.customer_name,
                    status=order.status.value,
                    total_price=order.total_price.amount,
                    currency=order.total_price.currency,
                    created_at=created_at,
                    idempotency_key=order.idempotency_key,
                )
            )
        except IntegrityError as exc:
            if order.idempotency_key is not None:
                raise DuplicateOrderError(order.idempotency_key) from exc
            raise
        order_id = result.inserted_primary_key[0]

        conn.execute(
            sa.insert(order_items),
            [
                {
                    "order_id": order_id,
                    "position": position,
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "quantity": line.quantity.value,
                    "unit_price": line.unit_price.amount,
                    "recipe": [
                        {"ingredient_id": r.ingredient_id, "quantity": str(r.quantity)}
                        for r in line.recipe
                    ],
                }
                for position, line in enumerate(order.lines)
            ],
        )
        return order_id, created_at

    def get_by_id(self, order_id: int) -> Order | None:
        return self._fetch_one(orders.c.id == order_id)

    def get_by_idempotency_key(self, key: str) -> Order | None:
        return self._fetch_one(orders.c.idempotency_key == key)

    def list_all(self) -> list[Order]:
        with self._db.read() as conn:
            rows = conn.execute(
                sa.select(orders).order_by(orders.c.id.desc())
            ).mappings().all()
            lines = self._lines(conn, [row["id"] for row in rows])
        return [self._to_domain(row, lines.get(row["id"], [])) for row in rows]

    def transition_status(
        self,
        scope: TransactionalScope,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        result = SqlDatabase.connection_of(scope).execute(
            sa.update(orders)
            .where(orders.c.id == order_id, orders.c.status == expected.value)
            .values(status=new.value)
        )
        return result.rowcount == 1

    def delete(self, order_id: int) -> bool:
        with self._db.write() as conn:
            conn.execute(sa.delete(order_items).where(order_items.c.order_id == order_id))
            result = conn.execute(sa.delete(orders).where(orders.c.id == order_id))
            return result.rowcount > 0

    # --- Serialization --------------------------------------------------------

    def _fetch_one(self, condition) -> Order | None:
        with self._db.read() as conn:
            row = conn.execute(sa.select(orders).where(condition)).mappings().first()
            if row is None:
                return None
            lines = self._lines(conn, [row["id"]])
        return self._to_domain(row, lines.get(row["id"], []))

    @staticmethod
    def _lines(conn: Connection, order_ids: list[int]) -> dict[int, list[dict]]:
        if not order_ids:
            return {}
        rows = conn.execute(
            sa.select(order_items)
            .where(order_items.c.order_id.in_(order_ids))
            .order_by(order_items.c.order_id, order_items.c.position)
        ).mappings()
        grouped: dict[int, list[dict]] = {}
        for row in rows:
            grouped.setdefault(row["order_id"], []).append(dict(row))
        return grouped

    @staticmethod
    def _to_domain(row, line_rows: list[dict]) -> Order:
        currency = row["currency"]
        lines = [
            OrderLine(
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]).quantize(CENTS), currency),
                recipe=tuple(
                    RecipeLine(ingredient_id=r["ingredient_id"], quantity=Decimal(r["quantity"]))
                    for r in i["recipe"]
                ),
            )
            for i in line_rows
        ]
        return Order(
            id=row["id"],
            customer_name=row["customer_name"],
            lines=lines,
            total_price=Money(Decimal(row["total_price"]).quantize(CENTS), currency),
            status=OrderStatus(row["status"]),
            created_at=utc(row["created_at"]),
            idempotency_key=row["idempotency_key"],
        )
