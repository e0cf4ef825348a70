"""JSON-file-backed implementation of OrderStore."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from cafe.domain.exceptions import DuplicateOrderError
from cafe.domain.model.menu import RecipeLine
from cafe.domain.model.order import Order, OrderLine, OrderStatus
from cafe.domain.model.value_objects import Money, Quantity
from cafe.domain.repository.order_store import OrderStore
from cafe.domain.repository.unit_of_work import TransactionalScope
from cafe.infrastructure.persistence.json_store import JsonDocumentStore

COLLECTION = "orders"


class JsonOrderStore(OrderStore):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- OrderStore interface -------------------------------------------------

    def insert(self, scope: TransactionalScope, order: Order) -> tuple[int, datetime]:
        document = JsonDocumentStore.document_of(scope)
        records = document[COLLECTION]
        if order.idempotency_key is not None and any(
            raw.get("idempotency_key") == order.idempotency_key for raw in records
        ):
            raise DuplicateOrderError(order.idempotency_key)

        order_id = JsonDocumentStore.next_id(document, COLLECTION)
        created_at = datetime.now(timezone.utc)
        raw = self._to_raw(order)
        raw["id"] = order_id
        raw["created_at"] = created_at.isoformat()
        records.append(raw)
        return order_id, created_at

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._store.read()[COLLECTION]:
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def get_by_idempotency_key(self, key: str) -> Order | None:
        for raw in self._store.read()[COLLECTION]:
            if raw.get("idempotency_key") == key:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        orders = [self._to_domain(raw) for raw in self._store.read()[COLLECTION]]
        return sorted(orders, key=lambda o: o.id or 0, reverse=True)

    def transition_status(
        self,
        scope: TransactionalScope,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        for raw in JsonDocumentStore.document_of(scope)[COLLECTION]:
            if raw["id"] == order_id:
                if raw["status"] != expected.value:
                    return False
                raw["status"] = new.value
                return True
        return False

    def delete(self, order_id: int) -> bool:
        with self._store.transaction() as document:
            records = document[COLLECTION]
            kept = [raw for raw in records if raw["id"] != order_id]
            document[COLLECTION] = kept
            return len(kept) != len(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_name": order.customer_name,
            "status": order.status.value,
            "total_price": str(order.total_price.amount),
            "currency": order.total_price.currency,
            "created_at": order.created_at.isoformat() if order.created_at else None,
            "idempotency_key": order.idempotency_key,
            "items": [
                {
                    "product_id": line.product_id,
                    "product_name": line.product_name,
                    "quantity": line.quantity.value,
                    "unit_price": str(line.unit_price.amount),
                    "recipe": [
                        {"ingredient_id": r.ingredient_id, "quantity": str(r.quantity)}
                        for r in line.recipe
                    ],
                }
                for line in order.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")
        lines = [
            OrderLine(
                product_id=i["product_id"],
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), currency),
                recipe=tuple(
                    RecipeLine(ingredient_id=r["ingredient_id"], quantity=Decimal(r["quantity"]))
                    for r in i.get("recipe", [])
                ),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            customer_name=raw["customer_name"],
            lines=lines,
            total_price=Money(Decimal(raw["total_price"]), currency),
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            idempotency_key=raw.get("idempotency_key"),
        )
