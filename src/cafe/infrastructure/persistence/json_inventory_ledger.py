"""JSON-file-backed implementation of InventoryLedger.

Guarded operations run on the scope's private copy of the document
while the scope holds the store lock, so check and write cannot be
interleaved with another writer.
"""

from __future__ import annotations

from decimal import Decimal

from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.model.inventory import InventoryItem
from cafe.domain.model.value_objects import normalize_amount
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.unit_of_work import TransactionalScope
from cafe.infrastructure.persistence.json_store import JsonDocumentStore

COLLECTION = "inventory"


class JsonInventoryLedger(InventoryLedger):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- InventoryLedger interface --------------------------------------------

    def get_by_id(
        self, ingredient_id: int, scope: TransactionalScope | None = None
    ) -> InventoryItem | None:
        document = (
            self._store.read() if scope is None else JsonDocumentStore.document_of(scope)
        )
        raw = self._find(document, ingredient_id)
        return self._to_domain(raw) if raw is not None else None

    def list_all(self) -> list[InventoryItem]:
        return [self._to_domain(raw) for raw in self._store.read()[COLLECTION]]

    def save(self, item: InventoryItem) -> InventoryItem:
        with self._store.transaction() as document:
            if item.id is None:
                item.id = JsonDocumentStore.next_id(document, COLLECTION)
                document[COLLECTION].append(self._to_raw(item))
                return item

            raw = self._find(document, item.id)
            if raw is None:
                raise EntityNotFoundError(f"Ingredient #{item.id} not found")
            raw["name"] = item.name
            raw["unit"] = item.unit
            item.quantity = normalize_amount(Decimal(raw["quantity"]))
        return item

    def delete(self, ingredient_id: int) -> bool:
        with self._store.transaction() as document:
            records = document[COLLECTION]
            kept = [raw for raw in records if raw["id"] != ingredient_id]
            document[COLLECTION] = kept
            return len(kept) != len(records)

    def conditional_deduct(
        self, scope: TransactionalScope, ingredient_id: int, amount: Decimal
    ) -> bool:
        raw = self._find(JsonDocumentStore.document_of(scope), ingredient_id)
        if raw is None:
            return False
        current = Decimal(raw["quantity"])
        if current < amount:
            return False
        raw["quantity"] = str(current - amount)
        return True

    def credit(
        self, scope: TransactionalScope, ingredient_id: int, amount: Decimal
    ) -> bool:
        raw = self._find(JsonDocumentStore.document_of(scope), ingredient_id)
        if raw is None:
            return False
        raw["quantity"] = str(Decimal(raw["quantity"]) + amount)
        return True

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _find(document: dict, ingredient_id: int) -> dict | None:
        for raw in document[COLLECTION]:
            if raw["id"] == ingredient_id:
                return raw
        return None

    @staticmethod
    def _to_raw(item: InventoryItem) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "quantity": str(item.quantity),
            "unit": item.unit,
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryItem:
        return InventoryItem(
            id=raw["id"],
            name=raw["name"],
            quantity=normalize_amount(Decimal(raw["quantity"])),
            unit=raw["unit"],
        )
