"""JSON-file-backed implementation of MenuCatalog."""

from __future__ import annotations

from decimal import Decimal

from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.model.menu import MenuItem, RecipeLine
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.menu_catalog import MenuCatalog
from cafe.infrastructure.persistence.json_store import JsonDocumentStore

COLLECTION = "menu_items"


class JsonMenuCatalog(MenuCatalog):

    def __init__(self, store: JsonDocumentStore) -> None:
        self._store = store

    # --- MenuCatalog interface ------------------------------------------------

    def get_by_id(self, product_id: int) -> MenuItem | None:
        for raw in self._store.read()[COLLECTION]:
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[MenuItem]:
        return [self._to_domain(raw) for raw in self._store.read()[COLLECTION]]

    def save(self, item: MenuItem) -> MenuItem:
        with self._store.transaction() as document:
            records = document[COLLECTION]
            if item.id is None:
                item.id = JsonDocumentStore.next_id(document, COLLECTION)
                records.append(self._to_raw(item))
                return item

            for i, raw in enumerate(records):
                if raw["id"] == item.id:
                    records[i] = self._to_raw(item)
                    break
            else:
                raise EntityNotFoundError(f"Menu item #{item.id} not found")
        return item

    def delete(self, product_id: int) -> bool:
        with self._store.transaction() as document:
            records = document[COLLECTION]
            kept = [raw for raw in records if raw["id"] != product_id]
            document[COLLECTION] = kept
            return len(kept) != len(records)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(item: MenuItem) -> dict:
        return {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "price": str(item.price.amount),
            "currency": item.price.currency,
            "ingredients": [
                {"ingredient_id": r.ingredient_id, "quantity": str(r.quantity)}
                for r in item.ingredients
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> MenuItem:
        return MenuItem(
            id=raw["id"],
            name=raw["name"],
            description=raw.get("description", ""),
            price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
            ingredients=[
                RecipeLine(ingredient_id=r["ingredient_id"], quantity=Decimal(r["quantity"]))
                for r in raw.get("ingredients", [])
            ],
        )
