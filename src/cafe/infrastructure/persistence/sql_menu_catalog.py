"""SQL-backed implementation of MenuCatalog."""

from __future__ import annotations

from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.engine import Connection

from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.model.menu import MenuItem, RecipeLine
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.menu_catalog import MenuCatalog
from cafe.infrastructure.persistence.sql_database import (
    SqlDatabase,
    menu_item_ingredients,
    menu_items,
)


class SqlMenuCatalog(MenuCatalog):

    def __init__(self, database: SqlDatabase) -> None:
        self._db = database

    # --- MenuCatalog interface ------------------------------------------------

    def get_by_id(self, product_id: int) -> MenuItem | None:
        with self._db.read() as conn:
            row = conn.execute(
                sa.select(menu_items).where(menu_items.c.id == product_id)
            ).mappings().first()
            if row is None:
                return None
            return self._to_domain(row, self._recipes(conn, [product_id]).get(product_id, []))

    def list_all(self) -> list[MenuItem]:
        with self._db.read() as conn:
            rows = conn.execute(
                sa.select(menu_items).order_by(menu_items.c.id)
            ).mappings().all()
            recipes = self._recipes(conn, [row["id"] for row in rows])
        return [self._to_domain(row, recipes.get(row["id"], [])) for row in rows]

    def save(self, item: MenuItem) -> MenuItem:
        values = {
            "name": item.name,
            "description": item.description,
            "price": item.price.amount,
            "currency": item.price.currency,
        }
        with self._db.write() as conn:
            if item.id is None:
                result = conn.execute(sa.insert(menu_items).values(**values))
                item.id = result.inserted_primary_key[0]
            else:
                result = conn.execute(
                    sa.update(menu_items).where(menu_items.c.id == item.id).values(**values)
                )
                if result.rowcount == 0:
                    raise EntityNotFoundError(f"Menu item #{item.id} not found")
                conn.execute(
                    sa.delete(menu_item_ingredients).where(
                        menu_item_ingredients.c.product_id == item.id
                    )
                )
            if item.ingredients:
                conn.execute(
                    sa.insert(menu_item_ingredients),
                    [
                        {
                            "product_id": item.id,
                            "ingredient_id": r.ingredient_id,
                            "position": position,
                            "quantity": r.quantity,
                        }
                        for position, r in enumerate(item.ingredients)
                    ],
                )
        return item

    def delete(self, product_id: int) -> bool:
        with self._db.write() as conn:
            conn.execute(
                sa.delete(menu_item_ingredients).where(
                    menu_item_ingredients.c.product_id == product_id
                )
            )
            result = conn.execute(sa.delete(menu_items).where(menu_items.c.id == product_id))
            return result.rowcount > 0

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _recipes(conn: Connection, product_ids: list[int]) -> dict[int, list[RecipeLine]]:
        if not product_ids:
            return {}
        rows = conn.execute(
            sa.select(menu_item_ingredients)
            .where(menu_item_ingredients.c.product_id.in_(product_ids))
            .order_by(menu_item_ingredients.c.product_id, menu_item_ingredients.c.position)
        ).mappings()
        recipes: dict[int, list[RecipeLine]] = {}
        for row in rows:
            recipes.setdefault(row["product_id"], []).append(
                RecipeLine(
                    ingredient_id=row["ingredient_id"],
                    quantity=row["quantity"],
                )
            )
        return recipes

    @staticmethod
    def _to_domain(row, recipe: list[RecipeLine]) -> MenuItem:
        return MenuItem(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            price=Money(Decimal(row["price"]).quantize(Decimal("0.01")), row["currency"]),
            ingredients=recipe,
        )
