"""SQL-backed implementation of InventoryLedger.

``conditional_deduct`` is one guarded UPDATE:

    UPDATE inventory SET quantity = quantity - :units
     WHERE id = :id AND quantity >= :units

The database evaluates the condition and applies the write under its
row lock, so there is no window between check and write.  Zero affected
rows means the stock was short (or the row is gone).  Quantities are
integer units (see ``FixedPoint``), so the comparison is exact.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import sqlalchemy as sa

from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.model.inventory import InventoryItem
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.unit_of_work import TransactionalScope
from cafe.infrastructure.persistence.sql_database import SqlDatabase, inventory, to_units


class SqlInventoryLedger(InventoryLedger):

    def __init__(self, database: SqlDatabase) -> None:
        self._db = database

    # --- InventoryLedger interface --------------------------------------------

    def get_by_id(
        self, ingredient_id: int, scope: TransactionalScope | None = None
    ) -> InventoryItem | None:
        query = sa.select(inventory).where(inventory.c.id == ingredient_id)
        if scope is not None:
            row = SqlDatabase.connection_of(scope).execute(query).mappings().first()
        else:
            with self._db.read() as conn:
                row = conn.execute(query).mappings().first()
        return self._to_domain(row) if row is not None else None

    def list_all(self) -> list[InventoryItem]:
        with self._db.read() as conn:
            rows = conn.execute(sa.select(inventory).order_by(inventory.c.id)).mappings().all()
        return [self._to_domain(row) for row in rows]

    def save(self, item: InventoryItem) -> InventoryItem:
        now = datetime.now(timezone.utc)
        with self._db.write() as conn:
            if item.id is None:
                result = conn.execute(
                    sa.insert(inventory).values(
                        name=item.name, quantity=item.quantity, unit=item.unit, updated_at=now
                    )
                )
                item.id = result.inserted_primary_key[0]
                return item

            result = conn.execute(
                sa.update(inventory)
                .where(inventory.c.id == item.id)
                .values(name=item.name, unit=item.unit, updated_at=now)
            )
            if result.rowcount == 0:
                raise EntityNotFoundError(f"Ingredient #{item.id} not found")
            item.quantity = conn.execute(
                sa.select(inventory.c.quantity).where(inventory.c.id == item.id)
            ).scalar_one()
        return item

    def delete(self, ingredient_id: int) -> bool:
        with self._db.write() as conn:
            result = conn.execute(sa.delete(inventory).where(inventory.c.id == ingredient_id))
            return result.rowcount > 0

    def conditional_deduct(
        self, scope: TransactionalScope, ingredient_id: int, amount: Decimal
    ) -> bool:
        units = sa.literal(to_units(amount), sa.BigInteger)
        result = SqlDatabase.connection_of(scope).execute(
            sa.update(inventory)
            .where(inventory.c.id == ingredient_id, inventory.c.quantity >= units)
            .values(
                quantity=inventory.c.quantity - units,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount == 1

    def credit(
        self, scope: TransactionalScope, ingredient_id: int, amount: Decimal
    ) -> bool:
        units = sa.literal(to_units(amount), sa.BigInteger)
        result = SqlDatabase.connection_of(scope).execute(
            sa.update(inventory)
            .where(inventory.c.id == ingredient_id)
            .values(
                quantity=inventory.c.quantity + units,
                updated_at=datetime.now(timezone.utc),
            )
        )
        return result.rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row) -> InventoryItem:
        return InventoryItem(
            id=row["id"],
            name=row["name"],
            quantity=row["quantity"],
            unit=row["unit"],
        )
