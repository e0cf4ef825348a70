"""Abstract repository for InventoryItem stock.

Stock is a contended resource: orders running in parallel all draw from
it.  Quantities therefore never travel through ``save()``; they only
move by the relative, guarded operations below, which run inside a
TransactionalScope.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from cafe.domain.model.inventory import InventoryItem
from cafe.domain.repository.unit_of_work import TransactionalScope


class InventoryLedger(ABC):

    @abstractmethod
    def get_by_id(
        self, ingredient_id: int, scope: TransactionalScope | None = None
    ) -> InventoryItem | None:
        """Return the current record for an ingredient, or None.

        Outside a scope this is a pre-flight peek only; its quantity can
        be stale by the time a deduction runs.
        """

    @abstractmethod
    def list_all(self) -> list[InventoryItem]:
        """Return every inventory record."""

    @abstractmethod
    def save(self, item: InventoryItem) -> InventoryItem:
        """Insert a new record, or update name/unit of an existing one.

        Raises EntityNotFoundError when the item carries an id that has no
        record (it was deleted since it was read).
        """

    @abstractmethod
    def delete(self, ingredient_id: int) -> bool:
        """Remove a record. Returns False if it did not exist."""

    @abstractmethod
    def conditional_deduct(
        self, scope: TransactionalScope, ingredient_id: int, amount: Decimal
    ) -> bool:
        """Subtract *amount* only if at least that much is in stock.

        Check and write are one atomic operation.  Returns False (and
        changes nothing) when stock is short or the ingredient is gone.
        """

    @abstractmethod
    def credit(
        self, scope: TransactionalScope, ingredient_id: int, amount: Decimal
    ) -> bool:
        """Add *amount* to the stock. Returns False if the ingredient is gone."""
