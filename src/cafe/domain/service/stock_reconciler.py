"""Domain service: Stock Reconciliation.

Takes the aggregated needs of one order out of the inventory inside an
open transactional scope.  Each ingredient is drawn down with one
guarded decrement ("subtract only if enough is left"), so two orders
racing for the same ingredient can never both see enough stock and
both deduct it.  Ingredients are processed in ascending id order so
concurrent orders lock rows in the same sequence.

A shortfall raises; the caller owns the scope and rolls it back, which
undoes the deductions already made for earlier ingredients.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from cafe.domain.exceptions import EntityNotFoundError, InsufficientStockError
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.unit_of_work import TransactionalScope

logger = structlog.get_logger(__name__)


class StockReconciler:

    def __init__(self, inventory: InventoryLedger) -> None:
        self._inventory = inventory

    def reconcile(self, scope: TransactionalScope, needs: dict[int, Decimal]) -> None:
        for ingredient_id in sorted(needs):
            amount = needs[ingredient_id]
            if amount <= 0:
                continue
            if self._inventory.conditional_deduct(scope, ingredient_id, amount):
                logger.debug(
                    "Stock deducted", ingredient_id=ingredient_id, amount=str(amount)
                )
                continue

            item = self._inventory.get_by_id(ingredient_id, scope=scope)
            if item is None:
                raise EntityNotFoundError(
                    f"Ingredient #{ingredient_id} has no inventory record"
                )
            logger.warning(
                "Insufficient stock",
                ingredient_id=ingredient_id,
                ingredient=item.name,
                needed=str(amount),
                available=str(item.quantity),
            )
            raise InsufficientStockError(
                ingredient_name=item.name,
                needed=amount,
                available=item.quantity,
                unit=item.unit,
            )
