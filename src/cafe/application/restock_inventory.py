"""Application service: Restock Inventory use case.

Adds to the stock of an ingredient with a relative credit, never by
writing back a quantity read earlier, so a delivery booked while orders
are being placed cannot overwrite their deductions.
"""

from __future__ import annotations

from decimal import Decimal

import structlog

from cafe.application.dto import InventoryLineDTO, inventory_to_dto
from cafe.domain.exceptions import EntityNotFoundError, InfrastructureError, ValidationError
from cafe.domain.model.value_objects import to_amount
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.unit_of_work import UnitOfWork

logger = structlog.get_logger(__name__)


class RestockInventoryHandler:

    def __init__(self, inventory: InventoryLedger, unit_of_work: UnitOfWork) -> None:
        self._inventory = inventory
        self._unit_of_work = unit_of_work

    def handle(self, ingredient_id: int, amount: str | Decimal) -> InventoryLineDTO:
        delta = to_amount(amount)
        if delta == 0:
            raise ValidationError("Restock amount must be positive")

        try:
            scope = self._unit_of_work.begin()
        except Exception as exc:
            logger.exception("Failed to begin restock", ingredient_id=ingredient_id)
            raise InfrastructureError("Failed to start transaction") from exc

        try:
            credited = self._inventory.credit(scope, ingredient_id, delta)
        except Exception as exc:
            logger.exception("Restock aborted by store failure", ingredient_id=ingredient_id)
            scope.rollback()
            raise InfrastructureError(f"Restock failed: {exc}") from exc
        except BaseException:
            scope.rollback()
            raise
        if not credited:
            scope.rollback()
            raise EntityNotFoundError(f"Ingredient #{ingredient_id} not found")

        try:
            scope.commit()
        except Exception as exc:
            logger.exception("Restock commit failed; outcome unknown", ingredient_id=ingredient_id)
            raise InfrastructureError(
                "Failed to commit restock; outcome unknown", outcome_unknown=True
            ) from exc

        logger.info("Inventory restocked", ingredient_id=ingredient_id, amount=str(delta))
        item = self._inventory.get_by_id(ingredient_id)
        if item is None:
            raise EntityNotFoundError(f"Ingredient #{ingredient_id} not found")
        return inventory_to_dto(item)
