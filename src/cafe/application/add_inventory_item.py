"""Application service: Add / Update Inventory Item use cases."""

from __future__ import annotations

from decimal import Decimal

from cafe.application.dto import InventoryLineDTO, inventory_to_dto
from cafe.domain.exceptions import EntityNotFoundError, ValidationError
from cafe.domain.model.inventory import InventoryItem
from cafe.domain.model.value_objects import to_amount
from cafe.domain.repository.inventory_ledger import InventoryLedger


class AddInventoryItemHandler:

    def __init__(self, inventory: InventoryLedger) -> None:
        self._inventory = inventory

    def handle(self, name: str, quantity: str | Decimal, unit: str) -> InventoryLineDTO:
        """Register a new ingredient with its opening stock."""
        for existing in self._inventory.list_all():
            if existing.name.lower() == name.strip().lower():
                raise ValidationError(f"Ingredient '{name.strip()}' already exists")

        item = InventoryItem.create(name=name, quantity=to_amount(quantity), unit=unit)
        return inventory_to_dto(self._inventory.save(item))


class UpdateInventoryItemHandler:

    def __init__(self, inventory: InventoryLedger) -> None:
        self._inventory = inventory

    def handle(
        self, ingredient_id: int, name: str | None = None, unit: str | None = None
    ) -> InventoryLineDTO:
        """Rename an ingredient or change its unit. Use restock for quantities."""
        item = self._inventory.get_by_id(ingredient_id)
        if item is None:
            raise EntityNotFoundError(f"Ingredient #{ingredient_id} not found")
        item.update_details(name=name, unit=unit)
        return inventory_to_dto(self._inventory.save(item))
