"""Application service: Delete Inventory Item use case."""

from __future__ import annotations

from cafe.domain.exceptions import EntityNotFoundError, ValidationError
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.menu_catalog import MenuCatalog


class DeleteInventoryItemHandler:

    def __init__(self, inventory: InventoryLedger, menu: MenuCatalog) -> None:
        self._inventory = inventory
        self._menu = menu

    def handle(self, ingredient_id: int) -> None:
        """Remove an ingredient that no menu item uses any more."""
        for item in self._menu.list_all():
            if any(r.ingredient_id == ingredient_id for r in item.ingredients):
                raise ValidationError(
                    f"Ingredient #{ingredient_id} is used by menu item '{item.name}'"
                )
        if not self._inventory.delete(ingredient_id):
            raise EntityNotFoundError(f"Ingredient #{ingredient_id} not found")
