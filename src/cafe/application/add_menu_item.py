"""Application service: Add Menu Item use case."""

from __future__ import annotations

from decimal import Decimal

from cafe.application.dto import MenuItemDTO, menu_item_to_dto
from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.model.menu import MenuItem, RecipeLine
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.menu_catalog import MenuCatalog


def build_recipe(
    inventory: InventoryLedger, ingredients: list[tuple[int, str | Decimal]]
) -> list[RecipeLine]:
    """Turn (ingredient_id, amount) pairs into recipe lines.

    Every ingredient must already have an inventory record.
    """
    recipe: list[RecipeLine] = []
    for ingredient_id, quantity in ingredients:
        if inventory.get_by_id(ingredient_id) is None:
            raise EntityNotFoundError(
                f"Ingredient #{ingredient_id} has no inventory record"
            )
        recipe.append(RecipeLine.of(ingredient_id, quantity))
    return recipe


class AddMenuItemHandler:

    def __init__(self, menu: MenuCatalog, inventory: InventoryLedger) -> None:
        self._menu = menu
        self._inventory = inventory

    def handle(
        self,
        name: str,
        price: str,
        ingredients: list[tuple[int, str | Decimal]],
        description: str = "",
    ) -> MenuItemDTO:
        """Add a new item to the menu."""
        item = MenuItem.create(
            name=name,
            price=Money.of(price),
            ingredients=build_recipe(self._inventory, ingredients),
            description=description,
        )
        return menu_item_to_dto(self._menu.save(item))
