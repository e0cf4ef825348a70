"""Application service: Update Menu Item use case."""

from __future__ import annotations

from decimal import Decimal

from cafe.application.add_menu_item import build_recipe
from cafe.application.dto import MenuItemDTO, menu_item_to_dto
from cafe.domain.exceptions import EntityNotFoundError, ValidationError
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.menu_catalog import MenuCatalog


class UpdateMenuItemHandler:

    def __init__(self, menu: MenuCatalog, inventory: InventoryLedger) -> None:
        self._menu = menu
        self._inventory = inventory

    def handle(
        self,
        product_id: int,
        name: str | None = None,
        price: str | None = None,
        ingredients: list[tuple[int, str | Decimal]] | None = None,
        description: str | None = None,
    ) -> MenuItemDTO:
        """Update a menu item.

        This does NOT affect any existing orders; they captured a
        price and recipe snapshot at creation time.
        """
        item = self._menu.get_by_id(product_id)
        if item is None:
            raise EntityNotFoundError(f"Product #{product_id} not found in menu")

        if name is not None:
            if not name.strip():
                raise ValidationError("Menu item name is required")
            item.name = name.strip()
        if description is not None:
            item.description = description
        if price is not None:
            item.update_price(Money.of(price))
        if ingredients is not None:
            item.update_recipe(build_recipe(self._inventory, ingredients))

        return menu_item_to_dto(self._menu.save(item))
