"""Application service: Show / List / Delete Menu use cases."""

from __future__ import annotations

from cafe.application.dto import MenuItemDTO, menu_item_to_dto
from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.repository.menu_catalog import MenuCatalog


class ListMenuHandler:

    def __init__(self, menu: MenuCatalog) -> None:
        self._menu = menu

    def handle(self) -> list[MenuItemDTO]:
        return [menu_item_to_dto(item) for item in self._menu.list_all()]


class ShowMenuItemHandler:

    def __init__(self, menu: MenuCatalog) -> None:
        self._menu = menu

    def handle(self, product_id: int) -> MenuItemDTO:
        item = self._menu.get_by_id(product_id)
        if item is None:
            raise EntityNotFoundError(f"Product #{product_id} not found in menu")
        return menu_item_to_dto(item)


class DeleteMenuItemHandler:
    """Remove an item from the menu.

    Existing orders keep their own copy of name, price and recipe.
    """

    def __init__(self, menu: MenuCatalog) -> None:
        self._menu = menu

    def handle(self, product_id: int) -> None:
        if not self._menu.delete(product_id):
            raise EntityNotFoundError(f"Product #{product_id} not found in menu")
