"""Domain service: Ingredient Aggregation.

Expands the requested lines into the total amount of every ingredient
the order consumes, and captures the menu items (price and recipe) the
rest of the order flow works from, so nothing is re-read from the menu
once the transaction is open.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from cafe.domain.exceptions import EntityNotFoundError
from cafe.domain.model.menu import MenuItem
from cafe.domain.model.order_request import OrderLineRequest
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.menu_catalog import MenuCatalog


@dataclass(frozen=True)
class ResolvedLine:
    request: OrderLineRequest
    menu_item: MenuItem


@dataclass(frozen=True)
class AggregatedOrder:
    needs: dict[int, Decimal]
    lines: list[ResolvedLine]


class IngredientAggregator:

    def __init__(self, menu: MenuCatalog, inventory: InventoryLedger) -> None:
        self._menu = menu
        self._inventory = inventory

    def aggregate(self, lines: list[OrderLineRequest]) -> AggregatedOrder:
        """Resolve every product and sum up ingredient needs.

        Raises EntityNotFoundError for an unknown product id or for a
        recipe that references an ingredient with no inventory record.
        """
        resolved_items: dict[int, MenuItem] = {}
        resolved: list[ResolvedLine] = []
        needs: dict[int, Decimal] = {}

        for line in lines:
            item = resolved_items.get(line.product_id)
            if item is None:
                item = self._menu.get_by_id(line.product_id)
                if item is None:
                    raise EntityNotFoundError(
                        f"Product #{line.product_id} not found in menu"
                    )
                resolved_items[line.product_id] = item

            for ingredient in item.ingredients:
                needed = ingredient.quantity * line.quantity
                needs[ingredient.ingredient_id] = (
                    needs.get(ingredient.ingredient_id, Decimal("0")) + needed
                )
            resolved.append(ResolvedLine(request=line, menu_item=item))

        for ingredient_id in sorted(needs):
            if self._inventory.get_by_id(ingredient_id) is None:
                raise EntityNotFoundError(
                    f"Ingredient #{ingredient_id} has no inventory record"
                )

        return AggregatedOrder(needs=needs, lines=resolved)
