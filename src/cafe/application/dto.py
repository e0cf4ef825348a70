"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from cafe.domain.model.inventory import InventoryItem
from cafe.domain.model.menu import MenuItem
from cafe.domain.model.order import Order


@dataclass(frozen=True)
class OrderLineDTO:
    """Output: a single order line as displayed to the user."""

    product_id: int
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$4.50"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: int
    customer_name: str
    status: str
    items: list[OrderLineDTO]
    total: str
    created_at: str


@dataclass(frozen=True)
class RecipeLineDTO:
    ingredient_id: int
    quantity: str


@dataclass(frozen=True)
class MenuItemDTO:
    id: int
    name: str
    description: str
    price: str
    ingredients: list[RecipeLineDTO]


@dataclass(frozen=True)
class InventoryLineDTO:
    id: int
    name: str
    quantity: str
    unit: str


# --- Mapping ------------------------------------------------------------------


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        customer_name=order.customer_name,
        status=order.status.value,
        items=[
            OrderLineDTO(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity.value,
                unit_price=str(line.unit_price),
                line_total=str(line.line_total),
            )
            for line in order.lines
        ],
        total=str(order.total_price),
        created_at=(
            order.created_at.strftime("%Y-%m-%d %H:%M UTC") if order.created_at else ""
        ),
    )


def menu_item_to_dto(item: MenuItem) -> MenuItemDTO:
    return MenuItemDTO(
        id=item.id,  # type: ignore[arg-type]
        name=item.name,
        description=item.description,
        price=str(item.price),
        ingredients=[
            RecipeLineDTO(ingredient_id=r.ingredient_id, quantity=str(r.quantity))
            for r in item.ingredients
        ],
    )


def inventory_to_dto(item: InventoryItem) -> InventoryLineDTO:
    return InventoryLineDTO(
        id=item.id,  # type: ignore[arg-type]
        name=item.name,
        quantity=str(item.quantity),
        unit=item.unit,
    )
