"""MenuItem aggregate.

Menu items live independently of orders. They have their own lifecycle:
prices and recipes change, items are added and removed from the menu.
Orders never re-read them after creation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from cafe.domain.exceptions import ValidationError
from cafe.domain.model.value_objects import Money, to_amount


@dataclass(frozen=True)
class RecipeLine:
    """How much of one ingredient a single unit of a menu item consumes."""

    ingredient_id: int
    quantity: Decimal

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError(
                f"Recipe quantity for ingredient #{self.ingredient_id} must be positive"
            )

    @staticmethod
    def of(ingredient_id: int, quantity: str | float | int | Decimal) -> RecipeLine:
        return RecipeLine(ingredient_id=ingredient_id, quantity=to_amount(quantity))


@dataclass
class MenuItem:
    """A sellable item with a fixed recipe and a price.

    Kept as a mutable dataclass because price and recipe updates are
    legitimate mutations on the aggregate (through the menu commands only).
    """

    id: int | None
    name: str
    price: Money
    ingredients: list[RecipeLine] = field(default_factory=list)
    description: str = ""

    @staticmethod
    def create(
        name: str,
        price: Money,
        ingredients: list[RecipeLine],
        description: str = "",
    ) -> MenuItem:
        """Create a new menu item, enforcing all invariants."""
        if not name or not name.strip():
            raise ValidationError("Menu item name is required")
        item = MenuItem(id=None, name=name.strip(), price=price, description=description)
        item.update_price(price)
        item.update_recipe(ingredients)
        return item

    def update_price(self, new_price: Money) -> None:
        """Change the price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Menu item price must be greater than zero")
        self.price = new_price

    def update_recipe(self, ingredients: list[RecipeLine]) -> None:
        seen: set[int] = set()
        for line in ingredients:
            if line.ingredient_id in seen:
                raise ValidationError(
                    f"Ingredient #{line.ingredient_id} listed twice in recipe"
                )
            seen.add(line.ingredient_id)
        self.ingredients = list(ingredients)
