"""InventoryItem aggregate: tracks stock per ingredient.

Each ingredient has one InventoryItem holding the quantity currently in
stock and the unit label it is measured in.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from cafe.domain.exceptions import ValidationError


@dataclass
class InventoryItem:
    """Aggregate root for stock tracking.

    Invariant: ``quantity`` is never negative.

    Orders never mutate this object directly: stock leaves the ledger
    only through ``InventoryLedger.conditional_deduct``.  The methods
    here back the manual inventory commands.
    """

    id: int | None
    name: str
    quantity: Decimal
    unit: str

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValidationError(
                f"Stock of {self.name} cannot be negative, got {self.quantity}"
            )

    @staticmethod
    def create(name: str, quantity: Decimal, unit: str) -> InventoryItem:
        if not name or not name.strip():
            raise ValidationError("Ingredient name is required")
        if not unit or not unit.strip():
            raise ValidationError("Unit is required")
        return InventoryItem(id=None, name=name.strip(), quantity=quantity, unit=unit.strip())

    def update_details(self, name: str | None = None, unit: str | None = None) -> None:
        """Rename the ingredient or change its unit label.

        Stock levels change through ``InventoryLedger.credit`` and
        ``conditional_deduct`` only; ``save()`` ignores ``quantity`` on
        existing records.
        """
        if name is not None:
            if not name.strip():
                raise ValidationError("Ingredient name is required")
            self.name = name.strip()
        if unit is not None:
            if not unit.strip():
                raise ValidationError("Unit is required")
            self.unit = unit.strip()
