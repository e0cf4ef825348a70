"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its lines.  Identity and
creation time are assigned by the OrderStore on insert and never change
afterwards; status moves only through ``close()`` and ``cancel()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from cafe.domain.exceptions import AlreadyClosedError, InvalidTransitionError
from cafe.domain.model.menu import RecipeLine
from cafe.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    OPEN = "open"
    CLOSED = "closed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrderLine:
    """Captures the price and recipe of a menu item at order-creation time."""

    product_id: int
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    recipe: tuple[RecipeLine, ...] = ()  # per unit, locked at order-creation time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    def consumption(self) -> dict[int, Decimal]:
        """Ingredient amounts this line took out of stock."""
        return {
            r.ingredient_id: r.quantity * self.quantity.value for r in self.recipe
        }


@dataclass
class Order:
    """Aggregate root for customer orders.

    New orders are built by ``OrderPersister`` and given their ``id`` and
    ``created_at`` by the store.  The ``__init__`` is intentionally simple
    so repositories can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer_name: str
    lines: list[OrderLine]
    total_price: Money
    status: OrderStatus = OrderStatus.OPEN
    created_at: datetime | None = None
    idempotency_key: str | None = None

    # --- State transitions ----------------------------------------------------

    def close(self) -> None:
        """Transition OPEN -> CLOSED."""
        if self.status == OrderStatus.CLOSED:
            raise AlreadyClosedError(f"Order #{self.id} is already closed")
        if self.status != OrderStatus.OPEN:
            raise AlreadyClosedError(
                f"Cannot close order #{self.id}: current status is {self.status.value}"
            )
        self.status = OrderStatus.CLOSED

    def cancel(self) -> None:
        """Transition OPEN -> CANCELLED.

        Returning the consumed stock must happen in the same unit of work
        (coordinated by the fulfillment engine).
        """
        if self.status == OrderStatus.CANCELLED:
            raise InvalidTransitionError(f"Order #{self.id} is already cancelled")
        if self.status != OrderStatus.OPEN:
            raise InvalidTransitionError(
                f"Cannot cancel order #{self.id} in {self.status.value} status"
            )
        self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @staticmethod
    def compute_total(lines: list[OrderLine]) -> Money:
        result = Money.zero()
        for line in lines:
            result = result + line.line_total
        return result

    def consumption(self) -> dict[int, Decimal]:
        """Total ingredient amounts consumed by the whole order."""
        totals: dict[int, Decimal] = {}
        for line in self.lines:
            for ingredient_id, amount in line.consumption().items():
                totals[ingredient_id] = totals.get(ingredient_id, Decimal("0")) + amount
        return totals
