"""Application service: Show Inventory and Leftovers use cases (queries)."""

from __future__ import annotations

from dataclasses import dataclass

from cafe.application.dto import InventoryLineDTO, inventory_to_dto
from cafe.domain.exceptions import ValidationError
from cafe.domain.repository.inventory_ledger import InventoryLedger

SORT_FIELDS = ("id", "name", "quantity")
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class LeftoversPage:
    items: list[InventoryLineDTO]
    page: int
    page_size: int
    total: int

    @property
    def has_next(self) -> bool:
        return self.page * self.page_size < self.total


class ShowInventoryHandler:

    def __init__(self, inventory: InventoryLedger) -> None:
        self._inventory = inventory

    def handle(self) -> list[InventoryLineDTO]:
        return [inventory_to_dto(item) for item in self._inventory.list_all()]


class LeftoversHandler:
    """Paged view of what is left in stock.

    ``quantity`` sorts largest first, the other fields ascending.
    Non-positive page numbers and sizes fall back to the defaults.
    """

    def __init__(self, inventory: InventoryLedger) -> None:
        self._inventory = inventory

    def handle(
        self, sort_by: str = "id", page: int = 1, page_size: int = DEFAULT_PAGE_SIZE
    ) -> LeftoversPage:
        if sort_by not in SORT_FIELDS:
            raise ValidationError(
                f"Cannot sort by '{sort_by}'; choose one of {', '.join(SORT_FIELDS)}"
            )
        page = page if page > 0 else 1
        page_size = page_size if page_size > 0 else DEFAULT_PAGE_SIZE

        items = self._inventory.list_all()
        if sort_by == "quantity":
            items.sort(key=lambda i: (-i.quantity, i.id or 0))
        elif sort_by == "name":
            items.sort(key=lambda i: i.name.lower())
        else:
            items.sort(key=lambda i: i.id or 0)

        start = (page - 1) * page_size
        return LeftoversPage(
            items=[inventory_to_dto(i) for i in items[start : start + page_size]],
            page=page,
            page_size=page_size,
            total=len(items),
        )
