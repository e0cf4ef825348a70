"""Abstract repository for the MenuItem aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, SQL, in-memory)
live in the infrastructure layer and in the tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from cafe.domain.model.menu import MenuItem


class MenuCatalog(ABC):

    @abstractmethod
    def get_by_id(self, product_id: int) -> MenuItem | None:
        """Return a menu item with its recipe and price, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[MenuItem]:
        """Return every menu item."""

    @abstractmethod
    def save(self, item: MenuItem) -> MenuItem:
        """Persist a new or updated menu item; new items get an id assigned.

        Raises EntityNotFoundError when the item carries an id that has no
        record.
        """

    @abstractmethod
    def delete(self, product_id: int) -> bool:
        """Remove a menu item. Returns False if it did not exist."""
