"""Abstract repository for the Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from cafe.domain.model.order import Order, OrderStatus
from cafe.domain.repository.unit_of_work import TransactionalScope


class OrderStore(ABC):

    @abstractmethod
    def insert(self, scope: TransactionalScope, order: Order) -> tuple[int, datetime]:
        """Insert header and lines; return the assigned id and creation time.

        Raises DuplicateOrderError if ``order.idempotency_key`` is taken.
        """

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Order | None:
        """Return the order created with this idempotency key, or None."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order, newest first."""

    @abstractmethod
    def transition_status(
        self,
        scope: TransactionalScope,
        order_id: int,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> bool:
        """Set *new* status only if the stored status is still *expected*."""

    @abstractmethod
    def delete(self, order_id: int) -> bool:
        """Hard-delete an order and its lines. Returns False if it did not exist."""
