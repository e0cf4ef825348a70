"""Abstract transaction boundary.

A TransactionalScope is what the guarded writes of the ledger and the
order store run inside.  Nothing written through a scope is visible to
anyone else until ``commit()``; ``rollback()`` discards all of it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class TransactionalScope(ABC):

    @abstractmethod
    def commit(self) -> None:
        """Make every write performed through this scope durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every write performed through this scope."""


class UnitOfWork(ABC):

    @abstractmethod
    def begin(self) -> TransactionalScope:
        """Open a new transactional scope."""
