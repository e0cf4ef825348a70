"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
Each class carries the HTTP status a transport layer should answer with.
"""

from __future__ import annotations

from decimal import Decimal


class DomainException(Exception):
    """Base class for all domain errors."""

    http_status = 400


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    http_status = 404


class InsufficientStockError(DomainException):
    """An ingredient holds less stock than an order needs."""

    def __init__(
        self,
        ingredient_name: str,
        needed: Decimal,
        available: Decimal,
        unit: str,
    ) -> None:
        self.ingredient_name = ingredient_name
        self.needed = needed
        self.available = available
        self.unit = unit
        super().__init__(
            f"Not enough {ingredient_name}: need {needed}{unit}, "
            f"have {available}{unit}"
        )


class InvalidTransitionError(DomainException):
    """An order status change is not allowed from the current status."""

    http_status = 409


class AlreadyClosedError(InvalidTransitionError):
    """CloseOrder was called on an order that is no longer open."""


class DuplicateOrderError(DomainException):
    """An order with the same idempotency key already exists."""

    http_status = 409

    def __init__(self, idempotency_key: str) -> None:
        self.idempotency_key = idempotency_key
        super().__init__(f"Order with idempotency key '{idempotency_key}' already exists")


class OperationCancelledError(DomainException):
    """The caller cancelled the request (or its deadline passed) before commit."""

    http_status = 499


class InfrastructureError(Exception):
    """The backing store failed (begin, commit, rollback, connectivity).

    ``outcome_unknown`` is set when the failure happened during commit
    itself: the change may or may not be durable.
    """

    http_status = 500

    def __init__(self, message: str, outcome_unknown: bool = False) -> None:
        self.outcome_unknown = outcome_unknown
        super().__init__(message)


CREATED_STATUS = 201
