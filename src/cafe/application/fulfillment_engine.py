"""Application service: Order Fulfillment Engine.

Turns an order request into a committed state change across two
aggregates (Order, InventoryItem):

    validate -> aggregate -> [begin] -> reconcile stock -> persist -> [commit]

Validation and aggregation fail fast without opening a transaction.
Anything that goes wrong between begin and commit rolls the whole scope
back, so a deduction is never visible without its order row or the
other way round.

The engine keeps no locks and no caches between requests; concurrent
requests are coordinated by the store's guarded writes alone.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

import structlog

from cafe.application.cancel_token import CancelToken
from cafe.domain.exceptions import (
    AlreadyClosedError,
    DomainException,
    DuplicateOrderError,
    EntityNotFoundError,
    InfrastructureError,
    InvalidTransitionError,
)
from cafe.domain.model.order import Order, OrderStatus
from cafe.domain.model.order_request import OrderLineRequest, OrderRequest
from cafe.domain.repository.inventory_ledger import InventoryLedger
from cafe.domain.repository.menu_catalog import MenuCatalog
from cafe.domain.repository.order_store import OrderStore
from cafe.domain.repository.unit_of_work import TransactionalScope, UnitOfWork
from cafe.domain.service.ingredient_aggregator import IngredientAggregator
from cafe.domain.service.order_persister import OrderPersister
from cafe.domain.service.order_validator import OrderValidator
from cafe.domain.service.stock_reconciler import StockReconciler

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class OrderFulfillmentEngine:

    def __init__(
        self,
        menu: MenuCatalog,
        inventory: InventoryLedger,
        orders: OrderStore,
        unit_of_work: UnitOfWork,
    ) -> None:
        self._inventory = inventory
        self._orders = orders
        self._unit_of_work = unit_of_work
        self._validator = OrderValidator()
        self._aggregator = IngredientAggregator(menu, inventory)
        self._reconciler = StockReconciler(inventory)
        self._persister = OrderPersister(orders)

    # --- CreateOrder ----------------------------------------------------------

    def create_order(
        self,
        customer_name: str,
        lines: Iterable[OrderLineRequest],
        idempotency_key: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Order:
        """Create an order and deduct its ingredients, all or nothing.

        With an *idempotency_key*, a repeated call returns the order the
        first call committed instead of creating (and charging stock for)
        a second one.  That makes a retry after an ``outcome_unknown``
        commit failure safe.
        """
        if idempotency_key is not None:
            existing = self._orders.get_by_idempotency_key(idempotency_key)
            if existing is not None:
                logger.info(
                    "Idempotent replay", order_id=existing.id, idempotency_key=idempotency_key
                )
                return existing

        request = self._validator.validate(
            OrderRequest(customer_name=customer_name, lines=list(lines))
        )
        aggregated = self._aggregator.aggregate(request.lines)

        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        def work(scope: TransactionalScope) -> Order:
            self._reconciler.reconcile(scope, aggregated.needs)
            return self._persister.persist(
                scope, request.customer_name, aggregated, idempotency_key
            )

        try:
            order = self._run_in_transaction(work, cancel_token)
        except DuplicateOrderError:
            existing = self._orders.get_by_idempotency_key(idempotency_key or "")
            if existing is None:
                raise
            logger.info(
                "Idempotent replay after conflict",
                order_id=existing.id,
                idempotency_key=idempotency_key,
            )
            return existing

        logger.info(
            "Order created",
            order_id=order.id,
            customer=order.customer_name,
            total=str(order.total_price.amount),
            ingredients=len(aggregated.needs),
        )
        return order

    # --- CloseOrder -----------------------------------------------------------

    def close_order(self, order_id: int) -> Order:
        """Transition an order OPEN -> CLOSED.

        Not idempotent: closing twice raises AlreadyClosedError so a
        double close can never be counted twice in sales reports.
        """
        order = self._load(order_id)
        order.close()

        def work(scope: TransactionalScope) -> bool:
            return self._orders.transition_status(
                scope, order_id, OrderStatus.OPEN, OrderStatus.CLOSED
            )

        if not self._run_in_transaction(work):
            # Lost a race with another close, a cancel or a delete.
            current = self._load(order_id)
            raise AlreadyClosedError(
                f"Order #{order_id} is already {current.status.value}"
            )

        logger.info("Order closed", order_id=order_id)
        return order

    # --- CancelOrder ----------------------------------------------------------

    def cancel_order(self, order_id: int) -> Order:
        """Transition an order OPEN -> CANCELLED and return its stock.

        The amounts credited back are the ones recorded on the order's
        lines at creation time, not the current recipes.
        """
        order = self._load(order_id)
        order.cancel()
        consumption = order.consumption()

        def work(scope: TransactionalScope) -> bool:
            if not self._orders.transition_status(
                scope, order_id, OrderStatus.OPEN, OrderStatus.CANCELLED
            ):
                return False
            for ingredient_id in sorted(consumption):
                if not self._inventory.credit(scope, ingredient_id, consumption[ingredient_id]):
                    logger.warning(
                        "Ingredient no longer stocked; amount not returned",
                        order_id=order_id,
                        ingredient_id=ingredient_id,
                        amount=str(consumption[ingredient_id]),
                    )
            return True

        if not self._run_in_transaction(work):
            current = self._load(order_id)
            raise InvalidTransitionError(
                f"Cannot cancel order #{order_id} in {current.status.value} status"
            )

        logger.info("Order cancelled", order_id=order_id)
        return order

    # --- Transaction boundary -------------------------------------------------

    def _run_in_transaction(
        self,
        work: Callable[[TransactionalScope], T],
        cancel_token: CancelToken | None = None,
    ) -> T:
        try:
            scope = self._unit_of_work.begin()
        except InfrastructureError:
            raise
        except Exception as exc:
            logger.exception("Failed to begin transaction")
            raise InfrastructureError("Failed to start transaction") from exc

        try:
            result = work(scope)
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
        except (DomainException, InfrastructureError):
            self._rollback(scope)
            raise
        except Exception as exc:
            logger.exception("Transaction aborted by store failure")
            self._rollback(scope)
            raise InfrastructureError(f"Transaction failed: {exc}") from exc
        except BaseException:
            self._rollback(scope)
            raise

        try:
            scope.commit()
        except Exception as exc:
            logger.exception("Commit failed; outcome unknown")
            raise InfrastructureError(
                "Failed to commit transaction; outcome unknown",
                outcome_unknown=True,
            ) from exc
        logger.debug("Transaction committed")
        return result

    @staticmethod
    def _rollback(scope: TransactionalScope) -> None:
        try:
            scope.rollback()
        except Exception:
            logger.exception("Failed to roll back transaction")
        else:
            logger.debug("Transaction rolled back")

    def _load(self, order_id: int) -> Order:
        order = self._orders.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order
