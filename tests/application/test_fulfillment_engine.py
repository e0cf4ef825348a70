"""Tests for the OrderFulfillmentEngine.

Uses in-memory fakes with a snapshot/restore unit of work, so a
rolled-back transaction leaves stock exactly as it was.
"""

import threading
from decimal import Decimal

import pytest

from cafe.application.cancel_token import CancelToken
from cafe.application.fulfillment_engine import OrderFulfillmentEngine
from cafe.domain.exceptions import (
    AlreadyClosedError,
    EntityNotFoundError,
    InfrastructureError,
    InsufficientStockError,
    InvalidTransitionError,
    OperationCancelledError,
    ValidationError,
)
from cafe.domain.model.inventory import InventoryItem
from cafe.domain.model.menu import MenuItem, RecipeLine
from cafe.domain.model.order import OrderStatus
from cafe.domain.model.order_request import OrderLineRequest
from cafe.domain.model.value_objects import Money
from tests.fakes import FakeDatabase, FakeInventoryLedger, FakeMenuCatalog, FakeOrderStore

BEANS, WATER, MILK = 1, 2, 3
LATTE, AMERICANO = 1, 2


def _setup(
    beans: str = "1000", water: str = "5000", milk: str = "3000"
) -> tuple[OrderFulfillmentEngine, FakeDatabase, FakeInventoryLedger, FakeOrderStore, FakeMenuCatalog]:
    db = FakeDatabase()
    inventory = FakeInventoryLedger(db, [
        InventoryItem(id=BEANS, name="Coffee Beans", quantity=Decimal(beans), unit="g"),
        InventoryItem(id=WATER, name="Water", quantity=Decimal(water), unit="ml"),
        InventoryItem(id=MILK, name="Milk", quantity=Decimal(milk), unit="ml"),
    ])
    menu = FakeMenuCatalog(db, [
        MenuItem(
            id=LATTE, name="Latte", price=Money.of("4.50"),
            ingredients=[
                RecipeLine.of(BEANS, 18), RecipeLine.of(WATER, 200), RecipeLine.of(MILK, 150),
            ],
        ),
        MenuItem(
            id=AMERICANO, name="Americano", price=Money.of("3.00"),
            ingredients=[RecipeLine.of(BEANS, 18), RecipeLine.of(WATER, 300)],
        ),
    ])
    orders = FakeOrderStore(db)
    engine = OrderFulfillmentEngine(menu, inventory, orders, db)
    return engine, db, inventory, orders, menu


def _stock(inventory: FakeInventoryLedger) -> dict[int, Decimal]:
    return {item.id: item.quantity for item in inventory.list_all()}


class TestCreateOrderHappyPath:

    def test_two_lattes_deduct_recipe_times_quantity(self):
        engine, _, inventory, _, _ = _setup()
        engine.create_order("Alice", [OrderLineRequest(LATTE, 2)])
        assert _stock(inventory) == {
            BEANS: Decimal("964"), WATER: Decimal("4600"), MILK: Decimal("2700"),
        }

    def test_order_is_open_with_snapshot_total(self):
        engine, _, _, _, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 2)])
        assert order.status == OrderStatus.OPEN
        assert order.total_price == Money.of("9.00")
        assert order.id == 1
        assert order.created_at is not None

    def test_customer_name_is_trimmed(self):
        engine, _, _, _, _ = _setup()
        order = engine.create_order("  Alice  ", [OrderLineRequest(LATTE, 1)])
        assert order.customer_name == "Alice"

    def test_persists_order_with_recipe_snapshot(self):
        engine, _, _, orders, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        saved = orders.get_by_id(order.id)
        assert saved.lines[0].product_name == "Latte"
        assert saved.lines[0].recipe[0] == RecipeLine.of(BEANS, 18)

    def test_shared_ingredient_across_lines(self):
        engine, _, inventory, _, _ = _setup()
        engine.create_order(
            "Alice", [OrderLineRequest(LATTE, 1), OrderLineRequest(AMERICANO, 1)]
        )
        assert _stock(inventory)[BEANS] == Decimal("964")
        assert _stock(inventory)[WATER] == Decimal("4500")

    def test_exact_stock_is_enough(self):
        engine, _, inventory, _, _ = _setup(beans="36")
        engine.create_order("Alice", [OrderLineRequest(LATTE, 2)])
        assert _stock(inventory)[BEANS] == 0

    def test_sequential_ids(self):
        engine, _, _, _, _ = _setup()
        first = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        second = engine.create_order("Bob", [OrderLineRequest(AMERICANO, 1)])
        assert (first.id, second.id) == (1, 2)

    def test_later_price_change_does_not_touch_order(self):
        engine, _, _, orders, menu = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        latte = menu.get_by_id(LATTE)
        latte.update_price(Money.of("9.99"))
        menu.save(latte)
        assert orders.get_by_id(order.id).total_price == Money.of("4.50")


class TestCreateOrderRejections:

    def test_insufficient_stock_leaves_everything_untouched(self):
        engine, db, inventory, orders, _ = _setup(milk="100")
        before = _stock(inventory)
        with pytest.raises(InsufficientStockError, match="Not enough Milk: need 300ml, have 100ml"):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 2)])
        assert _stock(inventory) == before
        assert orders.list_all() == []
        assert db.rollbacks == 1

    def test_earlier_deductions_rolled_back(self):
        engine, _, inventory, _, _ = _setup(milk="100")
        with pytest.raises(InsufficientStockError):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 2)])
        # beans and water were deducted before milk came up short
        assert inventory.deduct_calls == [BEANS, WATER, MILK]
        assert _stock(inventory)[BEANS] == Decimal("1000")

    def test_failed_order_does_not_consume_an_id(self):
        engine, _, _, _, _ = _setup(milk="100")
        with pytest.raises(InsufficientStockError):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 2)])
        order = engine.create_order("Bob", [OrderLineRequest(AMERICANO, 1)])
        assert order.id == 1

    def test_unknown_product_opens_no_transaction(self):
        engine, db, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Product #99 not found"):
            engine.create_order("Alice", [OrderLineRequest(99, 1)])
        assert db.commits == 0 and db.rollbacks == 0

    def test_validation_runs_before_lookup(self):
        engine, db, inventory, _, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            engine.create_order("Alice", [OrderLineRequest(99, 0)])
        assert inventory.deduct_calls == []

    def test_empty_order_rejected(self):
        engine, _, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="at least one item"):
            engine.create_order("Alice", [])


class TestCreateOrderStoreFailures:

    def test_begin_failure_is_infrastructure_error(self):
        engine, db, _, _, _ = _setup()
        db.begin_error = ConnectionError("database unavailable")
        with pytest.raises(InfrastructureError, match="Failed to start transaction") as exc_info:
            engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        assert exc_info.value.outcome_unknown is False

    def test_driver_error_mid_transaction_rolls_back(self):
        engine, db, inventory, orders, _ = _setup()
        orders.insert_error = RuntimeError("disk I/O error")
        with pytest.raises(InfrastructureError, match="disk I/O error"):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        assert _stock(inventory)[BEANS] == Decimal("1000")
        assert db.rollbacks == 1

    def test_commit_failure_reports_unknown_outcome(self):
        engine, db, _, _, _ = _setup()
        db.commit_error = RuntimeError("connection reset")
        with pytest.raises(InfrastructureError) as exc_info:
            engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        assert exc_info.value.outcome_unknown is True

    def test_rollback_failure_keeps_original_error(self):
        engine, db, _, _, _ = _setup(milk="0")
        db.rollback_error = RuntimeError("rollback failed")
        with pytest.raises(InsufficientStockError):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])

    def test_keyboard_interrupt_rolls_back_and_propagates(self):
        engine, db, inventory, _, _ = _setup()
        inventory.deduct_error = KeyboardInterrupt()
        with pytest.raises(KeyboardInterrupt):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        assert db.rollbacks == 1
        assert _stock(inventory)[BEANS] == Decimal("1000")


class TestCreateOrderCancellation:

    def test_cancelled_token_stops_before_begin(self):
        engine, db, inventory, _, _ = _setup()
        token = CancelToken()
        token.cancel("client went away")
        with pytest.raises(OperationCancelledError, match="client went away"):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 1)], cancel_token=token)
        assert inventory.deduct_calls == []
        assert db.rollbacks == 0

    def test_cancel_during_transaction_rolls_back(self):
        engine, db, inventory, orders, _ = _setup()
        token = CancelToken()
        original = inventory.conditional_deduct

        def deduct_then_cancel(scope, ingredient_id, amount):
            token.cancel()
            return original(scope, ingredient_id, amount)

        inventory.conditional_deduct = deduct_then_cancel  # type: ignore[method-assign]
        with pytest.raises(OperationCancelledError):
            engine.create_order("Alice", [OrderLineRequest(LATTE, 1)], cancel_token=token)
        assert _stock(inventory)[BEANS] == Decimal("1000")
        assert orders.list_all() == []
        assert db.rollbacks == 1

    def test_expired_deadline(self):
        engine, _, _, _, _ = _setup()
        with pytest.raises(OperationCancelledError, match="deadline exceeded"):
            engine.create_order(
                "Alice", [OrderLineRequest(LATTE, 1)], cancel_token=CancelToken(timeout=0)
            )


class TestIdempotency:

    def test_replay_returns_first_order_without_deducting_again(self):
        engine, _, inventory, orders, _ = _setup()
        first = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)], idempotency_key="k-1")
        second = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)], idempotency_key="k-1")
        assert second.id == first.id
        assert len(orders.list_all()) == 1
        assert _stock(inventory)[BEANS] == Decimal("982")

    def test_different_keys_create_different_orders(self):
        engine, _, _, orders, _ = _setup()
        engine.create_order("Alice", [OrderLineRequest(LATTE, 1)], idempotency_key="k-1")
        engine.create_order("Alice", [OrderLineRequest(LATTE, 1)], idempotency_key="k-2")
        assert len(orders.list_all()) == 2

    def test_concurrent_replays_create_one_order(self):
        engine, _, inventory, orders, _ = _setup()
        results = []

        def place():
            results.append(
                engine.create_order("Alice", [OrderLineRequest(LATTE, 1)], idempotency_key="same")
            )

        threads = [threading.Thread(target=place) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert {o.id for o in results} == {1}
        assert len(orders.list_all()) == 1
        assert _stock(inventory)[BEANS] == Decimal("982")


class TestConcurrentOrders:

    def test_never_oversells(self):
        # 100g of beans is enough for 5 lattes; 10 threads ask for one each.
        engine, _, inventory, orders, _ = _setup(beans="100")
        outcomes: list[str] = []
        lock = threading.Lock()

        def place(i: int) -> None:
            try:
                engine.create_order(f"Customer {i}", [OrderLineRequest(LATTE, 1)])
                result = "ok"
            except InsufficientStockError:
                result = "short"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=place, args=(i,)) for i in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 5
        assert outcomes.count("short") == 5
        assert _stock(inventory)[BEANS] == Decimal("10")
        assert len(orders.list_all()) == 5

    def test_two_parallel_orders_both_succeed(self):
        engine, _, inventory, _, _ = _setup()
        threads = [
            threading.Thread(
                target=engine.create_order, args=(name, [OrderLineRequest(LATTE, 2)])
            )
            for name in ("Alice", "Bob")
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert _stock(inventory) == {
            BEANS: Decimal("928"), WATER: Decimal("4200"), MILK: Decimal("2400"),
        }


class TestCloseOrder:

    def test_close_open_order(self):
        engine, _, _, orders, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        closed = engine.close_order(order.id)
        assert closed.status == OrderStatus.CLOSED
        assert orders.get_by_id(order.id).status == OrderStatus.CLOSED

    def test_close_twice_rejected(self):
        engine, _, _, _, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        engine.close_order(order.id)
        with pytest.raises(AlreadyClosedError, match="already closed"):
            engine.close_order(order.id)

    def test_close_does_not_touch_stock(self):
        engine, _, inventory, _, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        before = _stock(inventory)
        engine.close_order(order.id)
        assert _stock(inventory) == before

    def test_close_unknown_order(self):
        engine, _, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Order #5 not found"):
            engine.close_order(5)

    def test_concurrent_close_succeeds_once(self):
        engine, _, _, _, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        outcomes: list[str] = []

        def close():
            try:
                engine.close_order(order.id)
                outcomes.append("closed")
            except AlreadyClosedError:
                outcomes.append("rejected")

        threads = [threading.Thread(target=close) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert outcomes.count("closed") == 1


class TestCancelOrder:

    def test_cancel_returns_stock(self):
        engine, _, inventory, orders, _ = _setup()
        before = _stock(inventory)
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 2)])
        engine.cancel_order(order.id)
        assert _stock(inventory) == before
        assert orders.get_by_id(order.id).status == OrderStatus.CANCELLED

    def test_cancel_uses_recipe_recorded_on_order(self):
        engine, _, inventory, _, menu = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        latte = menu.get_by_id(LATTE)
        latte.update_recipe([RecipeLine.of(BEANS, 50)])
        menu.save(latte)
        engine.cancel_order(order.id)
        assert _stock(inventory)[BEANS] == Decimal("1000")
        assert _stock(inventory)[MILK] == Decimal("3000")

    def test_cancel_closed_order_rejected(self):
        engine, _, inventory, _, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        engine.close_order(order.id)
        with pytest.raises(InvalidTransitionError, match="in closed status"):
            engine.cancel_order(order.id)
        assert _stock(inventory)[BEANS] == Decimal("982")

    def test_cancel_twice_credits_once(self):
        engine, _, inventory, _, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        engine.cancel_order(order.id)
        with pytest.raises(InvalidTransitionError, match="already cancelled"):
            engine.cancel_order(order.id)
        assert _stock(inventory)[BEANS] == Decimal("1000")

    def test_cancel_skips_deleted_ingredient(self):
        engine, _, inventory, orders, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        inventory.delete(MILK)
        engine.cancel_order(order.id)
        assert _stock(inventory)[BEANS] == Decimal("1000")
        assert orders.get_by_id(order.id).status == OrderStatus.CANCELLED

    def test_cancelled_order_cannot_be_closed(self):
        engine, _, _, _, _ = _setup()
        order = engine.create_order("Alice", [OrderLineRequest(LATTE, 1)])
        engine.cancel_order(order.id)
        with pytest.raises(AlreadyClosedError, match="current status is cancelled"):
            engine.close_order(order.id)
