"""End-to-end tests for the click CLI, run with CliRunner on a temp data dir."""

from datetime import datetime, timezone

import pytest
from click.testing import CliRunner

from cafe.application.reports import MONTHS
from cafe.infrastructure.cli.main import cli


@pytest.fixture(params=["json", "sql"])
def run(request, tmp_path):
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(
            cli, ["--storage", request.param, "--data-dir", str(tmp_path), *args]
        )

    return invoke


@pytest.fixture
def stocked(run):
    assert run("inventory", "add", "--name", "Coffee Beans", "--quantity", "1000", "--unit", "g").exit_code == 0
    assert run("inventory", "add", "--name", "Water", "--quantity", "5000", "--unit", "ml").exit_code == 0
    assert run("inventory", "add", "--name", "Milk", "--quantity", "3000", "--unit", "ml").exit_code == 0
    result = run(
        "menu", "add", "--name", "Latte", "--price", "4.50",
        "--ingredients", "1:18,2:200,3:150",
    )
    assert result.exit_code == 0, result.output
    assert "Menu item #1 'Latte' added at $4.50" in result.output
    return run


class TestOrderCommands:

    def test_create_order_deducts_stock(self, stocked):
        result = stocked("order", "create", "--customer", "Alice", "--items", "1:2")
        assert result.exit_code == 0, result.output
        assert "Order #1 created" in result.output
        assert "$9.00" in result.output

        stock = stocked("inventory", "show").output
        assert "964" in stock
        assert "4600" in stock
        assert "2700" in stock

    def test_insufficient_stock(self, stocked):
        result = stocked("order", "create", "--customer", "Alice", "--items", "1:30")
        assert result.exit_code == 1
        assert "Not enough" in result.output
        assert "No orders found." in stocked("order", "list").output

    def test_bad_items_format(self, stocked):
        result = stocked("order", "create", "--customer", "Alice", "--items", "1-2")
        assert result.exit_code == 2
        assert "Expected 'ID:Quantity'" in result.output

    def test_unknown_product(self, stocked):
        result = stocked("order", "create", "--customer", "Alice", "--items", "7:1")
        assert result.exit_code == 1
        assert "Product #7 not found in menu" in result.output

    def test_close_twice(self, stocked):
        stocked("order", "create", "--customer", "Alice", "--items", "1:1")
        assert stocked("order", "close", "--id", "1").exit_code == 0
        result = stocked("order", "close", "--id", "1")
        assert result.exit_code == 1
        assert "already closed" in result.output

    def test_cancel_returns_stock(self, stocked):
        stocked("order", "create", "--customer", "Alice", "--items", "1:1")
        result = stocked("order", "cancel", "--id", "1")
        assert result.exit_code == 0, result.output
        assert "1000" in stocked("inventory", "show").output
        assert "cancelled" in stocked("order", "show", "--id", "1").output

    def test_idempotent_create(self, stocked):
        for _ in range(2):
            result = stocked(
                "order", "create", "--customer", "Alice", "--items", "1:1",
                "--idempotency-key", "till-1-0042",
            )
            assert result.exit_code == 0, result.output
        listing = stocked("order", "list").output
        assert "Alice" in listing
        assert listing.count("open") == 1

    def test_delete_order(self, stocked):
        stocked("order", "create", "--customer", "Alice", "--items", "1:1")
        result = stocked("order", "delete", "--id", "1", "--yes")
        assert result.exit_code == 0, result.output
        assert stocked("order", "show", "--id", "1").exit_code == 1


class TestMenuAndInventoryCommands:

    def test_menu_update_and_show(self, stocked):
        result = stocked("menu", "update", "--id", "1", "--price", "4.75")
        assert result.exit_code == 0, result.output
        assert "$4.75" in stocked("menu", "list").output

    def test_menu_add_unknown_ingredient(self, stocked):
        result = stocked("menu", "add", "--name", "Mocha", "--price", "5", "--ingredients", "9:20")
        assert result.exit_code == 1
        assert "Ingredient #9 has no inventory record" in result.output

    def test_restock(self, stocked):
        result = stocked("inventory", "restock", "--id", "3", "--amount", "500")
        assert result.exit_code == 0, result.output
        assert "now at 3500ml" in result.output

    def test_delete_ingredient_in_use(self, stocked):
        result = stocked("inventory", "delete", "--id", "3")
        assert result.exit_code == 1
        assert "used by menu item 'Latte'" in result.output

    def test_leftovers(self, stocked):
        result = stocked("inventory", "leftovers", "--sort-by", "quantity", "--page-size", "2")
        assert result.exit_code == 0, result.output
        assert result.output.index("Water") < result.output.index("Milk")
        assert "Coffee Beans" not in result.output
        assert "More: --page 2" in result.output


class TestReportCommands:

    def test_sales_and_popular(self, stocked):
        stocked("order", "create", "--customer", "Alice", "--items", "1:2")
        stocked("order", "create", "--customer", "Bob", "--items", "1:1")
        stocked("order", "close", "--id", "1")

        sales = stocked("report", "sales").output
        assert "Closed orders: 1" in sales
        assert "$9.00" in sales

        popular = stocked("report", "popular").output
        assert "Latte" in popular
        assert "3" in popular

    def test_ordered_items_and_period_buckets(self, stocked):
        stocked("order", "create", "--customer", "Alice", "--items", "1:2")
        stocked("order", "create", "--customer", "Bob", "--items", "1:4")
        stocked("order", "cancel", "--id", "2")
        today = datetime.now(timezone.utc)

        items = stocked("report", "items", "--start", today.strftime("%Y-%m-%d"))
        assert items.exit_code == 0, items.output
        assert "Latte" in items.output
        assert "     2" in items.output

        assert "No items ordered" in stocked("report", "items", "--end", "2000-01-01").output

        by_month = stocked("report", "items-by-period", "--period", "month")
        assert by_month.exit_code == 0, by_month.output
        assert f"  {MONTHS[today.month - 1]:<10} {2:>6}" in by_month.output

        by_day = stocked(
            "report", "items-by-period", "--period", "day",
            "--month", str(today.month), "--year", str(today.year),
        )
        assert f"  {str(today.day):<10} {2:>6}" in by_day.output

    def test_report_parameter_errors(self, stocked):
        result = stocked("report", "items", "--start", "2026-02-01", "--end", "2026-01-01")
        assert result.exit_code == 1
        assert "is after end date" in result.output

        result = stocked("report", "items-by-period", "--period", "day")
        assert result.exit_code == 1
        assert "Month is required" in result.output


class TestStoreFailures:

    @pytest.mark.parametrize("args", [
        ("order", "show", "--id", "1"),
        ("order", "delete", "--id", "1", "--yes"),
        ("menu", "list"),
        ("menu", "delete", "--id", "1"),
        ("inventory", "show"),
        ("inventory", "update", "--id", "1", "--name", "Arabica"),
        ("inventory", "restock", "--id", "1", "--amount", "5"),
        ("report", "sales"),
        ("report", "items-by-period", "--period", "month", "--year", "2026"),
    ])
    def test_unreadable_store_is_reported_not_raised(self, tmp_path, args):
        runner = CliRunner()
        base = ["--storage", "json", "--data-dir", str(tmp_path)]
        assert runner.invoke(cli, [*base, "inventory", "show"]).exit_code == 0
        (tmp_path / "cafe.json").write_text("{not json", encoding="utf-8")

        result = runner.invoke(cli, [*base, *args])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error:" in result.output
