"""Command-line entry point.

Every option also reads its ``CAFE_*`` environment variable, so a flag
overrides the environment and the environment overrides the defaults.
"""

from pathlib import Path

import click

from cafe.infrastructure.bootstrap import build_container
from cafe.infrastructure.cli.inventory_commands import (
    inventory_add,
    inventory_delete,
    inventory_leftovers,
    inventory_restock,
    inventory_show,
    inventory_update,
)
from cafe.infrastructure.cli.menu_commands import (
    menu_add,
    menu_delete,
    menu_list,
    menu_show,
    menu_update,
)
from cafe.infrastructure.cli.order_commands import (
    order_cancel,
    order_close,
    order_create,
    order_delete,
    order_list,
    order_show,
)
from cafe.infrastructure.cli.report_commands import (
    report_items,
    report_items_by_period,
    report_popular,
    report_sales,
)
from cafe.infrastructure.config import DEFAULT_DATA_DIR, LOG_FORMATS, STORAGE_BACKENDS, Settings
from cafe.infrastructure.logging import add_context, configure_logging

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@click.group()
@click.option(
    "--storage",
    envvar="CAFE_STORAGE",
    type=click.Choice(STORAGE_BACKENDS, case_sensitive=False),
    default="json",
    show_default=True,
    help="Storage backend.",
)
@click.option(
    "--data-dir",
    envvar="CAFE_DATA_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_DATA_DIR,
    help="Directory holding cafe.json / cafe.db.",
)
@click.option(
    "--database-url",
    envvar="CAFE_DATABASE_URL",
    default=None,
    help="SQLAlchemy URL for the sql backend (defaults to SQLite in the data dir).",
)
@click.option(
    "--log-level",
    envvar="CAFE_LOG_LEVEL",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
)
@click.option(
    "--log-format",
    envvar="CAFE_LOG_FORMAT",
    type=click.Choice(LOG_FORMATS, case_sensitive=False),
    default="console",
    show_default=True,
)
@click.pass_context
def cli(
    ctx: click.Context,
    storage: str,
    data_dir: Path,
    database_url: str | None,
    log_level: str,
    log_format: str,
) -> None:
    """Cafe: order fulfillment against ingredient stock"""
    settings = Settings(
        storage=storage.lower(),
        data_dir=data_dir,
        database_url=database_url or None,
        log_level=log_level.upper(),
        log_format=log_format.lower(),
    )
    configure_logging(settings.log_level, settings.log_format)
    add_context(storage=settings.storage)
    ctx.obj = build_container(settings)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def menu() -> None:
    """Manage the menu."""


@cli.group()
def inventory() -> None:
    """Manage ingredient stock."""


@cli.group()
def report() -> None:
    """Sales reports."""


# Register subcommands
order.add_command(order_cancel)
order.add_command(order_close)
order.add_command(order_create)
order.add_command(order_delete)
order.add_command(order_list)
order.add_command(order_show)
menu.add_command(menu_add)
menu.add_command(menu_delete)
menu.add_command(menu_list)
menu.add_command(menu_show)
menu.add_command(menu_update)
inventory.add_command(inventory_add)
inventory.add_command(inventory_delete)
inventory.add_command(inventory_leftovers)
inventory.add_command(inventory_restock)
inventory.add_command(inventory_show)
inventory.add_command(inventory_update)
report.add_command(report_items)
report.add_command(report_items_by_period)
report.add_command(report_popular)
report.add_command(report_sales)
