"""CLI commands for sales reports."""

from __future__ import annotations

from datetime import datetime

import click

from cafe.application.reports import (
    PERIODS,
    ItemsByPeriodHandler,
    OrderedItemsHandler,
    PopularItemsHandler,
    TotalSalesHandler,
)
from cafe.domain.exceptions import DomainException, InfrastructureError
from cafe.infrastructure.bootstrap import Container

DATE = click.DateTime(formats=["%Y-%m-%d"])


@click.command("sales")
@click.pass_obj
def report_sales(container: Container) -> None:
    """Total takings over closed orders."""
    try:
        report = TotalSalesHandler(order_store=container.orders).handle()
    except InfrastructureError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"Closed orders: {report.closed_orders}")
    click.echo(f"Total sales:   {report.total_sales}")


@click.command("popular")
@click.option("--limit", type=int, default=10, show_default=True, help="How many items to show.")
@click.pass_obj
def report_popular(container: Container, limit: int) -> None:
    """Menu items ranked by cups ordered."""
    try:
        items = PopularItemsHandler(order_store=container.orders).handle(limit=limit)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    if not items:
        click.echo("No orders yet.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Qty':>6}")
    click.echo("-" * 34)
    for item in items:
        click.echo(f"{item.product_id:<6} {item.product_name:<20} {item.quantity:>6}")


@click.command("items")
@click.option("--start", type=DATE, default=None, help="First day (YYYY-MM-DD).")
@click.option("--end", type=DATE, default=None, help="Last day (YYYY-MM-DD).")
@click.pass_obj
def report_items(container: Container, start: datetime | None, end: datetime | None) -> None:
    """Units ordered per menu item between two dates."""
    handler = OrderedItemsHandler(order_store=container.orders)

    try:
        items = handler.handle(
            start=start.date() if start is not None else None,
            end=end.date() if end is not None else None,
        )
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    if not items:
        click.echo("No items ordered in this range.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Qty':>6}")
    click.echo("-" * 34)
    for item in items:
        click.echo(f"{item.product_id:<6} {item.product_name:<20} {item.quantity:>6}")


@click.command("items-by-period")
@click.option(
    "--period", type=click.Choice(PERIODS), required=True,
    help="Bucket by day of a month or by month of a year.",
)
@click.option("--month", default=None, help="Month name or number (required for --period day).")
@click.option("--year", type=int, default=None, help="Year (defaults to the current one).")
@click.pass_obj
def report_items_by_period(
    container: Container, period: str, month: str | None, year: int | None
) -> None:
    """Units ordered per day or per month."""
    handler = ItemsByPeriodHandler(order_store=container.orders)

    try:
        report = handler.handle(period=period, month=month, year=year)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    title = f"{report.month} {report.year}" if report.month else str(report.year)
    click.echo(f"Items ordered per {report.period}, {title}")
    for bucket in report.buckets:
        click.echo(f"  {bucket.key:<10} {bucket.count:>6}")
