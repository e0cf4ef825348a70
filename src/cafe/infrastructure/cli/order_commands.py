"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from cafe.application.cancel_order import CancelOrderHandler
from cafe.application.close_order import CloseOrderHandler
from cafe.application.create_order import CreateOrderHandler
from cafe.application.delete_order import DeleteOrderHandler
from cafe.application.dto import OrderDTO
from cafe.application.show_order import ListOrdersHandler, ShowOrderHandler
from cafe.domain.exceptions import DomainException, InfrastructureError
from cafe.infrastructure.bootstrap import Container
from cafe.infrastructure.cli.parsing import parse_order_lines


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Customer: {dto.customer_name}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo()
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {dto.total:>20}")


@click.command("create")
@click.option("--customer", required=True, help="Customer name.")
@click.option("--items", required=True, help="Items as 'ProductID:Qty,ProductID:Qty'.")
@click.option("--idempotency-key", default=None, help="Replays return the first order.")
@click.option("--timeout", type=float, default=None, help="Give up after this many seconds.")
@click.pass_obj
def order_create(
    container: Container,
    customer: str,
    items: str,
    idempotency_key: str | None,
    timeout: float | None,
) -> None:
    """Place an order and deduct its ingredients from stock."""
    lines = parse_order_lines(items)
    handler = CreateOrderHandler(container.engine)

    try:
        dto = handler.handle(
            customer_name=customer,
            lines=lines,
            idempotency_key=idempotency_key,
            timeout=timeout,
        )
    except InfrastructureError as exc:
        if exc.outcome_unknown:
            raise click.ClickException(
                f"{exc} (the order may have been saved; retry with the same --idempotency-key)"
            )
        raise click.ClickException(str(exc))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  (status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@click.pass_obj
def order_show(container: Container, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_store=container.orders)

    try:
        dto = handler.handle(order_id)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="Only orders in this status (open, closed, cancelled).")
@click.pass_obj
def order_list(container: Container, status: str | None) -> None:
    """List orders, newest first."""
    handler = ListOrdersHandler(order_store=container.orders)

    try:
        orders = handler.handle(status=status)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Customer':<20} {'Status':<10} {'Total':>10}  Created")
    click.echo("-" * 70)
    for dto in orders:
        click.echo(
            f"{dto.id:<6} {dto.customer_name:<20} {dto.status:<10} {dto.total:>10}  {dto.created_at}"
        )


@click.command("close")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to close.")
@click.pass_obj
def order_close(container: Container, order_id: int) -> None:
    """Close an open order (it now counts towards sales)."""
    handler = CloseOrderHandler(container.engine)

    try:
        handler.handle(order_id)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} closed.")


@click.command("cancel")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to cancel.")
@click.pass_obj
def order_cancel(container: Container, order_id: int) -> None:
    """Cancel an open order and return its ingredients to stock."""
    handler = CancelOrderHandler(container.engine)

    try:
        handler.handle(order_id)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} cancelled, ingredients returned to stock.")


@click.command("delete")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to delete.")
@click.confirmation_option(prompt="Delete this order? Stock is not returned.")
@click.pass_obj
def order_delete(container: Container, order_id: int) -> None:
    """Delete an order record (no stock is returned)."""
    handler = DeleteOrderHandler(order_store=container.orders)

    try:
        handler.handle(order_id)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order_id} deleted.")
