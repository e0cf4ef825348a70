"""CLI commands for ingredient stock."""

from __future__ import annotations

import click

from cafe.application.add_inventory_item import AddInventoryItemHandler, UpdateInventoryItemHandler
from cafe.application.delete_inventory_item import DeleteInventoryItemHandler
from cafe.application.dto import InventoryLineDTO
from cafe.application.restock_inventory import RestockInventoryHandler
from cafe.application.show_inventory import SORT_FIELDS, LeftoversHandler, ShowInventoryHandler
from cafe.domain.exceptions import DomainException, InfrastructureError
from cafe.infrastructure.bootstrap import Container


def _display_lines(lines: list[InventoryLineDTO]) -> None:
    click.echo(f"{'ID':<6} {'Ingredient':<20} {'Quantity':>12} {'Unit':<6}")
    click.echo("-" * 47)
    for line in lines:
        click.echo(f"{line.id:<6} {line.name:<20} {line.quantity:>12} {line.unit:<6}")


@click.command("add")
@click.option("--name", required=True, help="Ingredient name.")
@click.option("--quantity", required=True, help="Opening stock (e.g. 1000).")
@click.option("--unit", required=True, help="Unit of measure (g, ml, pcs).")
@click.pass_obj
def inventory_add(container: Container, name: str, quantity: str, unit: str) -> None:
    """Register a new ingredient."""
    handler = AddInventoryItemHandler(inventory=container.inventory)

    try:
        dto = handler.handle(name=name, quantity=quantity, unit=unit)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Ingredient #{dto.id} '{dto.name}' added with {dto.quantity}{dto.unit}")


@click.command("show")
@click.pass_obj
def inventory_show(container: Container) -> None:
    """Show current stock levels."""
    try:
        lines = ShowInventoryHandler(inventory=container.inventory).handle()
    except InfrastructureError as exc:
        raise click.ClickException(str(exc))

    if not lines:
        click.echo("No inventory records found.")
        return

    _display_lines(lines)


@click.command("update")
@click.option("--id", "ingredient_id", required=True, type=int, help="Ingredient ID.")
@click.option("--name", default=None, help="New name.")
@click.option("--unit", default=None, help="New unit.")
@click.pass_obj
def inventory_update(
    container: Container, ingredient_id: int, name: str | None, unit: str | None
) -> None:
    """Rename an ingredient or change its unit."""
    handler = UpdateInventoryItemHandler(inventory=container.inventory)

    try:
        dto = handler.handle(ingredient_id, name=name, unit=unit)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Ingredient #{dto.id} is now '{dto.name}' ({dto.unit})")


@click.command("restock")
@click.option("--id", "ingredient_id", required=True, type=int, help="Ingredient ID.")
@click.option("--amount", required=True, help="Amount delivered.")
@click.pass_obj
def inventory_restock(container: Container, ingredient_id: int, amount: str) -> None:
    """Add delivered stock to an ingredient."""
    handler = RestockInventoryHandler(
        inventory=container.inventory,
        unit_of_work=container.unit_of_work,
    )

    try:
        dto = handler.handle(ingredient_id, amount)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Ingredient #{dto.id} '{dto.name}' now at {dto.quantity}{dto.unit}")


@click.command("delete")
@click.option("--id", "ingredient_id", required=True, type=int, help="Ingredient ID.")
@click.pass_obj
def inventory_delete(container: Container, ingredient_id: int) -> None:
    """Delete an ingredient no menu item uses."""
    handler = DeleteInventoryItemHandler(inventory=container.inventory, menu=container.menu)

    try:
        handler.handle(ingredient_id)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Ingredient #{ingredient_id} deleted.")


@click.command("leftovers")
@click.option(
    "--sort-by", type=click.Choice(SORT_FIELDS), default="id", show_default=True
)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--page-size", type=int, default=10, show_default=True)
@click.pass_obj
def inventory_leftovers(container: Container, sort_by: str, page: int, page_size: int) -> None:
    """Show what is left in stock, a page at a time."""
    handler = LeftoversHandler(inventory=container.inventory)

    try:
        result = handler.handle(sort_by=sort_by, page=page, page_size=page_size)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    if not result.items:
        click.echo("No inventory records on this page.")
        return

    _display_lines(result.items)
    click.echo(f"Page {result.page} ({len(result.items)} of {result.total})")
    if result.has_next:
        click.echo(f"More: --page {result.page + 1}")
