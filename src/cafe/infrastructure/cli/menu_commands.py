"""CLI commands for the menu."""

from __future__ import annotations

import click

from cafe.application.add_menu_item import AddMenuItemHandler
from cafe.application.dto import MenuItemDTO
from cafe.application.show_menu import DeleteMenuItemHandler, ListMenuHandler, ShowMenuItemHandler
from cafe.application.update_menu_item import UpdateMenuItemHandler
from cafe.domain.exceptions import DomainException, InfrastructureError
from cafe.infrastructure.bootstrap import Container
from cafe.infrastructure.cli.parsing import parse_recipe


def _display_item(dto: MenuItemDTO) -> None:
    click.echo(f"Menu item #{dto.id} '{dto.name}'  {dto.price}")
    if dto.description:
        click.echo(f"  {dto.description}")
    click.echo(f"  {'Ingredient':<12} {'Per unit':>10}")
    for line in dto.ingredients:
        click.echo(f"  #{line.ingredient_id:<11} {line.quantity:>10}")


@click.command("add")
@click.option("--name", required=True, help="Menu item name.")
@click.option("--price", required=True, help="Price (e.g. 4.50).")
@click.option(
    "--ingredients", required=True, help="Recipe as 'IngredientID:Amount,IngredientID:Amount'."
)
@click.option("--description", default="", help="Short description.")
@click.pass_obj
def menu_add(
    container: Container, name: str, price: str, ingredients: str, description: str
) -> None:
    """Add a new item to the menu."""
    handler = AddMenuItemHandler(menu=container.menu, inventory=container.inventory)

    try:
        dto = handler.handle(
            name=name,
            price=price,
            ingredients=parse_recipe(ingredients),
            description=description,
        )
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Menu item #{dto.id} '{dto.name}' added at {dto.price}")


@click.command("list")
@click.pass_obj
def menu_list(container: Container) -> None:
    """List all menu items."""
    try:
        items = ListMenuHandler(menu=container.menu).handle()
    except InfrastructureError as exc:
        raise click.ClickException(str(exc))

    if not items:
        click.echo("No menu items found.")
        return

    click.echo(f"{'ID':<6} {'Name':<20} {'Price':>10}")
    click.echo("-" * 38)
    for item in items:
        click.echo(f"{item.id:<6} {item.name:<20} {item.price:>10}")


@click.command("show")
@click.option("--id", "product_id", required=True, type=int, help="Menu item ID.")
@click.pass_obj
def menu_show(container: Container, product_id: int) -> None:
    """Show a menu item with its recipe."""
    try:
        dto = ShowMenuItemHandler(menu=container.menu).handle(product_id)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    _display_item(dto)


@click.command("update")
@click.option("--id", "product_id", required=True, type=int, help="Menu item ID.")
@click.option("--name", default=None, help="New name.")
@click.option("--price", default=None, help="New price (e.g. 4.75).")
@click.option("--ingredients", default=None, help="New recipe as 'IngredientID:Amount,...'.")
@click.option("--description", default=None, help="New description.")
@click.pass_obj
def menu_update(
    container: Container,
    product_id: int,
    name: str | None,
    price: str | None,
    ingredients: str | None,
    description: str | None,
) -> None:
    """Update a menu item. Existing orders keep the price and recipe they were placed with."""
    handler = UpdateMenuItemHandler(menu=container.menu, inventory=container.inventory)

    try:
        dto = handler.handle(
            product_id=product_id,
            name=name,
            price=price,
            ingredients=parse_recipe(ingredients) if ingredients is not None else None,
            description=description,
        )
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Menu item #{dto.id} updated")
    _display_item(dto)


@click.command("delete")
@click.option("--id", "product_id", required=True, type=int, help="Menu item ID.")
@click.pass_obj
def menu_delete(container: Container, product_id: int) -> None:
    """Remove an item from the menu."""
    try:
        DeleteMenuItemHandler(menu=container.menu).handle(product_id)
    except (DomainException, InfrastructureError) as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Menu item #{product_id} deleted.")
