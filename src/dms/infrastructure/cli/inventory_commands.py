"""CLI commands for inventory management."""

from __future__ import annotations

import click

from dms.application.set_inventory import RemoveInventoryHandler, SetInventoryHandler
from dms.application.show_inventory import ShowInventoryHandler
from dms.domain.exceptions import DomainException
from dms.infrastructure.bootstrap import inventory_repository

ITEM_TYPES = click.Choice(["manufacturing", "bought_out"], case_sensitive=False)


@click.command("set")
@click.option("--type", "item_type", required=True, type=ITEM_TYPES, help="Item kind.")
@click.option("--id", "item_id", required=True, help="Item ID.")
@click.option("--quantity", required=True, type=int, help="Available quantity.")
@click.option("--code", default=None, help="Item code (required for new items).")
@click.option("--name", default=None, help="Item name (required for new items).")
def inventory_set(
    item_type: str,
    item_id: str,
    quantity: int,
    code: str | None,
    name: str | None,
) -> None:
    """Set the available quantity of an item, creating it if needed."""
    handler = SetInventoryHandler(inventory_repo=inventory_repository())

    try:
        record = handler.handle(item_type, item_id, quantity, code=code, name=name)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Inventory for '{record.code}' set to {record.available_quantity}")


@click.command("remove")
@click.option("--type", "item_type", required=True, type=ITEM_TYPES, help="Item kind.")
@click.option("--id", "item_id", required=True, help="Item ID.")
def inventory_remove(item_type: str, item_id: str) -> None:
    """Remove an inventory record."""
    handler = RemoveInventoryHandler(inventory_repo=inventory_repository())

    try:
        removed = handler.handle(item_type, item_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not removed:
        raise click.ClickException(f"No {item_type} item with ID '{item_id}'")
    click.echo(f"Removed {item_type} item '{item_id}'")


@click.command("show")
@click.option("--type", "item_type", default=None, type=ITEM_TYPES, help="Only this kind.")
def inventory_show(item_type: str | None) -> None:
    """Show current inventory levels."""
    handler = ShowInventoryHandler(inventory_repo=inventory_repository())
    lines = handler.handle(item_type)

    if not lines:
        click.echo("No inventory records found.")
        return

    click.echo(f"{'ID':<10} {'Code':<12} {'Name':<24} {'Kind':<14} {'Available':>10}")
    click.echo("-" * 74)
    for line in lines:
        click.echo(
            f"{line.item_id:<10} {line.code:<12} {line.name:<24} "
            f"{line.kind:<14} {line.available:>10}"
        )
