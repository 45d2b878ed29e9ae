"""Inventory commands."""

import click
from tillkit.domain.catalog import ProductService
from tillkit.domain.inventory import InventoryService


def _require_product(ctx, identifier: str):
    product = ProductService(ctx.obj["db"]).find_product(identifier)
    if product is None:
        click.echo(f"Error: Product '{identifier}' not found", err=True)
        ctx.exit(1)
    return product


@click.group()
def inventory_group():
    """Manage stock levels."""
    pass


@inventory_group.command("set")
@click.argument("identifier", metavar="SKU_OR_BARCODE")
@click.argument("quantity", type=int)
@click.option("--reorder-point", type=int, help="Quantity at which to reorder")
@click.pass_context
def set_stock(ctx, identifier: str, quantity: int, reorder_point: int | None):
    """Set the quantity on hand.

    Examples:
        tillkit inventory set MOUSE-01 25
        tillkit inventory set MOUSE-01 25 --reorder-point 5
    """
    service = InventoryService(ctx.obj["db"])
    product = _require_product(ctx, identifier)

    try:
        service.set_stock(product.id, quantity, reorder_point=reorder_point)
        click.echo(f"Stock for '{product.sku}' set to {quantity}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@inventory_group.command("adjust")
@click.argument("identifier", metavar="SKU_OR_BARCODE")
@click.argument("delta", type=int)
@click.pass_context
def adjust_stock(ctx, identifier: str, delta: int):
    """Add (or with a negative DELTA remove) stock.

    Examples:
        tillkit inventory adjust MOUSE-01 10
        tillkit inventory adjust MOUSE-01 -- -2
    """
    service = InventoryService(ctx.obj["db"])
    product = _require_product(ctx, identifier)

    new_quantity = service.adjust_stock(product.id, delta)
    if new_quantity is None:
        click.echo(
            f"Error: '{product.sku}' has no inventory record. Use 'inventory set' first.",
            err=True,
        )
        ctx.exit(1)
    click.echo(f"Stock for '{product.sku}' is now {new_quantity}")


@inventory_group.command("list")
@click.pass_context
def list_stock(ctx):
    """List stock levels."""
    db = ctx.obj["db"]
    records = InventoryService(db).list_stock()
    if not records:
        click.echo("No inventory records found.")
        return
    _print_records(db, records)


@inventory_group.command("low")
@click.pass_context
def low_stock(ctx):
    """List products at or below their reorder point."""
    db = ctx.obj["db"]
    records = InventoryService(db).list_low_stock()
    if not records:
        click.echo("No low stock.")
        return
    _print_records(db, records)


def _print_records(db, records):
    click.echo("\nInventory:")
    click.echo("-" * 60)
    for record in records:
        product = db.get_product(record.product_id)
        reorder = f" (reorder at {record.reorder_point})" if record.reorder_point is not None else ""
        click.echo(f"{product.sku:12s} | {product.name[:28]:28s} | {record.quantity_on_hand:5d}{reorder}")


def register_commands(cli):
    """Register inventory commands with main CLI."""
    cli.add_command(inventory_group, name="inventory")
