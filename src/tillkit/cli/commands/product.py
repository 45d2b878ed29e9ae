"""Product catalog commands."""

import click
from tillkit.domain.catalog import ProductService
from tillkit.domain.inventory import InventoryService
from tillkit.utils.amount_parser import format_money, parse_non_negative_amount


@click.group()
def product_group():
    """Manage the product catalog."""
    pass


@product_group.command("add")
@click.argument("sku")
@click.argument("name")
@click.option("--price", required=True, help="Unit price before tax (e.g., 49.99)")
@click.option("--tax-rate", default="0", show_default=True, help="Tax rate in percent")
@click.option("--barcode", help="Barcode for scanning")
@click.option("--stock", type=int, help="Initial quantity on hand")
@click.pass_context
def add_product(
    ctx,
    sku: str,
    name: str,
    price: str,
    tax_rate: str,
    barcode: str | None,
    stock: int | None,
):
    """Add a product to the catalog.

    Examples:
        tillkit product add MOUSE-01 "Wireless Mouse" --price 29.99 --tax-rate 18
        tillkit product add CABLE-C "USB-C Cable" --price 12.99 --barcode 890123 --stock 40
    """
    db = ctx.obj["db"]
    service = ProductService(db)

    try:
        unit_price = parse_non_negative_amount(price)
        rate = parse_non_negative_amount(tax_rate)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        product_id = service.create_product(
            sku=sku,
            name=name,
            unit_price=unit_price,
            tax_rate=rate,
            barcode=barcode,
            initial_stock=stock,
        )
        click.echo(f"Created product '{name}' (ID: {product_id}, SKU: {sku})")
        if stock is not None:
            click.echo(f"Stock set to {stock}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@product_group.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive products")
@click.pass_context
def list_products(ctx, include_inactive: bool):
    """List products with price and stock."""
    db = ctx.obj["db"]
    service = ProductService(db)
    inventory_service = InventoryService(db)

    products = service.list_products(include_inactive=include_inactive)
    if not products:
        click.echo("No products found.")
        return

    click.echo("\nProducts:")
    click.echo("-" * 80)
    for p in products:
        stock = inventory_service.get_stock(p.id)
        stock_text = str(stock.quantity_on_hand) if stock else "-"
        status = "" if p.status == "active" else f" [{p.status}]"
        click.echo(
            f"ID: {p.id:3d} | {p.sku:12s} | {p.name[:24]:24s} | "
            f"{format_money(p.unit_price):>10s} | tax {p.tax_rate:.2f}% | stock {stock_text}{status}"
        )


@product_group.command("search")
@click.argument("query")
@click.pass_context
def search_products(ctx, query: str):
    """Search products by name, SKU or barcode."""
    db = ctx.obj["db"]
    service = ProductService(db)

    products = service.search_products(query)
    if not products:
        click.echo(f"No products match '{query}'.")
        return

    for p in products:
        click.echo(f"{p.sku:12s} | {p.name:30s} | {format_money(p.unit_price):>10s}")


@product_group.command("show")
@click.argument("identifier", metavar="SKU_OR_BARCODE")
@click.pass_context
def show_product(ctx, identifier: str):
    """Show one product."""
    db = ctx.obj["db"]
    service = ProductService(db)
    inventory_service = InventoryService(db)

    p = service.find_product(identifier)
    if p is None:
        click.echo(f"Error: Product '{identifier}' not found", err=True)
        ctx.exit(1)

    stock = inventory_service.get_stock(p.id)
    click.echo(f"Product {p.id}: {p.name}")
    click.echo(f"  SKU: {p.sku}")
    if p.barcode:
        click.echo(f"  Barcode: {p.barcode}")
    click.echo(f"  Price: {format_money(p.unit_price)}")
    click.echo(f"  Tax rate: {p.tax_rate:.2f}%")
    click.echo(f"  Status: {p.status}")
    click.echo(f"  Stock: {stock.quantity_on_hand if stock else 'not tracked'}")


@product_group.command("deactivate")
@click.argument("identifier", metavar="SKU_OR_BARCODE")
@click.pass_context
def deactivate_product(ctx, identifier: str):
    """Stop selling a product. Past sales keep referring to it."""
    db = ctx.obj["db"]
    service = ProductService(db)

    p = service.find_product(identifier)
    if p is None:
        click.echo(f"Error: Product '{identifier}' not found", err=True)
        ctx.exit(1)

    try:
        service.deactivate_product(p.id)
        click.echo(f"Deactivated product '{p.name}'")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register product commands with main CLI."""
    cli.add_command(product_group, name="product")
