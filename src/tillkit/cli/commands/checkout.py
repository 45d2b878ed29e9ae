"""One-shot checkout command."""

from decimal import Decimal

import click
from tillkit.cli.customer_resolution import require_customer
from tillkit.cli.error_handling import handle_domain_error
from tillkit.domain.cart import CartSession
from tillkit.domain.catalog import ProductService
from tillkit.domain.checkout import CheckoutRequest, CheckoutService
from tillkit.domain.entities import PaymentMethod
from tillkit.domain.receipt import render_receipt
from tillkit.utils.amount_parser import format_money, parse_non_negative_amount


def parse_item(item: str) -> tuple[str, int, str | None]:
    """Split SKU[:QTY[:DISCOUNT]] into its parts.

    Raises:
        ValueError: If the quantity is not a whole number
    """
    parts = item.split(":")
    if len(parts) > 3 or not parts[0].strip():
        raise ValueError(f"Invalid item '{item}', expected SKU[:QTY[:DISCOUNT]]")
    identifier = parts[0].strip()
    quantity = 1
    if len(parts) > 1 and parts[1].strip():
        try:
            quantity = int(parts[1])
        except ValueError:
            raise ValueError(f"Invalid quantity in item '{item}'")
    discount = parts[2].strip() if len(parts) > 2 and parts[2].strip() else None
    return identifier, quantity, discount


@click.command("checkout")
@click.option("--customer", "-c", required=True, help="Customer ID, number or phone")
@click.option(
    "--item",
    "-i",
    "items",
    multiple=True,
    required=True,
    help="SKU[:QTY[:DISCOUNT]], may be repeated",
)
@click.option("--offer", "offer_code", help="Offer code to apply")
@click.option("--cashback", "cashback_amount", help="Cashback to redeem")
@click.option(
    "--payment",
    "-p",
    type=click.Choice([m.value for m in PaymentMethod]),
    default=PaymentMethod.CASH.value,
    show_default=True,
    help="Payment method",
)
@click.option("--received", help="Cash received from the customer")
@click.option("--card-number", help="Card number or its last four digits")
@click.option("--auth-code", help="Authorization code from the payment terminal")
@click.option("--transaction-number", help="Reuse a reserved number; a repeat returns the stored sale")
@click.option("--cashier", help="Cashier name")
@click.pass_context
def checkout(
    ctx,
    customer: str,
    items: tuple[str, ...],
    offer_code: str | None,
    cashback_amount: str | None,
    payment: str,
    received: str | None,
    card_number: str | None,
    auth_code: str | None,
    transaction_number: str | None,
    cashier: str | None,
):
    """Ring up and settle a sale, then print the receipt.

    Examples:
        tillkit checkout -c CUST-000001 -i MOUSE-01 -i CABLE-C:2 --received 100
        tillkit checkout -c 9876543210 -i MOUSE-01:1:5 --offer SAVE20 -p card --card-number 4111111111111111
        tillkit checkout -c 1 -i MOUSE-01 --cashback 10 -p upi
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    customer_id = require_customer(ctx, customer).id
    session = CartSession(ProductService(db))
    session.customer_id = customer_id

    try:
        for item in items:
            identifier, quantity, discount = parse_item(item)
            product = session.add(identifier, quantity)
            if discount is not None:
                line = session.cart.find(product.id)
                session.set_discount(product.id, line.discount + parse_non_negative_amount(discount))
        amount_received = parse_non_negative_amount(received) if received else None
        cashback = parse_non_negative_amount(cashback_amount) if cashback_amount else Decimal("0")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    service = CheckoutService(db, cashback_rate=settings.cashback_rate)
    request = CheckoutRequest(
        cart=session.cart,
        customer_id=session.customer_id,
        payment_method=PaymentMethod(payment),
        amount_received=amount_received,
        offer_code=offer_code,
        cashback_to_redeem=cashback,
        card_number=card_number,
        authorization_code=auth_code,
        transaction_number=transaction_number,
        cashier=cashier,
    )

    try:
        sale = service.settle(request)
    except ValueError as e:
        handle_domain_error(ctx, e)

    session.clear()
    if sale.replayed:
        click.echo(f"Transaction {sale.transaction.transaction_number} was already recorded.")
    click.echo(render_receipt(sale.receipt))
    if sale.cashback_earned:
        click.echo(f"Cashback earned: {format_money(sale.cashback_earned)}")


def register_commands(cli):
    """Register checkout command with main CLI."""
    cli.add_command(checkout, name="checkout")
