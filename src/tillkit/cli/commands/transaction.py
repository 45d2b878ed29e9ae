"""Transaction (completed sale) commands."""

import click
from tillkit.cli.customer_resolution import require_customer
from tillkit.cli.date_filters import date_range_options, resolve_cli_date_range
from tillkit.domain.checkout import CheckoutService
from tillkit.domain.receipt import render_receipt
from tillkit.domain.transaction import TransactionService
from tillkit.utils.amount_parser import format_money


@click.group()
def transaction_group():
    """Look up recorded sales."""
    pass


@transaction_group.command("list")
@click.option("--customer", "-c", help="Customer ID, number or phone")
@date_range_options
@click.option("--limit", "-n", type=int, help="Limit number of results")
@click.pass_context
def list_transactions(
    ctx,
    customer: str | None,
    start_date: str | None,
    end_date: str | None,
    limit: int | None,
    **periods,
):
    """List sales, newest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)

    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, **periods)

    customer_id = None
    if customer:
        customer_id = require_customer(ctx, customer).id

    transactions = service.list_transactions(start_date=start, end_date=end, customer_id=customer_id)
    if limit:
        transactions = transactions[:limit]

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo("\nTransactions:")
    click.echo("-" * 80)
    for t in transactions:
        when = t.created_at.strftime("%Y-%m-%d %H:%M") if t.created_at else ""
        payment = db.get_payment(t.id)
        method = payment.payment_method.value if payment else "-"
        click.echo(
            f"{t.transaction_number:20s} | {when:16s} | {format_money(t.total_amount):>12s} | "
            f"{method:14s} | {t.status}"
        )


@transaction_group.command("show")
@click.argument("identifier", metavar="TRANSACTION_NUMBER")
@click.pass_context
def show_transaction(ctx, identifier: str):
    """Reprint the receipt for a sale."""
    db = ctx.obj["db"]
    transaction = TransactionService(db).find_transaction(identifier)
    if transaction is None:
        click.echo(f"Error: Transaction '{identifier}' not found", err=True)
        ctx.exit(1)

    sale = CheckoutService(db).load_sale(transaction.transaction_number)
    click.echo(render_receipt(sale.receipt))
    if sale.payment is not None and sale.payment.authorization_code:
        click.echo(f"Authorization: {sale.payment.authorization_code}")
    if sale.payment is not None and sale.payment.card_last_four:
        click.echo(f"Card: **** {sale.payment.card_last_four}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
