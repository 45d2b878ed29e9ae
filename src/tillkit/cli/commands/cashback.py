"""Cashback commands."""

import click
from tillkit.cli.customer_resolution import require_customer
from tillkit.domain.cashback import CashbackService
from tillkit.utils.amount_parser import format_money, parse_non_negative_amount


def _service(ctx) -> CashbackService:
    return CashbackService(ctx.obj["db"], earning_rate=ctx.obj["settings"].cashback_rate)


@click.group()
def cashback_group():
    """View and adjust customer cashback."""
    pass


@cashback_group.command("show")
@click.argument("customer")
@click.pass_context
def show_balance(ctx, customer: str):
    """Show a customer's cashback balance."""
    customer_id = require_customer(ctx, customer).id
    account = _service(ctx).get_account(customer_id)

    if account is None:
        click.echo("Balance: 0.00 (no cashback yet)")
        return

    click.echo(f"Balance: {format_money(account.current_balance)}")
    click.echo(f"  Earned: {format_money(account.total_earned)}")
    click.echo(f"  Redeemed: {format_money(account.total_redeemed)}")
    click.echo(f"  Expired: {format_money(account.total_expired)}")


@cashback_group.command("history")
@click.argument("customer")
@click.option("--limit", type=int, default=50, show_default=True, help="Number of entries")
@click.pass_context
def show_history(ctx, customer: str, limit: int):
    """Show a customer's cashback ledger, newest first."""
    customer_id = require_customer(ctx, customer).id
    entries = _service(ctx).history(customer_id, limit=limit)

    if not entries:
        click.echo("No cashback activity.")
        return

    for e in entries:
        when = e.created_at.strftime("%Y-%m-%d %H:%M") if e.created_at else ""
        click.echo(
            f"{when:16s} | {e.entry_type.value:8s} | {format_money(e.amount):>10s} | "
            f"balance {format_money(e.balance_after):>10s} | {e.description or ''}"
        )


@cashback_group.command("credit")
@click.argument("customer")
@click.argument("amount")
@click.option("--reason", required=True, help="Why the credit is given")
@click.pass_context
def credit_cashback(ctx, customer: str, amount: str, reason: str):
    """Credit cashback to a customer by hand.

    Examples:
        tillkit cashback credit CUST-000001 25 --reason "Late delivery"
    """
    customer_id = require_customer(ctx, customer).id

    try:
        value = parse_non_negative_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        account = _service(ctx).credit(customer_id, value, reason)
        click.echo(f"Credited {format_money(value)}. New balance: {format_money(account.current_balance)}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@cashback_group.command("expire")
@click.argument("customer")
@click.argument("amount")
@click.pass_context
def expire_cashback(ctx, customer: str, amount: str):
    """Expire part of a customer's balance."""
    customer_id = require_customer(ctx, customer).id

    try:
        value = parse_non_negative_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        account = _service(ctx).expire(customer_id, value)
        click.echo(f"Expired {format_money(value)}. New balance: {format_money(account.current_balance)}")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register cashback commands with main CLI."""
    cli.add_command(cashback_group, name="cashback")
