"""Customer management commands."""

import click
from tillkit.cli.customer_resolution import require_customer
from tillkit.domain.cashback import CashbackService
from tillkit.domain.customer import CustomerService
from tillkit.utils.amount_parser import format_money


@click.group()
def customer_group():
    """Manage customers."""
    pass


@customer_group.command("add")
@click.argument("first_name")
@click.option("--last-name", default="", help="Last name")
@click.option("--phone", required=True, help="Phone number (must be unique)")
@click.option("--email", help="Email address")
@click.pass_context
def add_customer(ctx, first_name: str, last_name: str, phone: str, email: str | None):
    """Register a customer.

    Examples:
        tillkit customer add Asha --last-name Rao --phone 9876543210
    """
    db = ctx.obj["db"]
    service = CustomerService(db)

    try:
        customer_id = service.create_customer(
            first_name=first_name, last_name=last_name, phone=phone, email=email
        )
        customer = service.get_customer(customer_id)
        click.echo(f"Created customer '{customer.full_name}' ({customer.customer_number}, ID: {customer_id})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@customer_group.command("list")
@click.pass_context
def list_customers(ctx):
    """List all customers."""
    db = ctx.obj["db"]
    service = CustomerService(db)

    customers = service.list_customers()
    if not customers:
        click.echo("No customers found.")
        return

    click.echo("\nCustomers:")
    click.echo("-" * 80)
    for c in customers:
        click.echo(
            f"{c.customer_number:12s} | {c.full_name[:28]:28s} | {c.phone:15s} | "
            f"{format_money(c.total_purchases):>12s}"
        )


@customer_group.command("show")
@click.argument("customer")
@click.pass_context
def show_customer(ctx, customer: str):
    """Show a customer by ID, customer number or phone."""
    c = require_customer(ctx, customer)
    account = CashbackService(ctx.obj["db"]).get_account(c.id)

    click.echo(f"Customer {c.customer_number}: {c.full_name}")
    click.echo(f"  Phone: {c.phone}")
    if c.email:
        click.echo(f"  Email: {c.email}")
    click.echo(f"  Total purchases: {format_money(c.total_purchases)}")
    if c.last_purchase_at:
        click.echo(f"  Last purchase: {c.last_purchase_at.strftime('%Y-%m-%d %H:%M')}")
    balance = account.current_balance if account else 0
    click.echo(f"  Cashback balance: {format_money(balance)}")


def register_commands(cli):
    """Register customer commands with main CLI."""
    cli.add_command(customer_group, name="customer")
