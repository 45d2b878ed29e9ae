"""CLI helper for looking up the customer a command refers to."""

import click
from tillkit.domain.customer import CustomerService
from tillkit.domain.entities import Customer


def require_customer(ctx: click.Context, reference: str) -> Customer:
    """Find a customer by ID, customer number or phone, or exit with an error."""
    customer = CustomerService(ctx.obj["db"]).find_customer(reference)
    if customer is None:
        click.echo(
            f"Error: Customer '{reference}' not found. "
            "Use an ID, a customer number (CUST-000001) or a phone number.",
            err=True,
        )
        ctx.exit(1)
    return customer
