"""CLI error handling helpers."""

import click

from tillkit.domain.errors import DomainError, SettlementError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure.

    A failed settlement write exits with status 2 so scripts can tell it
    apart from a sale that was refused before anything was written.
    """
    click.echo(f"Error: {error}", err=True)
    if isinstance(error, SettlementError):
        click.echo("No part of the sale was recorded.", err=True)
        ctx.exit(2)
    ctx.exit(1)
