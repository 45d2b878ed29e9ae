"""Main CLI entry point."""

import click
from tillkit.config import configure_logging, load_settings
from tillkit.database.factories import create_database

# Import and register all commands at module level
from tillkit.cli.commands import (
    product,
    inventory,
    customer,
    offer,
    cashback,
    checkout,
    transaction,
    report,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides TILLKIT_DB_PATH environment variable)",
    envvar="TILLKIT_DB_PATH",
)
@click.option("-v", "--verbose", is_flag=True, help="Log settlement steps and warnings")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Tillkit - Point-of-sale checkout and retail management.

    Manage products, stock, customers, offers and cashback, ring up sales
    and summarize what was sold.
    """
    ctx.ensure_object(dict)

    try:
        settings = load_settings()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_database(settings, database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
product.register_commands(cli)
inventory.register_commands(cli)
customer.register_commands(cli)
offer.register_commands(cli)
cashback.register_commands(cli)
checkout.register_commands(cli)
transaction.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
