"""Sales report commands."""

import click
from tillkit.cli.date_filters import date_range_options, resolve_cli_date_range
from tillkit.domain.report import SalesReportService
from tillkit.utils.amount_parser import format_money


@click.group()
def report_group():
    """Summarize sales."""
    pass


@report_group.command("sales")
@date_range_options
@click.option("--top", type=int, default=5, show_default=True, help="Number of best sellers to show")
@click.option("--daily", is_flag=True, help="Include a per-day breakdown")
@click.pass_context
def sales_report(ctx, start_date: str | None, end_date: str | None, top: int, daily: bool, **periods):
    """Show totals, payment methods and best sellers for a period.

    Examples:
        tillkit report sales --today
        tillkit report sales --last-month --top 10
        tillkit report sales -s 2024-01-01 -e 2024-03-31 --daily
    """
    db = ctx.obj["db"]
    service = SalesReportService(db)

    start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, **periods)

    report = service.build_sales_report(start_date=start, end_date=end, top=top)

    period = "all time"
    if start or end:
        period = f"{start.isoformat() if start else '...'} to {end.isoformat() if end else '...'}"
    click.echo(f"\nSales report ({period})")
    click.echo("=" * 50)

    if report.transaction_count == 0:
        click.echo("No sales in this period.")
        return

    click.echo(f"{'Transactions:':20s} {report.transaction_count:>12d}")
    click.echo(f"{'Subtotal:':20s} {format_money(report.subtotal):>12s}")
    click.echo(f"{'Discounts:':20s} {format_money(report.discounts):>12s}")
    click.echo(f"{'Tax:':20s} {format_money(report.tax):>12s}")
    click.echo(f"{'Cashback redeemed:':20s} {format_money(report.cashback):>12s}")
    click.echo(f"{'Revenue:':20s} {format_money(report.revenue):>12s}")
    click.echo(f"{'Average sale:':20s} {format_money(report.average_sale):>12s}")

    if report.by_payment_method:
        click.echo("\nBy payment method:")
        for row in report.by_payment_method:
            click.echo(f"  {row.payment_method:16s} {row.count:5d}  {format_money(row.amount):>12s}")

    if daily and report.by_day:
        click.echo("\nBy day:")
        for row in report.by_day:
            click.echo(f"  {row.day:16s} {row.count:5d}  {format_money(row.revenue):>12s}")

    if report.top_products:
        click.echo("\nBest sellers:")
        for row in report.top_products:
            click.echo(f"  {row.sku:12s} {row.name[:24]:24s} {row.quantity:5d}  {format_money(row.revenue):>12s}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
