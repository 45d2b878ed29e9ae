"""CLI helpers for date range options."""

from datetime import date

import click

from tillkit.utils.date_parser import PERIODS, get_date_range, parse_date


def date_range_options(f):
    """Add --start-date/--end-date and one flag per named period.

    The decorated command receives the flags as keyword arguments named
    after the period (this-week -> this_week); pass them on to
    resolve_cli_date_range.
    """
    for period in reversed(PERIODS):
        f = click.option(
            f"--{period}",
            period.replace("-", "_"),
            is_flag=True,
            help=f"Limit to {period.replace('-', ' ')}",
        )(f)
    f = click.option("--end-date", "-e", help="End date, inclusive (YYYY-MM-DD or 'today')")(f)
    f = click.option(
        "--start-date", "-s", help="Start date (YYYY-MM-DD or relative like 'last month')"
    )(f)
    return f


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    **period_flags: bool,
) -> tuple[date | None, date | None]:
    """Resolve a date range from at most one period flag or explicit dates."""
    chosen = [name.replace("_", "-") for name, is_set in period_flags.items() if is_set]

    if len(chosen) > 1:
        click.echo(
            f"Error: Only one period option can be given, got {', '.join('--' + p for p in chosen)}.",
            err=True,
        )
        ctx.exit(1)

    if chosen and (start_date or end_date):
        click.echo(
            f"Error: --{chosen[0]} cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if chosen:
        return get_date_range(chosen[0])

    start = None
    end = None
    try:
        if start_date:
            start = parse_date(start_date)
        if end_date:
            end = parse_date(end_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    if start and end and start > end:
        click.echo(f"Error: Start date {start} is after end date {end}.", err=True)
        ctx.exit(1)

    return start, end
