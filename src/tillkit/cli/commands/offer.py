"""Offer (promo code) commands."""

from decimal import Decimal

import click
from tillkit.domain.entities import Offer, OfferStatus, OfferType
from tillkit.domain.offer import OfferService
from tillkit.utils.amount_parser import format_money, parse_non_negative_amount
from tillkit.utils.date_parser import parse_datetime


def _require_offer(ctx, service: OfferService, code: str) -> Offer:
    offer = service.get_offer_by_code(code)
    if offer is None:
        click.echo(f"Error: Offer '{code}' not found", err=True)
        ctx.exit(1)
    return offer


def _describe_discount(offer: Offer) -> str:
    if offer.offer_type == OfferType.PERCENTAGE:
        text = f"{offer.discount_percentage:.2f}% off"
        if offer.max_discount_cap is not None:
            text += f" (max {format_money(offer.max_discount_cap)})"
        return text
    return f"{format_money(offer.discount_value)} off"


@click.group()
def offer_group():
    """Manage offers and promo codes."""
    pass


@offer_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option(
    "--type",
    "offer_type",
    type=click.Choice([t.value for t in OfferType]),
    default=OfferType.PERCENTAGE.value,
    show_default=True,
    help="Discount type",
)
@click.option("--discount", required=True, help="Percent (percentage) or amount (fixed_amount)")
@click.option("--max-discount", help="Cap on a percentage discount")
@click.option("--min-purchase", help="Minimum cart subtotal")
@click.option("--start", "start_date", help="Start of the offer window (date or timestamp)")
@click.option("--end", "end_date", help="End of the offer window (date or timestamp)")
@click.option("--usage-limit", type=int, help="Number of sales the offer can be used on")
@click.option("--description", help="Offer description")
@click.option("--activate", is_flag=True, help="Activate the offer right away")
@click.pass_context
def create_offer(
    ctx,
    code: str,
    name: str,
    offer_type: str,
    discount: str,
    max_discount: str | None,
    min_purchase: str | None,
    start_date: str | None,
    end_date: str | None,
    usage_limit: int | None,
    description: str | None,
    activate: bool,
):
    """Create an offer. New offers are drafts unless --activate is given.

    Examples:
        tillkit offer create SAVE20 "Save 20%" --discount 20 --max-discount 30
        tillkit offer create FLAT50 "Flat 50" --type fixed_amount --discount 50 --min-purchase 500
        tillkit offer create DIWALI "Festival" --discount 10 --start 2024-11-01 --end 2024-11-05 --activate
    """
    db = ctx.obj["db"]
    service = OfferService(db)

    try:
        discount_amount = parse_non_negative_amount(discount)
        cap = parse_non_negative_amount(max_discount) if max_discount else None
        minimum = parse_non_negative_amount(min_purchase) if min_purchase else None
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        start = parse_datetime(start_date) if start_date else None
        end = parse_datetime(end_date, end_of_day=True) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)

    try:
        offer_id = service.create_offer(
            code=code,
            name=name,
            offer_type=offer_type,
            discount=discount_amount,
            max_discount_cap=cap,
            min_purchase_amount=minimum,
            start_date=start,
            end_date=end,
            total_usage_limit=usage_limit,
            description=description,
        )
        if activate:
            service.activate_offer(offer_id)
        offer = service.get_offer(offer_id)
        click.echo(f"Created offer '{offer.code}' (ID: {offer_id}, {offer.status.value})")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@offer_group.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in OfferStatus]),
    help="Only show offers with this status",
)
@click.pass_context
def list_offers(ctx, status: str | None):
    """List offers."""
    db = ctx.obj["db"]
    service = OfferService(db)

    offers = service.list_offers(status=status)
    if not offers:
        click.echo("No offers found.")
        return

    click.echo("\nOffers:")
    click.echo("-" * 80)
    for o in offers:
        usage = f"{o.current_usage_count}"
        if o.total_usage_limit is not None:
            usage += f"/{o.total_usage_limit}"
        click.echo(
            f"{o.code:12s} | {o.name[:24]:24s} | {_describe_discount(o):24s} | "
            f"{o.status.value:8s} | used {usage}"
        )


@offer_group.command("show")
@click.argument("code")
@click.pass_context
def show_offer(ctx, code: str):
    """Show an offer."""
    db = ctx.obj["db"]
    service = OfferService(db)
    o = _require_offer(ctx, service, code)

    click.echo(f"Offer {o.code}: {o.name}")
    if o.description:
        click.echo(f"  {o.description}")
    click.echo(f"  Discount: {_describe_discount(o)}")
    click.echo(f"  Status: {o.status.value}")
    if o.min_purchase_amount is not None:
        click.echo(f"  Minimum purchase: {format_money(o.min_purchase_amount)}")
    if o.start_date:
        click.echo(f"  Starts: {o.start_date.strftime('%Y-%m-%d %H:%M')}")
    if o.end_date:
        click.echo(f"  Ends: {o.end_date.strftime('%Y-%m-%d %H:%M')}")
    limit = o.total_usage_limit if o.total_usage_limit is not None else "unlimited"
    click.echo(f"  Used: {o.current_usage_count} of {limit}")


@offer_group.command("activate")
@click.argument("code")
@click.pass_context
def activate_offer(ctx, code: str):
    """Make an offer usable at checkout."""
    service = OfferService(ctx.obj["db"])
    offer = _require_offer(ctx, service, code)
    try:
        service.activate_offer(offer.id)
        click.echo(f"Activated offer '{offer.code}'")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@offer_group.command("archive")
@click.argument("code")
@click.pass_context
def archive_offer(ctx, code: str):
    """Withdraw an offer, keeping its history."""
    service = OfferService(ctx.obj["db"])
    offer = _require_offer(ctx, service, code)
    try:
        service.archive_offer(offer.id)
        click.echo(f"Archived offer '{offer.code}'")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@offer_group.command("delete")
@click.argument("code")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_offer(ctx, code: str, force: bool):
    """Delete an offer that was never used."""
    service = OfferService(ctx.obj["db"])
    offer = _require_offer(ctx, service, code)

    if not force:
        click.confirm(f"Delete offer '{offer.code}'?", abort=True)

    try:
        service.delete_offer(offer.id)
        click.echo(f"Deleted offer '{offer.code}'")
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@offer_group.command("check")
@click.argument("code")
@click.option("--subtotal", required=True, help="Cart subtotal to check the code against")
@click.pass_context
def check_offer(ctx, code: str, subtotal: str):
    """Check whether a code applies to a subtotal and preview the discount.

    Examples:
        tillkit offer check SAVE20 --subtotal 1000
    """
    service = OfferService(ctx.obj["db"])

    try:
        amount = parse_non_negative_amount(subtotal)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        discount = service.preview_discount(code, amount)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    offer = service.get_offer_by_code(code)
    click.echo(f"Offer '{offer.code}' applies: {format_money(discount)} off {format_money(amount)}")
    click.echo(f"Subtotal after offer: {format_money(max(Decimal('0'), amount - discount))}")


def register_commands(cli):
    """Register offer commands with main CLI."""
    cli.add_command(offer_group, name="offer")
