"""Checkout pricing and settlement calculation.

Everything in this module is pure: it takes a cart snapshot and returns the
amounts to charge. Nothing here touches the database.

Order of operations:

1. subtotal is the sum of unit_price * quantity over all lines
2. line discounts are summed as entered
3. the offer discount is computed on the subtotal (percentage, optionally
   capped, or a fixed amount)
4. tax is charged per line on (unit_price * quantity - line discount); the
   offer discount is not removed from the tax base
5. total = subtotal - all discounts + tax, less redeemed cashback, floored at 0
6. cash payments must cover the total rounded to cents, the amount shown on
   the receipt; change is the excess over that amount
"""

from datetime import datetime, UTC
from decimal import Decimal
from typing import Iterable, Optional

from tillkit.domain import errors
from tillkit.domain.entities import (
    Cart,
    CartLine,
    LineSettlement,
    Offer,
    OfferStatus,
    OfferType,
    PaymentMethod,
    SettlementResult,
)
from tillkit.utils.amount_parser import quantize_money

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def calculate_subtotal(lines: Iterable[CartLine]) -> Decimal:
    """Sum of unit price times quantity."""
    return sum((line.product.unit_price * line.quantity for line in lines), ZERO)


def calculate_line_discount_total(lines: Iterable[CartLine]) -> Decimal:
    return sum((line.discount for line in lines), ZERO)


def calculate_line_tax(line: CartLine) -> Decimal:
    """Tax on one line, charged on the amount after the line discount."""
    return (line.line_subtotal - line.discount) * line.product.tax_rate / HUNDRED


def calculate_tax(lines: Iterable[CartLine]) -> Decimal:
    return sum((calculate_line_tax(line) for line in lines), ZERO)


def validate_cart_lines(cart: Cart) -> None:
    """Reject lines with a non-positive quantity or an out-of-range discount.

    Raises:
        ValidationError: If any line is invalid
    """
    for line in cart:
        if line.quantity < 1:
            raise errors.ValidationError(
                f"Quantity for '{line.product.sku}' must be at least 1"
            )
        if line.discount < ZERO:
            raise errors.ValidationError(
                f"Discount for '{line.product.sku}' cannot be negative"
            )
        if line.discount > line.line_subtotal:
            raise errors.ValidationError(
                f"Discount for '{line.product.sku}' exceeds the line subtotal "
                f"of {line.line_subtotal:,.2f}"
            )


def check_offer(offer: Offer, subtotal: Decimal, now: Optional[datetime] = None) -> None:
    """Check that an offer may be applied to a cart with the given subtotal.

    Checks run in order and stop at the first failure: status, start of the
    activation window, end of the window, minimum purchase, usage limit.

    Raises:
        OfferError: With the reason of the first failing check
    """
    now = _as_utc(now or datetime.now(UTC))

    if offer.status != OfferStatus.ACTIVE:
        raise errors.OfferError(errors.OFFER_INACTIVE, errors.offer_inactive(offer.code))

    if offer.start_date is not None and now < _as_utc(offer.start_date):
        raise errors.OfferError(
            errors.OFFER_NOT_YET_ACTIVE,
            errors.offer_not_yet_active(offer.code, offer.start_date),
        )

    if offer.end_date is not None and now > _as_utc(offer.end_date):
        raise errors.OfferError(
            errors.OFFER_EXPIRED, errors.offer_expired(offer.code, offer.end_date)
        )

    if offer.min_purchase_amount is not None and subtotal < offer.min_purchase_amount:
        raise errors.OfferError(
            errors.OFFER_BELOW_MINIMUM,
            errors.offer_below_minimum(offer.code, offer.min_purchase_amount),
        )

    if (
        offer.total_usage_limit is not None
        and offer.current_usage_count >= offer.total_usage_limit
    ):
        raise errors.OfferError(errors.OFFER_USAGE_LIMIT, errors.offer_usage_limit(offer.code))


def calculate_offer_discount(offer: Offer, subtotal: Decimal) -> Decimal:
    """Discount granted by an offer that has already passed check_offer."""
    if offer.offer_type == OfferType.PERCENTAGE:
        discount = subtotal * (offer.discount_percentage or ZERO) / HUNDRED
        if offer.max_discount_cap is not None:
            discount = min(discount, offer.max_discount_cap)
        return discount
    return offer.discount_value or ZERO


def settle_line(line: CartLine) -> LineSettlement:
    taxable = line.line_subtotal - line.discount
    tax = calculate_line_tax(line)
    return LineSettlement(
        product=line.product,
        quantity=line.quantity,
        unit_price=line.product.unit_price,
        line_subtotal=line.line_subtotal,
        discount=line.discount,
        taxable_amount=taxable,
        tax_amount=tax,
        line_total=taxable + tax,
    )


def compute_settlement(
    cart: Cart,
    payment_method: PaymentMethod | str = PaymentMethod.CASH,
    offer: Optional[Offer] = None,
    cashback_redeemed: Decimal = ZERO,
    amount_received: Optional[Decimal] = None,
    now: Optional[datetime] = None,
) -> SettlementResult:
    """Price a cart and work out what to charge.

    Args:
        cart: Cart snapshot to price
        payment_method: Tender type
        offer: Optional offer to apply; it is checked before any discount
        cashback_redeemed: Cashback the customer wants to spend
        amount_received: Cash tendered (required for cash payments)
        now: Evaluation time for the offer window (defaults to current UTC time)

    Returns:
        SettlementResult with exact, unrounded amounts

    Raises:
        ValidationError: If the cart is empty or a line is invalid
        OfferError: If the offer cannot be applied
        PaymentError: If cash tendered is missing or insufficient
    """
    payment_method = PaymentMethod(payment_method)
    if cart.is_empty:
        raise errors.ValidationError("Cart is empty")
    validate_cart_lines(cart)
    if cashback_redeemed < ZERO:
        raise errors.ValidationError("Cashback to redeem cannot be negative")

    subtotal = calculate_subtotal(cart)
    line_discount_total = calculate_line_discount_total(cart)

    offer_discount = ZERO
    if offer is not None:
        check_offer(offer, subtotal, now=now)
        offer_discount = calculate_offer_discount(offer, subtotal)

    total_discount = line_discount_total + offer_discount
    tax_amount = calculate_tax(cart)
    total_before_cashback = subtotal - total_discount + tax_amount

    # Only the part of the redemption that reduces the bill is spent, in whole cents.
    applied_cashback = max(
        ZERO, min(quantize_money(cashback_redeemed), quantize_money(total_before_cashback))
    )
    final_total = max(ZERO, total_before_cashback - applied_cashback)

    if payment_method == PaymentMethod.CASH:
        if amount_received is None:
            raise errors.PaymentError("Amount received is required for cash payments")
        amount_due = quantize_money(final_total)
        if amount_received < amount_due:
            raise errors.PaymentError(errors.insufficient_payment(amount_due, amount_received))
        amount_paid = amount_received
        change = amount_received - amount_due
    else:
        amount_paid = final_total
        change = ZERO

    return SettlementResult(
        subtotal=subtotal,
        line_discount_total=line_discount_total,
        offer_discount=offer_discount,
        total_discount=total_discount,
        tax_amount=tax_amount,
        total_before_cashback=total_before_cashback,
        cashback_redeemed=applied_cashback,
        final_total=final_total,
        amount_paid=amount_paid,
        change=change,
        payment_method=payment_method,
        lines=tuple(settle_line(line) for line in cart),
        offer=offer,
    )
