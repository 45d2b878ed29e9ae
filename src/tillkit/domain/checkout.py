"""Checkout settlement: turn a priced cart into a stored sale.

Settlement validates everything it can before writing, then runs the writes
(transaction, line items, payment, inventory, customer totals, cashback,
offer usage) inside one database transaction. A failure in any step rolls
back all of them and is reported as a SettlementError naming the step.

Passing a transaction number reserved with reserve_transaction_number()
makes settlement safe to retry: if a sale with that number already exists
it is returned as-is instead of being recorded twice.
"""

import logging
import re
import secrets
import string
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, UTC
from decimal import Decimal
from typing import Iterator, Optional

from tillkit.database.base import Database
from tillkit.domain import errors
from tillkit.domain.cashback import CashbackService
from tillkit.domain.entities import (
    Cart,
    Customer,
    Offer,
    PaymentMethod,
    SettlementReceipt,
    SettlementResult,
)
from tillkit.domain.numbering import generate_transaction_number
from tillkit.domain.offer import OfferService
from tillkit.domain.pricing import compute_settlement
from tillkit.domain.receipt import build_receipt, receipt_from_records
from tillkit.utils.amount_parser import quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

AUTH_CODE_PREFIXES = {
    PaymentMethod.CARD: ("AUTH", 8),
    PaymentMethod.UPI: ("UPI", 10),
    PaymentMethod.DIGITAL_WALLET: ("WALLET", 10),
}

STEP_LABELS = {
    "transaction": "recording the transaction",
    "line_items": "recording line items",
    "payment": "recording the payment",
    "inventory": "updating inventory",
    "customer": "updating the customer",
    "cashback": "updating cashback",
    "offer": "updating offer usage",
}


@dataclass(frozen=True)
class CheckoutRequest:
    """Everything the cashier has entered for one sale.

    card_number may be the full number or just the four digits a terminal
    reports; only the last four are ever stored.
    """

    cart: Cart
    customer_id: Optional[int]
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount_received: Optional[Decimal] = None
    offer_code: Optional[str] = None
    cashback_to_redeem: Decimal = ZERO
    card_number: Optional[str] = None
    authorization_code: Optional[str] = None
    transaction_number: Optional[str] = None
    cashier: Optional[str] = None


@dataclass(frozen=True)
class Quote:
    """A validated, priced checkout that has not been written yet."""

    request: CheckoutRequest
    customer: Customer
    settlement: SettlementResult
    card_last_four: Optional[str] = None


def card_last_four(card_number: str) -> str:
    """Extract the last four digits of a card.

    Raises:
        PaymentError: Unless the value holds exactly 4 digits or a 12-19 digit number
    """
    digits = re.sub(r"[\s-]", "", card_number)
    if not digits.isdigit() or not (len(digits) == 4 or 12 <= len(digits) <= 19):
        raise errors.PaymentError("Card number must be 12-19 digits, or the last four digits")
    return digits[-4:]


def generate_authorization_code(payment_method: PaymentMethod) -> Optional[str]:
    """Authorization reference for non-cash tenders."""
    if payment_method not in AUTH_CODE_PREFIXES:
        return None
    prefix, length = AUTH_CODE_PREFIXES[payment_method]
    alphabet = string.ascii_uppercase + string.digits
    return prefix + "".join(secrets.choice(alphabet) for _ in range(length))


class CheckoutService:
    """Service that prices and settles sales."""

    def __init__(self, db: Database, cashback_rate: Decimal = ZERO):
        """Initialize checkout service.

        Args:
            db: Database instance
            cashback_rate: Percent of each sale's total credited as cashback
        """
        self.db = db
        self.offer_service = OfferService(db)
        self.cashback_service = CashbackService(db, earning_rate=cashback_rate)

    def reserve_transaction_number(self, now: Optional[datetime] = None) -> str:
        """Hand out a transaction number before the sale is submitted."""
        return generate_transaction_number(self.db, now=now)

    def quote(self, request: CheckoutRequest, now: Optional[datetime] = None) -> Quote:
        """Validate a checkout and price it without writing anything.

        Raises:
            ValidationError: Empty cart, missing/unknown customer, bad line, bad cashback
            OfferError: If the offer code cannot be applied
            PaymentError: Insufficient cash or unusable card details
        """
        if request.cart.is_empty:
            raise errors.ValidationError("Cart is empty")
        if request.customer_id is None:
            raise errors.ValidationError("No customer selected")
        customer = self.db.get_customer(request.customer_id)
        if customer is None:
            raise errors.NotFoundError(errors.customer_not_found(request.customer_id))

        payment_method = PaymentMethod(request.payment_method)
        last_four = None
        if payment_method == PaymentMethod.CARD:
            if not request.card_number:
                raise errors.PaymentError("Card payments need the card number or its last four digits")
            last_four = card_last_four(request.card_number)

        offer: Optional[Offer] = None
        if request.offer_code:
            offer = self.offer_service.require_offer(request.offer_code)

        if request.cashback_to_redeem:
            self.cashback_service.check_redemption(customer.id, request.cashback_to_redeem)

        settlement = compute_settlement(
            request.cart,
            payment_method=payment_method,
            offer=offer,
            cashback_redeemed=request.cashback_to_redeem,
            amount_received=request.amount_received,
            now=now,
        )
        return Quote(
            request=request, customer=customer, settlement=settlement, card_last_four=last_four
        )

    def settle(self, request: CheckoutRequest, now: Optional[datetime] = None) -> SettlementReceipt:
        """Validate, price and record a sale.

        Args:
            request: Checkout details
            now: Time of sale (defaults to current UTC time)

        Returns:
            SettlementReceipt with the stored records and receipt data

        Raises:
            ValidationError / OfferError / PaymentError: Before anything is written
            SettlementError: If a write fails; nothing from this sale is kept
        """
        now = now or datetime.now(UTC)

        if request.transaction_number:
            existing = self.db.get_transaction_by_number(request.transaction_number)
            if existing is not None:
                logger.info(
                    "Transaction %s already recorded; returning stored sale",
                    request.transaction_number,
                )
                return self.load_sale(request.transaction_number, replayed=True)

        quote = self.quote(request, now=now)
        settlement = quote.settlement
        customer = quote.customer

        with self.db.atomic():
            transaction_number = request.transaction_number or generate_transaction_number(
                self.db, now=now
            )
            with self._step("transaction"):
                transaction_id = self.db.create_transaction(
                    transaction_number=transaction_number,
                    customer_id=customer.id,
                    subtotal=quantize_money(settlement.subtotal),
                    discount_amount=quantize_money(settlement.total_discount),
                    tax_amount=quantize_money(settlement.tax_amount),
                    cashback_redeemed=quantize_money(settlement.cashback_redeemed),
                    total_amount=quantize_money(settlement.final_total),
                    amount_paid=quantize_money(settlement.amount_paid),
                    change_amount=quantize_money(settlement.change),
                    payment_status="completed",
                    status="completed",
                    cashier=request.cashier,
                    offer_id=settlement.offer.id if settlement.offer is not None else None,
                    created_at=now,
                )

            with self._step("line_items"):
                for line in settlement.lines:
                    self.db.add_transaction_item(
                        transaction_id=transaction_id,
                        product_id=line.product.id,
                        quantity=line.quantity,
                        unit_price=quantize_money(line.unit_price),
                        discount_amount=quantize_money(line.discount),
                        tax_amount=quantize_money(line.tax_amount),
                        line_total=quantize_money(line.line_total),
                    )

            with self._step("payment"):
                self.db.create_payment(
                    transaction_id=transaction_id,
                    payment_method=settlement.payment_method.value,
                    amount=quantize_money(settlement.amount_paid),
                    payment_status="completed",
                    authorization_code=request.authorization_code
                    or generate_authorization_code(settlement.payment_method),
                    card_last_four=quote.card_last_four,
                )

            with self._step("inventory"):
                for line in settlement.lines:
                    remaining = self.db.adjust_inventory(line.product.id, -line.quantity)
                    if remaining is None:
                        logger.warning(
                            "No inventory record for %s; sold %d without a stock decrement",
                            line.product.sku,
                            line.quantity,
                        )

            with self._step("customer"):
                self.db.record_customer_purchase(
                    customer.id, quantize_money(settlement.final_total), now
                )

            cashback_earned = self.cashback_service.calculate_earned(settlement.final_total)
            with self._step("cashback"):
                if settlement.cashback_redeemed > 0:
                    self.cashback_service.redeem(
                        customer.id, settlement.cashback_redeemed, transaction_id=transaction_id
                    )
                if cashback_earned > 0:
                    self.cashback_service.record_earned(
                        customer.id,
                        cashback_earned,
                        transaction_id=transaction_id,
                        earning_rate=self.cashback_service.earning_rate,
                    )

            if settlement.offer is not None:
                with self._step("offer"):
                    self.db.increment_offer_usage(settlement.offer.id)

        logger.info(
            "Completed sale %s for customer %s: total %s via %s",
            transaction_number,
            customer.customer_number,
            quantize_money(settlement.final_total),
            settlement.payment_method.value,
        )

        transaction = self.db.get_transaction(transaction_id)
        return SettlementReceipt(
            transaction=transaction,
            items=tuple(self.db.get_transaction_items(transaction_id)),
            payment=self.db.get_payment(transaction_id),
            receipt=build_receipt(
                transaction_number,
                settlement,
                customer_name=customer.full_name,
                created_at=transaction.created_at,
            ),
            cashback_earned=cashback_earned,
        )

    def load_sale(self, transaction_number: str, replayed: bool = False) -> SettlementReceipt:
        """Load a stored sale with its receipt.

        Raises:
            NotFoundError: If no sale has this number
        """
        transaction = self.db.get_transaction_by_number(transaction_number)
        if transaction is None:
            raise errors.NotFoundError(errors.transaction_not_found(transaction_number))

        items = self.db.get_transaction_items(transaction.id)
        payment = self.db.get_payment(transaction.id)
        products = {}
        for item in items:
            product = self.db.get_product(item.product_id)
            if product is not None:
                products[item.product_id] = product
        customer = (
            self.db.get_customer(transaction.customer_id)
            if transaction.customer_id is not None
            else None
        )
        offer = self.db.get_offer(transaction.offer_id) if transaction.offer_id else None

        return SettlementReceipt(
            transaction=transaction,
            items=tuple(items),
            payment=payment,
            receipt=receipt_from_records(
                transaction,
                items,
                products,
                payment,
                customer_name=customer.full_name if customer else None,
                offer_code=offer.code if offer else None,
            ),
            replayed=replayed,
        )

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        logger.debug("Settlement step: %s", name)
        try:
            yield
        except errors.SettlementError:
            raise
        except Exception as e:
            logger.error("Settlement step '%s' failed", name, exc_info=True)
            raise errors.SettlementError(
                name, f"Transaction failed while {STEP_LABELS[name]}: {e}"
            ) from e
