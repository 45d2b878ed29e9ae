"""Shared domain error messages and error types."""

from decimal import Decimal
from typing import Optional


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class OfferError(ValidationError):
    """An offer code could not be applied to the cart."""

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


class PaymentError(ValidationError):
    """Tender is missing, malformed or insufficient."""


class SettlementError(DomainError):
    """A persistence step of the settlement sequence failed."""

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step


# Offer rejection reasons
OFFER_UNKNOWN = "unknown"
OFFER_INACTIVE = "inactive"
OFFER_NOT_YET_ACTIVE = "not_yet_active"
OFFER_EXPIRED = "expired"
OFFER_BELOW_MINIMUM = "below_minimum"
OFFER_USAGE_LIMIT = "usage_limit_reached"


def product_not_found(product: int | str) -> str:
    """Return message for missing product."""
    return f"Product {product} not found"


def customer_not_found(customer: int | str) -> str:
    """Return message for missing customer."""
    return f"Customer {customer} not found"


def offer_not_found(offer: int | str) -> str:
    """Return message for missing offer."""
    return f"Offer {offer} not found"


def transaction_not_found(transaction: int | str) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction} not found"


def duplicate_sku(sku: str) -> str:
    """Return message for a product SKU that is already taken."""
    return f"Product with SKU '{sku}' already exists"


def duplicate_offer_code(code: str) -> str:
    """Return message for an offer code that is already taken."""
    return f"Offer with code '{code}' already exists"


def unknown_offer_code(code: str) -> str:
    return f"Invalid offer code '{code}'"


def offer_inactive(code: str) -> str:
    return f"Offer '{code}' is not active"


def offer_not_yet_active(code: str, start_date) -> str:
    return f"Offer '{code}' is not active until {start_date:%Y-%m-%d %H:%M}"


def offer_expired(code: str, end_date) -> str:
    return f"Offer '{code}' expired on {end_date:%Y-%m-%d %H:%M}"


def offer_below_minimum(code: str, minimum: Decimal) -> str:
    return f"Offer '{code}' requires a minimum purchase of {minimum:,.2f}"


def offer_usage_limit(code: str) -> str:
    return f"Offer '{code}' has reached its usage limit"


def insufficient_payment(total: Decimal, received: Decimal) -> str:
    """Return message when cash tendered does not cover the total."""
    return f"Insufficient payment amount: received {received:,.2f}, due {total:,.2f}"


def insufficient_cashback(requested: Decimal, balance: Optional[Decimal]) -> str:
    """Return message when a redemption exceeds the cashback balance."""
    available = balance if balance is not None else Decimal("0")
    return (
        f"Insufficient cashback balance: requested {requested:,.2f}, "
        f"available {available:,.2f}"
    )
