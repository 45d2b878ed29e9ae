"""Offer (promo code) domain service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tillkit.database.base import Database
from tillkit.domain import errors
from tillkit.domain.entities import Offer, OfferStatus, OfferType
from tillkit.domain.pricing import calculate_offer_discount, check_offer

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    """Offer codes are stored and matched upper-case."""
    return code.strip().upper()


class OfferService:
    """Service for managing and validating offers."""

    def __init__(self, db: Database):
        """Initialize offer service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_offer(
        self,
        code: str,
        name: str,
        offer_type: OfferType | str,
        discount: Decimal,
        max_discount_cap: Optional[Decimal] = None,
        min_purchase_amount: Optional[Decimal] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        total_usage_limit: Optional[int] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create an offer in draft status.

        Args:
            code: Offer code (case-insensitive, unique)
            name: Display name
            offer_type: percentage or fixed_amount
            discount: Percentage for percentage offers, amount for fixed offers
            max_discount_cap: Optional cap on percentage discounts
            min_purchase_amount: Optional minimum cart subtotal
            start_date: Optional start of the activation window
            end_date: Optional end of the activation window
            total_usage_limit: Optional number of sales the offer may be used on
            description: Optional description

        Returns:
            Offer ID

        Raises:
            ValidationError: If any value is out of range
            ConflictError: If the code is already in use
        """
        code = normalize_code(code)
        offer_type = OfferType(offer_type)
        self._validate(
            code=code,
            offer_type=offer_type,
            discount=discount,
            max_discount_cap=max_discount_cap,
            min_purchase_amount=min_purchase_amount,
            start_date=start_date,
            end_date=end_date,
            total_usage_limit=total_usage_limit,
        )
        if self.db.get_offer_by_code(code) is not None:
            raise errors.ConflictError(errors.duplicate_offer_code(code))

        return self.db.create_offer(
            code=code,
            name=name,
            offer_type=offer_type.value,
            discount_percentage=discount if offer_type == OfferType.PERCENTAGE else None,
            discount_value=discount if offer_type == OfferType.FIXED_AMOUNT else None,
            max_discount_cap=max_discount_cap,
            min_purchase_amount=min_purchase_amount,
            start_date=start_date,
            end_date=end_date,
            total_usage_limit=total_usage_limit,
            description=description,
            status=OfferStatus.DRAFT.value,
        )

    def _validate(
        self,
        code: str,
        offer_type: OfferType,
        discount: Decimal,
        max_discount_cap: Optional[Decimal],
        min_purchase_amount: Optional[Decimal],
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        total_usage_limit: Optional[int],
    ) -> None:
        if not code:
            raise errors.ValidationError("Offer code is required")
        if discount <= 0:
            raise errors.ValidationError("Discount must be greater than zero")
        if offer_type == OfferType.PERCENTAGE and discount > 100:
            raise errors.ValidationError("Percentage discount cannot exceed 100")
        if max_discount_cap is not None:
            if offer_type != OfferType.PERCENTAGE:
                raise errors.ValidationError("A discount cap only applies to percentage offers")
            if max_discount_cap <= 0:
                raise errors.ValidationError("Discount cap must be greater than zero")
        if min_purchase_amount is not None and min_purchase_amount < 0:
            raise errors.ValidationError("Minimum purchase cannot be negative")
        if start_date is not None and end_date is not None and end_date < start_date:
            raise errors.ValidationError("Offer end date is before its start date")
        if total_usage_limit is not None and total_usage_limit < 1:
            raise errors.ValidationError("Usage limit must be at least 1")

    def get_offer(self, offer_id: int) -> Optional[Offer]:
        return self.db.get_offer(offer_id)

    def get_offer_by_code(self, code: str) -> Optional[Offer]:
        return self.db.get_offer_by_code(normalize_code(code))

    def require_offer(self, code: str) -> Offer:
        """Get an offer by code.

        Raises:
            OfferError: With reason "unknown" if no offer has this code
        """
        offer = self.get_offer_by_code(code)
        if offer is None:
            raise errors.OfferError(errors.OFFER_UNKNOWN, errors.unknown_offer_code(code.strip()))
        return offer

    def list_offers(self, status: Optional[OfferStatus | str] = None) -> list[Offer]:
        return self.db.list_offers(status=OfferStatus(status).value if status else None)

    def validate_code(
        self, code: str, subtotal: Decimal, now: Optional[datetime] = None
    ) -> Offer:
        """Look up an offer code and check it against a cart subtotal.

        This is the "apply code" action. It never modifies the cart; the
        caller attaches the returned offer to its session.

        Raises:
            OfferError: For an unknown code, or the first failing check
        """
        offer = self.require_offer(code)
        try:
            check_offer(offer, subtotal, now=now)
        except errors.OfferError as e:
            logger.info("Offer %s rejected (%s)", offer.code, e.reason)
            raise
        return offer

    def preview_discount(
        self, code: str, subtotal: Decimal, now: Optional[datetime] = None
    ) -> Decimal:
        """Discount a valid code would give on the subtotal."""
        offer = self.validate_code(code, subtotal, now=now)
        return calculate_offer_discount(offer, subtotal)

    def activate_offer(self, offer_id: int) -> None:
        self._set_status(offer_id, OfferStatus.ACTIVE)

    def archive_offer(self, offer_id: int) -> None:
        self._set_status(offer_id, OfferStatus.ARCHIVED)

    def expire_offer(self, offer_id: int) -> None:
        self._set_status(offer_id, OfferStatus.EXPIRED)

    def _set_status(self, offer_id: int, status: OfferStatus) -> None:
        if self.db.get_offer(offer_id) is None:
            raise errors.NotFoundError(errors.offer_not_found(offer_id))
        self.db.update_offer(offer_id, status=status.value)

    def update_offer(self, offer_id: int, **fields) -> None:
        """Update offer fields, re-validating the result.

        Accepts the keyword arguments of create_offer except code.

        Raises:
            NotFoundError: If offer doesn't exist
            ValidationError: If the updated offer would be invalid
        """
        offer = self.db.get_offer(offer_id)
        if offer is None:
            raise errors.NotFoundError(errors.offer_not_found(offer_id))

        offer_type = OfferType(fields.pop("offer_type", offer.offer_type))
        current_discount = (
            offer.discount_percentage
            if offer.offer_type == OfferType.PERCENTAGE
            else offer.discount_value
        )
        discount = fields.pop("discount", current_discount)
        merged = {
            "max_discount_cap": offer.max_discount_cap,
            "min_purchase_amount": offer.min_purchase_amount,
            "start_date": offer.start_date,
            "end_date": offer.end_date,
            "total_usage_limit": offer.total_usage_limit,
        }
        merged.update({k: v for k, v in fields.items() if k in merged})
        self._validate(code=offer.code, offer_type=offer_type, discount=discount, **merged)

        updates = dict(fields)
        updates["offer_type"] = offer_type.value
        updates["discount_percentage"] = discount if offer_type == OfferType.PERCENTAGE else None
        updates["discount_value"] = discount if offer_type == OfferType.FIXED_AMOUNT else None
        self.db.update_offer(offer_id, **updates)

    def delete_offer(self, offer_id: int) -> None:
        """Delete an offer that was never used.

        Raises:
            NotFoundError: If offer doesn't exist
            ConflictError: If the offer was used on a sale (archive it instead)
        """
        offer = self.db.get_offer(offer_id)
        if offer is None:
            raise errors.NotFoundError(errors.offer_not_found(offer_id))
        if offer.current_usage_count > 0:
            raise errors.ConflictError(
                f"Cannot delete offer '{offer.code}': it was used on "
                f"{offer.current_usage_count} sale{'s' if offer.current_usage_count != 1 else ''}. "
                "Archive it instead."
            )
        self.db.delete_offer(offer_id)
