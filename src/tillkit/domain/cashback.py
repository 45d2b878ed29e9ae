"""Cashback domain service.

Every balance change appends a ledger entry and then rewrites the account
totals, keeping current_balance = total_earned - total_redeemed - total_expired.
"""

import logging
from decimal import Decimal
from typing import Optional

from tillkit.database.base import Database
from tillkit.domain import errors
from tillkit.domain.entities import CashbackAccount, CashbackEntry, CashbackEntryType
from tillkit.utils.amount_parser import quantize_money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HISTORY_LIMIT = 50


class CashbackService:
    """Service for customer cashback balances."""

    def __init__(self, db: Database, earning_rate: Decimal = ZERO):
        """Initialize cashback service.

        Args:
            db: Database instance
            earning_rate: Percent of a purchase total credited as cashback
        """
        self.db = db
        self.earning_rate = earning_rate

    def get_account(self, customer_id: int) -> Optional[CashbackAccount]:
        return self.db.get_cashback_account(customer_id)

    def get_or_create_account(self, customer_id: int) -> CashbackAccount:
        """Get the customer's account, opening an empty one if needed.

        Raises:
            NotFoundError: If customer doesn't exist
        """
        account = self.db.get_cashback_account(customer_id)
        if account is not None:
            return account
        if self.db.get_customer(customer_id) is None:
            raise errors.NotFoundError(errors.customer_not_found(customer_id))
        self.db.create_cashback_account(customer_id)
        return self.db.get_cashback_account(customer_id)

    def calculate_earned(self, purchase_total: Decimal) -> Decimal:
        """Cashback earned on a purchase at the configured rate, in cents."""
        if self.earning_rate <= 0 or purchase_total <= 0:
            return ZERO
        return quantize_money(purchase_total * self.earning_rate / Decimal("100"))

    def check_redemption(self, customer_id: int, amount: Decimal) -> Optional[CashbackAccount]:
        """Make sure the customer can spend amount of cashback.

        Returns:
            The customer's account, or None when amount is zero and no account exists

        Raises:
            ValidationError: If amount is negative or exceeds the current balance
        """
        if amount < 0:
            raise errors.ValidationError("Cashback to redeem cannot be negative")
        account = self.db.get_cashback_account(customer_id)
        if amount == 0:
            return account
        if account is None or account.current_balance < amount:
            raise errors.ValidationError(
                errors.insufficient_cashback(
                    amount, account.current_balance if account is not None else None
                )
            )
        return account

    def redeem(
        self, customer_id: int, amount: Decimal, transaction_id: Optional[int] = None
    ) -> CashbackAccount:
        """Spend cashback. The ledger entry carries a negative amount.

        Raises:
            ValidationError: If amount is not positive or exceeds the balance
        """
        amount = quantize_money(amount)
        if amount <= 0:
            raise errors.ValidationError("Cashback to redeem must be greater than zero")
        account = self.check_redemption(customer_id, amount)

        new_balance = account.current_balance - amount
        self.db.add_cashback_entry(
            account_id=account.id,
            customer_id=customer_id,
            entry_type=CashbackEntryType.REDEEMED.value,
            amount=-amount,
            balance_after=new_balance,
            transaction_id=transaction_id,
            description="Cashback redeemed at checkout",
        )
        self.db.update_cashback_account(
            account.id,
            current_balance=new_balance,
            total_earned=account.total_earned,
            total_redeemed=account.total_redeemed + amount,
            total_expired=account.total_expired,
        )
        logger.debug("Customer %s redeemed %s cashback", customer_id, amount)
        return self.db.get_cashback_account(customer_id)

    def record_earned(
        self,
        customer_id: int,
        amount: Decimal,
        transaction_id: Optional[int] = None,
        earning_rate: Optional[Decimal] = None,
        source: str = "purchase",
    ) -> CashbackAccount:
        """Credit earned cashback to the customer.

        Raises:
            ValidationError: If amount is not positive
        """
        amount = quantize_money(amount)
        if amount <= 0:
            raise errors.ValidationError("Earned cashback must be greater than zero")
        account = self.get_or_create_account(customer_id)

        new_balance = account.current_balance + amount
        self.db.add_cashback_entry(
            account_id=account.id,
            customer_id=customer_id,
            entry_type=CashbackEntryType.EARNED.value,
            amount=amount,
            balance_after=new_balance,
            transaction_id=transaction_id,
            earning_rate=earning_rate,
            earning_source=source,
            description=f"Cashback earned on {source}",
        )
        self.db.update_cashback_account(
            account.id,
            current_balance=new_balance,
            total_earned=account.total_earned + amount,
            total_redeemed=account.total_redeemed,
            total_expired=account.total_expired,
        )
        logger.debug("Customer %s earned %s cashback", customer_id, amount)
        return self.db.get_cashback_account(customer_id)

    def credit(self, customer_id: int, amount: Decimal, reason: str) -> CashbackAccount:
        """Manual goodwill credit, counted as earned.

        Raises:
            ValidationError: If amount is not positive or reason is empty
        """
        amount = quantize_money(amount)
        if amount <= 0:
            raise errors.ValidationError("Credit must be greater than zero")
        if not reason.strip():
            raise errors.ValidationError("A reason is required for manual credits")
        account = self.get_or_create_account(customer_id)

        new_balance = account.current_balance + amount
        with self.db.atomic():
            self.db.add_cashback_entry(
                account_id=account.id,
                customer_id=customer_id,
                entry_type=CashbackEntryType.ADJUSTED.value,
                amount=amount,
                balance_after=new_balance,
                earning_source="manual",
                description=reason.strip(),
            )
            self.db.update_cashback_account(
                account.id,
                current_balance=new_balance,
                total_earned=account.total_earned + amount,
                total_redeemed=account.total_redeemed,
                total_expired=account.total_expired,
            )
        return self.db.get_cashback_account(customer_id)

    def expire(self, customer_id: int, amount: Decimal) -> CashbackAccount:
        """Remove expired cashback from the balance.

        Raises:
            ValidationError: If amount is not positive or exceeds the balance
        """
        amount = quantize_money(amount)
        if amount <= 0:
            raise errors.ValidationError("Expired amount must be greater than zero")
        account = self.check_redemption(customer_id, amount)

        new_balance = account.current_balance - amount
        with self.db.atomic():
            self.db.add_cashback_entry(
                account_id=account.id,
                customer_id=customer_id,
                entry_type=CashbackEntryType.EXPIRED.value,
                amount=-amount,
                balance_after=new_balance,
                description="Cashback expired",
            )
            self.db.update_cashback_account(
                account.id,
                current_balance=new_balance,
                total_earned=account.total_earned,
                total_redeemed=account.total_redeemed,
                total_expired=account.total_expired + amount,
            )
        return self.db.get_cashback_account(customer_id)

    def history(self, customer_id: int, limit: int = HISTORY_LIMIT) -> list[CashbackEntry]:
        """Ledger entries, newest first."""
        return self.db.list_cashback_entries(customer_id, limit=limit)
