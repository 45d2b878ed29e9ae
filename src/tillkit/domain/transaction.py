"""Transaction (completed sale) domain service."""

from datetime import date
from typing import Optional

from tillkit.database.base import Database
from tillkit.domain import errors
from tillkit.domain.entities import Payment, Transaction, TransactionItem
from tillkit.utils.date_parser import day_bounds


class TransactionService:
    """Read access to recorded sales."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        return self.db.get_transaction(transaction_id)

    def find_transaction(self, identifier: str | int) -> Optional[Transaction]:
        """Find a sale by transaction number or ID."""
        if isinstance(identifier, int):
            return self.db.get_transaction(identifier)
        transaction = self.db.get_transaction_by_number(identifier.strip())
        if transaction is None and identifier.strip().isdigit():
            transaction = self.db.get_transaction(int(identifier))
        return transaction

    def get_details(
        self, identifier: str | int
    ) -> tuple[Transaction, list[TransactionItem], Optional[Payment]]:
        """Get a sale with its line items and payment.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        transaction = self.find_transaction(identifier)
        if transaction is None:
            raise errors.NotFoundError(errors.transaction_not_found(identifier))
        return (
            transaction,
            self.db.get_transaction_items(transaction.id),
            self.db.get_payment(transaction.id),
        )

    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        customer_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List sales, newest first.

        Args:
            start_date: Optional first day to include
            end_date: Optional last day to include
            customer_id: Optional customer ID filter

        Returns:
            List of transaction entities
        """
        start, end = day_bounds(start_date, end_date)
        return self.db.list_transactions(start_date=start, end_date=end, customer_id=customer_id)
