"""Sales report domain service."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from tillkit.database.base import Database
from tillkit.domain.entities import DailySales, SalesReport, Transaction
from tillkit.utils.date_parser import day_bounds

ZERO = Decimal("0")


class SalesReportService:
    """Service for building read-only sales summaries."""

    def __init__(self, db: Database):
        """Initialize sales report service.

        Args:
            db: Database instance
        """
        self.db = db

    def build_sales_report(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        top: int = 5,
    ) -> SalesReport:
        """Summarize completed sales between two dates (both inclusive).

        Args:
            start_date: Optional first day to include
            end_date: Optional last day to include
            top: Number of best-selling products to include

        Returns:
            SalesReport with totals, payment method and daily breakdowns
        """
        start, end = day_bounds(start_date, end_date)
        transactions = [
            txn
            for txn in self.db.list_transactions(start_date=start, end_date=end)
            if txn.status == "completed"
        ]

        return SalesReport(
            start_date=start,
            end_date=end,
            transaction_count=len(transactions),
            subtotal=sum((t.subtotal for t in transactions), ZERO),
            discounts=sum((t.discount_amount for t in transactions), ZERO),
            tax=sum((t.tax_amount for t in transactions), ZERO),
            cashback=sum((t.cashback_redeemed for t in transactions), ZERO),
            revenue=sum((t.total_amount for t in transactions), ZERO),
            by_payment_method=tuple(self.db.get_payment_method_totals(start, end)),
            by_day=tuple(self.group_by_day(transactions)),
            top_products=tuple(self.db.get_product_sales(start, end, limit=top)),
        )

    def group_by_day(self, transactions: Sequence[Transaction]) -> list[DailySales]:
        """Daily count and revenue, oldest day first."""
        counts: dict[str, int] = defaultdict(int)
        revenue: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for txn in transactions:
            if txn.created_at is None:
                continue
            key = txn.created_at.strftime("%Y-%m-%d")
            counts[key] += 1
            revenue[key] += txn.total_amount
        return [DailySales(day=key, count=counts[key], revenue=revenue[key]) for key in sorted(counts)]
