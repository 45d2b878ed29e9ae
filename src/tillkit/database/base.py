"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from tillkit.domain.entities import (
    CashbackAccount,
    CashbackEntry,
    Customer,
    InventoryRecord,
    Offer,
    Payment,
    ProductSales,
    PaymentBreakdown,
    Product,
    Transaction,
    TransactionItem,
)


class Database(ABC):
    """Abstract record store for tillkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Group writes into one transaction.

        Writes issued inside the block are committed together when it exits
        normally and rolled back together if it raises.
        """
        pass

    # Sequence operations
    @abstractmethod
    def next_sequence_value(self, name: str) -> int:
        """Increment and return the named counter (first value is 1)."""
        pass

    # Product operations
    @abstractmethod
    def create_product(
        self,
        sku: str,
        name: str,
        unit_price: Decimal,
        tax_rate: Decimal,
        barcode: Optional[str] = None,
    ) -> int:
        """Create a product. Returns product ID."""
        pass

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[Product]:
        """Get product by ID."""
        pass

    @abstractmethod
    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        """Get product by SKU."""
        pass

    @abstractmethod
    def get_product_by_barcode(self, barcode: str) -> Optional[Product]:
        """Get product by barcode."""
        pass

    @abstractmethod
    def list_products(self, include_inactive: bool = False) -> list[Product]:
        """List products ordered by name."""
        pass

    @abstractmethod
    def search_products(self, query: str) -> list[Product]:
        """Case-insensitive substring search over name, SKU and barcode."""
        pass

    @abstractmethod
    def update_product_status(self, product_id: int, status: str) -> None:
        """Set product status."""
        pass

    # Inventory operations
    @abstractmethod
    def get_inventory(self, product_id: int) -> Optional[InventoryRecord]:
        """Get the inventory record of a product."""
        pass

    @abstractmethod
    def set_inventory(
        self, product_id: int, quantity_on_hand: int, reorder_point: Optional[int] = None
    ) -> int:
        """Create or replace the inventory record of a product. Returns record ID."""
        pass

    @abstractmethod
    def adjust_inventory(self, product_id: int, delta: int) -> Optional[int]:
        """Add delta to quantity on hand, floored at zero, in a single update.

        Returns:
            The new quantity, or None if the product has no inventory record
        """
        pass

    @abstractmethod
    def list_inventory(self) -> list[InventoryRecord]:
        """List all inventory records."""
        pass

    # Customer operations
    @abstractmethod
    def create_customer(
        self,
        customer_number: str,
        first_name: str,
        last_name: str,
        phone: str,
        email: Optional[str] = None,
    ) -> int:
        """Create a customer. Returns customer ID."""
        pass

    @abstractmethod
    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        pass

    @abstractmethod
    def get_customer_by_number(self, customer_number: str) -> Optional[Customer]:
        """Get customer by customer number."""
        pass

    @abstractmethod
    def get_customer_by_phone(self, phone: str) -> Optional[Customer]:
        """Get customer by phone number."""
        pass

    @abstractmethod
    def list_customers(self) -> list[Customer]:
        """List customers ordered by name."""
        pass

    @abstractmethod
    def record_customer_purchase(
        self, customer_id: int, amount: Decimal, purchased_at: datetime
    ) -> None:
        """Add amount to the customer's total purchases and stamp the purchase time."""
        pass

    # Offer operations
    @abstractmethod
    def create_offer(
        self,
        code: str,
        name: str,
        offer_type: str,
        discount_percentage: Optional[Decimal] = None,
        discount_value: Optional[Decimal] = None,
        max_discount_cap: Optional[Decimal] = None,
        min_purchase_amount: Optional[Decimal] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        total_usage_limit: Optional[int] = None,
        description: Optional[str] = None,
        status: str = "draft",
    ) -> int:
        """Create an offer. Returns offer ID."""
        pass

    @abstractmethod
    def get_offer(self, offer_id: int) -> Optional[Offer]:
        """Get offer by ID."""
        pass

    @abstractmethod
    def get_offer_by_code(self, code: str) -> Optional[Offer]:
        """Get offer by its normalized code."""
        pass

    @abstractmethod
    def list_offers(self, status: Optional[str] = None) -> list[Offer]:
        """List offers, newest first, optionally filtered by status."""
        pass

    @abstractmethod
    def update_offer(self, offer_id: int, **fields) -> None:
        """Update offer columns given as keyword arguments."""
        pass

    @abstractmethod
    def delete_offer(self, offer_id: int) -> None:
        """Delete an offer."""
        pass

    @abstractmethod
    def increment_offer_usage(self, offer_id: int) -> None:
        """Count one more use of an offer."""
        pass

    # Cashback operations
    @abstractmethod
    def get_cashback_account(self, customer_id: int) -> Optional[CashbackAccount]:
        """Get the cashback account of a customer."""
        pass

    @abstractmethod
    def create_cashback_account(self, customer_id: int) -> int:
        """Create an empty cashback account. Returns account ID."""
        pass

    @abstractmethod
    def update_cashback_account(
        self,
        account_id: int,
        current_balance: Decimal,
        total_earned: Decimal,
        total_redeemed: Decimal,
        total_expired: Decimal,
    ) -> None:
        """Overwrite the balances of a cashback account."""
        pass

    @abstractmethod
    def add_cashback_entry(
        self,
        account_id: int,
        customer_id: int,
        entry_type: str,
        amount: Decimal,
        balance_after: Decimal,
        transaction_id: Optional[int] = None,
        earning_rate: Optional[Decimal] = None,
        earning_source: Optional[str] = None,
        description: Optional[str] = None,
    ) -> int:
        """Append a cashback ledger entry. Returns entry ID."""
        pass

    @abstractmethod
    def list_cashback_entries(self, customer_id: int, limit: int = 50) -> list[CashbackEntry]:
        """List ledger entries of a customer, newest first."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        transaction_number: str,
        customer_id: Optional[int],
        subtotal: Decimal,
        discount_amount: Decimal,
        tax_amount: Decimal,
        cashback_redeemed: Decimal,
        total_amount: Decimal,
        amount_paid: Decimal,
        change_amount: Decimal,
        payment_status: str = "completed",
        status: str = "completed",
        cashier: Optional[str] = None,
        offer_id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def get_transaction_by_number(self, transaction_number: str) -> Optional[Transaction]:
        """Get transaction by transaction number."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        customer_id: Optional[int] = None,
    ) -> list[Transaction]:
        """List transactions, newest first, with optional filters.

        Args:
            start_date: Optional inclusive lower bound on creation time
            end_date: Optional exclusive upper bound on creation time
            customer_id: Optional customer ID filter
        """
        pass

    @abstractmethod
    def add_transaction_item(
        self,
        transaction_id: int,
        product_id: int,
        quantity: int,
        unit_price: Decimal,
        discount_amount: Decimal,
        tax_amount: Decimal,
        line_total: Decimal,
    ) -> int:
        """Add a line item to a transaction. Returns item ID."""
        pass

    @abstractmethod
    def get_transaction_items(self, transaction_id: int) -> list[TransactionItem]:
        """Get the line items of a transaction."""
        pass

    @abstractmethod
    def create_payment(
        self,
        transaction_id: int,
        payment_method: str,
        amount: Decimal,
        payment_status: str = "completed",
        authorization_code: Optional[str] = None,
        card_last_four: Optional[str] = None,
    ) -> int:
        """Record a payment. Returns payment ID."""
        pass

    @abstractmethod
    def get_payment(self, transaction_id: int) -> Optional[Payment]:
        """Get the payment of a transaction."""
        pass

    # Report operations
    @abstractmethod
    def get_payment_method_totals(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> list[PaymentBreakdown]:
        """Sum completed sales by payment method."""
        pass

    @abstractmethod
    def get_product_sales(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[ProductSales]:
        """Units and revenue per product, best sellers first."""
        pass
