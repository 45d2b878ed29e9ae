"""Domain model entities for tillkit.

These are pure data classes representing business concepts, independent of
the database schema. Services and the pricing calculator only ever see these
types; the ORM models stay inside the database layer.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional


class OfferType(str, Enum):
    """Supported discount shapes for an offer."""

    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class OfferStatus(str, Enum):
    """Lifecycle status of an offer."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"
    EXPIRED = "expired"


class PaymentMethod(str, Enum):
    """Tender types accepted at checkout."""

    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    DIGITAL_WALLET = "digital_wallet"


class CashbackEntryType(str, Enum):
    """Kinds of cashback ledger entries."""

    EARNED = "earned"
    REDEEMED = "redeemed"
    EXPIRED = "expired"
    ADJUSTED = "adjusted"


@dataclass(frozen=True)
class Product:
    """Catalog product domain entity."""

    id: int
    sku: str
    name: str
    unit_price: Decimal
    tax_rate: Decimal
    barcode: Optional[str] = None
    status: str = "active"
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class InventoryRecord:
    """On-hand stock for one product."""

    id: int
    product_id: int
    quantity_on_hand: int
    reorder_point: Optional[int] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Customer:
    """Customer domain entity."""

    id: int
    customer_number: str
    first_name: str
    last_name: str
    phone: str
    email: Optional[str] = None
    total_purchases: Decimal = Decimal("0")
    last_purchase_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Offer:
    """Promotional code domain entity."""

    id: int
    code: str
    name: str
    offer_type: OfferType
    status: OfferStatus = OfferStatus.DRAFT
    description: Optional[str] = None
    discount_percentage: Optional[Decimal] = None
    discount_value: Optional[Decimal] = None
    max_discount_cap: Optional[Decimal] = None
    min_purchase_amount: Optional[Decimal] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_usage_limit: Optional[int] = None
    current_usage_count: int = 0
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CashbackAccount:
    """Per-customer cashback balance."""

    id: int
    customer_id: int
    current_balance: Decimal
    total_earned: Decimal
    total_redeemed: Decimal
    total_expired: Decimal = Decimal("0")
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CashbackEntry:
    """Cashback ledger entry. Redemptions carry a negative amount."""

    id: int
    account_id: int
    customer_id: int
    entry_type: CashbackEntryType
    amount: Decimal
    balance_after: Decimal
    transaction_id: Optional[int] = None
    earning_rate: Optional[Decimal] = None
    earning_source: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    """Completed sale domain entity."""

    id: int
    transaction_number: str
    customer_id: Optional[int]
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    cashback_redeemed: Decimal
    total_amount: Decimal
    amount_paid: Decimal
    change_amount: Decimal
    payment_status: str
    status: str
    cashier: Optional[str] = None
    offer_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TransactionItem:
    """A single product line of a completed sale."""

    id: int
    transaction_id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Payment:
    """Tender recorded against a sale."""

    id: int
    transaction_id: int
    payment_method: PaymentMethod
    amount: Decimal
    payment_status: str
    authorization_code: Optional[str] = None
    card_last_four: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CartLine:
    """A product on the cart with quantity and a manual line discount."""

    product: Product
    quantity: int = 1
    discount: Decimal = Decimal("0")

    @property
    def line_subtotal(self) -> Decimal:
        return self.product.unit_price * self.quantity


@dataclass(frozen=True)
class Cart:
    """Immutable cart value. Every change returns a new Cart."""

    lines: tuple[CartLine, ...] = ()

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def find(self, product_id: int) -> Optional[CartLine]:
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def add(self, product: Product, quantity: int = 1) -> "Cart":
        """Add a product, incrementing the quantity if it is already present."""
        if self.find(product.id) is None:
            return Cart(self.lines + (CartLine(product=product, quantity=quantity),))
        return Cart(
            tuple(
                replace(line, quantity=line.quantity + quantity)
                if line.product.id == product.id
                else line
                for line in self.lines
            )
        )

    def with_quantity(self, product_id: int, quantity: int) -> "Cart":
        return Cart(
            tuple(
                replace(line, quantity=quantity) if line.product.id == product_id else line
                for line in self.lines
            )
        )

    def with_discount(self, product_id: int, discount: Decimal) -> "Cart":
        return Cart(
            tuple(
                replace(line, discount=discount) if line.product.id == product_id else line
                for line in self.lines
            )
        )

    def without(self, product_id: int) -> "Cart":
        return Cart(tuple(line for line in self.lines if line.product.id != product_id))


@dataclass(frozen=True)
class LineSettlement:
    """Computed amounts for one cart line."""

    product: Product
    quantity: int
    unit_price: Decimal
    line_subtotal: Decimal
    discount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of pricing a cart. Amounts are exact (unrounded)."""

    subtotal: Decimal
    line_discount_total: Decimal
    offer_discount: Decimal
    total_discount: Decimal
    tax_amount: Decimal
    total_before_cashback: Decimal
    cashback_redeemed: Decimal
    final_total: Decimal
    amount_paid: Decimal
    change: Decimal
    payment_method: PaymentMethod
    lines: tuple[LineSettlement, ...] = ()
    offer: Optional[Offer] = None


@dataclass(frozen=True)
class ReceiptLine:
    """Printable line of a receipt."""

    name: str
    sku: str
    quantity: int
    unit_price: Decimal
    discount: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class Receipt:
    """Plain data handed to a receipt renderer."""

    transaction_number: str
    items: tuple[ReceiptLine, ...]
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    cashback: Decimal
    total: Decimal
    payment_method: PaymentMethod
    amount_paid: Decimal
    change: Decimal
    customer_name: Optional[str] = None
    offer_code: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class SettlementReceipt:
    """Result of settling a cart: the stored sale plus its receipt."""

    transaction: Transaction
    items: tuple[TransactionItem, ...]
    payment: Optional[Payment]
    receipt: Receipt
    cashback_earned: Decimal = Decimal("0")
    replayed: bool = False


@dataclass(frozen=True)
class PaymentBreakdown:
    """Sales totals for one payment method."""

    payment_method: str
    count: int
    amount: Decimal


@dataclass(frozen=True)
class DailySales:
    """Sales totals for one calendar day."""

    day: str
    count: int
    revenue: Decimal


@dataclass(frozen=True)
class ProductSales:
    """Units and revenue for one product."""

    product_id: int
    sku: str
    name: str
    quantity: int
    revenue: Decimal


@dataclass(frozen=True)
class SalesReport:
    """Read-and-summarize view over completed sales."""

    start_date: Optional[datetime]
    end_date: Optional[datetime]
    transaction_count: int
    subtotal: Decimal
    discounts: Decimal
    tax: Decimal
    cashback: Decimal
    revenue: Decimal
    by_payment_method: tuple[PaymentBreakdown, ...] = ()
    by_day: tuple[DailySales, ...] = ()
    top_products: tuple[ProductSales, ...] = field(default_factory=tuple)

    @property
    def average_sale(self) -> Decimal:
        if self.transaction_count == 0:
            return Decimal("0")
        return self.revenue / self.transaction_count
