"""SQLAlchemy models for tillkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Numeric,
    CheckConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(12, 2, asdecimal=True)
RATE = Numeric(6, 3, asdecimal=True)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Sequence(Base):
    """Named counter used for transaction and customer numbers."""

    __tablename__ = "sequences"

    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)


class Product(Base):
    """Catalog product model."""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    sku = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    unit_price = Column(MONEY, nullable=False)
    tax_rate = Column(RATE, nullable=False, default=0)
    barcode = Column(String, unique=True, nullable=True)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    inventory = relationship(
        "Inventory", back_populates="product", uselist=False, cascade="all, delete-orphan"
    )


class Inventory(Base):
    """Per-product stock model."""

    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), unique=True, nullable=False)
    quantity_on_hand = Column(Integer, nullable=False, default=0)
    reorder_point = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (CheckConstraint("quantity_on_hand >= 0", name="ck_inventory_non_negative"),)

    # Relationships
    product = relationship("Product", back_populates="inventory")


class Customer(Base):
    """Customer model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    customer_number = Column(String, unique=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    phone = Column(String, unique=True, nullable=False)
    email = Column(String, nullable=True)
    total_purchases = Column(MONEY, nullable=False, default=0)
    last_purchase_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    cashback_account = relationship(
        "CashbackAccount", back_populates="customer", uselist=False, cascade="all, delete-orphan"
    )
    transactions = relationship("Transaction", back_populates="customer")


class Offer(Base):
    """Promotional offer model."""

    __tablename__ = "offers"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    offer_type = Column(String, nullable=False)
    discount_percentage = Column(RATE, nullable=True)
    discount_value = Column(MONEY, nullable=True)
    max_discount_cap = Column(MONEY, nullable=True)
    min_purchase_amount = Column(MONEY, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    status = Column(String, nullable=False, default="draft")
    total_usage_limit = Column(Integer, nullable=True)
    current_usage_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class CashbackAccount(Base):
    """Customer cashback balance model."""

    __tablename__ = "cashback_accounts"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), unique=True, nullable=False)
    current_balance = Column(MONEY, nullable=False, default=0)
    total_earned = Column(MONEY, nullable=False, default=0)
    total_redeemed = Column(MONEY, nullable=False, default=0)
    total_expired = Column(MONEY, nullable=False, default=0)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (CheckConstraint("current_balance >= 0", name="ck_cashback_non_negative"),)

    # Relationships
    customer = relationship("Customer", back_populates="cashback_account")
    entries = relationship("CashbackEntry", back_populates="account", cascade="all, delete-orphan")


class CashbackEntry(Base):
    """Cashback ledger entry model."""

    __tablename__ = "cashback_entries"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("cashback_accounts.id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    entry_type = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    balance_after = Column(MONEY, nullable=False)
    earning_rate = Column(RATE, nullable=True)
    earning_source = Column(String, nullable=True)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    account = relationship("CashbackAccount", back_populates="entries")


class Transaction(Base):
    """Completed sale model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    transaction_number = Column(String, unique=True, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    offer_id = Column(Integer, ForeignKey("offers.id"), nullable=True)
    cashier = Column(String, nullable=True)
    subtotal = Column(MONEY, nullable=False)
    discount_amount = Column(MONEY, nullable=False, default=0)
    tax_amount = Column(MONEY, nullable=False, default=0)
    cashback_redeemed = Column(MONEY, nullable=False, default=0)
    total_amount = Column(MONEY, nullable=False)
    amount_paid = Column(MONEY, nullable=False)
    change_amount = Column(MONEY, nullable=False, default=0)
    payment_status = Column(String, nullable=False, default="completed")
    status = Column(String, nullable=False, default="completed")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    customer = relationship("Customer", back_populates="transactions")
    items = relationship("TransactionItem", back_populates="transaction", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="transaction", cascade="all, delete-orphan")


class TransactionItem(Base):
    """Sale line item model."""

    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(MONEY, nullable=False)
    discount_amount = Column(MONEY, nullable=False, default=0)
    tax_amount = Column(MONEY, nullable=False, default=0)
    line_total = Column(MONEY, nullable=False)

    # Relationships
    transaction = relationship("Transaction", back_populates="items")
    product = relationship("Product")


class Payment(Base):
    """Payment model. Only the last four digits of a card are kept."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False)
    payment_method = Column(String, nullable=False)
    amount = Column(MONEY, nullable=False)
    payment_status = Column(String, nullable=False, default="completed")
    authorization_code = Column(String, nullable=True)
    card_last_four = Column(String(4), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    transaction = relationship("Transaction", back_populates="payments")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
