"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay
unchanged when the table layout changes.
"""

from decimal import Decimal

from tillkit.domain import entities as domain
from tillkit.database.models import (
    CashbackAccount as ORMCashbackAccount,
    CashbackEntry as ORMCashbackEntry,
    Customer as ORMCustomer,
    Inventory as ORMInventory,
    Offer as ORMOffer,
    Payment as ORMPayment,
    Product as ORMProduct,
    Transaction as ORMTransaction,
    TransactionItem as ORMTransactionItem,
)


def _money(value) -> Decimal:
    return Decimal("0") if value is None else Decimal(value)


def product_to_domain(orm_product: ORMProduct) -> domain.Product:
    """Convert SQLAlchemy Product model to domain Product entity."""
    return domain.Product(
        id=orm_product.id,
        sku=orm_product.sku,
        name=orm_product.name,
        unit_price=_money(orm_product.unit_price),
        tax_rate=_money(orm_product.tax_rate),
        barcode=orm_product.barcode,
        status=orm_product.status,
        created_at=orm_product.created_at,
    )


def inventory_to_domain(orm_inventory: ORMInventory) -> domain.InventoryRecord:
    """Convert SQLAlchemy Inventory model to domain InventoryRecord entity."""
    return domain.InventoryRecord(
        id=orm_inventory.id,
        product_id=orm_inventory.product_id,
        quantity_on_hand=orm_inventory.quantity_on_hand,
        reorder_point=orm_inventory.reorder_point,
        updated_at=orm_inventory.updated_at,
    )


def customer_to_domain(orm_customer: ORMCustomer) -> domain.Customer:
    """Convert SQLAlchemy Customer model to domain Customer entity."""
    return domain.Customer(
        id=orm_customer.id,
        customer_number=orm_customer.customer_number,
        first_name=orm_customer.first_name,
        last_name=orm_customer.last_name,
        phone=orm_customer.phone,
        email=orm_customer.email,
        total_purchases=_money(orm_customer.total_purchases),
        last_purchase_at=orm_customer.last_purchase_at,
        created_at=orm_customer.created_at,
    )


def offer_to_domain(orm_offer: ORMOffer) -> domain.Offer:
    """Convert SQLAlchemy Offer model to domain Offer entity."""
    return domain.Offer(
        id=orm_offer.id,
        code=orm_offer.code,
        name=orm_offer.name,
        description=orm_offer.description,
        offer_type=domain.OfferType(orm_offer.offer_type),
        status=domain.OfferStatus(orm_offer.status),
        discount_percentage=orm_offer.discount_percentage,
        discount_value=orm_offer.discount_value,
        max_discount_cap=orm_offer.max_discount_cap,
        min_purchase_amount=orm_offer.min_purchase_amount,
        start_date=orm_offer.start_date,
        end_date=orm_offer.end_date,
        total_usage_limit=orm_offer.total_usage_limit,
        current_usage_count=orm_offer.current_usage_count or 0,
        created_at=orm_offer.created_at,
    )


def cashback_account_to_domain(orm_account: ORMCashbackAccount) -> domain.CashbackAccount:
    """Convert SQLAlchemy CashbackAccount model to domain CashbackAccount entity."""
    return domain.CashbackAccount(
        id=orm_account.id,
        customer_id=orm_account.customer_id,
        current_balance=_money(orm_account.current_balance),
        total_earned=_money(orm_account.total_earned),
        total_redeemed=_money(orm_account.total_redeemed),
        total_expired=_money(orm_account.total_expired),
        updated_at=orm_account.updated_at,
    )


def cashback_entry_to_domain(orm_entry: ORMCashbackEntry) -> domain.CashbackEntry:
    """Convert SQLAlchemy CashbackEntry model to domain CashbackEntry entity."""
    return domain.CashbackEntry(
        id=orm_entry.id,
        account_id=orm_entry.account_id,
        customer_id=orm_entry.customer_id,
        transaction_id=orm_entry.transaction_id,
        entry_type=domain.CashbackEntryType(orm_entry.entry_type),
        amount=_money(orm_entry.amount),
        balance_after=_money(orm_entry.balance_after),
        earning_rate=orm_entry.earning_rate,
        earning_source=orm_entry.earning_source,
        description=orm_entry.description,
        created_at=orm_entry.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        transaction_number=orm_transaction.transaction_number,
        customer_id=orm_transaction.customer_id,
        offer_id=orm_transaction.offer_id,
        cashier=orm_transaction.cashier,
        subtotal=_money(orm_transaction.subtotal),
        discount_amount=_money(orm_transaction.discount_amount),
        tax_amount=_money(orm_transaction.tax_amount),
        cashback_redeemed=_money(orm_transaction.cashback_redeemed),
        total_amount=_money(orm_transaction.total_amount),
        amount_paid=_money(orm_transaction.amount_paid),
        change_amount=_money(orm_transaction.change_amount),
        payment_status=orm_transaction.payment_status,
        status=orm_transaction.status,
        created_at=orm_transaction.created_at,
    )


def transaction_item_to_domain(orm_item: ORMTransactionItem) -> domain.TransactionItem:
    """Convert SQLAlchemy TransactionItem model to domain TransactionItem entity."""
    return domain.TransactionItem(
        id=orm_item.id,
        transaction_id=orm_item.transaction_id,
        product_id=orm_item.product_id,
        quantity=orm_item.quantity,
        unit_price=_money(orm_item.unit_price),
        discount_amount=_money(orm_item.discount_amount),
        tax_amount=_money(orm_item.tax_amount),
        line_total=_money(orm_item.line_total),
    )


def payment_to_domain(orm_payment: ORMPayment) -> domain.Payment:
    """Convert SQLAlchemy Payment model to domain Payment entity."""
    return domain.Payment(
        id=orm_payment.id,
        transaction_id=orm_payment.transaction_id,
        payment_method=domain.PaymentMethod(orm_payment.payment_method),
        amount=_money(orm_payment.amount),
        payment_status=orm_payment.payment_status,
        authorization_code=orm_payment.authorization_code,
        card_last_four=orm_payment.card_last_four,
        created_at=orm_payment.created_at,
    )
