"""Shared pytest fixtures for tillkit tests."""

import tempfile
import os
from decimal import Decimal
import pytest

from tillkit.database.factories import create_sqlite_database
from tillkit.domain.cashback import CashbackService
from tillkit.domain.catalog import ProductService
from tillkit.domain.checkout import CheckoutService
from tillkit.domain.customer import CustomerService
from tillkit.domain.entities import Cart, CartLine, Product
from tillkit.domain.inventory import InventoryService
from tillkit.domain.offer import OfferService
from tillkit.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def product_service(temp_db):
    """Create a ProductService with a temporary database."""
    return ProductService(temp_db)


@pytest.fixture
def inventory_service(temp_db):
    """Create an InventoryService with a temporary database."""
    return InventoryService(temp_db)


@pytest.fixture
def customer_service(temp_db):
    """Create a CustomerService with a temporary database."""
    return CustomerService(temp_db)


@pytest.fixture
def offer_service(temp_db):
    """Create an OfferService with a temporary database."""
    return OfferService(temp_db)


@pytest.fixture
def cashback_service(temp_db):
    """Create a CashbackService earning 1% with a temporary database."""
    return CashbackService(temp_db, earning_rate=Decimal("1"))


@pytest.fixture
def checkout_service(temp_db):
    """Create a CheckoutService earning 1% cashback with a temporary database."""
    return CheckoutService(temp_db, cashback_rate=Decimal("1"))


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_products(product_service):
    """Two taxed products with stock, keyed by SKU."""
    product_service.create_product(
        sku="MOUSE-01",
        name="Wireless Mouse",
        unit_price=Decimal("100.00"),
        tax_rate=Decimal("10"),
        barcode="890000000001",
        initial_stock=10,
    )
    product_service.create_product(
        sku="CABLE-C",
        name="USB-C Cable",
        unit_price=Decimal("25.00"),
        tax_rate=Decimal("5"),
        initial_stock=3,
    )
    return {
        "MOUSE-01": product_service.get_product_by_sku("MOUSE-01"),
        "CABLE-C": product_service.get_product_by_sku("CABLE-C"),
    }


@pytest.fixture
def sample_customer(customer_service):
    """Create a sample customer."""
    customer_id = customer_service.create_customer(
        first_name="Asha", last_name="Rao", phone="9876543210"
    )
    return customer_service.get_customer(customer_id)


@pytest.fixture
def active_offer(offer_service):
    """A fixed 50 off offer that is active."""
    offer_id = offer_service.create_offer(
        code="FLAT50", name="Flat 50", offer_type="fixed_amount", discount=Decimal("50")
    )
    offer_service.activate_offer(offer_id)
    return offer_service.get_offer(offer_id)


@pytest.fixture
def make_product():
    """Build an unsaved product for pure pricing tests."""

    def _make(sku="SKU-1", price="100", tax_rate="10", product_id=1):
        return Product(
            id=product_id,
            sku=sku,
            name=f"Product {sku}",
            unit_price=Decimal(price),
            tax_rate=Decimal(tax_rate),
        )

    return _make


@pytest.fixture
def make_cart(make_product):
    """Build a cart from (price, tax_rate, quantity, discount) tuples."""

    def _make(*lines):
        cart_lines = []
        for index, (price, tax_rate, quantity, discount) in enumerate(lines, start=1):
            product = make_product(
                sku=f"SKU-{index}", price=price, tax_rate=tax_rate, product_id=index
            )
            cart_lines.append(CartLine(product=product, quantity=quantity, discount=Decimal(discount)))
        return Cart(lines=tuple(cart_lines))

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
