"""Tests for transaction lookup."""

from datetime import date, datetime, UTC
from decimal import Decimal

import pytest

from tillkit.domain import errors
from tillkit.domain.checkout import CheckoutRequest
from tillkit.domain.entities import Cart, PaymentMethod


@pytest.fixture
def two_days_of_sales(checkout_service, customer_service, sample_products, sample_customer):
    """One UPI sale on 15 March for Asha, one cash sale on 16 March for Vikram."""
    other_id = customer_service.create_customer(first_name="Vikram", phone="5550001")
    cable = sample_products["CABLE-C"]

    first = checkout_service.settle(
        CheckoutRequest(
            cart=Cart().add(cable, 1),
            customer_id=sample_customer.id,
            payment_method=PaymentMethod.UPI,
        ),
        now=datetime(2024, 3, 15, 23, 59, tzinfo=UTC),
    )
    second = checkout_service.settle(
        CheckoutRequest(
            cart=Cart().add(cable, 2),
            customer_id=other_id,
            payment_method=PaymentMethod.CASH,
            amount_received=Decimal("60"),
        ),
        now=datetime(2024, 3, 16, 0, 5, tzinfo=UTC),
    )
    return first.transaction, second.transaction


def test_find_transaction_by_number_or_id(transaction_service, two_days_of_sales):
    first, _ = two_days_of_sales

    assert transaction_service.find_transaction(first.transaction_number).id == first.id
    assert transaction_service.find_transaction(str(first.id)).id == first.id
    assert transaction_service.find_transaction(first.id).id == first.id
    assert transaction_service.find_transaction("TXN-19990101-000001") is None


def test_get_details(transaction_service, two_days_of_sales):
    _, second = two_days_of_sales

    transaction, items, payment = transaction_service.get_details(second.transaction_number)

    assert transaction.total_amount == Decimal("52.50")
    assert [item.quantity for item in items] == [2]
    assert payment.payment_method == PaymentMethod.CASH
    assert payment.amount == Decimal("60.00")

    with pytest.raises(errors.NotFoundError):
        transaction_service.get_details("missing")


def test_list_newest_first(transaction_service, two_days_of_sales):
    first, second = two_days_of_sales

    assert [t.id for t in transaction_service.list_transactions()] == [second.id, first.id]


def test_list_by_day(transaction_service, two_days_of_sales):
    first, second = two_days_of_sales

    on_15th = transaction_service.list_transactions(
        start_date=date(2024, 3, 15), end_date=date(2024, 3, 15)
    )
    from_16th = transaction_service.list_transactions(start_date=date(2024, 3, 16))

    assert [t.id for t in on_15th] == [first.id]
    assert [t.id for t in from_16th] == [second.id]


def test_list_by_customer(transaction_service, two_days_of_sales, sample_customer):
    first, _ = two_days_of_sales

    rows = transaction_service.list_transactions(customer_id=sample_customer.id)

    assert [t.id for t in rows] == [first.id]
