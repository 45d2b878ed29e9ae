"""Tests for checkout settlement."""

from datetime import datetime, UTC
from decimal import Decimal

import pytest

from tillkit.domain import errors
from tillkit.domain.checkout import (
    CheckoutRequest,
    CheckoutService,
    card_last_four,
    generate_authorization_code,
)
from tillkit.domain.entities import Cart, CashbackEntryType, PaymentMethod

SALE_TIME = datetime(2024, 3, 15, 10, 30, tzinfo=UTC)


def cart_of(*pairs):
    cart = Cart()
    for product, quantity in pairs:
        cart = cart.add(product, quantity)
    return cart


def cash_request(cart, customer, received, **kwargs):
    return CheckoutRequest(
        cart=cart,
        customer_id=customer.id,
        payment_method=PaymentMethod.CASH,
        amount_received=Decimal(received),
        **kwargs,
    )


def test_cash_sale_runs_every_step(
    checkout_service, temp_db, sample_products, sample_customer, active_offer
):
    """100 x 2 at 10% tax with FLAT50 comes to 170; 200 tendered gives 30 change."""
    mouse = sample_products["MOUSE-01"]
    request = cash_request(
        cart_of((mouse, 2)), sample_customer, "200", offer_code="flat50", cashier="Ravi"
    )

    sale = checkout_service.settle(request, now=SALE_TIME)

    txn = sale.transaction
    assert txn.transaction_number == "TXN-20240315-000001"
    assert txn.customer_id == sample_customer.id
    assert txn.subtotal == Decimal("200.00")
    assert txn.discount_amount == Decimal("50.00")
    assert txn.tax_amount == Decimal("20.00")
    assert txn.total_amount == Decimal("170.00")
    assert txn.amount_paid == Decimal("200.00")
    assert txn.change_amount == Decimal("30.00")
    assert txn.status == "completed"
    assert txn.cashier == "Ravi"
    assert txn.offer_id == active_offer.id
    assert not sale.replayed

    assert len(sale.items) == 1
    item = sale.items[0]
    assert item.product_id == mouse.id
    assert item.quantity == 2
    assert item.tax_amount == Decimal("20.00")
    assert item.line_total == Decimal("220.00")

    assert sale.payment.payment_method == PaymentMethod.CASH
    assert sale.payment.amount == Decimal("200.00")
    assert sale.payment.authorization_code is None

    assert temp_db.get_inventory(mouse.id).quantity_on_hand == 8

    customer = temp_db.get_customer(sample_customer.id)
    assert customer.total_purchases == Decimal("170.00")
    assert customer.last_purchase_at is not None

    assert sale.cashback_earned == Decimal("1.70")
    account = temp_db.get_cashback_account(sample_customer.id)
    assert account.current_balance == Decimal("1.70")

    assert temp_db.get_offer(active_offer.id).current_usage_count == 1

    assert sale.receipt.total == Decimal("170.00")
    assert sale.receipt.change == Decimal("30.00")
    assert sale.receipt.offer_code == "FLAT50"
    assert sale.receipt.customer_name == "Asha Rao"


def test_transaction_numbers_are_sequential(checkout_service, sample_products, sample_customer):
    cable = sample_products["CABLE-C"]
    first = checkout_service.settle(
        cash_request(cart_of((cable, 1)), sample_customer, "50"), now=SALE_TIME
    )
    second = checkout_service.settle(
        cash_request(cart_of((cable, 1)), sample_customer, "50"), now=SALE_TIME
    )

    assert first.transaction.transaction_number == "TXN-20240315-000001"
    assert second.transaction.transaction_number == "TXN-20240315-000002"


def test_card_sale_stores_only_last_four(checkout_service, sample_products, sample_customer):
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=sample_customer.id,
        payment_method=PaymentMethod.CARD,
        card_number="4111 1111 1111 1234",
    )

    sale = checkout_service.settle(request, now=SALE_TIME)

    assert sale.payment.payment_method == PaymentMethod.CARD
    assert sale.payment.card_last_four == "1234"
    assert sale.payment.amount == Decimal("110.00")
    assert sale.payment.authorization_code.startswith("AUTH")
    assert sale.transaction.change_amount == Decimal("0.00")


def test_terminal_auth_code_is_kept(checkout_service, sample_products, sample_customer):
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=sample_customer.id,
        payment_method=PaymentMethod.CARD,
        card_number="1234",
        authorization_code="T-998877",
    )

    sale = checkout_service.settle(request, now=SALE_TIME)

    assert sale.payment.authorization_code == "T-998877"
    assert sale.payment.card_last_four == "1234"


def test_card_sale_without_card_number_writes_nothing(
    checkout_service, temp_db, sample_products, sample_customer
):
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=sample_customer.id,
        payment_method=PaymentMethod.CARD,
    )

    with pytest.raises(errors.PaymentError):
        checkout_service.settle(request, now=SALE_TIME)

    assert temp_db.list_transactions() == []


def test_insufficient_cash_writes_nothing(
    checkout_service, temp_db, sample_products, sample_customer
):
    mouse = sample_products["MOUSE-01"]
    with pytest.raises(errors.PaymentError, match="Insufficient payment amount"):
        checkout_service.settle(
            cash_request(cart_of((mouse, 1)), sample_customer, "100"), now=SALE_TIME
        )

    assert temp_db.list_transactions() == []
    assert temp_db.get_inventory(mouse.id).quantity_on_hand == 10


def test_customer_is_required(checkout_service, sample_products):
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=None,
        payment_method=PaymentMethod.UPI,
    )
    with pytest.raises(errors.ValidationError, match="No customer selected"):
        checkout_service.settle(request)


def test_unknown_customer(checkout_service, sample_products):
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=999,
        payment_method=PaymentMethod.UPI,
    )
    with pytest.raises(errors.NotFoundError):
        checkout_service.settle(request)


def test_empty_cart(checkout_service, sample_customer):
    request = CheckoutRequest(cart=Cart(), customer_id=sample_customer.id)
    with pytest.raises(errors.ValidationError, match="Cart is empty"):
        checkout_service.settle(request)


def test_unknown_offer_code(checkout_service, sample_products, sample_customer):
    request = cash_request(
        cart_of((sample_products["MOUSE-01"], 1)), sample_customer, "500", offer_code="NOPE"
    )
    with pytest.raises(errors.OfferError) as exc_info:
        checkout_service.settle(request, now=SALE_TIME)
    assert exc_info.value.reason == errors.OFFER_UNKNOWN


def test_offer_usage_limit_is_enforced(
    checkout_service, offer_service, sample_products, sample_customer
):
    offer_id = offer_service.create_offer(
        code="ONCE",
        name="Once",
        offer_type="fixed_amount",
        discount=Decimal("5"),
        total_usage_limit=1,
    )
    offer_service.activate_offer(offer_id)
    cable = sample_products["CABLE-C"]

    checkout_service.settle(
        cash_request(cart_of((cable, 1)), sample_customer, "50", offer_code="ONCE"),
        now=SALE_TIME,
    )
    with pytest.raises(errors.OfferError) as exc_info:
        checkout_service.settle(
            cash_request(cart_of((cable, 1)), sample_customer, "50", offer_code="ONCE"),
            now=SALE_TIME,
        )
    assert exc_info.value.reason == errors.OFFER_USAGE_LIMIT


def test_cashback_redemption(checkout_service, cashback_service, temp_db, sample_products, sample_customer):
    cashback_service.credit(sample_customer.id, Decimal("30"), "Bonus")
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=sample_customer.id,
        payment_method=PaymentMethod.UPI,
        cashback_to_redeem=Decimal("30"),
    )

    sale = checkout_service.settle(request, now=SALE_TIME)

    assert sale.transaction.cashback_redeemed == Decimal("30.00")
    assert sale.transaction.total_amount == Decimal("80.00")
    assert sale.payment.authorization_code.startswith("UPI")

    account = temp_db.get_cashback_account(sample_customer.id)
    assert account.current_balance == Decimal("0.80")
    assert account.total_redeemed == Decimal("30.00")

    entries = temp_db.list_cashback_entries(sample_customer.id)
    redeemed = [e for e in entries if e.entry_type == CashbackEntryType.REDEEMED]
    assert len(redeemed) == 1
    assert redeemed[0].amount == Decimal("-30.00")
    assert redeemed[0].transaction_id == sale.transaction.id


def test_cashback_beyond_total_only_spends_what_applies(
    checkout_service, cashback_service, temp_db, sample_products, sample_customer
):
    cashback_service.credit(sample_customer.id, Decimal("500"), "Bonus")
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=sample_customer.id,
        payment_method=PaymentMethod.DIGITAL_WALLET,
        cashback_to_redeem=Decimal("200"),
    )

    sale = checkout_service.settle(request, now=SALE_TIME)

    assert sale.transaction.total_amount == Decimal("0.00")
    assert sale.transaction.cashback_redeemed == Decimal("110.00")
    assert sale.cashback_earned == Decimal("0")
    assert temp_db.get_cashback_account(sample_customer.id).current_balance == Decimal("390.00")


def test_redeeming_more_than_balance_writes_nothing(
    checkout_service, cashback_service, temp_db, sample_products, sample_customer
):
    cashback_service.credit(sample_customer.id, Decimal("10"), "Bonus")
    request = CheckoutRequest(
        cart=cart_of((sample_products["MOUSE-01"], 1)),
        customer_id=sample_customer.id,
        payment_method=PaymentMethod.UPI,
        cashback_to_redeem=Decimal("10.01"),
    )

    with pytest.raises(errors.ValidationError, match="Insufficient cashback balance"):
        checkout_service.settle(request, now=SALE_TIME)
    assert temp_db.list_transactions() == []


def test_inventory_floors_at_zero(checkout_service, temp_db, sample_products, sample_customer):
    cable = sample_products["CABLE-C"]

    checkout_service.settle(
        cash_request(cart_of((cable, 5)), sample_customer, "200"), now=SALE_TIME
    )

    assert temp_db.get_inventory(cable.id).quantity_on_hand == 0


def test_sale_without_inventory_record(
    checkout_service, product_service, temp_db, sample_customer
):
    product_id = product_service.create_product(
        sku="GIFT", name="Gift Wrap", unit_price=Decimal("10")
    )
    product = product_service.get_product(product_id)

    sale = checkout_service.settle(
        cash_request(cart_of((product, 2)), sample_customer, "20"), now=SALE_TIME
    )

    assert sale.transaction.total_amount == Decimal("20.00")
    assert temp_db.get_inventory(product_id) is None


def test_failed_step_rolls_back_everything(
    checkout_service, temp_db, sample_products, sample_customer, active_offer, monkeypatch
):
    mouse = sample_products["MOUSE-01"]

    def fail(offer_id):
        raise RuntimeError("disk full")

    monkeypatch.setattr(temp_db, "increment_offer_usage", fail)

    with pytest.raises(errors.SettlementError) as exc_info:
        checkout_service.settle(
            cash_request(cart_of((mouse, 2)), sample_customer, "200", offer_code="FLAT50"),
            now=SALE_TIME,
        )

    assert exc_info.value.step == "offer"
    assert "Transaction failed while updating offer usage: disk full" in str(exc_info.value)
    assert temp_db.list_transactions() == []
    assert temp_db.get_inventory(mouse.id).quantity_on_hand == 10
    assert temp_db.get_customer(sample_customer.id).total_purchases == Decimal("0.00")
    assert temp_db.get_cashback_account(sample_customer.id) is None


def test_failed_inventory_step_is_named(
    checkout_service, temp_db, sample_products, sample_customer, monkeypatch
):
    def fail(product_id, delta):
        raise RuntimeError("locked")

    monkeypatch.setattr(temp_db, "adjust_inventory", fail)

    with pytest.raises(errors.SettlementError) as exc_info:
        checkout_service.settle(
            cash_request(cart_of((sample_products["CABLE-C"], 1)), sample_customer, "50"),
            now=SALE_TIME,
        )

    assert exc_info.value.step == "inventory"
    assert temp_db.get_transaction_by_number("TXN-20240315-000001") is None


def test_transaction_number_is_reused_after_rollback(
    checkout_service, temp_db, sample_products, sample_customer, monkeypatch
):
    cable = sample_products["CABLE-C"]
    original = temp_db.record_customer_purchase

    def fail(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(temp_db, "record_customer_purchase", fail)
    with pytest.raises(errors.SettlementError):
        checkout_service.settle(cash_request(cart_of((cable, 1)), sample_customer, "50"), now=SALE_TIME)

    monkeypatch.setattr(temp_db, "record_customer_purchase", original)
    sale = checkout_service.settle(
        cash_request(cart_of((cable, 1)), sample_customer, "50"), now=SALE_TIME
    )
    assert sale.transaction.transaction_number == "TXN-20240315-000001"


def test_replay_returns_stored_sale(checkout_service, temp_db, sample_products, sample_customer):
    mouse = sample_products["MOUSE-01"]
    number = checkout_service.reserve_transaction_number(now=SALE_TIME)
    request = cash_request(
        cart_of((mouse, 1)), sample_customer, "200", transaction_number=number
    )

    first = checkout_service.settle(request, now=SALE_TIME)
    second = checkout_service.settle(request, now=SALE_TIME)

    assert first.transaction.transaction_number == number
    assert not first.replayed
    assert second.replayed
    assert second.transaction.id == first.transaction.id
    assert second.receipt.total == first.receipt.total
    assert second.receipt.change == Decimal("90.00")
    assert len(temp_db.list_transactions()) == 1
    assert temp_db.get_inventory(mouse.id).quantity_on_hand == 9
    assert temp_db.get_customer(sample_customer.id).total_purchases == Decimal("110.00")


def test_load_sale_rebuilds_receipt(checkout_service, sample_products, sample_customer, active_offer):
    sale = checkout_service.settle(
        cash_request(
            cart_of((sample_products["MOUSE-01"], 2)), sample_customer, "170", offer_code="FLAT50"
        ),
        now=SALE_TIME,
    )

    loaded = checkout_service.load_sale(sale.transaction.transaction_number)

    assert loaded.receipt.items[0].name == "Wireless Mouse"
    assert loaded.receipt.total == Decimal("170.00")
    assert loaded.receipt.offer_code == "FLAT50"
    assert loaded.receipt.customer_name == "Asha Rao"
    assert loaded.receipt.payment_method == PaymentMethod.CASH


def test_load_missing_sale(checkout_service):
    with pytest.raises(errors.NotFoundError):
        checkout_service.load_sale("TXN-20240101-000001")


def test_quote_does_not_write(checkout_service, temp_db, sample_products, sample_customer):
    quote = checkout_service.quote(
        cash_request(cart_of((sample_products["MOUSE-01"], 1)), sample_customer, "110")
    )
    assert quote.settlement.final_total == Decimal("110")
    assert temp_db.list_transactions() == []


def test_zero_rate_checkout_earns_nothing(temp_db, sample_products, sample_customer):
    service = CheckoutService(temp_db)
    sale = service.settle(
        cash_request(cart_of((sample_products["MOUSE-01"], 1)), sample_customer, "110"),
        now=SALE_TIME,
    )
    assert sale.cashback_earned == Decimal("0")
    assert temp_db.get_cashback_account(sample_customer.id) is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("4111111111111111", "1111"),
        ("4111-1111-1111-4242", "4242"),
        ("5678", "5678"),
        ("123456789012", "9012"),
    ],
)
def test_card_last_four(value, expected):
    assert card_last_four(value) == expected


@pytest.mark.parametrize("value", ["123", "12345", "41111111111", "4111x11111111111", ""])
def test_card_last_four_rejects_malformed(value):
    with pytest.raises(errors.PaymentError):
        card_last_four(value)


def test_authorization_codes():
    assert generate_authorization_code(PaymentMethod.CASH) is None
    card = generate_authorization_code(PaymentMethod.CARD)
    assert card.startswith("AUTH") and len(card) == 12
    upi = generate_authorization_code(PaymentMethod.UPI)
    assert upi.startswith("UPI") and len(upi) == 13
    wallet = generate_authorization_code(PaymentMethod.DIGITAL_WALLET)
    assert wallet.startswith("WALLET") and len(wallet) == 16


def test_fractional_tax_sale_settles_at_displayed_total(
    checkout_service, cashback_service, product_service, temp_db, sample_customer
):
    """1.99 at 8.25% tax comes to 2.154175; the till charges and records 2.15."""
    product_service.create_product(
        sku="PEN-01", name="Gel Pen", unit_price=Decimal("1.99"), tax_rate=Decimal("8.25"), initial_stock=5
    )
    pen = product_service.get_product_by_sku("PEN-01")

    sale = checkout_service.settle(
        cash_request(cart_of((pen, 1)), sample_customer, "2.15"), now=SALE_TIME
    )

    assert sale.transaction.total_amount == Decimal("2.15")
    assert sale.payment.amount == Decimal("2.15")
    assert sale.transaction.change_amount == Decimal("0.00")

    cashback_service.credit(sample_customer.id, Decimal("10"), "Bonus")
    before = temp_db.get_cashback_account(sample_customer.id).current_balance
    request = CheckoutRequest(
        cart=cart_of((pen, 1)),
        customer_id=sample_customer.id,
        payment_method=PaymentMethod.UPI,
        cashback_to_redeem=Decimal("10"),
    )

    sale = checkout_service.settle(request, now=SALE_TIME)

    assert sale.transaction.total_amount == Decimal("0.00")
    assert sale.transaction.cashback_redeemed == Decimal("2.15")
    entries = temp_db.list_cashback_entries(sample_customer.id)
    redeemed = [e for e in entries if e.entry_type == CashbackEntryType.REDEEMED]
    assert [e.amount for e in redeemed] == [Decimal("-2.15")]
    after = temp_db.get_cashback_account(sample_customer.id).current_balance
    assert after == before - Decimal("2.15") + sale.cashback_earned
