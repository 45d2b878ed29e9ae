"""Tests for cashback service."""

from decimal import Decimal

import pytest

from tillkit.domain import errors
from tillkit.domain.cashback import CashbackService
from tillkit.domain.entities import CashbackEntryType


def test_no_account_until_first_credit(cashback_service, sample_customer):
    assert cashback_service.get_account(sample_customer.id) is None

    account = cashback_service.credit(sample_customer.id, Decimal("25"), "Welcome bonus")

    assert account.current_balance == Decimal("25.00")
    assert account.total_earned == Decimal("25.00")


def test_calculate_earned_rounds_to_cents(temp_db):
    service = CashbackService(temp_db, earning_rate=Decimal("1.5"))
    assert service.calculate_earned(Decimal("170")) == Decimal("2.55")
    assert service.calculate_earned(Decimal("0.33")) == Decimal("0.00")
    assert service.calculate_earned(Decimal("0")) == Decimal("0")


def test_zero_rate_earns_nothing(temp_db):
    assert CashbackService(temp_db).calculate_earned(Decimal("1000")) == Decimal("0")


def test_redeem_more_than_balance_is_rejected(cashback_service, sample_customer):
    cashback_service.credit(sample_customer.id, Decimal("20"), "Bonus")

    with pytest.raises(errors.ValidationError) as exc_info:
        cashback_service.check_redemption(sample_customer.id, Decimal("20.01"))
    assert "Insufficient cashback balance" in str(exc_info.value)


def test_redeem_without_account_is_rejected(cashback_service, sample_customer):
    with pytest.raises(errors.ValidationError, match="available 0.00"):
        cashback_service.check_redemption(sample_customer.id, Decimal("1"))


def test_redeem_zero_needs_no_account(cashback_service, sample_customer):
    assert cashback_service.check_redemption(sample_customer.id, Decimal("0")) is None


def test_redeem_negative_is_rejected(cashback_service, sample_customer):
    with pytest.raises(errors.ValidationError, match="cannot be negative"):
        cashback_service.check_redemption(sample_customer.id, Decimal("-5"))


def test_redeem_exact_balance_leaves_zero(cashback_service, sample_customer):
    cashback_service.credit(sample_customer.id, Decimal("42.50"), "Bonus")

    account = cashback_service.redeem(sample_customer.id, Decimal("42.50"))

    assert account.current_balance == Decimal("0.00")
    assert account.total_redeemed == Decimal("42.50")


def test_ledger_records_every_movement(cashback_service, sample_customer):
    cashback_service.record_earned(sample_customer.id, Decimal("10"), earning_rate=Decimal("1"))
    cashback_service.redeem(sample_customer.id, Decimal("4"))
    cashback_service.expire(sample_customer.id, Decimal("1"))

    entries = cashback_service.history(sample_customer.id)
    by_type = {e.entry_type: e for e in entries}

    assert len(entries) == 3
    assert by_type[CashbackEntryType.EARNED].amount == Decimal("10.00")
    assert by_type[CashbackEntryType.REDEEMED].amount == Decimal("-4.00")
    assert by_type[CashbackEntryType.EXPIRED].amount == Decimal("-1.00")
    assert by_type[CashbackEntryType.EXPIRED].balance_after == Decimal("5.00")

    account = cashback_service.get_account(sample_customer.id)
    assert account.current_balance == Decimal("5.00")
    assert account.total_earned == Decimal("10.00")
    assert account.total_redeemed == Decimal("4.00")
    assert account.total_expired == Decimal("1.00")


def test_credit_requires_reason(cashback_service, sample_customer):
    with pytest.raises(errors.ValidationError, match="reason"):
        cashback_service.credit(sample_customer.id, Decimal("5"), "  ")


def test_credit_for_missing_customer(cashback_service):
    with pytest.raises(errors.NotFoundError):
        cashback_service.credit(999, Decimal("5"), "Bonus")


def test_history_limit(cashback_service, sample_customer):
    for _ in range(3):
        cashback_service.credit(sample_customer.id, Decimal("1"), "Bonus")

    assert len(cashback_service.history(sample_customer.id, limit=2)) == 2


def test_ledger_keeps_earning_source(cashback_service, temp_db, sample_customer):
    cashback_service.record_earned(sample_customer.id, Decimal("5"), source="referral")
    cashback_service.record_earned(sample_customer.id, Decimal("2"))
    cashback_service.credit(sample_customer.id, Decimal("1"), "Goodwill")
    cashback_service.redeem(sample_customer.id, Decimal("3"))

    sources = {
        (entry.entry_type, entry.earning_source)
        for entry in temp_db.list_cashback_entries(sample_customer.id)
    }
    assert sources == {
        (CashbackEntryType.EARNED, "referral"),
        (CashbackEntryType.EARNED, "purchase"),
        (CashbackEntryType.ADJUSTED, "manual"),
        (CashbackEntryType.REDEEMED, None),
    }
