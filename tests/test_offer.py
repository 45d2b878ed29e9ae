"""Tests for offer service."""

from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest

from tillkit.domain import errors
from tillkit.domain.entities import OfferStatus, OfferType


def test_create_offer_defaults_to_draft(offer_service):
    offer_id = offer_service.create_offer(
        code="save20", name="Save 20", offer_type="percentage", discount=Decimal("20")
    )
    offer = offer_service.get_offer(offer_id)

    assert offer.code == "SAVE20"
    assert offer.status == OfferStatus.DRAFT
    assert offer.offer_type == OfferType.PERCENTAGE
    assert offer.discount_percentage == Decimal("20.00")
    assert offer.discount_value is None
    assert offer.current_usage_count == 0


def test_codes_are_case_insensitive(offer_service, active_offer):
    assert offer_service.get_offer_by_code("flat50").id == active_offer.id

    with pytest.raises(errors.ConflictError):
        offer_service.create_offer(
            code="Flat50", name="Again", offer_type="fixed_amount", discount=Decimal("10")
        )


@pytest.mark.parametrize(
    "kwargs, message",
    [
        (dict(offer_type="percentage", discount=Decimal("0")), "greater than zero"),
        (dict(offer_type="percentage", discount=Decimal("101")), "cannot exceed 100"),
        (
            dict(offer_type="fixed_amount", discount=Decimal("10"), max_discount_cap=Decimal("5")),
            "only applies to percentage",
        ),
        (
            dict(offer_type="fixed_amount", discount=Decimal("10"), min_purchase_amount=Decimal("-1")),
            "cannot be negative",
        ),
        (
            dict(
                offer_type="percentage",
                discount=Decimal("10"),
                start_date=datetime(2024, 2, 1, tzinfo=UTC),
                end_date=datetime(2024, 1, 1, tzinfo=UTC),
            ),
            "before its start date",
        ),
        (dict(offer_type="percentage", discount=Decimal("10"), total_usage_limit=0), "at least 1"),
    ],
)
def test_create_offer_validation(offer_service, kwargs, message):
    with pytest.raises(errors.ValidationError, match=message):
        offer_service.create_offer(code="BAD", name="Bad", **kwargs)


def test_validate_unknown_code(offer_service):
    with pytest.raises(errors.OfferError) as exc_info:
        offer_service.validate_code("NOPE", Decimal("100"))

    assert exc_info.value.reason == errors.OFFER_UNKNOWN
    assert str(exc_info.value) == "Invalid offer code 'NOPE'"


def test_validate_draft_offer(offer_service):
    offer_service.create_offer(
        code="DRAFTY", name="Draft", offer_type="fixed_amount", discount=Decimal("5")
    )
    with pytest.raises(errors.OfferError) as exc_info:
        offer_service.validate_code("DRAFTY", Decimal("100"))
    assert exc_info.value.reason == errors.OFFER_INACTIVE


def test_validate_active_offer_returns_it(offer_service, active_offer):
    offer = offer_service.validate_code("flat50", Decimal("100"))
    assert offer.id == active_offer.id


def test_preview_discount_with_cap(offer_service):
    offer_id = offer_service.create_offer(
        code="SAVE20",
        name="Save 20",
        offer_type="percentage",
        discount=Decimal("20"),
        max_discount_cap=Decimal("30"),
    )
    offer_service.activate_offer(offer_id)

    assert offer_service.preview_discount("SAVE20", Decimal("1000")) == Decimal("30")
    assert offer_service.preview_discount("SAVE20", Decimal("100")) == Decimal("20")


def test_window_is_enforced(offer_service):
    now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
    offer_id = offer_service.create_offer(
        code="SUMMER",
        name="Summer",
        offer_type="fixed_amount",
        discount=Decimal("10"),
        start_date=now + timedelta(days=1),
        end_date=now + timedelta(days=10),
    )
    offer_service.activate_offer(offer_id)

    with pytest.raises(errors.OfferError) as exc_info:
        offer_service.validate_code("SUMMER", Decimal("50"), now=now)
    assert exc_info.value.reason == errors.OFFER_NOT_YET_ACTIVE

    offer_service.validate_code("SUMMER", Decimal("50"), now=now + timedelta(days=2))

    with pytest.raises(errors.OfferError) as exc_info:
        offer_service.validate_code("SUMMER", Decimal("50"), now=now + timedelta(days=11))
    assert exc_info.value.reason == errors.OFFER_EXPIRED


def test_archive_and_expire(offer_service, active_offer):
    offer_service.archive_offer(active_offer.id)
    assert offer_service.get_offer(active_offer.id).status == OfferStatus.ARCHIVED

    offer_service.expire_offer(active_offer.id)
    assert offer_service.get_offer(active_offer.id).status == OfferStatus.EXPIRED


def test_status_change_for_missing_offer(offer_service):
    with pytest.raises(errors.NotFoundError):
        offer_service.activate_offer(999)


def test_update_offer_revalidates(offer_service, active_offer):
    offer_service.update_offer(active_offer.id, discount=Decimal("75"), name="Flat 75")
    offer = offer_service.get_offer(active_offer.id)
    assert offer.discount_value == Decimal("75.00")
    assert offer.name == "Flat 75"

    with pytest.raises(errors.ValidationError):
        offer_service.update_offer(active_offer.id, max_discount_cap=Decimal("10"))


def test_update_offer_switches_type(offer_service, active_offer):
    offer_service.update_offer(active_offer.id, offer_type="percentage", discount=Decimal("10"))
    offer = offer_service.get_offer(active_offer.id)
    assert offer.offer_type == OfferType.PERCENTAGE
    assert offer.discount_percentage == Decimal("10.00")
    assert offer.discount_value is None


def test_list_offers_by_status(offer_service, active_offer):
    offer_service.create_offer(
        code="LATER", name="Later", offer_type="fixed_amount", discount=Decimal("5")
    )

    assert {o.code for o in offer_service.list_offers()} == {"FLAT50", "LATER"}
    assert [o.code for o in offer_service.list_offers(status="active")] == ["FLAT50"]
    assert [o.code for o in offer_service.list_offers(status=OfferStatus.DRAFT)] == ["LATER"]


def test_delete_unused_offer(offer_service, active_offer):
    offer_service.delete_offer(active_offer.id)
    assert offer_service.get_offer(active_offer.id) is None


def test_delete_used_offer_is_refused(offer_service, active_offer, temp_db):
    temp_db.increment_offer_usage(active_offer.id)

    with pytest.raises(errors.ConflictError):
        offer_service.delete_offer(active_offer.id)
