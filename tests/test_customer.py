"""Tests for customer service."""

import pytest

from tillkit.domain import errors


def test_create_customer_assigns_number(customer_service):
    first_id = customer_service.create_customer(first_name="Asha", last_name="Rao", phone="111")
    second_id = customer_service.create_customer(first_name="Vikram", phone="222")

    first = customer_service.get_customer(first_id)
    second = customer_service.get_customer(second_id)
    assert first.customer_number == "CUST-000001"
    assert second.customer_number == "CUST-000002"
    assert first.full_name == "Asha Rao"
    assert second.full_name == "Vikram"


def test_phone_must_be_unique(customer_service, sample_customer):
    with pytest.raises(errors.ConflictError, match="9876543210"):
        customer_service.create_customer(first_name="Other", phone="9876543210")


@pytest.mark.parametrize(
    "first_name, phone, message",
    [(" ", "123", "First name is required"), ("Asha", " ", "Phone number is required")],
)
def test_required_fields(customer_service, first_name, phone, message):
    with pytest.raises(errors.ValidationError, match=message):
        customer_service.create_customer(first_name=first_name, phone=phone)


def test_find_customer_by_any_reference(customer_service, sample_customer):
    assert customer_service.find_customer(sample_customer.id).id == sample_customer.id
    assert customer_service.find_customer(str(sample_customer.id)).id == sample_customer.id
    assert customer_service.find_customer("cust-000001").id == sample_customer.id
    assert customer_service.find_customer("9876543210").id == sample_customer.id
    assert customer_service.find_customer("nobody") is None


def test_show_unknown_customer_cli(cli_runner, temp_db, sample_customer):
    from tillkit.cli.main import cli

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "customer", "show", "nobody"])
    assert result.exit_code == 1
    assert "Customer 'nobody' not found" in result.output

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "customer", "show", "CUST-000001"]
    )
    assert result.exit_code == 0
    assert "Asha Rao" in result.output
    assert "Cashback balance: 0.00" in result.output


def test_list_customers_sorted_by_name(customer_service):
    customer_service.create_customer(first_name="Zara", phone="1")
    customer_service.create_customer(first_name="Amit", phone="2")

    assert [c.first_name for c in customer_service.list_customers()] == ["Amit", "Zara"]
