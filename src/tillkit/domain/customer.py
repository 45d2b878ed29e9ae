"""Customer domain service."""

from typing import Optional

from tillkit.database.base import Database
from tillkit.domain import errors
from tillkit.domain.entities import Customer
from tillkit.domain.numbering import generate_customer_number


class CustomerService:
    """Service for managing customers."""

    def __init__(self, db: Database):
        """Initialize customer service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_customer(
        self,
        first_name: str,
        phone: str,
        last_name: str = "",
        email: Optional[str] = None,
    ) -> int:
        """Create a customer with a generated customer number.

        Args:
            first_name: First name
            phone: Phone number, unique per customer
            last_name: Optional last name
            email: Optional email address

        Returns:
            Customer ID

        Raises:
            ValidationError: If first name or phone is missing
            ConflictError: If the phone number is already registered
        """
        first_name = first_name.strip()
        phone = phone.strip()
        if not first_name:
            raise errors.ValidationError("First name is required")
        if not phone:
            raise errors.ValidationError("Phone number is required")
        if self.db.get_customer_by_phone(phone) is not None:
            raise errors.ConflictError(f"Customer with phone '{phone}' already exists")

        with self.db.atomic():
            customer_number = generate_customer_number(self.db)
            return self.db.create_customer(
                customer_number=customer_number,
                first_name=first_name,
                last_name=last_name.strip(),
                phone=phone,
                email=email or None,
            )

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self.db.get_customer(customer_id)

    def find_customer(self, identifier: str | int) -> Optional[Customer]:
        """Find a customer by ID, customer number or phone."""
        if isinstance(identifier, int):
            return self.db.get_customer(identifier)

        identifier = identifier.strip()
        if identifier.isdigit():
            customer = self.db.get_customer(int(identifier))
            if customer is not None:
                return customer

        customer = self.db.get_customer_by_number(identifier)
        if customer is None:
            customer = self.db.get_customer_by_phone(identifier)
        return customer

    def list_customers(self) -> list[Customer]:
        return self.db.list_customers()
