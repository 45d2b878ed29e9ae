"""Product catalog domain service."""

from decimal import Decimal
from typing import Optional

from tillkit.database.base import Database
from tillkit.domain import errors
from tillkit.domain.entities import Product


class ProductService:
    """Service for managing catalog products."""

    def __init__(self, db: Database):
        """Initialize product service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_product(
        self,
        sku: str,
        name: str,
        unit_price: Decimal,
        tax_rate: Decimal = Decimal("0"),
        barcode: Optional[str] = None,
        initial_stock: Optional[int] = None,
    ) -> int:
        """Create a product.

        Args:
            sku: Stock keeping unit, unique
            name: Display name
            unit_price: Price per unit before tax
            tax_rate: Tax rate in percent
            barcode: Optional barcode, unique when set
            initial_stock: Optional quantity on hand to create an inventory record with

        Returns:
            Product ID

        Raises:
            ValidationError: If price, tax rate or stock is out of range
            ConflictError: If SKU or barcode already exists
        """
        sku = sku.strip()
        if not sku:
            raise errors.ValidationError("SKU is required")
        if not name.strip():
            raise errors.ValidationError("Product name is required")
        if unit_price < 0:
            raise errors.ValidationError("Unit price cannot be negative")
        if not Decimal("0") <= tax_rate <= Decimal("100"):
            raise errors.ValidationError("Tax rate must be between 0 and 100")
        if initial_stock is not None and initial_stock < 0:
            raise errors.ValidationError("Initial stock cannot be negative")

        if self.db.get_product_by_sku(sku) is not None:
            raise errors.ConflictError(errors.duplicate_sku(sku))
        if barcode and self.db.get_product_by_barcode(barcode) is not None:
            raise errors.ConflictError(f"Product with barcode '{barcode}' already exists")

        with self.db.atomic():
            product_id = self.db.create_product(
                sku=sku,
                name=name.strip(),
                unit_price=unit_price,
                tax_rate=tax_rate,
                barcode=barcode or None,
            )
            if initial_stock is not None:
                self.db.set_inventory(product_id, initial_stock)
        return product_id

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.db.get_product(product_id)

    def get_product_by_sku(self, sku: str) -> Optional[Product]:
        return self.db.get_product_by_sku(sku)

    def find_product(self, identifier: str) -> Optional[Product]:
        """Find a product by SKU, then by barcode."""
        product = self.db.get_product_by_sku(identifier)
        if product is None:
            product = self.db.get_product_by_barcode(identifier)
        return product

    def require_product(self, identifier: str) -> Product:
        """Find an active product by SKU or barcode.

        Raises:
            NotFoundError: If no such product exists
            ValidationError: If the product is inactive
        """
        product = self.find_product(identifier)
        if product is None:
            raise errors.NotFoundError(errors.product_not_found(f"'{identifier}'"))
        if product.status != "active":
            raise errors.ValidationError(f"Product '{product.sku}' is not active")
        return product

    def list_products(self, include_inactive: bool = False) -> list[Product]:
        return self.db.list_products(include_inactive=include_inactive)

    def search_products(self, query: str) -> list[Product]:
        """Search active products by name, SKU or barcode (case-insensitive)."""
        query = query.strip()
        if not query:
            return []
        return self.db.search_products(query)

    def deactivate_product(self, product_id: int) -> None:
        """Remove a product from sale without deleting its history.

        Raises:
            NotFoundError: If product doesn't exist
        """
        if self.db.get_product(product_id) is None:
            raise errors.NotFoundError(errors.product_not_found(product_id))
        self.db.update_product_status(product_id, "inactive")
