"""Inventory domain service."""

import logging
from typing import Optional

from tillkit.database.base import Database
from tillkit.domain import errors
from tillkit.domain.entities import InventoryRecord

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for stock levels."""

    def __init__(self, db: Database):
        """Initialize inventory service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_stock(self, product_id: int) -> Optional[InventoryRecord]:
        return self.db.get_inventory(product_id)

    def set_stock(
        self, product_id: int, quantity: int, reorder_point: Optional[int] = None
    ) -> int:
        """Set the on-hand quantity of a product.

        Raises:
            NotFoundError: If product doesn't exist
            ValidationError: If quantity or reorder point is negative
        """
        if self.db.get_product(product_id) is None:
            raise errors.NotFoundError(errors.product_not_found(product_id))
        if quantity < 0:
            raise errors.ValidationError("Quantity cannot be negative")
        if reorder_point is not None and reorder_point < 0:
            raise errors.ValidationError("Reorder point cannot be negative")
        return self.db.set_inventory(product_id, quantity, reorder_point=reorder_point)

    def adjust_stock(self, product_id: int, delta: int) -> Optional[int]:
        """Add (or with a negative delta remove) stock, never going below zero.

        Returns:
            New quantity on hand, or None when the product has no inventory record
        """
        new_quantity = self.db.adjust_inventory(product_id, delta)
        if new_quantity is None:
            logger.warning("No inventory record for product %s; stock not adjusted", product_id)
        return new_quantity

    def list_stock(self) -> list[InventoryRecord]:
        return self.db.list_inventory()

    def list_low_stock(self) -> list[InventoryRecord]:
        """Records at or below their reorder point."""
        return [
            record
            for record in self.db.list_inventory()
            if record.reorder_point is not None
            and record.quantity_on_hand <= record.reorder_point
        ]
