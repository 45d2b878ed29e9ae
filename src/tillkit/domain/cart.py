"""Cashier-side cart session.

The session is the only mutable piece: it holds the current Cart value and
replaces it on every change. Pricing always receives the immutable snapshot.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from tillkit.domain import errors
from tillkit.domain.catalog import ProductService
from tillkit.domain.entities import Cart, Offer, Product
from tillkit.domain.offer import OfferService
from tillkit.domain.pricing import calculate_subtotal


class CartSession:
    """Builds a cart interactively for one checkout."""

    def __init__(self, product_service: ProductService, offer_service: Optional[OfferService] = None):
        self.product_service = product_service
        self.offer_service = offer_service
        self.cart = Cart()
        self.customer_id: Optional[int] = None
        self.offer: Optional[Offer] = None

    def add(self, identifier: str, quantity: int = 1) -> Product:
        """Add a product by SKU or barcode.

        Raises:
            NotFoundError: If no active product matches
            ValidationError: If quantity is less than 1
        """
        if quantity < 1:
            raise errors.ValidationError("Quantity must be at least 1")
        product = self.product_service.require_product(identifier)
        self.cart = self.cart.add(product, quantity)
        return product

    def add_product(self, product: Product, quantity: int = 1) -> None:
        if quantity < 1:
            raise errors.ValidationError("Quantity must be at least 1")
        self.cart = self.cart.add(product, quantity)

    def change_quantity(self, product_id: int, delta: int) -> None:
        """Step a line's quantity up or down; it never drops below 1."""
        line = self._require_line(product_id)
        self.cart = self.cart.with_quantity(product_id, max(1, line.quantity + delta))

    def set_quantity(self, product_id: int, quantity: int) -> None:
        self._require_line(product_id)
        if quantity < 1:
            raise errors.ValidationError("Quantity must be at least 1")
        self.cart = self.cart.with_quantity(product_id, quantity)

    def set_discount(self, product_id: int, discount: Decimal) -> None:
        """Set a manual discount on a line.

        Raises:
            ValidationError: If discount is negative or exceeds the line subtotal
        """
        line = self._require_line(product_id)
        if discount < 0:
            raise errors.ValidationError("Discount cannot be negative")
        if discount > line.line_subtotal:
            raise errors.ValidationError(
                f"Discount exceeds the line subtotal of {line.line_subtotal:,.2f}"
            )
        self.cart = self.cart.with_discount(product_id, discount)

    def remove(self, product_id: int) -> None:
        self.cart = self.cart.without(product_id)

    def apply_offer(self, code: str, now: Optional[datetime] = None) -> Offer:
        """Validate and attach an offer code. The cart itself is unchanged.

        Raises:
            OfferError: If the code cannot be applied
        """
        if self.offer_service is None:
            raise errors.ValidationError("Offers are not available in this session")
        offer = self.offer_service.validate_code(code, calculate_subtotal(self.cart), now=now)
        self.offer = offer
        return offer

    def clear_offer(self) -> None:
        self.offer = None

    def clear(self) -> None:
        """Discard the cart after checkout or cancellation."""
        self.cart = Cart()
        self.customer_id = None
        self.offer = None

    def _require_line(self, product_id: int):
        line = self.cart.find(product_id)
        if line is None:
            raise errors.NotFoundError(f"Product {product_id} is not in the cart")
        return line
