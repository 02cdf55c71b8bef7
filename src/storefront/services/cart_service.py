import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from storefront.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from storefront.db import transaction
from storefront.models import CartItem
from storefront.repositories import CartRepository, ProductRepository

logger = logging.getLogger(__name__)


class CartService:
    """
    Shopping cart business logic service

    Responsibilities:
    - Scope every cart line to the requesting user
    - Merge repeated adds of the same product/variant into one line
    - Enforce quantity and stock limits
    """

    max_quantity_per_item = 99  # Business rule

    def __init__(self, session: Session):
        self.session = session
        self.carts = CartRepository(session)
        self.products = ProductRepository(session)

    def get_cart(self, user_id: int) -> Dict[str, Any]:
        """Return the user's cart, creating it on first access"""
        cart = self.carts.get_by_user_id(user_id)
        if cart is None:
            with transaction(self.session):
                cart = self.carts.get_or_create(user_id)
            logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart.to_dict()

    def add_item(
        self,
        user_id: int,
        product_id: int,
        quantity: int,
        variant_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Add a product to the cart, or increase the quantity of its line

        Business Rules:
        - Product must exist and be published
        - Products with variants need an explicit variant
        - Resulting line quantity must fit the per-item cap and the stock
        """
        logger.info(f"Adding product {product_id} (variant {variant_id}) x{quantity} to cart of user {user_id}")
        self._check_quantity(quantity)

        product = self.products.get_with_variants(product_id)
        if product is None or not product.published:
            raise NotFoundError("Product")

        variant = None
        if variant_id is not None:
            variant = self.products.get_variant(product_id, variant_id)
            if variant is None:
                raise NotFoundError("Product variant")
        elif product.variants:
            raise ValidationError("variantId is required for products with variants")

        with transaction(self.session):
            cart = self.carts.get_or_create(user_id)
            line = self.carts.find_line(cart, product_id, variant_id)
            new_quantity = quantity + (line.quantity if line else 0)

            self._check_quantity(new_quantity)
            available = variant.stock if variant is not None else product.stock
            if new_quantity > available:
                raise BusinessLogicError(
                    f"Insufficient stock. Available: {available}, requested: {new_quantity}"
                )

            if line is None:
                line = CartItem(product=product, variant=variant, quantity=quantity)
                cart.items.append(line)
            else:
                line.quantity = new_quantity
            self.session.flush()

        logger.info(f"Cart item {line.id} of user {user_id} now holds {line.quantity}")
        return line.to_dict()

    def update_item(self, user_id: int, item_id: int, quantity: Any) -> Dict[str, Any]:
        """Set the quantity of one of the user's cart lines"""
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise ValidationError("quantity must be an integer")
        self._check_quantity(quantity)

        with transaction(self.session):
            item = self._get_owned_item(user_id, item_id)
            if quantity > item.available_stock:
                raise BusinessLogicError(
                    f"Insufficient stock. Available: {item.available_stock}, requested: {quantity}"
                )
            item.quantity = quantity

        logger.info(f"Updated cart item {item_id} of user {user_id} to quantity {quantity}")
        return item.to_dict()

    def remove_item(self, user_id: int, item_id: int) -> None:
        with transaction(self.session):
            item = self._get_owned_item(user_id, item_id)
            self.session.delete(item)

        logger.info(f"Removed cart item {item_id} of user {user_id}")
        return None

    def _get_owned_item(self, user_id: int, item_id: int) -> CartItem:
        item = self.carts.get_owned_item(user_id, item_id)
        if item is None:
            logger.warning(f"Cart item {item_id} not found for user {user_id}")
            raise NotFoundError("Cart item")
        return item

    def _check_quantity(self, quantity: int) -> None:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        if quantity > self.max_quantity_per_item:
            raise ValidationError(f"Quantity cannot exceed {self.max_quantity_per_item}")
