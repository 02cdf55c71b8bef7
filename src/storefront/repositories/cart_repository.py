from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from storefront.models import Cart, CartItem, Product
from storefront.repositories.base import BaseRepository


class CartRepository(BaseRepository[Cart]):
    """Repository for carts and their line items"""

    model = Cart

    def get_by_user_id(self, user_id: int) -> Optional[Cart]:
        return self.first(
            select(Cart)
            .options(
                selectinload(Cart.items).selectinload(CartItem.product),
                selectinload(Cart.items).selectinload(CartItem.variant),
            )
            .where(Cart.user_id == user_id)
        )

    def get_or_create(self, user_id: int) -> Cart:
        """Return the user's cart, adding a new one to the session if needed"""
        cart = self.get_by_user_id(user_id)
        if cart is None:
            cart = self.add(Cart(user_id=user_id))
        return cart

    def get_owned_item(self, user_id: int, item_id: int) -> Optional[CartItem]:
        """A cart item, only if it sits in the given user's cart"""
        return self.session.scalars(
            select(CartItem)
            .join(CartItem.cart)
            .options(selectinload(CartItem.product).selectinload(Product.variants))
            .where(CartItem.id == item_id, Cart.user_id == user_id)
        ).first()

    def find_line(self, cart: Cart, product_id: int, variant_id: Optional[int]) -> Optional[CartItem]:
        for item in cart.items:
            if item.product_id == product_id and item.variant_id == variant_id:
                return item
        return None
