from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from storefront.db import Base, BigIntId
from storefront.models.product import unit_price
from storefront.utils.formatting import FormattingUtils


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Cart(Base):
    """
    A shopping cart belonging to a user.

    A user has one cart. updated_at is refreshed whenever items are added or
    removed, which is useful for expiring abandoned carts.
    """

    __tablename__ = "carts"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    user_id = Column(BigIntId, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="cart")
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    def to_dict(self) -> Dict[str, Any]:
        items = [item.to_dict() for item in self.items]
        subtotal = sum((item.line_total for item in self.items), 0)
        return {
            "id": self.id,
            "items": items,
            "totals": {
                "subtotal": FormattingUtils.money_to_json(subtotal),
                "itemsCount": sum(item.quantity for item in self.items),
            },
        }

    def __repr__(self) -> str:
        return f"<Cart id={self.id} user_id={self.user_id}>"


class CartItem(Base):
    """
    A product (optionally one of its variants) and a quantity inside a cart.

    quantity must be > 0; removing an item means deleting the row.
    """

    __tablename__ = "cart_items"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    cart_id = Column(BigIntId, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(BigIntId, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    variant_id = Column(BigIntId, ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=True)
    quantity = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_cart_item_quantity"),
        UniqueConstraint("cart_id", "product_id", "variant_id", name="uq_cart_item_line"),
    )

    cart = relationship("Cart", back_populates="items")
    product = relationship("Product")
    variant = relationship("ProductVariant")

    @property
    def unit_price(self):
        return unit_price(self.product, self.variant)

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    @property
    def available_stock(self) -> int:
        return self.variant.stock if self.variant is not None else self.product.stock

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "variantId": self.variant_id,
            "quantity": self.quantity,
            "price": FormattingUtils.money_to_json(self.unit_price),
            "total": FormattingUtils.money_to_json(self.line_total),
            "product": {
                "id": self.product.id,
                "slug": self.product.slug,
                "title": self.product.title,
                "image": self.product.image_url,
            },
        }

    def __repr__(self) -> str:
        return f"<CartItem id={self.id} product_id={self.product_id} qty={self.quantity}>"
