from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship

from storefront.db import Base, BigIntId
from storefront.utils.formatting import FormattingUtils


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus:
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus:
    PENDING = "pending"
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"


class Order(Base):
    """
    A purchase by a user.

    total is stored alongside order_items as the charged amount, so later
    price changes on products do not alter historical totals. Orders are
    only read here (dashboard statistics); checkout writes them.
    """

    __tablename__ = "orders"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    number = Column(Text, nullable=False, unique=True)
    user_id = Column(BigIntId, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(Text, nullable=False, default=OrderStatus.PENDING)
    payment_status = Column(Text, nullable=False, default=PaymentStatus.PENDING)
    fulfillment_status = Column(Text, nullable=False, default="unfulfilled")
    total = Column(Numeric(12, 2), nullable=False)
    currency = Column(Text, nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (CheckConstraint("total >= 0", name="ck_order_total"),)

    user = relationship("User", back_populates="orders")
    # cascade='all, delete-orphan' -> deleting an order removes its line items
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    def to_summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "status": self.status,
            "paymentStatus": self.payment_status,
            "fulfillmentStatus": self.fulfillment_status,
            "total": FormattingUtils.money_to_json(self.total),
            "currency": self.currency,
            "itemsCount": len(self.items),
            "createdAt": FormattingUtils.isoformat(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status!r} total={self.total}>"


class OrderItem(Base):
    """
    A single line item within an order.

    Title, sku and price are snapshotted at purchase time.
    """

    __tablename__ = "order_items"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    order_id = Column(BigIntId, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(BigIntId, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    product_title = Column(Text, nullable=False)
    sku = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    __table_args__ = (CheckConstraint("quantity > 0", name="ck_order_item_quantity"),)

    order = relationship("Order", back_populates="items")

    def __repr__(self) -> str:
        return f"<OrderItem id={self.id} product_id={self.product_id} qty={self.quantity}>"
