# Re-export all models from a single entry point so the rest of the app
# can import cleanly:
#   from storefront.models import User, Product, Order
#
# Importing all models here also ensures they are registered with Base.metadata
# before any call to Base.metadata.create_all().

from storefront.models.cart import Cart, CartItem
from storefront.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from storefront.models.product import Brand, Category, Product, ProductVariant
from storefront.models.user import Address, User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Address",
    "Brand",
    "Category",
    "Product",
    "ProductVariant",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "Cart",
    "CartItem",
]
