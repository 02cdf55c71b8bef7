from storefront.repositories.base import BaseRepository
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.repositories.user_repository import AddressRepository, OrderRepository, UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "AddressRepository",
    "OrderRepository",
    "ProductRepository",
    "CartRepository",
]
