from storefront.services.admin_service import AdminService
from storefront.services.auth_service import AuthService
from storefront.services.cart_service import CartService
from storefront.services.products_service import ProductsService
from storefront.services.users_service import UsersService

__all__ = ["AdminService", "AuthService", "CartService", "ProductsService", "UsersService"]
