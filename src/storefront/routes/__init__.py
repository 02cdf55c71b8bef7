from storefront.routes.admin import admin_bp
from storefront.routes.auth import auth_bp
from storefront.routes.cart import cart_bp
from storefront.routes.products import products_bp
from storefront.routes.users import users_bp

__all__ = ["admin_bp", "auth_bp", "cart_bp", "products_bp", "users_bp"]
