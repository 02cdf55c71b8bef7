import logging

from flask import Blueprint, g, jsonify

from storefront.core.auth import login_required
from storefront.db import get_session
from storefront.routes.schemas import AddCartItemSchema, UpdateCartItemSchema
from storefront.routes.utils import load_json
from storefront.services import CartService

logger = logging.getLogger(__name__)

cart_bp = Blueprint("cart", __name__)

_add_schema = AddCartItemSchema()
_update_schema = UpdateCartItemSchema()


@cart_bp.route("", methods=["GET"])
@login_required
def get_cart():
    """Return the current user's cart, creating it if it doesn't exist."""
    return jsonify(CartService(get_session()).get_cart(g.current_user.id))


@cart_bp.route("/items", methods=["POST"])
@login_required
def add_cart_item():
    """Add a product to the cart, or increment quantity if already present."""
    data = load_json(_add_schema)
    item = CartService(get_session()).add_item(
        g.current_user.id,
        product_id=data["product_id"],
        quantity=data["quantity"],
        variant_id=data["variant_id"],
    )
    return jsonify(item), 201


@cart_bp.route("/items/<int:item_id>", methods=["PATCH"])
@login_required
def update_cart_item(item_id: int):
    data = load_json(_update_schema)
    return jsonify(CartService(get_session()).update_item(g.current_user.id, item_id, data["quantity"]))


@cart_bp.route("/items/<int:item_id>", methods=["DELETE"])
@login_required
def delete_cart_item(item_id: int):
    CartService(get_session()).remove_item(g.current_user.id, item_id)
    return "", 204
