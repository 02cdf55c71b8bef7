import logging

from flask import Blueprint, g, jsonify

from storefront.core.auth import login_required
from storefront.core.config import current_config
from storefront.db import get_session
from storefront.routes.schemas import AddressSchema, ChangePasswordSchema, ProfileUpdateSchema
from storefront.routes.utils import load_json
from storefront.services import UsersService

logger = logging.getLogger(__name__)

users_bp = Blueprint("users", __name__)

_profile_schema = ProfileUpdateSchema()
_password_schema = ChangePasswordSchema()
_address_schema = AddressSchema()


def _service() -> UsersService:
    return UsersService(get_session(), current_config().security)


@users_bp.route("/profile", methods=["GET"])
@login_required
def get_profile():
    return jsonify(_service().get_profile(g.current_user.id))


@users_bp.route("/profile", methods=["PATCH"])
@login_required
def update_profile():
    data = load_json(_profile_schema)
    return jsonify(_service().update_profile(g.current_user.id, data))


@users_bp.route("/password", methods=["PUT"])
@login_required
def change_password():
    data = load_json(_password_schema)
    result = _service().change_password(g.current_user.id, data["old_password"], data["new_password"])
    return jsonify(result)


@users_bp.route("/dashboard", methods=["GET"])
@login_required
def get_dashboard():
    """Order statistics and the five most recent orders of the current user."""
    return jsonify(_service().get_dashboard(g.current_user.id))


@users_bp.route("/addresses", methods=["GET"])
@login_required
def list_addresses():
    return jsonify(_service().get_addresses(g.current_user.id))


@users_bp.route("/addresses", methods=["POST"])
@login_required
def add_address():
    data = load_json(_address_schema)
    return jsonify(_service().add_address(g.current_user.id, data)), 201


@users_bp.route("/addresses/<int:address_id>", methods=["PUT"])
@login_required
def update_address(address_id: int):
    data = load_json(_address_schema, partial=True)
    return jsonify(_service().update_address(g.current_user.id, address_id, data))


@users_bp.route("/addresses/<int:address_id>", methods=["DELETE"])
@login_required
def delete_address(address_id: int):
    _service().delete_address(g.current_user.id, address_id)
    return "", 204


@users_bp.route("/addresses/<int:address_id>/default", methods=["PATCH"])
@login_required
def set_default_address(address_id: int):
    return jsonify(_service().set_default_address(g.current_user.id, address_id))
