import logging

from flask import Blueprint, jsonify

from storefront.core.config import current_config
from storefront.db import get_session
from storefront.routes.schemas import LoginSchema, RegisterSchema
from storefront.routes.utils import load_json
from storefront.services import AuthService

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

_register_schema = RegisterSchema()
_login_schema = LoginSchema()


def _service() -> AuthService:
    return AuthService(get_session(), current_config().security)


@auth_bp.route("/register", methods=["POST"])
def register():
    """Create a customer account and return it with an access token."""
    data = load_json(_register_schema)
    return jsonify(_service().register(data)), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = load_json(_login_schema)
    return jsonify(_service().login(data["email"], data["password"]))
