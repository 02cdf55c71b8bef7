import logging
import time

from flask import Blueprint, jsonify

from storefront.core.auth import admin_required
from storefront.core.config import current_config
from storefront.db import get_session
from storefront.routes.schemas import ProductCreateSchema
from storefront.routes.utils import load_json, parse_query
from storefront.schemas import ProductListQuery
from storefront.services import AdminService

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)

_product_schema = ProductCreateSchema()


def _service() -> AdminService:
    return AdminService(get_session(), current_config().api)


@admin_bp.route("/products", methods=["GET"])
@admin_required
def list_products():
    """Every product, published or not, with filters and pagination."""
    started = time.perf_counter()
    query = parse_query(ProductListQuery)
    result = _service().get_products(query)
    logger.info(f"Admin product listing completed in {(time.perf_counter() - started) * 1000:.1f}ms")
    return jsonify(result)


@admin_bp.route("/products", methods=["POST"])
@admin_required
def create_product():
    data = load_json(_product_schema)
    return jsonify(_service().create_product(data)), 201


@admin_bp.route("/products/<int:product_id>", methods=["GET"])
@admin_required
def get_product(product_id: int):
    return jsonify(_service().get_product(product_id))
