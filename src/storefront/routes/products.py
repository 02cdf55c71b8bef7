import logging

from flask import Blueprint, jsonify

from storefront.core.config import current_config
from storefront.db import get_session
from storefront.routes.utils import parse_query
from storefront.schemas import ProductListQuery
from storefront.services import ProductsService

logger = logging.getLogger(__name__)

products_bp = Blueprint("products", __name__)


def _service() -> ProductsService:
    return ProductsService(get_session(), current_config().api)


@products_bp.route("", methods=["GET"])
def list_products():
    """Published products with page-based pagination, filtering, and search."""
    query = parse_query(ProductListQuery)
    return jsonify(_service().list_products(query))


@products_bp.route("/<slug>", methods=["GET"])
def get_product(slug: str):
    return jsonify(_service().get_product(slug))


@products_bp.route("/<slug>/related", methods=["GET"])
def get_related_products(slug: str):
    return jsonify(_service().get_related(slug))
