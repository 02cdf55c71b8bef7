import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.core.config import APIConfig
from storefront.core.exceptions import NotFoundError
from storefront.repositories import ProductRepository
from storefront.schemas import PageMeta, ProductListQuery
from storefront.services.admin_service import page_limit

logger = logging.getLogger(__name__)

RELATED_PRODUCTS_LIMIT = 4


class ProductsService:
    """Public catalog: only published products are visible"""

    def __init__(self, session: Session, api: APIConfig):
        self.session = session
        self.api = api
        self.products = ProductRepository(session)

    def list_products(self, query: ProductListQuery) -> Dict[str, Any]:
        limit = page_limit(query.limit, self.api.storefront_page_size, self.api.max_page_size)

        products, total = self.products.list_products(
            page=query.page,
            limit=limit,
            search=query.search,
            category=query.category,
            brand=query.brand,
            min_price=query.min_price,
            max_price=query.max_price,
            sort=query.sort,
            published_only=True,
        )
        meta = PageMeta(total=total, page=query.page, limit=limit)
        return {"data": [p.to_dict() for p in products], "meta": meta.to_json()}

    def get_product(self, slug: str) -> Dict[str, Any]:
        product = self.products.get_published_by_slug(slug)
        if product is None:
            raise NotFoundError("Product")
        return product.to_dict(include_variants=True)

    def get_related(self, slug: str, limit: int = RELATED_PRODUCTS_LIMIT) -> Dict[str, Any]:
        """Other published products of the same category, newest first"""
        product = self.products.get_published_by_slug(slug)
        if product is None:
            raise NotFoundError("Product")

        category = product.category.slug if product.category else None
        related, _ = self.products.list_products(
            page=1,
            limit=limit,
            category=category,
            published_only=True,
            exclude_id=product.id,
        )
        logger.info(f"Found {len(related)} related products for {slug}")
        return {"data": [p.to_dict() for p in related]}
