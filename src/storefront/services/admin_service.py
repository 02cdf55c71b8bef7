import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.core.config import APIConfig
from storefront.core.exceptions import NotFoundError, ValidationError
from storefront.db import transaction
from storefront.models import Product, ProductVariant
from storefront.repositories import ProductRepository
from storefront.schemas import PageMeta, ProductListQuery
from storefront.utils.formatting import FormattingUtils

logger = logging.getLogger(__name__)


def page_limit(requested, default: int, maximum: int) -> int:
    """Apply the server default and clamp to the maximum page size"""
    limit = requested or default
    if limit > maximum:
        logger.warning(f"Requested limit {limit} exceeds maximum {maximum}")
        limit = maximum
    return limit


class AdminService:
    """
    Back-office product management

    Listing sees every product, published or not. Creation relies on the
    database to reject duplicate sku/slug values.
    """

    def __init__(self, session: Session, api: APIConfig):
        self.session = session
        self.api = api
        self.products = ProductRepository(session)

    def get_products(self, query: ProductListQuery) -> Dict[str, Any]:
        limit = page_limit(query.limit, self.api.default_page_size, self.api.max_page_size)
        logger.info(f"Admin product listing with filters: {query.model_dump(exclude_none=True)}")

        products, total = self.products.list_products(
            page=query.page,
            limit=limit,
            search=query.search,
            category=query.category,
            sku=query.sku,
            brand=query.brand,
            min_price=query.min_price,
            max_price=query.max_price,
            sort=query.sort,
        )
        meta = PageMeta(total=total, page=query.page, limit=limit)
        return {"data": [p.to_dict() for p in products], "meta": meta.to_json()}

    def get_product(self, product_id: int) -> Dict[str, Any]:
        product = self.products.get_with_variants(product_id)
        if product is None:
            raise NotFoundError("Product")
        return product.to_dict(include_variants=True)

    def create_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Persist a new product with its variants

        Expects a payload already validated by ProductCreateSchema. The slug
        defaults to a slugified title; in_stock follows the stock of the
        product or of any variant.
        """
        category_id = data.get("category_id")
        if category_id is not None and self.products.get_category(category_id) is None:
            raise ValidationError(f"Category {category_id} does not exist")

        brand_id = data.get("brand_id")
        if brand_id is not None and self.products.get_brand(brand_id) is None:
            raise ValidationError(f"Brand {brand_id} does not exist")

        slug = data.get("slug") or FormattingUtils.slugify(data["title"])
        if not slug:
            raise ValidationError("Could not derive a slug from the title; provide one explicitly")

        variants = self._build_variants(data.get("variants") or [])
        stock = data.get("stock", 0)

        product = Product(
            sku=data["sku"],
            slug=slug,
            title=data["title"],
            description=data.get("description"),
            price=FormattingUtils.to_decimal(data["price"]),
            compare_at_price=(
                FormattingUtils.to_decimal(data["compare_at_price"])
                if data.get("compare_at_price") is not None else None
            ),
            currency=data.get("currency", "USD"),
            stock=stock,
            in_stock=stock > 0 or any(v.stock > 0 for v in variants),
            published=data.get("published", True),
            image_url=data.get("image"),
            category_id=category_id,
            brand_id=brand_id,
            variants=variants,
        )

        with transaction(self.session, conflict_detail="A product with this SKU or slug already exists"):
            self.products.add(product)
            self.session.flush()

        logger.info(f"Product created: {product.id} ({product.sku})")
        return product.to_dict(include_variants=True)

    @staticmethod
    def _build_variants(payload: List[Dict[str, Any]]) -> List[ProductVariant]:
        return [
            ProductVariant(
                sku=v.get("sku"),
                price=FormattingUtils.to_decimal(v["price"]) if v.get("price") is not None else None,
                stock=v.get("stock", 0),
                options=v.get("options") or {},
            )
            for v in payload
        ]
