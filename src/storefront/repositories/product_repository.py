import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import Select, or_, select
from sqlalchemy.orm import selectinload

from storefront.models import Brand, Category, Product, ProductVariant
from storefront.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

SORT_ORDERS = {
    "createdAt-desc": (Product.created_at.desc(), Product.id.desc()),
    "createdAt-asc": (Product.created_at.asc(), Product.id.asc()),
    "price-asc": (Product.price.asc(), Product.id.asc()),
    "price-desc": (Product.price.desc(), Product.id.desc()),
    "title-asc": (Product.title.asc(), Product.id.asc()),
    "title-desc": (Product.title.desc(), Product.id.desc()),
}
DEFAULT_SORT = "createdAt-desc"


# Larger values cannot be an id of a BIGINT column
MAX_ID_DIGITS = 18


def _slug_or_id(column_slug, column_id, value: str):
    if value.isdecimal() and len(value) <= MAX_ID_DIGITS:
        return or_(column_slug == value, column_id == int(value))
    return column_slug == value


class ProductRepository(BaseRepository[Product]):
    """Catalog queries: filtered listings, lookups with variants"""

    model = Product

    def _with_relations(self, stmt: Select) -> Select:
        return stmt.options(
            selectinload(Product.brand),
            selectinload(Product.category),
            selectinload(Product.variants),
        )

    def get_with_variants(self, product_id: int) -> Optional[Product]:
        return self.first(self._with_relations(select(Product)).where(Product.id == product_id))

    def get_published_by_slug(self, slug: str) -> Optional[Product]:
        return self.first(
            self._with_relations(select(Product)).where(Product.slug == slug, Product.published.is_(True))
        )

    def list_products(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sku: Optional[str] = None,
        brand: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort: Optional[str] = None,
        published_only: bool = False,
        exclude_id: Optional[int] = None,
    ) -> Tuple[List[Product], int]:
        """
        Filtered, offset-paginated product listing

        Returns:
            (products on the requested page, total matching products)
        """
        stmt = select(Product)

        if published_only:
            stmt = stmt.where(Product.published.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(Product.id != exclude_id)

        # icontains escapes % and _ typed by the caller
        if search:
            stmt = stmt.where(
                or_(
                    Product.title.icontains(search, autoescape=True),
                    Product.sku.icontains(search, autoescape=True),
                    Product.description.icontains(search, autoescape=True),
                )
            )

        if category:
            stmt = stmt.join(Product.category).where(_slug_or_id(Category.slug, Category.id, category))

        if brand:
            stmt = stmt.join(Product.brand).where(_slug_or_id(Brand.slug, Brand.id, brand))

        if sku:
            stmt = stmt.where(
                or_(
                    Product.sku.icontains(sku, autoescape=True),
                    Product.variants.any(ProductVariant.sku.icontains(sku, autoescape=True)),
                )
            )

        # Inclusive bounds
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)

        total = self.count(stmt)

        stmt = stmt.order_by(*SORT_ORDERS[sort or DEFAULT_SORT])
        stmt = stmt.offset((page - 1) * limit).limit(limit)
        products = self.scalars(self._with_relations(stmt))

        logger.debug(f"Product listing matched {total} rows, returning {len(products)}")
        return products, total

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.session.get(Category, category_id)

    def get_brand(self, brand_id: int) -> Optional[Brand]:
        return self.session.get(Brand, brand_id)

    def get_variant(self, product_id: int, variant_id: int) -> Optional[ProductVariant]:
        return self.session.scalars(
            select(ProductVariant).where(
                ProductVariant.id == variant_id, ProductVariant.product_id == product_id
            )
        ).first()
