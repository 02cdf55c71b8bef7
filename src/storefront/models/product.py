from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship

from storefront.db import Base, BigIntId
from storefront.utils.formatting import FormattingUtils


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """Top-level grouping for products (e.g. Electronics, Clothing)."""

    __tablename__ = "categories"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    slug = Column(Text, nullable=False, unique=True)
    title = Column(Text, nullable=False)

    products = relationship("Product", back_populates="category")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "slug": self.slug, "title": self.title}

    def __repr__(self) -> str:
        return f"<Category id={self.id} slug={self.slug!r}>"


class Brand(Base):
    __tablename__ = "brands"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    slug = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)

    products = relationship("Product", back_populates="brand")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "slug": self.slug, "name": self.name}

    def __repr__(self) -> str:
        return f"<Brand id={self.id} slug={self.slug!r}>"


class Product(Base):
    """
    A catalog product (e.g. 'Running Shoe').

    Purchasable options (size M, colour red) live in ProductVariant. sku and
    slug uniqueness is enforced by the database only.
    """

    __tablename__ = "products"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    sku = Column(Text, nullable=False, unique=True)
    slug = Column(Text, nullable=False, unique=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    compare_at_price = Column(Numeric(12, 2), nullable=True)
    currency = Column(Text, nullable=False, default="USD")
    stock = Column(Integer, nullable=False, default=0)
    in_stock = Column(Boolean, nullable=False, default=False)
    published = Column(Boolean, nullable=False, default=True)
    image_url = Column(Text, nullable=True)
    brand_id = Column(BigIntId, ForeignKey("brands.id"), nullable=True)
    category_id = Column(BigIntId, ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_product_price"),
        CheckConstraint("stock >= 0", name="ck_product_stock"),
    )

    brand = relationship("Brand", back_populates="products")
    category = relationship("Category", back_populates="products")
    # cascade='all, delete-orphan' -> deleting a product deletes its variants
    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.id",
    )

    @property
    def available_stock(self) -> int:
        if self.variants:
            return sum(v.stock for v in self.variants)
        return self.stock

    def to_dict(self, include_variants: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "sku": self.sku,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "price": FormattingUtils.money_to_json(self.price),
            "compareAtPrice": FormattingUtils.money_to_json(self.compare_at_price),
            "currency": self.currency,
            "stock": self.stock,
            "inStock": self.in_stock,
            "published": self.published,
            "image": self.image_url,
            "brand": self.brand.to_dict() if self.brand else None,
            "category": self.category.to_dict() if self.category else None,
            "createdAt": FormattingUtils.isoformat(self.created_at),
        }
        if include_variants:
            data["variants"] = [v.to_dict() for v in self.variants]
        return data

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} title={self.title!r}>"


class ProductVariant(Base):
    """
    A specific, purchasable version of a product.

    options stores arbitrary key/value pairs like {"size": "M", "color": "red"}.
    price overrides the product price when set.
    """

    __tablename__ = "product_variants"

    id = Column(BigIntId, primary_key=True, autoincrement=True)
    product_id = Column(BigIntId, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    sku = Column(Text, nullable=True, unique=True)
    price = Column(Numeric(12, 2), nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    options = Column(JSON, nullable=False, default=dict)

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_variant_stock"),)

    product = relationship("Product", back_populates="variants")

    @property
    def effective_price(self):
        return self.price if self.price is not None else self.product.price

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sku": self.sku,
            "price": FormattingUtils.money_to_json(self.effective_price),
            "stock": self.stock,
            "inStock": self.stock > 0,
            "options": [{"key": k, "value": v} for k, v in (self.options or {}).items()],
        }

    def __repr__(self) -> str:
        return f"<ProductVariant id={self.id} sku={self.sku!r}>"


def unit_price(product: Product, variant: Optional[ProductVariant] = None):
    return variant.effective_price if variant is not None else product.price
