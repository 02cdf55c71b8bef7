from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator, model_validator

from storefront.repositories.product_repository import SORT_ORDERS
from storefront.schemas.common import PaginationQuery


class ProductListQuery(PaginationQuery):
    """Query parameters for listing products"""
    search: Optional[str] = Field(default=None, max_length=100, description="Search query")
    category: Optional[str] = Field(default=None, description="Category slug or id")
    brand: Optional[str] = Field(default=None, description="Brand slug or id")
    sku: Optional[str] = Field(default=None, max_length=100, description="SKU fragment")
    min_price: Optional[Decimal] = Field(default=None, ge=0, alias="minPrice")
    max_price: Optional[Decimal] = Field(default=None, ge=0, alias="maxPrice")
    sort: Optional[str] = Field(default=None, description="Sort key, e.g. price-asc")

    @field_validator("search", "category", "brand", "sku", "sort", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def blank_price_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("sort")
    @classmethod
    def validate_sort(cls, v):
        if v is not None and v not in SORT_ORDERS:
            raise ValueError(f"sort must be one of: {', '.join(SORT_ORDERS)}")
        return v

    @model_validator(mode="after")
    def validate_price_range(self):
        """Ensure minPrice <= maxPrice"""
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("minPrice cannot be greater than maxPrice")
        return self
