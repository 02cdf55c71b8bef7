from storefront.schemas.common import PageMeta, PaginationQuery
from storefront.schemas.product import ProductListQuery

__all__ = ["PageMeta", "PaginationQuery", "ProductListQuery"]
