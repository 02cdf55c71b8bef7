import math
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class PaginationQuery(BaseModel):
    """Standard offset pagination parameters for list endpoints"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int = Field(default=1, ge=1, description="1-based page number")
    limit: Optional[int] = Field(default=None, ge=1, description="Page size; server default when omitted")


class PageMeta(BaseModel):
    """Standard pagination metadata for responses"""
    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(ge=0, description="Number of matching items")
    page: int = Field(ge=1, description="Page returned")
    limit: int = Field(ge=1, description="Page size used")

    @computed_field(alias="totalPages")
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
