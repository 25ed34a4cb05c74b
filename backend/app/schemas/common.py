"""
Response envelope shared by every endpoint.
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """`{success, data}` on success, `{success: false, message}` on failure."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool = Field(alias="hasMore")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "Pagination":
        return cls(total=total, limit=limit, offset=offset, has_more=offset + limit < total)
