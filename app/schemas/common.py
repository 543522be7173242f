from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PagedResult(BaseModel, Generic[T]):
    """Uniform envelope returned by every search endpoint."""

    model_config = ConfigDict(from_attributes=True)

    content: list[T]
    page: int = Field(ge=0)
    size: int = Field(ge=1)
    total_elements: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    sort_by: str
    sort_direction: str
    first: bool
    last: bool
    has_content: bool


class SearchErrorResponse(BaseModel):
    detail: str
    field: str | None = None
