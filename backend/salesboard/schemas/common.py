"""Serializable view state shared by the listing endpoints."""

from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, Field

from salesboard.core.config import settings

T = TypeVar("T")


class PageParams(BaseModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int


class AccountFilters(BaseModel):
    division: Optional[str] = None
    size: Optional[str] = None
    tier: Optional[str] = None
    industry: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    q: Optional[str] = Field(default=None, max_length=255)
    sort: Literal["name", "revenue", "fit"] = "name"
    order: Literal["asc", "desc"] = "asc"
