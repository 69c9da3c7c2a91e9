from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from pinnote.errors import ValidationError
from pinnote.utils import page_count

T = TypeVar("T")

MAX_PAGE_LIMIT = 50
DEFAULT_PAGE_LIMIT = 10


def validate_page_params(page: int, limit: int) -> None:
    """Reject out-of-range pagination parameters instead of clamping them."""
    if page < 1:
        raise ValidationError(f"Field 'page' must be at least 1, got {page}")
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise ValidationError(f"Field 'limit' must be between 1 and {MAX_PAGE_LIMIT}, got {limit}")


class Page(BaseModel, Generic[T]):
    """One page of a newest-first listing. Produced fresh for every query and never mutated."""

    items: list[T] = Field(..., description="Items in current page")
    page: int = Field(..., description="1-based page number", ge=1)
    limit: int = Field(..., description="Maximum items per page", ge=1)
    total: int = Field(..., description="Total number of items across all pages", ge=0)

    model_config = ConfigDict(frozen=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pages(self) -> int:
        """Number of pages for the current total."""
        return page_count(self.total, self.limit)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_more(self) -> bool:
        """Whether pages beyond this one exist."""
        return self.page < self.pages


class PaginationInfo(BaseModel):
    """Pagination metadata as exposed by the HTTP API."""

    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)
    has_more: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_page(cls, page: Page[T]) -> "PaginationInfo":
        return cls(total=page.total, page=page.page, limit=page.limit, pages=page.pages, has_more=page.has_more)
