from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from pinnote.core.db import MongoModel
from pinnote.core.pagination import Page, PaginationInfo
from pinnote.utils import now


class Comment(MongoModel):
    """Comment on an image: either a positioned top-level comment or a reply to one."""

    file_id: UUID
    author_id: UUID
    number: int  # Sequential number per file, breaks created_at ties
    body: str
    x: float | None = None  # Percent of image width, 0-100
    y: float | None = None  # Percent of image height, 0-100
    parent_id: UUID | None = None
    created_at: datetime = Field(default_factory=now)

    @property
    def is_positioned(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    def sort_key(self) -> tuple[datetime, int]:
        """Creation order; number keeps comments with identical timestamps stable."""
        return self.created_at, self.number


class CommentListResponse(BaseModel):
    """Paginated comments (API representation)."""

    comments: list[Comment] = Field(..., description="Comments in current page, newest first")
    pagination: PaginationInfo

    @classmethod
    def from_page(cls, page: Page[Comment]) -> "CommentListResponse":
        return cls(comments=page.items, pagination=PaginationInfo.from_page(page))

    def to_page(self) -> Page[Comment]:
        return Page(items=self.comments, page=self.pagination.page, limit=self.pagination.limit, total=self.pagination.total)
