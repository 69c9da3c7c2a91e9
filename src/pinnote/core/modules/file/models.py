"""Read-only view of the project/file directory used for access checks."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from pinnote.core.db import MongoModel
from pinnote.utils import now


class Project(MongoModel):
    """Project owned by an author and shared with reviewers."""

    name: str
    author_id: UUID
    reviewers: list[UUID] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=now)

    def has_member(self, user_id: UUID) -> bool:
        return user_id == self.author_id or user_id in self.reviewers


class File(MongoModel):
    """Uploaded image that reviewers annotate."""

    name: str
    path: str
    project_id: UUID
    author_id: UUID
    created_at: datetime = Field(default_factory=now)
