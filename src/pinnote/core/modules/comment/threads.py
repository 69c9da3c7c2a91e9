"""Grouping of a flat comment list into positioned threads and their replies."""

from collections.abc import Iterable
from uuid import UUID

from pydantic import BaseModel, Field

from pinnote.core.modules.comment.models import Comment


class CommentThreads(BaseModel):
    """Derived view over a flat comment set; recompute it instead of mutating it."""

    top_level: list[Comment] = Field(default_factory=list)
    replies_by_parent: dict[UUID, list[Comment]] = Field(default_factory=dict)

    def replies(self, comment_id: UUID) -> list[Comment]:
        return self.replies_by_parent.get(comment_id, [])

    def find_thread(self, comment_id: UUID) -> UUID | None:
        """Return the id of the top-level comment whose thread displays comment_id."""
        for comment in self.top_level:
            if comment.id == comment_id:
                return comment.id
        for parent_id, replies in self.replies_by_parent.items():
            if any(reply.id == comment_id for reply in replies):
                return parent_id
        return None


def assemble_threads(comments: Iterable[Comment]) -> CommentThreads:
    """Partition comments into top-level comments (input order) and replies (oldest first).

    Replies whose parent is not a top-level comment of the input are left out: they
    stay invisible until the parent is loaded. This also hides replies to replies.
    """
    comments = list(comments)
    top_level = [comment for comment in comments if comment.is_positioned]
    top_level_ids = {comment.id for comment in top_level}

    replies_by_parent: dict[UUID, list[Comment]] = {}
    for comment in comments:
        if comment.parent_id is not None and comment.parent_id in top_level_ids:
            replies_by_parent.setdefault(comment.parent_id, []).append(comment)

    for replies in replies_by_parent.values():
        replies.sort(key=Comment.sort_key)

    return CommentThreads(top_level=top_level, replies_by_parent=replies_by_parent)
