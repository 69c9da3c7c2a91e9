import asyncio
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from pinnote.core.core import Service
from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.comment.validators import validate_comment_shape
from pinnote.core.modules.counter.models import CounterType
from pinnote.core.modules.live.models import ConnectionContext
from pinnote.core.pagination import DEFAULT_PAGE_LIMIT, Page, validate_page_params
from pinnote.errors import NotFoundError, ValidationError
from pinnote.utils import now

logger = structlog.get_logger(__name__)

# Newest first; number breaks ties between identical timestamps
NEWEST_FIRST = [("created_at", -1), ("number", -1)]


class CommentService(Service):
    """Stores image comments per file and lists them newest first."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("comments")
        # Number, timestamp and insert happen under one lock per file so inserts land in sort order
        self._file_locks: dict[UUID, asyncio.Lock] = {}

    async def on_start(self) -> None:
        """Create indexes for file listing and parent lookup."""
        await self._collection.create_index([("file_id", 1), ("number", 1)], unique=True)
        await self._collection.create_index([("file_id", 1), ("created_at", -1), ("number", -1)])
        await self._collection.create_index([("parent_id", 1)])

    async def create_comment(
        self,
        file_id: UUID,
        author_id: UUID,
        body: str,
        x: float | None = None,
        y: float | None = None,
        parent_id: UUID | None = None,
        connection: ConnectionContext | None = None,
    ) -> Comment:
        """Create a positioned comment or a reply, then broadcast it to the file's other viewers.

        Args:
            file_id: File being annotated
            author_id: Creating user
            body: Comment text, must not be blank
            x: Horizontal position in percent (top-level comments only)
            y: Vertical position in percent (top-level comments only)
            parent_id: Top-level comment being replied to (replies only)
            connection: Live connection of the author, excluded from the broadcast

        Returns:
            The stored comment, which the author can show without waiting for the broadcast
        """
        validate_comment_shape(body, x, y, parent_id is not None)

        if parent_id is not None:
            parent = await self._collection.find_one({"_id": parent_id, "file_id": file_id})
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.get("parent_id") is not None:
                raise ValidationError("Field 'parentId' must reference a top-level comment, not a reply")

        async with self._file_locks.setdefault(file_id, asyncio.Lock()):
            number = await self.core.services.counter.get_next_sequence(file_id, CounterType.COMMENT)
            comment = Comment(
                file_id=file_id,
                author_id=author_id,
                number=number,
                body=body,
                x=x,
                y=y,
                parent_id=parent_id,
                created_at=await self._next_timestamp(file_id),
            )
            await self._collection.insert_one(comment.to_mongo())

        logger.info(
            "comment_created",
            comment_id=comment.id,
            file_id=file_id,
            author_id=author_id,
            is_reply=comment.is_reply,
        )

        self.core.services.live.publish(file_id, comment, connection)
        return comment

    async def get_file_comments(self, file_id: UUID, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Page[Comment]:
        """Get one page of a file's comments, newest first."""
        validate_page_params(page, limit)
        query = {"file_id": file_id}

        total = await self._collection.count_documents(query)
        cursor = self._collection.find(query).sort(NEWEST_FIRST).skip((page - 1) * limit).limit(limit)
        items = await Comment.list_cursor(cursor)

        logger.debug("comments_listed", file_id=file_id, page=page, limit=limit, total=total)
        return Page(items=items, page=page, limit=limit, total=total)

    async def get_comment(self, comment_id: UUID) -> Comment:
        doc = await self._collection.find_one({"_id": comment_id})
        if doc is None:
            raise NotFoundError("Comment not found")
        return Comment.model_validate(doc)

    async def _next_timestamp(self, file_id: UUID) -> datetime:
        """Creation time that never sorts before the file's newest comment."""
        # MongoDB keeps millisecond precision; truncate so the returned comment equals the stored one
        timestamp = now()
        timestamp = timestamp.replace(microsecond=timestamp.microsecond // 1000 * 1000)
        newest = await self._collection.find_one({"file_id": file_id}, sort=NEWEST_FIRST)
        if newest is not None and newest["created_at"] > timestamp:
            return newest["created_at"]  # type: ignore[no-any-return]
        return timestamp
