"""Locating a linked comment that may sit on a page that is not loaded yet."""

from collections.abc import Awaitable, Callable
from enum import StrEnum
from uuid import UUID

import structlog
from pydantic import BaseModel

from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.comment.threads import assemble_threads
from pinnote.core.pagination import DEFAULT_PAGE_LIMIT, Page

logger = structlog.get_logger(__name__)

FetchPage = Callable[[UUID, int, int], Awaitable[Page[Comment]]]


class ResolveState(StrEnum):
    IDLE = "idle"
    SEARCHING = "searching"
    FOUND = "found"
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"


class Found(BaseModel):
    """The linked comment, and the top-level comment whose thread shows it."""

    comment_id: UUID
    thread_id: UUID


class Exhausted(BaseModel):
    """Every page was read without finding the linked comment."""

    comment_id: UUID
    pages_fetched: int


class DeepLinkResolver:
    """Fetches pages 1, 2, ... until the target's thread can be assembled or pages run out.

    One resolver handles one resolution. Each fetch is awaited, so live updates keep
    being applied between fetches.
    """

    def __init__(
        self,
        fetch_page: FetchPage,
        limit: int = DEFAULT_PAGE_LIMIT,
        on_page: Callable[[Page[Comment]], None] | None = None,
    ) -> None:
        self._fetch_page = fetch_page
        self._limit = limit
        self._on_page = on_page
        self.state = ResolveState.IDLE

    def cancel(self) -> None:
        """Stop before the next fetch; the resolution then reports no result."""
        if self.state in (ResolveState.IDLE, ResolveState.SEARCHING):
            self.state = ResolveState.CANCELLED

    async def resolve(self, file_id: UUID, target_id: UUID) -> Found | Exhausted | None:
        if self.state is ResolveState.CANCELLED:
            return None
        if self.state is not ResolveState.IDLE:
            raise RuntimeError(f"Resolver cannot start from state '{self.state}'")
        self.state = ResolveState.SEARCHING

        fetched: list[Comment] = []
        page_number = 1
        while True:
            page = await self._fetch_page(file_id, page_number, self._limit)
            if self.state is ResolveState.CANCELLED:
                logger.debug("deep_link_cancelled", file_id=file_id, comment_id=target_id, page=page_number)
                return None

            if self._on_page is not None:
                self._on_page(page)

            # A reply resolves only once its parent has been fetched too
            fetched.extend(page.items)
            thread_id = assemble_threads(fetched).find_thread(target_id)
            if thread_id is not None:
                self.state = ResolveState.FOUND
                logger.debug("deep_link_found", file_id=file_id, comment_id=target_id, pages_fetched=page_number)
                return Found(comment_id=target_id, thread_id=thread_id)

            # Bound is re-read from every page so concurrent growth is still covered
            if not page.has_more or page_number >= page.pages:
                self.state = ResolveState.EXHAUSTED
                logger.info("deep_link_exhausted", file_id=file_id, comment_id=target_id, pages_fetched=page_number)
                return Exhausted(comment_id=target_id, pages_fetched=page_number)

            page_number += 1
