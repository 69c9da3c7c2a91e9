"""Client-side state for one open file."""

from uuid import UUID

import structlog

from pinnote.client.api import CommentsClient
from pinnote.client.cache import MergeCache
from pinnote.client.highlight import DEFAULT_HIGHLIGHT_SECONDS, HighlightTimer
from pinnote.client.resolver import DeepLinkResolver, Exhausted, Found
from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.comment.threads import CommentThreads
from pinnote.core.modules.live.models import CommentEvent, LiveConnected
from pinnote.core.pagination import DEFAULT_PAGE_LIMIT, Page

logger = structlog.get_logger(__name__)


class FileCommentsView:
    """Loaded comment pages, live updates and deep-link highlighting for one file."""

    def __init__(
        self,
        client: CommentsClient,
        file_id: UUID,
        limit: int = DEFAULT_PAGE_LIMIT,
        highlight_seconds: float = DEFAULT_HIGHLIGHT_SECONDS,
    ) -> None:
        self.file_id = file_id
        self.cache = MergeCache()
        self.highlight = HighlightTimer(highlight_seconds)
        self.connection_id: str | None = None
        self._client = client
        self._limit = limit
        self._resolver: DeepLinkResolver | None = None

    async def load_more(self) -> Page[Comment] | None:
        """Fetch the next page, or None when every page is loaded."""
        if not self.cache.has_more:
            return None
        page = await self._client.list_comments(self.file_id, self.cache.next_page, self._limit)
        self.cache.apply_page(page)
        return page

    async def reload(self) -> None:
        """Re-read every loaded page; live events missed while disconnected are not replayed."""
        for number in self.cache.page_numbers() or [1]:
            self.cache.apply_page(await self._client.list_comments(self.file_id, number, self._limit))

    async def create_comment(
        self, body: str, x: float | None = None, y: float | None = None, parent_id: UUID | None = None
    ) -> Comment:
        comment = await self._client.create_comment(self.file_id, body, x, y, parent_id, self.connection_id)
        self.cache.apply_created_comment(comment)
        return comment

    def handle_message(self, message: CommentEvent | LiveConnected) -> bool:
        """Apply one live message. Returns True if it added a comment."""
        if isinstance(message, LiveConnected):
            self.connection_id = message.connection_id
            return False
        return self.cache.apply_live_comment(message.comment, message.sender_connection_id, self.connection_id)

    async def listen(self) -> None:
        """Apply live messages until the stream ends. Reconnecting is up to the caller."""
        try:
            async for message in self._client.listen(self.file_id):
                self.handle_message(message)
                if isinstance(message, LiveConnected) and self.cache.page_numbers():
                    # Catch up on whatever was created before this connection existed
                    await self.reload()
        finally:
            self.connection_id = None

    async def open_deep_link(self, comment_id: UUID) -> Found | Exhausted | None:
        """Locate comment_id, loading pages as needed, and highlight it when found.

        A newer call cancels an unfinished one, which then returns None.
        """
        if self._resolver is not None:
            self._resolver.cancel()
        self.highlight.clear()

        thread_id = self.cache.threads().find_thread(comment_id)
        if thread_id is not None:
            result: Found | Exhausted | None = Found(comment_id=comment_id, thread_id=thread_id)
        else:
            resolver = DeepLinkResolver(self._client.list_comments, self._limit, on_page=self.cache.apply_page)
            self._resolver = resolver
            try:
                result = await resolver.resolve(self.file_id, comment_id)
            finally:
                if self._resolver is resolver:
                    self._resolver = None

        if isinstance(result, Found):
            self.highlight.highlight(comment_id)
        elif isinstance(result, Exhausted):
            logger.info("deep_link_not_found", file_id=self.file_id, comment_id=comment_id)
        return result

    def threads(self) -> CommentThreads:
        return self.cache.threads()
