"""Client-side merge of fetched comment pages with comments received live."""

from itertools import chain
from uuid import UUID

import structlog

from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.comment.threads import CommentThreads, assemble_threads
from pinnote.core.pagination import Page

logger = structlog.get_logger(__name__)


class MergeCache:
    """Fetched pages for one file plus an overlay of comments that arrived outside a page fetch.

    Comments are keyed by id: once accepted a comment is never dropped, and a comment
    that arrives twice (live and in a later page, or twice live) is kept once.
    """

    def __init__(self) -> None:
        self._pages: dict[int, Page[Comment]] = {}
        self._live: list[Comment] = []  # Arrival order
        self._pending: dict[UUID, list[Comment]] = {}  # Replies keyed by a parent not loaded yet

    def apply_page(self, page: Page[Comment]) -> None:
        """Store page at its page-number slot, replacing an earlier fetch of the same page."""
        self._pages[page.page] = page
        self._attach_pending()

    def apply_live_comment(self, comment: Comment, origin_connection_id: str | None, local_connection_id: str | None) -> bool:
        """Merge a comment broadcast by another connection. Returns True if it was new."""
        if origin_connection_id is not None and origin_connection_id == local_connection_id:
            # Our own create already returned this comment
            logger.debug("live_comment_self_echo", comment_id=comment.id)
            return False
        return self._accept(comment)

    def apply_created_comment(self, comment: Comment) -> bool:
        """Merge the comment returned by this client's own create call."""
        return self._accept(comment)

    def comments(self) -> list[Comment]:
        """Every displayable comment once: unpaged live top-level comments (newest first), pages in order, live replies."""
        paged_ids = {comment.id for comment in self._paged()}
        # A live comment that a page also holds keeps the page's position
        live_top_level = sorted(
            (comment for comment in self._live if not comment.is_reply and comment.id not in paged_ids),
            key=Comment.sort_key,
            reverse=True,
        )
        live_replies = [comment for comment in self._live if comment.is_reply]

        seen: set[UUID] = set()
        ordered: list[Comment] = []
        for comment in chain(live_top_level, self._paged(), live_replies):
            if comment.id not in seen:
                seen.add(comment.id)
                ordered.append(comment)
        return ordered

    def comment_ids(self) -> set[UUID]:
        """Ids of all accepted comments, including replies still waiting for their parent."""
        ids = {comment.id for comment in chain(self._paged(), self._live)}
        ids.update(reply.id for replies in self._pending.values() for reply in replies)
        return ids

    def pending_replies(self) -> list[Comment]:
        return [reply for replies in self._pending.values() for reply in replies]

    def threads(self) -> CommentThreads:
        return assemble_threads(self.comments())

    def is_visible(self, comment_id: UUID) -> bool:
        return self.threads().find_thread(comment_id) is not None

    def page_numbers(self) -> list[int]:
        return sorted(self._pages)

    @property
    def total(self) -> int:
        """Comment count as of the first page plus accepted comments that no page contains yet."""
        first = self._pages.get(1)
        paged_ids = {comment.id for comment in self._paged()}
        unpaged = self.comment_ids() - paged_ids
        return (first.total if first is not None else 0) + len(unpaged)

    @property
    def has_more(self) -> bool:
        if not self._pages:
            return True
        return self._pages[max(self._pages)].has_more

    @property
    def next_page(self) -> int:
        return max(self._pages) + 1 if self._pages else 1

    def _paged(self) -> list[Comment]:
        return [comment for number in sorted(self._pages) for comment in self._pages[number].items]

    def _accept(self, comment: Comment) -> bool:
        if comment.id in self.comment_ids():
            return False

        if comment.parent_id is not None and not self._holds(comment.parent_id):
            self._pending.setdefault(comment.parent_id, []).append(comment)
            logger.debug("reply_pending_parent", comment_id=comment.id, parent_id=comment.parent_id)
            return True

        self._live.append(comment)
        if not comment.is_reply:
            self._attach_pending()
        return True

    def _holds(self, comment_id: UUID) -> bool:
        return any(comment.id == comment_id for comment in chain(self._paged(), self._live))

    def _attach_pending(self) -> None:
        for parent_id in list(self._pending):
            if self._holds(parent_id):
                # comments() skips any that a page also contains
                self._live.extend(self._pending.pop(parent_id))
