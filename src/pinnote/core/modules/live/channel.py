"""In-memory per-file publish/subscribe with bounded subscriber queues.

Delivery is at-most-once: subscribers that are not connected when a comment is
published never see it and must re-read the comment listing instead.
"""

from __future__ import annotations

import asyncio
from types import TracebackType
from typing import Final, cast
from uuid import UUID

import structlog

from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.live.models import CommentEvent, ConnectionContext, topic_name

logger = structlog.get_logger(__name__)

_CLOSED: Final = object()


class Subscription:
    """One subscriber's view of a file topic. Iterate it to receive events until closed."""

    def __init__(self, channel: LiveChannel, file_id: UUID, connection: ConnectionContext, queue_size: int) -> None:
        self.file_id = file_id
        self.connection = connection
        self._channel = channel
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, event: CommentEvent) -> bool:
        """Enqueue without waiting. Returns False when closed or the queue is full."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            return False
        return True

    async def next_event(self, timeout: float | None = None) -> CommentEvent | None:
        """Wait for the next event; None on timeout.

        Raises:
            StopAsyncIteration: Once the subscription is closed and its queue is drained
        """
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        try:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        except TimeoutError:
            return None
        if item is _CLOSED:
            raise StopAsyncIteration
        return cast(CommentEvent, item)

    def close(self) -> None:
        """Unsubscribe and wake any pending reader. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._channel._remove(self)
        # Make room for the end marker; events discarded here are recoverable by re-pagination
        while self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> CommentEvent:
        return cast(CommentEvent, await self.next_event())

    async def __aenter__(self) -> Subscription:
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()


class LiveChannel:
    """Topic per file; publish never blocks and never raises."""

    def __init__(self, queue_size: int = 100) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be positive")
        self._queue_size = queue_size
        self._topics: dict[UUID, set[Subscription]] = {}

    def subscribe(self, file_id: UUID, connection: ConnectionContext) -> Subscription:
        subscription = Subscription(self, file_id, connection, self._queue_size)
        self._topics.setdefault(file_id, set()).add(subscription)
        logger.debug("live_subscribed", topic=topic_name(file_id), connection_id=connection.connection_id)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.close()

    def subscriber_count(self, file_id: UUID) -> int:
        return len(self._topics.get(file_id, ()))

    def publish(self, file_id: UUID, comment: Comment, origin: ConnectionContext | None = None) -> int:
        """Deliver comment to every subscriber of file_id except origin. Returns the delivery count."""
        try:
            return self._deliver(file_id, CommentEvent(comment=comment, sender_connection_id=_connection_id(origin)), origin)
        except Exception:
            logger.exception("live_publish_failed", topic=topic_name(file_id), comment_id=comment.id)
            return 0

    def close_all(self) -> None:
        for subscribers in list(self._topics.values()):
            for subscription in list(subscribers):
                subscription.close()

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._topics.get(subscription.file_id)
        if subscribers is None:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._topics[subscription.file_id]
        logger.debug(
            "live_unsubscribed",
            topic=topic_name(subscription.file_id),
            connection_id=subscription.connection.connection_id,
        )

    def _deliver(self, file_id: UUID, event: CommentEvent, origin: ConnectionContext | None) -> int:
        delivered = 0
        # Iterate a snapshot: closing a slow subscriber mutates the topic set
        for subscription in list(self._topics.get(file_id, ())):
            if origin is not None and subscription.connection == origin:
                continue
            if subscription.offer(event):
                delivered += 1
            else:
                logger.warning(
                    "live_subscriber_dropped",
                    topic=topic_name(file_id),
                    connection_id=subscription.connection.connection_id,
                )
                subscription.close()
        logger.debug("live_published", topic=topic_name(file_id), comment_id=event.comment.id, delivered=delivered)
        return delivered


def _connection_id(connection: ConnectionContext | None) -> str | None:
    return connection.connection_id if connection is not None else None
