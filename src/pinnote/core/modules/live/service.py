from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from pinnote.core.core import Service
from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.live.channel import LiveChannel, Subscription
from pinnote.core.modules.live.models import ConnectionContext

logger = structlog.get_logger(__name__)


class LiveService(Service):
    """Owns the in-process live comment channel. Nothing about it is persisted."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._channel: LiveChannel | None = None

    async def on_start(self) -> None:
        self._channel = LiveChannel(queue_size=self.core.config.live_queue_size)
        logger.debug("live_service_started", queue_size=self.core.config.live_queue_size)

    async def on_stop(self) -> None:
        if self._channel is not None:
            self._channel.close_all()

    @property
    def channel(self) -> LiveChannel:
        if self._channel is None:
            raise RuntimeError("Live channel not started")
        return self._channel

    def subscribe(self, file_id: UUID, connection: ConnectionContext) -> Subscription:
        return self.channel.subscribe(file_id, connection)

    def publish(self, file_id: UUID, comment: Comment, origin: ConnectionContext | None) -> int:
        """Broadcast a created comment; a missing channel only costs the live update."""
        if self._channel is None:
            logger.warning("live_publish_skipped", file_id=file_id, comment_id=comment.id)
            return 0
        return self._channel.publish(file_id, comment, origin)
