"""Server-Sent Events framing for the live comment stream."""

import json
from collections.abc import AsyncGenerator
from typing import Any

import structlog

from pinnote.core.modules.live.channel import Subscription
from pinnote.core.modules.live.models import CommentEvent, LiveConnected, topic_name

logger = structlog.get_logger(__name__)

KEEPALIVE = ": keepalive\n\n"


def format_sse(event: str, data: str) -> str:
    lines = [f"event: {event}"]
    lines.extend(f"data: {line}" for line in data.splitlines() or [""])
    return "\n".join(lines) + "\n\n"


async def comment_event_stream(subscription: Subscription, keepalive_seconds: float) -> AsyncGenerator[str]:
    """Frame a subscription as SSE: a connected event, then comments, with keepalives while idle."""
    connected = LiveConnected(connection_id=subscription.connection.connection_id)
    logger.info("live_stream_opened", topic=topic_name(subscription.file_id), connection_id=connected.connection_id)
    try:
        yield format_sse(connected.type, connected.model_dump_json(by_alias=True))
        while True:
            try:
                event = await subscription.next_event(timeout=keepalive_seconds)
            except StopAsyncIteration:
                break
            if event is None:
                yield KEEPALIVE
                continue
            yield format_sse(event.type, event.model_dump_json(by_alias=True))
    finally:
        subscription.close()
        logger.info("live_stream_closed", topic=topic_name(subscription.file_id), connection_id=connected.connection_id)


class SSEDecoder:
    """Incremental decoder turning SSE text lines into live messages."""

    def __init__(self) -> None:
        self._event = "message"
        self._data: list[str] = []

    def feed(self, line: str) -> CommentEvent | LiveConnected | None:
        """Consume one line (without newline); return a message when a frame completes."""
        if line == "":
            return self._dispatch()
        if line.startswith(":"):
            return None
        field, _, value = line.partition(":")
        value = value.removeprefix(" ")
        if field == "event":
            self._event = value
        elif field == "data":
            self._data.append(value)
        return None

    def _dispatch(self) -> CommentEvent | LiveConnected | None:
        event, data = self._event, self._data
        self._event, self._data = "message", []
        if not data:
            return None
        payload: dict[str, Any] = json.loads("\n".join(data))
        if event == "connected":
            return LiveConnected.model_validate(payload)
        if event == "comment":
            return CommentEvent.model_validate(payload)
        logger.debug("sse_event_ignored", sse_event=event)
        return None
