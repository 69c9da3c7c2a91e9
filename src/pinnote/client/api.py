"""HTTP client for the comment API and its live stream."""

from collections.abc import AsyncGenerator
from typing import Any
from uuid import UUID

import httpx
import structlog

from pinnote.core.modules.comment.models import Comment, CommentListResponse
from pinnote.core.modules.live.models import CommentEvent, LiveConnected
from pinnote.core.modules.live.sse import SSEDecoder
from pinnote.core.pagination import DEFAULT_PAGE_LIMIT, Page

logger = structlog.get_logger(__name__)

CONNECTION_HEADER = "X-Connection-ID"


class BackendError(Exception):
    """Raised for any non-2xx response from the backend."""

    def __init__(self, status_code: int, message: str, error_type: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type


class CommentsClient:
    """Thin async wrapper over the REST endpoints; the caller owns the httpx client."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @classmethod
    def connect(cls, base_url: str, auth_token: str, timeout: float = 10.0) -> "CommentsClient":
        http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {auth_token}"},
            timeout=timeout,
        )
        return cls(http)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def list_comments(self, file_id: UUID, page: int = 1, limit: int = DEFAULT_PAGE_LIMIT) -> Page[Comment]:
        response = await self._http.get(
            "/api/v1/comments", params={"fileId": str(file_id), "page": page, "limit": limit}
        )
        _raise_for_error(response)
        return CommentListResponse.model_validate(response.json()).to_page()

    async def create_comment(
        self,
        file_id: UUID,
        body: str,
        x: float | None = None,
        y: float | None = None,
        parent_id: UUID | None = None,
        connection_id: str | None = None,
    ) -> Comment:
        payload: dict[str, Any] = {"fileId": str(file_id), "body": body}
        if x is not None and y is not None:
            payload["x"] = x
            payload["y"] = y
        if parent_id is not None:
            payload["parentId"] = str(parent_id)

        headers = {CONNECTION_HEADER: connection_id} if connection_id else {}
        response = await self._http.post("/api/v1/comments", json=payload, headers=headers)
        _raise_for_error(response)
        return Comment.model_validate(response.json())

    async def listen(self, file_id: UUID) -> AsyncGenerator[CommentEvent | LiveConnected]:
        """Yield live messages for a file until the server closes the stream."""
        timeout = httpx.Timeout(self._http.timeout.connect, read=None)
        async with self._http.stream(
            "GET", "/api/v1/comments/live", params={"fileId": str(file_id)}, timeout=timeout
        ) as response:
            if response.is_error:
                await response.aread()
                _raise_for_error(response)

            decoder = SSEDecoder()
            async for line in response.aiter_lines():
                message = decoder.feed(line)
                if message is not None:
                    yield message
        logger.debug("live_stream_ended", file_id=file_id)


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("message") or response.reason_phrase
    raise BackendError(response.status_code, message, body.get("type"))
