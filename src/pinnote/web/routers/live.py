"""Live comment stream (Server-Sent Events)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from pinnote.core.modules.live.models import ConnectionContext
from pinnote.core.modules.live.sse import comment_event_stream
from pinnote.web.deps import AppDep, AuthTokenDep
from pinnote.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["live"])


@router.get(
    "/comments/live",
    summary="Stream new comments",
    description=(
        "Server-Sent Events stream of comments created on a file by other connections. The first event "
        "(`connected`) carries this connection's id, to be sent as X-Connection-ID when creating comments. "
        "Missed events are not replayed; reload the comment list after reconnecting."
    ),
    operation_id="streamComments",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "Event stream"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a member of the file's project"},
        404: {"model": ErrorResponse, "description": "File not found"},
    },
)
async def stream_comments(
    app: AppDep,
    auth_token: AuthTokenDep,
    file_id: Annotated[UUID, Query(alias="fileId", description="File to follow")],
) -> StreamingResponse:
    # Subscribe before the response starts so access errors still map to status codes
    subscription = await app.subscribe_comments(auth_token, file_id, ConnectionContext.generate())
    return StreamingResponse(
        comment_event_stream(subscription, app.config.live_keepalive_seconds),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
