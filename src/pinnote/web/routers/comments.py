"""Comment-related API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pinnote.core.modules.comment.models import Comment, CommentListResponse
from pinnote.core.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from pinnote.web.deps import AppDep, AuthTokenDep, ConnectionDep
from pinnote.web.openapi import ErrorResponse

router: APIRouter = APIRouter(tags=["comments"])


class CreateCommentRequest(BaseModel):
    """Request to create a positioned comment (x, y) or a reply (parentId)."""

    file_id: UUID = Field(..., description="File being annotated")
    body: str = Field(..., description="The comment text")
    x: float | None = Field(None, description="Horizontal position in percent", ge=0, le=100)
    y: float | None = Field(None, description="Vertical position in percent", ge=0, le=100)
    parent_id: UUID | None = Field(None, description="Top-level comment being replied to")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


@router.get(
    "/comments",
    summary="List file comments",
    description="Get one page of a file's comments, newest first. Only project members can view comments.",
    operation_id="listComments",
    responses={
        200: {"description": "Page of comments with pagination metadata"},
        400: {"model": ErrorResponse, "description": "Invalid page or limit"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a member of the file's project"},
        404: {"model": ErrorResponse, "description": "File not found"},
    },
)
async def list_comments(
    app: AppDep,
    auth_token: AuthTokenDep,
    file_id: Annotated[UUID, Query(alias="fileId", description="File whose comments are listed")],
    page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
    limit: Annotated[int, Query(ge=1, le=MAX_PAGE_LIMIT, description="Maximum items per page")] = DEFAULT_PAGE_LIMIT,
) -> CommentListResponse:
    result = await app.get_file_comments(auth_token, file_id, page, limit)
    return CommentListResponse.from_page(result)


@router.post(
    "/comments",
    summary="Create comment",
    description=(
        "Add a positioned comment or a reply to a file. The new comment is broadcast to the file's other "
        "live viewers; send X-Connection-ID so the caller's own live connection is skipped."
    ),
    operation_id="createComment",
    status_code=201,
    responses={
        201: {"description": "Comment created successfully"},
        400: {"model": ErrorResponse, "description": "Invalid comment shape or field value"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        403: {"model": ErrorResponse, "description": "Not a member of the file's project"},
        404: {"model": ErrorResponse, "description": "File or parent comment not found"},
    },
)
async def create_comment(
    request: CreateCommentRequest, app: AppDep, auth_token: AuthTokenDep, connection: ConnectionDep
) -> Comment:
    return await app.create_comment(
        auth_token, request.file_id, request.body, request.x, request.y, request.parent_id, connection
    )
