from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from pinnote.config import Config
from pinnote.core.core import Core
from pinnote.core.modules.comment.models import Comment
from pinnote.core.modules.live.channel import Subscription
from pinnote.core.modules.live.models import ConnectionContext
from pinnote.core.modules.session.models import AuthToken
from pinnote.core.pagination import Page


class App:
    """Facade for all application operations, validates permissions before delegating to Core."""

    def __init__(self, config: Config, database: AsyncDatabase[dict[str, Any]] | None = None) -> None:
        self._core = Core(config, database)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    @property
    def config(self) -> Config:
        return self._core.config

    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        """Check if authentication token is valid."""
        return await self._core.services.session.is_auth_token_valid(auth_token)

    async def get_file_comments(self, auth_token: AuthToken, file_id: UUID, page: int, limit: int) -> Page[Comment]:
        """Get one page of a file's comments, newest first (project members only)."""
        await self._core.services.access.ensure_file_access(auth_token, file_id)
        return await self._core.services.comment.get_file_comments(file_id, page, limit)

    async def create_comment(
        self,
        auth_token: AuthToken,
        file_id: UUID,
        body: str,
        x: float | None = None,
        y: float | None = None,
        parent_id: UUID | None = None,
        connection: ConnectionContext | None = None,
    ) -> Comment:
        """Add a comment or reply to a file (project members only)."""
        user_id = await self._core.services.access.ensure_file_access(auth_token, file_id)
        return await self._core.services.comment.create_comment(file_id, user_id, body, x, y, parent_id, connection)

    async def subscribe_comments(self, auth_token: AuthToken, file_id: UUID, connection: ConnectionContext) -> Subscription:
        """Subscribe a live connection to new comments on a file (project members only)."""
        await self._core.services.access.ensure_file_access(auth_token, file_id)
        return self._core.services.live.subscribe(file_id, connection)
