from typing import Any
from uuid import UUID

from pymongo.asynchronous.database import AsyncDatabase

from pinnote.core.core import Service
from pinnote.core.modules.session.models import AuthToken, Session
from pinnote.errors import AuthenticationError
from pinnote.utils import now


class SessionService(Service):
    """Resolves auth tokens to user ids. Sessions are issued by the login flow elsewhere."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("sessions")
        self._sessions: dict[AuthToken, Session] = {}

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("auth_token", 1)], unique=True)
        await self._collection.create_index([("user_id", 1)])
        # TTL index removes expired sessions
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    async def get_authenticated_user_id(self, auth_token: AuthToken) -> UUID:
        # Check cache first
        session = self._sessions.get(auth_token)
        if session is None:
            doc = await self._collection.find_one({"auth_token": auth_token})
            if doc is None:
                raise AuthenticationError("Invalid or expired session")
            session = Session.model_validate(doc)

        # The TTL monitor runs only once a minute, so expiry is checked here as well
        if session.expires_at <= now():
            self._sessions.pop(auth_token, None)
            raise AuthenticationError("Invalid or expired session")

        self._sessions[auth_token] = session
        return session.user_id

    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        try:
            await self.get_authenticated_user_id(auth_token)
        except AuthenticationError:
            return False
        return True
