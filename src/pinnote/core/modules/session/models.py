"""Session management models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pinnote.core.db import MongoModel

AuthToken = NewType("AuthToken", str)


class Session(MongoModel):
    """User authentication session issued by the login flow.

    Indexed on auth_token - unique, user_id, expires_at (TTL).
    """

    user_id: UUID
    auth_token: str
    expires_at: datetime
