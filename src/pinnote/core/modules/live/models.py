"""Live comment channel messages and connection identity."""

import secrets
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pinnote.core.modules.comment.models import Comment


class ConnectionContext(BaseModel):
    """Identity of one live connection, passed explicitly through subscribe and create calls."""

    connection_id: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def generate(cls) -> "ConnectionContext":
        return cls(connection_id=secrets.token_urlsafe(16))


class CommentEvent(BaseModel):
    """A newly created comment broadcast to the other viewers of its file."""

    type: Literal["comment"] = "comment"
    comment: Comment
    sender_connection_id: str | None = Field(None, description="Connection that created the comment, if known")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LiveConnected(BaseModel):
    """First message on a live stream, telling the client its own connection id."""

    type: Literal["connected"] = "connected"
    connection_id: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def topic_name(file_id: object) -> str:
    return f"comments:{file_id}"
