"""
Chat session and message models.

A session is owned by exactly one user and exclusively owns its messages.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from chatline.models.enums import MessageRole, MessageStatus

TRANSIENT_ID_PREFIX = "temp-"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChatSession(BaseModel):
    """Chat session model."""

    session_id: str = Field(..., max_length=100, description="Server-assigned session ID")
    user_id: str = Field(..., description="Owner user ID")
    name: Optional[str] = Field(None, max_length=200, description="Display name")
    message_count: int = Field(0, ge=0, description="Number of persisted messages")
    created_at: datetime


class ChatMessage(BaseModel):
    """
    Chat message model.

    ``id`` is either a transient local ID (``temp-`` prefix) while the
    message is pending, or the server-assigned ID once persisted.
    """

    id: str = Field(..., description="Transient or server-assigned message ID")
    session_id: str = Field(..., max_length=100, description="Chat session ID")
    role: MessageRole
    content: str = Field("", max_length=100000, description="Message content")
    created_at: datetime = Field(default_factory=utc_now)
    status: MessageStatus = MessageStatus.PERSISTED

    @property
    def is_transient(self) -> bool:
        return self.id.startswith(TRANSIENT_ID_PREFIX)
