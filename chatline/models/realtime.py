"""
Realtime change event models.

Mirrors the row-change payloads delivered by the hosted change feed for the
chat session table.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from chatline.models.chat_session import ChatSession, utc_now
from chatline.models.enums import ChangeEventType


class ChangeEvent(BaseModel):
    """A pushed insert/update/delete of one chat session row."""

    event_type: ChangeEventType
    record: ChatSession = Field(..., description="New row for insert/update, old row for delete")
    commit_timestamp: datetime = Field(default_factory=utc_now)
