"""
Enum definitions for the application.

These enums are used across models and provide type-safe status values.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Who authored a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class MessageStatus(str, Enum):
    """
    Persistence status of a timeline entry.

    PENDING = optimistic local entry, not yet confirmed by the backend
    PERSISTED = authoritative record returned by the backend
    """

    PENDING = "pending"
    PERSISTED = "persisted"


class ChangeEventType(str, Enum):
    """Kind of change pushed on the realtime channel."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class NoticeType(str, Enum):
    """Severity of a user-visible notice."""

    ERROR = "error"
    WARNING = "warning"
    SUCCESS = "success"
    INFO = "info"
