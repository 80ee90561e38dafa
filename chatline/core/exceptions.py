"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class ChatlineError(Exception):
    """Base exception for chatline."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ChatlineError):
    """Resource not found (missing or not owned by the caller)."""

    pass


class LLMError(ChatlineError):
    """LLM-related error."""

    pass


class InfrastructureError(ChatlineError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class PersistenceError(InfrastructureError):
    """A persistence call (create/add/update/delete) failed."""

    pass
