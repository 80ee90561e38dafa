"""
Chat session repository interface.

Defines the contract for chat session and message persistence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from chatline.models.chat_session import ChatMessage, ChatSession
from chatline.models.enums import MessageRole


class IChatSessionRepository(ABC):
    """Abstract interface for chat session persistence."""

    @abstractmethod
    async def create_session(self, user_id: str) -> ChatSession:
        """
        Create an empty chat session.

        Args:
            user_id: Owner user ID

        Returns:
            ChatSession with a server-assigned ID and message_count 0
        """
        pass

    @abstractmethod
    async def get_session(self, session_id: str, user_id: str) -> ChatSession:
        """
        Get a chat session owned by the user.

        Raises:
            NotFoundError: If the session does not exist or is not owned by user_id
        """
        pass

    @abstractmethod
    async def list_sessions(self, user_id: str) -> list[ChatSession]:
        """
        List chat sessions for a user, newest first.

        Args:
            user_id: Owner user ID

        Returns:
            Chat sessions ordered by created_at descending
        """
        pass

    @abstractmethod
    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        """
        List messages for a session, oldest first.

        Args:
            session_id: Session ID

        Returns:
            Chat messages ordered by created_at ascending
        """
        pass

    @abstractmethod
    async def add_message(
        self,
        session_id: str,
        content: str,
        role: MessageRole,
    ) -> ChatMessage:
        """
        Persist a message.

        Args:
            session_id: Session ID
            content: Message content
            role: Message role (user/assistant)

        Returns:
            ChatMessage with a server-assigned ID
        """
        pass

    @abstractmethod
    async def update_message_count(self, session_id: str, count: int) -> ChatSession:
        """Set the session's message count."""
        pass

    @abstractmethod
    async def rename_session(self, session_id: str, name: str) -> ChatSession:
        """Set the session's display name."""
        pass

    @abstractmethod
    async def delete_session(self, session_id: str, user_id: str) -> None:
        """Delete a session owned by the user together with its messages."""
        pass
