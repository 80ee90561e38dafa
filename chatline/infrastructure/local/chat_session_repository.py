"""
SQLite implementation of Chat session repository.

Writes to the sessions table are mirrored onto the change feed as
insert/update/delete events, standing in for the hosted realtime channel.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import and_, delete, literal_column, select
from sqlalchemy.exc import SQLAlchemyError

from chatline.core.exceptions import NotFoundError, PersistenceError
from chatline.core.logger import logger
from chatline.infrastructure.local.database import ChatMessageORM, ChatSessionORM, get_session_factory
from chatline.interfaces.change_feed import IChangeFeed
from chatline.interfaces.chat_session_repository import IChatSessionRepository
from chatline.models.chat_session import ChatMessage, ChatSession
from chatline.models.enums import ChangeEventType, MessageRole, MessageStatus
from chatline.models.realtime import ChangeEvent


def _as_utc(value: datetime) -> datetime:
    # SQLite DateTime columns come back naive; they hold UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SqliteChatSessionRepository(IChatSessionRepository):
    """SQLite implementation of chat session repository."""

    def __init__(self, session_factory=None, change_feed: Optional[IChangeFeed] = None):
        self._session_factory = session_factory or get_session_factory()
        self._change_feed = change_feed

    def _session_orm_to_model(self, orm: ChatSessionORM) -> ChatSession:
        """Convert session ORM object to Pydantic model."""
        return ChatSession(
            session_id=orm.session_id,
            user_id=orm.user_id,
            name=orm.name,
            message_count=orm.message_count or 0,
            created_at=_as_utc(orm.created_at),
        )

    def _message_orm_to_model(self, orm: ChatMessageORM) -> ChatMessage:
        """Convert message ORM object to Pydantic model."""
        return ChatMessage(
            id=orm.id,
            session_id=orm.session_id,
            role=MessageRole(orm.role),
            content=orm.content,
            created_at=_as_utc(orm.created_at),
            status=MessageStatus.PERSISTED,
        )

    async def _publish(self, event_type: ChangeEventType, record: ChatSession) -> None:
        if self._change_feed is None:
            return
        await self._change_feed.publish(
            record.user_id,
            ChangeEvent(event_type=event_type, record=record),
        )

    async def create_session(self, user_id: str) -> ChatSession:
        """Create an empty chat session."""
        try:
            async with self._session_factory() as session:
                orm = ChatSessionORM(user_id=user_id, message_count=0)
                session.add(orm)
                await session.commit()
                await session.refresh(orm)
                created = self._session_orm_to_model(orm)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to create chat session", details=str(e)) from e

        await self._publish(ChangeEventType.INSERT, created)
        return created

    async def get_session(self, session_id: str, user_id: str) -> ChatSession:
        """Get a chat session owned by the user."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ChatSessionORM).where(
                        and_(
                            ChatSessionORM.session_id == session_id,
                            ChatSessionORM.user_id == user_id,
                        )
                    )
                )
                orm = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to fetch chat session", details=str(e)) from e

        if not orm:
            raise NotFoundError(f"Chat session {session_id} not found")
        return self._session_orm_to_model(orm)

    async def list_sessions(self, user_id: str) -> list[ChatSession]:
        """List chat sessions for a user."""
        try:
            async with self._session_factory() as session:
                query = (
                    select(ChatSessionORM)
                    .where(ChatSessionORM.user_id == user_id)
                    .order_by(ChatSessionORM.created_at.desc())
                )
                result = await session.execute(query)
                return [self._session_orm_to_model(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to list chat sessions", details=str(e)) from e

    async def list_messages(self, session_id: str) -> list[ChatMessage]:
        """List messages for a session."""
        try:
            async with self._session_factory() as session:
                query = (
                    select(ChatMessageORM)
                    .where(ChatMessageORM.session_id == session_id)
                    # rowid breaks ties between same-timestamp inserts
                    .order_by(ChatMessageORM.created_at.asc(), literal_column("chat_messages.rowid"))
                )
                result = await session.execute(query)
                return [self._message_orm_to_model(orm) for orm in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to list messages", details=str(e)) from e

    async def add_message(
        self,
        session_id: str,
        content: str,
        role: MessageRole,
    ) -> ChatMessage:
        """Add a message to a session."""
        try:
            async with self._session_factory() as session:
                message_orm = ChatMessageORM(
                    session_id=session_id,
                    role=MessageRole(role).value,
                    content=content or "",
                )
                session.add(message_orm)
                await session.commit()
                await session.refresh(message_orm)
                return self._message_orm_to_model(message_orm)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to add message", details=str(e)) from e

    async def _update_session(self, session_id: str, **values) -> ChatSession:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ChatSessionORM).where(ChatSessionORM.session_id == session_id)
                )
                orm = result.scalar_one_or_none()
                if not orm:
                    raise NotFoundError(f"Chat session {session_id} not found")
                for key, value in values.items():
                    setattr(orm, key, value)
                await session.commit()
                await session.refresh(orm)
                updated = self._session_orm_to_model(orm)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to update chat session", details=str(e)) from e

        await self._publish(ChangeEventType.UPDATE, updated)
        return updated

    async def update_message_count(self, session_id: str, count: int) -> ChatSession:
        """Set the session's message count."""
        return await self._update_session(session_id, message_count=count)

    async def rename_session(self, session_id: str, name: str) -> ChatSession:
        """Set the session's display name."""
        return await self._update_session(session_id, name=name)

    async def delete_session(self, session_id: str, user_id: str) -> None:
        """Delete a chat session and its messages."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ChatSessionORM).where(
                        and_(
                            ChatSessionORM.session_id == session_id,
                            ChatSessionORM.user_id == user_id,
                        )
                    )
                )
                orm = result.scalar_one_or_none()
                if not orm:
                    raise NotFoundError(f"Chat session {session_id} not found")
                old = self._session_orm_to_model(orm)

                await session.execute(
                    delete(ChatMessageORM).where(ChatMessageORM.session_id == session_id)
                )
                await session.delete(orm)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to delete chat session", details=str(e)) from e

        logger.info(f"Deleted chat session {session_id}")
        await self._publish(ChangeEventType.DELETE, old)
