"""
Deduplicated, ordered list of a user's chat sessions.

Three sources feed the list: the initial bulk fetch, local create/delete
actions, and events pushed on the realtime channel. Every mutation is keyed
by session ID and idempotent, so pushed events may arrive at any time
relative to in-flight local operations.

Per-entry state machine: absent -> present -> deleting -> absent.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Optional

from chatline.core.exceptions import NotFoundError
from chatline.core.logger import logger
from chatline.interfaces.change_feed import ChangeSubscription, IChangeFeed
from chatline.interfaces.chat_session_repository import IChatSessionRepository
from chatline.models.chat_session import ChatSession
from chatline.models.enums import ChangeEventType
from chatline.models.realtime import ChangeEvent
from chatline.services.toast_service import ToastCenter


class ChatListStore:
    """Chat list for one mounted list view."""

    def __init__(
        self,
        repository: IChatSessionRepository,
        user_id: str,
        notices: Optional[ToastCenter] = None,
    ) -> None:
        self._repo = repository
        self.user_id = user_id
        self.notices = notices or ToastCenter()
        self._sessions: list[ChatSession] = []
        self._deleting: set[str] = set()
        self._subscription: Optional[ChangeSubscription] = None
        self._consumer: Optional[asyncio.Task] = None
        self._mounted = True
        self.is_loading = False
        self.is_creating = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def sessions(self) -> list[ChatSession]:
        return list(self._sessions)

    @property
    def mounted(self) -> bool:
        return self._mounted

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return self._index_of(session_id) is not None

    def get(self, session_id: str) -> Optional[ChatSession]:
        index = self._index_of(session_id)
        return self._sessions[index] if index is not None else None

    def is_deleting(self, session_id: str) -> bool:
        return session_id in self._deleting

    def _index_of(self, session_id: object) -> Optional[int]:
        for i, s in enumerate(self._sessions):
            if s.session_id == session_id:
                return i
        return None

    # ------------------------------------------------------------------
    # Merge operations
    # ------------------------------------------------------------------

    def load(self, sessions: list[ChatSession]) -> None:
        """Replace the list wholesale, keeping fetch order."""
        self._sessions = list(sessions)
        self._deleting &= {s.session_id for s in self._sessions}

    def _insert_if_absent(self, session: ChatSession) -> bool:
        if self._index_of(session.session_id) is not None:
            return False
        # New sessions are the newest, so this is normally a prepend
        position = 0
        while (
            position < len(self._sessions)
            and self._sessions[position].created_at > session.created_at
        ):
            position += 1
        self._sessions.insert(position, session)
        return True

    def apply_pushed_insert(self, session: ChatSession) -> bool:
        """Add a pushed session unless it is already listed."""
        return self._insert_if_absent(session)

    def apply_pushed_update(self, session: ChatSession) -> bool:
        """Replace the listed session in place; ignore unknown IDs."""
        index = self._index_of(session.session_id)
        if index is None:
            return False
        self._sessions[index] = session
        return True

    def apply_pushed_delete(self, session_id: str) -> bool:
        """Remove the session; ignore if already absent."""
        self._deleting.discard(session_id)
        index = self._index_of(session_id)
        if index is None:
            return False
        del self._sessions[index]
        return True

    def apply_event(self, event: ChangeEvent) -> bool:
        if event.record.user_id != self.user_id:
            return False
        if event.event_type == ChangeEventType.INSERT:
            return self.apply_pushed_insert(event.record)
        if event.event_type == ChangeEventType.UPDATE:
            return self.apply_pushed_update(event.record)
        return self.apply_pushed_delete(event.record.session_id)

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Initial bulk fetch. A failed fetch leaves an empty list."""
        self.is_loading = True
        try:
            sessions = await self._repo.list_sessions(self.user_id)
        except Exception as e:
            logger.warning(f"Failed to fetch chats for {self.user_id}: {e}")
            sessions = []
        finally:
            self.is_loading = False
        if self._mounted:
            self.load(sessions)

    async def create_local(self) -> Optional[ChatSession]:
        """
        Create a session and list it once the backend confirms it.

        Only one create may be in flight; extra calls return None. The
        confirmed record is inserted by ID, so a pushed insert for the same
        session (before or after) does not duplicate it.
        """
        if self.is_creating:
            return None
        self.is_creating = True
        try:
            session = await self._repo.create_session(self.user_id)
        except Exception as e:
            logger.warning(f"Error creating chat: {e}")
            if self._mounted:
                self.notices.show_error("Failed to create chat. Please try again.")
            return None
        finally:
            self.is_creating = False

        if self._mounted:
            self._insert_if_absent(session)
        return session

    async def remove_local(self, session_id: str) -> None:
        """
        Delete a session on user request.

        The entry is marked deleting and removed on confirmation or on a
        matching pushed delete, whichever lands first.
        """
        if self._index_of(session_id) is None or session_id in self._deleting:
            return

        self._deleting.add(session_id)
        try:
            await self._repo.delete_session(session_id, self.user_id)
        except NotFoundError:
            # Already gone on the backend
            logger.info(f"Chat {session_id} already deleted")
        except Exception as e:
            logger.warning(f"Error deleting chat {session_id}: {e}")
            self._deleting.discard(session_id)
            if self._mounted:
                self.notices.show_error("Failed to delete chat. Please try again.")
            return

        if self._mounted:
            self.apply_pushed_delete(session_id)

    async def rename_local(self, session_id: str, name: str) -> Optional[ChatSession]:
        name = name.strip()
        if not name or self._index_of(session_id) is None:
            return None
        try:
            updated = await self._repo.rename_session(session_id, name)
        except Exception as e:
            logger.warning(f"Error renaming chat {session_id}: {e}")
            if self._mounted:
                self.notices.show_error("Failed to rename chat. Please try again.")
            return None
        if self._mounted:
            self.apply_pushed_update(updated)
        return updated

    # ------------------------------------------------------------------
    # Push channel lifecycle
    # ------------------------------------------------------------------

    async def attach(self, feed: IChangeFeed) -> None:
        """Subscribe to pushed changes for this user."""
        if self._subscription is not None or not self._mounted:
            return
        self._subscription = await feed.subscribe(self.user_id)
        self._consumer = asyncio.create_task(self._consume(self._subscription))

    async def _consume(self, subscription: ChangeSubscription) -> None:
        try:
            async for event in subscription:
                if not self._mounted:
                    break
                self.apply_event(event)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Realtime consumer for {self.user_id} stopped: {e}")

    async def close(self) -> None:
        """Tear down: stop consuming and drop late results."""
        self._mounted = False
        if self._subscription is not None:
            await self._subscription.unsubscribe()
            self._subscription = None
        if self._consumer is not None:
            self._consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._consumer
            self._consumer = None
