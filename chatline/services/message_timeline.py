"""
Ordered message list for one open chat session.

Entries are only ever appended at the tail. A locally submitted message is
appended immediately under a transient ID and later swapped in place for
its persisted record, or removed if persistence failed. All lookups are
keyed by ID, never by position, so interleaved appends from several
producers cannot misplace a reconciliation.
"""

from __future__ import annotations

import itertools
import time
from typing import Iterator, Optional

from chatline.core.logger import logger
from chatline.models.chat_session import TRANSIENT_ID_PREFIX, ChatMessage, utc_now
from chatline.models.enums import MessageRole, MessageStatus


class MessageTimeline:
    """Append-only view of a chat's messages with optimistic entries."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self._entries: list[ChatMessage] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(list(self._entries))

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._entries)

    def _index_of(self, message_id: str) -> Optional[int]:
        for i, entry in enumerate(self._entries):
            if entry.id == message_id:
                return i
        return None

    def get(self, message_id: str) -> Optional[ChatMessage]:
        index = self._index_of(message_id)
        return self._entries[index] if index is not None else None

    def _new_transient_id(self) -> str:
        # Millisecond clock plus a counter: unique even for same-ms appends
        return f"{TRANSIENT_ID_PREFIX}{int(time.time() * 1000)}-{next(self._seq)}"

    def load(self, messages: list[ChatMessage]) -> None:
        """Replace the timeline with persisted history (oldest first)."""
        self._entries = [
            m.model_copy(update={"status": MessageStatus.PERSISTED}) for m in messages
        ]

    def append_optimistic(self, content: str, role: MessageRole) -> str:
        """Append a pending entry at the tail and return its transient ID."""
        transient_id = self._new_transient_id()
        self._entries.append(
            ChatMessage(
                id=transient_id,
                session_id=self.session_id,
                role=role,
                content=content,
                created_at=utc_now(),
                status=MessageStatus.PENDING,
            )
        )
        return transient_id

    def reconcile(self, transient_id: str, message: ChatMessage) -> None:
        """Swap the pending entry for its persisted record, keeping its position."""
        index = self._index_of(transient_id)
        if index is None:
            logger.info(f"Reconcile skipped: {transient_id} no longer in timeline {self.session_id}")
            return
        self._entries[index] = message.model_copy(update={"status": MessageStatus.PERSISTED})

    def rollback(self, transient_id: str) -> None:
        """Remove the pending entry whose persistence failed."""
        index = self._index_of(transient_id)
        if index is None:
            logger.info(f"Rollback skipped: {transient_id} no longer in timeline {self.session_id}")
            return
        del self._entries[index]

    def append_authoritative(self, message: ChatMessage) -> None:
        """Append an already-persisted message at the tail."""
        self._entries.append(message.model_copy(update={"status": MessageStatus.PERSISTED}))

    def has_pending(self) -> bool:
        return any(e.status == MessageStatus.PENDING for e in self._entries)

    def history(self) -> list[tuple[str, str]]:
        """(role, content) pairs of persisted entries, for LLM context."""
        return [
            (e.role.value, e.content)
            for e in self._entries
            if e.status == MessageStatus.PERSISTED
        ]
