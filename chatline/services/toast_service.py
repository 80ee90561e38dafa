"""
User-visible notices (toasts).

Keeps a short list of dismissible notices. When a new notice would exceed
the cap, everything is cleared and only the new notice is kept. Notices
expire after a fixed lifetime.
"""

from __future__ import annotations

import time
from typing import Callable, Optional
from uuid import uuid4

from chatline.core.config import get_settings
from chatline.models.enums import NoticeType
from chatline.models.notification import Notice


class ToastCenter:
    """In-memory notice queue for one view."""

    def __init__(
        self,
        max_messages: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        settings = get_settings()
        self.max_messages = max_messages or settings.TOAST_MAX_MESSAGES
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.TOAST_TTL_SECONDS
        self._clock = clock
        self._notices: list[Notice] = []

    def _generate_id(self, now: float) -> str:
        return f"toast-{int(now * 1000)}-{uuid4().hex[:9]}"

    @property
    def notices(self) -> list[Notice]:
        """Active (non-expired) notices, oldest first."""
        now = self._clock()
        self._notices = [n for n in self._notices if now - n.timestamp < self.ttl_seconds]
        return list(self._notices)

    def show(self, notice_type: NoticeType, message: str) -> Notice:
        now = self._clock()
        notice = Notice(id=self._generate_id(now), type=notice_type, message=message, timestamp=now)
        updated = self.notices + [notice]
        if len(updated) > self.max_messages:
            updated = [notice]
        self._notices = updated
        return notice

    def show_error(self, message: str) -> Notice:
        return self.show(NoticeType.ERROR, message)

    def show_warning(self, message: str) -> Notice:
        return self.show(NoticeType.WARNING, message)

    def show_success(self, message: str) -> Notice:
        return self.show(NoticeType.SUCCESS, message)

    def show_info(self, message: str) -> Notice:
        return self.show(NoticeType.INFO, message)

    def dismiss(self, notice_id: str) -> None:
        self._notices = [n for n in self._notices if n.id != notice_id]

    def clear_all(self) -> None:
        self._notices = []
