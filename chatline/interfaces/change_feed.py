"""
Realtime change feed interface.

The change feed pushes insert/update/delete events for a user's chat
sessions. Subscriptions are explicit: consumers iterate the stream and
call ``unsubscribe()`` on teardown.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from chatline.models.realtime import ChangeEvent


class ChangeSubscription(ABC):
    """A cancellable, unbounded stream of change events."""

    @abstractmethod
    def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        pass

    @abstractmethod
    async def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        """
        Wait for the next event.

        Returns None once unsubscribed. Raises asyncio.TimeoutError if
        timeout elapses first.
        """
        pass

    @abstractmethod
    async def unsubscribe(self) -> None:
        """Stop delivery. Iteration ends after pending events are drained."""
        pass


class IChangeFeed(ABC):
    """Abstract interface for the realtime change channel."""

    @abstractmethod
    async def subscribe(self, user_id: str) -> ChangeSubscription:
        """Subscribe to change events for sessions owned by user_id."""
        pass

    @abstractmethod
    async def publish(self, user_id: str, event: ChangeEvent) -> None:
        """Deliver an event to every subscription for user_id."""
        pass
