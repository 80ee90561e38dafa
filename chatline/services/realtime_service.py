"""
In-process realtime change feed.

Each subscription owns an asyncio queue; publishing fans an event out to
every queue registered for the owning user.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Optional

from chatline.interfaces.change_feed import ChangeSubscription, IChangeFeed
from chatline.models.realtime import ChangeEvent

# Marks the end of a subscription's stream
_CLOSED = object()


class QueueSubscription(ChangeSubscription):
    """Subscription backed by an asyncio queue."""

    def __init__(self, manager: "RealtimeManager", user_id: str) -> None:
        self._manager = manager
        self.user_id = user_id
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _deliver(self, item) -> None:
        self._queue.put_nowait(item)

    async def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        if self._closed and self._queue.empty():
            return None
        item = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        if item is _CLOSED:
            return None
        return item

    async def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        while True:
            event = await self.get()
            if event is None:
                return
            yield event

    async def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._manager.disconnect(self)
        self._queue.put_nowait(_CLOSED)


class RealtimeManager(IChangeFeed):
    def __init__(self) -> None:
        self._connections: dict[str, set[QueueSubscription]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, user_id: str) -> QueueSubscription:
        subscription = QueueSubscription(self, user_id)
        async with self._lock:
            self._connections.setdefault(user_id, set()).add(subscription)
        return subscription

    async def disconnect(self, subscription: QueueSubscription) -> None:
        async with self._lock:
            subscriptions = self._connections.get(subscription.user_id)
            if not subscriptions:
                return
            subscriptions.discard(subscription)
            if not subscriptions:
                self._connections.pop(subscription.user_id, None)

    async def publish(self, user_id: str, event: ChangeEvent) -> None:
        async with self._lock:
            subscriptions = list(self._connections.get(user_id, set()))
        for subscription in subscriptions:
            subscription._deliver(event)

    async def close_all(self) -> None:
        """End every open subscription, e.g. on shutdown."""
        async with self._lock:
            subscriptions = [s for subs in self._connections.values() for s in subs]
        for subscription in subscriptions:
            await subscription.unsubscribe()

    def subscriber_count(self, user_id: str) -> int:
        return len(self._connections.get(user_id, ()))


realtime_manager = RealtimeManager()
