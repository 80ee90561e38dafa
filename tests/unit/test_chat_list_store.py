"""
Unit tests for ChatListStore.

Uses a mock repository and the in-process RealtimeManager as push channel.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from chatline.core.exceptions import NotFoundError, PersistenceError
from chatline.models.chat_session import ChatSession
from chatline.models.enums import ChangeEventType, NoticeType
from chatline.models.realtime import ChangeEvent
from chatline.services.chat_list_store import ChatListStore
from chatline.services.realtime_service import RealtimeManager

USER_ID = "user_A"
BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _session(session_id: str, minutes: int = 0, **kwargs) -> ChatSession:
    return ChatSession(
        session_id=session_id,
        user_id=kwargs.pop("user_id", USER_ID),
        created_at=BASE_TIME + timedelta(minutes=minutes),
        **kwargs,
    )


async def _drain() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def repo():
    return AsyncMock()


@pytest.fixture
def store(repo):
    return ChatListStore(repo, USER_ID)


class TestLoad:
    def test_keeps_fetch_order(self, store):
        store.load([_session("s3", 3), _session("s2", 2), _session("s1", 1)])
        assert [s.session_id for s in store.sessions] == ["s3", "s2", "s1"]

    @pytest.mark.asyncio
    async def test_refresh_fetches_sessions(self, store, repo):
        repo.list_sessions.return_value = [_session("s2", 2), _session("s1", 1)]

        await store.refresh()

        repo.list_sessions.assert_awaited_once_with(USER_ID)
        assert len(store) == 2
        assert store.is_loading is False

    @pytest.mark.asyncio
    async def test_refresh_failure_shows_empty_list_silently(self, store, repo):
        store.load([_session("old")])
        repo.list_sessions.side_effect = PersistenceError("down")

        await store.refresh()

        assert len(store) == 0
        assert store.notices.notices == []


class TestPushedEvents:
    def test_insert_prepends(self, store):
        store.load([_session("s1", 1)])
        store.apply_pushed_insert(_session("s2", 2))
        assert [s.session_id for s in store.sessions] == ["s2", "s1"]

    def test_insert_of_present_identity_is_noop(self, store):
        store.load([_session("s1", 1)])
        applied = store.apply_pushed_insert(_session("s1", 1, name="renamed"))
        assert applied is False
        assert len(store) == 1
        assert store.get("s1").name is None

    def test_update_replaces_in_place(self, store):
        store.load([_session("s3", 3), _session("s2", 2), _session("s1", 1)])
        store.apply_pushed_update(_session("s2", 2, message_count=4, name="Trip"))
        assert [s.session_id for s in store.sessions] == ["s3", "s2", "s1"]
        assert store.get("s2").message_count == 4
        assert store.get("s2").name == "Trip"

    def test_update_for_unknown_identity_is_noop(self, store):
        store.load([_session("s1", 1)])
        assert store.apply_pushed_update(_session("gone", 5)) is False
        assert "gone" not in store

    def test_delete_twice_equals_once(self, store):
        store.load([_session("s2", 2), _session("s1", 1)])

        store.apply_pushed_delete("s2")
        once = store.sessions
        store.apply_pushed_delete("s2")

        assert store.sessions == once
        assert [s.session_id for s in once] == ["s1"]

    def test_apply_event_dispatches(self, store):
        store.apply_event(ChangeEvent(event_type=ChangeEventType.INSERT, record=_session("s1", 1)))
        store.apply_event(
            ChangeEvent(event_type=ChangeEventType.UPDATE, record=_session("s1", 1, message_count=2))
        )
        assert store.get("s1").message_count == 2

        store.apply_event(ChangeEvent(event_type=ChangeEventType.DELETE, record=_session("s1", 1)))
        assert len(store) == 0

    def test_events_for_other_users_are_ignored(self, store):
        event = ChangeEvent(
            event_type=ChangeEventType.INSERT,
            record=_session("x", 1, user_id="someone_else"),
        )
        assert store.apply_event(event) is False
        assert len(store) == 0


class TestCreateLocal:
    @pytest.mark.asyncio
    async def test_create_lists_confirmed_session(self, store, repo):
        repo.create_session.return_value = _session("s1", 1)

        created = await store.create_local()

        assert created.session_id == "s1"
        assert [s.session_id for s in store.sessions] == ["s1"]

    @pytest.mark.asyncio
    async def test_push_before_confirmation_does_not_duplicate(self, store, repo):
        s1 = _session("s1", 1)

        async def create_and_push(user_id):
            store.apply_pushed_insert(s1)
            return s1

        repo.create_session.side_effect = create_and_push

        await store.create_local()
        store.apply_pushed_insert(s1)

        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_failure_records_notice(self, store, repo):
        repo.create_session.side_effect = PersistenceError("insert failed")

        assert await store.create_local() is None

        assert len(store) == 0
        assert store.is_creating is False
        [notice] = store.notices.notices
        assert notice.type == NoticeType.ERROR

    @pytest.mark.asyncio
    async def test_only_one_create_in_flight(self, store, repo):
        release = asyncio.Event()

        async def slow_create(user_id):
            await release.wait()
            return _session("s1", 1)

        repo.create_session.side_effect = slow_create

        first = asyncio.create_task(store.create_local())
        await _drain()
        assert await store.create_local() is None

        release.set()
        assert (await first).session_id == "s1"
        repo.create_session.assert_awaited_once()


class TestRemoveLocal:
    @pytest.mark.asyncio
    async def test_marks_deleting_until_confirmed(self, store, repo):
        store.load([_session("s1", 1)])
        release = asyncio.Event()

        async def slow_delete(session_id, user_id):
            await release.wait()

        repo.delete_session.side_effect = slow_delete

        task = asyncio.create_task(store.remove_local("s1"))
        await _drain()
        assert store.is_deleting("s1")
        assert "s1" in store

        release.set()
        await task
        assert "s1" not in store
        assert not store.is_deleting("s1")

    @pytest.mark.asyncio
    async def test_pushed_delete_while_deleting_then_late_confirmation(self, store, repo):
        store.load([_session("s2", 2), _session("s1", 1)])
        release = asyncio.Event()

        async def slow_delete(session_id, user_id):
            await release.wait()

        repo.delete_session.side_effect = slow_delete

        task = asyncio.create_task(store.remove_local("s2"))
        await _drain()
        store.apply_pushed_delete("s2")
        assert [s.session_id for s in store.sessions] == ["s1"]

        release.set()
        await task

        assert [s.session_id for s in store.sessions] == ["s1"]
        assert store.notices.notices == []

    @pytest.mark.asyncio
    async def test_failure_keeps_entry_and_notifies(self, store, repo):
        store.load([_session("s1", 1)])
        repo.delete_session.side_effect = PersistenceError("delete failed")

        await store.remove_local("s1")

        assert "s1" in store
        assert not store.is_deleting("s1")
        assert len(store.notices.notices) == 1

    @pytest.mark.asyncio
    async def test_backend_not_found_removes_entry(self, store, repo):
        store.load([_session("s1", 1)])
        repo.delete_session.side_effect = NotFoundError("gone")

        await store.remove_local("s1")

        assert "s1" not in store
        assert store.notices.notices == []

    @pytest.mark.asyncio
    async def test_absent_entry_is_ignored(self, store, repo):
        await store.remove_local("missing")
        repo.delete_session.assert_not_awaited()


class TestRenameLocal:
    @pytest.mark.asyncio
    async def test_applies_new_name(self, store, repo):
        store.load([_session("s1", 1)])
        repo.rename_session.return_value = _session("s1", 1, name="Plans")

        await store.rename_local("s1", "  Plans ")

        repo.rename_session.assert_awaited_once_with("s1", "Plans")
        assert store.get("s1").name == "Plans"

    @pytest.mark.asyncio
    async def test_blank_name_is_ignored(self, store, repo):
        store.load([_session("s1", 1)])
        assert await store.rename_local("s1", "   ") is None
        repo.rename_session.assert_not_awaited()


class TestPushChannel:
    @pytest.mark.asyncio
    async def test_attach_consumes_pushed_events(self, store):
        feed = RealtimeManager()
        await store.attach(feed)

        await feed.publish(USER_ID, ChangeEvent(event_type=ChangeEventType.INSERT, record=_session("s1", 1)))
        await feed.publish(USER_ID, ChangeEvent(event_type=ChangeEventType.INSERT, record=_session("s1", 1)))
        await _drain()

        assert [s.session_id for s in store.sessions] == ["s1"]
        await store.close()

    @pytest.mark.asyncio
    async def test_close_unsubscribes(self, store):
        feed = RealtimeManager()
        await store.attach(feed)
        assert feed.subscriber_count(USER_ID) == 1

        await store.close()

        assert feed.subscriber_count(USER_ID) == 0
        await feed.publish(USER_ID, ChangeEvent(event_type=ChangeEventType.INSERT, record=_session("s1", 1)))
        await _drain()
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_attach_after_close_does_not_subscribe(self, store):
        feed = RealtimeManager()
        await store.close()

        await store.attach(feed)

        assert feed.subscriber_count(USER_ID) == 0

    @pytest.mark.asyncio
    async def test_results_after_close_are_dropped(self, store, repo):
        release = asyncio.Event()

        async def slow_create(user_id):
            await release.wait()
            return _session("s1", 1)

        repo.create_session.side_effect = slow_create

        task = asyncio.create_task(store.create_local())
        await _drain()
        await store.close()
        release.set()
        await task

        assert len(store) == 0
