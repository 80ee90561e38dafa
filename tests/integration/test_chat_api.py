"""
Integration tests for the chat HTTP API.

Runs the FastAPI app against an in-memory repository and a fake LLM via
dependency overrides.
"""

import asyncio
import json

import httpx
import pytest

from chatline.api.deps import get_change_feed, get_chat_session_repository, get_llm_provider
from chatline.core.config import get_settings
from chatline.infrastructure.local.chat_session_repository import SqliteChatSessionRepository
from chatline.main import create_app
from chatline.services.realtime_service import RealtimeManager


@pytest.fixture
def feed():
    return RealtimeManager()


@pytest.fixture
def repo(session_factory, feed):
    return SqliteChatSessionRepository(session_factory=session_factory, change_feed=feed)


@pytest.fixture
def app(repo, feed, fake_llm):
    app = create_app()
    app.dependency_overrides[get_chat_session_repository] = lambda: repo
    app.dependency_overrides[get_change_feed] = lambda: feed
    app.dependency_overrides[get_llm_provider] = lambda: fake_llm
    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def _sse_payloads(body: str) -> list[str]:
    return [line[len("data: "):] for line in body.splitlines() if line.startswith("data: ")]


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_chat_lifecycle(client):
    created = (await client.post("/api/chats")).json()
    chat_id = created["session_id"]
    assert created["message_count"] == 0

    listed = (await client.get("/api/chats")).json()
    assert [c["session_id"] for c in listed] == [chat_id]

    sent = await client.post(f"/api/chats/{chat_id}/messages", json={"content": "hello"})
    assert sent.status_code == 200
    body = sent.json()
    assert body["user_message"]["content"] == "hello"
    assert body["assistant_message"]["content"] == "hi there"

    messages = (await client.get(f"/api/chats/{chat_id}/messages")).json()
    assert [m["role"] for m in messages] == ["user", "assistant"]
    chat = (await client.get(f"/api/chats/{chat_id}")).json()
    assert chat["message_count"] == 2
    assert chat["name"] == "Greeting Chat"

    renamed = await client.patch(f"/api/chats/{chat_id}", json={"name": "Greetings"})
    assert renamed.json()["name"] == "Greetings"

    assert (await client.delete(f"/api/chats/{chat_id}")).status_code == 204
    assert (await client.get(f"/api/chats/{chat_id}")).status_code == 404
    assert (await client.delete(f"/api/chats/{chat_id}")).status_code == 404


@pytest.mark.asyncio
async def test_reply_failure_keeps_user_message(client, fake_llm):
    fake_llm.fail = True
    chat_id = (await client.post("/api/chats")).json()["session_id"]

    body = (await client.post(f"/api/chats/{chat_id}/messages", json={"content": "hello"})).json()

    assert body["assistant_message"] is None
    messages = (await client.get(f"/api/chats/{chat_id}/messages")).json()
    assert [m["content"] for m in messages] == ["hello"]


@pytest.mark.asyncio
async def test_follow_up_message_counts_whole_history(client, fake_llm):
    chat_id = (await client.post("/api/chats")).json()["session_id"]
    await client.post(f"/api/chats/{chat_id}/messages", json={"content": "hello"})

    await client.post(f"/api/chats/{chat_id}/messages", json={"content": "and again"})

    chat = (await client.get(f"/api/chats/{chat_id}")).json()
    assert chat["message_count"] == 4
    assert len(fake_llm.title_prompts) == 1
    assert fake_llm.histories[-1] == [("user", "hello"), ("assistant", "hi there")]


@pytest.mark.asyncio
async def test_blank_message_is_rejected(client):
    chat_id = (await client.post("/api/chats")).json()["session_id"]
    response = await client.post(f"/api/chats/{chat_id}/messages", json={"content": "   "})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_blank_rename_is_rejected(client):
    chat_id = (await client.post("/api/chats")).json()["session_id"]

    response = await client.patch(f"/api/chats/{chat_id}", json={"name": "   "})

    assert response.status_code == 422
    assert (await client.get(f"/api/chats/{chat_id}")).json()["name"] is None


@pytest.mark.asyncio
async def test_rename_strips_whitespace(client):
    chat_id = (await client.post("/api/chats")).json()["session_id"]
    renamed = await client.patch(f"/api/chats/{chat_id}", json={"name": "  Trip plans  "})
    assert renamed.json()["name"] == "Trip plans"


@pytest.mark.asyncio
async def test_unknown_chat_is_404(client):
    response = await client.post("/api/chats/missing/messages", json={"content": "hello"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stream_ai(client):
    response = await client.post("/api/ai", json={"prompt": "hello"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    payloads = _sse_payloads(response.text)
    assert [json.loads(p)["chunk"] for p in payloads[:-1]] == ["hi", "there"]
    assert payloads[-1] == "[DONE]"


@pytest.mark.asyncio
async def test_stream_ai_error_event(client, fake_llm):
    fake_llm.fail = True
    response = await client.post("/api/ai", json={"prompt": "hello"})
    assert _sse_payloads(response.text) == [json.dumps({"error": "Streaming error"})]


@pytest.mark.asyncio
async def test_stream_ai_requires_prompt(client):
    response = await client.post("/api/ai", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_chat_name(client):
    response = await client.post("/api/chat-name", json={"firstMessage": "plan my trip"})
    assert response.json() == {"chatName": "Greeting Chat"}


@pytest.mark.asyncio
async def test_chat_name_fallback(client, fake_llm):
    fake_llm.fail_title = True
    response = await client.post("/api/chat-name", json={"firstMessage": "plan my trip"})
    assert response.json() == {"chatName": "New Chat"}


@pytest.mark.asyncio
async def test_chat_name_requires_first_message(client):
    response = await client.post("/api/chat-name", json={})
    assert response.status_code == 400


async def _wait_for_subscriber(feed, user_id):
    while feed.subscriber_count(user_id) == 0:
        await asyncio.sleep(0.01)


@pytest.mark.asyncio
async def test_realtime_stream_delivers_own_changes(client, repo, feed, monkeypatch):
    monkeypatch.setattr(get_settings(), "REALTIME_KEEPALIVE_SECONDS", 0.05)
    user_id = get_settings().DEFAULT_USER_ID

    request = asyncio.create_task(client.get("/api/realtime/stream"))
    await asyncio.wait_for(_wait_for_subscriber(feed, user_id), timeout=2)

    mine = await repo.create_session(user_id)
    await repo.create_session("someone_else")
    await repo.delete_session(mine.session_id, user_id)
    await asyncio.sleep(0.2)
    await feed.close_all()

    response = await asyncio.wait_for(request, timeout=2)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    payloads = _sse_payloads(response.text)
    assert json.loads(payloads[0]) == {"type": "connected"}
    events = [json.loads(p) for p in payloads[1:]]
    assert [(e["event_type"], e["record"]["session_id"]) for e in events] == [
        ("insert", mine.session_id),
        ("delete", mine.session_id),
    ]
    assert all(e["record"]["user_id"] == user_id for e in events)
    assert ": keep-alive" in response.text.splitlines()
    assert feed.subscriber_count(user_id) == 0
