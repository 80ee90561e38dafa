"""
Shared fixtures.

Settings are pinned to a test environment before any chatline module reads
them, and every repository test gets its own in-memory SQLite database.
"""

import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GOOGLE_API_KEY"] = ""
os.environ["AUTH_ENABLED"] = "false"

from typing import AsyncIterator, Optional

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chatline.core.config import get_settings
from chatline.core.exceptions import LLMError
from chatline.infrastructure.local.database import Base, _enable_sqlite_foreign_keys
from chatline.interfaces.llm_provider import History, ILLMProvider

get_settings.cache_clear()


class FakeLLMProvider(ILLMProvider):
    """Scripted provider recording every prompt it receives."""

    def __init__(self, reply: str = "hi there", title: str = "Greeting Chat", fail: bool = False):
        self.reply = reply
        self.title = title
        self.fail = fail
        self.fail_title = False
        self.prompts: list[str] = []
        self.histories: list[Optional[History]] = []
        self.title_prompts: list[str] = []

    def get_model_name(self) -> str:
        return "Fake"

    async def generate(self, prompt: str, history: Optional[History] = None) -> str:
        self.prompts.append(prompt)
        self.histories.append(history)
        if self.fail:
            raise LLMError("generation failed")
        return self.reply

    async def stream(self, prompt: str, history: Optional[History] = None) -> AsyncIterator[str]:
        self.prompts.append(prompt)
        if self.fail:
            raise LLMError("generation failed")
        for word in self.reply.split(" "):
            yield word

    async def generate_title(self, prompt: str) -> str:
        self.title_prompts.append(prompt)
        if self.fail_title:
            raise LLMError("title failed")
        return self.title


@pytest.fixture
def fake_llm():
    return FakeLLMProvider()


@pytest.fixture
async def session_factory():
    """Session factory over a fresh in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()
