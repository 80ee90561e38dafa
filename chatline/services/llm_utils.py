"""
Shared LLM invocation utilities for replies and chat titles.
"""

from __future__ import annotations

import re
from typing import AsyncIterator, Optional

from chatline.core.config import Settings, get_settings
from chatline.core.logger import logger
from chatline.interfaces.llm_provider import History, ILLMProvider

MAX_CHAT_NAME_LENGTH = 50
MIN_CHAT_NAME_LENGTH = 3

_QUOTES = re.compile(r"['\"]")


def compose_prompt(prompt: str, settings: Optional[Settings] = None) -> str:
    """Prefix the user's prompt with the configured system prompt."""
    settings = settings or get_settings()
    return f"{settings.SYSTEM_PROMPT}\n\nUser: {prompt}"


def compose_chat_name_prompt(first_message: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    return f'{settings.CHAT_NAME_SYSTEM_PROMPT}\n\nUser\'s first message: "{first_message}"'


def normalize_chat_name(raw: Optional[str], default: str) -> str:
    """
    Clean up a generated title.

    Quotes are stripped, names over 50 characters are cut to 47 plus an
    ellipsis, and anything shorter than 3 characters becomes the default.
    """
    name = _QUOTES.sub("", (raw or "").strip()).strip()
    if len(name) > MAX_CHAT_NAME_LENGTH:
        name = name[: MAX_CHAT_NAME_LENGTH - 3] + "..."
    if len(name) < MIN_CHAT_NAME_LENGTH:
        name = default
    return name


async def generate_reply(
    llm_provider: ILLMProvider,
    prompt: str,
    history: Optional[History] = None,
    settings: Optional[Settings] = None,
) -> str:
    """
    Generate a complete assistant reply.

    Raises:
        LLMError: If the provider call fails
    """
    return await llm_provider.generate(compose_prompt(prompt, settings), history=history)


async def stream_reply(
    llm_provider: ILLMProvider,
    prompt: str,
    settings: Optional[Settings] = None,
) -> AsyncIterator[str]:
    """Stream an assistant reply chunk by chunk."""
    async for chunk in llm_provider.stream(compose_prompt(prompt, settings)):
        yield chunk


async def generate_chat_name(
    llm_provider: ILLMProvider,
    first_message: str,
    settings: Optional[Settings] = None,
) -> str:
    """
    Generate a short chat title from the first user message.

    Never raises: any failure falls back to DEFAULT_CHAT_TITLE.
    """
    settings = settings or get_settings()
    try:
        raw = await llm_provider.generate_title(compose_chat_name_prompt(first_message, settings))
    except Exception as exc:
        logger.warning(f"Chat name generation failed: {exc}")
        return settings.DEFAULT_CHAT_TITLE
    return normalize_chat_name(raw, settings.DEFAULT_CHAT_TITLE)
