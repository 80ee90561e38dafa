"""
LiteLLM provider implementation.

Supports Bedrock, OpenAI, and other providers via LiteLLM.
Includes support for custom endpoints (api_base) for proxy servers.
"""

import os
from typing import Any, AsyncIterator, Optional

import litellm

from chatline.core.config import get_settings
from chatline.core.exceptions import LLMError
from chatline.interfaces.llm_provider import History, ILLMProvider


class LiteLLMProvider(ILLMProvider):
    """LiteLLM provider with custom endpoint support."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
        title_model_name: Optional[str] = None,
    ):
        """
        Initialize LiteLLM provider.

        Args:
            model_name: LiteLLM model identifier (e.g., "openai/gpt-4o-mini")
            api_base: Custom API endpoint URL (optional, for proxy servers)
                     Note: Do NOT include /v1 suffix - LiteLLM adds it automatically
            api_key: Custom API key (optional, overrides default)
            title_model_name: Model used for chat titles (defaults to model_name)
        """
        self._model_name = model_name
        self._settings = get_settings()
        self._api_base = api_base or self._settings.LITELLM_API_BASE or None
        self._api_key = api_key or self._settings.LITELLM_API_KEY or None
        self._title_model_name = (
            title_model_name or self._settings.LITELLM_TITLE_MODEL or model_name
        )

        # Enable debug logging if DEBUG is set
        if self._settings.DEBUG:
            os.environ["LITELLM_LOG"] = "DEBUG"

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"LiteLLM ({self._model_name})"

    def _kwargs(self, model: str, messages: list[dict[str, str]]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": self._settings.MAX_OUTPUT_TOKENS,
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key
        return kwargs

    @staticmethod
    def _messages(prompt: str, history: Optional[History]) -> list[dict[str, str]]:
        messages = [{"role": role, "content": text} for role, text in (history or [])]
        messages.append({"role": "user", "content": prompt})
        return messages

    async def generate(self, prompt: str, history: Optional[History] = None) -> str:
        try:
            response = await litellm.acompletion(
                **self._kwargs(self._model_name, self._messages(prompt, history))
            )
        except Exception as e:
            raise LLMError(f"LiteLLM request failed: {e}") from e
        content = response.choices[0].message.content
        return (content or "").strip()

    async def stream(self, prompt: str, history: Optional[History] = None) -> AsyncIterator[str]:
        try:
            response = await litellm.acompletion(
                stream=True,
                **self._kwargs(self._model_name, self._messages(prompt, history)),
            )
            async for chunk in response:
                delta = chunk.choices[0].delta.content if chunk.choices else None
                if delta:
                    yield delta
        except Exception as e:
            raise LLMError(f"LiteLLM streaming failed: {e}") from e

    async def generate_title(self, prompt: str) -> str:
        try:
            response = await litellm.acompletion(
                **self._kwargs(self._title_model_name, self._messages(prompt, None))
            )
        except Exception as e:
            raise LLMError(f"LiteLLM title request failed: {e}") from e
        return response.choices[0].message.content or ""
