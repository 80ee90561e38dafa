"""
Gemini API provider.

Uses the Gemini API with an API Key (no GCP project required).
"""

from typing import AsyncIterator, Optional

from google import genai
from google.genai.types import Content, GenerateContentConfig, Part

from chatline.core.config import get_settings
from chatline.core.exceptions import LLMError
from chatline.interfaces.llm_provider import History, ILLMProvider


def _to_contents(prompt: str, history: Optional[History]) -> list[Content]:
    contents = [
        # Gemini calls the assistant role "model"
        Content(role="model" if role == "assistant" else "user", parts=[Part(text=text)])
        for role, text in (history or [])
    ]
    contents.append(Content(role="user", parts=[Part(text=prompt)]))
    return contents


class GeminiAPIProvider(ILLMProvider):
    """Gemini API provider using API Key."""

    def __init__(self, model_name: str, title_model_name: Optional[str] = None):
        """
        Initialize Gemini API provider.

        Args:
            model_name: Gemini model name for replies (e.g., "gemini-2.5-flash")
            title_model_name: Lighter model used for chat titles
        """
        self._model_name = model_name
        self._settings = get_settings()
        self._title_model_name = title_model_name or self._settings.GEMINI_TITLE_MODEL

        if not self._settings.GOOGLE_API_KEY:
            raise ValueError(
                "GOOGLE_API_KEY is required for Gemini API provider. "
                "Get your API key from https://aistudio.google.com/apikey"
            )
        self._client = genai.Client(api_key=self._settings.GOOGLE_API_KEY)

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        return f"Gemini API ({self._model_name})"

    def _config(self) -> GenerateContentConfig:
        return GenerateContentConfig(max_output_tokens=self._settings.MAX_OUTPUT_TOKENS)

    async def generate(self, prompt: str, history: Optional[History] = None) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=_to_contents(prompt, history),
                config=self._config(),
            )
        except Exception as e:
            raise LLMError(f"Gemini request failed: {e}") from e
        return (response.text or "").strip()

    async def stream(self, prompt: str, history: Optional[History] = None) -> AsyncIterator[str]:
        try:
            chunks = await self._client.aio.models.generate_content_stream(
                model=self._model_name,
                contents=_to_contents(prompt, history),
                config=self._config(),
            )
            async for chunk in chunks:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            raise LLMError(f"Gemini streaming failed: {e}") from e

    async def generate_title(self, prompt: str) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._title_model_name,
                contents=[Content(role="user", parts=[Part(text=prompt)])],
            )
        except Exception as e:
            raise LLMError(f"Gemini title request failed: {e}") from e
        return response.text or ""
