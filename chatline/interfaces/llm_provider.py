"""
LLM provider interface.

Defines the contract for text generation.
Implementations: Gemini API, LiteLLM (for Bedrock, OpenAI, etc.)
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

# (role, content) pairs, oldest first; role is "user" or "assistant"
History = list[tuple[str, str]]


class ILLMProvider(ABC):
    """Abstract interface for LLM providers."""

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass

    @abstractmethod
    async def generate(self, prompt: str, history: Optional[History] = None) -> str:
        """
        Generate a complete reply.

        Raises:
            LLMError: If the provider call fails
        """
        pass

    @abstractmethod
    def stream(self, prompt: str, history: Optional[History] = None) -> AsyncIterator[str]:
        """
        Generate a reply chunk by chunk.

        Raises:
            LLMError: If the provider call fails
        """
        pass

    @abstractmethod
    async def generate_title(self, prompt: str) -> str:
        """
        Run the (lighter) title model on a fully composed prompt.

        Raises:
            LLMError: If the provider call fails
        """
        pass
