"""
Application configuration using Pydantic Settings.

Environment-based infrastructure switching is controlled by the ENVIRONMENT variable.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test"] = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./chatline.db"

    # ===========================================
    # LLM Configuration
    # ===========================================
    # LLM Provider: "gemini-api" | "litellm"
    # - gemini-api: Gemini API (API Key)
    # - litellm: LiteLLM (Bedrock, OpenAI, etc. with optional custom endpoint)
    LLM_PROVIDER: Literal["gemini-api", "litellm"] = "gemini-api"

    # Gemini model used for replies, and the lighter one for chat titles
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TITLE_MODEL: str = "gemini-2.5-flash-lite"

    # Google API Key (for gemini-api provider)
    GOOGLE_API_KEY: str = ""

    # LiteLLM model identifier (for litellm provider)
    LITELLM_MODEL: str = "openai/gpt-4o-mini"
    LITELLM_TITLE_MODEL: str = ""
    LITELLM_API_BASE: str = ""
    LITELLM_API_KEY: str = ""

    MAX_OUTPUT_TOKENS: int = 1000

    # ===========================================
    # Prompts
    # ===========================================
    SYSTEM_PROMPT: str = "You are a helpful AI assistant."
    CHAT_NAME_SYSTEM_PROMPT: str = (
        "Generate a concise, descriptive title for this chat based on the user's message. "
        "Keep it 3-6 words maximum."
    )
    DEFAULT_CHAT_TITLE: str = "New Chat"

    # ===========================================
    # Notifications
    # ===========================================
    TOAST_MAX_MESSAGES: int = 3
    TOAST_TTL_SECONDS: float = 5.0

    # ===========================================
    # Realtime
    # ===========================================
    REALTIME_KEEPALIVE_SECONDS: float = 15.0

    # ===========================================
    # Auth
    # ===========================================
    # When disabled every request acts as DEFAULT_USER_ID.
    AUTH_ENABLED: bool = False
    DEFAULT_USER_ID: str = "dev_user"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"]
    )

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
