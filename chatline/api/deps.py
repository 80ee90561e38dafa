"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from chatline.core.config import get_settings
from chatline.interfaces.change_feed import IChangeFeed
from chatline.interfaces.chat_session_repository import IChatSessionRepository
from chatline.interfaces.llm_provider import ILLMProvider
from chatline.models.user import User
from chatline.services.realtime_service import realtime_manager


# ===========================================
# Repository Dependencies
# ===========================================


def get_change_feed() -> IChangeFeed:
    """Get the process-wide change feed."""
    return realtime_manager


@lru_cache()
def get_chat_session_repository() -> IChatSessionRepository:
    """Get chat session repository instance."""
    from chatline.infrastructure.local.chat_session_repository import SqliteChatSessionRepository
    return SqliteChatSessionRepository(change_feed=get_change_feed())


# ===========================================
# LLM Dependencies
# ===========================================


@lru_cache()
def get_llm_provider() -> ILLMProvider:
    """
    Get LLM provider instance based on LLM_PROVIDER setting.

    Supports:
    - gemini-api: Gemini API (API Key)
    - litellm: LiteLLM (Bedrock, OpenAI, etc. with optional custom endpoint)
    """
    settings = get_settings()

    if settings.LLM_PROVIDER == "gemini-api":
        from chatline.infrastructure.local.gemini_api_provider import GeminiAPIProvider
        return GeminiAPIProvider(settings.GEMINI_MODEL, settings.GEMINI_TITLE_MODEL)

    elif settings.LLM_PROVIDER == "litellm":
        from chatline.infrastructure.local.litellm_provider import LiteLLMProvider
        return LiteLLMProvider(settings.LITELLM_MODEL)

    else:
        raise ValueError(f"Unknown LLM_PROVIDER: {settings.LLM_PROVIDER}")


# ===========================================
# Auth Dependencies
# ===========================================


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
) -> User:
    """
    Get current user.

    With auth disabled every request runs as DEFAULT_USER_ID. With auth
    enabled the bearer token is taken as the user ID; verification is left
    to the hosted auth provider in front of this service.
    """
    settings = get_settings()
    if not settings.AUTH_ENABLED:
        return User(id=settings.DEFAULT_USER_ID)

    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Empty bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return User(id=token)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

ChatRepo = Annotated[IChatSessionRepository, Depends(get_chat_session_repository)]
ChangeFeed = Annotated[IChangeFeed, Depends(get_change_feed)]
LLMProvider = Annotated[ILLMProvider, Depends(get_llm_provider)]
CurrentUser = Annotated[User, Depends(get_current_user)]
