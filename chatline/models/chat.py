"""
Request/response schemas for the chat HTTP API.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatline.models.chat_session import ChatMessage


class RenameChatRequest(BaseModel):
    """Request model for renaming a chat."""

    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class SendMessageRequest(BaseModel):
    """Request model for sending a user message."""

    content: str = Field(..., min_length=1, max_length=100000)


class SendMessageResponse(BaseModel):
    """Persisted user message and the assistant reply (if generated)."""

    user_message: ChatMessage
    assistant_message: Optional[ChatMessage] = None


class PromptRequest(BaseModel):
    """Request model for streaming generation."""

    prompt: Optional[str] = None


class ChatNameRequest(BaseModel):
    """Request model for chat title generation."""

    model_config = ConfigDict(populate_by_name=True)

    first_message: Optional[str] = Field(None, alias="firstMessage")


class ChatNameResponse(BaseModel):
    """Generated chat title."""

    model_config = ConfigDict(populate_by_name=True)

    chat_name: str = Field(..., serialization_alias="chatName")
