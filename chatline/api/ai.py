"""
Generation endpoints: streamed replies and chat titles.
"""

import json
from typing import AsyncGenerator

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from chatline.api.deps import CurrentUser, LLMProvider
from chatline.core.logger import logger
from chatline.models.chat import ChatNameRequest, ChatNameResponse, PromptRequest
from chatline.services import llm_utils

router = APIRouter()


@router.post("/ai")
async def stream_ai(
    request: PromptRequest,
    _user: CurrentUser,
    llm_provider: LLMProvider,
) -> StreamingResponse:
    """Stream a reply as server-sent events, ending with [DONE]."""
    if not request.prompt:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Prompt is required")

    async def event_generator() -> AsyncGenerator[str, None]:
        try:
            async for chunk in llm_utils.stream_reply(llm_provider, request.prompt):
                yield f"data: {json.dumps({'chunk': chunk})}\n\n"
            yield "data: [DONE]\n\n"
        except Exception as e:
            logger.warning(f"Error in streaming: {e}")
            yield f"data: {json.dumps({'error': 'Streaming error'})}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.post("/chat-name", response_model=ChatNameResponse)
async def chat_name(
    request: ChatNameRequest,
    _user: CurrentUser,
    llm_provider: LLMProvider,
):
    """Generate a short title from the first message (never fails)."""
    if not request.first_message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="First message is required",
        )
    name = await llm_utils.generate_chat_name(llm_provider, request.first_message)
    return ChatNameResponse(chat_name=name)
