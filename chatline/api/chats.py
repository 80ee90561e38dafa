"""
Chat session API endpoints.
"""

from fastapi import APIRouter, HTTPException, status

from chatline.api.deps import ChatRepo, CurrentUser, LLMProvider
from chatline.core.exceptions import NotFoundError
from chatline.models.chat import RenameChatRequest, SendMessageRequest, SendMessageResponse
from chatline.models.chat_session import ChatMessage, ChatSession
from chatline.services.chat_page_service import ChatPageService

router = APIRouter()


async def _owned_session(repo: ChatRepo, session_id: str, user_id: str) -> ChatSession:
    try:
        return await repo.get_session(session_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e


@router.get("", response_model=list[ChatSession])
async def list_chats(user: CurrentUser, repo: ChatRepo):
    """List the caller's chats, newest first."""
    return await repo.list_sessions(user.id)


@router.post("", response_model=ChatSession, status_code=status.HTTP_201_CREATED)
async def create_chat(user: CurrentUser, repo: ChatRepo):
    """Create an empty chat."""
    return await repo.create_session(user.id)


@router.get("/{session_id}", response_model=ChatSession)
async def get_chat(session_id: str, user: CurrentUser, repo: ChatRepo):
    return await _owned_session(repo, session_id, user.id)


@router.patch("/{session_id}", response_model=ChatSession)
async def rename_chat(
    session_id: str,
    request: RenameChatRequest,
    user: CurrentUser,
    repo: ChatRepo,
):
    await _owned_session(repo, session_id, user.id)
    return await repo.rename_session(session_id, request.name)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(session_id: str, user: CurrentUser, repo: ChatRepo):
    """Delete a chat and its messages."""
    try:
        await repo.delete_session(session_id, user.id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e


@router.get("/{session_id}/messages", response_model=list[ChatMessage])
async def list_chat_messages(session_id: str, user: CurrentUser, repo: ChatRepo):
    await _owned_session(repo, session_id, user.id)
    return await repo.list_messages(session_id)


@router.post("/{session_id}/messages", response_model=SendMessageResponse)
async def send_message(
    session_id: str,
    request: SendMessageRequest,
    user: CurrentUser,
    repo: ChatRepo,
    llm_provider: LLMProvider,
):
    """
    Persist a user message, generate the reply and persist it.

    Runs through the same ChatPageService a chat view uses, so naming the
    chat and the message count follow one path. If generation fails the
    user message stays saved and the response carries no assistant message.
    """
    page = ChatPageService(repo, llm_provider, user.id, session_id)
    try:
        if not await page.open():
            if page.redirect_to:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Chat session {session_id} not found",
                )
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_last_notice(page))

        if not request.content.strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is empty")

        reply = await page.send(request.content)
        if page.last_sent is None:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_last_notice(page))
        return SendMessageResponse(user_message=page.last_sent, assistant_message=reply)
    finally:
        page.close()


def _last_notice(page: ChatPageService) -> str:
    notices = page.notices.notices
    return notices[-1].message if notices else "Chat unavailable"
