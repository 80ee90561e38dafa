"""
Controller for one open chat view.

Loads the session and its history into a MessageTimeline, guards the
compose box (no empty sends, one send at a time), runs the optimistic
send/reconcile/rollback cycle, and appends the generated reply once it
is persisted. Results that resolve after the view is closed are dropped.
"""

from __future__ import annotations

from typing import Optional

from chatline.core.config import Settings, get_settings
from chatline.core.exceptions import NotFoundError
from chatline.core.logger import logger
from chatline.interfaces.chat_session_repository import IChatSessionRepository
from chatline.interfaces.llm_provider import ILLMProvider
from chatline.models.chat_session import ChatMessage, ChatSession
from chatline.models.enums import MessageRole
from chatline.services import llm_utils
from chatline.services.message_timeline import MessageTimeline
from chatline.services.toast_service import ToastCenter

NOT_FOUND_PATH = "/404"


class ChatPageService:
    """State and actions of a single mounted chat page."""

    def __init__(
        self,
        repository: IChatSessionRepository,
        llm_provider: ILLMProvider,
        user_id: str,
        session_id: str,
        notices: Optional[ToastCenter] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._repo = repository
        self._llm = llm_provider
        self._settings = settings or get_settings()
        self.user_id = user_id
        self.session_id = session_id
        self.notices = notices or ToastCenter()
        self.timeline = MessageTimeline(session_id)
        self.session: Optional[ChatSession] = None
        self.compose = ""
        self.is_loading = True
        self.is_sending = False
        self.redirect_to: Optional[str] = None
        self.last_sent: Optional[ChatMessage] = None
        self._redirected = False
        self._initial_message_sent = False
        self._mounted = True

    @property
    def mounted(self) -> bool:
        return self._mounted

    def close(self) -> None:
        """Tear down the view; in-flight results become no-ops."""
        self._mounted = False

    def _redirect_not_found(self) -> None:
        if self._redirected:
            return
        self._redirected = True
        self.redirect_to = NOT_FOUND_PATH

    async def open(self, initial_message: Optional[str] = None) -> bool:
        """
        Verify ownership and load history.

        An initial message handed over from the new-chat screen is sent
        once, and only into an empty chat.
        """
        try:
            session = await self._repo.get_session(self.session_id, self.user_id)
            messages = await self._repo.list_messages(self.session_id)
        except NotFoundError as e:
            logger.warning(f"Chat {self.session_id} unavailable: {e}")
            self.is_loading = False
            self._redirect_not_found()
            return False
        except Exception as e:
            logger.warning(f"Error initializing chat {self.session_id}: {e}")
            self.is_loading = False
            if self._mounted:
                self.notices.show_error("Failed to load chat")
            return False

        if not self._mounted:
            return False

        self.session = session
        self.timeline.load(messages)
        self.is_loading = False

        if initial_message and not self._initial_message_sent and len(self.timeline) == 0:
            self._initial_message_sent = True
            await self.send(initial_message)
        return True

    async def send(self, content: Optional[str] = None) -> Optional[ChatMessage]:
        """
        Send a user message and append the assistant reply.

        Returns the persisted reply, or None when the send was ignored or
        failed. The persisted user message is kept in ``last_sent``.
        Failures are reported through notices; nothing is retried.
        """
        text = (self.compose if content is None else content).strip()
        if not text or self.is_sending:
            return None

        self.is_sending = True
        try:
            return await self._send(text)
        finally:
            self.is_sending = False

    async def _send(self, text: str) -> Optional[ChatMessage]:
        self.last_sent = None
        history = self.timeline.history()
        is_first_message = not history
        self.compose = ""
        transient_id = self.timeline.append_optimistic(text, MessageRole.USER)

        try:
            saved = await self._repo.add_message(self.session_id, text, MessageRole.USER)
        except Exception as e:
            logger.warning(f"Error sending message to {self.session_id}: {e}")
            if self._mounted:
                self.timeline.rollback(transient_id)
                self.compose = text
                self.notices.show_error("Failed to send message")
            return None

        if not self._mounted:
            return None
        self.timeline.reconcile(transient_id, saved)
        self.last_sent = saved

        if is_first_message and not (self.session and self.session.name):
            await self._name_chat(text)

        try:
            reply_text = await llm_utils.generate_reply(self._llm, text, history, self._settings)
        except Exception as e:
            logger.warning(f"Error generating reply for {self.session_id}: {e}")
            if self._mounted:
                self.notices.show_error("Failed to generate a response")
            await self._update_count()
            return None

        try:
            reply = await self._repo.add_message(self.session_id, reply_text, MessageRole.ASSISTANT)
        except Exception as e:
            logger.warning(f"Error saving reply for {self.session_id}: {e}")
            if self._mounted:
                self.notices.show_error("Failed to save response")
            await self._update_count()
            return None

        if not self._mounted:
            return None
        self.timeline.append_authoritative(reply)
        await self._update_count()
        return reply

    async def _name_chat(self, first_message: str) -> None:
        name = await llm_utils.generate_chat_name(self._llm, first_message, self._settings)
        try:
            updated = await self._repo.rename_session(self.session_id, name)
        except Exception as e:
            logger.warning(f"Error naming chat {self.session_id}: {e}")
            return
        if self._mounted:
            self.session = updated

    async def _update_count(self) -> None:
        if not self._mounted:
            return
        count = len(self.timeline.history())
        try:
            updated = await self._repo.update_message_count(self.session_id, count)
        except Exception as e:
            logger.warning(f"Error updating message count for {self.session_id}: {e}")
            return
        if self._mounted:
            self.session = updated
