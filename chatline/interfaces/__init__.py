"""Abstract interfaces for infrastructure abstraction."""

from chatline.interfaces.change_feed import ChangeSubscription, IChangeFeed
from chatline.interfaces.chat_session_repository import IChatSessionRepository
from chatline.interfaces.llm_provider import ILLMProvider

__all__ = [
    "ChangeSubscription",
    "IChangeFeed",
    "IChatSessionRepository",
    "ILLMProvider",
]
