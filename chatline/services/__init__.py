"""
Application services.

ChatListStore, ChatPageService and MessageTimeline hold per-view state for a
chat client: the API uses ChatPageService for sends, and embedding clients
drive ChatListStore against the change feed directly.
"""

from chatline.services.chat_list_store import ChatListStore
from chatline.services.chat_page_service import ChatPageService
from chatline.services.message_timeline import MessageTimeline
from chatline.services.realtime_service import RealtimeManager, realtime_manager
from chatline.services.toast_service import ToastCenter

__all__ = [
    "ChatListStore",
    "ChatPageService",
    "MessageTimeline",
    "RealtimeManager",
    "ToastCenter",
    "realtime_manager",
]
