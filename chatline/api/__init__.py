"""API routers."""

from chatline.api import ai, chats, realtime

__all__ = [
    "ai",
    "chats",
    "realtime",
]
