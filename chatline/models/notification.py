"""
User-visible notice (toast) model.
"""

from pydantic import BaseModel, Field

from chatline.models.enums import NoticeType


class Notice(BaseModel):
    """A dismissible, auto-expiring notice."""

    id: str
    type: NoticeType
    message: str
    timestamp: float = Field(..., description="Creation time (epoch seconds)")
