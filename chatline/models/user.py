"""
Authenticated user model.
"""

from pydantic import BaseModel


class User(BaseModel):
    """The caller on whose behalf a request runs."""

    id: str
