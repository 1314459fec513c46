"""Post schemas."""

from datetime import datetime

from pydantic import BaseModel


class PostCreate(BaseModel):
    """Create a new post."""

    title: str = ""
    content: str = ""


class PostUpdate(BaseModel):
    """Partial post update; only provided fields are applied."""

    title: str | None = None
    content: str | None = None


class PostResponse(BaseModel):
    """Post response."""

    id: int
    user_id: int
    username: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime | None
