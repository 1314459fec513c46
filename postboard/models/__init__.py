"""SQLAlchemy models."""

from postboard.models.notification_preferences import NotificationPreferences
from postboard.models.post import Post
from postboard.models.user import User

__all__ = [
    "User",
    "NotificationPreferences",
    "Post",
]
