"""User and notification preference schemas.

Request schemas describe shape only; business rules live in
``postboard.validators`` so that every violation is reported together.
"""

from pydantic import BaseModel, ConfigDict


class NotificationPreferencesSchema(BaseModel):
    """Notification preferences, used for both input and output."""

    model_config = ConfigDict(from_attributes=True)

    email_enabled: bool = True
    slack_enabled: bool = False
    slack_webhook_url: str | None = None


class UserCreate(BaseModel):
    """Create a new user account."""

    username: str = ""
    email: str = ""
    notification_preferences: NotificationPreferencesSchema | None = None


class UserUpdate(BaseModel):
    """Update an existing user account."""

    email: str = ""
    notification_preferences: NotificationPreferencesSchema | None = None


class UserResponse(BaseModel):
    """Public user projection."""

    id: int
    username: str
    email: str
    is_admin: bool
    notification_preferences: NotificationPreferencesSchema | None = None
