"""Pydantic schemas for API requests and responses."""

from postboard.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    SetPasswordRequest,
    UserLogin,
)
from postboard.schemas.post import PostCreate, PostResponse, PostUpdate
from postboard.schemas.user import (
    NotificationPreferencesSchema,
    UserCreate,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "UserLogin",
    "AuthResponse",
    "SetPasswordRequest",
    "ForgotPasswordRequest",
    "NotificationPreferencesSchema",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "PostCreate",
    "PostUpdate",
    "PostResponse",
]
