"""Authentication schemas."""

from pydantic import BaseModel

from postboard.schemas.user import UserResponse


class UserLogin(BaseModel):
    """User login request."""

    username: str
    password: str


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse


class SetPasswordRequest(BaseModel):
    """Set a password using a one-time setup/reset token."""

    token: str = ""
    password: str = ""
    confirm_password: str = ""


class ForgotPasswordRequest(BaseModel):
    """Request a password reset email."""

    email: str
