"""Authentication API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from postboard.api.dependencies import (
    get_account_service,
    get_credential_service,
    get_current_user,
)
from postboard.models.user import User
from postboard.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    SetPasswordRequest,
    UserLogin,
)
from postboard.schemas.user import UserResponse
from postboard.services.account_service import AccountService
from postboard.services.credentials import CredentialService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    credential_service: Annotated[CredentialService, Depends(get_credential_service)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Login with username and password."""
    user = credential_service.authenticate(credentials.username, credentials.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = credential_service.issue_token(user)

    return AuthResponse(
        access_token=access_token,
        user=accounts.to_response(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Get current user information."""
    return accounts.to_response(current_user)


@router.post("/set-password")
async def set_password(
    data: SetPasswordRequest,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Set a password using the token from the setup or reset email."""
    if not accounts.set_password(data):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired token",
        )
    return {"success": True}


@router.post("/forgot-password", status_code=status.HTTP_202_ACCEPTED)
async def forgot_password(
    data: ForgotPasswordRequest,
    accounts: Annotated[AccountService, Depends(get_account_service)],
):
    """Send a password reset email if the address belongs to an account."""
    accounts.request_password_reset(data.email)
    return {"message": "If the email is registered, a reset link has been sent"}
