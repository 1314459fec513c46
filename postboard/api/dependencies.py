"""FastAPI dependencies for authentication, services and database."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from postboard.config import get_settings
from postboard.database import get_db
from postboard.models.user import User
from postboard.services.account_service import AccountService
from postboard.services.credentials import ADMIN_ROLE, CredentialService
from postboard.services.mailer import EmailService
from postboard.services.post_service import PostService
from postboard.stores.user_store import UserStore

security = HTTPBearer()


@dataclass
class Caller:
    """The authenticated user behind a request and their role claim."""

    user: User
    is_admin: bool

    @property
    def id(self) -> int:
        return self.user.id


def get_credential_service(
    db: Annotated[Session, Depends(get_db)],
) -> CredentialService:
    """Get credential service with dependencies."""
    return CredentialService(db, get_settings())


def get_email_service() -> EmailService | None:
    """Get email service, or None when SMTP is not configured."""
    settings = get_settings()
    if not settings.email_enabled:
        return None
    return EmailService(settings)


def get_account_service(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[CredentialService, Depends(get_credential_service)],
    email_service: Annotated[EmailService | None, Depends(get_email_service)],
) -> AccountService:
    """Get account service with dependencies."""
    return AccountService(db, credentials, email_service)


def get_post_service(
    db: Annotated[Session, Depends(get_db)],
) -> PostService:
    """Get post service with dependencies."""
    return PostService(db)


def _unauthorized(detail: str = "Invalid authentication credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_caller(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    credential_service: Annotated[CredentialService, Depends(get_credential_service)],
) -> Caller:
    """Get the authenticated caller and role from the JWT token."""
    payload = credential_service.decode_token(credentials.credentials)
    if payload is None:
        raise _unauthorized()

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise _unauthorized()

    user = UserStore(db).get(int(user_id))
    if user is None:
        raise _unauthorized("User not found")

    # The role claim can outlive an email change, so the policy is re-applied
    is_admin = payload.get("role") == ADMIN_ROLE and credential_service.is_admin(user)
    return Caller(user=user, is_admin=is_admin)


def get_current_user(
    caller: Annotated[Caller, Depends(get_caller)],
) -> User:
    """Get the current authenticated user."""
    return caller.user


def require_admin(
    caller: Annotated[Caller, Depends(get_caller)],
) -> Caller:
    """Reject callers without the administrator role."""
    if not caller.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator role required",
        )
    return caller
