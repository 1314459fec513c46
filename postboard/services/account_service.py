"""Account service: user registration, updates, password setup and export."""

import csv
import io
import logging

from sqlalchemy.orm import Session

from postboard.exceptions import FieldViolation, ValidationFailed
from postboard.models.notification_preferences import NotificationPreferences
from postboard.models.user import User
from postboard.schemas.auth import SetPasswordRequest
from postboard.schemas.user import (
    NotificationPreferencesSchema,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from postboard.services.credentials import CredentialService
from postboard.services.mailer import EmailService
from postboard.stores.post_store import PostStore
from postboard.stores.user_store import UserStore
from postboard.validators import (
    check_email,
    check_username,
    raise_if_invalid,
    validate_set_password,
)

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "id",
    "username",
    "email",
    "is_admin",
    "email_enabled",
    "slack_enabled",
    "slack_webhook_url",
]


class AccountService:
    """Service for user account operations."""

    def __init__(
        self,
        db: Session,
        credentials: CredentialService,
        email_service: EmailService | None = None,
    ):
        self.db = db
        self.credentials = credentials
        self.email_service = email_service
        self.users = UserStore(db)
        self.posts = PostStore(db)

    def get(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    def list_all(self) -> list[User]:
        return self.users.list_all()

    def create(self, data: UserCreate) -> User:
        """
Register a user with a pending password setup token.

        The setup email is a single best-effort attempt: its failure is logged
        and never fails the registration.
        """
        logger.info(f"Creating user '{data.username}' <{data.email}>")

        errors = check_username(data.username) + check_email(data.email)
        if data.username and self.users.get_by_username(data.username):
            errors.append(FieldViolation("username", "Username is already taken"))
        if data.email and self.users.get_by_email(data.email):
            errors.append(FieldViolation("email", "Email is already registered"))
        if errors:
            logger.warning(f"User creation validation failed: {', '.join(e.message for e in errors)}")
            raise ValidationFailed(errors)

        token, expiry = self.credentials.generate_reset_token()
        user = User(username=data.username, email=data.email)
        user.set_reset_token(token, expiry)

        prefs_data = data.notification_preferences or NotificationPreferencesSchema()
        preferences = NotificationPreferences(
            email_enabled=prefs_data.email_enabled,
            slack_enabled=prefs_data.slack_enabled,
            slack_webhook_url=prefs_data.slack_webhook_url,
        )

        user = self.users.create(user, preferences)
        self._send_setup_email(user)
        return user

    def update(
        self, user_id: int, data: UserUpdate, can_grant_admin: bool = False
    ) -> User | None:
        """Update email and merge notification preferences. Returns None if absent.

        Moving an account into the administrator email domain requires
        ``can_grant_admin``, since that email grants the admin role.
        """
        logger.info(f"Updating user {user_id}")

        errors = check_email(data.email)
        if data.email:
            existing = self.users.get_by_email(data.email)
            if existing is not None and existing.id != user_id:
                errors.append(FieldViolation("email", "Email is already registered"))
        if errors:
            logger.warning(f"User update validation failed: {', '.join(e.message for e in errors)}")
            raise ValidationFailed(errors)

        user = self.users.get(user_id)
        if user is None:
            logger.warning(f"User not found: {user_id}")
            return None

        if (
            not can_grant_admin
            and self.credentials.is_admin_email(data.email)
            and not self.credentials.is_admin(user)
        ):
            logger.warning(f"Refused administrator email for user {user_id}")
            raise ValidationFailed(
                [FieldViolation("email", "Only administrators can assign an administrator email")]
            )

        user.email = data.email

        preferences = None
        if data.notification_preferences is not None:
            preferences = user.notification_preferences
            if preferences is None:
                logger.info(f"Creating notification preferences for user {user_id}")
                preferences = NotificationPreferences(user_id=user_id)
            preferences.email_enabled = data.notification_preferences.email_enabled
            preferences.slack_enabled = data.notification_preferences.slack_enabled
            preferences.slack_webhook_url = data.notification_preferences.slack_webhook_url

        return self.users.update(user, preferences)

    def delete(self, user_id: int) -> bool:
        """Delete a user together with their posts and preferences."""
        user = self.users.get(user_id)
        if user is None:
            return False
        try:
            # Posts are staged; the user delete commits both or neither
            self.posts.delete_by_user(user_id, commit=False)
            self.users.delete(user)
        except Exception:
            self.db.rollback()
            raise
        return True

    def set_password(self, data: SetPasswordRequest) -> bool:
        """Set a password with a setup/reset token. False if the token is unknown or expired."""
        raise_if_invalid(validate_set_password(data))
        return self.credentials.consume_reset_token(data.token, data.password)

    def request_password_reset(self, email: str) -> None:
        """Issue a fresh reset token for the account with this email, if any.

        Says nothing about whether the account exists.
        """
        user = self.users.get_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        token, expiry = self.credentials.generate_reset_token()
        user.set_reset_token(token, expiry)
        self.users.update(user)
        self._send_setup_email(user)

    def export_csv(self) -> bytes:
        """Export all users as CSV, one row per user."""
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        for user in self.list_all():
            response = self.to_response(user)
            prefs = response.notification_preferences
            writer.writerow(
                {
                    "id": response.id,
                    "username": response.username,
                    "email": response.email,
                    "is_admin": response.is_admin,
                    "email_enabled": prefs.email_enabled if prefs else "",
                    "slack_enabled": prefs.slack_enabled if prefs else "",
                    "slack_webhook_url": (prefs.slack_webhook_url or "") if prefs else "",
                }
            )
        return buffer.getvalue().encode("utf-8")

    def to_response(self, user: User) -> UserResponse:
        """Map a user to its public projection."""
        prefs = user.notification_preferences
        return UserResponse(
            id=user.id,
            username=user.username,
            email=user.email,
            is_admin=self.credentials.is_admin(user),
            notification_preferences=(
                NotificationPreferencesSchema.model_validate(prefs) if prefs else None
            ),
        )

    def _send_setup_email(self, user: User) -> None:
        prefs = user.notification_preferences
        if self.email_service is None or (prefs is not None and not prefs.email_enabled):
            logger.info(f"Skipping password setup email for user {user.id}")
            return

        try:
            self.email_service.send_password_setup_email(
                user.email, user.username, user.password_reset_token
            )
        except Exception as e:
            logger.error(f"Failed to send password setup email for user {user.id}: {e}")
