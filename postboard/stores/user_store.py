"""User store: users and their notification preferences."""

import logging
from datetime import datetime

from sqlalchemy.orm import Session, joinedload

from postboard.models.notification_preferences import NotificationPreferences
from postboard.models.user import User

logger = logging.getLogger(__name__)


class UserStore:
    """Read/write path for user rows and their one-to-one preferences row.

    ``create`` and ``update`` write the user row and the preferences row in a
    single transaction: if anything fails in between, both are rolled back and
    the error is re-raised.
    """

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(User).options(joinedload(User.notification_preferences))

    def get(self, user_id: int) -> User | None:
        """Get a user by ID."""
        return self._query().filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> User | None:
        """Get a user by username."""
        return self._query().filter(User.username == username).first()

    def get_by_email(self, email: str) -> User | None:
        """Get a user by email."""
        return self._query().filter(User.email == email).first()

    def get_by_reset_token(self, token: str, now: datetime) -> User | None:
        """Get the user holding this exact reset token, if it has not expired."""
        return (
            self.db.query(User)
            .filter(
                User.password_reset_token == token,
                User.password_reset_token_expiry.is_not(None),
                User.password_reset_token_expiry > now,
            )
            .first()
        )

    def list_all(self) -> list[User]:
        """Get all users ordered by ID."""
        return self._query().order_by(User.id).all()

    def get_preferences(self, user_id: int) -> NotificationPreferences | None:
        """Get the notification preferences row for a user."""
        return (
            self.db.query(NotificationPreferences)
            .filter(NotificationPreferences.user_id == user_id)
            .first()
        )

    def create(self, user: User, preferences: NotificationPreferences | None = None) -> User:
        """Insert a user and its preferences atomically."""
        try:
            self.db.add(user)
            self.db.flush()  # Get user.id
            if preferences is not None:
                self._write_preferences(user, preferences)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user '{user.username}': {e}")
            raise

        self.db.refresh(user)
        logger.info(f"Created user {user.id} ({user.username})")
        return user

    def update(self, user: User, preferences: NotificationPreferences | None = None) -> User:
        """Persist changes to a user and, optionally, its preferences atomically.

        ``preferences`` may be a new row (inserted) or the user's existing row
        (updated in place).
        """
        user_id = user.id
        try:
            self.db.flush()
            if preferences is not None:
                self._write_preferences(user, preferences)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update user {user_id}: {e}")
            raise

        self.db.refresh(user)
        return user

    def delete(self, user: User) -> None:
        """Delete a user; its preferences row is removed in the same transaction."""
        user_id = user.id
        try:
            # Cascade removes the preferences row in the same flush
            self.db.delete(user)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {e}")
            raise
        logger.info(f"Deleted user {user_id}")

    def _write_preferences(self, user: User, preferences: NotificationPreferences) -> None:
        """Stage the preferences row for ``user`` inside the open transaction."""
        preferences.user_id = user.id
        if preferences.id is None:
            self.db.add(preferences)
        self.db.flush()
        user.notification_preferences = preferences
