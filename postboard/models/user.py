"""User model."""

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from postboard.database import Base


class User(Base):
    """User account; created without a password and a pending setup token."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    password_reset_token = Column(String(128), unique=True, nullable=True, index=True)
    password_reset_token_expiry = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    notification_preferences = relationship(
        "NotificationPreferences",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def has_password(self) -> bool:
        """Check if the user has completed password setup."""
        return self.password_hash is not None

    def set_reset_token(self, token: str, expiry) -> None:
        """Attach a one-time password setup/reset token."""
        self.password_reset_token = token
        self.password_reset_token_expiry = expiry

    def clear_reset_token(self) -> None:
        """Invalidate the one-time token."""
        self.password_reset_token = None
        self.password_reset_token_expiry = None
