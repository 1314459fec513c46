"""Notification preferences model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from postboard.database import Base


class NotificationPreferences(Base):
    """Per-user delivery channel preferences."""

    __tablename__ = "notification_preferences"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    email_enabled = Column(Boolean, nullable=False, default=True)
    slack_enabled = Column(Boolean, nullable=False, default=False)
    slack_webhook_url = Column(String(500), nullable=True)

    # Relationships
    user = relationship("User", back_populates="notification_preferences")
