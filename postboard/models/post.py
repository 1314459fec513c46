"""Post model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from postboard.database import Base


class Post(Base):
    """Post authored by a single user."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    author = relationship("User", backref="posts")

    def is_authored_by(self, user_id: int) -> bool:
        """Check if the given user wrote this post."""
        return self.user_id == user_id
