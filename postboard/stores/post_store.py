"""Post store."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from postboard.models.post import Post

logger = logging.getLogger(__name__)


class PostStore:
    """Read/write path for post rows. Every write is a single statement."""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(Post).options(joinedload(Post.author))

    def get(self, post_id: int) -> Post | None:
        return self._query().filter(Post.id == post_id).first()

    def list_all(self) -> list[Post]:
        return self._query().order_by(Post.created_at.desc(), Post.id.desc()).all()

    def list_by_user(self, user_id: int) -> list[Post]:
        return (
            self._query()
            .filter(Post.user_id == user_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .all()
        )

    def count_by_user(self, user_id: int) -> int:
        count = self.db.query(func.count(Post.id)).filter(Post.user_id == user_id).scalar()
        return count or 0

    def create(self, post: Post) -> Post:
        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def update(self, post: Post) -> Post:
        self.db.commit()
        self.db.refresh(post)
        return post

    def delete(self, post: Post) -> None:
        self.db.delete(post)
        self.db.commit()

    def delete_by_user(self, user_id: int, commit: bool = True) -> int:
        """Delete every post written by a user; returns the number removed.

        With ``commit=False`` the delete is only flushed, leaving the caller
        to commit or roll back the surrounding transaction.
        """
        deleted = (
            self.db.query(Post)
            .filter(Post.user_id == user_id)
            .delete(synchronize_session="fetch")
        )
        if commit:
            self.db.commit()
        if deleted:
            logger.info(f"Deleted {deleted} posts for user {user_id}")
        return deleted
