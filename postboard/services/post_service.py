"""Post service: validation and ownership rules for posts."""

import logging
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from postboard.exceptions import AuthorNotFoundError
from postboard.models.post import Post
from postboard.schemas.post import PostCreate, PostResponse, PostUpdate
from postboard.stores.post_store import PostStore
from postboard.stores.user_store import UserStore
from postboard.validators import raise_if_invalid, validate_post_create, validate_post_update

logger = logging.getLogger(__name__)


class PostService:
    """Service for post-related operations.

    Only a post's author, or a caller flagged as administrator, may change or
    delete it. Every other case reports the post as missing.
    """

    def __init__(self, db: Session):
        self.db = db
        self.posts = PostStore(db)
        self.users = UserStore(db)

    def get(self, post_id: int) -> Post | None:
        return self.posts.get(post_id)

    def list_all(self) -> list[Post]:
        return self.posts.list_all()

    def list_by_user(self, user_id: int) -> list[Post]:
        return self.posts.list_by_user(user_id)

    def count_by_user(self, user_id: int) -> int:
        return self.posts.count_by_user(user_id)

    def create(self, author_id: int, data: PostCreate) -> Post:
        """Create a post for an existing author."""
        logger.info(f"Creating post for user {author_id}: {data.title}")
        raise_if_invalid(validate_post_create(data))

        if self.users.get(author_id) is None:
            logger.warning(f"User not found: {author_id}")
            raise AuthorNotFoundError(author_id)

        post = Post(
            user_id=author_id,
            title=data.title,
            content=data.content,
            created_at=datetime.now(UTC),
        )
        post = self.posts.create(post)
        logger.info(f"Created post {post.id}")
        return post

    def update(
        self, post_id: int, caller_id: int, data: PostUpdate, is_admin: bool = False
    ) -> Post | None:
        """Apply a partial update. None if the post is missing or not the caller's."""
        raise_if_invalid(validate_post_update(data))

        post = self._get_for_mutation(post_id, caller_id, is_admin)
        if post is None:
            return None

        if data.title is not None:
            post.title = data.title
        if data.content is not None:
            post.content = data.content
        post.updated_at = datetime.now(UTC)

        post = self.posts.update(post)
        logger.info(f"Updated post {post_id}")
        return post

    def delete(self, post_id: int, caller_id: int, is_admin: bool = False) -> bool:
        """Delete a post. False if the post is missing or not the caller's."""
        post = self._get_for_mutation(post_id, caller_id, is_admin)
        if post is None:
            return False

        self.posts.delete(post)
        logger.info(f"Deleted post {post_id}")
        return True

    def to_response(self, post: Post) -> PostResponse:
        return PostResponse(
            id=post.id,
            user_id=post.user_id,
            username=post.author.username if post.author else "",
            title=post.title,
            content=post.content,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

    def _get_for_mutation(self, post_id: int, caller_id: int, is_admin: bool) -> Post | None:
        post = self.posts.get(post_id)
        if post is None:
            logger.warning(f"Post not found: {post_id}")
            return None
        if not is_admin and not post.is_authored_by(caller_id):
            logger.warning(f"User {caller_id} may not modify post {post_id}")
            return None
        return post
