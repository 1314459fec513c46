"""Persistence layer: each store owns the read/write path for its tables."""

from postboard.stores.post_store import PostStore
from postboard.stores.user_store import UserStore

__all__ = ["UserStore", "PostStore"]
