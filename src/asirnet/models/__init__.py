"""SQLAlchemy models for the Asirnet application."""

from .interaction import Comment, Reaction
from .post import Post
from .user import User

__all__ = [
    "Comment",
    "Post",
    "Reaction",
    "User",
]
