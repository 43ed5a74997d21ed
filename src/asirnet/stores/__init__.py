"""Storage backends for users, posts and interactions."""

from .base import (
    AuthorSnapshot,
    CommentRecord,
    ContentStore,
    IdentityStore,
    InteractionStore,
    PostRecord,
    ReactionRecord,
    StoreBundle,
    UserRecord,
)
from .factory import MemoryStoreProvider, SqlStoreProvider, StoreProvider, build_store_provider

__all__ = [
    "AuthorSnapshot",
    "CommentRecord",
    "ContentStore",
    "IdentityStore",
    "InteractionStore",
    "PostRecord",
    "ReactionRecord",
    "StoreBundle",
    "UserRecord",
    "MemoryStoreProvider",
    "SqlStoreProvider",
    "StoreProvider",
    "build_store_provider",
]
