"""Store interfaces shared by every storage backend.

Users, posts and interactions are owned by three independent stores. They
reference each other only by value (user id, post id), so nothing in a store
enforces referential integrity; that is the job of
``asirnet.services.coordinator``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from asirnet.core.errors import ValidationFailed

# Profile fields that may be changed through a profile edit.
PROFILE_FIELDS = ("username", "password_digest", "bio", "avatar")


@dataclass(frozen=True)
class UserRecord:
    """Authoritative user identity and display fields."""

    id: str
    username: str
    password_digest: str
    bio: str | None = None
    avatar: str | None = None
    created_at: datetime | None = None

    @property
    def snapshot(self) -> AuthorSnapshot:
        return AuthorSnapshot(username=self.username, avatar=self.avatar)


@dataclass(frozen=True)
class AuthorSnapshot:
    """Copy of a user's display fields stored on each of their posts."""

    username: str
    avatar: str | None = None


@dataclass(frozen=True)
class PostRecord:
    id: str
    seq: int
    author_id: str
    author_username: str
    author_avatar: str | None
    body: str
    created_at: datetime
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ReactionRecord:
    id: str
    post_id: str
    user_key: str
    kind: str
    created_at: datetime


@dataclass(frozen=True)
class CommentRecord:
    id: str
    post_id: str
    user_key: str
    body: str
    created_at: datetime


def require_text(value: str | None, field_name: str) -> str:
    """Return ``value`` stripped of surrounding whitespace or fail validation."""
    if value is None or not str(value).strip():
        raise ValidationFailed(f"Provide {field_name}")
    return str(value).strip()


def newest_first(posts: Sequence[PostRecord]) -> list[PostRecord]:
    """Order posts by creation sequence, newest first, ties broken by id."""
    return sorted(posts, key=lambda post: (post.seq, post.id), reverse=True)


class IdentityStore(Protocol):
    """Source of truth for user records."""

    def register(
        self,
        username: str,
        password_digest: str,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> UserRecord: ...

    def get(self, user_id: str) -> UserRecord: ...

    def find_by_username(self, username: str) -> UserRecord | None: ...

    def list_users(self) -> list[UserRecord]: ...

    def update(self, user_id: str, changes: Mapping[str, Any]) -> UserRecord: ...

    def delete(self, user_id: str) -> None: ...


class ContentStore(Protocol):
    """Owner of posts and their denormalized author snapshots."""

    def create(self, author_id: str, body: str, snapshot: AuthorSnapshot) -> PostRecord: ...

    def get(self, post_id: str) -> PostRecord: ...

    def list(self) -> list[PostRecord]: ...

    def list_by_author(self, author_id: str) -> list[PostRecord]: ...

    def update(self, post_id: str, requester_id: str, body: str) -> PostRecord: ...

    def delete(self, post_id: str, requester_id: str) -> None: ...

    def delete_all_by_author(self, author_id: str) -> int: ...

    def update_author_snapshot(self, author_id: str, snapshot: AuthorSnapshot) -> int: ...


class InteractionStore(Protocol):
    """Owner of reactions and comments attached to posts."""

    def add_reaction(self, post_id: str, user_key: str, kind: str) -> ReactionRecord: ...

    def add_comment(self, post_id: str, user_key: str, body: str) -> CommentRecord: ...

    def count_reactions(self, post_id: str) -> int: ...

    def count_comments(self, post_id: str) -> int: ...

    def reactions_by_kind(self, post_id: str) -> dict[str, int]: ...

    def list_comments(self, post_id: str) -> list[CommentRecord]: ...

    def delete_all_by_post(self, post_id: str) -> int: ...


@dataclass
class StoreBundle:
    """The three stores handed to one request.

    Attributes:
        identity: User store.
        content: Post store.
        interactions: Reaction and comment store.
        shared_backend: True when all three live in one backend that can
            commit them atomically.
        unit_of_work: Factory for the backend's atomic scope; only used when
            ``shared_backend`` is set.
    """

    identity: IdentityStore
    content: ContentStore
    interactions: InteractionStore
    shared_backend: bool = False
    unit_of_work: Callable[[], AbstractContextManager[None]] | None = field(
        default=None, repr=False
    )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Run the enclosed steps atomically when the backend allows it.

        Across distinct backends this is a no-op and every store call commits
        on its own.
        """
        if not self.shared_backend or self.unit_of_work is None:
            yield
            return
        with self.unit_of_work():
            yield
