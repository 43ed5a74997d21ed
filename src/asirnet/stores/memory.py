"""In-memory store implementations.

All three stores share one :class:`MemoryDatabase`, which keeps a dict per
collection. Records are immutable dataclasses, so a snapshot of the
collections is a shallow copy and can be restored when an atomic block fails.

Every mutation runs inside :meth:`MemoryDatabase.atomic`, which holds the
database lock. Request handlers run in a thread pool, so a rollback must never
erase a write another request already committed.
"""

from __future__ import annotations

import threading
import uuid
from collections import Counter
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import replace
from typing import Any

from asirnet.core.errors import DuplicateIdentity, Forbidden, NotFound, ValidationFailed
from asirnet.db.time import utcnow
from asirnet.stores.base import (
    PROFILE_FIELDS,
    AuthorSnapshot,
    CommentRecord,
    PostRecord,
    ReactionRecord,
    StoreBundle,
    UserRecord,
    newest_first,
    require_text,
)

COLLECTIONS = ("users", "posts", "reactions", "comments")


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


class MemoryDatabase:
    """Process-local collections backing the memory stores."""

    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}
        self.posts: dict[str, PostRecord] = {}
        self.reactions: dict[str, ReactionRecord] = {}
        self.comments: dict[str, CommentRecord] = {}
        self.sequence = 0
        self.lock = threading.RLock()
        self._atomic_depth = 0

    def next_sequence(self) -> int:
        self.sequence += 1
        return self.sequence

    def flush(self) -> None:
        """Persist the collections. Nothing to do for a purely in-memory database."""

    def snapshot(self) -> dict[str, Any]:
        state: dict[str, Any] = {name: dict(getattr(self, name)) for name in COLLECTIONS}
        state["sequence"] = self.sequence
        return state

    def restore(self, state: Mapping[str, Any]) -> None:
        for name in COLLECTIONS:
            setattr(self, name, dict(state[name]))
        self.sequence = state["sequence"]

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Apply the enclosed mutations all together or not at all.

        Blocks nest. Only the outermost block persists, and a failed flush
        rolls the collections back as well.
        """
        with self.lock:
            state = self.snapshot()
            self._atomic_depth += 1
            try:
                yield
                if self._atomic_depth == 1:
                    self.flush()
            except BaseException:
                self.restore(state)
                raise
            finally:
                self._atomic_depth -= 1


class MemoryIdentityStore:
    def __init__(self, db: MemoryDatabase) -> None:
        self.db = db

    def register(
        self,
        username: str,
        password_digest: str,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> UserRecord:
        username = require_text(username, "username")
        with self.db.atomic():
            if self.find_by_username(username) is not None:
                raise DuplicateIdentity()
            user = UserRecord(
                id=new_id(),
                username=username,
                password_digest=password_digest,
                bio=bio,
                avatar=avatar,
                created_at=utcnow(),
            )
            self.db.users[user.id] = user
        return user

    def get(self, user_id: str) -> UserRecord:
        user = self.db.users.get(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    def find_by_username(self, username: str) -> UserRecord | None:
        with self.db.lock:
            for user in self.db.users.values():
                if user.username == username:
                    return user
        return None

    def list_users(self) -> list[UserRecord]:
        with self.db.lock:
            return sorted(self.db.users.values(), key=lambda user: user.username)

    def update(self, user_id: str, changes: Mapping[str, Any]) -> UserRecord:
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationFailed(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        with self.db.atomic():
            user = self.get(user_id)
            if "username" in changes:
                holder = self.find_by_username(changes["username"])
                if holder is not None and holder.id != user_id:
                    raise DuplicateIdentity("Username already taken")
            updated = replace(user, **changes)
            self.db.users[user_id] = updated
        return updated

    def delete(self, user_id: str) -> None:
        with self.db.atomic():
            if self.db.users.pop(user_id, None) is None:
                raise NotFound("User not found")


class MemoryContentStore:
    def __init__(self, db: MemoryDatabase) -> None:
        self.db = db

    def create(self, author_id: str, body: str, snapshot: AuthorSnapshot) -> PostRecord:
        body = require_text(body, "content")
        with self.db.atomic():
            post = PostRecord(
                id=new_id(),
                seq=self.db.next_sequence(),
                author_id=author_id,
                author_username=snapshot.username,
                author_avatar=snapshot.avatar,
                body=body,
                created_at=utcnow(),
            )
            self.db.posts[post.id] = post
        return post

    def get(self, post_id: str) -> PostRecord:
        post = self.db.posts.get(post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    def list(self) -> list[PostRecord]:
        with self.db.lock:
            return newest_first(list(self.db.posts.values()))

    def list_by_author(self, author_id: str) -> list[PostRecord]:
        with self.db.lock:
            return newest_first([p for p in self.db.posts.values() if p.author_id == author_id])

    def _owned(self, post_id: str, requester_id: str) -> PostRecord:
        post = self.get(post_id)
        if post.author_id != requester_id:
            raise Forbidden()
        return post

    def update(self, post_id: str, requester_id: str, body: str) -> PostRecord:
        body = require_text(body, "content")
        with self.db.atomic():
            post = self._owned(post_id, requester_id)
            updated = replace(post, body=body, updated_at=utcnow())
            self.db.posts[post_id] = updated
        return updated

    def delete(self, post_id: str, requester_id: str) -> None:
        with self.db.atomic():
            self._owned(post_id, requester_id)
            del self.db.posts[post_id]

    def delete_all_by_author(self, author_id: str) -> int:
        with self.db.atomic():
            doomed = [pid for pid, post in self.db.posts.items() if post.author_id == author_id]
            for post_id in doomed:
                del self.db.posts[post_id]
        return len(doomed)

    def update_author_snapshot(self, author_id: str, snapshot: AuthorSnapshot) -> int:
        count = 0
        with self.db.atomic():
            for post_id, post in list(self.db.posts.items()):
                if post.author_id != author_id:
                    continue
                self.db.posts[post_id] = replace(
                    post,
                    author_username=snapshot.username,
                    author_avatar=snapshot.avatar,
                )
                count += 1
        return count


class MemoryInteractionStore:
    def __init__(self, db: MemoryDatabase) -> None:
        self.db = db

    def add_reaction(self, post_id: str, user_key: str, kind: str) -> ReactionRecord:
        post_id = require_text(post_id, "post_id")
        user_key = require_text(user_key, "user")
        kind = require_text(kind, "kind")
        with self.db.atomic():
            # One reaction of each kind per user and post; repeats return the original.
            for reaction in self.db.reactions.values():
                if (reaction.post_id, reaction.user_key, reaction.kind) == (post_id, user_key, kind):
                    return reaction
            reaction = ReactionRecord(
                id=new_id(),
                post_id=post_id,
                user_key=user_key,
                kind=kind,
                created_at=utcnow(),
            )
            self.db.reactions[reaction.id] = reaction
        return reaction

    def add_comment(self, post_id: str, user_key: str, body: str) -> CommentRecord:
        comment = CommentRecord(
            id=new_id(),
            post_id=require_text(post_id, "post_id"),
            user_key=require_text(user_key, "user"),
            body=require_text(body, "content"),
            created_at=utcnow(),
        )
        with self.db.atomic():
            self.db.comments[comment.id] = comment
        return comment

    def count_reactions(self, post_id: str) -> int:
        with self.db.lock:
            return sum(1 for r in self.db.reactions.values() if r.post_id == post_id)

    def count_comments(self, post_id: str) -> int:
        with self.db.lock:
            return sum(1 for c in self.db.comments.values() if c.post_id == post_id)

    def reactions_by_kind(self, post_id: str) -> dict[str, int]:
        with self.db.lock:
            return dict(
                Counter(r.kind for r in self.db.reactions.values() if r.post_id == post_id)
            )

    def list_comments(self, post_id: str) -> list[CommentRecord]:
        # Dicts keep insertion order, which is creation order.
        with self.db.lock:
            return [c for c in self.db.comments.values() if c.post_id == post_id]

    def delete_all_by_post(self, post_id: str) -> int:
        with self.db.atomic():
            reaction_ids = [rid for rid, r in self.db.reactions.items() if r.post_id == post_id]
            comment_ids = [cid for cid, c in self.db.comments.items() if c.post_id == post_id]
            for reaction_id in reaction_ids:
                del self.db.reactions[reaction_id]
            for comment_id in comment_ids:
                del self.db.comments[comment_id]
        return len(reaction_ids) + len(comment_ids)


def memory_bundle(db: MemoryDatabase) -> StoreBundle:
    """Return stores sharing ``db``, with atomic multi-store blocks."""
    return StoreBundle(
        identity=MemoryIdentityStore(db),
        content=MemoryContentStore(db),
        interactions=MemoryInteractionStore(db),
        shared_backend=True,
        unit_of_work=db.atomic,
    )
