"""SQLAlchemy-backed stores.

Each store wraps one session. Outside a unit of work every mutating call
commits immediately; inside :func:`sql_unit_of_work` calls only flush and the
whole block commits (or rolls back) once at the end.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from asirnet.core.errors import (
    DuplicateIdentity,
    Forbidden,
    NotFound,
    StorageUnavailable,
    ValidationFailed,
)
from asirnet.db.time import utcnow
from asirnet.models import Comment, Post, Reaction, User
from asirnet.stores.base import (
    PROFILE_FIELDS,
    AuthorSnapshot,
    CommentRecord,
    PostRecord,
    ReactionRecord,
    UserRecord,
    require_text,
)

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def _storage_errors(method: Callable[P, R]) -> Callable[P, R]:
    """Translate driver failures into :class:`StorageUnavailable`."""

    @wraps(method)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return method(*args, **kwargs)
        except IntegrityError:
            # Constraint violations are mapped by the methods that expect them.
            raise
        except SQLAlchemyError as err:
            store = args[0]
            store.session.rollback()  # type: ignore[attr-defined]
            logger.error("Storage failure in %s: %s", method.__qualname__, err)
            raise StorageUnavailable() from err

    return wrapper


def _to_user(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        password_digest=row.password_digest,
        bio=row.bio,
        avatar=row.avatar,
        created_at=row.created_at,
    )


def _to_post(row: Post) -> PostRecord:
    return PostRecord(
        id=row.id,
        seq=row.seq,
        author_id=row.author_id,
        author_username=row.author_username,
        author_avatar=row.author_avatar,
        body=row.body,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_reaction(row: Reaction) -> ReactionRecord:
    return ReactionRecord(
        id=row.id,
        post_id=row.post_id,
        user_key=row.user_key,
        kind=row.kind,
        created_at=row.created_at,
    )


def _to_comment(row: Comment) -> CommentRecord:
    return CommentRecord(
        id=row.id,
        post_id=row.post_id,
        user_key=row.user_key,
        body=row.body,
        created_at=row.created_at,
    )


class SqlStore:
    """Common session handling for the SQL stores."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self.autocommit = True

    def _commit(self) -> None:
        if self.autocommit:
            self.session.commit()
        else:
            self.session.flush()


class SqlIdentityStore(SqlStore):
    def _row(self, user_id: str) -> User:
        row = self.session.get(User, user_id)
        if row is None:
            raise NotFound("User not found")
        return row

    @_storage_errors
    def register(
        self,
        username: str,
        password_digest: str,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> UserRecord:
        username = require_text(username, "username")
        if self.find_by_username(username) is not None:
            raise DuplicateIdentity()
        row = User(
            id=uuid.uuid4().hex,
            username=username,
            password_digest=password_digest,
            bio=bio,
            avatar=avatar,
            created_at=utcnow(),
        )
        self.session.add(row)
        try:
            self._commit()
        except IntegrityError as err:
            # Lost a race with a concurrent registration of the same name.
            self.session.rollback()
            raise DuplicateIdentity() from err
        return _to_user(row)

    @_storage_errors
    def get(self, user_id: str) -> UserRecord:
        return _to_user(self._row(user_id))

    @_storage_errors
    def find_by_username(self, username: str) -> UserRecord | None:
        row = self.session.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()
        return _to_user(row) if row is not None else None

    @_storage_errors
    def list_users(self) -> list[UserRecord]:
        rows = self.session.execute(select(User).order_by(User.username)).scalars()
        return [_to_user(row) for row in rows]

    @_storage_errors
    def update(self, user_id: str, changes: Mapping[str, Any]) -> UserRecord:
        row = self._row(user_id)
        unknown = set(changes) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationFailed(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        if "username" in changes:
            holder = self.find_by_username(changes["username"])
            if holder is not None and holder.id != user_id:
                raise DuplicateIdentity("Username already taken")
        for key, value in changes.items():
            setattr(row, key, value)
        try:
            self._commit()
        except IntegrityError as err:
            self.session.rollback()
            raise DuplicateIdentity("Username already taken") from err
        return _to_user(row)

    @_storage_errors
    def delete(self, user_id: str) -> None:
        self.session.delete(self._row(user_id))
        self._commit()


class SqlContentStore(SqlStore):
    def _row(self, post_id: str) -> Post:
        row = self.session.execute(select(Post).where(Post.id == post_id)).scalar_one_or_none()
        if row is None:
            raise NotFound("Post not found")
        return row

    def _owned(self, post_id: str, requester_id: str) -> Post:
        row = self._row(post_id)
        if row.author_id != requester_id:
            raise Forbidden()
        return row

    @_storage_errors
    def create(self, author_id: str, body: str, snapshot: AuthorSnapshot) -> PostRecord:
        row = Post(
            id=uuid.uuid4().hex,
            author_id=author_id,
            author_username=snapshot.username,
            author_avatar=snapshot.avatar,
            body=require_text(body, "content"),
            created_at=utcnow(),
        )
        self.session.add(row)
        self._commit()
        return _to_post(row)

    @_storage_errors
    def get(self, post_id: str) -> PostRecord:
        return _to_post(self._row(post_id))

    @_storage_errors
    def list(self) -> list[PostRecord]:
        rows = self.session.execute(
            select(Post).order_by(Post.seq.desc(), Post.id.desc())
        ).scalars()
        return [_to_post(row) for row in rows]

    @_storage_errors
    def list_by_author(self, author_id: str) -> list[PostRecord]:
        rows = self.session.execute(
            select(Post)
            .where(Post.author_id == author_id)
            .order_by(Post.seq.desc(), Post.id.desc())
        ).scalars()
        return [_to_post(row) for row in rows]

    @_storage_errors
    def update(self, post_id: str, requester_id: str, body: str) -> PostRecord:
        row = self._owned(post_id, requester_id)
        row.body = require_text(body, "content")
        row.updated_at = utcnow()
        self._commit()
        return _to_post(row)

    @_storage_errors
    def delete(self, post_id: str, requester_id: str) -> None:
        self.session.delete(self._owned(post_id, requester_id))
        self._commit()

    @_storage_errors
    def delete_all_by_author(self, author_id: str) -> int:
        result = self.session.execute(
            delete(Post).where(Post.author_id == author_id),
        )
        self._commit()
        return int(result.rowcount or 0)

    @_storage_errors
    def update_author_snapshot(self, author_id: str, snapshot: AuthorSnapshot) -> int:
        result = self.session.execute(
            update(Post)
            .where(Post.author_id == author_id)
            .values(author_username=snapshot.username, author_avatar=snapshot.avatar),
        )
        self._commit()
        return int(result.rowcount or 0)


class SqlInteractionStore(SqlStore):
    def _find_reaction(self, post_id: str, user_key: str, kind: str) -> Reaction | None:
        return self.session.execute(
            select(Reaction).where(
                Reaction.post_id == post_id,
                Reaction.user_key == user_key,
                Reaction.kind == kind,
            )
        ).scalar_one_or_none()

    @_storage_errors
    def add_reaction(self, post_id: str, user_key: str, kind: str) -> ReactionRecord:
        post_id = require_text(post_id, "post_id")
        user_key = require_text(user_key, "user")
        kind = require_text(kind, "kind")
        existing = self._find_reaction(post_id, user_key, kind)
        if existing is not None:
            return _to_reaction(existing)
        row = Reaction(
            id=uuid.uuid4().hex,
            post_id=post_id,
            user_key=user_key,
            kind=kind,
            created_at=utcnow(),
        )
        self.session.add(row)
        try:
            self._commit()
        except IntegrityError:
            # A concurrent request stored the same reaction first.
            self.session.rollback()
            existing = self._find_reaction(post_id, user_key, kind)
            if existing is None:
                raise
            return _to_reaction(existing)
        return _to_reaction(row)

    @_storage_errors
    def add_comment(self, post_id: str, user_key: str, body: str) -> CommentRecord:
        row = Comment(
            id=uuid.uuid4().hex,
            post_id=require_text(post_id, "post_id"),
            user_key=require_text(user_key, "user"),
            body=require_text(body, "content"),
            created_at=utcnow(),
        )
        self.session.add(row)
        self._commit()
        return _to_comment(row)

    @_storage_errors
    def count_reactions(self, post_id: str) -> int:
        return int(
            self.session.execute(
                select(func.count()).select_from(Reaction).where(Reaction.post_id == post_id)
            ).scalar()
            or 0
        )

    @_storage_errors
    def count_comments(self, post_id: str) -> int:
        return int(
            self.session.execute(
                select(func.count()).select_from(Comment).where(Comment.post_id == post_id)
            ).scalar()
            or 0
        )

    @_storage_errors
    def reactions_by_kind(self, post_id: str) -> dict[str, int]:
        rows = self.session.execute(
            select(Reaction.kind, func.count())
            .where(Reaction.post_id == post_id)
            .group_by(Reaction.kind)
        ).all()
        return {kind: int(count) for kind, count in rows}

    @_storage_errors
    def list_comments(self, post_id: str) -> list[CommentRecord]:
        rows = self.session.execute(
            select(Comment).where(Comment.post_id == post_id).order_by(Comment.seq)
        ).scalars()
        return [_to_comment(row) for row in rows]

    @_storage_errors
    def delete_all_by_post(self, post_id: str) -> int:
        reactions = self.session.execute(
            delete(Reaction).where(Reaction.post_id == post_id),
        )
        comments = self.session.execute(
            delete(Comment).where(Comment.post_id == post_id),
        )
        self._commit()
        return int(reactions.rowcount or 0) + int(comments.rowcount or 0)


@contextmanager
def sql_unit_of_work(session: Session, stores: Sequence[SqlStore]) -> Iterator[None]:
    """Commit every store call made inside the block in one transaction."""
    previous = [store.autocommit for store in stores]
    for store in stores:
        store.autocommit = False
    try:
        yield
        session.commit()
    except SQLAlchemyError as err:
        session.rollback()
        raise StorageUnavailable() from err
    except BaseException:
        session.rollback()
        raise
    finally:
        for store, flag in zip(stores, previous):
            store.autocommit = flag
