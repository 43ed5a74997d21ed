"""Models capturing reactions and comments on posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from asirnet.db.session import Base
from asirnet.db.time import utcnow


class Reaction(Base):
    """Per-user reaction on a post.

    ``post_id`` and ``user_key`` are by-value references; rows are removed
    only by the cascade in the consistency coordinator.
    """

    __tablename__ = "reactions"
    __table_args__ = (
        UniqueConstraint("post_id", "user_key", "kind", name="uq_reaction_post_user_kind"),
        Index("ix_reactions_post_id", "post_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    post_id: Mapped[str] = mapped_column(String(32), nullable=False)
    user_key: Mapped[str] = mapped_column(String(32), nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False, default="like")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Comment(Base):
    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_post_id", "post_id"),)

    # Insertion sequence keeps comment threads in creation order.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    post_id: Mapped[str] = mapped_column(String(32), nullable=False)
    user_key: Mapped[str] = mapped_column(String(32), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
