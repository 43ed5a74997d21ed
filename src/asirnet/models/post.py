"""SQLAlchemy model for posts."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from asirnet.db.session import Base
from asirnet.db.time import utcnow


class Post(Base):
    """Post with a denormalized copy of its author's display fields.

    ``author_id`` is a plain column rather than a foreign key: the users table
    may live in a different database.
    """

    __tablename__ = "posts"

    # Creation sequence; lists are ordered by it, newest first.
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    author_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    author_username: Mapped[str] = mapped_column(Text, nullable=False)
    author_avatar: Mapped[str | None] = mapped_column(Text, nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
