# src/asirnet/schemas/post.py
"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from asirnet.stores.base import PostRecord


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    content: str = Field(..., description="Post text")


class PostUpdate(BaseModel):
    content: str = Field(..., description="Replacement post text")


class PostResponse(BaseModel):
    """Schema for post information returned by the API.

    ``username`` and ``avatar`` are the author's display fields as copied onto
    the post.
    """

    id: str
    author_id: str
    username: str
    avatar: str | None
    content: str
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, post: PostRecord) -> PostResponse:
        return cls(
            id=post.id,
            author_id=post.author_id,
            username=post.author_username,
            avatar=post.author_avatar,
            content=post.body,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostDeletedResponse(BaseModel):
    message: str
    interactions_deleted: int
