"""Reaction and comment schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from asirnet.stores.base import CommentRecord, ReactionRecord


class ReactionCreate(BaseModel):
    post_id: str = Field(..., description="Post being reacted to")
    kind: str = Field("like", description="Reaction kind, e.g. 'like'")


class ReactionResponse(BaseModel):
    id: str
    post_id: str
    user_key: str
    kind: str
    created_at: datetime

    @classmethod
    def from_record(cls, reaction: ReactionRecord) -> ReactionResponse:
        return cls(
            id=reaction.id,
            post_id=reaction.post_id,
            user_key=reaction.user_key,
            kind=reaction.kind,
            created_at=reaction.created_at,
        )


class CommentCreate(BaseModel):
    post_id: str = Field(..., description="Post being commented on")
    content: str = Field(..., description="Comment text")


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user_key: str
    content: str
    created_at: datetime

    @classmethod
    def from_record(cls, comment: CommentRecord) -> CommentResponse:
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            user_key=comment.user_key,
            content=comment.body,
            created_at=comment.created_at,
        )


class ReactionCounts(BaseModel):
    """Totals shown under a post."""

    likes: int
    comments: int
    by_kind: dict[str, int] = Field(default_factory=dict)
