"""Reaction and comment endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from asirnet.api.v1.dependencies import CurrentUserDep, StoresDep
from asirnet.schemas.interaction import (
    CommentCreate,
    CommentResponse,
    ReactionCounts,
    ReactionCreate,
    ReactionResponse,
)
from asirnet.services.posts import summarize_reactions

router = APIRouter(tags=["interactions"])


@router.post("/react", response_model=ReactionResponse)
def react(
    payload: ReactionCreate,
    current_user: CurrentUserDep,
    stores: StoresDep,
) -> ReactionResponse:
    """React to a post as the authenticated user.

    Reacting twice with the same kind returns the original reaction.
    """
    stores.content.get(payload.post_id)
    reaction = stores.interactions.add_reaction(payload.post_id, current_user.id, payload.kind)
    return ReactionResponse.from_record(reaction)


@router.post("/comment", response_model=CommentResponse)
def comment(
    payload: CommentCreate,
    current_user: CurrentUserDep,
    stores: StoresDep,
) -> CommentResponse:
    stores.content.get(payload.post_id)
    created = stores.interactions.add_comment(payload.post_id, current_user.id, payload.content)
    return CommentResponse.from_record(created)


@router.get("/QuanOfReact", response_model=ReactionCounts)
def reaction_counts(
    stores: StoresDep,
    post_id: Annotated[str, Query(alias="postId", description="Post to count")],
) -> ReactionCounts:
    """Return like and comment totals for a post."""
    summary = summarize_reactions(stores, post_id)
    return ReactionCounts(
        likes=summary.likes,
        comments=summary.comments,
        by_kind=summary.by_kind,
    )
