"""Post-related endpoints for the Asirnet API."""

from __future__ import annotations

from fastapi import APIRouter

from asirnet.api.v1.dependencies import CoordinatorDep, CurrentUserDep, StoresDep
from asirnet.schemas.interaction import CommentResponse
from asirnet.schemas.post import PostCreate, PostDeletedResponse, PostResponse, PostUpdate
from asirnet.services.posts import publish_post

router = APIRouter(tags=["posts"])


@router.get("/posts", response_model=list[PostResponse])
@router.get("/post", response_model=list[PostResponse], include_in_schema=False)
def list_posts(stores: StoresDep) -> list[PostResponse]:
    """List all posts, newest first."""
    return [PostResponse.from_record(post) for post in stores.content.list()]


@router.post("/posts", response_model=PostResponse)
@router.post("/post", response_model=PostResponse, include_in_schema=False)
def create_post(
    payload: PostCreate,
    current_user: CurrentUserDep,
    stores: StoresDep,
) -> PostResponse:
    """Publish a post as the authenticated user.

    Raises:
        ValidationFailed: If the content is blank
        NotFound: If the author no longer exists
    """
    post = publish_post(stores, current_user.id, payload.content)
    return PostResponse.from_record(post)


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(post_id: str, stores: StoresDep) -> PostResponse:
    return PostResponse.from_record(stores.content.get(post_id))


@router.put("/posts/{post_id}", response_model=PostResponse)
@router.put("/post/{post_id}", response_model=PostResponse, include_in_schema=False)
def update_post(
    post_id: str,
    payload: PostUpdate,
    current_user: CurrentUserDep,
    stores: StoresDep,
) -> PostResponse:
    """Replace a post's content. Only the author may edit.

    Raises:
        NotFound: If the post does not exist
        Forbidden: If the caller is not the author
    """
    post = stores.content.update(post_id, current_user.id, payload.content)
    return PostResponse.from_record(post)


@router.delete("/posts/{post_id}", response_model=PostDeletedResponse)
@router.delete("/post/{post_id}", response_model=PostDeletedResponse, include_in_schema=False)
def delete_post(
    post_id: str,
    current_user: CurrentUserDep,
    coordinator: CoordinatorDep,
) -> PostDeletedResponse:
    """Delete a post and every reaction and comment on it."""
    report = coordinator.delete_post(post_id, current_user.id)
    return PostDeletedResponse(
        message="Post deleted",
        interactions_deleted=report.interactions_deleted,
    )


@router.get("/posts/{post_id}/comments", response_model=list[CommentResponse])
def list_comments(post_id: str, stores: StoresDep) -> list[CommentResponse]:
    stores.content.get(post_id)
    return [CommentResponse.from_record(c) for c in stores.interactions.list_comments(post_id)]
