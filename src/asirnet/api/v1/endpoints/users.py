"""Profile editing and account deletion endpoints.

Both go through the consistency coordinator: a profile edit must reach the
author snapshot stored on every post, and deleting an account cascades to
the account's posts and the reactions and comments on them.
"""

from __future__ import annotations

from fastapi import APIRouter

from asirnet.api.v1.dependencies import CoordinatorDep, CurrentUserDep, StoresDep
from asirnet.core.errors import Forbidden, NotFound
from asirnet.schemas.user import (
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    UserDeletedResponse,
    UserResponse,
)
from asirnet.services.coordinator import ConsistencyCoordinator
from asirnet.stores.base import UserRecord

router = APIRouter(tags=["users"])


def _ensure_self(user_id: str, current_user: UserRecord) -> None:
    if user_id != current_user.id:
        raise Forbidden()


def _edit_profile(
    coordinator: ConsistencyCoordinator,
    user_id: str,
    payload: ProfileUpdateRequest,
) -> ProfileUpdateResponse:
    user = coordinator.update_profile(user_id, payload.model_dump(exclude_unset=True))
    return ProfileUpdateResponse(
        message="Your account has been updated",
        user=UserResponse.from_record(user),
    )


def _delete_account(coordinator: ConsistencyCoordinator, user_id: str) -> UserDeletedResponse:
    report = coordinator.delete_user(user_id)
    return UserDeletedResponse(
        message="Deleted",
        posts_deleted=report.posts_deleted,
        interactions_deleted=report.interactions_deleted,
    )


@router.get("/users", response_model=list[UserResponse])
def list_users(stores: StoresDep) -> list[UserResponse]:
    """List every user without credentials."""
    return [UserResponse.from_record(user) for user in stores.identity.list_users()]


@router.put("/editprofile", response_model=ProfileUpdateResponse)
def edit_profile(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    coordinator: CoordinatorDep,
) -> ProfileUpdateResponse:
    """Edit the authenticated user's profile and refresh their posts."""
    return _edit_profile(coordinator, current_user.id, payload)


@router.put("/users/{user_id}", response_model=ProfileUpdateResponse)
def update_user(
    user_id: str,
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    coordinator: CoordinatorDep,
) -> ProfileUpdateResponse:
    _ensure_self(user_id, current_user)
    return _edit_profile(coordinator, user_id, payload)


@router.delete("/deleteuser/{username}", response_model=UserDeletedResponse)
def delete_user_by_username(
    username: str,
    current_user: CurrentUserDep,
    stores: StoresDep,
    coordinator: CoordinatorDep,
) -> UserDeletedResponse:
    """Delete an account by username. Users may only delete themselves."""
    user = stores.identity.find_by_username(username)
    if user is None:
        raise NotFound("User not found")
    _ensure_self(user.id, current_user)
    return _delete_account(coordinator, user.id)


@router.delete("/users/{user_id}", response_model=UserDeletedResponse)
def delete_user(
    user_id: str,
    current_user: CurrentUserDep,
    coordinator: CoordinatorDep,
) -> UserDeletedResponse:
    _ensure_self(user_id, current_user)
    return _delete_account(coordinator, user_id)
