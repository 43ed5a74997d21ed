"""Registration and login endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from asirnet.api.v1.dependencies import CurrentUserDep, StoresDep
from asirnet.core.security import create_access_token
from asirnet.schemas.user import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from asirnet.services import accounts

router = APIRouter(tags=["authentication"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=RegisterResponse)
@router.post("/signup", response_model=RegisterResponse, include_in_schema=False)
def register(payload: RegisterRequest, stores: StoresDep) -> RegisterResponse:
    """Create an account.

    Raises:
        ValidationFailed: If username or password is blank
        DuplicateIdentity: If the username is taken
    """
    user = accounts.register(
        stores.identity,
        payload.username,
        payload.password,
        bio=payload.bio,
        avatar=payload.avatar,
    )
    return RegisterResponse(message="Registered!", user=UserResponse.from_record(user))


@router.post("/login", response_model=LoginResponse)
@router.post("/signin", response_model=LoginResponse, include_in_schema=False)
def login(payload: LoginRequest, stores: StoresDep) -> LoginResponse:
    """Exchange a username and password for a bearer token."""
    user = accounts.authenticate(stores.identity, payload.username, payload.password)
    token = create_access_token(user.id, user.username)
    logger.debug("Issued token for user %s", user.id)
    return LoginResponse(token=token, token_type="bearer", user=UserResponse.from_record(user))


@router.get("/me", response_model=UserResponse)
def read_me(current_user: CurrentUserDep) -> UserResponse:
    """Return the authenticated user's profile."""
    return UserResponse.from_record(current_user)
