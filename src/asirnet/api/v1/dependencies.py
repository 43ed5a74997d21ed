"""Shared API dependencies for storage access and authentication."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from asirnet.core.errors import NotFound, Unauthenticated
from asirnet.core.security import decode_access_token
from asirnet.services.coordinator import ConsistencyCoordinator
from asirnet.stores.base import StoreBundle, UserRecord
from asirnet.stores.factory import StoreProvider

# HTTP Bearer scheme for JWT authentication; missing headers are reported as 401 below.
bearer_scheme = HTTPBearer(auto_error=False)


def get_store_provider(request: Request) -> StoreProvider:
    """Return the storage provider configured on application start-up."""
    return request.app.state.store_provider


def get_stores(
    provider: Annotated[StoreProvider, Depends(get_store_provider)],
) -> Generator[StoreBundle, None, None]:
    """Yield the stores for a single request."""
    with provider.open() as stores:
        yield stores


# Type alias for store bundle dependency
StoresDep = Annotated[StoreBundle, Depends(get_stores)]


def get_coordinator(stores: StoresDep) -> ConsistencyCoordinator:
    return ConsistencyCoordinator(stores)


CoordinatorDep = Annotated[ConsistencyCoordinator, Depends(get_coordinator)]


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    stores: StoresDep,
) -> UserRecord:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Bearer token credentials, if any were sent
        stores: Request-scoped stores

    Returns:
        The user named by the token's subject

    Raises:
        Unauthenticated: If the token is missing or invalid, or its user is gone
    """
    if credentials is None:
        raise Unauthenticated("No token")
    payload = decode_access_token(credentials.credentials)
    try:
        return stores.identity.get(payload["sub"])
    except NotFound as err:
        raise Unauthenticated("User not found") from err


# Type alias for current user dependency
CurrentUserDep = Annotated[UserRecord, Depends(get_current_user)]
