"""Registration and login on top of the identity store."""
from __future__ import annotations

import logging

from asirnet.core import security
from asirnet.core.errors import InvalidCredentials
from asirnet.stores.base import IdentityStore, UserRecord, require_text

__all__ = ["register", "authenticate"]

logger = logging.getLogger(__name__)


def register(
    identity: IdentityStore,
    username: str,
    password: str,
    bio: str | None = None,
    avatar: str | None = None,
) -> UserRecord:
    """Create a user, storing only a digest of ``password``.

    Raises:
        ValidationFailed: If the username or password is missing.
        DuplicateIdentity: If the username is already registered.
    """
    username = require_text(username, "username & password")
    password = require_text(password, "username & password")
    user = identity.register(
        username,
        security.hash_password(password),
        bio=bio,
        avatar=avatar,
    )
    logger.info("Registered user %s", user.id)
    return user


def authenticate(identity: IdentityStore, username: str, password: str) -> UserRecord:
    """Return the user owning ``username`` if ``password`` matches.

    Unknown usernames and wrong passwords fail identically.
    """
    user = identity.find_by_username(username or "")
    if user is None or not security.verify_password(password or "", user.password_digest):
        raise InvalidCredentials()
    return user
