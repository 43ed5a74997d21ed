"""Domain exceptions surfaced to the HTTP boundary.

Every error carries the status code the API layer maps it to and a
human-readable message. Stores and the consistency coordinator raise these;
``asirnet.main`` renders them as ``{"error": message}`` bodies.
"""

from __future__ import annotations

from collections.abc import Sequence


class AsirnetError(Exception):
    """Base class for all errors reported to API callers."""

    status_code: int = 500
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, object]:
        return {"error": self.message}


class ValidationFailed(AsirnetError):
    """A required field was missing or empty."""

    status_code = 400
    default_message = "Missing or empty required field"


class DuplicateIdentity(AsirnetError):
    """The identity key is already held by a live user."""

    status_code = 400
    default_message = "User exists"


class InvalidCredentials(AsirnetError):
    status_code = 401
    default_message = "Invalid credentials: No such account or password is incorrect"


class Unauthenticated(AsirnetError):
    status_code = 401
    default_message = "Could not validate credentials"


class Forbidden(AsirnetError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AsirnetError):
    status_code = 404
    default_message = "Not found"


class StorageUnavailable(AsirnetError):
    """The storage backend could not be reached or rejected the operation."""

    status_code = 500
    default_message = "Storage backend unavailable"


class PartialFailure(AsirnetError):
    """A multi-step operation failed after an earlier step had committed.

    Attributes:
        step: Name of the step that failed.
        completed: Names of the steps that committed before the failure.
    """

    status_code = 500

    def __init__(
        self,
        step: str,
        completed: Sequence[str] = (),
        message: str | None = None,
    ) -> None:
        self.step = step
        self.completed = list(completed)
        super().__init__(
            message
            or f"Step '{step}' failed; your change may be partially applied"
        )

    def to_payload(self) -> dict[str, object]:
        return {"error": self.message, "step": self.step, "completed": self.completed}
