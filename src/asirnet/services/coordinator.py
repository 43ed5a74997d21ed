"""Consistency coordination across the identity, content and interaction stores.

Posts carry a copy of their author's username and avatar, and reactions and
comments point at posts only by identifier. No storage engine enforces either
relationship, so every operation that touches more than one store goes
through :class:`ConsistencyCoordinator`:

- profile edits are propagated to the author snapshot on every post;
- deleting a user deletes their posts and the interactions on those posts;
- deleting a post deletes the interactions on it.

Each operation is an ordered list of named steps that only ever runs
forward. When all stores share one backend the steps run inside a single
transaction. Otherwise each step commits on its own, and a failure after an
earlier step committed is reported as :class:`PartialFailure` instead of being
rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from asirnet.core import security
from asirnet.core.errors import AsirnetError, Forbidden, PartialFailure, ValidationFailed
from asirnet.stores.base import StoreBundle, UserRecord, require_text

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("username", "password", "bio", "avatar")


@dataclass(frozen=True)
class SagaStep:
    """A named unit of work that commits independently."""

    name: str
    action: Callable[[], Any]


@dataclass
class CascadeReport:
    """What a cascading delete removed."""

    posts_deleted: int = 0
    interactions_deleted: int = 0
    post_ids: list[str] = field(default_factory=list)


class ConsistencyCoordinator:
    """Runs multi-store operations over one request's :class:`StoreBundle`."""

    def __init__(self, stores: StoreBundle) -> None:
        self.stores = stores

    def _run(self, operation: str, steps: Sequence[SagaStep]) -> list[Any]:
        """Execute ``steps`` in order and return their results.

        Raises:
            AsirnetError: The first step's own error, or any error when the
                stores share one transactional backend (nothing is committed).
            PartialFailure: A later step failed after earlier ones committed.
        """
        completed: list[str] = []
        results: list[Any] = []
        with self.stores.transaction():
            for step in steps:
                logger.debug("%s: running step %s", operation, step.name)
                try:
                    results.append(step.action())
                except AsirnetError as err:
                    if not completed or self.stores.shared_backend:
                        raise
                    logger.error(
                        "%s: step %s failed after %s committed",
                        operation,
                        step.name,
                        ", ".join(completed),
                        exc_info=True,
                    )
                    raise PartialFailure(step.name, completed) from err
                completed.append(step.name)
        return results

    def update_profile(self, user_id: str, fields: Mapping[str, Any]) -> UserRecord:
        """Apply a profile edit and propagate display fields to the user's posts.

        Args:
            user_id: Identifier of the user being edited.
            fields: Any subset of ``username``, ``password``, ``bio`` and
                ``avatar``. ``None`` values are ignored.

        Returns:
            The updated user record.

        Raises:
            ValidationFailed: If a field is unknown or a username/password is empty.
            NotFound: If the user does not exist.
            DuplicateIdentity: If the new username is taken.
            PartialFailure: If the profile changed but posts could not be updated.
        """
        changes = self._profile_changes(fields)
        steps = [
            SagaStep("update_identity", lambda: self.stores.identity.update(user_id, changes)),
            SagaStep("propagate_author_snapshot", lambda: self._propagate(user_id)),
        ]
        user, refreshed = self._run("update_profile", steps)
        logger.info("Profile %s updated; %d posts refreshed", user_id, refreshed)
        return user

    def _profile_changes(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailed(f"Unknown profile fields: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if value is None:
                continue
            if key == "username":
                changes["username"] = require_text(value, "username")
            elif key == "password":
                changes["password_digest"] = security.hash_password(
                    require_text(value, "password")
                )
            else:
                changes[key] = value
        return changes

    def _propagate(self, user_id: str) -> int:
        # Re-read so the snapshot reflects the committed identity row.
        user = self.stores.identity.get(user_id)
        return self.stores.content.update_author_snapshot(user_id, user.snapshot)

    def delete_user(self, user_id: str) -> CascadeReport:
        """Delete a user, their posts and every interaction on those posts.

        Interactions go first and the user record last. Every step leaves the
        posts (or the user) that the next attempt needs to find, so a failed
        cascade can be resubmitted without orphaning anything.

        Raises:
            NotFound: If the user does not exist.
            PartialFailure: If a later step failed after an earlier one committed.
        """
        self.stores.identity.get(user_id)
        report = CascadeReport()
        report.post_ids = [post.id for post in self.stores.content.list_by_author(user_id)]

        def purge_interactions() -> int:
            return sum(
                self.stores.interactions.delete_all_by_post(post_id)
                for post_id in report.post_ids
            )

        steps = [
            SagaStep("delete_interactions", purge_interactions),
            SagaStep("delete_posts", lambda: self.stores.content.delete_all_by_author(user_id)),
            SagaStep("delete_user", lambda: self.stores.identity.delete(user_id)),
        ]
        report.interactions_deleted, report.posts_deleted, _ = self._run("delete_user", steps)
        logger.info(
            "Deleted user %s with %d posts and %d interactions",
            user_id,
            report.posts_deleted,
            report.interactions_deleted,
        )
        return report

    def delete_post(self, post_id: str, requester_id: str) -> CascadeReport:
        """Delete a post owned by ``requester_id`` and the interactions on it.

        Ownership is checked before anything is removed. The post itself goes
        last so a failed delete can be resubmitted.

        Raises:
            NotFound: If the post does not exist.
            Forbidden: If ``requester_id`` is not the author.
            PartialFailure: If the interactions were removed but the post was not.
        """
        post = self.stores.content.get(post_id)
        if post.author_id != requester_id:
            raise Forbidden()

        steps = [
            SagaStep(
                "delete_interactions",
                lambda: self.stores.interactions.delete_all_by_post(post_id),
            ),
            SagaStep("delete_post", lambda: self.stores.content.delete(post_id, requester_id)),
        ]
        removed, _ = self._run("delete_post", steps)
        return CascadeReport(posts_deleted=1, interactions_deleted=removed, post_ids=[post_id])
