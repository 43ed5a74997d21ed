"""Post publishing and read-side helpers that consult more than one store."""
from __future__ import annotations

from dataclasses import dataclass

from asirnet.core.errors import NotFound
from asirnet.stores.base import PostRecord, StoreBundle

__all__ = ["publish_post", "ReactionSummary", "summarize_reactions"]

LIKE = "like"


def publish_post(stores: StoreBundle, author_id: str, body: str) -> PostRecord:
    """Create a post stamped with the author's current display fields.

    Raises:
        NotFound: If the author does not exist.
        ValidationFailed: If ``body`` is empty.
    """
    try:
        author = stores.identity.get(author_id)
    except NotFound as err:
        raise NotFound("Author not found") from err
    return stores.content.create(author.id, body, author.snapshot)


@dataclass(frozen=True)
class ReactionSummary:
    likes: int
    comments: int
    by_kind: dict[str, int]


def summarize_reactions(stores: StoreBundle, post_id: str) -> ReactionSummary:
    """Return reaction and comment counts for ``post_id``.

    ``likes`` counts reactions of kind ``like`` only; every kind is in
    ``by_kind``. Unknown posts simply have zero of each.
    """
    by_kind = stores.interactions.reactions_by_kind(post_id)
    return ReactionSummary(
        likes=by_kind.get(LIKE, 0),
        comments=stores.interactions.count_comments(post_id),
        by_kind=by_kind,
    )
