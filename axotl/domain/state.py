from datetime import datetime
from typing import Any, Literal

from axotl.domain.entities import Publication, PublicationState
from axotl.domain.errors import InvalidTransitionError

Actor = Literal["owner", "reviewer"]

# (from, to) -> who may perform it. Anything missing is rejected.
TRANSITIONS: dict[tuple[PublicationState, PublicationState], Actor] = {
    ("borrador", "en_revision"): "owner",
    ("rechazado", "en_revision"): "owner",
    ("en_revision", "publicado"): "reviewer",
    ("en_revision", "rechazado"): "reviewer",
}


def can_transition(current: PublicationState, new: PublicationState, actor: Actor) -> bool:
    """
    Determine if a state change is allowed for the given actor.
    Staying in the same state is always allowed.
    """
    if current == new:
        return True
    return TRANSITIONS.get((current, new)) == actor


def check_transition(current: PublicationState, new: PublicationState, actor: Actor) -> None:
    if can_transition(current, new, actor):
        return
    required = TRANSITIONS.get((current, new))
    if required is None:
        raise InvalidTransitionError(current, new)
    raise InvalidTransitionError(current, new, f"only a {required} may perform it")


def transition(
    item: Publication, new_state: PublicationState, now: datetime, actor: Actor
) -> Publication:
    """
    Return a NEW Publication with the updated state and timestamps.
    Raises InvalidTransitionError if the transition is not in the table.
    """
    check_transition(item.state, new_state, actor)
    if item.state == new_state:
        return item.model_copy()

    updates: dict[str, Any] = {"state": new_state, "updated_at": now}

    # published_at is only ever set when entering publicado
    if new_state == "publicado":
        updates["published_at"] = now
    else:
        updates["published_at"] = None

    if new_state in ("borrador", "en_revision"):
        updates["is_private"] = True

    return item.model_copy(update=updates)


def is_publicly_visible(item: Publication) -> bool:
    """Visibility predicate for every public read path."""
    return not item.deleted and item.state == "publicado" and not item.is_private


# SQL rendition of is_publicly_visible for the repositories; p = publications alias
PUBLIC_VISIBILITY_SQL = "p.deleted = 0 AND p.state = 'publicado' AND p.is_private = 0"
