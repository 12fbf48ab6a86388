"""
Publication state machine tests.
"""

from datetime import UTC, datetime
from itertools import product

import pytest

from axotl.domain.entities import STATES, Publication
from axotl.domain.errors import InvalidTransitionError
from axotl.domain.state import (
    TRANSITIONS,
    can_transition,
    check_transition,
    is_publicly_visible,
    transition,
)

NOW = datetime(2026, 3, 2, 10, 0, tzinfo=UTC)


def _pub(state="borrador", **kw) -> Publication:
    return Publication(id=1, owner_id=1, type_id=1, state=state, **kw)


class TestTable:
    def test_owner_transitions(self):
        assert can_transition("borrador", "en_revision", "owner")
        assert can_transition("rechazado", "en_revision", "owner")

    def test_reviewer_transitions(self):
        assert can_transition("en_revision", "publicado", "reviewer")
        assert can_transition("en_revision", "rechazado", "reviewer")

    def test_actors_are_not_interchangeable(self):
        assert not can_transition("en_revision", "publicado", "owner")
        assert not can_transition("borrador", "en_revision", "reviewer")

    @pytest.mark.parametrize("current,new", list(product(STATES, STATES)))
    def test_everything_else_rejected(self, current, new):
        allowed = current == new or (current, new) in TRANSITIONS
        for actor in ("owner", "reviewer"):
            if can_transition(current, new, actor):
                assert allowed

    def test_check_transition_names_required_actor(self):
        with pytest.raises(InvalidTransitionError) as exc:
            check_transition("en_revision", "publicado", "owner")
        assert "reviewer" in str(exc.value)
        assert exc.value.from_state == "en_revision"
        assert exc.value.to_state == "publicado"

    def test_unknown_transition(self):
        with pytest.raises(InvalidTransitionError):
            check_transition("publicado", "borrador", "owner")


class TestTransition:
    def test_publish_sets_published_at(self):
        result = transition(_pub("en_revision"), "publicado", NOW, "reviewer")
        assert result.state == "publicado"
        assert result.published_at == NOW
        assert result.updated_at == NOW

    def test_reject_clears_published_at(self):
        result = transition(_pub("en_revision"), "rechazado", NOW, "reviewer")
        assert result.published_at is None

    def test_submission_forces_private(self):
        result = transition(_pub("rechazado", is_private=False), "en_revision", NOW, "owner")
        assert result.is_private is True

    def test_returns_new_object(self):
        original = _pub("borrador")
        result = transition(original, "en_revision", NOW, "owner")
        assert original.state == "borrador"
        assert result is not original

    def test_same_state_is_noop(self):
        original = _pub("publicado", published_at=NOW)
        assert transition(original, "publicado", NOW, "owner") == original


class TestVisibilityPredicate:
    @pytest.mark.parametrize(
        "deleted,state,is_private", list(product([False, True], STATES, [False, True]))
    )
    def test_matches_three_conditions(self, deleted, state, is_private):
        p = _pub(state, deleted=deleted, is_private=is_private)
        expected = (not deleted) and state == "publicado" and (not is_private)
        assert is_publicly_visible(p) is expected
