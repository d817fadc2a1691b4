"""Approval state machine tests."""

import pytest

from reviewgate.errors import InvalidState, InvalidTransition, ValidationError
from reviewgate.services import state_machine as sm


@pytest.mark.parametrize(
    "outcome, trigger",
    [
        (sm.APPROVED, "approved"),
        (sm.REJECTED, "manual"),
        (sm.NEEDS_REVISION, "revision_requested"),
    ],
)
def test_pending_accepts_every_outcome(outcome, trigger):
    assert sm.transition(sm.PENDING, outcome) == (outcome, trigger)


@pytest.mark.parametrize("current", [sm.APPROVED, sm.REJECTED, sm.NEEDS_REVISION])
@pytest.mark.parametrize("outcome", sm.OUTCOMES)
def test_resolved_approvals_cannot_be_decided_again(current, outcome):
    with pytest.raises(InvalidTransition):
        sm.transition(current, outcome)


def test_unknown_outcome():
    with pytest.raises(ValidationError):
        sm.transition(sm.PENDING, "pending")


def test_only_approved_is_deletable():
    sm.ensure_deletable(sm.APPROVED)
    for status in (sm.PENDING, sm.REJECTED, sm.NEEDS_REVISION):
        with pytest.raises(InvalidState):
            sm.ensure_deletable(status)


def test_comments_only_while_pending():
    sm.ensure_commentable(sm.PENDING)
    for status in (sm.APPROVED, sm.REJECTED, sm.NEEDS_REVISION):
        with pytest.raises(InvalidState):
            sm.ensure_commentable(status)
