"""Approval state machine — legal status transitions and their snapshot triggers.

``pending`` is the only state that accepts a decision. ``approved``,
``rejected`` and ``needs-revision`` are terminal for the same id; a fresh
request has to be created instead. Deletion is only allowed once approved.
"""

from __future__ import annotations

from reviewgate.errors import InvalidState, InvalidTransition, ValidationError

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
NEEDS_REVISION = "needs-revision"

STATUSES = (PENDING, APPROVED, REJECTED, NEEDS_REVISION)
OUTCOMES = (APPROVED, REJECTED, NEEDS_REVISION)

# outcome -> snapshot trigger captured with the transition
_DECISION_TRIGGERS = {
    APPROVED: "approved",
    REJECTED: "manual",
    NEEDS_REVISION: "revision_requested",
}


def transition(current: str, outcome: str) -> tuple[str, str]:
    """Return ``(new_status, snapshot_trigger)`` for a decision on *current*."""
    if outcome not in _DECISION_TRIGGERS:
        raise ValidationError(
            f"Unknown outcome '{outcome}'. Must be one of: {', '.join(OUTCOMES)}"
        )
    if current != PENDING:
        raise InvalidTransition(
            f"Approval is already '{current}'; create a new request instead"
        )
    return outcome, _DECISION_TRIGGERS[outcome]


def ensure_commentable(status: str) -> None:
    if status != PENDING:
        raise InvalidState(f"Cannot comment on an approval with status '{status}'")


def ensure_deletable(status: str) -> None:
    if status != APPROVED:
        raise InvalidState(
            f"BLOCKED: cannot delete approval with status '{status}'; "
            "only approved requests can be cleaned up"
        )


def can_proceed(status: str) -> bool:
    return status == APPROVED
