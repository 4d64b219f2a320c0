"""Review request status transition helpers."""

from __future__ import annotations

from datetime import datetime

from wastelog.services.errors import InvalidStateError

PENDING = "PENDING"
APPROVED = "APPROVED"
REJECTED = "REJECTED"

REVIEW_STATUSES: list[str] = [PENDING, APPROVED, REJECTED]

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    PENDING: {APPROVED, REJECTED},
    APPROVED: set(),
    REJECTED: set(),
}

DECISION_STATUS: dict[str, str] = {
    "APPROVE": APPROVED,
    "REJECT": REJECTED,
}


def can_transition(current: str, new: str) -> bool:
    """Return whether a review request can move from current to new status."""
    return new in ALLOWED_TRANSITIONS.get(current, set())


def is_terminal(status: str) -> bool:
    return not ALLOWED_TRANSITIONS.get(status, set())


def ensure_transition(current: str, new: str) -> None:
    """Raise InvalidStateError unless current -> new is a valid transition."""
    if not can_transition(current, new):
        raise InvalidStateError(f"Review request is already {current.lower()} and cannot become {new.lower()}.")


def decision_values(new_status: str, *, decided_by: int, notes: str, now: datetime) -> dict[str, object]:
    """Column values written when a pending request is decided."""
    return {
        "status": new_status,
        "decided_by": decided_by,
        "decision_notes": notes,
        "decided_at": now,
        "updated_at": now,
    }

