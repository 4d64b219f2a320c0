from datetime import datetime, timezone

import pytest

from wastelog.services.errors import InvalidStateError
from wastelog.services.review_status import (
    APPROVED,
    PENDING,
    REJECTED,
    can_transition,
    decision_values,
    ensure_transition,
    is_terminal,
)


def test_pending_can_be_approved_or_rejected() -> None:
    assert can_transition(PENDING, APPROVED) is True
    assert can_transition(PENDING, REJECTED) is True
    assert is_terminal(PENDING) is False


@pytest.mark.parametrize("terminal", [APPROVED, REJECTED])
def test_decided_requests_are_terminal(terminal: str) -> None:
    assert is_terminal(terminal) is True
    assert can_transition(terminal, APPROVED) is False
    assert can_transition(terminal, REJECTED) is False

    with pytest.raises(InvalidStateError) as exc_info:
        ensure_transition(terminal, APPROVED)

    assert exc_info.value.status_code == 409
    assert terminal.lower() in exc_info.value.message


def test_decision_values_stamp_decider_and_time() -> None:
    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    values = decision_values(REJECTED, decided_by=4, notes="Duplicate entry", now=now)

    assert values == {
        "status": REJECTED,
        "decided_by": 4,
        "decision_notes": "Duplicate entry",
        "decided_at": now,
        "updated_at": now,
    }
