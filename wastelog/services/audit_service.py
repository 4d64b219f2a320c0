"""Audit trail writes and per-record history reads."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from wastelog.models import AuditLog, User
from wastelog.models.audit_log import AUDIT_ACTIONS


def log_action(
    db: Session,
    *,
    actor: User | None,
    action_type: str,
    waste_record_id: int | None = None,
    review_request_id: int | None = None,
    before_snapshot: dict[str, Any] | None = None,
    after_snapshot: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit row on the caller's session; the caller commits."""
    if action_type not in AUDIT_ACTIONS:
        raise ValueError(f"Unknown audit action: {action_type!r}")

    entry = AuditLog(
        actor_user_id=actor.id if actor is not None else None,
        actor_identifier=actor.username if actor is not None else "system",
        action_type=action_type,
        waste_record_id=waste_record_id,
        review_request_id=review_request_id,
        before_snapshot=before_snapshot,
        after_snapshot=after_snapshot,
    )
    db.add(entry)
    return entry


def list_entries_for_record(db: Session, waste_record_id: int) -> list[AuditLog]:
    """Oldest-first history of one waste record, including review activity."""
    statement = select(AuditLog).where(AuditLog.waste_record_id == waste_record_id).order_by(AuditLog.id.asc())
    return list(db.scalars(statement).all())
