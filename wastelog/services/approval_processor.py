"""Elevated-only decisions on pending review requests.

Approval re-reads the live waste record, compares it with the request's
original snapshot and applies the staged mutation. The record write, the audit
entries and the compare-and-swap status update commit together or not at all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wastelog.models import ReviewRequest, User, WasteRecord
from wastelog.services import snapshot_service, waste_service
from wastelog.services.audit_service import log_action
from wastelog.services.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ReviewWorkflowError,
    StorageError,
    ValidationError,
)
from wastelog.services.review_service import commit_unit
from wastelog.services.review_status import APPROVED, DECISION_STATUS, PENDING, decision_values, ensure_transition
from wastelog.services.scope_guards import ensure_elevated

logger = logging.getLogger(__name__)

STALE_SNAPSHOT_MESSAGE = "The waste record changed after this request was submitted; re-fetch and resubmit."


@dataclass
class DecisionResult:
    review_request: ReviewRequest
    record: WasteRecord | None = None


def _normalize_decision(decision: str | None) -> str:
    new_status = DECISION_STATUS.get(str(decision or "").strip().upper())
    if new_status is None:
        raise ValidationError("Decision must be APPROVE or REJECT.")
    return new_status


def _require_notes(notes: str | None) -> str:
    cleaned = (notes or "").strip()
    if not cleaned:
        raise ValidationError("Decision notes are required.")
    return cleaned


def _load_live_record(db: Session, review_request: ReviewRequest) -> WasteRecord:
    record = db.scalar(
        select(WasteRecord)
        .where(WasteRecord.id == review_request.target_record_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    if record is None or not snapshot_service.matches_record(review_request.original_snapshot, record):
        changed = (
            sorted(snapshot_service.diff_snapshots(review_request.original_snapshot, snapshot_service.capture_snapshot(record)))
            if record is not None
            else ["<deleted>"]
        )
        logger.warning(
            "[REVIEW] Stale snapshot for review_request_id=%s record_id=%s (changed=%s)",
            review_request.id,
            review_request.target_record_id,
            changed,
        )
        raise ConflictError(STALE_SNAPSHOT_MESSAGE)
    return record


def _apply_staged_mutation(db: Session, actor: User, review_request: ReviewRequest) -> WasteRecord | None:
    if review_request.action == "CREATE":
        record = waste_service.insert_record(db, snapshot_service.content_of(review_request.proposed_snapshot or {}))
        log_action(
            db,
            actor=actor,
            action_type="WASTE_CREATE",
            waste_record_id=record.id,
            review_request_id=review_request.id,
            after_snapshot=snapshot_service.capture_snapshot(record),
        )
        return record

    record = _load_live_record(db, review_request)
    before = snapshot_service.capture_snapshot(record)
    if review_request.action == "UPDATE":
        waste_service.write_record(db, record, review_request.proposed_snapshot or {})
        log_action(
            db,
            actor=actor,
            action_type="WASTE_UPDATE",
            waste_record_id=record.id,
            review_request_id=review_request.id,
            before_snapshot=before,
            after_snapshot=snapshot_service.capture_snapshot(record),
        )
        return record

    waste_service.remove_record(db, record)
    log_action(
        db,
        actor=actor,
        action_type="WASTE_DELETE",
        waste_record_id=before["id"],
        review_request_id=review_request.id,
        before_snapshot=before,
    )
    return None


def decide_review_request(
    db: Session,
    actor: User,
    review_request_id: int,
    decision: str,
    notes: str,
) -> DecisionResult:
    """Approve or reject a pending review request as a single transaction."""
    ensure_elevated(actor)
    new_status = _normalize_decision(decision)
    notes = _require_notes(notes)
    actor_id = actor.id

    try:
        review_request = db.scalar(
            select(ReviewRequest)
            .where(ReviewRequest.id == review_request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if review_request is None:
            raise NotFoundError("Review request not found.")
        ensure_transition(review_request.status, new_status)

        record: WasteRecord | None = None
        if new_status == APPROVED:
            record = _apply_staged_mutation(db, actor, review_request)

        now = datetime.now(timezone.utc)
        values = decision_values(new_status, decided_by=actor_id, notes=notes, now=now)
        if review_request.action == "CREATE" and record is not None:
            values["target_record_id"] = record.id
        result = db.execute(
            update(ReviewRequest)
            .where(ReviewRequest.id == review_request.id, ReviewRequest.status == PENDING)
            .values(**values)
        )
        if result.rowcount != 1:
            raise InvalidStateError("Review request was decided by someone else.")

        log_action(
            db,
            actor=actor,
            action_type="REVIEW_APPROVE" if new_status == APPROVED else "REVIEW_REJECT",
            waste_record_id=values.get("target_record_id", review_request.target_record_id),
            review_request_id=review_request.id,
            before_snapshot=review_request.original_snapshot,
            after_snapshot=review_request.proposed_snapshot,
        )
        commit_unit(db, "review decision")
    except ReviewWorkflowError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "[REVIEW] user_id=%s decision on review_request_id=%s failed in the store; transaction rolled back.",
            actor_id,
            review_request_id,
        )
        raise StorageError("Could not persist the review decision.") from exc

    db.refresh(review_request)
    if record is not None:
        db.refresh(record)
    logger.info(
        "[REVIEW] user_id=%s %s review_request_id=%s (%s record_id=%s)",
        actor.id,
        new_status.lower(),
        review_request.id,
        review_request.action,
        review_request.target_record_id,
    )
    return DecisionResult(review_request=review_request, record=record)
