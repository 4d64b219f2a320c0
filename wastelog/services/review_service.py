"""Review ledger: persistence, scoped listing and diffs of review requests."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from wastelog.models import ReviewRequest, User
from wastelog.schemas.review import ReviewRequestFilter
from wastelog.services import snapshot_service
from wastelog.services.errors import ConflictError, NotFoundError, StorageError
from wastelog.services.review_status import PENDING
from wastelog.services.scope_guards import ensure_can_access_review, scope_review_query

logger = logging.getLogger(__name__)

PENDING_CONFLICT_MESSAGE = "A change is already awaiting approval for this record."
PENDING_INDEX_NAME = "uq_review_requests_pending_target"


def commit_unit(db: Session, context: str) -> None:
    """Commit the session as one unit; roll back and raise StorageError on failure."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[REVIEW] Commit failed during %s; transaction rolled back.", context)
        raise StorageError(f"Could not persist {context}.") from exc


def _violates_pending_index(exc: IntegrityError) -> bool:
    # PostgreSQL names the index; SQLite names the indexed column.
    message = str(exc.orig)
    return PENDING_INDEX_NAME in message or "review_requests.target_record_id" in message


def find_pending_for_record(db: Session, target_record_id: int) -> ReviewRequest | None:
    return db.scalar(
        select(ReviewRequest)
        .where(ReviewRequest.target_record_id == target_record_id, ReviewRequest.status == PENDING)
        .limit(1)
    )


def stage_review_request(
    db: Session,
    *,
    actor: User,
    action: str,
    branch_id: int,
    target_record_id: int | None,
    original_snapshot: dict[str, Any] | None,
    proposed_snapshot: dict[str, Any] | None,
    justification: str | None,
) -> ReviewRequest:
    """Insert a PENDING review request inside the caller's transaction.

    The partial unique index on ``target_record_id`` allows one PENDING row per
    record; the lookup beforehand covers the uncontended case.
    """
    if target_record_id is not None and find_pending_for_record(db, target_record_id) is not None:
        raise ConflictError(PENDING_CONFLICT_MESSAGE)

    actor_id = actor.id
    now = datetime.now(timezone.utc)
    review_request = ReviewRequest(
        target_record_id=target_record_id,
        branch_id=branch_id,
        action=action,
        status=PENDING,
        original_snapshot=original_snapshot,
        proposed_snapshot=proposed_snapshot,
        justification=justification,
        requested_by=actor_id,
        created_at=now,
        updated_at=now,
    )
    db.add(review_request)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if not _violates_pending_index(exc):
            logger.exception("[REVIEW] Review request insert failed for user_id=%s; transaction rolled back.", actor_id)
            raise StorageError("Could not persist review request.") from exc
        logger.warning(
            "[REVIEW] Concurrent pending request rejected for record_id=%s by user_id=%s",
            target_record_id,
            actor_id,
        )
        raise ConflictError(PENDING_CONFLICT_MESSAGE) from exc
    return review_request


def follow_record_branch(db: Session, target_record_id: int, branch_id: int) -> int:
    """Move PENDING requests of a record to the branch the record now belongs to."""
    result = db.execute(
        update(ReviewRequest)
        .where(ReviewRequest.target_record_id == target_record_id, ReviewRequest.status == PENDING)
        .values(branch_id=branch_id, updated_at=datetime.now(timezone.utc))
    )
    return int(result.rowcount or 0)


def get_review_request(db: Session, user: User, review_request_id: int) -> ReviewRequest:
    review_request = db.get(ReviewRequest, review_request_id)
    if review_request is None:
        raise NotFoundError("Review request not found.")
    ensure_can_access_review(user, review_request)
    return review_request


def list_review_requests(db: Session, user: User, filters: ReviewRequestFilter | None = None) -> list[ReviewRequest]:
    """Return scope-filtered review requests, newest first."""
    filters = filters or ReviewRequestFilter()
    statement = scope_review_query(select(ReviewRequest), user, filters.branch_id)
    if filters.status is not None:
        statement = statement.where(ReviewRequest.status == filters.status)
    if filters.action is not None:
        statement = statement.where(ReviewRequest.action == filters.action)
    if filters.requested_by is not None:
        statement = statement.where(ReviewRequest.requested_by == filters.requested_by)
    statement = statement.order_by(ReviewRequest.created_at.desc(), ReviewRequest.id.desc())
    return list(db.scalars(statement).all())


def diff_review_request(review_request: ReviewRequest) -> dict[str, dict[str, Any]]:
    """Field-level before/after diff of a request's snapshots."""
    return snapshot_service.diff_snapshots(review_request.original_snapshot, review_request.proposed_snapshot)
