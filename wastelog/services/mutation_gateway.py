"""Single entry point for waste record create/update/delete intents.

Elevated actors write straight to the waste store. Scoped actors get a PENDING
review request holding before/after snapshots instead; nothing is applied
until an elevated actor approves it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wastelog.models import ReviewRequest, User, WasteRecord
from wastelog.services import snapshot_service, waste_service
from wastelog.services.audit_service import log_action
from wastelog.services.errors import AuthorizationError, ReviewWorkflowError, StorageError, ValidationError
from wastelog.services.review_service import commit_unit, follow_record_branch, stage_review_request
from wastelog.services.scope_guards import ensure_can_mutate_record, ensure_scoped_branch

logger = logging.getLogger(__name__)

MUTATION_ACTIONS: tuple[str, ...] = ("CREATE", "UPDATE", "DELETE")


@dataclass
class MutationResult:
    applied_directly: bool
    record: WasteRecord | None = None
    review_request: ReviewRequest | None = None


def normalize_action(action: str | None) -> str:
    normalized = str(action or "").strip().upper()
    if normalized not in MUTATION_ACTIONS:
        raise ValidationError(f"Unknown action: {action!r}")
    return normalized


def _clean_justification(justification: str | None) -> str | None:
    if justification is None:
        return None
    cleaned = justification.strip()
    return cleaned or None


def _require_justification(justification: str | None) -> str:
    cleaned = _clean_justification(justification)
    if cleaned is None:
        raise ValidationError("A justification is required for update and delete requests.")
    return cleaned


def submit_mutation(
    db: Session,
    actor: User,
    action: str,
    target_id: int | None = None,
    payload: dict[str, Any] | None = None,
    justification: str | None = None,
) -> MutationResult:
    """Apply a mutation directly or stage it for review, depending on the actor's role."""
    action = normalize_action(action)
    actor_id = actor.id
    try:
        if actor.is_elevated:
            return _apply_directly(db, actor, action, target_id, payload)
        return _stage_for_review(db, actor, action, target_id, payload, justification)
    except ReviewWorkflowError as exc:
        db.rollback()
        logger.warning("[GATEWAY] user_id=%s %s rejected: %s", actor_id, action, exc.message)
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[GATEWAY] user_id=%s %s failed in the store; transaction rolled back.", actor_id, action)
        raise StorageError("Could not persist the waste record change.") from exc


def _apply_directly(
    db: Session,
    actor: User,
    action: str,
    target_id: int | None,
    payload: dict[str, Any] | None,
) -> MutationResult:
    if action == "CREATE":
        snapshot = waste_service.validate_new_record(payload)
        waste_service.ensure_branch_exists(db, snapshot["branch_id"])
        record = waste_service.insert_record(db, snapshot)
        log_action(
            db,
            actor=actor,
            action_type="WASTE_CREATE",
            waste_record_id=record.id,
            after_snapshot=snapshot_service.capture_snapshot(record),
        )
        commit_unit(db, "waste record create")
        db.refresh(record)
        logger.info("[GATEWAY] user_id=%s created waste record_id=%s directly", actor.id, record.id)
        return MutationResult(applied_directly=True, record=record)

    record = waste_service.load_record(db, target_id, for_update=True)
    before = snapshot_service.capture_snapshot(record)

    if action == "UPDATE":
        changes, merged = waste_service.validate_changes(before, payload)
        moved = merged["branch_id"] != record.branch_id
        if moved:
            waste_service.ensure_branch_exists(db, merged["branch_id"])
        waste_service.write_record(db, record, merged)
        if moved:
            follow_record_branch(db, record.id, merged["branch_id"])
        log_action(
            db,
            actor=actor,
            action_type="WASTE_UPDATE",
            waste_record_id=record.id,
            before_snapshot=before,
            after_snapshot=snapshot_service.capture_snapshot(record),
        )
        commit_unit(db, "waste record update")
        db.refresh(record)
        logger.info(
            "[GATEWAY] user_id=%s updated waste record_id=%s directly (fields=%s)",
            actor.id,
            record.id,
            sorted(changes),
        )
        return MutationResult(applied_directly=True, record=record)

    record_id = record.id
    waste_service.remove_record(db, record)
    log_action(db, actor=actor, action_type="WASTE_DELETE", waste_record_id=record_id, before_snapshot=before)
    commit_unit(db, "waste record delete")
    logger.info("[GATEWAY] user_id=%s deleted waste record_id=%s directly", actor.id, record_id)
    return MutationResult(applied_directly=True)


def _stage_for_review(
    db: Session,
    actor: User,
    action: str,
    target_id: int | None,
    payload: dict[str, Any] | None,
    justification: str | None,
) -> MutationResult:
    own_branch = ensure_scoped_branch(actor)
    original: dict[str, Any] | None = None
    proposed: dict[str, Any] | None = None

    if action == "CREATE":
        proposed = waste_service.validate_new_record(payload)
        if proposed["branch_id"] is None:
            proposed["branch_id"] = own_branch
        elif proposed["branch_id"] != own_branch:
            raise AuthorizationError("Waste records can only be proposed for your own branch.")
        target_id = None
        justification = _clean_justification(justification)
    else:
        record = waste_service.load_record(db, target_id)
        ensure_can_mutate_record(actor, record)
        justification = _require_justification(justification)
        original = snapshot_service.capture_snapshot(record)
        if action == "UPDATE":
            _, proposed = waste_service.validate_changes(original, payload)
            if proposed["branch_id"] != record.branch_id:
                raise AuthorizationError("Waste records cannot be moved to another branch.")

    review_request = stage_review_request(
        db,
        actor=actor,
        action=action,
        branch_id=own_branch,
        target_record_id=target_id,
        original_snapshot=original,
        proposed_snapshot=proposed,
        justification=justification,
    )
    log_action(
        db,
        actor=actor,
        action_type="REVIEW_SUBMIT",
        waste_record_id=target_id,
        review_request_id=review_request.id,
        before_snapshot=original,
        after_snapshot=proposed,
    )
    commit_unit(db, "review request")
    db.refresh(review_request)
    logger.info(
        "[GATEWAY] user_id=%s staged %s review_request_id=%s for record_id=%s",
        actor.id,
        action,
        review_request.id,
        target_id,
    )
    return MutationResult(applied_directly=False, review_request=review_request)
