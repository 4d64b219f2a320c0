"""Waste record validation, scoped reads and direct store writes.

Writes here only stage changes on the session; the caller (mutation gateway or
approval processor) owns the transaction and commits once.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from wastelog.models import Branch, User, WasteRecord
from wastelog.schemas.waste import WasteRecordChanges, WasteRecordFilter, WasteRecordPayload
from wastelog.services import snapshot_service
from wastelog.services.errors import NotFoundError, ValidationError
from wastelog.services.scope_guards import ensure_can_access_record, scope_waste_query


def _format_errors(exc: PydanticValidationError) -> str:
    messages: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "__root__")
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Invalid payload"


def validate_new_record(payload: dict[str, Any] | None) -> dict[str, Any]:
    """Validate CREATE content and return a content snapshot."""
    if not payload:
        raise ValidationError("Waste record payload is required.")
    try:
        parsed = WasteRecordPayload.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc
    values = parsed.model_dump()
    if values["occurred_at"] is None:
        values["occurred_at"] = datetime.now(timezone.utc).date()
    return snapshot_service.snapshot_from_values(values)


def validate_changes(current: dict[str, Any], payload: dict[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Validate UPDATE content against the current snapshot.

    Returns the supplied changes and the merged snapshot. The merged record is
    re-validated as a whole so cross-field limits still hold.
    """
    if not payload:
        raise ValidationError("At least one field must be provided for update.")
    try:
        changes = WasteRecordChanges.model_validate(payload).model_dump(exclude_unset=True)
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc
    if "branch_id" in changes and changes["branch_id"] is None:
        changes.pop("branch_id")
    merged = snapshot_service.merge_snapshot(current, changes)
    try:
        WasteRecordPayload.model_validate(snapshot_service.content_of(merged))
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc
    return changes, merged


def ensure_branch_exists(db: Session, branch_id: int | None) -> Branch:
    if branch_id is None:
        raise ValidationError("branch_id is required.")
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise NotFoundError("Branch not found.")
    return branch


def load_record(db: Session, record_id: int | None, *, for_update: bool = False) -> WasteRecord:
    """Load a record by id regardless of scope; NotFoundError when missing."""
    if record_id is None:
        raise ValidationError("A target waste record id is required.")
    statement = select(WasteRecord).where(WasteRecord.id == record_id)
    if for_update:
        statement = statement.with_for_update().execution_options(populate_existing=True)
    record = db.scalar(statement)
    if record is None:
        raise NotFoundError("Waste record not found.")
    return record


def insert_record(db: Session, snapshot: dict[str, Any]) -> WasteRecord:
    now = datetime.now(timezone.utc)
    record = WasteRecord(**snapshot_service.record_values(snapshot), created_at=now, updated_at=now)
    db.add(record)
    db.flush()
    return record


def write_record(db: Session, record: WasteRecord, snapshot: dict[str, Any]) -> WasteRecord:
    """Write snapshot content onto an existing record."""
    for field, value in snapshot_service.record_values(snapshot).items():
        setattr(record, field, value)
    record.updated_at = datetime.now(timezone.utc)
    db.flush()
    return record


def remove_record(db: Session, record: WasteRecord) -> None:
    db.delete(record)
    db.flush()


def get_waste_record(db: Session, user: User, record_id: int) -> WasteRecord:
    """Return one record visible to the actor."""
    record = db.get(WasteRecord, record_id)
    if record is None:
        raise NotFoundError("Waste record not found.")
    ensure_can_access_record(user, record)
    return record


def list_waste_records(db: Session, user: User, filters: WasteRecordFilter | None = None) -> list[WasteRecord]:
    """Return scope-filtered waste records, newest occurrence first."""
    filters = filters or WasteRecordFilter()
    statement = scope_waste_query(select(WasteRecord), user, filters.branch_id)
    if filters.reason_code is not None:
        statement = statement.where(WasteRecord.reason_code == filters.reason_code)
    if filters.occurred_from is not None:
        statement = statement.where(WasteRecord.occurred_at >= filters.occurred_from)
    if filters.occurred_to is not None:
        statement = statement.where(WasteRecord.occurred_at <= filters.occurred_to)
    statement = statement.order_by(WasteRecord.occurred_at.desc(), WasteRecord.id.desc())
    return list(db.scalars(statement).all())
