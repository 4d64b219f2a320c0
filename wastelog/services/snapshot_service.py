"""Snapshot helpers for waste record audit, diff and conflict checks.

A snapshot is a plain JSON-safe dict holding the content fields of a waste
record. Decimals are stored as fixed-scale strings and dates as ISO strings so
that a snapshot captured from a persisted row compares equal to one built from
an equivalent validated payload.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from wastelog.models.waste_record import WasteRecord

RECORD_FIELDS: tuple[str, ...] = (
    "branch_id",
    "item_name",
    "quantity",
    "unit",
    "value",
    "reason_code",
    "photo_ref",
    "occurred_at",
)

DECIMAL_SCALES: dict[str, Decimal] = {
    "quantity": Decimal("0.001"),
    "value": Decimal("0.01"),
}


def _serialize_value(field: str, value: Any) -> Any:
    if value is None:
        return None
    if field in DECIMAL_SCALES:
        return format(Decimal(str(value)).quantize(DECIMAL_SCALES[field]), "f")
    if field == "occurred_at":
        return value.isoformat() if isinstance(value, date) else str(value)
    if field == "branch_id":
        return int(value)
    return value


def _deserialize_value(field: str, value: Any) -> Any:
    if value is None:
        return None
    if field in DECIMAL_SCALES:
        return Decimal(value)
    if field == "occurred_at":
        return date.fromisoformat(value)
    return value


def capture_snapshot(record: WasteRecord) -> dict[str, Any]:
    """Capture the persisted state of a record, including its id."""
    snapshot: dict[str, Any] = {"id": record.id}
    for field in RECORD_FIELDS:
        snapshot[field] = _serialize_value(field, getattr(record, field))
    return snapshot


def snapshot_from_values(values: dict[str, Any]) -> dict[str, Any]:
    """Build a content snapshot from validated payload values."""
    return {field: _serialize_value(field, values.get(field)) for field in RECORD_FIELDS}


def merge_snapshot(original: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
    """Return ``original`` with the content fields from ``changes`` applied."""
    merged = dict(original)
    for field in RECORD_FIELDS:
        if field in changes:
            merged[field] = _serialize_value(field, changes[field])
    return merged


def content_of(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Strip everything but content fields from a snapshot."""
    return {field: snapshot.get(field) for field in RECORD_FIELDS}


def diff_snapshots(before: dict[str, Any] | None, after: dict[str, Any] | None) -> dict[str, dict[str, Any]]:
    """Return per-field ``{"before": ..., "after": ...}`` for fields that differ."""
    before_content = content_of(before or {})
    after_content = content_of(after or {})
    changes: dict[str, dict[str, Any]] = {}
    for field in RECORD_FIELDS:
        if before_content[field] != after_content[field]:
            changes[field] = {"before": before_content[field], "after": after_content[field]}
    return changes


def matches_record(snapshot: dict[str, Any], record: WasteRecord | None) -> bool:
    """Return whether the live record is the snapshot's record and still equals its content."""
    if record is None:
        return False
    if snapshot.get("id") is not None and snapshot["id"] != record.id:
        return False
    return not diff_snapshots(snapshot, capture_snapshot(record))


def record_values(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Convert snapshot content back into ORM column values."""
    return {field: _deserialize_value(field, snapshot.get(field)) for field in RECORD_FIELDS}
