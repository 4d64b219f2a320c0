"""Snapshot capture, diff and merge tests."""

from datetime import date
from decimal import Decimal

from wastelog.models import WasteRecord
from wastelog.services import snapshot_service


def _record(**overrides) -> WasteRecord:
    values = {
        "id": 7,
        "branch_id": 1,
        "item_name": "Tomatoes",
        "quantity": Decimal("5.000"),
        "unit": "kg",
        "value": Decimal("12.50"),
        "reason_code": "SPOILAGE",
        "photo_ref": None,
        "occurred_at": date(2026, 1, 15),
    }
    values.update(overrides)
    return WasteRecord(**values)


def test_captured_snapshot_matches_equivalent_payload_values() -> None:
    captured = snapshot_service.capture_snapshot(_record())
    built = snapshot_service.snapshot_from_values(
        {
            "branch_id": 1,
            "item_name": "Tomatoes",
            "quantity": Decimal("5"),
            "unit": "kg",
            "value": Decimal("12.5"),
            "reason_code": "SPOILAGE",
            "photo_ref": None,
            "occurred_at": date(2026, 1, 15),
        }
    )

    assert captured["id"] == 7
    assert captured["quantity"] == "5.000"
    assert captured["value"] == "12.50"
    assert captured["occurred_at"] == "2026-01-15"
    assert snapshot_service.content_of(captured) == built
    assert snapshot_service.diff_snapshots(captured, built) == {}


def test_diff_reports_changed_fields_only() -> None:
    before = snapshot_service.capture_snapshot(_record())
    after = snapshot_service.merge_snapshot(before, {"quantity": Decimal("3")})

    assert snapshot_service.diff_snapshots(before, after) == {"quantity": {"before": "5.000", "after": "3.000"}}
    assert after["id"] == before["id"]
    assert after["item_name"] == "Tomatoes"


def test_diff_against_missing_side_lists_every_populated_field() -> None:
    after = snapshot_service.capture_snapshot(_record())

    changes = snapshot_service.diff_snapshots(None, after)

    assert set(changes) == {"branch_id", "item_name", "quantity", "unit", "value", "reason_code", "occurred_at"}
    assert changes["item_name"] == {"before": None, "after": "Tomatoes"}


def test_matches_record_detects_live_changes() -> None:
    record = _record()
    snapshot = snapshot_service.capture_snapshot(record)

    assert snapshot_service.matches_record(snapshot, record) is True

    record.value = Decimal("13.00")
    assert snapshot_service.matches_record(snapshot, record) is False
    assert snapshot_service.matches_record(snapshot, None) is False


def test_record_values_restore_column_types() -> None:
    snapshot = snapshot_service.capture_snapshot(_record(photo_ref="https://cdn.example.com/p/1.jpg"))

    values = snapshot_service.record_values(snapshot)

    assert "id" not in values
    assert values["quantity"] == Decimal("5.000")
    assert values["value"] == Decimal("12.50")
    assert values["occurred_at"] == date(2026, 1, 15)
    assert values["photo_ref"] == "https://cdn.example.com/p/1.jpg"


def test_matches_record_rejects_a_different_record_with_equal_content() -> None:
    snapshot = snapshot_service.capture_snapshot(_record())
    other = _record()
    other.id = snapshot["id"] + 1

    assert snapshot_service.matches_record(snapshot, other) is False
    assert snapshot_service.matches_record(snapshot_service.content_of(snapshot), other) is True
