"""Payload validation tests for waste record create/update content."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from wastelog.services import snapshot_service
from wastelog.services.errors import ValidationError
from wastelog.services.waste_service import validate_changes, validate_new_record


def _payload(**overrides) -> dict:
    payload = {
        "branch_id": 1,
        "item_name": "Tomatoes",
        "quantity": "5",
        "unit": "kg",
        "value": "12.50",
        "reason_code": "SPOILAGE",
        "occurred_at": "2026-01-15",
    }
    payload.update(overrides)
    return payload


def test_valid_payload_becomes_normalized_snapshot() -> None:
    snapshot = validate_new_record(_payload(item_name="  Cherry   tomatoes "))

    assert snapshot == {
        "branch_id": 1,
        "item_name": "Cherry tomatoes",
        "quantity": "5.000",
        "unit": "kg",
        "value": "12.50",
        "reason_code": "SPOILAGE",
        "photo_ref": None,
        "occurred_at": "2026-01-15",
    }


def test_camel_case_keys_are_accepted() -> None:
    snapshot = validate_new_record(
        {
            "branchId": 2,
            "itemName": "Bread rolls",
            "quantity": 12,
            "unit": "pieces",
            "value": "6.00",
            "reasonCode": "OVERPRODUCTION",
            "photoRef": "https://cdn.example.com/waste/1.jpg",
            "occurredAt": "2026-02-01",
        }
    )

    assert snapshot["branch_id"] == 2
    assert snapshot["reason_code"] == "OVERPRODUCTION"
    assert snapshot["photo_ref"] == "https://cdn.example.com/waste/1.jpg"


def test_missing_date_defaults_to_today() -> None:
    payload = _payload()
    payload.pop("occurred_at")

    snapshot = validate_new_record(payload)

    assert snapshot["occurred_at"] == datetime.now(timezone.utc).date().isoformat()


@pytest.mark.parametrize(
    ("overrides", "message"),
    [
        ({"unit": "tons"}, "unit"),
        ({"quantity": "-1"}, "quantity"),
        ({"item_name": "   "}, "Item name is required"),
        ({"photo_ref": "ftp://files.example.com/1.jpg"}, "http(s) URL"),
        ({"quantity": "1", "value": "60000"}, "unreasonably high"),
        ({"reason_code": "PLATE_WASTE", "quantity": "150"}, "too high"),
        ({"colour": "red"}, "colour"),
    ],
)
def test_invalid_payloads_are_rejected(overrides: dict, message: str) -> None:
    with pytest.raises(ValidationError) as exc_info:
        validate_new_record(_payload(**overrides))

    assert exc_info.value.status_code == 422
    assert message in exc_info.value.message


def test_future_date_is_rejected() -> None:
    tomorrow = (datetime.now(timezone.utc).date() + timedelta(days=2)).isoformat()

    with pytest.raises(ValidationError) as exc_info:
        validate_new_record(_payload(occurred_at=tomorrow))

    assert "future" in exc_info.value.message


def test_empty_payload_is_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_new_record({})


def test_changes_merge_onto_current_snapshot() -> None:
    current = {"id": 9, **validate_new_record(_payload())}

    changes, merged = validate_changes(current, {"quantity": "3"})

    assert changes == {"quantity": Decimal("3")}
    assert merged["id"] == 9
    assert snapshot_service.diff_snapshots(current, merged) == {"quantity": {"before": "5.000", "after": "3.000"}}


def test_update_requires_at_least_one_field() -> None:
    current = {"id": 9, **validate_new_record(_payload())}

    with pytest.raises(ValidationError) as exc_info:
        validate_changes(current, {})

    assert "At least one field" in exc_info.value.message


def test_merged_update_is_revalidated() -> None:
    current = {"id": 9, **validate_new_record(_payload(quantity="500"))}

    with pytest.raises(ValidationError) as exc_info:
        validate_changes(current, {"reason_code": "PLATE_WASTE"})

    assert "too high" in exc_info.value.message


def test_update_cannot_clear_required_fields() -> None:
    current = {"id": 9, **validate_new_record(_payload())}

    with pytest.raises(ValidationError):
        validate_changes(current, {"item_name": None})
