"""Waste record API schemas and payload validation."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from wastelog.core.config import settings

WasteUnit = Literal["kg", "g", "pieces", "liters", "portions"]
ReasonCode = Literal["SPOILAGE", "OVERPRODUCTION", "PLATE_WASTE", "BUFFET_LEFTOVER"]

REASON_QUANTITY_LIMITS: dict[str, Decimal] = {
    "PLATE_WASTE": Decimal("100"),
    "SPOILAGE": Decimal("1000"),
}


def _clean_item_name(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.split())
    if not cleaned:
        raise ValueError("Item name is required")
    return cleaned


def _clean_photo_ref(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    parsed = urlparse(value.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Photo reference must be an http(s) URL")
    return value.strip()


def _check_not_future(value: date | None) -> date | None:
    if value is not None and value > datetime.now(timezone.utc).date():
        raise ValueError("Waste date cannot be in the future")
    return value


class _WastePayloadBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    @field_validator("item_name", check_fields=False)
    @classmethod
    def _item_name(cls, value: str | None) -> str | None:
        return _clean_item_name(value)

    @field_validator("photo_ref", check_fields=False)
    @classmethod
    def _photo_ref(cls, value: str | None) -> str | None:
        return _clean_photo_ref(value)

    @field_validator("occurred_at", check_fields=False)
    @classmethod
    def _occurred_at(cls, value: date | None) -> date | None:
        return _check_not_future(value)


class WasteRecordPayload(_WastePayloadBase):
    """Complete waste record content, used for CREATE and for merged UPDATEs."""

    branch_id: int | None = None
    item_name: str = Field(max_length=100)
    quantity: Decimal = Field(ge=0, max_digits=12, decimal_places=3)
    unit: WasteUnit
    value: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    reason_code: ReasonCode
    photo_ref: str | None = None
    occurred_at: date | None = None

    @model_validator(mode="after")
    def _check_plausibility(self) -> "WasteRecordPayload":
        if self.quantity > 0 and self.value / self.quantity > settings.waste_max_value_per_unit:
            raise ValueError("Value per unit is unreasonably high for waste")
        limit = REASON_QUANTITY_LIMITS.get(self.reason_code)
        if limit is not None and self.quantity > limit:
            raise ValueError("Quantity is too high for the selected waste reason")
        return self


class WasteRecordChanges(_WastePayloadBase):
    """Partial update; only supplied fields are merged onto the current record."""

    branch_id: int | None = None
    item_name: str | None = Field(default=None, max_length=100)
    quantity: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=3)
    unit: WasteUnit | None = None
    value: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    reason_code: ReasonCode | None = None
    photo_ref: str | None = None
    occurred_at: date | None = None

    @model_validator(mode="after")
    def _require_a_field(self) -> "WasteRecordChanges":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


class WasteRecordRead(BaseModel):
    id: int
    branch_id: int
    item_name: str
    quantity: Decimal
    unit: str
    value: Decimal
    reason_code: str
    photo_ref: str | None = None
    occurred_at: date
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WasteDeleteRequest(BaseModel):
    justification: str | None = None


class WasteRecordFilter(BaseModel):
    branch_id: int | None = None
    reason_code: ReasonCode | None = None
    occurred_from: date | None = None
    occurred_to: date | None = None


class WasteMutationRequest(BaseModel):
    """Create/update body: record fields plus an optional justification."""

    payload: dict[str, Any] = Field(default_factory=dict)
    justification: str | None = None


class AuditEntryRead(BaseModel):
    id: int
    timestamp: datetime
    actor_identifier: str
    action_type: str
    waste_record_id: int | None = None
    review_request_id: int | None = None
    before_snapshot: dict[str, Any] | None = None
    after_snapshot: dict[str, Any] | None = None

    model_config = ConfigDict(from_attributes=True)
