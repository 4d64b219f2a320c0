"""Review request API schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from wastelog.schemas.waste import WasteRecordRead

ReviewAction = Literal["CREATE", "UPDATE", "DELETE"]
ReviewStatus = Literal["PENDING", "APPROVED", "REJECTED"]


class ReviewRequestFilter(BaseModel):
    status: ReviewStatus | None = None
    action: ReviewAction | None = None
    branch_id: int | None = None
    requested_by: int | None = None


class ReviewRequestRead(BaseModel):
    """Serialized review request."""

    id: int
    target_record_id: int | None = None
    branch_id: int
    action: str
    status: str
    original_snapshot: dict[str, Any] | None = None
    proposed_snapshot: dict[str, Any] | None = None
    justification: str | None = None
    requested_by: int
    decided_by: int | None = None
    decision_notes: str | None = None
    created_at: datetime
    updated_at: datetime
    decided_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ReviewRequestDetail(ReviewRequestRead):
    """Review request with the field-level diff of its snapshots."""

    changes: dict[str, dict[str, Any]] = Field(default_factory=dict)


class ReviewDecisionRequest(BaseModel):
    decision: str
    notes: str


class ReviewDecisionResponse(BaseModel):
    review_request: ReviewRequestRead
    record: WasteRecordRead | None = None


class MutationResponse(BaseModel):
    applied_directly: bool
    record: WasteRecordRead | None = None
    review_request: ReviewRequestRead | None = None
