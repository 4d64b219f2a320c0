"""Waste record endpoints; every write goes through the mutation gateway."""

from datetime import date

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from wastelog.api.deps import to_http_error
from wastelog.core.security import get_current_user
from wastelog.db.session import get_db
from wastelog.models import User
from wastelog.schemas.review import MutationResponse, ReviewRequestRead
from wastelog.schemas.waste import (
    AuditEntryRead,
    ReasonCode,
    WasteDeleteRequest,
    WasteMutationRequest,
    WasteRecordFilter,
    WasteRecordRead,
)
from wastelog.services import audit_service, waste_service
from wastelog.services.errors import ReviewWorkflowError
from wastelog.services.mutation_gateway import MutationResult, submit_mutation

router: APIRouter = APIRouter()


def _serialize_mutation(result: MutationResult, response: Response) -> MutationResponse:
    response.status_code = status.HTTP_201_CREATED if result.applied_directly else status.HTTP_202_ACCEPTED
    return MutationResponse(
        applied_directly=result.applied_directly,
        record=WasteRecordRead.model_validate(result.record) if result.record is not None else None,
        review_request=(
            ReviewRequestRead.model_validate(result.review_request) if result.review_request is not None else None
        ),
    )


@router.get("", response_model=list[WasteRecordRead])
def list_waste_records(
    branch_id: int | None = Query(default=None),
    reason_code: ReasonCode | None = Query(default=None),
    occurred_from: date | None = Query(default=None),
    occurred_to: date | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[WasteRecordRead]:
    filters = WasteRecordFilter(
        branch_id=branch_id,
        reason_code=reason_code,
        occurred_from=occurred_from,
        occurred_to=occurred_to,
    )
    records = waste_service.list_waste_records(db, current_user, filters)
    return [WasteRecordRead.model_validate(record) for record in records]


@router.get("/{record_id}", response_model=WasteRecordRead)
def get_waste_record(
    record_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> WasteRecordRead:
    try:
        record = waste_service.get_waste_record(db, current_user, record_id)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    return WasteRecordRead.model_validate(record)


@router.get("/{record_id}/history", response_model=list[AuditEntryRead])
def get_waste_record_history(
    record_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[AuditEntryRead]:
    try:
        waste_service.get_waste_record(db, current_user, record_id)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    entries = audit_service.list_entries_for_record(db, record_id)
    return [AuditEntryRead.model_validate(entry) for entry in entries]


@router.post("", response_model=MutationResponse, status_code=status.HTTP_201_CREATED)
def create_waste_record(
    body: WasteMutationRequest,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    """Create directly (elevated) or stage a CREATE review request (scoped)."""
    try:
        result = submit_mutation(db, current_user, "CREATE", payload=body.payload, justification=body.justification)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    return _serialize_mutation(result, response)


@router.put("/{record_id}", response_model=MutationResponse)
def update_waste_record(
    record_id: int,
    body: WasteMutationRequest,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    try:
        result = submit_mutation(
            db,
            current_user,
            "UPDATE",
            target_id=record_id,
            payload=body.payload,
            justification=body.justification,
        )
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    return _serialize_mutation(result, response)


@router.delete("/{record_id}", response_model=MutationResponse)
def delete_waste_record(
    record_id: int,
    response: Response,
    body: WasteDeleteRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    justification = body.justification if body is not None else None
    try:
        result = submit_mutation(db, current_user, "DELETE", target_id=record_id, justification=justification)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    return _serialize_mutation(result, response)
