"""Review request endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wastelog.api.deps import to_http_error
from wastelog.core.security import get_current_user
from wastelog.db.session import get_db
from wastelog.models import User
from wastelog.schemas.review import (
    ReviewAction,
    ReviewDecisionRequest,
    ReviewDecisionResponse,
    ReviewRequestDetail,
    ReviewRequestFilter,
    ReviewRequestRead,
    ReviewStatus,
)
from wastelog.schemas.waste import WasteRecordRead
from wastelog.services import review_service
from wastelog.services.approval_processor import decide_review_request
from wastelog.services.errors import ReviewWorkflowError

router: APIRouter = APIRouter()


@router.get("", response_model=list[ReviewRequestRead])
def list_review_requests(
    status_value: ReviewStatus | None = Query(default=None, alias="status"),
    action: ReviewAction | None = Query(default=None),
    branch_id: int | None = Query(default=None),
    requested_by: int | None = Query(default=None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[ReviewRequestRead]:
    filters = ReviewRequestFilter(status=status_value, action=action, branch_id=branch_id, requested_by=requested_by)
    rows = review_service.list_review_requests(db, current_user, filters)
    return [ReviewRequestRead.model_validate(row) for row in rows]


@router.get("/{review_request_id}", response_model=ReviewRequestDetail)
def get_review_request(
    review_request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReviewRequestDetail:
    try:
        review_request = review_service.get_review_request(db, current_user, review_request_id)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    detail = ReviewRequestDetail.model_validate(review_request)
    detail.changes = review_service.diff_review_request(review_request)
    return detail


@router.post("/{review_request_id}/decision", response_model=ReviewDecisionResponse)
def decide(
    review_request_id: int,
    payload: ReviewDecisionRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReviewDecisionResponse:
    """Approve or reject a pending request (elevated actors only)."""
    try:
        result = decide_review_request(db, current_user, review_request_id, payload.decision, payload.notes)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    return ReviewDecisionResponse(
        review_request=ReviewRequestRead.model_validate(result.review_request),
        record=WasteRecordRead.model_validate(result.record) if result.record is not None else None,
    )
