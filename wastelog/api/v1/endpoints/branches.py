"""Branch endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from wastelog.api.deps import to_http_error
from wastelog.core.security import get_current_user
from wastelog.db.session import get_db
from wastelog.models import Branch, User
from wastelog.schemas.branch import BranchCreate, BranchRead
from wastelog.services import branch_service
from wastelog.services.errors import ReviewWorkflowError

router: APIRouter = APIRouter()


@router.get("", response_model=list[BranchRead])
def list_branches(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)) -> list[Branch]:
    return branch_service.list_branches(db, current_user)


@router.post("", response_model=BranchRead, status_code=status.HTTP_201_CREATED)
def create_branch(
    payload: BranchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Branch:
    try:
        return branch_service.create_branch(db, current_user, payload)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc


@router.put("/{branch_id}", response_model=BranchRead)
def update_branch(
    branch_id: int,
    payload: BranchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Branch:
    try:
        return branch_service.update_branch(db, current_user, branch_id, payload)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc


@router.delete("/{branch_id}")
def delete_branch(
    branch_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, str]:
    try:
        branch_service.delete_branch(db, current_user, branch_id)
    except ReviewWorkflowError as exc:
        raise to_http_error(exc) from exc
    return {"message": "Branch removed"}
