"""Branch administration for elevated actors."""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from wastelog.models import Branch, ReviewRequest, User, WasteRecord
from wastelog.schemas.branch import BranchCreate
from wastelog.services.errors import ConflictError, NotFoundError
from wastelog.services.review_service import commit_unit
from wastelog.services.scope_guards import ensure_elevated

logger = logging.getLogger(__name__)


def list_branches(db: Session, user: User) -> list[Branch]:
    """Elevated actors see every branch; scoped actors only their own."""
    statement = select(Branch).order_by(Branch.name.asc())
    if not user.is_elevated:
        statement = statement.where(Branch.id == user.branch_id)
    return list(db.scalars(statement).all())


def _ensure_unique_name(db: Session, name: str, exclude_id: int | None = None) -> None:
    statement = select(Branch.id).where(func.lower(Branch.name) == name.lower())
    if exclude_id is not None:
        statement = statement.where(Branch.id != exclude_id)
    if db.scalar(statement.limit(1)) is not None:
        raise ConflictError("A branch with this name already exists.")


def create_branch(db: Session, user: User, payload: BranchCreate) -> Branch:
    ensure_elevated(user)
    _ensure_unique_name(db, payload.name)
    branch = Branch(name=payload.name, location=payload.location)
    db.add(branch)
    commit_unit(db, "branch create")
    db.refresh(branch)
    logger.info("[BRANCH] user_id=%s created branch_id=%s", user.id, branch.id)
    return branch


def update_branch(db: Session, user: User, branch_id: int, payload: BranchCreate) -> Branch:
    ensure_elevated(user)
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise NotFoundError("Branch not found.")
    _ensure_unique_name(db, payload.name, exclude_id=branch_id)
    branch.name = payload.name
    branch.location = payload.location
    commit_unit(db, "branch update")
    db.refresh(branch)
    return branch


def delete_branch(db: Session, user: User, branch_id: int) -> None:
    """Delete a branch that has no users, waste records or review requests."""
    ensure_elevated(user)
    branch = db.get(Branch, branch_id)
    if branch is None:
        raise NotFoundError("Branch not found.")

    user_count = db.scalar(select(func.count(User.id)).where(User.branch_id == branch_id)) or 0
    if user_count:
        raise ConflictError(f"Cannot delete branch with assigned users ({user_count}). Reassign or remove users first.")
    record_count = db.scalar(select(func.count(WasteRecord.id)).where(WasteRecord.branch_id == branch_id)) or 0
    if record_count:
        raise ConflictError(f"Cannot delete branch with existing waste records ({record_count}).")
    request_count = db.scalar(select(func.count(ReviewRequest.id)).where(ReviewRequest.branch_id == branch_id)) or 0
    if request_count:
        raise ConflictError(f"Cannot delete branch with review history ({request_count} requests).")

    db.delete(branch)
    commit_unit(db, "branch delete")
    logger.info("[BRANCH] user_id=%s deleted branch_id=%s", user.id, branch_id)
