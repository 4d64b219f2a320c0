"""Centralized role and branch-scope guards for waste records and review requests."""

from __future__ import annotations

from sqlalchemy import Select, false

from wastelog.models import ReviewRequest, User, WasteRecord
from wastelog.services.errors import AuthorizationError, NotFoundError


def ensure_elevated(user: User) -> None:
    """Ensure the actor holds cross-branch authority."""
    if not user.is_elevated:
        raise AuthorizationError("Only elevated administrators can perform this action.")


def ensure_scoped_branch(user: User) -> int:
    """Return the scoped actor's branch id, rejecting misconfigured accounts."""
    if user.branch_id is None:
        raise AuthorizationError("Account is not assigned to a branch.")
    return user.branch_id


def _narrow(statement: Select, column, user: User, branch_id: int | None) -> Select:
    if user.is_elevated:
        if branch_id is not None:
            statement = statement.where(column == branch_id)
        return statement
    own_branch = ensure_scoped_branch(user)
    if branch_id is not None and branch_id != own_branch:
        return statement.where(false())
    return statement.where(column == own_branch)


def scope_waste_query(statement: Select, user: User, branch_id: int | None = None) -> Select:
    """Restrict a waste record select to rows the actor may see."""
    return _narrow(statement, WasteRecord.branch_id, user, branch_id)


def scope_review_query(statement: Select, user: User, branch_id: int | None = None) -> Select:
    """Restrict a review request select to rows the actor may see.

    ``ReviewRequest.branch_id`` holds the target record's branch, or the
    requester's branch for CREATE requests.
    """
    return _narrow(statement, ReviewRequest.branch_id, user, branch_id)


def ensure_can_access_record(user: User, record: WasteRecord) -> None:
    """Branch check for a single record; out-of-scope rows read as missing."""
    if user.is_elevated:
        return
    if record.branch_id != ensure_scoped_branch(user):
        raise NotFoundError("Waste record not found.")


def ensure_can_mutate_record(user: User, record: WasteRecord) -> None:
    """Branch check before a scoped actor stages an UPDATE or DELETE."""
    if user.is_elevated:
        return
    if record.branch_id != ensure_scoped_branch(user):
        raise AuthorizationError("Waste record belongs to another branch.")


def ensure_can_access_review(user: User, review_request: ReviewRequest) -> None:
    if user.is_elevated:
        return
    if review_request.branch_id != ensure_scoped_branch(user):
        raise NotFoundError("Review request not found.")
