"""User service operations."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from wastelog.models.branch import Branch
from wastelog.models.user import ROLE_ELEVATED, ROLE_SCOPED, User, normalize_user_role


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username).limit(1))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def create_user(
    db: Session,
    username: str,
    hashed_password: str,
    role: str,
    branch_id: int | None = None,
) -> User:
    """Create an account; scoped users need a branch, elevated users must not have one."""
    canonical_role = normalize_user_role(role)
    if canonical_role == ROLE_SCOPED:
        if branch_id is None:
            raise ValueError("Branch is required for scoped users")
        if db.get(Branch, branch_id) is None:
            raise ValueError("Branch not found")
    if canonical_role == ROLE_ELEVATED and branch_id is not None:
        raise ValueError("Elevated users cannot be assigned to a branch")

    user = User(
        username=username.strip(),
        password_hash=hashed_password,
        role=canonical_role,
        branch_id=branch_id,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def count_elevated_users(db: Session) -> int:
    return len(db.scalars(select(User.id).where(User.role == ROLE_ELEVATED)).all())
