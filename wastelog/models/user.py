"""User (actor) ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wastelog.db.base import Base

ROLE_ELEVATED = "ELEVATED"
ROLE_SCOPED = "SCOPED"
USER_ROLES = (ROLE_ELEVATED, ROLE_SCOPED)

LEGACY_ROLE_ALIASES: dict[str, str] = {
    "ADMIN": ROLE_ELEVATED,
    "SUPER_ADMIN": ROLE_ELEVATED,
    "BRANCH_ADMIN": ROLE_SCOPED,
}


def normalize_user_role(role: str | None) -> str:
    """Return canonical role name, accepting lowercase and legacy aliases."""
    normalized = str(role or "").strip().upper()
    normalized = LEGACY_ROLE_ALIASES.get(normalized, normalized)
    if normalized not in USER_ROLES:
        raise ValueError(f"Invalid role: {role!r}")
    return normalized


class User(Base):
    """Account resolved from a bearer token; acts on waste records and reviews."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum(*USER_ROLES, name="user_role"), nullable=False)
    branch_id: Mapped[int | None] = mapped_column(ForeignKey("branches.id"), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    branch: Mapped["Branch"] = relationship(back_populates="users")

    @property
    def is_elevated(self) -> bool:
        return self.role == ROLE_ELEVATED
