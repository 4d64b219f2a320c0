"""Review request ORM model for staged waste record mutations."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, JSON, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wastelog.db.base import Base

REVIEW_ACTIONS = ("CREATE", "UPDATE", "DELETE")
REVIEW_STATUS_VALUES = ("PENDING", "APPROVED", "REJECTED")


class ReviewRequest(Base):
    """Staged create/update/delete awaiting an elevated decision.

    Rows are never deleted; a decided request is the audit trail of the change.
    ``target_record_id`` is a plain integer and outlives the record after an
    approved DELETE.
    """

    __tablename__ = "review_requests"

    id: Mapped[int] = mapped_column(primary_key=True)
    target_record_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    branch_id: Mapped[int] = mapped_column(ForeignKey("branches.id"), nullable=False, index=True)
    action: Mapped[str] = mapped_column(Enum(*REVIEW_ACTIONS, name="review_action"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="PENDING")
    original_snapshot: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    proposed_snapshot: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    justification: Mapped[str | None] = mapped_column(String(500), nullable=True)
    requested_by: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    decided_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    decision_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    requester: Mapped["User"] = relationship(foreign_keys=[requested_by])
    decider: Mapped["User"] = relationship(foreign_keys=[decided_by])

    __table_args__ = (
        Index(
            "uq_review_requests_pending_target",
            "target_record_id",
            unique=True,
            sqlite_where=text("status = 'PENDING'"),
            postgresql_where=text("status = 'PENDING'"),
        ),
        Index("ix_review_requests_status_created", "status", "created_at"),
    )
