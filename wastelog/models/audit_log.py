"""Audit log model for applied and staged waste record changes."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from wastelog.db.base import Base

AUDIT_ACTIONS = (
    "WASTE_CREATE",
    "WASTE_UPDATE",
    "WASTE_DELETE",
    "REVIEW_SUBMIT",
    "REVIEW_APPROVE",
    "REVIEW_REJECT",
)


class AuditLog(Base):
    """Append-only trail; each row is written in the transaction it describes."""

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    actor_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    actor_identifier: Mapped[str] = mapped_column(String(128), nullable=False)
    action_type: Mapped[str] = mapped_column(String(32), nullable=False)
    waste_record_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    review_request_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    before_snapshot: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    after_snapshot: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_audit_logs_waste_record", "waste_record_id", "id"),
        Index("ix_audit_logs_review_request", "review_request_id"),
    )
