"""Waste record ORM model."""

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wastelog.db.base import Base

WASTE_UNITS = ("kg", "g", "pieces", "liters", "portions")
REASON_CODES = ("SPOILAGE", "OVERPRODUCTION", "PLATE_WASTE", "BUFFET_LEFTOVER")


class WasteRecord(Base):
    """Single logged instance of discarded inventory at a branch."""

    __tablename__ = "waste_records"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(primary_key=True)
    branch_id: Mapped[int] = mapped_column(ForeignKey("branches.id"), nullable=False, index=True)
    item_name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    unit: Mapped[str] = mapped_column(Enum(*WASTE_UNITS, name="waste_unit"), nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    reason_code: Mapped[str] = mapped_column(Enum(*REASON_CODES, name="waste_reason"), nullable=False)
    photo_ref: Mapped[str | None] = mapped_column(String(500), nullable=True)
    occurred_at: Mapped[date] = mapped_column(Date, nullable=False, default=lambda: datetime.now(timezone.utc).date())
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

    branch: Mapped["Branch"] = relationship(back_populates="waste_records")
