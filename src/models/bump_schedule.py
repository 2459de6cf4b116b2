from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base
from src.models.base import TimestampMixin


class BumpSchedule(Base, TimestampMixin):
    """Remaining bumps and next due time for one vehicle ad.

    ``ad_id`` is not a foreign key: a schedule can outlive its ad, in which
    case the next tick deactivates it.
    """

    __tablename__ = "bump_schedules"
    __table_args__ = (
        CheckConstraint("remaining_bumps >= 0", name="ck_bump_remaining_non_negative"),
        CheckConstraint("interval_hours >= 1", name="ck_bump_interval_positive"),
        Index("ix_bump_schedules_due", "is_active", "next_bump_time"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    ad_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    remaining_bumps: Mapped[int] = mapped_column(Integer, nullable=False)
    interval_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    next_bump_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    last_bump_time: Mapped[Optional[datetime]] = mapped_column(DateTime)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # Lease held by the scheduler instance currently advancing this row
    claimed_until: Mapped[Optional[datetime]] = mapped_column(DateTime)

    def __repr__(self) -> str:
        return (
            f"<BumpSchedule ad={self.ad_id} remaining={self.remaining_bumps} "
            f"next={self.next_bump_time}>"
        )
