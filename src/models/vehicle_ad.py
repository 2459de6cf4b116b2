from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.database import Base
from src.models.base import TimestampMixin

PROMOTION_NONE = 0
PROMOTION_BOOSTED = 1

STATUS_INACTIVE = 0
STATUS_ACTIVE = 1


class VehicleAd(Base, TimestampMixin):
    """A vehicle-for-sale listing.

    ``created_at`` doubles as the "last bumped at" timestamp: listings are
    ordered by it, so a bump moves the ad back to the top.
    """

    __tablename__ = "vehicle_ads"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    seller_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    mobile: Mapped[str] = mapped_column(String(30), nullable=False)
    district: Mapped[str] = mapped_column(String(50), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(50))
    vehicle_type: Mapped[str] = mapped_column(String(30), nullable=False)
    condition: Mapped[str] = mapped_column(String(30), nullable=False)
    make: Mapped[str] = mapped_column(String(50), nullable=False)
    model: Mapped[str] = mapped_column(String(50), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[Optional[int]] = mapped_column(Integer)
    ongoing_lease: Mapped[bool] = mapped_column(Boolean, default=False)
    transmission: Mapped[str] = mapped_column(String(20), nullable=False)
    fuel_type: Mapped[str] = mapped_column(String(20), nullable=False)
    engine_capacity: Mapped[Optional[int]] = mapped_column(Integer)
    mileage: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    views: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[int] = mapped_column(Integer, default=STATUS_ACTIVE)  # 1 active / 0 deleted
    promotion: Mapped[int] = mapped_column(Integer, default=PROMOTION_NONE)  # 0 / 1 boosted

    def __repr__(self) -> str:
        return f"<VehicleAd {self.id} {self.make} {self.model} {self.year}>"
