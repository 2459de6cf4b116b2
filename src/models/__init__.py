from src.models.bump_schedule import BumpSchedule
from src.models.vehicle_ad import (
    PROMOTION_BOOSTED,
    PROMOTION_NONE,
    STATUS_ACTIVE,
    STATUS_INACTIVE,
    VehicleAd,
)

__all__ = [
    "BumpSchedule",
    "PROMOTION_BOOSTED",
    "PROMOTION_NONE",
    "STATUS_ACTIVE",
    "STATUS_INACTIVE",
    "VehicleAd",
]
