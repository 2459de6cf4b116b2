from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Tuple

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.bumps.schedule import (
    AdState,
    ScheduleState,
    parse_positive_int,
    parse_start_at,
    plan_activation,
    utcnow,
)
from src.config import get_settings
from src.errors import AdNotFoundError
from src.models.bump_schedule import BumpSchedule
from src.models.vehicle_ad import VehicleAd


async def activate_bump(
    db: AsyncSession,
    ad_id: int,
    remaining_bumps: Any = None,
    interval_hours: Any = None,
    start_at: Any = None,
    now: Optional[datetime] = None,
) -> Tuple[VehicleAd, BumpSchedule]:
    """Start (or restart) bump promotion for an ad.

    The ad update and the schedule upsert are committed together.

    Raises:
        BumpValidationError: a parameter does not parse.
        AdNotFoundError: the ad does not exist.
    """
    settings = get_settings()
    if remaining_bumps is None:
        remaining_bumps = settings.bump_default_remaining
    if interval_hours is None:
        interval_hours = settings.bump_default_interval_hours

    remaining = parse_positive_int(
        remaining_bumps, "remainingBumps", maximum=settings.bump_max_remaining
    )
    interval = parse_positive_int(
        interval_hours, "intervalHours", maximum=settings.bump_max_interval_hours
    )
    scheduled_start = parse_start_at(start_at)

    ad = await db.get(VehicleAd, ad_id)
    if ad is None:
        raise AdNotFoundError(ad_id)

    now = now or utcnow()
    schedule_state, ad_state, immediate = plan_activation(
        AdState.from_model(ad),
        remaining,
        interval,
        scheduled_start,
        now,
        promote_on_schedule=settings.bump_promote_on_schedule,
    )
    ad_state.apply_to(ad)

    try:
        schedule = await _upsert_schedule(db, ad.id, schedule_state)
        await db.commit()
    except IntegrityError:
        # Another request inserted the schedule first; overwrite it instead
        await db.rollback()
        ad = await db.get(VehicleAd, ad_id)
        if ad is None:
            raise AdNotFoundError(ad_id)
        ad_state.apply_to(ad)
        schedule = await _upsert_schedule(db, ad.id, schedule_state)
        await db.commit()

    await db.refresh(ad)
    await db.refresh(schedule)

    mode = "immediate" if immediate else f"scheduled for {schedule.next_bump_time}"
    logger.info(
        f"Bump activated for ad {ad.id} ({mode}): "
        f"{schedule.remaining_bumps} remaining every {schedule.interval_hours}h"
    )
    return ad, schedule


async def get_schedule_for_ad(db: AsyncSession, ad_id: int) -> Optional[BumpSchedule]:
    result = await db.execute(select(BumpSchedule).where(BumpSchedule.ad_id == ad_id))
    return result.scalar_one_or_none()


async def _upsert_schedule(
    db: AsyncSession, ad_id: int, state: ScheduleState
) -> BumpSchedule:
    schedule = await get_schedule_for_ad(db, ad_id)
    if schedule is None:
        schedule = BumpSchedule(ad_id=ad_id)
        db.add(schedule)
    state.apply_to(schedule)
    await db.flush()
    return schedule
