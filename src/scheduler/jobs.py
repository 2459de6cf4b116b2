from __future__ import annotations

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import create_engine, or_, update
from sqlalchemy.orm import Session

from src.bumps.schedule import (
    AdState,
    ScheduleState,
    advance_schedule,
    deactivate_schedule,
    utcnow,
)
from src.config import get_settings
from src.models.bump_schedule import BumpSchedule
from src.models.vehicle_ad import VehicleAd

settings = get_settings()

# 排程用的同步 engine，第一次使用時才建立
_engine = None


def get_sync_session() -> Session:
    global _engine
    if _engine is None:
        _engine = create_engine(settings.sync_database_url)
    return Session(_engine)


def run_bump_tick(now: Optional[datetime] = None) -> Dict[str, int]:
    """Advance every bump schedule whose next bump is due.

    Each schedule is claimed, bumped and committed on its own, so a failure on
    one is logged and the rest of the tick carries on.
    """
    now = now or utcnow()
    lease = timedelta(seconds=settings.bump_claim_lease_seconds)
    logger.info(f"Starting bump tick at {now}")

    results = {"due": 0, "bumped": 0, "deactivated": 0, "skipped": 0, "failed": 0}

    with get_sync_session() as session:
        due_ids = _find_due_schedule_ids(session, now)
        results["due"] = len(due_ids)

        for schedule_id in due_ids:
            try:
                if not _claim_schedule(session, schedule_id, now, lease):
                    logger.debug(f"Bump schedule {schedule_id} claimed elsewhere, skipping")
                    results["skipped"] += 1
                    continue

                outcome = _process_schedule(session, schedule_id, now)
                results[outcome] += 1
            except Exception as e:
                session.rollback()
                logger.error(f"Error bumping schedule {schedule_id}: {e}")
                results["failed"] += 1
                _release_claim(session, schedule_id)

    logger.info(f"Bump tick completed: {results}")
    return results


def _find_due_schedule_ids(session: Session, now: datetime) -> List[int]:
    rows = (
        session.query(BumpSchedule.id)
        .filter(
            BumpSchedule.is_active == True,  # noqa: E712
            BumpSchedule.next_bump_time <= now,
        )
        .order_by(BumpSchedule.next_bump_time.asc())
        .all()
    )
    return [row.id for row in rows]


def _claim_schedule(
    session: Session, schedule_id: int, now: datetime, lease: timedelta
) -> bool:
    """Take a lease on a due schedule; False if another tick holds it."""
    result = session.execute(
        update(BumpSchedule)
        .where(
            BumpSchedule.id == schedule_id,
            BumpSchedule.is_active == True,  # noqa: E712
            BumpSchedule.next_bump_time <= now,
            or_(
                BumpSchedule.claimed_until.is_(None),
                BumpSchedule.claimed_until < now,
            ),
        )
        .values(claimed_until=now + lease)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    return result.rowcount == 1


def _release_claim(session: Session, schedule_id: int) -> None:
    try:
        session.execute(
            update(BumpSchedule)
            .where(BumpSchedule.id == schedule_id)
            .values(claimed_until=None)
            .execution_options(synchronize_session=False)
        )
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Could not release claim on bump schedule {schedule_id}: {e}")


def _process_schedule(session: Session, schedule_id: int, now: datetime) -> str:
    schedule = session.get(BumpSchedule, schedule_id)
    ad = session.get(VehicleAd, schedule.ad_id)

    if ad is None:
        deactivate_schedule(ScheduleState.from_model(schedule)).apply_to(schedule)
        schedule.claimed_until = None
        session.commit()
        logger.warning(
            f"Ad {schedule.ad_id} no longer exists, deactivated bump schedule {schedule_id}"
        )
        return "deactivated"

    new_schedule, new_ad = advance_schedule(
        ScheduleState.from_model(schedule), AdState.from_model(ad), now
    )
    new_ad.apply_to(ad)
    new_schedule.apply_to(schedule)
    schedule.claimed_until = None
    # Ad and schedule land in the same commit
    session.commit()

    logger.info(
        f"Bumped ad {ad.id}: {schedule.remaining_bumps} remaining, "
        f"next at {schedule.next_bump_time}"
    )
    return "bumped"
