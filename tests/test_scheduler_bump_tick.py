from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.bumps.schedule import advance_schedule
from src.db.database import Base
from src.models import PROMOTION_BOOSTED, PROMOTION_NONE, BumpSchedule, VehicleAd

T = datetime(2026, 4, 1, 12, 0, 0)
CREATED = datetime(2026, 3, 20, 9, 0, 0)


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    Base.metadata.drop_all(engine)


@pytest.fixture
def use_session(db_session):
    with patch("src.scheduler.jobs.get_sync_session") as mock_get_session:
        mock_get_session.return_value.__enter__ = MagicMock(return_value=db_session)
        mock_get_session.return_value.__exit__ = MagicMock(return_value=False)
        yield db_session


def _add_ad(session, **overrides):
    data = dict(
        user_id="u1",
        seller_name="Ruwan",
        email="ruwan@example.com",
        mobile="0765555555",
        district="Galle",
        vehicle_type="Van",
        condition="Used",
        make="Nissan",
        model="Caravan",
        year=2012,
        transmission="Manual",
        fuel_type="Diesel",
        mileage=210000,
        promotion=PROMOTION_BOOSTED,
        created_at=CREATED,
    )
    data.update(overrides)
    ad = VehicleAd(**data)
    session.add(ad)
    session.commit()
    return ad


def _add_schedule(session, ad_id, **overrides):
    data = dict(
        ad_id=ad_id,
        remaining_bumps=3,
        interval_hours=24,
        next_bump_time=T - timedelta(hours=1),
        last_bump_time=None,
        is_active=True,
    )
    data.update(overrides)
    schedule = BumpSchedule(**data)
    session.add(schedule)
    session.commit()
    return schedule


class TestRunBumpTick:
    def test_last_bump_deactivates(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        ad = _add_ad(use_session)
        schedule = _add_schedule(use_session, ad.id, remaining_bumps=1)

        result = run_bump_tick(now=T)

        assert result == {"due": 1, "bumped": 1, "deactivated": 0, "skipped": 0, "failed": 0}
        assert schedule.remaining_bumps == 0
        assert schedule.is_active is False
        assert schedule.next_bump_time is None
        assert schedule.last_bump_time == T
        assert schedule.claimed_until is None
        assert ad.created_at == T
        assert ad.promotion == PROMOTION_NONE

    def test_bump_with_remaining_reschedules(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        ad = _add_ad(use_session)
        schedule = _add_schedule(use_session, ad.id, remaining_bumps=3, interval_hours=6)

        run_bump_tick(now=T)

        assert schedule.remaining_bumps == 2
        assert schedule.is_active is True
        assert schedule.last_bump_time == T
        assert schedule.next_bump_time == T + timedelta(hours=6)
        assert ad.created_at == T
        assert ad.promotion == PROMOTION_BOOSTED

    def test_not_due_schedules_untouched(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        ad = _add_ad(use_session)
        future = T + timedelta(minutes=30)
        schedule = _add_schedule(use_session, ad.id, next_bump_time=future)
        inactive_ad = _add_ad(use_session)
        inactive = _add_schedule(
            use_session, inactive_ad.id, remaining_bumps=0, next_bump_time=None, is_active=False
        )

        result = run_bump_tick(now=T)

        assert result["due"] == 0
        assert schedule.remaining_bumps == 3
        assert schedule.next_bump_time == future
        assert inactive.remaining_bumps == 0
        assert ad.created_at == CREATED

    def test_orphaned_schedule_deactivated(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        schedule = _add_schedule(use_session, ad_id=9999, remaining_bumps=4)

        result = run_bump_tick(now=T)

        assert result["deactivated"] == 1
        assert schedule.is_active is False
        assert schedule.remaining_bumps == 0
        assert schedule.next_bump_time is None
        assert schedule.last_bump_time is None

    def test_claimed_schedule_skipped(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        ad = _add_ad(use_session)
        held = T + timedelta(minutes=5)
        schedule = _add_schedule(use_session, ad.id, claimed_until=held)

        result = run_bump_tick(now=T)

        assert result["skipped"] == 1
        assert result["bumped"] == 0
        assert schedule.remaining_bumps == 3
        assert schedule.claimed_until == held
        assert ad.created_at == CREATED

    def test_expired_claim_is_taken_over(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        ad = _add_ad(use_session)
        schedule = _add_schedule(
            use_session, ad.id, claimed_until=T - timedelta(minutes=1)
        )

        result = run_bump_tick(now=T)

        assert result["bumped"] == 1
        assert schedule.remaining_bumps == 2
        assert schedule.claimed_until is None

    def test_failure_does_not_block_other_schedules(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        broken_ad = _add_ad(use_session, model="Broken")
        broken = _add_schedule(
            use_session, broken_ad.id, remaining_bumps=5, next_bump_time=T - timedelta(hours=3)
        )
        ok_ad = _add_ad(use_session, model="Fine")
        ok = _add_schedule(
            use_session, ok_ad.id, remaining_bumps=2, next_bump_time=T - timedelta(hours=1)
        )

        def flaky_advance(schedule, ad, now):
            if schedule.remaining_bumps == 5:
                raise RuntimeError("database is locked")
            return advance_schedule(schedule, ad, now)

        with patch("src.scheduler.jobs.advance_schedule", side_effect=flaky_advance):
            result = run_bump_tick(now=T)

        assert result["failed"] == 1
        assert result["bumped"] == 1

        assert broken.remaining_bumps == 5
        assert broken.is_active is True
        assert broken.next_bump_time == T - timedelta(hours=3)
        assert broken.claimed_until is None
        assert broken_ad.created_at == CREATED

        assert ok.remaining_bumps == 1
        assert ok_ad.created_at == T

    def test_repeated_ticks_drain_schedule(self, use_session):
        from src.scheduler.jobs import run_bump_tick

        ad = _add_ad(use_session)
        schedule = _add_schedule(use_session, ad.id, remaining_bumps=3, interval_hours=1)

        now = T
        for _ in range(5):
            run_bump_tick(now=now)
            now += timedelta(hours=1)

        assert schedule.remaining_bumps == 0
        assert schedule.is_active is False
        assert schedule.last_bump_time == T + timedelta(hours=2)
        assert ad.promotion == PROMOTION_NONE
