from apscheduler.triggers.cron import CronTrigger

from src.config import Settings
from src.scheduler.jobs import run_bump_tick
from src.scheduler.runner import (
    BUMP_TICK_JOB_ID,
    create_scheduler,
    start_scheduler,
    stop_scheduler,
)


def _fields(trigger):
    return {field.name: str(field) for field in trigger.fields}


def test_bump_tick_runs_hourly_by_default():
    scheduler = create_scheduler(Settings(bump_cron="0 * * * *"))

    job = scheduler.get_job(BUMP_TICK_JOB_ID)
    assert job is not None
    assert job.func is run_bump_tick
    assert isinstance(job.trigger, CronTrigger)
    fields = _fields(job.trigger)
    assert fields["minute"] == "0"
    assert fields["hour"] == "*"
    assert job.max_instances == 1
    assert job.coalesce is True


def test_custom_cron_expression():
    scheduler = create_scheduler(Settings(bump_cron="*/15 * * * *"))
    fields = _fields(scheduler.get_job(BUMP_TICK_JOB_ID).trigger)
    assert fields["minute"] == "*/15"


def test_scheduler_disabled():
    assert start_scheduler(Settings(scheduler_enabled=False)) is None


def test_start_and_stop():
    scheduler = start_scheduler(Settings(scheduler_enabled=True))
    try:
        assert scheduler.running
        assert [job.id for job in scheduler.get_jobs()] == [BUMP_TICK_JOB_ID]
    finally:
        stop_scheduler(scheduler)
    assert not scheduler.running


def test_stop_none_is_noop():
    stop_scheduler(None)
