from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from src.config import Settings, get_settings
from src.scheduler.jobs import run_bump_tick

BUMP_TICK_JOB_ID = "bump_tick"


def create_scheduler(settings: Optional[Settings] = None) -> BackgroundScheduler:
    settings = settings or get_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    # 預設每小時整點推進到期的 bump 排程
    scheduler.add_job(
        run_bump_tick,
        CronTrigger.from_crontab(settings.bump_cron, timezone="UTC"),
        id=BUMP_TICK_JOB_ID,
        name="Bump Promotion Tick",
        max_instances=1,
        coalesce=True,
    )

    logger.info(f"Scheduler configured with bump tick ({settings.bump_cron})")
    return scheduler


def start_scheduler(settings: Optional[Settings] = None) -> Optional[BackgroundScheduler]:
    settings = settings or get_settings()
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled by configuration")
        return None

    scheduler = create_scheduler(settings)
    scheduler.start()
    logger.info("Scheduler started")
    return scheduler


def stop_scheduler(scheduler: Optional[BackgroundScheduler]) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
