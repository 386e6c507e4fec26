"""APScheduler setup for periodic schedule feed reloads."""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from medigrid.config import settings

logger = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None


def _run_schedule_reload():
    from medigrid.services.schedule_store import store
    try:
        store.reload()
    except Exception as e:
        logger.error("Schedule reload job failed: %s", e)


def start_scheduler():
    global _scheduler
    _scheduler = BackgroundScheduler()

    _scheduler.add_job(
        _run_schedule_reload,
        "interval",
        minutes=settings.schedule_refresh_interval,
        id="schedule_reload",
        name="Load-shedding schedule reload",
        max_instances=1,
    )

    _scheduler.start()
    logger.info("Scheduler started: schedule reload every %d min", settings.schedule_refresh_interval)


def stop_scheduler():
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
