"""APScheduler integration for FastAPI.

Runs the debounced Gist push: each trade change replaces the pending job, so
the push fires once the journal has been quiet for the configured delay.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from trade_tracker.config import settings

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

GIST_PUSH_JOB_ID = "gist_push"

# Store mutations arrive from threadpool requests
_job_lock = threading.Lock()


def schedule_gist_push(delay_seconds: float | None = None):
    """Add or replace the pending Gist push."""
    from trade_tracker.services.gist_sync import run_scheduled_push

    if delay_seconds is None:
        delay_seconds = settings.gist_sync_delay_seconds

    run_date = datetime.now(timezone.utc) + timedelta(seconds=delay_seconds)
    with _job_lock:
        # Before start() add_job only queues, so drop the queued copy first
        _remove_push_job()
        scheduler.add_job(
            run_scheduled_push,
            trigger=DateTrigger(run_date=run_date),
            id=GIST_PUSH_JOB_ID,
            name="Gist push",
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=60,
        )
    logger.debug(f"Gist push scheduled in {delay_seconds:.1f}s")


def cancel_gist_push():
    """Drop a pending Gist push, e.g. after disconnecting."""
    with _job_lock:
        removed = _remove_push_job()
    if removed:
        logger.info("Cancelled pending Gist push")


def _remove_push_job() -> bool:
    try:
        scheduler.remove_job(GIST_PUSH_JOB_ID)
    except JobLookupError:
        return False
    return True


def start_scheduler():
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


def stop_scheduler():
    """Shut down the scheduler."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler stopped")


def get_scheduler_status() -> dict:
    """Return current scheduler state for the API."""
    jobs = scheduler.get_jobs()
    return {
        "running": scheduler.running,
        "job_count": len(jobs),
        "jobs": [_job_info(j) for j in jobs],
    }


def _job_info(job) -> dict:
    # Jobs added before start() have no next_run_time yet
    next_run = getattr(job, "next_run_time", None)
    return {
        "id": job.id,
        "name": job.name,
        "next_run": str(next_run) if next_run else None,
        "trigger": str(job.trigger),
    }
