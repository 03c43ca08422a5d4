"""
APScheduler-based clock loop for schedule dispatch.

Every POLL_INTERVAL_MINUTES (and once shortly after startup) the poller scans
enabled, unfired schedules and dispatches the ones whose fire instant has
passed, one at a time.

The APScheduler jobs themselves are not persisted: the schedules live in the
repository and the two polling jobs are re-registered on every start.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import sentry_sdk
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.config import get_poll_interval_minutes, get_poll_warmup_seconds
from core.notifications.dispatcher import execute_schedule
from core.notifications.timing import InvalidScheduleError, is_due
from core.repositories import get_repository
from core.timezone import now_in_target_timezone

logger = logging.getLogger(__name__)


_scheduler: AsyncIOScheduler | None = None

POLL_JOB_ID = "poll_schedules"
WARMUP_JOB_ID = "poll_schedules_warmup"

_tick_lock: asyncio.Lock | None = None
_tick_lock_loop: asyncio.AbstractEventLoop | None = None


# =============================================================================
# Scheduler initialization and shutdown
# =============================================================================


def init_scheduler() -> AsyncIOScheduler:
    """
    Initialize and start the APScheduler.

    Call this during app startup (in FastAPI lifespan), after the repository
    has been initialized.
    """
    global _scheduler

    if _scheduler is not None:
        return _scheduler

    _scheduler = AsyncIOScheduler(
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,  # Never overlap a running scan
            "misfire_grace_time": 300,
        },
    )

    interval = get_poll_interval_minutes()
    _scheduler.add_job(
        poll_schedules,
        trigger="interval",
        minutes=interval,
        id=POLL_JOB_ID,
        replace_existing=True,
    )
    # Warm-up scan so a restart doesn't wait a full interval
    _scheduler.add_job(
        poll_schedules,
        trigger="date",
        run_date=datetime.now(timezone.utc)
        + timedelta(seconds=get_poll_warmup_seconds()),
        id=WARMUP_JOB_ID,
        replace_existing=True,
    )

    _scheduler.start()
    print(f"Notification scheduler started (every {interval} min)")
    return _scheduler


def shutdown_scheduler() -> None:
    """
    Shutdown the scheduler gracefully.

    Call this during app shutdown.
    """
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        print("Notification scheduler stopped")


def _get_tick_lock() -> asyncio.Lock:
    global _tick_lock, _tick_lock_loop
    loop = asyncio.get_running_loop()
    if _tick_lock is None or _tick_lock_loop is not loop:
        _tick_lock = asyncio.Lock()
        _tick_lock_loop = loop
    return _tick_lock


# =============================================================================
# Tick
# =============================================================================


async def poll_schedules(now: datetime | None = None) -> dict:
    """
    Scan pending schedules and dispatch the due ones.

    This is the job function called by APScheduler. A tick that starts while
    another is still running is skipped.

    Args:
        now: Clock reading to evaluate against (defaults to the current time)

    Returns:
        Dict with scanned/due/fired/failed counts, plus skipped or error keys
    """
    lock = _get_tick_lock()
    if lock.locked():
        logger.info("Previous schedule scan still running, skipping this tick")
        return {"skipped": True, "scanned": 0, "due": 0, "fired": 0, "failed": 0}

    async with lock:
        return await _scan(now or now_in_target_timezone())


async def _scan(now: datetime) -> dict:
    try:
        pending = await get_repository().get_schedules(enabled=True, fired=False)
    except Exception as e:
        logger.error(f"Failed to load pending schedules: {e}")
        sentry_sdk.capture_exception(e)
        return {"error": str(e), "scanned": 0, "due": 0, "fired": 0, "failed": 0}

    failed = 0
    due = []
    for schedule in pending:
        try:
            if is_due(schedule, now):
                due.append(schedule)
        except InvalidScheduleError as e:
            logger.error(f"Schedule {schedule.id} is invalid: {e}")
            failed += 1

    fired = 0
    for schedule in due:
        try:
            result = await execute_schedule(schedule.id)
        except Exception as e:
            # Leave it unfired; the next tick will try again
            logger.error(f"Dispatch of schedule {schedule.id} failed: {e}")
            sentry_sdk.capture_exception(e)
            failed += 1
            continue

        if result.success:
            fired += 1
        else:
            logger.info(f"Schedule {schedule.id} not fired: {result.reason}")

    logger.info(
        f"Schedule scan: {len(pending)} scanned, {len(due)} due, "
        f"{fired} fired, {failed} failed"
    )
    return {"scanned": len(pending), "due": len(due), "fired": fired, "failed": failed}
