import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from syncora.config import settings
from syncora.services.pending_auth import PendingAuthRegistry

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "sweep_pending_auths"


def sweep_pending_auths(registry: PendingAuthRegistry) -> int:
    removed = registry.sweep()
    if removed:
        logger.info(f"[Scheduler] Removed {removed} expired pending 2FA logins")
    return removed


def create_scheduler(registry: PendingAuthRegistry, interval_seconds: int | None = None) -> AsyncIOScheduler:
    """Build a scheduler that periodically purges expired pending logins."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        sweep_pending_auths,
        trigger=IntervalTrigger(seconds=interval_seconds or settings.pending_auth_sweep_seconds),
        args=[registry],
        id=SWEEP_JOB_ID,
        replace_existing=True,
    )
    logger.info(f"[Scheduler] Pending login sweep every {interval_seconds or settings.pending_auth_sweep_seconds}s")
    return scheduler
