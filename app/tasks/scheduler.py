import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from app.config import get_settings
from app.database import AsyncSessionLocal
from app.services.recorder import PerformanceRecorder
from app.services.store import PortfolioStore

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def record_daily_performance():
    """
    Scheduled task that records closing prices and a performance
    snapshot for every portfolio.
    """
    settings = get_settings()
    logger.info("Starting scheduled performance recording...")

    async with AsyncSessionLocal() as db:
        recorder = PerformanceRecorder(PortfolioStore(db), close_hour_utc=settings.market_close_hour_utc)
        try:
            snapshots = await recorder.record_all_portfolios()
            logger.info(f"Daily performance recording complete: {len(snapshots)} snapshots")
        except Exception as e:
            logger.error(f"Daily performance recording failed: {e}", exc_info=True)


def start_scheduler():
    """Start the APScheduler with the daily recording job."""
    settings = get_settings()

    scheduler.add_job(
        record_daily_performance,
        trigger=CronTrigger(
            hour=settings.snapshot_hour_utc,
            minute=settings.snapshot_minute_utc,
            timezone="UTC",
        ),
        id="daily_performance",
        name="Record daily portfolio performance",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    logger.info(
        f"Scheduler started: daily recording at "
        f"{settings.snapshot_hour_utc:02d}:{settings.snapshot_minute_utc:02d} UTC"
    )


def shutdown_scheduler():
    """Gracefully shutdown the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shutdown complete")
