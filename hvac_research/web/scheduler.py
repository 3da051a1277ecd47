import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from hvac_research.core.config import settings
from hvac_research.core.database import get_async_db

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def run_nightly_rescore():
    """
    Job function: rescore every business with the active scoring config, so
    time-dependent factors (permit window, business age) stay current.
    """
    logger.info("Running scheduled job: Nightly Rescore")
    try:
        from hvac_research.scoring.service import rescore_all
        async with get_async_db() as session:
            scores = await rescore_all(session)
        logger.info(f"Nightly rescore complete: {len(scores)} businesses")
    except Exception as e:
        logger.error(f"Nightly rescore failed: {e}", exc_info=True)


def start_scheduler():
    """
    Initialize and start the scheduler.
    """
    scheduler.add_job(
        run_nightly_rescore,
        CronTrigger(hour=settings.rescore_cron_hour, minute=0),
        id='nightly_rescore',
        replace_existing=True
    )

    scheduler.start()
    logger.info(f"APScheduler started. Nightly rescore at {settings.rescore_cron_hour:02d}:00.")


async def stop_scheduler():
    """
    Shutdown the scheduler.
    """
    logger.info("Stopping APScheduler...")
    scheduler.shutdown()
