"""
Run a region-discovery research job from the command line.

    python scripts/run_discovery.py --county Travis
    python scripts/run_discovery.py --county Harris --city Houston --name "Houston sweep"
"""
import argparse
import asyncio
import logging
import os
import sys

sys.path.append(os.getcwd())

from hvac_research.core.config import settings
from hvac_research.core.database import async_session_factory, engine, Base
from hvac_research.core.models import ResearchJobType
from hvac_research.prospects import database as prospects_db  # noqa
from hvac_research.research import database as research_db  # noqa
from hvac_research.research.workflow import create_research_job, start_research_job

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_progress(progress):
    logger.info(f"[{progress.stage.value}] {progress.progress}% - {progress.message}")


async def main(county: str, city: str = None, name: str = None):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    region = {"county": county, "state": "TX"}
    if city:
        region["city"] = city
    job_name = name or f"HVAC discovery: {city + ', ' if city else ''}{county} County"

    async with async_session_factory() as session:
        job = await create_research_job(
            session, job_name, ResearchJobType.REGION_DISCOVERY, {"region": region}
        )
        result = await start_research_job(session, job.id, on_progress=print_progress)

    if result.success:
        logger.info(
            f"Job {result.job_id} complete in {result.duration:.0f}s: "
            f"{result.stats.discovered} discovered, {result.stats.stored} stored, "
            f"{result.stats.scored} scored"
        )
    else:
        logger.error(f"Job {result.job_id} failed: {result.error}")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Discover HVAC businesses in a Texas county")
    parser.add_argument("--county", required=True, help="County name, e.g. Travis")
    parser.add_argument("--city", help="Optional city within the county")
    parser.add_argument("--name", help="Job name (defaults to the region)")
    args = parser.parse_args()

    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main(args.county, args.city, args.name))
