"""
Export prospects to CSV.

    python scripts/export_prospects.py
    python scripts/export_prospects.py --format detailed --county Travis --min-score 65
"""
import argparse
import asyncio
import logging
import os
import sys
from datetime import date
from pathlib import Path

sys.path.append(os.getcwd())

from hvac_research.core.config import settings
from hvac_research.core.database import async_session_factory
from hvac_research.prospects.filters import ProspectFilters
from hvac_research.prospects.service import list_businesses_for_export
from hvac_research.reporting.csv_export import prospects_to_csv, prospects_to_detailed_csv

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def main(fmt: str, out: str = None, county=None, status=None, min_score=None):
    filters = ProspectFilters(county=county, status=status, min_score=min_score)

    async with async_session_factory() as session:
        prospects = await list_businesses_for_export(session, filters)

    if fmt == "detailed":
        content = prospects_to_detailed_csv(prospects)
    else:
        content = prospects_to_csv(prospects)

    path = Path(out) if out else settings.export_dir / f"hvac_prospects_{fmt}_{date.today().isoformat()}.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    logger.info(f"Exported {len(prospects)} prospects to {path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Export HVAC prospects to CSV")
    parser.add_argument("--format", choices=["standard", "detailed"], default="standard")
    parser.add_argument("--out", help="Output path (default: outputs/hvac_prospects_<format>_<date>.csv)")
    parser.add_argument("--county", nargs="+", help="Only these counties")
    parser.add_argument("--status", nargs="+", help="Only these statuses")
    parser.add_argument("--min-score", type=int, help="Minimum overall score")
    args = parser.parse_args()

    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main(args.format, args.out, args.county, args.status, args.min_score))
