"""
Rescore businesses with the active scoring config and print a ranking.

    python scripts/score_businesses.py              # every business
    python scripts/score_businesses.py --ids 3 7 12
    python scripts/score_businesses.py --config config/scoring.yaml
"""
import argparse
import asyncio
import logging
import os
import sys

sys.path.append(os.getcwd())

from rich.console import Console
from rich.table import Table

from hvac_research.core.config import settings
from hvac_research.core.database import async_session_factory
from hvac_research.core.models import Recommendation
from hvac_research.prospects.service import get_business, list_business_ids
from hvac_research.scoring.config import ScoringConfig
from hvac_research.scoring.service import calculate_business_score, get_active_config, register_config

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

RECOMMENDATION_STYLES = {
    Recommendation.HIGH_PRIORITY: "bold green",
    Recommendation.MEDIUM_PRIORITY: "yellow",
    Recommendation.LOW_PRIORITY: "dim",
    Recommendation.NOT_RECOMMENDED: "red",
}


async def main(ids=None, config_path=None):
    console = Console()

    async with async_session_factory() as session:
        if config_path:
            config = ScoringConfig.from_yaml(config_path)
            await register_config(session, config)
        else:
            config = await get_active_config(session)

        business_ids = ids or await list_business_ids(session)
        if not business_ids:
            logger.info("No businesses to score.")
            return

        rows = []
        for business_id in business_ids:
            try:
                score = await calculate_business_score(session, business_id, config)
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Failed to score business {business_id}: {e}")
                continue
            business = await get_business(session, business_id)
            rows.append((business_id, business.name, score))

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("ID", justify="right", width=6)
        table.add_column("Business", width=36)
        table.add_column("Revenue", justify="right", width=8)
        table.add_column("Online", justify="right", width=8)
        table.add_column("Fit", justify="right", width=6)
        table.add_column("Growth", justify="right", width=8)
        table.add_column("Overall", justify="right", width=8)
        table.add_column("Recommendation", width=18)

        for business_id, name, score in sorted(rows, key=lambda r: r[2].overall_score, reverse=True):
            style = RECOMMENDATION_STYLES.get(score.recommendation, "")
            table.add_row(
                str(business_id),
                name[:36],
                str(score.revenue_proxy_score),
                str(score.online_weakness_score),
                str(score.acquisition_fit_score),
                str(score.growth_signals_score),
                f"[bold]{score.overall_score}[/bold]",
                f"[{style}]{score.recommendation.value}[/{style}]" if style else score.recommendation.value,
            )

    console.print(f"\n[bold blue]HVAC Acquisition Scores (config {config.version})[/bold blue]\n")
    console.print(table)
    console.print(f"\nScored {len(rows)}/{len(business_ids)} businesses")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rescore HVAC businesses")
    parser.add_argument("--ids", type=int, nargs="+", help="Business ids (default: all)")
    parser.add_argument("--config", help="Scoring config YAML to register and use")
    args = parser.parse_args()

    if sys.platform == 'win32':
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main(args.ids, args.config))
