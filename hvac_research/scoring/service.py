"""
Scoring persistence: hydrate a business, run the pure engine, store the result.

The engine (``calculator.calculate_score``) never touches the database; this
module is the collaborator that loads its input and overwrites the single
ScoreModel row for the business.
"""
import logging
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hvac_research.prospects.database import ScoreModel, ScoringConfigRecord
from hvac_research.prospects.service import list_business_ids, load_business_with_relations
from hvac_research.scoring.calculator import calculate_score
from hvac_research.scoring.config import ScoringConfig
from hvac_research.scoring.snapshot import business_to_snapshot
from hvac_research.scoring.types import Score

logger = logging.getLogger(__name__)


class ScoringConfigConflictError(ValueError):
    """A config version is already registered with a different payload."""


# =============================================================================
# SCORING
# =============================================================================

async def save_score(session: AsyncSession, business_id: int, score: Score) -> ScoreModel:
    """Overwrite (or create) the one score row for a business."""
    result = await session.execute(select(ScoreModel).where(ScoreModel.business_id == business_id))
    row = result.scalar_one_or_none()
    if row is None:
        row = ScoreModel(business_id=business_id)
        session.add(row)

    row.revenue_proxy_score = score.revenue_proxy_score
    row.online_weakness_score = score.online_weakness_score
    row.acquisition_fit_score = score.acquisition_fit_score
    row.growth_signals_score = score.growth_signals_score
    row.overall_score = score.overall_score
    row.recommendation = score.recommendation.value
    row.breakdown = score.breakdown.to_dict()
    row.config_version = score.config_version

    await session.flush()
    # created_at / updated_at are generated by the database
    await session.refresh(row)
    return row


async def calculate_business_score(
    session: AsyncSession,
    business_id: int,
    config: Optional[ScoringConfig] = None,
    as_of: Optional[date] = None,
) -> Score:
    """
    Score one business and persist the result.
    Raises BusinessNotFoundError if the id does not exist.
    """
    if config is None:
        config = await get_active_config(session)

    business = await load_business_with_relations(session, business_id)
    score = calculate_score(business_to_snapshot(business), config, as_of=as_of)
    business.score = await save_score(session, business_id, score)

    logger.debug(
        f"Scored business {business_id}: {score.overall_score} "
        f"({score.recommendation.value}, config {score.config_version})"
    )
    return score


async def batch_score_businesses(
    session: AsyncSession,
    business_ids: Iterable[int],
    config: Optional[ScoringConfig] = None,
    as_of: Optional[date] = None,
) -> List[Score]:
    """
    Score businesses one after another. Each id runs in its own savepoint, so a
    failure (including a database error at flush) is rolled back, logged and
    skipped; the rest of the batch still runs.
    """
    if config is None:
        config = await get_active_config(session)

    scores: List[Score] = []
    for business_id in business_ids:
        try:
            async with session.begin_nested():
                scores.append(await calculate_business_score(session, business_id, config, as_of))
        except Exception as e:
            logger.error(f"Failed to score business {business_id}: {e}", exc_info=True)
    return scores


async def rescore_all(
    session: AsyncSession,
    config: Optional[ScoringConfig] = None,
    as_of: Optional[date] = None,
) -> List[Score]:
    ids = await list_business_ids(session)
    logger.info(f"Rescoring {len(ids)} businesses")
    scores = await batch_score_businesses(session, ids, config, as_of)
    logger.info(f"Rescored {len(scores)}/{len(ids)} businesses")
    return scores


# =============================================================================
# CONFIG REGISTRY
# =============================================================================

async def register_config(session: AsyncSession, config: ScoringConfig) -> ScoringConfigRecord:
    """
    Store a config version. Re-registering an identical payload is a no-op;
    a different payload under an existing version is rejected.
    """
    payload = config.model_dump()
    result = await session.execute(
        select(ScoringConfigRecord).where(ScoringConfigRecord.version == config.version)
    )
    existing = result.scalar_one_or_none()
    if existing is not None:
        if ScoringConfig(**existing.payload) != config:
            raise ScoringConfigConflictError(
                f"Scoring config version {config.version} already exists with different values"
            )
        return existing

    record = ScoringConfigRecord(version=config.version, payload=payload)
    session.add(record)
    await session.flush()
    logger.info(f"Registered scoring config version {config.version}")
    return record


async def list_configs(session: AsyncSession) -> List[ScoringConfig]:
    result = await session.execute(select(ScoringConfigRecord).order_by(ScoringConfigRecord.id.desc()))
    return [ScoringConfig(**r.payload) for r in result.scalars().all()]


async def get_active_config(session: AsyncSession) -> ScoringConfig:
    """Most recently registered config, else the YAML / built-in config."""
    result = await session.execute(
        select(ScoringConfigRecord).order_by(ScoringConfigRecord.id.desc()).limit(1)
    )
    record = result.scalar_one_or_none()
    if record is not None:
        return ScoringConfig(**record.payload)
    return ScoringConfig.load()
