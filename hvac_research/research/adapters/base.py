"""
Adapter Infrastructure.

Every per-source adapter (TDLR licenses, county permits, review platforms)
runs a deep-research task and parses its free-form output. The shared
``run_research`` helper starts the task, waits once with a timeout and
returns the text, or None on any failure.
"""
import logging
from typing import Optional

from hvac_research.research.deep_research import DeepResearchClient, ResearchStatus

logger = logging.getLogger(__name__)


async def run_research(
    prompt: str,
    max_tool_calls: int,
    max_wait: float,
    client: Optional[DeepResearchClient] = None,
    label: str = "research",
) -> Optional[str]:
    """Start a research task and wait for its output. Never raises."""
    client = client or DeepResearchClient()

    started = await client.start(prompt, max_tool_calls=max_tool_calls)
    if started.status == ResearchStatus.FAILED:
        logger.error(f"{label} search failed to start: {started.error}")
        return None

    result = started
    if not started.is_terminal:
        result = await client.wait_for_completion(started.id, max_wait=max_wait)

    if result.status == ResearchStatus.FAILED:
        logger.error(f"{label} search failed: {result.error}")
        return None
    if not result.output:
        logger.warning(f"{label} search returned no output")
        return None
    return result.output
