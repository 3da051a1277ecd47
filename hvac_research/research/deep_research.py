"""
Deep Research Client.

Wraps the OpenAI Responses API in background mode for long-running
autonomous research (typically 10-30 minutes per task):

    client = DeepResearchClient()
    started = await client.start(prompt)
    result = await client.wait_for_completion(started.id)

API failures never raise out of this client; they come back as a
``ResearchResult`` with status FAILED and an error string.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional

from openai import AsyncOpenAI

from hvac_research.core.ai_client import get_openai_client
from hvac_research.core.config import settings

logger = logging.getLogger(__name__)


class ResearchStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ResearchUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ResearchResult:
    id: str
    status: ResearchStatus
    output: Optional[str] = None
    sources: List[str] = field(default_factory=list)
    usage: Optional[ResearchUsage] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (ResearchStatus.COMPLETED, ResearchStatus.FAILED)


def _map_status(raw: Optional[str]) -> ResearchStatus:
    if raw == "completed":
        return ResearchStatus.COMPLETED
    if raw in ("failed", "cancelled", "incomplete"):
        return ResearchStatus.FAILED
    if raw == "in_progress":
        return ResearchStatus.IN_PROGRESS
    return ResearchStatus.PENDING


def _extract_sources(response: Any) -> List[str]:
    """Collect cited URLs from url_citation annotations, in order, deduplicated."""
    urls: List[str] = []
    for item in getattr(response, "output", None) or []:
        for content in getattr(item, "content", None) or []:
            for ann in getattr(content, "annotations", None) or []:
                url = getattr(ann, "url", None)
                if url and url not in urls:
                    urls.append(url)
    return urls


def _extract_usage(response: Any) -> Optional[ResearchUsage]:
    usage = getattr(response, "usage", None)
    if not usage:
        return None
    return ResearchUsage(
        input_tokens=getattr(usage, "input_tokens", 0) or 0,
        output_tokens=getattr(usage, "output_tokens", 0) or 0,
        total_tokens=getattr(usage, "total_tokens", 0) or 0,
    )


class DeepResearchClient:
    """Start, poll and cancel background deep-research tasks."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.research_model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def start(
        self,
        prompt: str,
        max_tool_calls: Optional[int] = None,
        background: bool = True,
    ) -> ResearchResult:
        """Submit a research task. In background mode the result is PENDING."""
        max_tool_calls = max_tool_calls or settings.research_max_tool_calls
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=prompt,
                background=background,
                tools=[
                    {"type": "web_search_preview"},
                    {"type": "code_interpreter", "container": {"type": "auto"}},
                ],
                max_tool_calls=max_tool_calls,
            )
        except Exception as e:
            logger.error(f"Deep research start failed: {e}", exc_info=True)
            return ResearchResult(id="", status=ResearchStatus.FAILED, error=str(e) or "Unknown error occurred")

        logger.info(f"Deep research task started: {response.id} (background={background})")
        if background:
            return ResearchResult(id=response.id, status=ResearchStatus.PENDING)
        return ResearchResult(
            id=response.id,
            status=ResearchStatus.COMPLETED,
            output=getattr(response, "output_text", None),
            sources=_extract_sources(response),
            usage=_extract_usage(response),
        )

    async def get_status(self, response_id: str) -> ResearchResult:
        try:
            response = await self.client.responses.retrieve(response_id)
        except Exception as e:
            logger.error(f"Get research status failed for {response_id}: {e}")
            return ResearchResult(id=response_id, status=ResearchStatus.FAILED, error=str(e) or "Failed to retrieve status")

        status = _map_status(getattr(response, "status", None))
        error = getattr(response, "error", None)
        return ResearchResult(
            id=response.id,
            status=status,
            output=getattr(response, "output_text", None),
            sources=_extract_sources(response) if status == ResearchStatus.COMPLETED else [],
            usage=_extract_usage(response),
            error=getattr(error, "message", None) if error else None,
        )

    async def cancel(self, response_id: str) -> bool:
        try:
            await self.client.responses.cancel(response_id)
            logger.info(f"Cancelled research task {response_id}")
            return True
        except Exception as e:
            logger.error(f"Cancel research failed for {response_id}: {e}")
            return False

    async def wait_for_completion(
        self,
        response_id: str,
        max_wait: Optional[float] = None,
        initial_delay: Optional[float] = None,
        max_delay: Optional[float] = None,
        backoff: Optional[float] = None,
        on_progress: Optional[Callable[[ResearchResult], Any]] = None,
    ) -> ResearchResult:
        """
        Poll until the task completes or fails, sleeping with exponential
        backoff between polls. Past ``max_wait`` seconds the task is reported
        as FAILED ("Research timed out"); partial output is discarded.
        """
        max_wait = settings.research_max_wait if max_wait is None else max_wait
        delay = settings.research_poll_initial_delay if initial_delay is None else initial_delay
        max_delay = settings.research_poll_max_delay if max_delay is None else max_delay
        backoff = settings.research_poll_backoff if backoff is None else backoff

        started = time.monotonic()
        slept = 0.0

        while max(time.monotonic() - started, slept) < max_wait:
            result = await self.get_status(response_id)

            if on_progress is not None:
                on_progress(result)

            if result.is_terminal:
                logger.info(f"Research {response_id} finished: {result.status.value}")
                return result

            logger.debug(f"Research {response_id} {result.status.value}, next poll in {delay:.1f}s")
            await asyncio.sleep(delay)
            slept += delay
            delay = min(delay * backoff, max_delay)

        logger.warning(f"Research {response_id} timed out after {max_wait}s")
        return ResearchResult(id=response_id, status=ResearchStatus.FAILED, error="Research timed out")


def build_hvac_discovery_prompt(
    region: str = "",
    county: Optional[str] = None,
    city: Optional[str] = None,
    criteria: Optional[List[str]] = None,
) -> str:
    """Research prompt for discovering HVAC businesses in a Texas location."""
    criteria = criteria or []

    if city:
        location = f"{city}, {county or ''} County, Texas"
    elif county:
        location = f"{county} County, Texas"
    else:
        location = f"the {region} region of Texas"

    criteria_list = ""
    if criteria:
        criteria_list = "\n\nAdditional criteria to consider:\n" + "\n".join(f"- {c}" for c in criteria)

    return f"""Research and compile a comprehensive list of HVAC (Heating, Ventilation, and Air Conditioning) businesses operating in {location}.

## Research Focus

Find HVAC companies that match these characteristics:
1. **Revenue Range**: Estimated annual revenue between $1M-$10M
2. **Ownership**: Family-owned or independent operators preferred
3. **Business Age**: Established businesses (10+ years in operation)
4. **Online Presence**: Companies with limited or outdated digital presence
5. **Specializations**: Include residential, commercial, and niche specialists (refrigeration, clean rooms, industrial)

## Information to Collect for Each Business

For each HVAC business found, gather:
- Business name and any DBA names
- Physical address and service area
- Contact information (phone, email, website)
- Years in business / founding year
- Owner name(s) if discoverable
- Estimated company size (employees, fleet)
- Specializations and service types
- License information (Texas TDLR)
- Notable certifications (NATE, EPA 608, manufacturer)
- Online review presence (Google, Yelp ratings/counts)
- Association memberships (ACCA, PHCC, local chambers)

## Output Format

Provide the results as a structured list with the following format for each business:

**[Business Name]**
- Location: [City, County]
- Address: [Full address if found]
- Phone: [Phone number]
- Website: [URL or "None found"]
- Founded: [Year or "Unknown"]
- Owner: [Name or "Unknown"]
- Size: [Employee estimate]
- Specializations: [List]
- License: [TDLR info if found]
- Reviews: [Platform ratings/counts]
- Notes: [Any relevant observations about acquisition fit]
{criteria_list}

## Important Notes

- Focus on finding businesses that might be "hidden gems" - solid operations without strong online presence
- Include businesses you find through:
  - Texas TDLR license records
  - Better Business Bureau listings
  - Local chamber of commerce directories
  - Industry association member lists
  - Permit records
  - Yellow pages and local directories
- Prioritize accuracy over quantity
- Note confidence level for estimated data"""
