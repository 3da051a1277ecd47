import json
import logging
import re
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from hvac_research.core.config import settings

logger = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None


def get_openai_client() -> AsyncOpenAI:
    """
    Shared AsyncOpenAI client for deep research and extraction.
    Built lazily so importing modules never needs an API key.
    """
    global _client
    if _client is None:
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY not set. Research and extraction calls will fail.")
        _client = AsyncOpenAI(
            api_key=settings.openai_api_key or "missing",
            base_url=settings.openai_api_base,
            timeout=settings.llm_request_timeout,
        )
    return _client


def parse_json_response(raw_content: Optional[str]) -> Dict[str, Any]:
    """
    Pull a JSON object out of an LLM reply (raw, fenced or wrapped in prose).
    Raises json.JSONDecodeError when nothing parseable is found.
    """
    raw_content = raw_content or ""

    json_match = re.search(r"\{.*\}", raw_content, re.DOTALL)
    if json_match:
        content = json_match.group(0)
    elif "```json" in raw_content:
        content = raw_content.split("```json")[1].split("```")[0]
    elif "```" in raw_content:
        content = raw_content.split("```")[1].split("```")[0]
    else:
        content = raw_content

    return json.loads(content.strip())
