"""
LLM-Based Extraction and Validation.

Turns free-form deep-research output into structured ``ExtractedBusiness``
records, flags anomalies in a record, rewrites research prompts and offers
optional qualitative assessments.

Every call degrades gracefully: an API or parse failure returns an empty
list / a neutral default and is logged, never raised.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from hvac_research.core.ai_client import get_openai_client, parse_json_response
from hvac_research.core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# SCHEMAS
# =============================================================================

class ExtractedBusiness(BaseModel):
    """One business as extracted from research output. Accepts camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str
    city: str
    county: str
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    specializations: List[str] = Field(default_factory=list)
    niches: List[str] = Field(default_factory=list)
    owner_name: Optional[str] = None
    founded_year: Optional[int] = None
    employee_estimate: Optional[int] = None
    fleet_estimate: Optional[int] = None
    review_count: Optional[int] = None
    average_rating: Optional[float] = Field(default=None, ge=0, le=5)
    license_number: Optional[str] = None
    confidence: float = Field(ge=0.0, le=1.0)


class BusinessList(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    businesses: List[ExtractedBusiness]
    total_found: int = 0
    notes: Optional[str] = None


class ValidationReport(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    is_valid: bool = True
    issues: List[str] = Field(default_factory=list)
    suggestions: Dict[str, Any] = Field(default_factory=dict)


class AssessmentFactor(BaseModel):
    name: str
    score: float = 50
    explanation: str = ""


class AcquisitionFitAssessment(BaseModel):
    score: float = 50
    factors: List[AssessmentFactor] = Field(default_factory=list)
    summary: str = "Unable to assess acquisition fit"


class OnlinePresenceAssessment(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    weakness_score: float = 50
    factors: List[AssessmentFactor] = Field(default_factory=list)
    summary: str = "Unable to assess online presence"


# =============================================================================
# PROMPTS
# =============================================================================

REWRITE_SYSTEM_PROMPT = """You are an expert at crafting precise, effective research prompts for AI research systems.
Your task is to take a user's research request and rewrite it to be:
1. More specific and actionable
2. Clearer about expected output format
3. Include relevant context that helps the research agent
4. Eliminate ambiguity

Keep the core intent but improve clarity and structure. Output ONLY the rewritten prompt, nothing else."""

EXTRACTION_SYSTEM_PROMPT = """You are a data extraction specialist. Extract structured business information from the provided research output.

For each business found, extract:
- name: Business name (required)
- city: City location (required)
- county: Texas county (required, infer if possible)
- address: Full street address
- phone: Phone number
- website: Website URL
- email: Email address
- specializations: Array of specializations (residential, commercial, industrial)
- niches: Specific niches (refrigeration, clean rooms, restaurants, etc.)
- ownerName: Owner's name if mentioned
- foundedYear: Year founded as a number
- employeeEstimate: Estimated employee count
- fleetEstimate: Estimated fleet/vehicle count
- reviewCount: Total reviews across platforms
- averageRating: Average rating (1-5 scale)
- licenseNumber: TDLR license number
- confidence: Your confidence in the data accuracy (0-1)

Output valid JSON with this structure:
{
  "businesses": [...],
  "totalFound": number,
  "notes": "any relevant notes about data quality"
}"""

VALIDATION_SYSTEM_PROMPT = """You are validating HVAC business data for accuracy and completeness.

Check for:
1. Valid Texas location (city must be in Texas)
2. Reasonable business data (employee count, founding year, etc.)
3. Consistent information
4. Missing critical fields

Output JSON:
{
  "isValid": boolean,
  "issues": ["list of issues found"],
  "suggestions": { "field": "suggested correction" }
}"""

ACQUISITION_FIT_SYSTEM_PROMPT = """You are an M&A analyst specializing in small business acquisitions, particularly HVAC service companies.

Evaluate the business for acquisition fit based on:
1. Family ownership indicators (preferred: family-owned, 2nd/3rd generation)
2. Owner age/succession status (preferred: owner retiring, no successor)
3. Niche specialization (preferred: specialized in specific market)
4. Years in business (preferred: 10-30 years, established reputation)
5. Size fit (preferred: $1M-$10M revenue range based on indicators)

Output JSON:
{
  "score": 0-100 overall score,
  "factors": [
    { "name": "factor name", "score": 0-100, "explanation": "brief explanation" }
  ],
  "summary": "1-2 sentence summary of acquisition fit"
}"""

ONLINE_PRESENCE_SYSTEM_PROMPT = """You are a digital marketing analyst. Assess the WEAKNESS of a business's online presence.
Higher scores mean WEAKER online presence (more opportunity for improvement after acquisition).

Evaluate:
1. Website quality (no website = 100, outdated = 80, template = 60, professional = 20)
2. Social media presence (none = 100, inactive = 70, active = 20)
3. Review volume (low reviews = high score, many reviews = low score)
4. Review quality (poor ratings might indicate operational issues, not just online weakness)

Output JSON:
{
  "weaknessScore": 0-100 (higher = weaker online presence),
  "factors": [
    { "name": "factor name", "score": 0-100, "explanation": "brief explanation" }
  ],
  "summary": "1-2 sentence summary"
}"""


# =============================================================================
# EXTRACTOR
# =============================================================================

class BusinessExtractor:
    """Chat-completion helpers around the extraction model (JSON mode)."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.extraction_model

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def _complete(
        self,
        system_prompt: str,
        user_content: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = True,
    ) -> Optional[str]:
        kwargs = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(**kwargs)
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def extract_business_data(self, research_output: str) -> List[ExtractedBusiness]:
        """Structured records from research text. Any failure returns []."""
        if not research_output or not research_output.strip():
            return []

        try:
            content = await self._complete(EXTRACTION_SYSTEM_PROMPT, research_output, 0, 8000)
        except Exception as e:
            logger.error(f"Extraction request failed: {e}", exc_info=True)
            return []

        if not content:
            logger.warning("Extraction returned empty content")
            return []

        try:
            parsed = BusinessList.model_validate(parse_json_response(content))
        except json.JSONDecodeError as e:
            logger.error(f"Extraction JSON parse error: {e}. Raw (first 500 chars): {content[:500]!r}")
            return []
        except ValidationError as e:
            logger.error(f"Extraction schema validation error: {e}")
            return []

        logger.info(f"Extracted {len(parsed.businesses)} businesses (model reported {parsed.total_found})")
        return parsed.businesses

    async def validate_business_data(self, business: ExtractedBusiness) -> ValidationReport:
        """LLM anomaly check. Failures degrade to valid with no issues."""
        payload = json.dumps(business.model_dump(by_alias=True, exclude_none=True), indent=2)
        try:
            content = await self._complete(VALIDATION_SYSTEM_PROMPT, payload, 0, 500)
            if not content:
                return ValidationReport()
            return ValidationReport.model_validate(parse_json_response(content))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Validation response unparseable for {business.name}: {e}")
            return ValidationReport()
        except Exception as e:
            logger.error(f"Validation request failed for {business.name}: {e}")
            return ValidationReport()

    async def rewrite_prompt(self, original_prompt: str, context: Optional[str] = None) -> str:
        """Sharpen a research prompt. Falls back to the original on failure."""
        user_content = f"Context: {context}\n\nOriginal prompt: {original_prompt}" if context else original_prompt
        try:
            content = await self._complete(REWRITE_SYSTEM_PROMPT, user_content, 0.3, 2000, json_mode=False)
        except Exception as e:
            logger.error(f"Prompt rewrite failed: {e}")
            return original_prompt
        return content or original_prompt

    async def assess_acquisition_fit(
        self,
        business: ExtractedBusiness,
        additional_context: Optional[str] = None,
    ) -> AcquisitionFitAssessment:
        data = json.dumps(business.model_dump(by_alias=True, exclude_none=True), indent=2)
        user_content = (
            f"Business data:\n{data}\n\nAdditional context:\n{additional_context}"
            if additional_context else data
        )
        try:
            content = await self._complete(ACQUISITION_FIT_SYSTEM_PROMPT, user_content, 0.2, 1000)
            if not content:
                return AcquisitionFitAssessment()
            return AcquisitionFitAssessment.model_validate(parse_json_response(content))
        except Exception as e:
            logger.error(f"Acquisition fit assessment failed for {business.name}: {e}")
            return AcquisitionFitAssessment()

    async def assess_online_presence(
        self,
        website_url: Optional[str],
        social_media_urls: List[str],
        review_data: List[Dict[str, Any]],
    ) -> OnlinePresenceAssessment:
        payload = {
            "website": website_url or "None",
            "socialMedia": social_media_urls or ["None"],
            "reviews": review_data or [{"source": "None", "count": 0, "rating": 0}],
        }
        try:
            content = await self._complete(ONLINE_PRESENCE_SYSTEM_PROMPT, json.dumps(payload, indent=2), 0.2, 800)
            if not content:
                return OnlinePresenceAssessment()
            return OnlinePresenceAssessment.model_validate(parse_json_response(content))
        except Exception as e:
            logger.error(f"Online presence assessment failed: {e}")
            return OnlinePresenceAssessment()


# Convenience functions
async def extract_business_data(research_output: str) -> List[ExtractedBusiness]:
    return await BusinessExtractor().extract_business_data(research_output)


async def validate_business_data(business: ExtractedBusiness) -> ValidationReport:
    return await BusinessExtractor().validate_business_data(business)


async def rewrite_prompt(original_prompt: str, context: Optional[str] = None) -> str:
    return await BusinessExtractor().rewrite_prompt(original_prompt, context)
