"""
Review aggregation adapter (Google, Yelp, BBB, Facebook).

Collects per-platform rating and review counts through deep research and
turns them into a review-based online-weakness score. A weak review
footprint on a well-rated business is the opportunity being looked for.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from hvac_research.core.models import ReviewSource
from hvac_research.research.adapters.base import run_research
from hvac_research.research.deep_research import DeepResearchClient
from hvac_research.scoring.calculator import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_SOURCES = [ReviewSource.GOOGLE, ReviewSource.YELP, ReviewSource.BBB, ReviewSource.FACEBOOK]

# Volume, platform count, Google, rating quality
WEAKNESS_WEIGHTS = (0.30, 0.20, 0.35, 0.15)

PLATFORM_PATTERNS = [
    (ReviewSource.GOOGLE, re.compile(r"Google.*?Rating:\s*([\d.]+).*?Reviews?:\s*(\d+)", re.IGNORECASE | re.DOTALL)),
    (ReviewSource.YELP, re.compile(r"Yelp.*?Rating:\s*([\d.]+).*?Reviews?:\s*(\d+)", re.IGNORECASE | re.DOTALL)),
    (ReviewSource.BBB, re.compile(r"BBB.*?Rating:\s*([\d.]+).*?Reviews?:\s*(\d+)", re.IGNORECASE | re.DOTALL)),
    (ReviewSource.FACEBOOK, re.compile(r"Facebook.*?Rating:\s*([\d.]+).*?Reviews?:\s*(\d+)", re.IGNORECASE | re.DOTALL)),
]
POSITIVE_THEMES_PATTERN = re.compile(r"positive themes?:([^\n]+)", re.IGNORECASE)
NEGATIVE_THEMES_PATTERN = re.compile(r"negative themes?:([^\n]+)", re.IGNORECASE)


@dataclass
class ReviewSearchParams:
    business_name: str
    city: str
    state: str = "Texas"
    sources: Sequence[ReviewSource] = field(default_factory=lambda: list(DEFAULT_SOURCES))


@dataclass
class ReviewData:
    source: ReviewSource
    rating: float
    review_count: int
    average_rating: float
    profile_url: Optional[str] = None
    sentiment_score: Optional[float] = None
    common_themes: List[str] = field(default_factory=list)


@dataclass
class AggregatedReviews:
    business_name: str
    overall_rating: float = 0.0
    total_reviews: int = 0
    sources: List[ReviewData] = field(default_factory=list)
    strengths_themes: List[str] = field(default_factory=list)
    weakness_themes: List[str] = field(default_factory=list)
    sentiment: str = "neutral"  # positive | neutral | negative | mixed


@dataclass
class WeaknessFactor:
    name: str
    score: int
    explanation: str


@dataclass
class ReviewWeaknessScore:
    score: int
    factors: List[WeaknessFactor]


def build_review_prompt(params: ReviewSearchParams) -> str:
    sources = "\n".join(f"- {ReviewSource(s).value}" for s in params.sources)
    return f"""Research online reviews for "{params.business_name}" HVAC company in {params.city}, {params.state}.

## Sources to Check
{sources}

## Information to Collect

For each review platform:
1. Overall rating (1-5 stars)
2. Total number of reviews
3. Profile/listing URL
4. Sample of recent reviews (3-5 reviews)
5. Common positive themes
6. Common negative themes

## Analysis Tasks
- Calculate sentiment score (-1 negative to +1 positive)
- Identify recurring themes in feedback
- Note any red flags or exceptional praise
- Compare to typical HVAC company ratings

## Output Format
Provide structured data for each source:

**[Platform Name]**
- Rating: [X.X] / 5.0
- Reviews: [Count]
- URL: [Profile link]
- Recent Reviews:
  - "[Review excerpt]" - [Rating] stars ([Date])
- Positive Themes: [List]
- Negative Themes: [List]
- Sentiment: [positive/neutral/negative]

End with overall summary comparing across platforms."""


async def aggregate_reviews(
    params: ReviewSearchParams,
    client: Optional[DeepResearchClient] = None,
) -> AggregatedReviews:
    """Research review platforms for a business. Failures return an empty aggregate."""
    output = await run_research(build_review_prompt(params), 25, 10 * 60, client, label="Review")
    if output is None:
        return AggregatedReviews(business_name=params.business_name)
    return parse_review_results(params.business_name, output)


async def get_source_reviews(
    business_name: str,
    city: str,
    source: ReviewSource,
    client: Optional[DeepResearchClient] = None,
) -> Optional[ReviewData]:
    aggregated = await aggregate_reviews(
        ReviewSearchParams(business_name=business_name, city=city, sources=[source]), client
    )
    return next((s for s in aggregated.sources if s.source == source), None)


def _split_themes(match: Optional[re.Match]) -> List[str]:
    if not match:
        return []
    return [t.strip() for t in re.split(r"[,;]", match.group(1)) if t.strip()]


def parse_review_results(business_name: str, output: str) -> AggregatedReviews:
    """
    Per-platform rating and count, themes, and a review-count-weighted
    overall rating that drives the sentiment label.
    """
    output = output or ""
    sources: List[ReviewData] = []
    total_reviews = 0
    weighted_sum = 0.0

    for source, pattern in PLATFORM_PATTERNS:
        match = pattern.search(output)
        if not match:
            continue
        try:
            rating = float(match.group(1).rstrip("."))
            count = int(match.group(2))
        except ValueError:
            logger.debug(f"Unparseable {source.value} rating for {business_name}: {match.group(0)[:80]!r}")
            continue

        sources.append(ReviewData(source=source, rating=rating, review_count=count, average_rating=rating))
        total_reviews += count
        weighted_sum += rating * count

    avg_rating = weighted_sum / total_reviews if total_reviews else 0.0

    if avg_rating >= 4.2:
        sentiment = "positive"
    elif avg_rating >= 3.5:
        sentiment = "neutral"
    elif avg_rating >= 2.5:
        sentiment = "mixed"
    elif avg_rating > 0:
        sentiment = "negative"
    else:
        sentiment = "neutral"

    return AggregatedReviews(
        business_name=business_name,
        overall_rating=round(avg_rating, 1) if total_reviews else 0.0,
        total_reviews=total_reviews,
        sources=sources,
        strengths_themes=_split_themes(POSITIVE_THEMES_PATTERN.search(output)),
        weakness_themes=_split_themes(NEGATIVE_THEMES_PATTERN.search(output)),
        sentiment=sentiment,
    )


def calculate_review_weakness_score(reviews: AggregatedReviews) -> ReviewWeaknessScore:
    """Higher score means a weaker review footprint (better target)."""
    factors: List[WeaknessFactor] = []

    total = reviews.total_reviews
    if total >= 100:
        volume = 20
    elif total >= 50:
        volume = 40
    elif total >= 20:
        volume = 60
    elif total >= 10:
        volume = 80
    else:
        volume = 100
    factors.append(WeaknessFactor("Review Volume", volume, f"{total} total reviews across platforms"))

    platforms = sum(1 for s in reviews.sources if s.review_count > 0)
    platform_score = {0: 100, 1: 80, 2: 60, 3: 40}.get(platforms, 20)
    factors.append(WeaknessFactor("Platform Presence", platform_score, f"Present on {platforms} review platforms"))

    google = next((s for s in reviews.sources if s.source == ReviewSource.GOOGLE), None)
    if google is None:
        google_score = 100
    elif google.review_count >= 50:
        google_score = 20
    elif google.review_count >= 25:
        google_score = 40
    elif google.review_count >= 10:
        google_score = 60
    else:
        google_score = 80
    factors.append(WeaknessFactor(
        "Google Presence",
        google_score,
        f"{google.review_count} Google reviews" if google else "No Google presence found",
    ))

    # Low ratings point at operational problems, not an online-presence gap
    rating = reviews.overall_rating
    if rating >= 4.5:
        rating_score = 30
    elif rating >= 4.0:
        rating_score = 40
    elif rating >= 3.5:
        rating_score = 50
    elif rating >= 3.0:
        rating_score = 60
    elif rating > 0:
        rating_score = 40
    else:
        rating_score = 50
    factors.append(WeaknessFactor(
        "Rating Quality",
        rating_score,
        f"{rating:.1f} average rating" if rating > 0 else "No ratings available",
    ))

    weighted = sum(f.score * w for f, w in zip(factors, WEAKNESS_WEIGHTS))
    return ReviewWeaknessScore(score=round_half_up(weighted), factors=factors)


def review_data_to_model_kwargs(data: ReviewData) -> Dict[str, Any]:
    """Keyword arguments for a ReviewModel row."""
    return {
        "source": ReviewSource(data.source).value,
        "rating": data.rating,
        "review_count": data.review_count,
        "average_rating": data.average_rating,
        "sentiment_score": data.sentiment_score,
        "common_themes": list(data.common_themes),
        "profile_url": data.profile_url,
    }
