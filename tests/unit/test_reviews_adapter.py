"""
Tests for review aggregation parsing and the review-weakness score.
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from hvac_research.core.models import ReviewSource
from hvac_research.research.adapters.reviews import (
    AggregatedReviews,
    ReviewSearchParams,
    aggregate_reviews,
    calculate_review_weakness_score,
    get_source_reviews,
    parse_review_results,
    review_data_to_model_kwargs,
)
from hvac_research.research.deep_research import ResearchResult, ResearchStatus

REVIEW_REPORT = """**Google**
- Rating: 4.6 / 5.0
- Reviews: 40
- URL: https://maps.google.com/?cid=123

**Yelp**
- Rating: 3.8 / 5.0
- Reviews: 10

- Positive Themes: fast service, fair pricing; honest techs
- Negative Themes: scheduling delays
"""


class TestParseReviewResults:

    def test_platforms(self):
        aggregated = parse_review_results("Lone Star Cooling", REVIEW_REPORT)
        assert [(s.source, s.rating, s.review_count) for s in aggregated.sources] == [
            (ReviewSource.GOOGLE, 4.6, 40),
            (ReviewSource.YELP, 3.8, 10),
        ]
        assert aggregated.total_reviews == 50

    def test_weighted_rating_and_sentiment(self):
        aggregated = parse_review_results("Lone Star Cooling", REVIEW_REPORT)
        # (4.6 * 40 + 3.8 * 10) / 50 = 4.44
        assert aggregated.overall_rating == 4.4
        assert aggregated.sentiment == "positive"

    def test_themes(self):
        aggregated = parse_review_results("Lone Star Cooling", REVIEW_REPORT)
        assert aggregated.strengths_themes == ["fast service", "fair pricing", "honest techs"]
        assert aggregated.weakness_themes == ["scheduling delays"]

    @pytest.mark.parametrize("rating, sentiment", [
        ("3.5", "neutral"),
        ("3.0", "mixed"),
        ("2.0", "negative"),
    ])
    def test_sentiment_bands(self, rating, sentiment):
        aggregated = parse_review_results("X", f"Google Rating: {rating} Reviews: 12")
        assert aggregated.sentiment == sentiment

    def test_nothing_found(self):
        aggregated = parse_review_results("X", "No listings could be located.")
        assert aggregated.sources == []
        assert aggregated.overall_rating == 0.0
        assert aggregated.sentiment == "neutral"


class TestReviewWeaknessScore:

    def test_no_reviews_is_weakest(self):
        result = calculate_review_weakness_score(AggregatedReviews(business_name="X"))
        # 100*.30 + 100*.20 + 100*.35 + 50*.15 = 92.5
        assert result.score == 93
        assert [f.name for f in result.factors] == [
            "Review Volume", "Platform Presence", "Google Presence", "Rating Quality",
        ]
        assert result.factors[2].explanation == "No Google presence found"

    def test_established_footprint(self):
        aggregated = parse_review_results("Lone Star Cooling", REVIEW_REPORT)
        result = calculate_review_weakness_score(aggregated)
        # volume 40, platforms 60, google 40, rating 40
        # 12 + 12 + 14 + 6 = 44
        assert [f.score for f in result.factors] == [40, 60, 40, 40]
        assert result.score == 44


class TestAggregateReviews:

    def _client(self, output):
        client = MagicMock()
        client.start = AsyncMock(return_value=ResearchResult(id="resp_9", status=ResearchStatus.PENDING))
        client.wait_for_completion = AsyncMock(
            return_value=ResearchResult(id="resp_9", status=ResearchStatus.COMPLETED, output=output)
        )
        return client

    @pytest.mark.asyncio
    async def test_aggregate(self):
        client = self._client(REVIEW_REPORT)
        aggregated = await aggregate_reviews(
            ReviewSearchParams(business_name="Lone Star Cooling", city="Austin"), client
        )
        assert aggregated.total_reviews == 50
        prompt = client.start.call_args.args[0]
        assert '"Lone Star Cooling" HVAC company in Austin, Texas' in prompt
        assert "- BBB" in prompt

    @pytest.mark.asyncio
    async def test_empty_output_gives_empty_aggregate(self):
        aggregated = await aggregate_reviews(
            ReviewSearchParams(business_name="Lone Star Cooling", city="Austin"), self._client("")
        )
        assert aggregated.business_name == "Lone Star Cooling"
        assert aggregated.sources == []

    @pytest.mark.asyncio
    async def test_single_source(self):
        yelp = await get_source_reviews(
            "Lone Star Cooling", "Austin", ReviewSource.YELP, self._client(REVIEW_REPORT)
        )
        assert yelp.review_count == 10

        bbb = await get_source_reviews(
            "Lone Star Cooling", "Austin", ReviewSource.BBB, self._client(REVIEW_REPORT)
        )
        assert bbb is None


def test_review_data_to_model_kwargs():
    google = parse_review_results("X", REVIEW_REPORT).sources[0]
    kwargs = review_data_to_model_kwargs(google)
    assert kwargs["source"] == "GOOGLE"
    assert kwargs["review_count"] == 40
    assert kwargs["common_themes"] == []
