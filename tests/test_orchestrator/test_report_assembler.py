"""
Unit tests for the Report Assembler.
"""

import asyncio
import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from reviewsense.agents.augmentation import AIAugmenter
from reviewsense.models.ai_outcome import AIKeyPoint, Structured, Unavailable, Unstructured
from reviewsense.models.report import StatsSnapshot
from reviewsense.orchestrator import NO_DATA_SUMMARY, ReportAssembler

NOW = datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)


def _batch(make_review):
    """10 reviews, 8 recommended, three of them reporting technical problems."""
    reviews = [
        make_review("剧情很棒，画面也好看", helpful=5, comment_count=1, sentiment="positive", sentiment_score=0.5)
        for _ in range(7)
    ]
    reviews.append(make_review("还行吧，偶尔有bug", helpful=0))
    reviews.append(make_review("闪退太多了", recommended=False, helpful=3, sentiment="negative", sentiment_score=-0.8))
    reviews.append(make_review("一直卡顿", recommended=False, helpful=1, sentiment="negative", sentiment_score=-0.8))
    return reviews


def _fake_augmenter(outcome):
    augmenter = MagicMock()
    augmenter.enabled = True
    augmenter.augment = AsyncMock(return_value=outcome)
    return augmenter


def test_empty_batch_returns_stub():
    report = asyncio.run(ReportAssembler().generate([], now=NOW))

    assert report.summary == NO_DATA_SUMMARY
    assert report.stats.total == 0
    assert report.sentiment.rating == "neutral"
    assert report.sentiment.score == 0
    assert report.key_points == ()
    assert report.risks == ()
    assert report.suggestions == ()
    assert report.ai_generated is False
    assert report.updated_at == NOW


def test_rule_based_report(make_review):
    report = asyncio.run(ReportAssembler().generate(_batch(make_review), now=NOW))

    assert report.stats.total == 10
    assert report.stats.positive_rate == 80
    assert report.stats.sentiment_dist.negative == 2
    assert report.sentiment.rating == "positive"
    assert report.sentiment.score == 85
    assert report.summary.startswith("Reviews are overwhelmingly positive (80% recommend it)")
    assert report.keywords[0].word == "剧情"
    assert report.keywords[0].count == 7
    assert [p.type for p in report.key_points] == ["positive"] * 3 + ["negative"] * 2
    assert report.overall.trend == "stable"
    assert report.overall.heat == 46  # 4.6 interactions on average
    assert report.ai_generated is False
    assert report.ai_analysis is None


def test_rule_based_report_is_deterministic(make_review):
    reviews = _batch(make_review)
    assembler = ReportAssembler()

    first = assembler.assemble(reviews, now=NOW)
    second = assembler.assemble(reviews, now=NOW)

    assert first == second


def test_technical_risk_detected(make_review):
    report = ReportAssembler().assemble(_batch(make_review), now=NOW)

    assert [r.type for r in report.risks] == ["technical_issues"]
    assert "Prioritize technical fixes and ship a stability/performance patch." in report.suggestions
    assert "Reputation is strong; consider increasing promotion." in report.suggestions


def test_trend_against_previous_snapshot(make_review):
    previous = StatsSnapshot(date="2024-06-30", total=10, positive_rate=70)

    report = ReportAssembler().assemble(_batch(make_review), previous=previous, now=NOW)

    assert report.overall.trend == "improving"
    assert report.overall.change == 10


def test_structured_outcome_merged(make_review):
    reviews = _batch(make_review)
    outcome = Structured(
        summary="AI summary",
        key_points=(AIKeyPoint(type="negative", content="x" * 150),),
        strengths=("story",),
        weaknesses=("crashes",),
        sentiment="neutral"
    )
    baseline = ReportAssembler().assemble(reviews, now=NOW)

    report = asyncio.run(ReportAssembler(augmenter=_fake_augmenter(outcome)).generate(reviews, now=NOW))

    assert report.ai_generated is True
    assert report.summary == "AI summary"
    assert report.sentiment.rating == "neutral"
    assert report.sentiment.score == 85
    assert report.overall.rating == "neutral"
    assert len(report.key_points) == 1
    assert report.key_points[0].content == "x" * 100 + "..."
    assert report.ai_analysis.strengths == ("story",)
    # Rule-based parts are untouched by the AI step
    assert report.risks == baseline.risks
    assert report.suggestions == baseline.suggestions
    assert report.stats == baseline.stats
    assert report.keywords == baseline.keywords


def test_structured_without_sentiment_keeps_rating(make_review):
    reviews = _batch(make_review)
    outcome = Structured(summary="AI summary")

    report = ReportAssembler().assemble(reviews, outcome=outcome, now=NOW)

    assert report.sentiment.rating == "positive"
    assert len(report.key_points) == 5


def test_unstructured_outcome_overrides_summary_only(make_review):
    reviews = _batch(make_review)
    baseline = ReportAssembler().assemble(reviews, now=NOW)

    report = asyncio.run(
        ReportAssembler(augmenter=_fake_augmenter(Unstructured("plain text answer"))).generate(reviews, now=NOW)
    )

    assert report.ai_generated is True
    assert report.summary == "plain text answer"
    assert report.ai_analysis is None
    assert report.key_points == baseline.key_points
    assert report.sentiment == baseline.sentiment


def test_unavailable_outcome_falls_back(make_review):
    reviews = _batch(make_review)
    baseline = ReportAssembler().assemble(reviews, now=NOW)

    report = asyncio.run(
        ReportAssembler(augmenter=_fake_augmenter(Unavailable("timeout"))).generate(reviews, now=NOW)
    )

    assert report == baseline


def test_disabled_augmenter_is_not_called(make_review):
    augmenter = _fake_augmenter(Unstructured("never used"))
    augmenter.enabled = False

    report = asyncio.run(ReportAssembler(augmenter=augmenter).generate(_batch(make_review), now=NOW))

    augmenter.augment.assert_not_called()
    assert report.ai_generated is False


def test_missing_credential_produces_rule_based_report(make_review):
    augmenter = AIAugmenter(api_key="")

    report = asyncio.run(ReportAssembler(augmenter=augmenter).generate(_batch(make_review), now=NOW))

    assert report.ai_generated is False
    assert report.summary.startswith("Reviews are overwhelmingly positive")


def test_report_is_json_serializable(make_review):
    report = ReportAssembler().assemble(_batch(make_review), now=NOW)

    data = json.loads(json.dumps(report.to_dict(), ensure_ascii=False))

    assert data["stats"]["positive_rate"] == 80
    assert data["updated_at"] == NOW.isoformat()


def test_malformed_ai_payload_still_produces_report(make_review):
    body = '{"summary": "x", "keyPoints": ' + "[" * 100000 + "]" * 100000 + "}"

    with patch('reviewsense.agents.augmentation.genai') as mock_genai:
        mock_model = MagicMock()
        mock_model.generate_content_async = AsyncMock(return_value=MagicMock(text=body))
        mock_genai.GenerativeModel.return_value = mock_model
        augmenter = AIAugmenter(api_key="test-key")

        report = asyncio.run(ReportAssembler(augmenter=augmenter).generate(_batch(make_review), now=NOW))

    assert report.ai_generated is True
    assert report.summary == body
    assert report.ai_analysis is None
