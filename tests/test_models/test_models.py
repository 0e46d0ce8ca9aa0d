"""
Unit tests for data model validation and serialization.
"""

import json
from datetime import datetime, timezone

import pytest

from reviewsense.models.ai_outcome import Structured
from reviewsense.models.report import (
    AIAnalysis,
    KeyPoint,
    KeywordCount,
    OverallAssessment,
    Report,
    Risk,
    SentimentDistribution,
    SentimentRating,
    Stats,
)
from reviewsense.models.review import Review


def test_review_validation():
    when = datetime(2024, 6, 1, tzinfo=timezone.utc)

    with pytest.raises(ValueError):
        Review(content="x", recommended=True, date=when, sentiment="angry")
    with pytest.raises(ValueError):
        Review(content="x", recommended=True, date=when, sentiment_score=1.5)
    with pytest.raises(ValueError):
        Review(content="x", recommended=True, date=when, helpful=-1)
    with pytest.raises(ValueError):
        Review(content="x", recommended=True, date=when, keywords=tuple("abcdef"))


def test_review_is_immutable(make_review):
    review = make_review("x")
    with pytest.raises(AttributeError):
        review.content = "changed"


def test_review_serialization(make_review):
    review = make_review("好玩", helpful=3, keywords=("好玩",), topics=("画面",), sentiment="positive", sentiment_score=0.5)

    restored = Review.from_dict(review.to_dict())

    assert restored == review


def test_stats_validation():
    with pytest.raises(ValueError):
        Stats(total=10, positive=8, negative=1, positive_rate=80,
              sentiment_dist=SentimentDistribution(), avg_playtime=0)
    with pytest.raises(ValueError):
        Stats(total=10, positive=10, negative=0, positive_rate=101,
              sentiment_dist=SentimentDistribution(), avg_playtime=0)


def test_enum_like_fields_validated():
    with pytest.raises(ValueError):
        KeyPoint(type="mixed", content="x")
    with pytest.raises(ValueError):
        Risk(type="technical_issues", level="low", message="x")
    with pytest.raises(ValueError):
        SentimentRating(rating="great", score=50, label="x")
    with pytest.raises(ValueError):
        OverallAssessment(rating="neutral", score=50, trend="sideways")
    with pytest.raises(ValueError):
        Structured(summary="x", sentiment="ecstatic")


def test_report_json_serializable():
    report = Report(
        summary="好评如潮",
        key_points=(KeyPoint(type="positive", content="剧情好", helpful=3, playtime_hours=10),),
        sentiment=SentimentRating(rating="positive", score=85, label="overwhelmingly positive"),
        stats=Stats(total=10, positive=8, negative=2, positive_rate=80,
                    sentiment_dist=SentimentDistribution(positive=6, neutral=3, negative=1),
                    avg_playtime=12),
        keywords=(KeywordCount(word="剧情", count=4),),
        risks=(Risk(type="technical_issues", level="medium", message="bugs"),),
        suggestions=("fix bugs",),
        overall=OverallAssessment(rating="positive", score=85, trend="improving", change=7, heat=40),
        updated_at=datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc),
        ai_generated=True,
        ai_analysis=AIAnalysis(strengths=("story",))
    )

    encoded = json.dumps(report.to_dict(), ensure_ascii=False)
    decoded = json.loads(encoded)

    assert decoded["stats"]["positive_rate"] == 80
    assert decoded["ai_analysis"]["strengths"] == ["story"]
    assert Report.from_dict(decoded) == report
