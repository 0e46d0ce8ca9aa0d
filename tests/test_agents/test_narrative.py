"""
Unit tests for key point selection, narrative generation and rating.
"""

import pytest

from reviewsense.agents.narrative import (
    NarrativeGenerator,
    RepresentativeExcerptSelector,
    SentimentRater,
    truncate_excerpt,
)
from reviewsense.models.report import KeyPoint, KeywordCount, SentimentDistribution


def test_truncate_excerpt():
    assert truncate_excerpt("a" * 100) == "a" * 100
    assert truncate_excerpt("a" * 101) == "a" * 100 + "..."
    assert truncate_excerpt("") == ""


def test_selects_top_three_by_helpful(make_review):
    reviews = [
        make_review("ten", helpful=10),
        make_review("fifty", helpful=50),
        make_review("five", helpful=5),
        make_review("thirty", helpful=30),
    ]

    points = RepresentativeExcerptSelector().select(reviews)

    assert [p.content for p in points] == ["fifty", "thirty", "ten"]
    assert all(p.type == "positive" for p in points)
    assert [p.helpful for p in points] == [50, 30, 10]


def test_unhelpful_reviews_are_ignored(make_review):
    reviews = [
        make_review("no votes", helpful=0),
        make_review("no votes either", recommended=False, helpful=0),
    ]
    assert RepresentativeExcerptSelector().select(reviews) == ()


def test_positive_points_precede_negative(make_review):
    reviews = [
        make_review("bad", recommended=False, helpful=99, playtime_hours=2),
        make_review("good", recommended=True, helpful=1, playtime_hours=40),
    ]

    points = RepresentativeExcerptSelector().select(reviews)

    assert points == (
        KeyPoint(type="positive", content="good", helpful=1, playtime_hours=40),
        KeyPoint(type="negative", content="bad", helpful=99, playtime_hours=2),
    )


def test_key_point_content_is_truncated(make_review):
    points = RepresentativeExcerptSelector().select([make_review("x" * 150, helpful=3)])
    assert points[0].content == "x" * 100 + "..."


def _generate(positive_rate, keywords=(), key_points=()):
    return NarrativeGenerator().generate(
        total=10,
        positive_rate=positive_rate,
        sentiment_dist=SentimentDistribution(),
        top_keywords=keywords,
        key_points=key_points
    )


@pytest.mark.parametrize("rate,phrase", [
    (95, "overwhelmingly positive"),
    (80, "overwhelmingly positive"),
    (60, "mostly positive"),
    (40, "mixed"),
    (39, "lean negative"),
])
def test_opening_sentence_by_bucket(rate, phrase):
    summary = _generate(rate)
    assert phrase in summary
    assert f"{rate}%" in summary


def test_sections_omitted_without_data():
    summary = _generate(80)
    assert "\n\n" not in summary
    assert "Trending topics" not in summary
    assert "reviewers" not in summary


def test_full_narrative():
    keywords = [KeywordCount(word=w, count=10 - i) for i, w in enumerate("ABCDEFG")]
    key_points = [
        KeyPoint(type="positive", content="great story"),
        KeyPoint(type="positive", content="second praise"),
        KeyPoint(type="negative", content="crashes a lot"),
    ]

    parts = _generate(65, keywords, key_points).split("\n\n")

    assert len(parts) == 4
    assert parts[1] == "Trending topics: A, B, C, D, E."
    assert parts[2] == "Positive reviewers note: great story"
    assert parts[3] == "Negative reviewers point out: crashes a lot"


def test_negative_point_without_positive():
    parts = _generate(10, key_points=[KeyPoint(type="negative", content="refund")]).split("\n\n")
    assert len(parts) == 2
    assert parts[1].endswith("refund")


@pytest.mark.parametrize("rate,expected", [
    (100, ("positive", 85, "overwhelmingly positive")),
    (80, ("positive", 85, "overwhelmingly positive")),
    (79, ("positive", 70, "mostly positive")),
    (60, ("positive", 70, "mostly positive")),
    (59, ("neutral", 50, "mixed")),
    (40, ("neutral", 50, "mixed")),
    (39, ("negative", 35, "mostly negative")),
    (20, ("negative", 35, "mostly negative")),
    (19, ("negative", 20, "overwhelmingly negative")),
    (0, ("negative", 20, "overwhelmingly negative")),
])
def test_rating_buckets(rate, expected):
    rating = SentimentRater().rate(rate, SentimentDistribution())
    assert (rating.rating, rating.score, rating.label) == expected


def test_rating_ignores_distribution():
    rater = SentimentRater()
    skewed = SentimentDistribution(positive=0, neutral=0, negative=100)
    assert rater.rate(85, skewed) == rater.rate(85)
