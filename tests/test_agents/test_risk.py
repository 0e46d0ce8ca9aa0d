"""
Unit tests for Risk Detector and Suggestion Engine.
"""

from reviewsense.agents.risk import (
    HIGH_NEGATIVE_RATE,
    NEGATIVE_SENTIMENT_SPIKE,
    NO_RISK_SUGGESTION,
    PROMOTION_SUGGESTION,
    RISK_SUGGESTIONS,
    TECHNICAL_ISSUES,
    RiskDetector,
    SuggestionEngine,
)
from reviewsense.models.report import Risk, SentimentDistribution, Stats


def _stats(positive_rate, total=100):
    positive = positive_rate * total // 100
    return Stats(
        total=total,
        positive=positive,
        negative=total - positive,
        positive_rate=positive_rate,
        sentiment_dist=SentimentDistribution(),
        avg_playtime=0
    )


def test_spike_and_technical_issues_example(make_review):
    reviews = (
        [make_review("闪退 优化差 退款") for _ in range(20)]
        + [make_review("好玩") for _ in range(30)]
    )

    risks = RiskDetector().detect(reviews, _stats(100, total=50))

    assert [r.type for r in risks] == [NEGATIVE_SENTIMENT_SPIKE, TECHNICAL_ISSUES]
    assert all(r.level == "medium" for r in risks)


def test_high_negative_rate(make_review):
    risks = RiskDetector().detect([make_review("一般")], _stats(49))

    assert len(risks) == 1
    assert risks[0].type == HIGH_NEGATIVE_RATE
    assert risks[0].level == "high"


def test_no_risks(make_review):
    reviews = [make_review("好玩") for _ in range(10)]
    assert RiskDetector().detect(reviews, _stats(50)) == ()


def test_thresholds_are_strict(make_review):
    # Exactly 30% negative terms and exactly 20% technical terms
    reviews = (
        [make_review("想退款") for _ in range(3)]
        + [make_review("好玩") for _ in range(7)]
    )
    assert RiskDetector().detect(reviews, _stats(80, total=10)) == ()

    reviews = (
        [make_review("服务器炸了") for _ in range(2)]
        + [make_review("好玩") for _ in range(8)]
    )
    assert RiskDetector().detect(reviews, _stats(80, total=10)) == ()


def test_technical_match_is_case_insensitive(make_review):
    reviews = [make_review("BUG") for _ in range(3)] + [make_review("ok") for _ in range(7)]

    risks = RiskDetector().detect(reviews, _stats(80, total=10))

    assert [r.type for r in risks] == [TECHNICAL_ISSUES]


def test_all_three_risks(make_review):
    reviews = [make_review("垃圾，卡顿") for _ in range(10)]
    risks = RiskDetector().detect(reviews, _stats(10, total=10))
    assert [r.type for r in risks] == [HIGH_NEGATIVE_RATE, NEGATIVE_SENTIMENT_SPIKE, TECHNICAL_ISSUES]


def test_good_standing_suggestion():
    suggestions = SuggestionEngine().suggest((), _stats(65))
    assert suggestions == (NO_RISK_SUGGESTION,)


def test_promotion_added_regardless_of_risks():
    risks = (Risk(TECHNICAL_ISSUES, "medium", "tech"),)

    suggestions = SuggestionEngine().suggest(risks, _stats(90))

    assert suggestions == (RISK_SUGGESTIONS[TECHNICAL_ISSUES], PROMOTION_SUGGESTION)


def test_promotion_threshold_is_strict():
    assert PROMOTION_SUGGESTION not in SuggestionEngine().suggest((), _stats(70))
    assert PROMOTION_SUGGESTION in SuggestionEngine().suggest((), _stats(71))


def test_one_suggestion_per_risk_in_order():
    risks = (
        Risk(HIGH_NEGATIVE_RATE, "high", "a"),
        Risk(NEGATIVE_SENTIMENT_SPIKE, "medium", "b"),
        Risk(TECHNICAL_ISSUES, "medium", "c"),
    )

    suggestions = SuggestionEngine().suggest(risks, _stats(30))

    assert suggestions == (
        RISK_SUGGESTIONS[HIGH_NEGATIVE_RATE],
        RISK_SUGGESTIONS[NEGATIVE_SENTIMENT_SPIKE],
        RISK_SUGGESTIONS[TECHNICAL_ISSUES],
    )


def test_unknown_risk_type_is_ignored():
    risks = (Risk("price_complaints", "medium", "too expensive"),)
    assert SuggestionEngine().suggest(risks, _stats(50)) == ()
