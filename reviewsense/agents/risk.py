"""
Risk Detector and Suggestion Engine.

Heuristic risk flags over a review batch, and the action suggestions
derived from them.
"""

import logging
from typing import List, Sequence, Tuple

from reviewsense.models.lexicon import Lexicon, DEFAULT_LEXICON
from reviewsense.models.report import Risk, Stats
from reviewsense.models.review import Review

logger = logging.getLogger(__name__)

HIGH_NEGATIVE_RATE = "high_negative_rate"
NEGATIVE_SENTIMENT_SPIKE = "negative_sentiment_spike"
TECHNICAL_ISSUES = "technical_issues"

RISK_MESSAGES = {
    HIGH_NEGATIVE_RATE: "Negative review rate is too high and needs urgent attention.",
    NEGATIVE_SENTIMENT_SPIKE: "A large share of reviews express strong negative sentiment; investigate product issues.",
    TECHNICAL_ISSUES: "Many reviewers report technical problems; prioritize fixes.",
}

RISK_SUGGESTIONS = {
    HIGH_NEGATIVE_RATE: "Respond to reviewer concerns publicly and publish an improvement plan.",
    NEGATIVE_SENTIMENT_SPIKE: "Watch community feedback closely and fix experience-breaking issues quickly.",
    TECHNICAL_ISSUES: "Prioritize technical fixes and ship a stability/performance patch.",
}

NO_RISK_SUGGESTION = "Sentiment is healthy; keep up the current course."
PROMOTION_SUGGESTION = "Reputation is strong; consider increasing promotion."


class RiskDetector:
    """
    Three independent checks, each adding at most one Risk:

    1. positive_rate < 50                                 -> high_negative_rate (high)
    2. > 30% of reviews contain a risk negative term      -> negative_sentiment_spike (medium)
    3. > 20% of reviews match a technical issue term      -> technical_issues (medium)
    """

    def __init__(
        self,
        lexicon: Lexicon = DEFAULT_LEXICON,
        negative_rate_threshold: int = 50,
        spike_ratio: float = 0.3,
        technical_ratio: float = 0.2
    ):
        self.risk_negative_terms = lexicon.risk_negative_terms
        self.technical_pattern = lexicon.technical_issue_pattern()
        self.negative_rate_threshold = negative_rate_threshold
        self.spike_ratio = spike_ratio
        self.technical_ratio = technical_ratio

    def detect(self, reviews: Sequence[Review], stats: Stats) -> Tuple[Risk, ...]:
        risks: List[Risk] = []
        total = len(reviews)

        if stats.positive_rate < self.negative_rate_threshold:
            risks.append(Risk(HIGH_NEGATIVE_RATE, "high", RISK_MESSAGES[HIGH_NEGATIVE_RATE]))

        negative_count = sum(
            1 for r in reviews
            if any(term in (r.content or "") for term in self.risk_negative_terms)
        )
        if negative_count > total * self.spike_ratio:
            risks.append(Risk(
                NEGATIVE_SENTIMENT_SPIKE, "medium", RISK_MESSAGES[NEGATIVE_SENTIMENT_SPIKE]
            ))

        technical_count = sum(
            1 for r in reviews if self.technical_pattern.search(r.content or "")
        )
        if technical_count > total * self.technical_ratio:
            risks.append(Risk(TECHNICAL_ISSUES, "medium", RISK_MESSAGES[TECHNICAL_ISSUES]))

        if risks:
            logger.info(f"Detected {len(risks)} risks: {[r.type for r in risks]}")
        return tuple(risks)


class SuggestionEngine:
    """Turns detected risks (and a high positive rate) into suggestions."""

    def __init__(self, promotion_threshold: int = 70):
        self.promotion_threshold = promotion_threshold

    def suggest(self, risks: Sequence[Risk], stats: Stats) -> Tuple[str, ...]:
        suggestions: List[str] = []

        if not risks:
            suggestions.append(NO_RISK_SUGGESTION)
        for risk in risks:
            suggestion = RISK_SUGGESTIONS.get(risk.type)
            if suggestion is None:
                logger.debug(f"No suggestion mapped for risk type {risk.type}")
                continue
            suggestions.append(suggestion)

        if stats.positive_rate > self.promotion_threshold:
            suggestions.append(PROMOTION_SUGGESTION)

        return tuple(suggestions)


# Design Rationale and Trade-offs:
#
# 1. Why substring checks instead of the classifier score?
#    - Risk terms (refunds, crashes) matter even inside positive reviews
#    - Trade-off: No negation handling
#
# 2. Why skip unknown risk types in SuggestionEngine?
#    - New checks can be added before their suggestion text exists
