"""
Batch aggregation: statistics, keyword frequency, heat and trend.

Every function here is a pure computation over a non-empty review batch.
The empty batch is rejected up front so no division by zero can occur.
"""

import logging
import math
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from reviewsense.models.lexicon import Lexicon, DEFAULT_LEXICON
from reviewsense.models.report import KeywordCount, SentimentDistribution, Stats, StatsSnapshot
from reviewsense.models.review import Review

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer; .5 always rounds up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def _require_reviews(reviews: Sequence[Review]) -> None:
    if not reviews:
        raise ValueError("Cannot aggregate an empty review batch")


class StatsCalculator:
    """Computes Stats for a review batch."""

    def compute(self, reviews: Sequence[Review]) -> Stats:
        """
        Args:
            reviews: Non-empty batch of classified reviews

        Returns:
            Stats with positive_rate = round(100 * positive / total)

        Raises:
            ValueError: If the batch is empty
        """
        _require_reviews(reviews)

        total = len(reviews)
        positive = sum(1 for r in reviews if r.recommended)
        labels = Counter(r.sentiment for r in reviews)

        stats = Stats(
            total=total,
            positive=positive,
            negative=total - positive,
            positive_rate=round_half_up(100 * positive / total),
            sentiment_dist=SentimentDistribution(
                positive=labels["positive"],
                neutral=labels["neutral"],
                negative=labels["negative"]
            ),
            avg_playtime=round_half_up(sum(r.playtime_hours for r in reviews) / total)
        )

        logger.debug(f"Computed stats: total={total}, positive_rate={stats.positive_rate}")
        return stats


class KeywordFrequencyAggregator:
    """
    Ranks domain keywords by the number of reviews that mention them.

    A review counts at most once per keyword. Ties keep the order in which
    keywords were first seen during the pass.
    """

    def __init__(self, lexicon: Lexicon = DEFAULT_LEXICON, top_n: int = 10):
        self.keyword_terms = lexicon.keyword_terms
        self.top_n = top_n

    def _match(self, text: str) -> List[str]:
        if not text:
            return []
        lowered = text.lower()
        return [term for term in self.keyword_terms if term.lower() in lowered]

    def aggregate(self, reviews: Sequence[Review]) -> Tuple[KeywordCount, ...]:
        counts: Counter = Counter()
        first_seen = {}

        for review in reviews:
            for term in self._match(review.content):
                if term not in first_seen:
                    first_seen[term] = len(first_seen)
                counts[term] += 1

        ranked = sorted(counts.items(), key=lambda item: (-item[1], first_seen[item[0]]))

        logger.debug(f"Aggregated {len(counts)} distinct keywords over {len(reviews)} reviews")
        return tuple(KeywordCount(word=word, count=count) for word, count in ranked[:self.top_n])


class HeatScorer:
    """
    Engagement heat (0-100) from helpful votes and comment counts.

    score = min(100, round(avg_interactions * 10)), +10 above 50 reviews,
    +10 more above 100 reviews, clamped to 100.
    """

    def __init__(self, interaction_weight: int = 10, volume_bonus: int = 10):
        self.interaction_weight = interaction_weight
        self.volume_bonus = volume_bonus

    def score(self, reviews: Sequence[Review]) -> int:
        _require_reviews(reviews)

        total = len(reviews)
        interactions = sum(r.helpful + r.comment_count for r in reviews)
        avg_interactions = interactions / total

        score = min(100, round_half_up(avg_interactions * self.interaction_weight))
        if total > 50:
            score += self.volume_bonus
        if total > 100:
            score += self.volume_bonus

        return min(100, score)


class TrendComparator:
    """Compares the current positive rate with the previous snapshot."""

    def __init__(self, threshold: int = 5):
        self.threshold = threshold

    def compare(
        self,
        current_rate: int,
        previous: Optional[StatsSnapshot] = None
    ) -> Tuple[str, int]:
        """
        Returns:
            (trend, change) where trend is "improving", "declining" or "stable"
        """
        if previous is None:
            return "stable", 0

        change = round_half_up(current_rate - previous.positive_rate)
        if change > self.threshold:
            return "improving", change
        if change < -self.threshold:
            return "declining", change
        return "stable", change


# Design Rationale and Trade-offs:
#
# 1. Why round half up instead of built-in round()?
#    - round() rounds half to even (12.5 -> 12)
#    - Rates displayed to users follow the usual schoolbook rule
#
# 2. Why count a keyword at most once per review?
#    - One long rant repeating a word should not dominate the ranking
#    - Trade-off: Loses intensity information
#
# 3. Why first-seen order for ties?
#    - Deterministic output for identical input
