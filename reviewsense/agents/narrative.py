"""
Representative excerpts, rule-based narrative and sentiment rating.

Produces the deterministic text parts of a report from aggregate
statistics. Used as-is when the AI summarizer is unavailable.
"""

import logging
from typing import Optional, Sequence, Tuple

from reviewsense.models.report import KeyPoint, KeywordCount, SentimentDistribution, SentimentRating
from reviewsense.models.review import Review

logger = logging.getLogger(__name__)

EXCERPT_CHARS = 100
ELLIPSIS = "..."


def truncate_excerpt(text: str, limit: int = EXCERPT_CHARS) -> str:
    """First `limit` characters, with an ellipsis only when text was cut."""
    text = text or ""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


class RepresentativeExcerptSelector:
    """
    Picks the most helpful positive and negative reviews as key points.

    Only reviews with at least one helpful vote qualify. Positive points
    come first, then negative ones.
    """

    def __init__(self, per_side: int = 3, excerpt_chars: int = EXCERPT_CHARS):
        self.per_side = per_side
        self.excerpt_chars = excerpt_chars

    def _top(self, reviews: Sequence[Review], recommended: bool):
        candidates = [r for r in reviews if r.recommended == recommended and r.helpful > 0]
        return sorted(candidates, key=lambda r: r.helpful, reverse=True)[:self.per_side]

    def select(self, reviews: Sequence[Review]) -> Tuple[KeyPoint, ...]:
        points = []
        for recommended, point_type in ((True, "positive"), (False, "negative")):
            for review in self._top(reviews, recommended):
                points.append(KeyPoint(
                    type=point_type,
                    content=truncate_excerpt(review.content, self.excerpt_chars),
                    helpful=review.helpful,
                    playtime_hours=review.playtime_hours
                ))
        return tuple(points)


class NarrativeGenerator:
    """
    Template summary built from statistics, keywords and key points.

    Sections without source data are left out entirely; the remaining
    sections are joined by blank lines.
    """

    def __init__(self, trending_count: int = 5):
        self.trending_count = trending_count

    @staticmethod
    def _opening(positive_rate: int) -> str:
        if positive_rate >= 80:
            return (
                f"Reviews are overwhelmingly positive ({positive_rate}% recommend it); "
                f"overall reputation is excellent."
            )
        if positive_rate >= 60:
            return (
                f"Reviews are mostly positive ({positive_rate}% recommend it); "
                f"overall reputation is good."
            )
        if positive_rate >= 40:
            return (
                f"Reviews are mixed ({positive_rate}% recommend it); "
                f"opinion is divided."
            )
        return (
            f"Reviews lean negative ({positive_rate}% recommend it) "
            f"and need attention."
        )

    def generate(
        self,
        total: int,
        positive_rate: int,
        sentiment_dist: SentimentDistribution,
        top_keywords: Sequence[KeywordCount],
        key_points: Sequence[KeyPoint]
    ) -> str:
        parts = [self._opening(positive_rate)]

        if top_keywords:
            topics = ", ".join(k.word for k in top_keywords[:self.trending_count])
            parts.append(f"Trending topics: {topics}.")

        positive = next((p for p in key_points if p.type == "positive"), None)
        if positive:
            parts.append(f"Positive reviewers note: {positive.content}")

        negative = next((p for p in key_points if p.type == "negative"), None)
        if negative:
            parts.append(f"Negative reviewers point out: {negative.content}")

        logger.debug(f"Generated narrative with {len(parts)} sections for {total} reviews")
        return "\n\n".join(parts)


# (minimum positive rate, rating, score, label), checked top-down
RATING_BUCKETS = (
    (80, "positive", 85, "overwhelmingly positive"),
    (60, "positive", 70, "mostly positive"),
    (40, "neutral", 50, "mixed"),
    (20, "negative", 35, "mostly negative"),
)
FLOOR_RATING = ("negative", 20, "overwhelmingly negative")


class SentimentRater:
    """Maps the positive rate onto a fixed rating tier."""

    def rate(
        self,
        positive_rate: int,
        sentiment_dist: Optional[SentimentDistribution] = None
    ) -> SentimentRating:
        # sentiment_dist is accepted for future refinement; tiers depend on the rate only
        for minimum, rating, score, label in RATING_BUCKETS:
            if positive_rate >= minimum:
                return SentimentRating(rating=rating, score=score, label=label)
        rating, score, label = FLOOR_RATING
        return SentimentRating(rating=rating, score=score, label=label)


# Design Rationale and Trade-offs:
#
# 1. Why fixed rating buckets?
#    - Same positive rate always yields the same label
#    - Trade-off: Not adaptive to genre norms
#
# 2. Why only reviews with helpful votes as key points?
#    - Votes are the community's own signal of representativeness
#    - Trade-off: Very new products may have no key points at all
