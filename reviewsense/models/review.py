"""
Review data model.

Represents a single classified user review of a product.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

SENTIMENT_LABELS = ("positive", "neutral", "negative")


@dataclass(frozen=True)
class Review:
    """
    Classified review, read-only input to report generation.

    sentiment, sentiment_score, keywords and topics are attached by the
    ingestion agent before the review reaches the report pipeline.
    """
    content: str  # Review text (already truncated at ingestion)
    recommended: bool  # Author's thumbs up / thumbs down
    date: datetime  # Creation time
    playtime_hours: float = 0  # Author's playtime at review time
    helpful: int = 0  # "Helpful" votes
    comment_count: int = 0
    sentiment: str = "neutral"  # "positive", "neutral", or "negative"
    sentiment_score: float = 0.0  # Classifier score in [-1, 1]
    keywords: Tuple[str, ...] = ()  # Matched classifier terms (max 5)
    topics: Tuple[str, ...] = ()  # Matched topic terms
    review_id: Optional[str] = None
    author: Optional[str] = None
    extra: dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.sentiment not in SENTIMENT_LABELS:
            raise ValueError(
                f"Invalid sentiment: {self.sentiment}. Must be one of {SENTIMENT_LABELS}"
            )
        if not -1.0 <= self.sentiment_score <= 1.0:
            raise ValueError(f"Invalid sentiment_score: {self.sentiment_score}. Must be in [-1, 1]")
        if self.playtime_hours < 0:
            raise ValueError(f"Invalid playtime_hours: {self.playtime_hours}")
        if self.helpful < 0 or self.comment_count < 0:
            raise ValueError(
                f"Invalid interaction counts: helpful={self.helpful}, "
                f"comment_count={self.comment_count}"
            )
        if len(self.keywords) > 5:
            raise ValueError(f"Too many keywords: {len(self.keywords)} (max 5)")

    @classmethod
    def from_dict(cls, data: dict) -> "Review":
        """Create Review from JSON dict."""
        return cls(
            content=data.get("content") or "",
            recommended=bool(data["recommended"]),
            date=datetime.fromisoformat(data["date"]),
            playtime_hours=data.get("playtime_hours", 0),
            helpful=data.get("helpful", 0),
            comment_count=data.get("comment_count", 0),
            sentiment=data.get("sentiment", "neutral"),
            sentiment_score=data.get("sentiment_score", 0.0),
            keywords=tuple(data.get("keywords", [])),
            topics=tuple(data.get("topics", [])),
            review_id=data.get("review_id"),
            author=data.get("author"),
            extra=data.get("extra", {})
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "review_id": self.review_id,
            "author": self.author,
            "content": self.content,
            "recommended": self.recommended,
            "date": self.date.isoformat(),
            "playtime_hours": self.playtime_hours,
            "helpful": self.helpful,
            "comment_count": self.comment_count,
            "sentiment": self.sentiment,
            "sentiment_score": self.sentiment_score,
            "keywords": list(self.keywords),
            "topics": list(self.topics),
            "extra": self.extra
        }


# Design Rationale and Trade-offs:
#
# 1. Why frozen?
#    - Reviews are shared read-only between every pipeline stage
#    - Trade-off: Classification builds a new Review instead of mutating one
#
# 2. Why an untyped `extra` dict?
#    - Source-specific fields (funny votes, purchase flags) are kept without
#      growing the model
#    - Excluded from equality comparisons
