"""
Report data models.

Derived statistics, excerpts, risks and the final opinion report.
All models are frozen; a Report is built once per generation and
never mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

RATINGS = ("positive", "neutral", "negative", "critical")
TRENDS = ("improving", "declining", "stable")
RISK_LEVELS = ("high", "medium")
KEY_POINT_TYPES = ("positive", "negative")


@dataclass(frozen=True)
class SentimentDistribution:
    """Per-label review counts from the classifier."""
    positive: int = 0
    neutral: int = 0
    negative: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "SentimentDistribution":
        return cls(
            positive=data.get("positive", 0),
            neutral=data.get("neutral", 0),
            negative=data.get("negative", 0)
        )

    def to_dict(self) -> dict:
        return {"positive": self.positive, "neutral": self.neutral, "negative": self.negative}


@dataclass(frozen=True)
class Stats:
    """
    Aggregate statistics over a review batch.

    Only ever computed for a non-empty batch; the empty stub uses
    Stats.empty() instead.
    """
    total: int
    positive: int  # Recommended reviews
    negative: int  # Not recommended reviews
    positive_rate: int  # 0-100
    sentiment_dist: SentimentDistribution
    avg_playtime: int  # Rounded mean playtime in hours

    def __post_init__(self):
        if not 0 <= self.positive_rate <= 100:
            raise ValueError(f"Invalid positive_rate: {self.positive_rate}. Must be 0-100")
        if self.positive + self.negative != self.total:
            raise ValueError(
                f"Inconsistent counts: {self.positive} + {self.negative} != {self.total}"
            )

    @classmethod
    def empty(cls) -> "Stats":
        return cls(
            total=0,
            positive=0,
            negative=0,
            positive_rate=0,
            sentiment_dist=SentimentDistribution(),
            avg_playtime=0
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Stats":
        return cls(
            total=data["total"],
            positive=data["positive"],
            negative=data["negative"],
            positive_rate=data["positive_rate"],
            sentiment_dist=SentimentDistribution.from_dict(data.get("sentiment_dist", {})),
            avg_playtime=data.get("avg_playtime", 0)
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "positive": self.positive,
            "negative": self.negative,
            "positive_rate": self.positive_rate,
            "sentiment_dist": self.sentiment_dist.to_dict(),
            "avg_playtime": self.avg_playtime
        }


@dataclass(frozen=True)
class KeyPoint:
    """Short excerpt from a high-engagement review."""
    type: str  # "positive" or "negative"
    content: str  # Max 100 chars plus "..." when truncated
    helpful: int = 0
    playtime_hours: float = 0

    def __post_init__(self):
        if self.type not in KEY_POINT_TYPES:
            raise ValueError(f"Invalid key point type: {self.type}. Must be one of {KEY_POINT_TYPES}")

    @classmethod
    def from_dict(cls, data: dict) -> "KeyPoint":
        return cls(
            type=data["type"],
            content=data["content"],
            helpful=data.get("helpful", 0),
            playtime_hours=data.get("playtime_hours", 0)
        )

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "content": self.content,
            "helpful": self.helpful,
            "playtime_hours": self.playtime_hours
        }


@dataclass(frozen=True)
class KeywordCount:
    """Lexicon term with the number of reviews mentioning it."""
    word: str
    count: int

    def to_dict(self) -> dict:
        return {"word": self.word, "count": self.count}


@dataclass(frozen=True)
class Risk:
    """Heuristic risk flag."""
    type: str  # e.g. "high_negative_rate"
    level: str  # "high" or "medium"
    message: str

    def __post_init__(self):
        if self.level not in RISK_LEVELS:
            raise ValueError(f"Invalid risk level: {self.level}. Must be one of {RISK_LEVELS}")

    def to_dict(self) -> dict:
        return {"type": self.type, "level": self.level, "message": self.message}


@dataclass(frozen=True)
class SentimentRating:
    """Rating tier derived from the positive rate."""
    rating: str  # "positive", "neutral", "negative", or "critical"
    score: int  # 0-100
    label: str

    def __post_init__(self):
        if self.rating not in RATINGS:
            raise ValueError(f"Invalid rating: {self.rating}. Must be one of {RATINGS}")
        if not 0 <= self.score <= 100:
            raise ValueError(f"Invalid score: {self.score}. Must be 0-100")

    def to_dict(self) -> dict:
        return {"rating": self.rating, "score": self.score, "label": self.label}


@dataclass(frozen=True)
class OverallAssessment:
    """Headline rating, trend against the previous snapshot, and heat."""
    rating: str
    score: int
    trend: str = "stable"  # "improving", "declining", or "stable"
    change: int = 0  # Positive rate delta vs previous snapshot
    heat: int = 0  # 0-100

    def __post_init__(self):
        if self.trend not in TRENDS:
            raise ValueError(f"Invalid trend: {self.trend}. Must be one of {TRENDS}")
        if not 0 <= self.heat <= 100:
            raise ValueError(f"Invalid heat: {self.heat}. Must be 0-100")

    def to_dict(self) -> dict:
        return {
            "rating": self.rating,
            "score": self.score,
            "trend": self.trend,
            "change": self.change,
            "heat": self.heat
        }


@dataclass(frozen=True)
class AIAnalysis:
    """Structured lists returned by the AI summarizer."""
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    risks: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "AIAnalysis":
        return cls(
            strengths=tuple(data.get("strengths", [])),
            weaknesses=tuple(data.get("weaknesses", [])),
            risks=tuple(data.get("risks", [])),
            suggestions=tuple(data.get("suggestions", []))
        )

    def to_dict(self) -> dict:
        return {
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "risks": list(self.risks),
            "suggestions": list(self.suggestions)
        }


@dataclass(frozen=True)
class Report:
    """
    Opinion report for one review batch at one point in time.

    Keyed externally by product id; updated_at drives cache staleness
    and retention in the persistence layer.
    """
    summary: str
    key_points: Tuple[KeyPoint, ...]
    sentiment: SentimentRating
    stats: Stats
    keywords: Tuple[KeywordCount, ...]
    risks: Tuple[Risk, ...]
    suggestions: Tuple[str, ...]
    overall: OverallAssessment
    updated_at: datetime
    ai_generated: bool = False
    ai_analysis: Optional[AIAnalysis] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Report":
        """Create Report from JSON dict."""
        ai_analysis = data.get("ai_analysis")
        return cls(
            summary=data["summary"],
            key_points=tuple(KeyPoint.from_dict(k) for k in data.get("key_points", [])),
            sentiment=SentimentRating(**data["sentiment"]),
            stats=Stats.from_dict(data["stats"]),
            keywords=tuple(KeywordCount(**k) for k in data.get("keywords", [])),
            risks=tuple(Risk(**r) for r in data.get("risks", [])),
            suggestions=tuple(data.get("suggestions", [])),
            overall=OverallAssessment(**data["overall"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            ai_generated=data.get("ai_generated", False),
            ai_analysis=AIAnalysis.from_dict(ai_analysis) if ai_analysis else None
        )

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "summary": self.summary,
            "key_points": [k.to_dict() for k in self.key_points],
            "sentiment": self.sentiment.to_dict(),
            "stats": self.stats.to_dict(),
            "keywords": [k.to_dict() for k in self.keywords],
            "risks": [r.to_dict() for r in self.risks],
            "suggestions": list(self.suggestions),
            "overall": self.overall.to_dict(),
            "ai_generated": self.ai_generated,
            "ai_analysis": self.ai_analysis.to_dict() if self.ai_analysis else None,
            "updated_at": self.updated_at.isoformat()
        }


@dataclass(frozen=True)
class StatsSnapshot:
    """Daily positive-rate snapshot used for trend comparison."""
    date: str  # YYYY-MM-DD format
    total: int
    positive_rate: int
    metadata: Dict = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "StatsSnapshot":
        return cls(
            date=data["date"],
            total=data.get("total", 0),
            positive_rate=data["positive_rate"],
            metadata=data.get("metadata", {})
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "total": self.total,
            "positive_rate": self.positive_rate,
            "metadata": self.metadata
        }


# Design Rationale and Trade-offs:
#
# 1. Why tuples instead of lists inside the models?
#    - Frozen dataclasses stay immutable all the way down
#    - Trade-off: to_dict converts back to lists for JSON
#
# 2. Why validate enum-like strings in __post_init__?
#    - Invalid ratings or levels fail at construction, not when rendered
