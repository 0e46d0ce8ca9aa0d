"""
Sentiment Classifier and Topic Extractor.

Lexicon-based scoring of a single review text. Substring matching only,
no stemming or negation handling.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from reviewsense.models.lexicon import Lexicon, DEFAULT_LEXICON

logger = logging.getLogger(__name__)

POSITIVE_WEIGHT = 0.5
NEGATIVE_WEIGHT = 0.8
LABEL_THRESHOLD = 0.3
MAX_EVIDENCE_TERMS = 5


@dataclass(frozen=True)
class SentimentResult:
    """Classifier output for one text."""
    label: str  # "positive", "neutral", or "negative"
    score: float  # Clamped to [-1, 1]
    keywords: Tuple[str, ...] = ()  # First matched terms, max 5


class SentimentClassifier:
    """
    Scores text against fixed positive/negative lexicons.

    Each positive term found adds 0.5, each negative term subtracts 0.8.
    The sum is clamped to [-1, 1]; |score| > 0.3 decides the label.
    """

    def __init__(self, lexicon: Lexicon = DEFAULT_LEXICON):
        self.positive_terms = tuple(t.lower() for t in lexicon.positive_terms)
        self.negative_terms = tuple(t.lower() for t in lexicon.negative_terms)

    def classify(self, text: str) -> SentimentResult:
        """
        Classify a single review text.

        Args:
            text: Review content (None or empty is allowed)

        Returns:
            SentimentResult; neutral with score 0 for empty text
        """
        if not text:
            return SentimentResult(label="neutral", score=0.0)

        lowered = text.lower()
        score = 0.0
        matched: List[str] = []

        for term in self.positive_terms:
            if term in lowered:
                score += POSITIVE_WEIGHT
                matched.append(term)

        for term in self.negative_terms:
            if term in lowered:
                score -= NEGATIVE_WEIGHT
                matched.append(term)

        score = max(-1.0, min(1.0, score))

        label = "neutral"
        if score > LABEL_THRESHOLD:
            label = "positive"
        elif score < -LABEL_THRESHOLD:
            label = "negative"

        return SentimentResult(
            label=label,
            score=score,
            keywords=tuple(matched[:MAX_EVIDENCE_TERMS])
        )


class TopicExtractor:
    """Flags which fixed topic terms appear in a text (case-sensitive)."""

    def __init__(self, lexicon: Lexicon = DEFAULT_LEXICON):
        self.topic_terms = lexicon.topic_terms

    def extract(self, text: str) -> Tuple[str, ...]:
        if not text:
            return ()
        return tuple(term for term in self.topic_terms if term in text)


# Design Rationale and Trade-offs:
#
# 1. Why a lexicon classifier instead of a model?
#    - Runs offline, deterministic, no API cost per review
#    - Trade-off: Misses sarcasm and negation
#
# 2. Why are topics matched case-sensitively?
#    - Topic terms include acronyms (AI, BUG) that collide with lowercase words
