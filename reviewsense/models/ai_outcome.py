"""
AI outcome data model.

Result of one attempt to call the external summarizer. Exactly one of
three shapes:

- Unavailable: no usable response (missing key, timeout, API error)
- Unstructured: a response arrived but held no parseable JSON object
- Structured: a JSON object matching the summarizer schema
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

AI_SENTIMENTS = ("positive", "neutral", "negative", "critical")


@dataclass(frozen=True)
class Unavailable:
    reason: str


@dataclass(frozen=True)
class Unstructured:
    text: str  # Raw response body, used verbatim as the summary


@dataclass(frozen=True)
class AIKeyPoint:
    type: str  # "positive" or "negative"
    content: str


@dataclass(frozen=True)
class Structured:
    summary: str
    key_points: Tuple[AIKeyPoint, ...] = ()
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    risks: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()
    sentiment: Optional[str] = None  # One of AI_SENTIMENTS, None if missing/invalid

    def __post_init__(self):
        if self.sentiment is not None and self.sentiment not in AI_SENTIMENTS:
            raise ValueError(
                f"Invalid AI sentiment: {self.sentiment}. Must be one of {AI_SENTIMENTS}"
            )


AIOutcome = Union[Unavailable, Unstructured, Structured]


# Design Rationale and Trade-offs:
#
# 1. Why three classes instead of one result with optional fields?
#    - Each shape carries exactly the data it has
#    - isinstance dispatch in the assembler covers every case
#    - Trade-off: Callers cannot treat outcomes uniformly
