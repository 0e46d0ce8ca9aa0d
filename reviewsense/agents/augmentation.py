"""
AI Augmenter.

Optional call to a Gemini summarizer that can replace the rule-based
narrative. Never raises: every failure is reported as an Unavailable
outcome and the caller keeps the deterministic report.
"""

import asyncio
import json
import logging
import math
from typing import List, Optional, Sequence, Tuple

import google.generativeai as genai

from reviewsense.agents.classification import SentimentClassifier
from reviewsense.models.ai_outcome import (
    AI_SENTIMENTS,
    AIKeyPoint,
    AIOutcome,
    Structured,
    Unavailable,
    Unstructured,
)
from reviewsense.models.report import Stats
from reviewsense.models.review import Review
from reviewsense.utils.json_extract import extract_json_object

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a player-community analyst who summarizes user reviews of a game for its publisher.

Your task:
1. Read the aggregate statistics and the sample of reviews
2. Summarize overall player opinion in 2-4 sentences
3. List the key points players raise, praise first, then complaints
4. List strengths, weaknesses, risks to reputation, and concrete suggestions
5. Give one overall sentiment

Rules:
- Base every statement on the reviews provided; do not invent facts
- Write in the same language as the majority of the reviews
- "sentiment" must be one of "positive", "neutral", "negative", "critical"
- Keep each list item to one short sentence

Output valid JSON only."""


RESPONSE_SCHEMA = """{
  "summary": "...",
  "keyPoints": ["...", "..."],
  "strengths": ["..."],
  "weaknesses": ["..."],
  "risks": ["..."],
  "suggestions": ["..."],
  "sentiment": "positive|neutral|negative|critical"
}"""


def _construct_user_prompt(
    reviews: Sequence[Review],
    stats: Stats,
    max_reviews: int,
    excerpt_chars: int
) -> str:
    """Construct user prompt from stats and the most helpful reviews."""
    sample = sorted(reviews, key=lambda r: r.helpful, reverse=True)[:max_reviews]

    lines = []
    for i, review in enumerate(sample, 1):
        verdict = "Recommended" if review.recommended else "Not recommended"
        content = (review.content or "")[:excerpt_chars]
        lines.append(
            f"{i}. [{verdict}, {review.playtime_hours}h played, {review.helpful} helpful] {content}"
        )
    reviews_text = "\n".join(lines)

    dist = stats.sentiment_dist
    return f"""Statistics:
- Total reviews: {stats.total}
- Recommended: {stats.positive} ({stats.positive_rate}%)
- Not recommended: {stats.negative}
- Text sentiment: {dist.positive} positive, {dist.neutral} neutral, {dist.negative} negative
- Average playtime: {stats.avg_playtime}h

Most helpful reviews:
{reviews_text}

Respond in JSON:
{RESPONSE_SCHEMA}"""


def _string_list(value) -> Tuple[str, ...]:
    """Keep the non-empty strings of a JSON list; anything else becomes ()."""
    if not isinstance(value, list):
        return ()
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


class AIAugmenter:
    """
    Best-effort Gemini summarizer.

    Outcome per call:
    - Unavailable: no API key, timeout, API error, blocked or empty response
    - Unstructured: response text without a parseable JSON object
    - Structured: JSON object with at least a non-empty "summary"
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-1.5-flash",
        temperature: float = 0.3,
        timeout_seconds: float = 30,
        max_reviews: int = 20,
        excerpt_chars: int = 200,
        classifier: Optional[SentimentClassifier] = None
    ):
        """
        Initialize augmenter.

        Args:
            api_key: Gemini API key; empty or None disables the AI path
            model_name: Gemini model to use
            temperature: LLM temperature
            timeout_seconds: Upper bound on one generation call
            max_reviews: Number of reviews included in the prompt
            excerpt_chars: Per-review content limit in the prompt
            classifier: Used to decide the polarity of AI key points
        """
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self.max_reviews = max_reviews
        self.excerpt_chars = excerpt_chars
        self.classifier = classifier or SentimentClassifier()
        self.model = None

        if not api_key:
            logger.info("No API key configured, AIAugmenter disabled")
            return

        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model_name,
            generation_config={"temperature": temperature},
            system_instruction=SYSTEM_PROMPT
        )
        logger.info(f"Initialized AIAugmenter with model={model_name}, timeout={timeout_seconds}s")

    @property
    def enabled(self) -> bool:
        return self.model is not None

    async def augment(self, reviews: Sequence[Review], stats: Stats) -> AIOutcome:
        """
        Ask the summarizer for an opinion summary of a review batch.

        Args:
            reviews: Non-empty batch of classified reviews
            stats: Stats of the same batch

        Returns:
            Unavailable, Unstructured or Structured; never raises
        """
        if self.model is None:
            return Unavailable("missing credential")

        user_prompt = _construct_user_prompt(
            reviews, stats, self.max_reviews, self.excerpt_chars
        )

        try:
            response = await asyncio.wait_for(
                self.model.generate_content_async(user_prompt),
                timeout=self.timeout_seconds
            )
            text = response.text
        except asyncio.TimeoutError:
            logger.warning(f"AI summarizer timed out after {self.timeout_seconds}s")
            return Unavailable("timeout")
        except Exception as e:
            # Includes blocked responses, where reading .text raises ValueError
            logger.error(f"AI summarizer call failed: {e}")
            return Unavailable(f"api error: {e}")

        if not text or not text.strip():
            logger.warning("AI summarizer returned an empty response")
            return Unavailable("empty response")

        try:
            return self._parse_response(text)
        except Exception as e:
            logger.warning(f"Could not parse AI response ({type(e).__name__}), using raw text as summary")
            return Unstructured(text.strip())

    def _parse_response(self, text: str) -> AIOutcome:
        """
        Turn response text into an outcome.

        Returns:
            Structured if a JSON object with a usable summary is found,
            otherwise Unstructured wrapping the raw text
        """
        data = extract_json_object(text)
        if data is None:
            logger.warning("No JSON object in AI response, using raw text as summary")
            return Unstructured(text.strip())

        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            logger.warning("AI response JSON has no summary, using raw text as summary")
            return Unstructured(text.strip())

        sentiment = data.get("sentiment")
        if sentiment not in AI_SENTIMENTS:
            if sentiment is not None:
                logger.debug(f"Ignoring unknown AI sentiment: {json.dumps(sentiment, ensure_ascii=False)}")
            sentiment = None

        raw_points = data.get("keyPoints", data.get("key_points"))
        return Structured(
            summary=summary.strip(),
            key_points=self._split_key_points(_string_list(raw_points)),
            strengths=_string_list(data.get("strengths")),
            weaknesses=_string_list(data.get("weaknesses")),
            risks=_string_list(data.get("risks")),
            suggestions=_string_list(data.get("suggestions")),
            sentiment=sentiment
        )

    def _split_key_points(self, points: Sequence[str]) -> Tuple[AIKeyPoint, ...]:
        """
        Assign a polarity to each AI key point.

        The classifier label wins when it is not neutral; neutral points
        fall back to list position (first half positive, rest negative),
        matching the praise-then-complaints order requested in the prompt.
        """
        half = math.ceil(len(points) / 2)
        typed: List[AIKeyPoint] = []

        for index, point in enumerate(points):
            label = self.classifier.classify(point).label
            if label == "neutral":
                label = "positive" if index < half else "negative"
            typed.append(AIKeyPoint(type=label, content=point))

        return tuple(typed)


# Design Rationale and Trade-offs:
#
# 1. Why return an outcome object instead of raising?
#    - The report must complete whether or not the AI call succeeds
#    - The assembler dispatches on three shapes, never on exceptions
#    - Trade-off: Failure detail survives only in the reason string and logs
#
# 2. Why asyncio.wait_for around generate_content_async?
#    - Bounds report latency when the API hangs
#    - Trade-off: A slow but valid answer is discarded
#
# 3. Why keep unparseable text as an Unstructured summary?
#    - Models sometimes answer in prose despite the JSON instruction
#    - Trade-off: The summary may contain formatting noise
#
# 4. Why re-classify AI key points with the lexicon classifier?
#    - The schema asks for plain strings, so polarity is not in the response
#    - Position is the fallback for neutral points (praise first, complaints after)
#    - Trade-off: Short points without lexicon terms are typed by position only
