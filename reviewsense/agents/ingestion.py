"""
Ingestion Agent.

Turns raw Steam review payloads into classified Review objects.
Supports both real payloads (already fetched by the caller) and mock
data for testing.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from reviewsense.agents.aggregation import round_half_up
from reviewsense.agents.classification import SentimentClassifier, TopicExtractor
from reviewsense.models.review import Review

logger = logging.getLogger(__name__)


class IngestionAgent:
    """
    Classifies incoming reviews.

    Input is the JSON body of Steam's appreviews endpoint:
    {"success": 1, "reviews": [{"recommendationid": ..., "review": ..., ...}]}

    Fetching that body over HTTP is left to the caller; this agent only
    parses, truncates and attaches sentiment, keywords and topics.
    """

    def __init__(
        self,
        classifier: Optional[SentimentClassifier] = None,
        topic_extractor: Optional[TopicExtractor] = None,
        max_content_chars: int = 500,
        use_mock_data: bool = False
    ):
        """
        Initialize ingestion agent.

        Args:
            classifier: Sentiment classifier (default lexicon if None)
            topic_extractor: Topic extractor (default lexicon if None)
            max_content_chars: Review text is truncated to this length
            use_mock_data: If True, fetch_reviews() generates synthetic reviews
        """
        self.classifier = classifier or SentimentClassifier()
        self.topic_extractor = topic_extractor or TopicExtractor()
        self.max_content_chars = max_content_chars
        self.use_mock_data = use_mock_data

        mode = "MOCK" if use_mock_data else "REAL"
        logger.info(f"Initialized IngestionAgent in {mode} mode")

    def parse_payload(self, payload: Dict, fetched_at: Optional[datetime] = None) -> List[Review]:
        """
        Parse and classify a Steam appreviews payload.

        Args:
            payload: Decoded JSON body
            fetched_at: Stored on each review's extra data (defaults to now, UTC)

        Returns:
            List of classified Review objects, in payload order

        Raises:
            ValueError: If the payload does not report success
        """
        if payload.get("success") != 1:
            raise ValueError(payload.get("error") or "Failed to fetch reviews")

        fetched_at = fetched_at or datetime.now(timezone.utc)
        reviews = []
        for raw in payload.get("reviews", []):
            try:
                reviews.append(self._parse_review(raw, fetched_at))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed review {raw.get('recommendationid')}: {e}")
                continue

        logger.info(f"Ingested {len(reviews)} reviews")
        return reviews

    def _parse_review(self, raw: Dict, fetched_at: datetime) -> Review:
        author = raw.get("author") or {}
        content = (raw.get("review") or "")[:self.max_content_chars]

        return self.classify(
            content=content,
            recommended=bool(raw["voted_up"]),
            date=datetime.fromtimestamp(raw["timestamp_created"], tz=timezone.utc),
            playtime_hours=round_half_up((author.get("playtime_forever") or 0) / 60),
            helpful=raw.get("votes_up") or 0,
            comment_count=raw.get("comment_count") or 0,
            review_id=str(raw["recommendationid"]),
            author=author.get("steamid"),
            extra={
                "funny": raw.get("votes_funny") or 0,
                "steam_purchase": bool(raw.get("steam_purchase")),
                "received_for_free": bool(raw.get("received_for_free")),
                "fetched_at": fetched_at.isoformat()
            }
        )

    def classify(self, content: str, **fields) -> Review:
        """Build a Review with classifier output attached."""
        result = self.classifier.classify(content)
        return Review(
            content=content,
            sentiment=result.label,
            sentiment_score=result.score,
            keywords=result.keywords,
            topics=self.topic_extractor.extract(content),
            **fields
        )

    def fetch_reviews(
        self,
        product_id: str,
        payload: Optional[Dict] = None,
        limit: int = 100
    ) -> List[Review]:
        """
        Reviews for a product, from a payload or from the mock generator.

        Args:
            product_id: Product identifier (Steam appid)
            payload: Decoded appreviews body; ignored in mock mode
            limit: Maximum number of reviews returned
        """
        if self.use_mock_data:
            return self._generate_mock_reviews(product_id, limit)
        if payload is None:
            raise ValueError("A review payload is required when mock data is disabled")
        return self.parse_payload(payload)[:limit]

    def _generate_mock_reviews(self, product_id: str, count: int) -> List[Review]:
        """
        Generate synthetic reviews for testing.

        Deterministic for a given product id and count: mixes praise,
        technical complaints and refund requests so every report section
        has data.
        """
        templates = [
            # Praise
            ("剧情很感动，立绘精致，强烈推荐！", True, 25),
            ("画面不错，音乐也好听，值得一玩", True, 12),
            ("良心游戏，性价比很高，真香", True, 8),
            ("操作手感流畅，上头了", True, 5),
            ("还行吧，打发时间可以", True, 0),

            # Technical complaints
            ("优化差，经常卡顿，希望修复", False, 18),
            ("一直闪退，根本进不去，退款了", False, 30),
            ("服务器延迟太高，匹配半天", False, 6),

            # Disappointment
            ("剧情烂尾，很失望", False, 9),
            ("太肝了，氪金才能玩，劝退", False, 3),
        ]

        seed = sum(ord(c) for c in str(product_id))
        base_date = datetime(2024, 6, 1, tzinfo=timezone.utc)
        reviews = []

        for i in range(count):
            text, recommended, helpful = templates[(i + seed) % len(templates)]
            reviews.append(self.classify(
                content=text,
                recommended=recommended,
                date=base_date + timedelta(hours=i),
                playtime_hours=(i * 7 + seed) % 120,
                helpful=helpful,
                comment_count=i % 4,
                review_id=f"mock-{product_id}-{i}",
                author=f"user_{i}"
            ))

        logger.info(f"Generated {len(reviews)} mock reviews for {product_id}")
        return reviews


# Design Rationale and Trade-offs:
#
# 1. Why parse payloads instead of fetching from Steam?
#    - Network access is left to the caller (cron job, saved responses)
#    - Tests run on fixed payloads
#    - Trade-off: Users must download the appreviews response themselves
#
# 2. Why skip malformed reviews instead of failing the batch?
#    - One bad entry should not block the other 99
#    - Trade-off: Skips are visible only in the logs
#
# 3. Why deterministic mock reviews?
#    - Demo reports are reproducible per product id
