"""
Report Assembler and Orchestrator.

ReportAssembler turns one review batch into one Report. ReportOrchestrator
wraps it with caching, persistence and per-product serialization.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Sequence, Tuple

from reviewsense.agents.aggregation import (
    HeatScorer,
    KeywordFrequencyAggregator,
    StatsCalculator,
    TrendComparator,
)
from reviewsense.agents.augmentation import AIAugmenter
from reviewsense.agents.classification import SentimentClassifier, TopicExtractor
from reviewsense.agents.history import SnapshotHistoryAggregator
from reviewsense.agents.ingestion import IngestionAgent
from reviewsense.agents.narrative import (
    NarrativeGenerator,
    RepresentativeExcerptSelector,
    SentimentRater,
    truncate_excerpt,
)
from reviewsense.agents.risk import RiskDetector, SuggestionEngine
from reviewsense.models.ai_outcome import AIOutcome, Structured, Unavailable, Unstructured
from reviewsense.models.lexicon import Lexicon, DEFAULT_LEXICON
from reviewsense.models.report import (
    AIAnalysis,
    KeyPoint,
    OverallAssessment,
    Report,
    SentimentRating,
    Stats,
    StatsSnapshot,
)
from reviewsense.models.review import Review
from reviewsense.registry.product_registry import ProductRegistry, TrackedProduct
from reviewsense.utils.storage import ReportStore
import config.settings as settings

logger = logging.getLogger(__name__)

NO_DATA_SUMMARY = "no data"


class ReportAssembler:
    """
    Builds a Report from a review batch.

    Flow:
    1. Stats → 2. Keywords → 3. Key points → 4. Narrative + rating
    → 5. Optional AI outcome merge → 6. Risks, suggestions, heat, trend

    Holds no state between calls; the AI step only ever changes the
    summary, the rating, the key points and ai_analysis.
    """

    def __init__(
        self,
        lexicon: Lexicon = DEFAULT_LEXICON,
        augmenter: Optional[AIAugmenter] = None
    ):
        self.stats_calculator = StatsCalculator()
        self.keyword_aggregator = KeywordFrequencyAggregator(lexicon)
        self.excerpt_selector = RepresentativeExcerptSelector()
        self.narrative_generator = NarrativeGenerator()
        self.rater = SentimentRater()
        self.risk_detector = RiskDetector(lexicon)
        self.suggestion_engine = SuggestionEngine()
        self.heat_scorer = HeatScorer()
        self.trend_comparator = TrendComparator()
        self.augmenter = augmenter

    def empty_report(self, now: Optional[datetime] = None) -> Report:
        """Fixed stub for an empty batch; nothing is computed."""
        rating = SentimentRating(rating="neutral", score=0, label=NO_DATA_SUMMARY)
        return Report(
            summary=NO_DATA_SUMMARY,
            key_points=(),
            sentiment=rating,
            stats=Stats.empty(),
            keywords=(),
            risks=(),
            suggestions=(),
            overall=OverallAssessment(rating=rating.rating, score=rating.score),
            updated_at=now or datetime.now(timezone.utc)
        )

    async def generate(
        self,
        reviews: Sequence[Review],
        previous: Optional[StatsSnapshot] = None,
        now: Optional[datetime] = None
    ) -> Report:
        """
        Generate a report, trying the AI summarizer when one is configured.

        Args:
            reviews: Classified reviews (0-100)
            previous: Previous stats snapshot for trend comparison
            now: Report timestamp (defaults to now, UTC)

        Returns:
            Report; always completes, with or without the AI step
        """
        if not reviews:
            logger.info("Empty review batch, returning stub report")
            return self.empty_report(now)

        stats = self.stats_calculator.compute(reviews)

        outcome: AIOutcome = Unavailable("disabled")
        if self.augmenter is not None and self.augmenter.enabled:
            outcome = await self.augmenter.augment(reviews, stats)
            if isinstance(outcome, Unavailable):
                logger.info(f"AI summary unavailable ({outcome.reason}), using rule-based summary")

        return self._build(reviews, stats, previous, outcome, now)

    def assemble(
        self,
        reviews: Sequence[Review],
        previous: Optional[StatsSnapshot] = None,
        outcome: Optional[AIOutcome] = None,
        now: Optional[datetime] = None
    ) -> Report:
        """Synchronous build with an already obtained AI outcome (or none)."""
        if not reviews:
            return self.empty_report(now)
        stats = self.stats_calculator.compute(reviews)
        return self._build(reviews, stats, previous, outcome or Unavailable("disabled"), now)

    def _build(
        self,
        reviews: Sequence[Review],
        stats: Stats,
        previous: Optional[StatsSnapshot],
        outcome: AIOutcome,
        now: Optional[datetime]
    ) -> Report:
        keywords = self.keyword_aggregator.aggregate(reviews)
        key_points = self.excerpt_selector.select(reviews)

        summary = self.narrative_generator.generate(
            total=stats.total,
            positive_rate=stats.positive_rate,
            sentiment_dist=stats.sentiment_dist,
            top_keywords=keywords,
            key_points=key_points
        )
        sentiment = self.rater.rate(stats.positive_rate, stats.sentiment_dist)

        ai_generated = False
        ai_analysis = None

        if isinstance(outcome, Structured):
            ai_generated = True
            summary = outcome.summary
            if outcome.sentiment is not None:
                # Score and label stay on the rule-based scale
                sentiment = SentimentRating(
                    rating=outcome.sentiment,
                    score=sentiment.score,
                    label=sentiment.label
                )
            if outcome.key_points:
                key_points = tuple(
                    KeyPoint(type=p.type, content=truncate_excerpt(p.content))
                    for p in outcome.key_points
                )
            ai_analysis = AIAnalysis(
                strengths=outcome.strengths,
                weaknesses=outcome.weaknesses,
                risks=outcome.risks,
                suggestions=outcome.suggestions
            )
        elif isinstance(outcome, Unstructured):
            ai_generated = True
            summary = outcome.text
        elif not isinstance(outcome, Unavailable):
            logger.warning(f"Ignoring unknown AI outcome type: {type(outcome).__name__}")

        risks = self.risk_detector.detect(reviews, stats)
        suggestions = self.suggestion_engine.suggest(risks, stats)
        trend, change = self.trend_comparator.compare(stats.positive_rate, previous)

        overall = OverallAssessment(
            rating=sentiment.rating,
            score=sentiment.score,
            trend=trend,
            change=change,
            heat=self.heat_scorer.score(reviews)
        )

        logger.info(
            f"Assembled report: {stats.total} reviews, {stats.positive_rate}% positive, "
            f"{len(risks)} risks, trend={trend}, ai_generated={ai_generated}"
        )

        return Report(
            summary=summary,
            key_points=key_points,
            sentiment=sentiment,
            stats=stats,
            keywords=keywords,
            risks=risks,
            suggestions=suggestions,
            overall=overall,
            updated_at=now or datetime.now(timezone.utc),
            ai_generated=ai_generated,
            ai_analysis=ai_analysis
        )


class ReportOrchestrator:
    """
    Service around the assembler.

    Coordinates:
    1. Cache check → 2. Review load → 3. Previous snapshot
    → 4. Assembly (with optional AI) → 5. Report upsert → 6. Snapshot + pruning

    Regeneration is serialized per product id.
    """

    def __init__(
        self,
        api_key: Optional[str],
        data_root: str,
        registry_path: str,
        use_mock_data: Optional[bool] = None
    ):
        """
        Initialize orchestrator.

        Args:
            api_key: Google API key for the AI summarizer (empty disables it)
            data_root: Root directory for data storage
            registry_path: Path to product registry JSON
            use_mock_data: Generate synthetic reviews on ingest (defaults to settings)
        """
        if use_mock_data is None:
            use_mock_data = settings.USE_MOCK_DATA

        logger.info("Initializing report components...")

        self.store = ReportStore(data_root)
        self.registry = ProductRegistry(registry_path, max_products=settings.MAX_TRACKED_PRODUCTS)

        classifier = SentimentClassifier()
        self.ingestion_agent = IngestionAgent(
            classifier=classifier,
            topic_extractor=TopicExtractor(),
            max_content_chars=settings.MAX_REVIEW_CHARS,
            use_mock_data=use_mock_data
        )

        self.augmenter = AIAugmenter(
            api_key=api_key,
            model_name=settings.AI_MODEL,
            temperature=settings.AI_TEMPERATURE,
            timeout_seconds=settings.AI_TIMEOUT_SECONDS,
            max_reviews=settings.AI_MAX_REVIEWS,
            excerpt_chars=settings.AI_REVIEW_EXCERPT_CHARS,
            classifier=classifier
        )
        self.assembler = ReportAssembler(augmenter=self.augmenter)
        self.history_aggregator = SnapshotHistoryAggregator(self.store)

        self._locks: Dict[str, asyncio.Lock] = {}

        logger.info("Report components initialized successfully")

    def ingest(self, product_id: str, payload: Optional[dict] = None) -> int:
        """
        Classify and store reviews for a product.

        Returns:
            Number of reviews ingested
        """
        if self.ingestion_agent.use_mock_data:
            limit = settings.MOCK_REVIEW_COUNT
        else:
            limit = settings.REVIEW_WINDOW

        reviews = self.ingestion_agent.fetch_reviews(product_id, payload=payload, limit=limit)
        self.store.save_reviews(product_id, reviews, keep=settings.REVIEW_WINDOW)
        return len(reviews)

    async def get_report(
        self,
        product_id: str,
        force_refresh: bool = False,
        now: Optional[datetime] = None
    ) -> Tuple[Report, bool]:
        """
        Cached report, or a freshly generated one.

        Args:
            product_id: Product identifier
            force_refresh: Skip the cache
            now: Reference time (defaults to now, UTC)

        Returns:
            (report, cached)
        """
        product_id = str(product_id)
        cache_ttl = timedelta(hours=settings.REPORT_CACHE_TTL_HOURS)

        if not force_refresh:
            cached = self.store.load_report(product_id, max_age=cache_ttl, now=now)
            if cached is not None:
                logger.info(f"Returning cached report for {product_id}")
                return cached, True

        lock = self._locks.setdefault(product_id, asyncio.Lock())
        async with lock:
            # A concurrent caller may have regenerated while we waited
            if not force_refresh:
                cached = self.store.load_report(product_id, max_age=cache_ttl, now=now)
                if cached is not None:
                    return cached, True

            report = await self._regenerate(product_id, now or datetime.now(timezone.utc))
            return report, False

    async def _regenerate(self, product_id: str, now: datetime) -> Report:
        logger.info(f"Generating new report for {product_id}...")
        today = now.date()

        reviews = self.store.load_reviews(product_id, limit=settings.REVIEW_WINDOW)
        previous = self.store.load_previous_snapshot(product_id, before=today)

        report = await self.assembler.generate(reviews, previous, now=now)

        self.store.save_report(product_id, report, review_count=len(reviews))
        if report.stats.total > 0:
            self.store.save_snapshot(product_id, StatsSnapshot(
                date=today.isoformat(),
                total=report.stats.total,
                positive_rate=report.stats.positive_rate,
                metadata={"generated_at": now.isoformat(), "ai_generated": report.ai_generated}
            ))

        retention = timedelta(days=settings.REPORT_RETENTION_DAYS)
        self.store.prune_expired_reports(retention, now=now)
        self.store.prune_snapshots(product_id, settings.REPORT_RETENTION_DAYS, today)

        return report

    def add_product(self, product_id: str, name: str) -> TrackedProduct:
        product = self.registry.add_product(product_id, name)
        self.registry.save()
        return product

    def remove_product(self, product_id: str) -> bool:
        """Unregister a product and delete its reviews, report and snapshots."""
        removed = self.registry.remove_product(product_id)
        if removed:
            self.registry.save()

        try:
            self.store.delete_product(product_id)
        except ValueError:
            if not removed:
                raise
            # Legacy registry entry whose id the store never accepted
            logger.warning(f"No stored data possible for product id {product_id!r}")
        return removed

    def export_history(self, product_id: str, target_date: str, window_days: int = 30) -> str:
        return self.history_aggregator.generate_history_table(
            product_id=str(product_id),
            target_date=target_date,
            window_days=window_days,
            output_dir=str(settings.OUTPUT_ROOT)
        )


# Design Rationale and Trade-offs:
#
# 1. Why split ReportAssembler from ReportOrchestrator?
#    - The assembler is a pure function of (reviews, previous snapshot, AI outcome)
#    - Tests build reports without touching the filesystem
#    - Trade-off: Two classes to wire instead of one
#
# 2. Why one asyncio.Lock per product id?
#    - At most one AI call and one report write per product at a time
#    - Different products still regenerate concurrently
#    - Trade-off: Locks live for the process lifetime (bounded by 5 products)
#
# 3. Why check the cache again after acquiring the lock?
#    - Callers that queued behind a regeneration reuse its result
#    - Trade-off: One extra file read per regeneration
#
# 4. Why save the registry before deleting stored data on removal?
#    - A failing delete cannot leave the product registered on disk
#    - Trade-off: Orphaned data files are possible if the delete fails
#
# 5. Why no snapshot for an empty batch?
#    - A 0% positive rate with no reviews would register as a collapse in the trend
