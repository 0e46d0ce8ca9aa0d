"""
Storage utility.

File-backed persistence for reviews, cached reports and daily stats
snapshots, one JSON file per product and kind.
"""

import json
import os
import re
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from reviewsense.models.report import Report, StatsSnapshot
from reviewsense.models.review import Review

logger = logging.getLogger(__name__)

_PRODUCT_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_product_id(product_id) -> str:
    """
    Normalize a product id to a string usable as a file name.

    Raises:
        ValueError: If the id is empty or has characters outside [A-Za-z0-9._-]
    """
    product_id = str(product_id).strip()
    if not _PRODUCT_ID_PATTERN.match(product_id):
        raise ValueError(f"Invalid product id: {product_id!r}")
    return product_id


class ReportStore:
    """
    Manages file I/O for all data persistence except the product registry.

    Handles:
    - Reviews (data/reviews/<product_id>.json), newest first
    - Reports (data/reports/<product_id>.json), one per product
    - Snapshots (data/snapshots/<product_id>.json), one per product per day
    """

    def __init__(self, data_root: str):
        """
        Initialize report store.

        Args:
            data_root: Root data directory (e.g., /path/to/data)
        """
        self.data_root = data_root
        self.reviews_dir = os.path.join(data_root, "reviews")
        self.reports_dir = os.path.join(data_root, "reports")
        self.snapshots_dir = os.path.join(data_root, "snapshots")

        for directory in (self.reviews_dir, self.reports_dir, self.snapshots_dir):
            os.makedirs(directory, exist_ok=True)

        logger.info(f"Initialized ReportStore with data_root={data_root}")

    def _path(self, directory: str, product_id: str) -> str:
        return os.path.join(directory, f"{validate_product_id(product_id)}.json")

    def _read_json(self, filepath: str):
        if not os.path.exists(filepath):
            return None
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {filepath}: {e}")
            return None

    def _write_json(self, filepath: str, data) -> None:
        """Atomic write: write to temp file, then rename."""
        temp_path = f"{filepath}.tmp"
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(temp_path, filepath)
        except Exception as e:
            logger.error(f"Failed to write {filepath}: {e}")
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

    # Reviews

    def save_reviews(self, product_id: str, reviews: List[Review], keep: int = 100) -> int:
        """
        Upsert reviews by review_id and keep only the newest `keep`.

        Returns:
            Number of reviews stored for the product after the write
        """
        filepath = self._path(self.reviews_dir, product_id)
        stored: Dict[str, dict] = {}
        anonymous: List[dict] = []

        for item in (self._read_json(filepath) or []) + [r.to_dict() for r in reviews]:
            if item.get("review_id"):
                stored[item["review_id"]] = item
            else:
                anonymous.append(item)

        merged = list(stored.values()) + anonymous
        merged.sort(key=lambda item: item["date"], reverse=True)
        merged = merged[:keep]

        self._write_json(filepath, merged)
        logger.info(f"Saved {len(reviews)} reviews for {product_id} ({len(merged)} stored)")
        return len(merged)

    def load_reviews(self, product_id: str, limit: int = 100) -> List[Review]:
        """Newest reviews first; empty list if none are stored."""
        data = self._read_json(self._path(self.reviews_dir, product_id)) or []
        reviews = [Review.from_dict(item) for item in data]
        reviews.sort(key=lambda r: r.date, reverse=True)
        return reviews[:limit]

    # Reports

    def save_report(self, product_id: str, report: Report, review_count: int) -> None:
        """Idempotent upsert of the product's report."""
        data = report.to_dict()
        data["product_id"] = str(product_id)
        data["review_count"] = review_count
        self._write_json(self._path(self.reports_dir, product_id), data)
        logger.info(f"Saved report for {product_id}")

    def load_report(
        self,
        product_id: str,
        max_age: Optional[timedelta] = None,
        now: Optional[datetime] = None
    ) -> Optional[Report]:
        """
        Load the product's report.

        Args:
            product_id: Product identifier
            max_age: If set, reports updated before now - max_age are ignored
            now: Reference time (defaults to now, UTC)

        Returns:
            Report, or None if missing or stale
        """
        data = self._read_json(self._path(self.reports_dir, product_id))
        if data is None:
            return None

        report = Report.from_dict(data)
        if max_age is not None:
            now = now or datetime.now(timezone.utc)
            if report.updated_at < now - max_age:
                logger.debug(f"Report for {product_id} is stale ({report.updated_at.isoformat()})")
                return None
        return report

    def prune_reports(
        self,
        product_id: str,
        retention: timedelta,
        now: Optional[datetime] = None
    ) -> bool:
        """
        Delete the product's report if it is older than `retention`.

        Returns:
            True if a report was deleted
        """
        now = now or datetime.now(timezone.utc)
        report = self.load_report(product_id)
        if report is None or report.updated_at >= now - retention:
            return False

        os.remove(self._path(self.reports_dir, product_id))
        logger.info(f"Pruned report for {product_id} (updated {report.updated_at.isoformat()})")
        return True

    def prune_expired_reports(
        self,
        retention: timedelta,
        now: Optional[datetime] = None
    ) -> List[str]:
        """
        Delete every stored report older than `retention`.

        Returns:
            Product ids whose report was deleted
        """
        pruned = []
        for filename in sorted(os.listdir(self.reports_dir)):
            if not filename.endswith(".json"):
                continue
            product_id = filename[:-len(".json")]
            if not _PRODUCT_ID_PATTERN.match(product_id):
                continue
            if self.prune_reports(product_id, retention, now=now):
                pruned.append(product_id)
        return pruned

    # Snapshots

    def save_snapshot(self, product_id: str, snapshot: StatsSnapshot) -> None:
        """Upsert the snapshot for snapshot.date."""
        filepath = self._path(self.snapshots_dir, product_id)
        by_date = {item["date"]: item for item in (self._read_json(filepath) or [])}
        by_date[snapshot.date] = snapshot.to_dict()
        self._write_json(filepath, [by_date[d] for d in sorted(by_date)])
        logger.debug(f"Saved snapshot for {product_id} on {snapshot.date}")

    def load_snapshots(self, product_id: str) -> List[StatsSnapshot]:
        """All snapshots, oldest first."""
        data = self._read_json(self._path(self.snapshots_dir, product_id)) or []
        snapshots = [StatsSnapshot.from_dict(item) for item in data]
        return sorted(snapshots, key=lambda s: s.date)

    def load_previous_snapshot(self, product_id: str, before: date) -> Optional[StatsSnapshot]:
        """Most recent snapshot dated strictly before `before`."""
        cutoff = before.isoformat()
        earlier = [s for s in self.load_snapshots(product_id) if s.date < cutoff]
        return earlier[-1] if earlier else None

    def prune_snapshots(self, product_id: str, retention_days: int, today: date) -> int:
        """
        Drop snapshots older than `retention_days` before `today`.

        Returns:
            Number of snapshots removed
        """
        cutoff = (today - timedelta(days=retention_days)).isoformat()
        snapshots = self.load_snapshots(product_id)
        kept = [s for s in snapshots if s.date >= cutoff]

        removed = len(snapshots) - len(kept)
        if removed:
            self._write_json(
                self._path(self.snapshots_dir, product_id),
                [s.to_dict() for s in kept]
            )
            logger.info(f"Pruned {removed} snapshots for {product_id}")
        return removed

    def delete_product(self, product_id: str) -> None:
        """Remove every stored file of a product."""
        for directory in (self.reviews_dir, self.reports_dir, self.snapshots_dir):
            filepath = self._path(directory, product_id)
            if os.path.exists(filepath):
                os.remove(filepath)
        logger.info(f"Deleted stored data for {product_id}")


# Design Rationale and Trade-offs:
#
# 1. Why one JSON file per product and kind?
#    - Upserts and deletes touch a single small file
#    - Removing a product is three os.remove calls
#    - Trade-off: Cross-product queries list the directory
#
# 2. Why validate product ids against [A-Za-z0-9._-]?
#    - Ids become file names; path separators must never reach os.path.join
#    - The registry uses the same validator, so every tracked id is storable
#    - Trade-off: Ids with spaces are rejected
#
# 3. Why temp file + os.replace for every write?
#    - Readers never observe a half-written file
#    - Trade-off: Briefly needs space for two copies
#
# 4. Why return None / [] instead of raising on missing files?
#    - A product without reviews or a report is a normal state
#    - Trade-off: Caller must check for None
