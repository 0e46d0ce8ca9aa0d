"""
Snapshot History Aggregator.

Exports a product's daily positive-rate snapshots as a CSV trend table.
"""

import json
import logging
import os
from datetime import datetime, timedelta, timezone

import pandas as pd

from reviewsense.utils.storage import ReportStore

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ["Date", "Total", "PositiveRate", "Change"]


class SnapshotHistoryAggregator:
    """
    Builds the snapshot trend table for one product.
    """

    def __init__(self, store: ReportStore):
        self.store = store

    def generate_history_table(
        self,
        product_id: str,
        target_date: str,
        window_days: int = 30,
        output_dir: str = "output"
    ) -> str:
        """
        Generate history table ending at target_date.

        Args:
            product_id: Product identifier
            target_date: End date in YYYY-MM-DD format
            window_days: Number of days to include (default: 30)
            output_dir: Directory to save CSV output

        Returns:
            Path to generated CSV file

        Raises:
            ValueError: If window_days is not positive
        """
        if window_days < 1:
            raise ValueError(f"window_days must be positive, got {window_days}")

        end = datetime.strptime(target_date, "%Y-%m-%d").date()
        start = end - timedelta(days=window_days - 1)
        date_range = [(start + timedelta(days=i)).isoformat() for i in range(window_days)]

        logger.info(f"Generating {window_days}-day history for {product_id}: {date_range[0]} to {date_range[-1]}")

        snapshots = [
            s for s in self.store.load_snapshots(product_id)
            if date_range[0] <= s.date <= date_range[-1]
        ]

        df = pd.DataFrame(
            [{"Date": s.date, "Total": s.total, "PositiveRate": s.positive_rate} for s in snapshots],
            columns=["Date", "Total", "PositiveRate"]
        )

        if df.empty:
            logger.warning(f"No snapshots for {product_id} in window, creating empty history table")
            df = pd.DataFrame(columns=HISTORY_COLUMNS)
        else:
            df = df.sort_values("Date")
            # Change relative to the previous recorded snapshot, 0 for the first
            df["Change"] = df["PositiveRate"].diff().fillna(0).astype(int)

        os.makedirs(output_dir, exist_ok=True)
        output_path = os.path.join(output_dir, f"history_{product_id}_{target_date}.csv")
        df.to_csv(output_path, index=False)

        covered = len(df)
        metadata = {
            "product_id": str(product_id),
            "target_date": target_date,
            "window_days": window_days,
            "date_range": {"start": date_range[0], "end": date_range[-1]},
            "missing_dates": sorted(set(date_range) - set(df["Date"])),
            "coverage": f"{covered}/{window_days} days ({100 * covered / window_days:.1f}%)",
            "generated_at": datetime.now(timezone.utc).isoformat()
        }
        metadata_path = output_path.replace(".csv", "_metadata.json")
        with open(metadata_path, 'w', encoding='utf-8') as f:
            json.dump(metadata, f, indent=2)

        logger.info(f"History table saved to {output_path} ({covered} snapshots)")
        return output_path


# Design Rationale and Trade-offs:
#
# 1. Why pandas for the history table?
#    - diff() gives day-over-day change in one call
#    - to_csv handles quoting and headers
#    - Trade-off: Heavy dependency for a small table
#
# 2. Why change relative to the previous recorded snapshot, not the previous day?
#    - Days without a regeneration have no snapshot
#    - Missing days are listed in the metadata instead
