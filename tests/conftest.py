"""
Shared fixtures for ReviewSense tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from reviewsense.models.review import Review

BASE_DATE = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_review():
    """Factory for unclassified reviews with sensible defaults."""
    counter = {"n": 0}

    def _make(content="", recommended=True, helpful=0, comment_count=0, playtime_hours=0, **fields):
        counter["n"] += 1
        fields.setdefault("review_id", f"r-{counter['n']}")
        fields.setdefault("date", BASE_DATE + timedelta(minutes=counter["n"]))
        return Review(
            content=content,
            recommended=recommended,
            helpful=helpful,
            comment_count=comment_count,
            playtime_hours=playtime_hours,
            **fields
        )

    return _make
