"""
Configuration settings for ReviewSense.

Centralized configuration for all agents and report parameters.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("REVIEWSENSE_DATA_ROOT", PROJECT_ROOT / "data"))
OUTPUT_ROOT = PROJECT_ROOT / "output"
REGISTRY_PATH = DATA_ROOT / "products.json"

# API Configuration (empty key disables the AI summarizer)
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")

# AI Summarizer
AI_MODEL = "gemini-1.5-flash"
AI_TEMPERATURE = 0.3
AI_TIMEOUT_SECONDS = 30
AI_MAX_REVIEWS = 20  # Most helpful reviews included in the prompt
AI_REVIEW_EXCERPT_CHARS = 200

# Reviews
REVIEW_WINDOW = 100  # Newest reviews kept and analyzed per product
MAX_REVIEW_CHARS = 500  # Review text truncated at ingestion

# Report cache
REPORT_CACHE_TTL_HOURS = 1
REPORT_RETENTION_DAYS = 30  # Reports and snapshots older than this are pruned

# Product registry
MAX_TRACKED_PRODUCTS = 5

# Ingestion
USE_MOCK_DATA = os.getenv("REVIEWSENSE_MOCK_DATA", "false").lower() == "true"
MOCK_REVIEW_COUNT = 60  # Number of mock reviews to generate

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# Design Rationale and Trade-offs:
#
# 1. Why environment variables for the API key and data root?
#    - The key stays out of the repository
#    - Tests and demos can point DATA_ROOT at a scratch directory
#    - Trade-off: Settings are read once at import time
#
# 2. Why is a missing API key not an error?
#    - Reports are complete without the AI step (rule-based summary)
#    - The CLI only logs a warning
#    - Trade-off: A mistyped variable name silently disables AI summaries
#
# 3. Why one retention value for reports and snapshots?
#    - The trend only compares against snapshots inside the same window
#    - Trade-off: Cannot keep long snapshot history with short report retention
