"""
Configuration constants for the wikiladder project.

All URLs, limits, and tunable search parameters are defined here.
Environment variables (or a .env file) can override the network settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from wikiladder.exceptions import ConfigurationError

# Load environment variables
load_dotenv()

# =============================================================================
# Wikipedia Configuration
# =============================================================================

# Base URL for rendered article pages
WIKIPEDIA_BASE_URL = os.environ.get("WIKIPEDIA_BASE_URL", "https://en.wikipedia.org/wiki/")

# API endpoint for backlink and redirect queries
WIKIPEDIA_API_URL = os.environ.get("WIKIPEDIA_API_URL", "https://en.wikipedia.org/w/api.php")

# Rate limiting: minimum seconds between requests
WIKIPEDIA_REQUEST_DELAY = float(os.environ.get("WIKIPEDIA_REQUEST_DELAY", "0.0"))

# Request timeout in seconds
WIKIPEDIA_TIMEOUT = 10

# User agent for requests (be a good citizen)
USER_AGENT = os.environ.get(
    "WIKILADDER_USER_AGENT",
    "WikiLadder/0.1 (https://github.com/NicolasWinsten/wiki-racer)",
)

# The front page links to everything topical; never treat it as a rung
HOME_PAGE = "Main Page"

# Hard cap MediaWiki places on results per backlinks request
PROVIDER_PAGE_CAP = 500

# =============================================================================
# Search Configuration
# =============================================================================

# Results requested per backlinks page
DEFAULT_QUERY_LIMIT = 500

# Minimum number of known inbound links for a page to serve as an anchor
DEFAULT_ANCHOR_THRESHOLD = 1000

# Paginated backlink requests allotted to each inbound query
DEFAULT_FETCH_LIMIT = 2

# Threads used to prefetch outbound links (1 = sequential)
DEFAULT_WORKERS = 1

# =============================================================================
# Logging Configuration
# =============================================================================

# Log level (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


@dataclass(frozen=True)
class SearchConfig:
    """
    Limits governing one racer's network budget.

    Attributes:
        query_limit: Results requested per backlinks page (1..PROVIDER_PAGE_CAP)
        anchor_threshold: Minimum popularity for a page to count as anchored
        fetch_limit: Backlink pages fetched per inbound query
        workers: Threads used for outbound prefetching
    """

    query_limit: int = DEFAULT_QUERY_LIMIT
    anchor_threshold: int = DEFAULT_ANCHOR_THRESHOLD
    fetch_limit: int = DEFAULT_FETCH_LIMIT
    workers: int = DEFAULT_WORKERS

    def validate(self) -> SearchConfig:
        """
        Check the limits and return self.

        Raises:
            ConfigurationError: If a limit is non-positive, the query limit
                exceeds the provider cap, or the anchor threshold can never
                be reached.
        """
        for name in ("query_limit", "anchor_threshold", "fetch_limit", "workers"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be positive, got {getattr(self, name)}")

        if self.query_limit > PROVIDER_PAGE_CAP:
            raise ConfigurationError(
                f"query_limit {self.query_limit} exceeds the provider cap of {PROVIDER_PAGE_CAP}"
            )

        if self.query_limit * PROVIDER_PAGE_CAP < self.anchor_threshold:
            raise ConfigurationError(
                f"query_limit {self.query_limit} can never reach "
                f"anchor_threshold {self.anchor_threshold}"
            )

        return self
