"""
Search result dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wikiladder.search.ladder import WikiLadder


class SearchStatus(Enum):
    """How a search ended."""

    FOUND = "found"
    EXHAUSTED = "exhausted"
    UNREACHABLE = "unreachable"


@dataclass
class SearchResult:
    """
    Complete record of a finished search.

    Attributes:
        start: Starting article
        end: Destination article
        path: Titles from start to end, or None if no path was found
        ladder: Final ladder (incomplete unless status is FOUND)
        status: FOUND, EXHAUSTED (budget ran out), or UNREACHABLE (every
            network request failed)
        fetches: Network requests issued during the search
        failed_fetches: How many of those requests failed
        elapsed_seconds: Wall-clock search time
        timestamp: When the search finished
    """

    start: str
    end: str
    path: list[str] | None
    ladder: WikiLadder | None
    status: SearchStatus
    fetches: int = 0
    failed_fetches: int = 0
    elapsed_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def found(self) -> bool:
        """Whether a complete path was found."""
        return self.status is SearchStatus.FOUND

    @property
    def clicks(self) -> int | None:
        """Number of links followed along the path."""
        return len(self.path) - 1 if self.path else None
