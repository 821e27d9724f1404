"""
Search module.

Provides the ladder structure and the two search phases:
- Ladder / WikiLadder: Paths built from both ends
- AnchorSearch: Moves the destination onto a well-linked page
- CompletionSearch: Grows the start side until the ladder closes
- SearchResult: Outcome of a search
"""

from wikiladder.search.anchor import AnchorSearch, is_year_in_place
from wikiladder.search.completion import CompletionSearch
from wikiladder.search.ladder import GAP, Ladder, RungStatus, RungUpdate, WikiLadder
from wikiladder.search.result import SearchResult, SearchStatus

__all__ = [
    "AnchorSearch",
    "CompletionSearch",
    "GAP",
    "Ladder",
    "RungStatus",
    "RungUpdate",
    "SearchResult",
    "SearchStatus",
    "WikiLadder",
    "is_year_in_place",
]
