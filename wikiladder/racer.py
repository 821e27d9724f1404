"""
WikiRacer: finds chains of wikilinks between Wikipedia articles.

Example: find_path("Emu", "Stanford University") returns something like
["Emu", "Food and Drug Administration", "Duke University", "Stanford University"]
because the Emu article links to the FDA article, which links to Duke, which
links to Stanford.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from wikiladder.config import (
    DEFAULT_ANCHOR_THRESHOLD,
    DEFAULT_FETCH_LIMIT,
    DEFAULT_QUERY_LIMIT,
    DEFAULT_WORKERS,
    SearchConfig,
)
from wikiladder.graph.oracle import GraphOracle
from wikiladder.graph.source import GraphSource
from wikiladder.search.anchor import AnchorSearch, is_year_in_place
from wikiladder.search.completion import CompletionSearch
from wikiladder.search.ladder import WikiLadder
from wikiladder.search.result import SearchResult, SearchStatus
from wikiladder.wikipedia.titles import normalize_title

logger = logging.getLogger(__name__)


class WikiRacer:
    """
    Anchors the destination, then searches forward from the start.

    One racer owns one GraphOracle, so consecutive searches (such as the
    hops of find_chain) reuse everything already fetched.
    """

    def __init__(
        self,
        query_limit: int = DEFAULT_QUERY_LIMIT,
        anchor_threshold: int = DEFAULT_ANCHOR_THRESHOLD,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        workers: int = DEFAULT_WORKERS,
        source: GraphSource | None = None,
        oracle: GraphOracle | None = None,
        noise_filter: Callable[[str], bool] = is_year_in_place,
    ) -> None:
        """
        Initialize the racer.

        Args:
            query_limit: Backlinks requested per API call (max 500)
            anchor_threshold: Minimum popularity for a page to be an anchor
            fetch_limit: Maximum backlink API calls per inbound query
            workers: Threads used to prefetch outbound links
            source: Link provider (defaults to live Wikipedia)
            oracle: Pre-built oracle to share; its limits replace query_limit,
                fetch_limit and workers
            noise_filter: Predicate for backlinks the anchor search skips

        Raises:
            ConfigurationError: If the limits are invalid or the anchor
                threshold is unreachable with this query limit
        """
        if oracle is not None:
            query_limit, fetch_limit, workers = oracle.query_limit, oracle.fetch_limit, oracle.workers

        self.config = SearchConfig(
            query_limit=query_limit,
            anchor_threshold=anchor_threshold,
            fetch_limit=fetch_limit,
            workers=workers,
        ).validate()

        if oracle is None:
            if source is None:
                from wikiladder.wikipedia.scraper import WikiScraper

                source = WikiScraper()
            oracle = GraphOracle(source, query_limit, fetch_limit, workers)

        self.oracle = oracle
        self.noise_filter = noise_filter

    def find_ladder(self, start: str, end: str) -> WikiLadder:
        """
        Build the ladder between two pages.

        Raises:
            InvalidTitleError: If either title cannot be normalized
        """
        ladder = WikiLadder(start, end, self.oracle)

        anchored = AnchorSearch(self.oracle, self.config.anchor_threshold, self.noise_filter).run(ladder)
        return CompletionSearch(self.oracle).run(anchored)

    def find_path(self, start: str, end: str) -> SearchResult:
        """
        Find a sequence of clickable wikilinks from start to end.

        Returns:
            SearchResult whose path is set when status is FOUND
        """
        logger.info(f"Searching: '{start}' -> '{end}'")
        started = time.time()
        # pages that failed in an earlier search get another chance
        self.oracle.forget_failures()
        fetches_before = self.oracle.fetches
        failed_before = self.oracle.failed_fetches

        ladder = self.find_ladder(start, end)

        fetches = self.oracle.fetches - fetches_before
        failed = self.oracle.failed_fetches - failed_before

        if ladder.is_complete():
            status = SearchStatus.FOUND
        elif fetches and failed == fetches:
            status = SearchStatus.UNREACHABLE
        else:
            status = SearchStatus.EXHAUSTED

        result = SearchResult(
            start=ladder.start,
            end=ladder.end,
            path=ladder.to_list() if status is SearchStatus.FOUND else None,
            ladder=ladder,
            status=status,
            fetches=fetches,
            failed_fetches=failed,
            elapsed_seconds=time.time() - started,
        )

        if result.found:
            logger.info(f"Found path ({result.clicks} clicks): {' -> '.join(result.path)}")
        else:
            logger.warning(f"No path from '{result.start}' to '{result.end}' ({status.value}): {ladder}")
        return result

    def find_chain(self, *titles: str) -> SearchResult:
        """
        Find one path visiting every title in order.

        Each hop starts from the last page of the previous one. Stops at the
        first hop that fails and reports that hop's status.

        Raises:
            ValueError: If fewer than two titles are given
        """
        if len(titles) < 2:
            raise ValueError("At least two titles are needed to build a path")

        started = time.time()
        path = [normalize_title(titles[0])]
        fetches = failed = 0
        result: SearchResult | None = None

        for title in titles[1:]:
            result = self.find_path(path[-1], title)
            fetches += result.fetches
            failed += result.failed_fetches
            if not result.found:
                break
            path.extend(result.path[1:])

        return SearchResult(
            start=path[0],
            end=normalize_title(titles[-1]),
            path=path if result.found else None,
            ladder=result.ladder,
            status=result.status,
            fetches=fetches,
            failed_fetches=failed,
            elapsed_seconds=time.time() - started,
        )
