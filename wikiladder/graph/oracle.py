"""
Memoized, budget-bounded access to the Wikipedia link graph.

Every edge set costs at least one network request, so each title's outbound
and inbound sets are fetched at most once and then served from cache. The
inbound side is additionally capped at fetch_limit paginated requests, which
makes popularity() a lower bound for very popular pages. Sets built from a
failed fetch are served only until forget_failures() is called.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from wikiladder.config import (
    DEFAULT_FETCH_LIMIT,
    DEFAULT_QUERY_LIMIT,
    DEFAULT_WORKERS,
    HOME_PAGE,
    PROVIDER_PAGE_CAP,
)
from wikiladder.exceptions import ConfigurationError, FetchError, InvalidTitleError
from wikiladder.graph.source import GraphSource
from wikiladder.wikipedia.titles import normalize_title

logger = logging.getLogger(__name__)


def _normalize_all(titles: Iterable[str]) -> set[str]:
    """Normalize titles from the provider, dropping any that are invalid."""
    normalized: set[str] = set()
    for title in titles:
        try:
            normalized.add(normalize_title(title))
        except InvalidTitleError:
            logger.debug(f"Ignoring invalid title from provider: {title!r}")
    return normalized


class GraphOracle:
    """
    Caching layer between the searches and a GraphSource.

    Attributes:
        source: Provider of rendered pages and backlinks
        query_limit: Titles requested per backlinks page
        fetch_limit: Backlink pages fetched per inbound query
        workers: Threads used by prefetch_outbound()
    """

    def __init__(
        self,
        source: GraphSource,
        query_limit: int = DEFAULT_QUERY_LIMIT,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        workers: int = DEFAULT_WORKERS,
    ) -> None:
        if query_limit < 1 or fetch_limit < 1 or workers < 1:
            raise ConfigurationError("query_limit, fetch_limit and workers must be positive")
        if query_limit > PROVIDER_PAGE_CAP:
            raise ConfigurationError(f"query_limit may not exceed {PROVIDER_PAGE_CAP}")

        self.source = source
        self.query_limit = query_limit
        self.fetch_limit = fetch_limit
        self.workers = workers

        self._outbound: dict[str, frozenset[str]] = {}
        self._inbound: dict[str, frozenset[str]] = {}
        # redirect title -> title it resolves to
        self._redirects: dict[str, str] = {}
        # (kind, title) entries built from a failed fetch, dropped by forget_failures()
        self._failed: set[tuple[str, str]] = set()

        # one lock per (kind, title) so a title is never fetched twice at once
        self._key_locks: dict[tuple[str, str], threading.Lock] = {}
        self._guard = threading.Lock()

        self.fetches = 0
        self.failed_fetches = 0

    def _lock_for(self, kind: str, title: str) -> threading.Lock:
        with self._guard:
            return self._key_locks.setdefault((kind, title), threading.Lock())

    def _record(self, failed: bool = False) -> None:
        with self._guard:
            self.fetches += 1
            if failed:
                self.failed_fetches += 1

    def _mark_failed(self, kind: str, title: str) -> None:
        with self._guard:
            self._failed.add((kind, title))

    def forget_failures(self) -> int:
        """
        Drop every cached set that was built from a failed fetch.

        Those titles are fetched again on their next lookup. Returns how many
        entries were dropped.
        """
        with self._guard:
            failed = list(self._failed)
            self._failed.clear()
            for kind, title in failed:
                cache = self._outbound if kind == "out" else self._inbound
                cache.pop(title, None)

        if failed:
            logger.info(f"Retrying {len(failed)} lookups that failed earlier")
        return len(failed)

    # =========================================================================
    # Neighbor sets
    # =========================================================================

    def outbound_neighbors(self, title: str) -> frozenset[str]:
        """
        Return every article linked from a title's page.

        The set always contains the title itself and never the home page.
        A failed fetch is logged and yields a set holding only the title
        until forget_failures() is called.
        """
        cached = self._outbound.get(title)
        if cached is not None:
            return cached

        target = self._redirects.get(title)
        if target is not None:
            # a redirect links to everything its target does
            links = self.outbound_neighbors(target) | {title}
            with self._lock_for("out", title):
                if ("out", target) in self._failed:
                    self._mark_failed("out", title)
                return self._outbound.setdefault(title, links)

        with self._lock_for("out", title):
            cached = self._outbound.get(title)
            if cached is not None:
                return cached

            try:
                html = self.source.fetch_rendered_page(title)
                found = _normalize_all(self.source.extract_links(html))
            except FetchError as e:
                logger.warning(f"Failed to fetch links on '{title}': {e}")
                self._record(failed=True)
                self._mark_failed("out", title)
                found = set()
            else:
                self._record()

            found.discard(HOME_PAGE)
            found.add(title)
            links = frozenset(found)
            self._outbound[title] = links

        logger.debug(f"Found {len(links) - 1} links on '{title}'")
        return links

    def inbound_neighbors(self, title: str) -> frozenset[str]:
        """
        Return the articles that link to a title, plus redirects to it.

        Backlinks are paged query_limit at a time and at most fetch_limit
        pages are requested. A failed request ends pagination early but
        keeps what was already fetched.
        """
        cached = self._inbound.get(title)
        if cached is not None:
            return cached

        with self._lock_for("in", title):
            cached = self._inbound.get(title)
            if cached is not None:
                return cached

            found: set[str] = set()
            cursor: str | None = None
            for _ in range(self.fetch_limit):
                try:
                    page = self.source.fetch_backlinks(title, cursor, self.query_limit)
                except FetchError as e:
                    logger.warning(f"Failed to fetch backlinks to '{title}': {e}")
                    self._record(failed=True)
                    self._mark_failed("in", title)
                    break

                self._record()
                found |= _normalize_all(page.titles)
                cursor = page.cursor
                if cursor is None:
                    break

            try:
                redirects = _normalize_all(self.source.fetch_redirects_to(title))
            except FetchError as e:
                logger.warning(f"Failed to fetch redirects to '{title}': {e}")
                self._record(failed=True)
                self._mark_failed("in", title)
                redirects = set()
            else:
                self._record()

            redirects.discard(title)
            with self._guard:
                for redirect in redirects:
                    self._redirects.setdefault(redirect, title)

            links = frozenset(found | redirects)
            self._inbound[title] = links

        logger.debug(f"Found {len(links)} pages linking to '{title}' ({len(redirects)} redirects)")
        return links

    def prefetch_outbound(self, titles: Iterable[str]) -> None:
        """Fetch outbound sets for uncached titles in parallel."""
        pending = [title for title in titles if title not in self._outbound]
        if self.workers <= 1 or len(pending) < 2:
            return

        logger.debug(f"Prefetching {len(pending)} pages on {self.workers} threads")
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            list(executor.map(self.outbound_neighbors, pending))

    # =========================================================================
    # Derived metrics
    # =========================================================================

    def has_link_to(self, source: str, dest: str) -> bool:
        """
        Return True if the page for source links to dest.

        Cached evidence from either direction is checked before fetching.
        """
        inbound = self._inbound.get(dest)
        if inbound is not None and source in inbound:
            return True

        outbound = self._outbound.get(source)
        if outbound is not None:
            return dest in outbound

        return dest in self.outbound_neighbors(source)

    def degree(self, title: str) -> int:
        """Number of articles linked from a page (itself excluded)."""
        return len(self.outbound_neighbors(title)) - 1

    def popularity(self, title: str) -> int:
        """Number of known pages linking to a title (a lower bound under budget)."""
        return len(self.inbound_neighbors(title))

    def links_in_common(self, a: str, b: str) -> int:
        """Number of articles linked from both a and b."""
        a_links = self.outbound_neighbors(a)
        b_links = self.outbound_neighbors(b)

        # iterate over the smaller set, probe the larger
        if len(a_links) > len(b_links):
            a_links, b_links = b_links, a_links

        return sum(1 for link in a_links if link in b_links)

    def is_cached(self, title: str) -> bool:
        """Whether a title's outbound set is already known."""
        return title in self._outbound

    def stats(self) -> dict:
        """Return cache and request statistics."""
        return {
            "outbound_cached": len(self._outbound),
            "inbound_cached": len(self._inbound),
            "redirects_known": len(self._redirects),
            "failed_cached": len(self._failed),
            "fetches": self.fetches,
            "failed_fetches": self.failed_fetches,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(source={self.source!r}, "
            f"query_limit={self.query_limit}, fetch_limit={self.fetch_limit})"
        )
