"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides
fixtures available to all test files. No test touches the network:
searches run against FakeSource, an in-memory link graph.
"""

from __future__ import annotations

from collections import Counter

import pytest

from wikiladder.exceptions import FetchError
from wikiladder.graph.oracle import GraphOracle
from wikiladder.graph.source import BacklinkPage, GraphSource


class FakeSource(GraphSource):
    """
    GraphSource over an adjacency dict, counting every call.

    Attributes:
        links: Title -> titles it links to
        redirects: Redirect title -> title it resolves to
        failing: Titles whose fetches raise FetchError
        calls: Counter of (method, title) pairs
    """

    def __init__(
        self,
        links: dict[str, list[str]],
        redirects: dict[str, str] | None = None,
        failing: set[str] | None = None,
    ) -> None:
        self.links = links
        self.redirects = redirects or {}
        self.failing = failing or set()
        self.calls: Counter = Counter()

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def _check(self, method: str, title: str) -> None:
        self.calls[(method, title)] += 1
        if title in self.failing or "*" in self.failing:
            raise FetchError(title, "simulated outage")

    def fetch_rendered_page(self, title: str) -> str:
        self._check("page", title)
        target = self.redirects.get(title, title)
        anchors = "".join(
            f'<a href="/wiki/{link.replace(" ", "_")}">{link}</a>'
            for link in self.links.get(target, [])
        )
        return f"<html><body><div id=\"mw-content-text\">{anchors}</div></body></html>"

    def extract_links(self, html: str) -> list[str]:
        from wikiladder.wikipedia.scraper import WikiScraper

        return WikiScraper(rate_limit=0).extract_links(html)

    def fetch_backlinks(self, title: str, cursor: str | None, limit: int) -> BacklinkPage:
        self._check("backlinks", title)
        linking = sorted(
            source
            for source, targets in self.links.items()
            if title in targets and source not in self.redirects
        )
        offset = int(cursor) if cursor else 0
        page = linking[offset:offset + limit]
        more = offset + limit < len(linking)
        return BacklinkPage(titles=page, cursor=str(offset + limit) if more else None)

    def fetch_redirects_to(self, title: str) -> set[str]:
        self._check("redirects", title)
        return {source for source, target in self.redirects.items() if target == title}


def popular_graph(hub: str, fans: int, extra: dict[str, list[str]] | None = None) -> dict[str, list[str]]:
    """Build a graph where `fans` synthetic pages all link to `hub`."""
    graph = {f"Fan {i}": [hub] for i in range(fans)}
    graph.update(extra or {})
    return graph


@pytest.fixture
def chain_graph() -> dict[str, list[str]]:
    """A -> B -> C -> D, with D linked from 1000 synthetic pages and C from 2."""
    return popular_graph(
        "D",
        1000,
        {
            "A": ["B"],
            "B": ["C"],
            "C": ["D"],
            "E": ["C"],
            "D": ["Main Page"],
        },
    )


@pytest.fixture
def chain_source(chain_graph) -> FakeSource:
    return FakeSource(chain_graph)


@pytest.fixture
def chain_oracle(chain_source) -> GraphOracle:
    return GraphOracle(chain_source, query_limit=500, fetch_limit=3)
