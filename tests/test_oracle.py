"""
Unit tests for GraphOracle caching, budgets, and derived metrics.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from conftest import FakeSource, popular_graph

from wikiladder.exceptions import ConfigurationError
from wikiladder.graph.oracle import GraphOracle


class TestConfiguration:
    """Test constructor validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"query_limit": 0},
            {"fetch_limit": 0},
            {"workers": 0},
            {"query_limit": 501},
        ],
    )
    def test_invalid_limits_rejected(self, kwargs):
        """Non-positive limits and oversized pages should raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            GraphOracle(FakeSource({}), **kwargs)


class TestOutbound:
    """Test outbound_neighbors."""

    def test_includes_self(self, chain_oracle):
        """A page is considered to link to itself."""
        assert chain_oracle.outbound_neighbors("A") == frozenset({"A", "B"})

    def test_excludes_home_page(self, chain_oracle):
        """Links to the home page should be dropped."""
        assert "Main Page" not in chain_oracle.outbound_neighbors("D")

    def test_fetched_once(self, chain_oracle, chain_source):
        """A second call should hit the cache and return the identical object."""
        first = chain_oracle.outbound_neighbors("A")
        second = chain_oracle.outbound_neighbors("A")

        assert first is second
        assert chain_source.calls[("page", "A")] == 1

    def test_read_only(self, chain_oracle):
        """Cached sets should not be mutable by callers."""
        with pytest.raises(AttributeError):
            chain_oracle.outbound_neighbors("A").add("Z")

    def test_failed_fetch_is_soft(self):
        """A failing page should yield only itself and be counted."""
        source = FakeSource({"A": ["B"]}, failing={"A"})
        oracle = GraphOracle(source)

        assert oracle.outbound_neighbors("A") == frozenset({"A"})
        assert oracle.failed_fetches == 1
        assert oracle.fetches == 1

    def test_home_page_keeps_self_link(self):
        """The home page itself still links to itself."""
        oracle = GraphOracle(FakeSource({"Main Page": ["A"]}))

        assert oracle.outbound_neighbors("Main Page") == frozenset({"Main Page", "A"})
        assert oracle.degree("Main Page") == 1
        assert oracle.has_link_to("Main Page", "Main Page")

    def test_redirect_shares_target_links(self):
        """A redirect should link to everything its target links to."""
        source = FakeSource({"Emu": ["Bird"], "Ostrich": ["Emu"]}, redirects={"Emus": "Emu"})
        oracle = GraphOracle(source)

        assert "Emus" in oracle.inbound_neighbors("Emu")
        links = oracle.outbound_neighbors("Emus")

        assert {"Bird", "Emu", "Emus"} <= links
        assert source.calls[("page", "Emus")] == 0


class TestInbound:
    """Test inbound_neighbors and its fetch budget."""

    def test_collects_backlinks(self, chain_oracle):
        """Should return every page linking to the title."""
        assert chain_oracle.inbound_neighbors("C") == frozenset({"B", "E"})

    def test_fetch_budget_enforced(self):
        """With fetch_limit=1 only the first page of results is kept."""
        source = FakeSource(popular_graph("Hub", 25))
        oracle = GraphOracle(source, query_limit=10, fetch_limit=1)

        inbound = oracle.inbound_neighbors("Hub")

        assert len(inbound) == 10
        assert source.calls[("backlinks", "Hub")] == 1

    def test_pagination_within_budget(self):
        """Enough budget should page through every result."""
        source = FakeSource(popular_graph("Hub", 25))
        oracle = GraphOracle(source, query_limit=10, fetch_limit=5)

        assert oracle.popularity("Hub") == 25
        assert source.calls[("backlinks", "Hub")] == 3

    def test_fetched_once(self, chain_oracle, chain_source):
        """Inbound sets should be cached like outbound sets."""
        chain_oracle.inbound_neighbors("C")
        chain_oracle.inbound_neighbors("C")

        assert chain_source.calls[("backlinks", "C")] == 1
        assert chain_source.calls[("redirects", "C")] == 1

    def test_includes_redirects(self):
        """Redirect pages should count as linking to their target."""
        source = FakeSource({"Ostrich": ["Emu"]}, redirects={"Emus": "Emu"})
        oracle = GraphOracle(source)

        assert oracle.inbound_neighbors("Emu") == frozenset({"Ostrich", "Emus"})

    def test_failure_keeps_partial_results(self):
        """A failed request yields an empty set without raising."""
        source = FakeSource(popular_graph("Hub", 5), failing={"Hub"})
        oracle = GraphOracle(source)

        assert oracle.inbound_neighbors("Hub") == frozenset()
        assert oracle.failed_fetches == 2


class TestFailures:
    """Test recovery from failed fetches."""

    def test_failed_page_retried_after_forget(self):
        """A page that failed is served as-is until failures are forgotten."""
        source = FakeSource({"A": ["B"]}, failing={"A"})
        oracle = GraphOracle(source)
        oracle.outbound_neighbors("A")
        source.failing.clear()

        assert oracle.outbound_neighbors("A") == frozenset({"A"})
        assert oracle.stats()["failed_cached"] == 1

        assert oracle.forget_failures() == 1
        assert oracle.outbound_neighbors("A") == frozenset({"A", "B"})
        assert source.calls[("page", "A")] == 2

    def test_failed_backlinks_retried_after_forget(self):
        """Backlinks cut short by a failure are fetched again."""
        source = FakeSource(popular_graph("Hub", 5), failing={"Hub"})
        oracle = GraphOracle(source)
        oracle.inbound_neighbors("Hub")
        source.failing.clear()

        assert oracle.forget_failures() == 1
        assert oracle.popularity("Hub") == 5

    def test_successful_fetches_kept(self, chain_oracle, chain_source):
        """Forgetting failures leaves good entries cached."""
        chain_oracle.outbound_neighbors("A")

        assert chain_oracle.forget_failures() == 0
        chain_oracle.outbound_neighbors("A")
        assert chain_source.calls[("page", "A")] == 1


class SlowSource(FakeSource):
    """FakeSource whose requests take long enough for threads to overlap."""

    def fetch_rendered_page(self, title: str) -> str:
        time.sleep(0.05)
        return super().fetch_rendered_page(title)

    def fetch_backlinks(self, title, cursor, limit):
        time.sleep(0.05)
        return super().fetch_backlinks(title, cursor, limit)


class TestConcurrency:
    """Test that concurrent lookups share one fetch per title."""

    THREADS = 8

    def _race(self, lookup):
        barrier = threading.Barrier(self.THREADS)

        def call():
            barrier.wait()
            return lookup()

        with ThreadPoolExecutor(max_workers=self.THREADS) as executor:
            futures = [executor.submit(call) for _ in range(self.THREADS)]
            return [future.result() for future in futures]

    def test_outbound_fetched_once(self, chain_graph):
        """Simultaneous outbound lookups of one page issue a single request."""
        source = SlowSource(chain_graph)
        oracle = GraphOracle(source, workers=self.THREADS)

        results = self._race(lambda: oracle.outbound_neighbors("A"))

        assert source.calls[("page", "A")] == 1
        assert all(result is results[0] for result in results)
        assert oracle.fetches == 1

    def test_inbound_fetched_once(self, chain_graph):
        """Simultaneous inbound lookups of one page issue a single request."""
        source = SlowSource(chain_graph)
        oracle = GraphOracle(source, workers=self.THREADS)

        results = self._race(lambda: oracle.inbound_neighbors("C"))

        assert source.calls[("backlinks", "C")] == 1
        assert source.calls[("redirects", "C")] == 1
        assert all(result == frozenset({"B", "E"}) for result in results)


class TestMetrics:
    """Test has_link_to, degree, popularity and links_in_common."""

    def test_has_link_to(self, chain_oracle):
        """Should follow outbound links in one direction only."""
        assert chain_oracle.has_link_to("A", "B")
        assert not chain_oracle.has_link_to("B", "A")

    def test_has_link_to_prefers_inbound_cache(self, chain_oracle, chain_source):
        """Known backlinks should answer without fetching the source page."""
        chain_oracle.inbound_neighbors("D")

        assert chain_oracle.has_link_to("Fan 7", "D")
        assert chain_source.calls[("page", "Fan 7")] == 0

    def test_degree_excludes_self(self, chain_oracle):
        """Degree should not count the self link."""
        assert chain_oracle.degree("A") == 1
        assert chain_oracle.degree("D") == 0

    def test_popularity(self, chain_oracle):
        """Popularity is the number of backlinks."""
        assert chain_oracle.popularity("C") == 2
        assert chain_oracle.popularity("D") == 1001

    def test_links_in_common(self):
        """Should count links shared by both pages, self links included."""
        source = FakeSource({
            "X": ["P", "Q", "R"],
            "Y": ["Q", "R", "S", "T", "U"],
        })
        oracle = GraphOracle(source)

        assert oracle.links_in_common("X", "Y") == 2
        assert oracle.links_in_common("Y", "X") == 2
        assert oracle.links_in_common("X", "X") == 4


class TestPrefetch:
    """Test parallel prefetching."""

    def test_prefetch_fills_cache(self, chain_graph):
        """Prefetched pages should be served from cache afterwards."""
        source = FakeSource(chain_graph)
        oracle = GraphOracle(source, workers=4)

        oracle.prefetch_outbound(["A", "B", "C"])
        assert all(oracle.is_cached(title) for title in ["A", "B", "C"])

        oracle.outbound_neighbors("B")
        assert source.calls[("page", "B")] == 1

    def test_prefetch_sequential_is_noop(self, chain_oracle, chain_source):
        """With a single worker nothing is fetched ahead of time."""
        chain_oracle.prefetch_outbound(["A", "B"])
        assert chain_source.total_calls == 0

    def test_stats(self, chain_oracle):
        """Stats should reflect cache contents."""
        chain_oracle.outbound_neighbors("A")
        stats = chain_oracle.stats()

        assert stats["outbound_cached"] == 1
        assert stats["fetches"] == 1
        assert stats["failed_fetches"] == 0
