"""
Tests for the benchmark helpers.
"""

from conftest import FakeSource

from wikiladder.benchmark import TEST_CASES, limit_sweep, race_pairs, summarize_results
from wikiladder.racer import WikiRacer


class TestRacePairs:
    """Test racing the benchmark pairs."""

    def test_both_directions(self, chain_graph):
        """Each pair is raced forwards and backwards."""
        results = race_pairs(lambda: WikiRacer(source=FakeSource(chain_graph)), [("A", "D")])

        assert [(r.start, r.end) for r in results] == [("A", "D"), ("D", "A")]
        assert results[0].path == ["A", "B", "C", "D"]
        assert not results[1].found

    def test_one_way(self, chain_graph):
        """Only start -> end is raced when asked."""
        results = race_pairs(
            lambda: WikiRacer(source=FakeSource(chain_graph)),
            [("A", "D"), ("B", "D")],
            both_directions=False,
        )
        assert [r.start for r in results] == ["A", "B"]

    def test_fresh_racer_per_race(self, chain_graph):
        """No race reuses another race's cache."""
        sources = []

        def make_racer():
            sources.append(FakeSource(chain_graph))
            return WikiRacer(source=sources[-1])

        race_pairs(make_racer, [("A", "D")])

        assert len(sources) == 2
        assert all(source.calls[("page", "D")] == 1 for source in sources)

    def test_results_reported_as_they_finish(self, chain_graph):
        """The callback sees every result."""
        seen = []
        race_pairs(lambda: WikiRacer(source=FakeSource(chain_graph)), [("A", "D")], on_result=seen.append)
        assert len(seen) == 2

    def test_default_cases_are_pairs(self):
        """Every built-in case has a distinct start and end."""
        assert all(len(case) == 2 and case[0] != case[1] for case in TEST_CASES)


class TestLimitSweep:
    """Test the fetch limit / anchor threshold grid."""

    def test_unreachable_thresholds_skipped(self):
        """Thresholds above fetch_limit * query_limit are left out."""
        combos = list(limit_sweep(500))

        assert (1, 500) in combos
        assert (1, 1000) not in combos
        assert (4, 2000) in combos
        assert (2, 3000) not in combos
        assert len(combos) == 10

    def test_custom_grid(self):
        """The grid can be narrowed."""
        assert list(limit_sweep(100, [1, 2], [100, 200])) == [(1, 100), (2, 100), (2, 200)]


class TestSummarize:
    """Test result summaries."""

    def test_empty(self):
        """No results summarize to zeros."""
        summary = summarize_results([])

        assert summary.races == 0
        assert summary.started is None

    def test_counts_and_averages(self, chain_graph):
        """Found races, clicks and the run's time span are reported."""
        results = race_pairs(lambda: WikiRacer(source=FakeSource(chain_graph)), [("A", "D")])
        summary = summarize_results(results)

        assert summary.races == 2
        assert summary.found == 1
        assert summary.avg_clicks_when_found == 3
        assert summary.avg_fetches == sum(r.fetches for r in results) / 2
        assert summary.started == results[0].timestamp
        assert summary.finished == results[1].timestamp
