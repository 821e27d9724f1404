"""
Benchmark helpers: race a fixed set of article pairs and summarize the runs.

Used by scripts/benchmark.py. Every race gets a fresh racer, so no search
benefits from pages cached by an earlier one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Iterator

from wikiladder.racer import WikiRacer
from wikiladder.search.result import SearchResult

logger = logging.getLogger(__name__)

# Test cases: (start, target). The later ones came from Special:Random.
TEST_CASES = [
    ("Chimpanzee", "Kevin Bacon"),
    ("Emu", "Stanford University"),
    ("Crab", "Metaphysical poets"),
    ("Brarup Church", "The Hunting of the Snark"),
    ("Jimmy Neutron: Boy Genius", "Ice shanty"),
    ("Latvia at the 1992 Summer Olympics", "Thermae"),
    ("Tobiasz Musielak", "H. Lawrence Hinkley"),
    ("Cát Bà Island", "Fairystone Farms Wildlife Management Area"),
    ("Miss Teen USA 2006", "Ebbsfleet Valley"),
    ("Ma Zhi", "La Vénus d'Ille"),
    ("Sandy Ojang Onor", "Otto Christopher von Munthe af Morgenstierne"),
]


@dataclass
class BenchmarkSummary:
    races: int
    found: int
    avg_seconds: float
    avg_fetches: float
    avg_clicks_when_found: float
    total_seconds: float
    started: datetime | None = None
    finished: datetime | None = None


def race_pairs(
    make_racer: Callable[[], WikiRacer],
    cases: Iterable[tuple[str, str]] = TEST_CASES,
    both_directions: bool = True,
    on_result: Callable[[SearchResult], None] | None = None,
) -> list[SearchResult]:
    """
    Race every pair, optionally in both directions.

    Args:
        make_racer: Builds the racer for one race
        cases: (start, end) title pairs
        both_directions: Also race end -> start for every pair
        on_result: Called with each result as soon as it is ready

    Returns:
        One SearchResult per race, in the order raced
    """
    results: list[SearchResult] = []
    for start, end in cases:
        legs = [(start, end), (end, start)] if both_directions else [(start, end)]
        for source, dest in legs:
            result = make_racer().find_path(source, dest)
            results.append(result)
            if on_result is not None:
                on_result(result)
    return results


def limit_sweep(
    query_limit: int,
    fetch_limits: Iterable[int] = range(1, 5),
    anchor_thresholds: Iterable[int] = range(500, 3001, 500),
) -> Iterator[tuple[int, int]]:
    """
    Yield (fetch_limit, anchor_threshold) combinations worth racing.

    A threshold above fetch_limit * query_limit can never be met, since no
    page reports more backlinks than the budget fetches, so it is skipped.
    """
    thresholds = list(anchor_thresholds)
    for fetch_limit in fetch_limits:
        for anchor_threshold in thresholds:
            if anchor_threshold > fetch_limit * query_limit:
                continue
            yield fetch_limit, anchor_threshold


def summarize_results(results: list[SearchResult]) -> BenchmarkSummary:
    """Summarize a list of races."""
    if not results:
        return BenchmarkSummary(
            races=0,
            found=0,
            avg_seconds=0,
            avg_fetches=0,
            avg_clicks_when_found=0,
            total_seconds=0,
        )

    found = [r for r in results if r.found]
    total_seconds = sum(r.elapsed_seconds for r in results)

    return BenchmarkSummary(
        races=len(results),
        found=len(found),
        avg_seconds=total_seconds / len(results),
        avg_fetches=sum(r.fetches for r in results) / len(results),
        avg_clicks_when_found=sum(r.clicks for r in found) / len(found) if found else 0,
        total_seconds=round(total_seconds, 1),
        started=min(r.timestamp for r in results),
        finished=max(r.timestamp for r in results),
    )
