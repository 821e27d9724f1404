#!/usr/bin/env python3
"""
Race the benchmark article pairs against live Wikipedia.

Usage:
    python scripts/benchmark.py
    python scripts/benchmark.py --fetch-limit 1 --anchor-threshold 500
    python scripts/benchmark.py --sweep --cases 3
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import logging
logging.basicConfig(level=logging.WARNING)  # Quiet mode

from wikiladder.benchmark import TEST_CASES, limit_sweep, race_pairs, summarize_results  # noqa: E402
from wikiladder.config import (  # noqa: E402
    DEFAULT_ANCHOR_THRESHOLD,
    DEFAULT_FETCH_LIMIT,
    DEFAULT_QUERY_LIMIT,
)
from wikiladder.racer import WikiRacer  # noqa: E402


def print_result(result):
    status = "FOUND" if result.found else result.status.value.upper()
    clicks = f"{result.clicks:2} clicks" if result.found else "        "
    print(
        f"  {result.start} -> {result.end}\n"
        f"    {status:11} {clicks} in {result.elapsed_seconds:5.1f}s ({result.fetches} requests)"
    )


def run_benchmark(cases, query_limit, fetch_limit, anchor_threshold, both_directions):
    print(f"\nfetch_limit = {fetch_limit}, anchor_threshold = {anchor_threshold}")
    print("-" * 70)

    results = race_pairs(
        lambda: WikiRacer(
            query_limit=query_limit,
            anchor_threshold=anchor_threshold,
            fetch_limit=fetch_limit,
        ),
        cases,
        both_directions=both_directions,
        on_result=print_result,
    )
    return summarize_results(results)


def main():
    parser = argparse.ArgumentParser(description="Race the benchmark article pairs")
    parser.add_argument("--query-limit", type=int, default=DEFAULT_QUERY_LIMIT, help="Backlinks per API call")
    parser.add_argument("--fetch-limit", type=int, default=DEFAULT_FETCH_LIMIT, help="Backlink calls per page")
    parser.add_argument("--anchor-threshold", type=int, default=DEFAULT_ANCHOR_THRESHOLD, help="Anchor popularity")
    parser.add_argument("--sweep", action="store_true", help="Try fetch limits 1-4 against thresholds 500-3000")
    parser.add_argument("--one-way", action="store_true", help="Only race each pair start -> end")
    parser.add_argument("--cases", type=int, default=None, help="Limit number of test cases")
    args = parser.parse_args()

    cases = TEST_CASES[:args.cases] if args.cases else TEST_CASES
    if args.sweep:
        settings = list(limit_sweep(args.query_limit))
    else:
        settings = [(args.fetch_limit, args.anchor_threshold)]

    print("=" * 70)
    print("wikiladder - Benchmark")
    print("=" * 70)
    print(f"\nRacing {len(cases)} pairs under {len(settings)} setting(s)...")

    summaries = {}
    try:
        for fetch_limit, anchor_threshold in settings:
            summaries[(fetch_limit, anchor_threshold)] = run_benchmark(
                cases, args.query_limit, fetch_limit, anchor_threshold, not args.one_way
            )
    except KeyboardInterrupt:
        print("\n\nBenchmark interrupted by user")

    # Summary
    print("\n" + "=" * 70)
    print("SUMMARY")
    print("=" * 70)

    for (fetch_limit, anchor_threshold), summary in summaries.items():
        print(
            f"  {fetch_limit}:{anchor_threshold:<5} : {summary.found}/{summary.races} found, "
            f"avg {summary.avg_seconds:.1f}s, avg {summary.avg_fetches:.0f} requests, "
            f"avg {summary.avg_clicks_when_found:.1f} clicks (when found)"
        )

    finished = [s.finished for s in summaries.values() if s.finished]
    if finished:
        print(f"\nFinished at {max(finished):%Y-%m-%d %H:%M:%S}")


if __name__ == "__main__":
    main()
