"""
wikiladder CLI - connect Wikipedia articles through their wikilinks.

Usage:
    wikiladder "Emu" "Stanford University"
    wikiladder "Chimpanzee" "Kevin Bacon" "Ice shanty"
    wikiladder "Crab" "Metaphysical poets" --fetch-limit 1 --anchor-threshold 500
    python scripts/race.py "Emu" "Stanford University" --verbose

With more than two titles, the path visits each one in order; every hop
starts from where the previous one ended.
"""

from __future__ import annotations

import argparse
import logging
import sys

from wikiladder.config import (
    DEFAULT_ANCHOR_THRESHOLD,
    DEFAULT_FETCH_LIMIT,
    DEFAULT_QUERY_LIMIT,
    DEFAULT_WORKERS,
    LOG_LEVEL,
)
from wikiladder.exceptions import ConfigurationError, InvalidTitleError
from wikiladder.racer import WikiRacer
from wikiladder.search.result import SearchStatus


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Find a chain of wikilinks between Wikipedia articles",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "titles",
        nargs="+",
        metavar="TITLE",
        help="Article titles to connect, in order (at least two)",
    )
    parser.add_argument(
        "--query-limit",
        type=int,
        default=DEFAULT_QUERY_LIMIT,
        help=f"Backlinks requested per API call, max 500 (default: {DEFAULT_QUERY_LIMIT})",
    )
    parser.add_argument(
        "--anchor-threshold",
        type=int,
        default=DEFAULT_ANCHOR_THRESHOLD,
        help=f"Backlinks a page needs to serve as an anchor (default: {DEFAULT_ANCHOR_THRESHOLD})",
    )
    parser.add_argument(
        "--fetch-limit",
        type=int,
        default=DEFAULT_FETCH_LIMIT,
        help=f"Backlink API calls allowed per page (default: {DEFAULT_FETCH_LIMIT})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help=f"Threads used to prefetch pages (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)
    if len(args.titles) < 2:
        parser.error("Please provide at least two Wikipedia titles")
    return args


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else LOG_LEVEL
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        racer = WikiRacer(
            query_limit=args.query_limit,
            anchor_threshold=args.anchor_threshold,
            fetch_limit=args.fetch_limit,
            workers=args.workers,
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(f"Connecting {' -> '.join(args.titles)}...")

    try:
        result = racer.find_chain(*args.titles)
    except InvalidTitleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\n\nSearch interrupted by user")
        return 130  # Standard exit code for Ctrl+C

    print("\n" + "=" * 60)
    if result.found:
        print(f"Found a path with {result.clicks} clicks")
    elif result.status is SearchStatus.UNREACHABLE:
        print("Wikipedia could not be reached")
    else:
        print(f"No path found. Closest ladder: {result.ladder}")
    print("=" * 60)

    if result.path:
        print("\nPath:")
        for i, title in enumerate(result.path):
            print(f"  {i}. {title}")

    print(f"\nin {int(result.elapsed_seconds)} seconds ({result.fetches} requests)")

    return 0 if result.found else 1


if __name__ == "__main__":
    sys.exit(main())
