"""
Anchoring: move a ladder's upper frontier onto a well-linked page.

Searching forward into an obscure page is hopeless because almost nothing
links to it. Before the forward search starts, the upper section is built
backwards through the pages that link to the end until its frontier is a
page referenced by at least anchor_threshold others.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import re
from typing import Callable

from wikiladder.config import DEFAULT_ANCHOR_THRESHOLD
from wikiladder.graph.oracle import GraphOracle
from wikiladder.search.ladder import WikiLadder

logger = logging.getLogger(__name__)

YEAR_IN_PLACE = re.compile(r"[0-9]+ in .*")


def is_year_in_place(title: str) -> bool:
    """
    Match pages like "1809 in Denmark".

    Only similar pages link to them, so they lead the anchor search nowhere.
    Annual-event pages such as "1995 Men's Curling Championship" slip past.
    """
    return YEAR_IN_PLACE.fullmatch(title) is not None


def anchor_priority(ladder: WikiLadder) -> int:
    """Heap key for a ladder: most popular upper frontier first."""
    return -ladder.oracle.popularity(ladder.upper_frontier)


class AnchorSearch:
    """
    Best-first search over ladders ordered by upper-frontier popularity.

    Attributes:
        oracle: Graph oracle shared with the ladders being searched
        threshold: Popularity at which a frontier counts as anchored
        noise_filter: Predicate naming backlink titles never to climb through
    """

    def __init__(
        self,
        oracle: GraphOracle,
        threshold: int = DEFAULT_ANCHOR_THRESHOLD,
        noise_filter: Callable[[str], bool] = is_year_in_place,
    ) -> None:
        self.oracle = oracle
        self.threshold = threshold
        self.noise_filter = noise_filter
        self.expansions = 0

    def run(self, ladder: WikiLadder) -> WikiLadder:
        """
        Return an anchored version of the ladder.

        If no anchor can be reached (the end is barely referenced), the
        original ladder is returned unchanged.
        """
        if ladder.is_anchored(self.threshold):
            return ladder

        counter = itertools.count()
        heap: list[tuple[int, int, WikiLadder]] = [(anchor_priority(ladder), next(counter), ladder)]
        visited = {ladder.upper_frontier}

        while heap:
            _, _, best = heapq.heappop(heap)
            self.expansions += 1
            logger.debug(f"best anchor: {best}")

            for rung in sorted(self.oracle.inbound_neighbors(best.upper_frontier)):
                if rung in visited or self.noise_filter(rung):
                    continue
                visited.add(rung)

                update = best.add_upper_rung(rung)
                if not update.applied:
                    continue

                candidate = update.ladder
                if candidate.is_anchored(self.threshold):
                    logger.info(f"Anchored '{ladder.end}' at '{candidate.upper_frontier}'")
                    return candidate

                heapq.heappush(heap, (anchor_priority(candidate), next(counter), candidate))

        logger.info(f"Could not anchor '{ladder.end}'; searching toward it directly")
        return ladder
