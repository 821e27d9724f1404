"""
Completion: grow a ladder's lower section until it reaches the upper one.

Candidates are ranked by proximity, the number of links their lower
frontier shares with the upper frontier. The backlinks of the upper
frontier act as a net: any new page that links into the net closes the
ladder one hop later.
"""

from __future__ import annotations

import heapq
import itertools
import logging

from wikiladder.graph.oracle import GraphOracle
from wikiladder.search.ladder import WikiLadder

logger = logging.getLogger(__name__)


def completion_priority(ladder: WikiLadder) -> tuple[int, int]:
    """Heap key for a ladder: highest proximity first, then shortest."""
    return (-ladder.proximity, ladder.height())


class CompletionSearch:
    """
    Best-first forward search from the lower frontier.

    Attributes:
        oracle: Graph oracle shared with the ladders being searched
    """

    def __init__(self, oracle: GraphOracle) -> None:
        self.oracle = oracle
        self.expansions = 0

    def run(self, ladder: WikiLadder) -> WikiLadder:
        """
        Return a completed version of the ladder.

        If the search space runs out first, the most promising incomplete
        ladder seen is returned instead.
        """
        if ladder.is_complete():
            # the start page links straight to the upper frontier
            return ladder

        net = self.oracle.inbound_neighbors(ladder.upper_frontier)
        caught_by = sorted(net)

        counter = itertools.count()
        heap: list[tuple[tuple[int, int], int, WikiLadder]] = [
            (completion_priority(ladder), next(counter), ladder)
        ]
        visited = {ladder.lower_frontier}
        best_seen = ladder

        while heap:
            _, _, best = heapq.heappop(heap)
            self.expansions += 1
            logger.debug(f"best so far: {best}")

            neighbors = sorted(self.oracle.outbound_neighbors(best.lower_frontier) - visited)
            self.oracle.prefetch_outbound(neighbors)

            for page in neighbors:
                if page in visited:
                    continue

                update = best.add_lower_rung(page)
                if not update.applied:
                    continue

                candidate = update.ladder
                if candidate.is_complete():
                    return candidate

                # check if the net has caught the new page
                for title in caught_by:
                    if self.oracle.has_link_to(page, title):
                        closing = candidate.add_lower_rung(title)
                        if closing.applied and closing.ladder.is_complete():
                            return closing.ladder

                heapq.heappush(heap, (completion_priority(candidate), next(counter), candidate))
                visited.add(page)

                if completion_priority(candidate) < completion_priority(best_seen):
                    best_seen = candidate

        logger.info(f"Search exhausted without connecting '{ladder.start}' to '{ladder.end}'")
        return best_seen
