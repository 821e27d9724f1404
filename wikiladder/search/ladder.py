"""
Ladders: paths built inward from both ends.

A Ladder starts out as just its first and last rung. Rungs are stacked onto
the start (the lower section) or hung under the end (the upper section)
until the two innermost rungs can link to each other, at which point the
ladder is complete. Ladders are values: adding a rung returns a new ladder
and leaves the original untouched.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from wikiladder.wikipedia.titles import normalize_title

if TYPE_CHECKING:
    from wikiladder.graph.oracle import GraphOracle

R = TypeVar("R")

# Marks the unclosed gap in an incomplete ladder's list form
GAP = None


class RungStatus(Enum):
    """Outcome of adding a rung to a ladder."""

    APPLIED = "applied"
    NOOP = "noop"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RungUpdate(Generic[R]):
    """
    Result of add_lower_rung() / add_upper_rung().

    Attributes:
        status: Whether the rung was applied, ignored, or rejected
        ladder: The derived ladder if applied, otherwise the original
        reason: Why a rung was rejected (empty otherwise)
    """

    status: RungStatus
    ladder: Ladder[R]
    reason: str = ""

    @property
    def applied(self) -> bool:
        return self.status is RungStatus.APPLIED


class Ladder(ABC, Generic[R]):
    """
    A sequence of rungs that can be climbed from start to end.

    Invariants:
    - lower[0] is the start and upper[0] is the end
    - each rung in lower links to the next one in lower
    - each rung in upper is linked to from the next one in upper
    - a complete ladder accepts no more rungs
    """

    def __init__(self, start: R, end: R, *, lower: tuple[R, ...] = (), upper: tuple[R, ...] = ()) -> None:
        self.start = start
        self.end = end
        self.lower: tuple[R, ...] = lower or (start,)
        self.upper: tuple[R, ...] = upper or (end,)
        self._complete: bool | None = None

    @abstractmethod
    def can_link_to(self, source: R, dest: R) -> bool:
        """Return True if rung source links directly to rung dest."""
        ...

    def _derive(self, lower: tuple[R, ...], upper: tuple[R, ...]) -> Ladder[R]:
        """Build a ladder sharing this one's endpoints with new rung sections."""
        return type(self)(self.start, self.end, lower=lower, upper=upper)

    def _endpoints_match(self) -> bool:
        return self.start == self.end

    @property
    def lower_frontier(self) -> R:
        """Highest rung connected to the start."""
        return self.lower[-1]

    @property
    def upper_frontier(self) -> R:
        """Lowest rung connected to the end."""
        return self.upper[-1]

    def is_complete(self) -> bool:
        """True if the ladder links all the way from start to end."""
        if self._complete is None:
            self._complete = self._endpoints_match() or self.can_link_to(
                self.lower_frontier, self.upper_frontier
            )
        return self._complete

    def height(self) -> int:
        """Number of rungs excluding start and end. Shorter ladders are preferred."""
        return len(self.lower) + len(self.upper) - 2

    def add_lower_rung(self, rung: R) -> RungUpdate[R]:
        """Stack a rung on top of the lower section."""
        lower = self.lower_frontier
        if rung == lower:
            return RungUpdate(RungStatus.NOOP, self)

        if not self.can_link_to(lower, rung):
            return RungUpdate(RungStatus.REJECTED, self, f"There is no link to {rung} from {lower}")

        if self.is_complete():
            return RungUpdate(RungStatus.REJECTED, self, f"Ladder is already complete: {self}")

        return RungUpdate(RungStatus.APPLIED, self._derive(self.lower + (rung,), self.upper))

    def add_upper_rung(self, rung: R) -> RungUpdate[R]:
        """Hang a rung under the upper section."""
        upper = self.upper_frontier
        if rung == upper:
            return RungUpdate(RungStatus.NOOP, self)

        if not self.can_link_to(rung, upper):
            return RungUpdate(RungStatus.REJECTED, self, f"There is no link to {upper} from {rung}")

        if self.is_complete():
            return RungUpdate(RungStatus.REJECTED, self, f"Ladder is already complete: {self}")

        return RungUpdate(RungStatus.APPLIED, self._derive(self.lower, self.upper + (rung,)))

    def to_list(self) -> list[R | None]:
        """
        Return the rungs in climbing order.

        An incomplete ladder has GAP between its two sections. When both
        sections end on the same rung, or the start and end match, it
        appears once.
        """
        rungs: list[R | None] = list(self.lower)
        upper = list(reversed(self.upper))

        if not self.is_complete():
            rungs.append(GAP)
        elif rungs[-1] == upper[0] or (self.height() == 0 and self._endpoints_match()):
            upper = upper[1:]

        return rungs + upper

    def __str__(self) -> str:
        sep = ", " if self.is_complete() else ", ... , "
        lower = ", ".join(str(rung) for rung in self.lower)
        upper = ", ".join(str(rung) for rung in reversed(self.upper))
        return f"[{lower}{sep}{upper}]"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self})"


class WikiLadder(Ladder[str]):
    """
    Ladder of Wikipedia titles, linked by clickable wikilinks.

    Carries a proximity score: the number of links shared by the two
    frontier pages, or sys.maxsize once complete. It is computed when the
    ladder is built and never changes.
    """

    def __init__(
        self,
        start: str,
        end: str,
        oracle: GraphOracle,
        *,
        lower: tuple[str, ...] = (),
        upper: tuple[str, ...] = (),
    ) -> None:
        if not lower and not upper:
            start, end = normalize_title(start), normalize_title(end)
        super().__init__(start, end, lower=lower, upper=upper)
        self.oracle = oracle

        if self.is_complete():
            self.proximity = sys.maxsize
        else:
            self.proximity = oracle.links_in_common(self.lower_frontier, self.upper_frontier)

    def _derive(self, lower: tuple[str, ...], upper: tuple[str, ...]) -> WikiLadder:
        return WikiLadder(self.start, self.end, self.oracle, lower=lower, upper=upper)

    def _endpoints_match(self) -> bool:
        return self.start.casefold() == self.end.casefold()

    def can_link_to(self, source: str, dest: str) -> bool:
        return self.oracle.has_link_to(source, dest)

    def is_anchored(self, threshold: int) -> bool:
        """True if complete or the upper frontier has at least threshold known backlinks."""
        return self.is_complete() or self.oracle.popularity(self.upper_frontier) >= threshold
