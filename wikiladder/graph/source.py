"""
Transport contract between the graph oracle and a link provider.

The oracle never talks to the network directly; it asks a GraphSource for
rendered pages and backlink pages and does its own caching on top.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class BacklinkPage:
    """
    One page of results from a backlinks query.

    Attributes:
        titles: Titles of non-redirect pages linking to the queried page
        cursor: Continuation token for the next page, or None when done
    """

    titles: list[str] = field(default_factory=list)
    cursor: str | None = None


class GraphSource(ABC):
    """
    Abstract provider of outbound and inbound links.

    Every fetch method raises FetchError when the request fails.
    """

    @abstractmethod
    def fetch_rendered_page(self, title: str) -> str:
        """Return the rendered HTML of an article."""
        ...

    @abstractmethod
    def extract_links(self, html: str) -> list[str]:
        """Return the article titles linked from rendered HTML."""
        ...

    @abstractmethod
    def fetch_backlinks(self, title: str, cursor: str | None, limit: int) -> BacklinkPage:
        """
        Fetch one page of titles that link to the given title.

        Args:
            title: Page whose backlinks are requested
            cursor: Continuation token from the previous page (None for first)
            limit: Maximum number of titles to return

        Returns:
            BacklinkPage with titles and next cursor
        """
        ...

    @abstractmethod
    def fetch_redirects_to(self, title: str) -> set[str]:
        """Return the titles of redirect pages that resolve to the given title."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
