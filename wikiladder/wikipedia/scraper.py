"""
Wikipedia transport for the graph oracle.

Uses requests + BeautifulSoup to read outbound links straight off the
rendered article HTML, and the MediaWiki API for backlinks and redirects.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any

import requests
from bs4 import BeautifulSoup

from wikiladder.config import (
    USER_AGENT,
    WIKIPEDIA_API_URL,
    WIKIPEDIA_REQUEST_DELAY,
    WIKIPEDIA_TIMEOUT,
)
from wikiladder.exceptions import FetchError, InvalidTitleError
from wikiladder.graph.source import BacklinkPage, GraphSource
from wikiladder.wikipedia.titles import normalize_title, title_to_url

logger = logging.getLogger(__name__)


class WikiScraper(GraphSource):
    """
    Fetches link data from live Wikipedia.

    Outbound links are scraped from the rendered HTML rather than queried
    from the API: for a redirect title the API only reports the redirect
    target, while the rendered page is the target article with all its links.

    Only links into the main article namespace are kept, so these are skipped:
    - Wikipedia:, Help:, Template:, Category: and other namespaced pages
    - External and interwiki links
    - Edit links and red links
    """

    # Pattern for wiki article hrefs (fragment and query dropped)
    ARTICLE_PATTERN = re.compile(r"^/wiki/([^#?]+)")

    # Namespaces outside the main article space
    # Note: Use spaces not underscores - titles get underscores converted to spaces
    EXCLUDED_NAMESPACES = {
        "Wikipedia",
        "Wikipedia talk",
        "Help",
        "Help talk",
        "Template",
        "Template talk",
        "Category",
        "Category talk",
        "Portal",
        "Portal talk",
        "File",
        "File talk",
        "Image",
        "Media",
        "Special",
        "Talk",
        "User",
        "User talk",
        "Module",
        "Module talk",
        "MediaWiki",
        "Draft",
        "Draft talk",
        "TimedText",
        "MOS",  # Manual of Style shortcuts
        "WP",   # Wikipedia shortcuts
    }

    def __init__(self, rate_limit: float = WIKIPEDIA_REQUEST_DELAY) -> None:
        """
        Initialize the scraper.

        Args:
            rate_limit: Minimum seconds between requests
        """
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})
        self._rate_limit = rate_limit
        self._last_request_time: float = 0
        self._rate_lock = threading.Lock()

    def _wait_for_rate_limit(self) -> None:
        """Ensure we don't exceed rate limits."""
        with self._rate_lock:
            elapsed = time.time() - self._last_request_time
            if elapsed < self._rate_limit:
                time.sleep(self._rate_limit - elapsed)
            self._last_request_time = time.time()

    def _get(self, title: str, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        """GET a URL, converting transport failures into FetchError."""
        self._wait_for_rate_limit()
        try:
            response = self._session.get(url, params=params, timeout=WIKIPEDIA_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(title, str(e)) from e
        return response

    def _api_get(self, title: str, params: dict[str, Any]) -> dict[str, Any]:
        """Call the MediaWiki API and return the decoded JSON payload."""
        params = dict(params)
        params.setdefault("action", "query")
        params.setdefault("format", "json")
        params.setdefault("formatversion", 2)

        response = self._get(title, WIKIPEDIA_API_URL, params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(title, f"Malformed API response: {e}") from e

        if "error" in data:
            raise FetchError(title, f"Wikipedia API error: {data['error'].get('info', data['error'])}")
        return data

    def _title_from_href(self, href: str) -> str | None:
        """Return the normalized article title an href points at, if any."""
        match = self.ARTICLE_PATTERN.match(href)
        if not match:
            return None

        try:
            title = normalize_title(match.group(1))
        except InvalidTitleError:
            return None

        # Check for excluded namespaces
        if ":" in title and title.split(":", 1)[0].strip() in self.EXCLUDED_NAMESPACES:
            return None

        return title

    def fetch_rendered_page(self, title: str) -> str:
        """
        Fetch the rendered HTML of an article.

        Raises:
            FetchError: If the request fails or the page does not exist
        """
        url = title_to_url(title)
        logger.debug(f"Fetching: {url}")
        return self._get(title, url).text

    def extract_links(self, html: str) -> list[str]:
        """Parse HTML and extract unique main-namespace article links."""
        soup = BeautifulSoup(html, "lxml")

        links: list[str] = []
        seen: set[str] = set()

        for link in soup.find_all("a", href=True):
            link_title = self._title_from_href(link.get("href", ""))
            if link_title and link_title not in seen:
                links.append(link_title)
                seen.add(link_title)

        return links

    def fetch_backlinks(self, title: str, cursor: str | None, limit: int) -> BacklinkPage:
        """
        Fetch one page of non-redirect articles linking to a title.

        Raises:
            FetchError: If the request fails or the payload is malformed
        """
        params: dict[str, Any] = {
            "list": "backlinks",
            "bltitle": title,
            "blnamespace": 0,
            "blfilterredir": "nonredirects",
            "bllimit": limit,
        }
        if cursor:
            params["blcontinue"] = cursor
            params["continue"] = "-||"

        data = self._api_get(title, params)
        try:
            titles = [entry["title"] for entry in data.get("query", {}).get("backlinks", [])]
        except (KeyError, TypeError) as e:
            raise FetchError(title, f"Unexpected backlinks payload: {e}") from e

        next_cursor = data.get("continue", {}).get("blcontinue")
        logger.debug(f"Fetched {len(titles)} backlinks for '{title}' (more: {next_cursor is not None})")
        return BacklinkPage(titles=titles, cursor=next_cursor)

    def fetch_redirects_to(self, title: str) -> set[str]:
        """
        Fetch every redirect page that resolves to a title.

        Redirects are few per article, so continuation is followed to the end.

        Raises:
            FetchError: If any request fails or the payload is malformed
        """
        params: dict[str, Any] = {
            "list": "backlinks",
            "bltitle": title,
            "blnamespace": 0,
            "blfilterredir": "redirects",
            "bllimit": "max",
        }
        redirects: set[str] = set()

        while True:
            data = self._api_get(title, params)
            try:
                redirects.update(entry["title"] for entry in data.get("query", {}).get("backlinks", []))
            except (KeyError, TypeError) as e:
                raise FetchError(title, f"Unexpected redirects payload: {e}") from e

            cont = data.get("continue")
            if not cont or "blcontinue" not in cont:
                break
            params["blcontinue"] = cont["blcontinue"]
            params["continue"] = cont.get("continue", "-||")

        logger.debug(f"Found {len(redirects)} redirects to '{title}'")
        return redirects
