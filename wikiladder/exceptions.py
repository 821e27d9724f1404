"""
Exception hierarchy for wikiladder.

Fetch failures are recovered inside the graph oracle; configuration and
title errors surface to the caller before a search begins.
"""

from __future__ import annotations


class WikiLadderError(Exception):
    """Base class for all wikiladder errors."""


class ConfigurationError(WikiLadderError, ValueError):
    """Search limits are invalid or can never reach the anchor threshold."""


class InvalidTitleError(WikiLadderError, ValueError):
    """A title is empty or contains characters Wikipedia forbids."""


class FetchError(WikiLadderError):
    """
    A single page or API request failed.

    Attributes:
        title: Title the request was made for
    """

    def __init__(self, title: str, message: str) -> None:
        super().__init__(f"{title}: {message}")
        self.title = title
