"""
Conversion between Wikipedia titles and their URL path form.

Titles are compared only after normalize_title(), so every cache key and
set member in the search is in that canonical form.
"""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import unquote

from wikiladder.config import WIKIPEDIA_BASE_URL
from wikiladder.exceptions import InvalidTitleError

# Characters Wikipedia escapes in article paths
ENCODINGS = {
    " ": "_",
    "!": "%21",
    '"': "%22",
    "&": "%26",
    "'": "%27",
    "*": "%2A",
    "+": "%2B",
    ",": "%2C",
    "/": "%2F",
    ";": "%3B",
    "=": "%3D",
    "?": "%3F",
    "@": "%40",
    "\\": "%5C",
    "`": "%60",
    "–": "%E2%80%93",
}

DECODINGS = {encoded: char for char, encoded in ENCODINGS.items()}

# A % that does not already start a percent sequence
_BARE_PERCENT = re.compile(r"%(?![0-9a-fA-F]{2})")

_WHITESPACE = re.compile(r"\s+")

_ILLEGAL_CHARS = set("{}<>[]|")


def encode_title(title: str) -> str:
    """Percent-encode a title the way Wikipedia writes it in article URLs."""
    for char, encoded in ENCODINGS.items():
        title = title.replace(char, encoded)
    return _BARE_PERCENT.sub("%25", title)


def decode_title(title: str) -> str:
    """Reverse encode_title()."""
    for encoded, char in DECODINGS.items():
        title = title.replace(encoded, char)
    return title.replace("%25", "%")


def normalize_title(title: str) -> str:
    """
    Return the canonical form of a title.

    Drops any section fragment and leading colon, percent-decodes, turns
    underscores into spaces, collapses whitespace, upper-cases the first
    character and applies Unicode NFC.

    Raises:
        InvalidTitleError: If the title is empty or contains {}<>[]|
    """
    title = title.split("#", 1)[0]
    title = unquote(title).replace("_", " ")
    title = _WHITESPACE.sub(" ", title).strip()
    if title.startswith(":"):
        title = title[1:].strip()

    if not title:
        raise InvalidTitleError("Empty or whitespace-only title")
    if _ILLEGAL_CHARS & set(title):
        raise InvalidTitleError(f"{title!r} is an illegal title")

    title = title[0].upper() + title[1:]
    return unicodedata.normalize("NFC", title)


def title_to_url(title: str) -> str:
    """Convert article title to Wikipedia URL."""
    return WIKIPEDIA_BASE_URL + encode_title(title)


def url_to_title(url: str) -> str | None:
    """Extract normalized article title from a Wikipedia URL or /wiki/ path."""
    if "/wiki/" not in url:
        return None
    path = url.split("/wiki/")[-1].split("?")[0]
    try:
        return normalize_title(path)
    except InvalidTitleError:
        return None
