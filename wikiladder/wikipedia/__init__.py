"""
Wikipedia interaction module.

Provides title encoding and normalization, and the live scraper used as
the default link provider.
"""

from wikiladder.wikipedia.scraper import WikiScraper
from wikiladder.wikipedia.titles import (
    decode_title,
    encode_title,
    normalize_title,
    title_to_url,
    url_to_title,
)

__all__ = [
    "WikiScraper",
    "decode_title",
    "encode_title",
    "normalize_title",
    "title_to_url",
    "url_to_title",
]
