"""
wikiladder: Wikipedia link-path finder.

Finds a chain of clickable wikilinks between two articles by anchoring the
destination on a well-referenced page and then searching forward from the
start, fetching only the pages it needs from live Wikipedia.
"""

__version__ = "0.1.0"
