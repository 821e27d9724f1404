"""
Graph access module.

Provides the link provider contract and the caching oracle on top of it:
- GraphSource: Abstract provider of pages and backlinks
- GraphOracle: Memoized, budget-bounded neighbor sets and metrics
"""

from wikiladder.graph.oracle import GraphOracle
from wikiladder.graph.source import BacklinkPage, GraphSource

__all__ = [
    "BacklinkPage",
    "GraphOracle",
    "GraphSource",
]
