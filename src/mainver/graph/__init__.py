"""Commit graph analysis: snapshot, reachability and branch divergence.

Example usage:
    graph = CommitGraph.load(reader)
    ancestry = AncestryIndex(graph)
    convergence = ConvergenceCache(graph, ancestry)

    only_feature = convergence.exclusive(feature, ExclusionContext.of([develop]))
"""

from .commit_graph import CommitGraph
from .ancestry import AncestryIndex
from .convergence import CacheStats, ConvergenceCache, ExclusionContext
from .divergence import BranchDivergenceResolver, Divergence

__all__ = [
    "CommitGraph",
    "AncestryIndex",
    "CacheStats",
    "ConvergenceCache",
    "ExclusionContext",
    "BranchDivergenceResolver",
    "Divergence",
]
