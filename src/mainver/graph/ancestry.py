import logging
from typing import Dict, FrozenSet, Optional

from ..budget import CalculationBudget
from .commit_graph import CommitGraph

log = logging.getLogger(__name__)


class AncestryIndex:
    """Memoised reachability sets over a CommitGraph.

    reachable(sha) is every commit reachable from sha by following parent
    edges, sha included. Each start commit is walked at most once per
    index; later queries return the stored frozenset itself.
    """

    def __init__(self, graph: CommitGraph, budget: Optional[CalculationBudget] = None):
        self._graph = graph
        self._budget = budget or CalculationBudget.unlimited()
        self._memo: Dict[str, FrozenSet[str]] = {}

    def __len__(self) -> int:
        return len(self._memo)

    def reachable(self, commit_id: str) -> FrozenSet[str]:
        cached = self._memo.get(commit_id)
        if cached is not None:
            return cached

        visited = {commit_id}
        stack = [commit_id]
        while stack:
            self._budget.poll()
            current = stack.pop()
            for parent in self._graph.parents(current):
                if parent not in visited:
                    visited.add(parent)
                    stack.append(parent)

        result = frozenset(visited)
        self._memo[commit_id] = result
        log.debug(f"Ancestry of {commit_id[:11]}: {len(result)} commits")
        return result

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return ancestor in self.reachable(descendant)
