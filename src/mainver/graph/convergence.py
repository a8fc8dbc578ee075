"""Exclusive commit sets with a per-run convergence cache.

Many branches of a real repository converge on the same few commits. Asking
"which commits belong only to this branch" independently for every branch
and every exclusion context repeats the same walks over the shared history
again and again. This module answers each distinct question exactly once:

- the union of ancestries for an exclusion context is built once per
  context signature;
- the exclusive set for a (start tip, context signature) pair is built once
  and shared by reference with every later caller.

Work and memory are therefore bounded by the number of distinct pairs asked
for, not by the number of paths through the merge graph.
"""

from dataclasses import dataclass
import logging
from typing import Dict, FrozenSet, Iterable, Optional, Tuple, Union

from ..budget import CalculationBudget
from ..models import Branch
from .ancestry import AncestryIndex
from .commit_graph import CommitGraph

log = logging.getLogger(__name__)

# A branch or a bare commit id
Ref = Union[Branch, str]

EMPTY: FrozenSet[str] = frozenset()


def tip_of(ref: Ref) -> str:
    return ref.tip if isinstance(ref, Branch) else ref


@dataclass(frozen=True)
class ExclusionContext:
    """Unordered set of refs whose ancestry is already accounted for.

    Two contexts are interchangeable when they contain the same tips,
    whatever order or branch objects they were built from.
    """

    signature: FrozenSet[str] = EMPTY

    @classmethod
    def of(cls, refs: Iterable[Ref]) -> "ExclusionContext":
        return cls(frozenset(tip_of(ref) for ref in refs))

    def __len__(self) -> int:
        return len(self.signature)


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    exclusive_entries: int = 0
    context_entries: int = 0


class ConvergenceCache:
    """Memoised exclusive commit sets for one calculation run."""

    def __init__(
        self,
        graph: CommitGraph,
        ancestry: AncestryIndex,
        budget: Optional[CalculationBudget] = None,
    ):
        self._graph = graph
        self._ancestry = ancestry
        self._budget = budget or CalculationBudget.unlimited()
        self._excluded: Dict[FrozenSet[str], FrozenSet[str]] = {}
        self._exclusive: Dict[Tuple[str, FrozenSet[str]], FrozenSet[str]] = {}
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._exclusive)

    def exclusive(self, start: Ref, context: ExclusionContext) -> FrozenSet[str]:
        """Commits reachable from start that no ref in context reaches.

        Args:
            start: Branch or commit to start from.
            context: Refs whose ancestry is excluded.

        Returns:
            The exclusive commit set. Repeated calls with a cache-equal key
            return the very same frozenset object.
        """
        key = (tip_of(start), context.signature)
        cached = self._exclusive.get(key)
        if cached is not None:
            self.stats.hits += 1
            return cached

        self.stats.misses += 1
        result = self._compute(key[0], context.signature)
        self._exclusive[key] = result
        self.stats.exclusive_entries = len(self._exclusive)
        return result

    def excluded_ancestry(self, signature: FrozenSet[str]) -> FrozenSet[str]:
        """Union of the ancestries of every tip in signature, memoised."""
        cached = self._excluded.get(signature)
        if cached is not None:
            return cached

        if len(signature) == 1:
            (tip,) = signature
            result = self._ancestry.reachable(tip)
        else:
            result = frozenset().union(
                *(self._ancestry.reachable(tip) for tip in signature)
            )
        self._excluded[signature] = result
        self.stats.context_entries = len(self._excluded)
        return result

    def _compute(self, tip: str, signature: FrozenSet[str]) -> FrozenSet[str]:
        if not signature:
            return self._ancestry.reachable(tip)

        excluded = self.excluded_ancestry(signature)
        if tip in excluded:
            return EMPTY

        found = {tip}
        stack = [tip]
        while stack:
            self._budget.poll()
            current = stack.pop()
            for parent in self._graph.parents(current):
                # Everything behind an excluded commit is excluded as well
                if parent in excluded or parent in found:
                    continue
                found.add(parent)
                stack.append(parent)

        log.debug(
            f"Exclusive set of {tip[:11]} against {len(signature)} tip(s): "
            f"{len(found)} commits"
        )
        return frozenset(found)
