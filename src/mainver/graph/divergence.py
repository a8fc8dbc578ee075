"""Locating where a branch diverged from its source branch."""

from dataclasses import dataclass
import logging
from typing import Dict, FrozenSet, List, Optional, Sequence

from ..config import BranchConfigResolver
from ..errors import CalculationWarning, WarningKind
from ..models import Branch
from ..utils.git_utils import short_sha
from .commit_graph import CommitGraph
from .convergence import EMPTY, ConvergenceCache, ExclusionContext

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Divergence:
    """Where a branch left its source branch.

    Attributes:
        branch: The branch the divergence was resolved for.
        source: The selected source branch, None for main lines and when no
            configured source exists in the repository.
        point: Last commit the branch shares with its source on its
            first-parent path. None when the branch owns its whole history.
        exclusive: Commits of the branch not reachable from the source.
        degraded: True when no source branch could be found.
    """

    branch: Branch
    source: Optional[Branch] = None
    point: Optional[str] = None
    exclusive: FrozenSet[str] = EMPTY
    degraded: bool = False


class BranchDivergenceResolver:
    """Resolves source branches and divergence points for one run.

    Args:
        graph: Commit graph of the run.
        convergence: Convergence cache of the run.
        branches: Branches carrying their configured main-line flag and
            source keys, in listing order.
        configs: Maps branch names to configuration keys.
        warnings: Run-scoped list recoverable conditions are appended to.
    """

    def __init__(
        self,
        graph: CommitGraph,
        convergence: ConvergenceCache,
        branches: Sequence[Branch],
        configs: BranchConfigResolver,
        warnings: List[CalculationWarning],
    ):
        self._graph = graph
        self._convergence = convergence
        self._branches = list(branches)
        self._configs = configs
        self._warnings = warnings
        self._memo: Dict[str, Divergence] = {}

    def candidates(self, branch: Branch) -> List[Branch]:
        """Existing branches matching the source keys, in priority order.

        Keys come first in configured order; branches of the same key keep
        their listing order.
        """
        result = []
        seen = {branch.name}
        for key in branch.source_branches:
            for other in self._branches:
                if other.name in seen:
                    continue
                resolved = self._configs.resolve(other.name)
                if resolved is not None and resolved.key == key:
                    result.append(other)
                    seen.add(other.name)
        return result

    def resolve(self, branch: Branch) -> Divergence:
        cached = self._memo.get(branch.name)
        if cached is not None:
            return cached

        if branch.is_main_branch:
            divergence = Divergence(branch=branch)
        else:
            divergence = self._resolve(branch)

        self._memo[branch.name] = divergence
        return divergence

    def _resolve(self, branch: Branch) -> Divergence:
        candidates = self.candidates(branch)
        if not candidates:
            message = (
                f"No source branch of '{branch.name}' "
                f"({', '.join(branch.source_branches) or 'none configured'}) "
                "exists, treating it as its own main line"
            )
            log.warning(message)
            self._warnings.append(
                CalculationWarning(WarningKind.NO_DIVERGENCE_SOURCE, message, branch.tip)
            )
            return Divergence(branch=branch, degraded=True)

        source = candidates[0]
        exclusive = EMPTY
        for candidate in candidates:
            found = self._convergence.exclusive(
                branch, ExclusionContext.of([candidate])
            )
            if found:
                source, exclusive = candidate, found
                break

        point = self._divergence_point(branch, exclusive)
        log.debug(
            f"'{branch.name}' diverged from '{source.name}' at {short_sha(point)} "
            f"({len(exclusive)} exclusive commits)"
        )
        return Divergence(
            branch=branch, source=source, point=point, exclusive=exclusive
        )

    def _divergence_point(
        self, branch: Branch, exclusive: FrozenSet[str]
    ) -> Optional[str]:
        if not exclusive:
            return branch.tip

        oldest = branch.tip
        for sha in self._graph.first_parent_chain(branch.tip):
            if sha not in exclusive:
                break
            oldest = sha
        return self._graph.commit(oldest).first_parent

    def lineage(self, branch: Branch) -> List[Divergence]:
        """Follow divergences from branch back to a main line.

        Returns:
            The divergence of branch, then of its source, and so on. The
            chain ends at a main-line branch, a degraded divergence or a
            branch already seen (configuration cycles).
        """
        steps = []
        visited = set()
        current: Optional[Branch] = branch
        while current is not None and current.name not in visited:
            visited.add(current.name)
            divergence = self.resolve(current)
            steps.append(divergence)
            current = divergence.source
        return steps
