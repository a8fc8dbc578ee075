"""Walking a branch's mainline and classifying its commits."""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Iterator, List, Optional, Sequence, Set, Tuple, Union

from ..budget import CalculationBudget
from ..config import BranchConfigResolver
from ..errors import CalculationWarning, WalkerStateError, WarningKind
from ..graph import AncestryIndex, BranchDivergenceResolver, CommitGraph, Divergence
from ..models import Branch, Commit, EffectiveBranchConfiguration, IncrementStrategy
from ..utils.git_utils import short_sha

log = logging.getLogger(__name__)


class WalkState(str, Enum):
    UNVISITED = "unvisited"
    WALKING = "walking"
    DONE = "done"


@dataclass(frozen=True)
class CommitEvent:
    """A plain commit on the mainline.

    Attributes:
        commit: The commit.
        owner: Name of the branch whose history segment the commit is in.
        config: Configuration of the owner.
    """

    commit: Commit
    owner: str
    config: EffectiveBranchConfiguration


@dataclass(frozen=True)
class MergeEvent:
    """A merge commit on the mainline.

    Attributes:
        commit: The merge commit.
        merged_parent: The non-mainline parent the merge is attributed by.
        owner: Name of the branch whose history segment the merge is in.
        config: Configuration of the owner.
        merged_commits: Commits the merge brought into the mainline, oldest
            first.
        branch: The configured branch the merge represents, if any.
        increment: Increment of that branch, None when unattributed.
    """

    commit: Commit
    merged_parent: str
    owner: str
    config: EffectiveBranchConfiguration
    merged_commits: Tuple[str, ...] = ()
    branch: Optional[Branch] = None
    increment: IncrementStrategy = IncrementStrategy.NONE


MainlineEvent = Union[CommitEvent, MergeEvent]


class MainlineWalker:
    """Produces the events of a branch's first-parent history, oldest first.

    Each commit is owned by the branch whose history segment it lies in:
    commits after the target's divergence point belong to the target,
    commits up to it belong to the source, and so on down the lineage
    returned by BranchDivergenceResolver.lineage().

    The walk is a lazy, single pass: events() may be iterated once.

    Args:
        graph: Commit graph of the run.
        ancestry: Ancestry index of the run.
        resolver: Divergence resolver of the run.
        configs: Branch configuration resolver.
        branches: Configured branches in listing order.
        target: Branch being versioned.
        start_after: Version source commit; the walk starts after it. None
            walks from the root.
        warnings: Run-scoped warning list.
        budget: Run budget, polled for every commit walked or collected.
    """

    def __init__(
        self,
        graph: CommitGraph,
        ancestry: AncestryIndex,
        resolver: BranchDivergenceResolver,
        configs: BranchConfigResolver,
        branches: Sequence[Branch],
        target: Branch,
        start_after: Optional[str] = None,
        warnings: Optional[List[CalculationWarning]] = None,
        budget: Optional[CalculationBudget] = None,
    ):
        self._graph = graph
        self._ancestry = ancestry
        self._resolver = resolver
        self._configs = configs
        self._branches = list(branches)
        self._target = target
        self._start_after = start_after
        self._warnings = warnings if warnings is not None else []
        self._budget = budget or CalculationBudget.unlimited()
        self.state = WalkState.UNVISITED

    def events(self) -> Iterator[MainlineEvent]:
        if self.state != WalkState.UNVISITED:
            raise WalkerStateError(
                f"walk of '{self._target.name}' is already {self.state.value}"
            )
        self.state = WalkState.WALKING
        return self._walk()

    def _walk(self) -> Iterator[MainlineEvent]:
        try:
            lineage = self._resolver.lineage(self._target)
            chain = self._graph.first_parent_chain(self._target.tip)
            owners = self._owners(chain, lineage)

            end = len(chain)
            accounted: Set[str] = set()
            if self._start_after is not None:
                end = chain.index(self._start_after)
                accounted.update(self._ancestry.reachable(self._start_after))

            log.debug(
                f"Walking {end} mainline commits of '{self._target.name}' "
                f"through {' <- '.join(d.branch.name for d in lineage)}"
            )

            for position in range(end - 1, -1, -1):
                self._budget.poll()
                commit = self._graph.commit(chain[position])
                owner = lineage[owners[position]].branch
                config = self._configs.resolve_or_default(owner.name)

                if not commit.is_merge:
                    accounted.add(commit.id)
                    yield CommitEvent(commit=commit, owner=owner.name, config=config)
                    continue

                merged = self._collect_merged(commit, accounted)
                accounted.update(merged)
                accounted.add(commit.id)
                yield self._merge_event(commit, owner, config, merged)
        finally:
            self.state = WalkState.DONE

    @staticmethod
    def _owners(chain: List[str], lineage: List[Divergence]) -> List[int]:
        owners = []
        index = 0
        for sha in chain:
            while index < len(lineage) - 1 and lineage[index].point == sha:
                index += 1
            owners.append(index)
        return owners

    def _collect_merged(self, commit: Commit, accounted: Set[str]) -> Set[str]:
        """Commits reachable from the merged-in parents but not yet walked."""
        merged: Set[str] = set()
        stack = [p for p in commit.parents[1:] if p not in accounted]
        merged.update(stack)
        while stack:
            self._budget.poll()
            current = stack.pop()
            for parent in self._graph.parents(current):
                if parent in accounted or parent in merged:
                    continue
                merged.add(parent)
                stack.append(parent)
        return merged

    def _merge_event(
        self,
        commit: Commit,
        owner: Branch,
        config: EffectiveBranchConfiguration,
        merged: Set[str],
    ) -> MergeEvent:
        merged_commits = tuple(
            sorted(merged, key=lambda sha: (self._graph.commit(sha).timestamp, sha))
        )

        for parent in commit.parents[1:]:
            # A parent already on the mainline brings nothing in
            if parent not in merged:
                continue
            branch = self._attribute(commit.id, parent)
            if branch is not None:
                increment = self._configs.resolve(branch.name).increment
                log.debug(
                    f"Merge {short_sha(commit.id)} represents '{branch.name}' "
                    f"({increment.value})"
                )
                return MergeEvent(
                    commit=commit,
                    merged_parent=parent,
                    owner=owner.name,
                    config=config,
                    merged_commits=merged_commits,
                    branch=branch,
                    increment=increment,
                )

        message = (
            f"Merge {short_sha(commit.id)} ({commit.summary!r}) matches no "
            "configured branch, it does not increment the version"
        )
        log.warning(message)
        self._warnings.append(
            CalculationWarning(WarningKind.AMBIGUOUS_MERGE, message, commit.id)
        )
        return MergeEvent(
            commit=commit,
            merged_parent=commit.parents[1],
            owner=owner.name,
            config=config,
            merged_commits=merged_commits,
        )

    def _attribute(self, merge_id: str, parent: str) -> Optional[Branch]:
        """The nearest configured branch whose own history holds parent.

        A candidate reaches parent but not the merge itself. Candidates whose
        tip is parent win, then the one with the smallest history, then the
        first listed.
        """
        best: Optional[Branch] = None
        best_key = None
        for index, branch in enumerate(self._branches):
            if branch.name == self._target.name:
                continue
            if self._configs.resolve(branch.name) is None:
                continue
            if not self._ancestry.is_ancestor(parent, branch.tip):
                continue
            if self._ancestry.is_ancestor(merge_id, branch.tip):
                continue
            size = len(self._ancestry.reachable(branch.tip))
            key = (branch.tip != parent, size, index)
            if best_key is None or key < best_key:
                best, best_key = branch, key
        return best
