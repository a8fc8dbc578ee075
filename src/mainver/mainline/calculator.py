"""Top-level version calculation.

A calculation runs against one CommitGraph snapshot. All memo tables (the
ancestry index, the convergence cache and the divergence resolver) live in
a RunContext created for that calculation and are dropped with it, so
nothing computed for one snapshot can leak into another, even when a run is
aborted half way.
"""

from dataclasses import replace
import logging
from typing import List, Optional

from ..budget import CalculationBudget
from ..config import BranchConfigResolver, MainverConfig
from ..errors import BranchNotFoundError, CalculationWarning, WarningKind
from ..graph import (
    AncestryIndex,
    BranchDivergenceResolver,
    CommitGraph,
    ConvergenceCache,
    Divergence,
)
from ..models import Branch, VersionResult
from ..repository.base import RepositoryReader
from .accumulator import VersionAccumulator
from .message_increments import MessageIncrementParser
from .tags import find_base_version
from .walker import MainlineWalker

log = logging.getLogger(__name__)


class RunContext:
    """State of a single calculation run."""

    def __init__(
        self,
        graph: CommitGraph,
        configs: BranchConfigResolver,
        budget: Optional[CalculationBudget] = None,
    ):
        self.graph = graph
        self.configs = configs
        self.budget = budget or CalculationBudget.unlimited()
        self.warnings: List[CalculationWarning] = []
        self.ancestry = AncestryIndex(graph, self.budget)
        self.convergence = ConvergenceCache(graph, self.ancestry, self.budget)
        self.branches = [self._configure(branch) for branch in graph.branches]
        self.divergence = BranchDivergenceResolver(
            graph, self.convergence, self.branches, configs, self.warnings
        )

    def _configure(self, branch: Branch) -> Branch:
        config = self.configs.resolve_or_default(branch.name)
        return replace(
            branch,
            is_main_branch=config.is_main_branch,
            source_branches=config.source_branches,
        )

    def branch(self, name: str) -> Branch:
        for branch in self.branches:
            if branch.name == name:
                return branch
        raise BranchNotFoundError(name)


class VersionCalculator:
    """Calculates mainline versions for the branches of one graph snapshot.

    Args:
        graph: Commit graph snapshot.
        config: mainver configuration.
    """

    def __init__(self, graph: CommitGraph, config: Optional[MainverConfig] = None):
        self.graph = graph
        self.config = config or MainverConfig()
        self.configs = BranchConfigResolver(self.config)

    def new_run(self) -> RunContext:
        return RunContext(
            self.graph, self.configs, CalculationBudget(self.config.max_seconds)
        )

    def calculate(self, branch_name: str) -> VersionResult:
        """Calculate the version of a branch.

        Args:
            branch_name: Name of a branch of the graph.

        Returns:
            VersionResult with the version and any warnings.

        Raises:
            BranchNotFoundError: If the graph has no such branch.
            GraphInconsistencyError: If the graph references missing commits.
            BudgetExceededError: If the configured max_seconds is exceeded.
        """
        run = self.new_run()
        target = run.branch(branch_name)

        config = self.configs.resolve(target.name)
        if config is None:
            message = (
                f"Branch '{target.name}' matches no configured branch, "
                "using fallback configuration"
            )
            log.warning(message)
            run.warnings.append(
                CalculationWarning(WarningKind.UNCONFIGURED_BRANCH, message, target.tip)
            )
            config = self.configs.resolve_or_default(target.name)

        base = find_base_version(
            self.graph,
            target.tip,
            tag_prefix=self.config.tag_prefix,
            fallback=self.config.base_version(),
        )
        log.debug(
            f"Base version {base.version} "
            f"({base.tag or 'no tag'}) for '{target.name}'"
        )

        walker = MainlineWalker(
            self.graph,
            run.ancestry,
            run.divergence,
            self.configs,
            run.branches,
            target,
            start_after=base.source_sha,
            warnings=run.warnings,
            budget=run.budget,
        )
        accumulator = VersionAccumulator(
            base.version, MessageIncrementParser(self.config.messages)
        )
        version = accumulator.fold(walker.events())

        stats = run.convergence.stats
        log.debug(
            f"Convergence cache: {stats.misses} computed, {stats.hits} reused, "
            f"{len(run.ancestry)} ancestry sets"
        )

        label = None
        if not config.is_main_branch:
            label = self.configs.resolve_label(target.name, config)

        return VersionResult(
            version=version,
            branch=target.name,
            sha=target.tip,
            version_source_sha=base.source_sha,
            base_tag=base.tag,
            label=label,
            warnings=list(run.warnings),
        )

    def divergences(self) -> List[Divergence]:
        """Resolve the divergence of every branch within a single run."""
        run = self.new_run()
        return [run.divergence.resolve(branch) for branch in run.branches]


def calculate_version(
    reader: RepositoryReader,
    config: Optional[MainverConfig] = None,
    branch_name: Optional[str] = None,
) -> VersionResult:
    """Load a snapshot from reader and calculate the version of a branch.

    Args:
        reader: Repository reader.
        config: mainver configuration, defaults when None.
        branch_name: Branch to version, the reader's checked-out branch when
            None.

    Returns:
        VersionResult for the branch.
    """
    name = branch_name or reader.head_branch()
    if name is None:
        raise BranchNotFoundError("HEAD (detached, pass a branch name)")
    config = config or MainverConfig()
    graph = CommitGraph.load(reader, CalculationBudget(config.max_seconds))
    return VersionCalculator(graph, config).calculate(name)
