"""Immutable snapshot of the commit graph used for one calculation."""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..budget import CalculationBudget
from ..errors import GraphInconsistencyError
from ..models import Branch, Commit
from ..repository.base import RepositoryReader

log = logging.getLogger(__name__)


class CommitGraph:
    """Commits, parent edges, branches and tags of one repository snapshot.

    The graph is built once per calculation and never modified afterwards.
    Children adjacency is derived from the parent edges for forward
    traversal.
    """

    def __init__(
        self,
        commits: Mapping[str, Commit],
        branches: Sequence[Branch],
        tags: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._commits: Dict[str, Commit] = dict(commits)
        self._branches: Tuple[Branch, ...] = tuple(branches)
        self._branch_by_name = {branch.name: branch for branch in self._branches}
        self._tags = {sha: tuple(names) for sha, names in (tags or {}).items()}

        children: Dict[str, List[str]] = {}
        for commit in self._commits.values():
            for parent in commit.parents:
                if parent not in self._commits:
                    raise GraphInconsistencyError(commit.id, parent)
                children.setdefault(parent, []).append(commit.id)
        self._children = {sha: tuple(ids) for sha, ids in children.items()}

    @classmethod
    def load(
        cls, reader: RepositoryReader, budget: Optional[CalculationBudget] = None
    ) -> "CommitGraph":
        """Materialise every commit reachable from branches and tags.

        Args:
            reader: Source of branches, tags and commits.
            budget: Wall-clock budget for the load, unlimited when None.

        Returns:
            A new CommitGraph.

        Raises:
            GraphInconsistencyError: If a branch, tag or parent references a
                commit the reader cannot produce.
            BudgetExceededError: If the budget runs out while loading.
        """
        budget = budget or CalculationBudget.unlimited()
        branches = list(reader.list_branches())
        tags = reader.list_tags()

        commits: Dict[str, Commit] = {}
        pending: List[Tuple[Optional[str], str]] = [
            (None, branch.tip) for branch in branches
        ]
        pending.extend((None, sha) for sha in tags)

        while pending:
            budget.poll()
            child, sha = pending.pop()
            if sha in commits:
                continue
            commit = reader.get_commit(sha)
            if commit is None:
                raise GraphInconsistencyError(child or sha, sha)
            commits[sha] = commit
            pending.extend((sha, parent) for parent in commit.parents)

        log.debug(
            f"Loaded commit graph: {len(commits)} commits, "
            f"{len(branches)} branches, {len(tags)} tagged commits"
        )
        return cls(commits, branches, tags)

    def __len__(self) -> int:
        return len(self._commits)

    def __contains__(self, commit_id: str) -> bool:
        return commit_id in self._commits

    @property
    def branches(self) -> Tuple[Branch, ...]:
        return self._branches

    def commit(self, commit_id: str) -> Commit:
        return self._commits[commit_id]

    def commits(self) -> Iterable[Commit]:
        return self._commits.values()

    def parents(self, commit_id: str) -> Tuple[str, ...]:
        return self._commits[commit_id].parents

    def children(self, commit_id: str) -> Tuple[str, ...]:
        return self._children.get(commit_id, ())

    def branch(self, name: str) -> Optional[Branch]:
        return self._branch_by_name.get(name)

    def tags_for(self, commit_id: str) -> Tuple[str, ...]:
        return self._tags.get(commit_id, ())

    def first_parent_chain(self, commit_id: str) -> List[str]:
        """Return the first-parent chain from commit_id back to its root.

        The chain starts with commit_id itself. A visited set guarantees
        termination even on malformed input containing a cycle.
        """
        chain = []
        seen = set()
        current: Optional[str] = commit_id
        while current is not None and current not in seen:
            seen.add(current)
            chain.append(current)
            current = self._commits[current].first_parent
        return chain
