"""Dictionary backed repository reader."""

from typing import Dict, Iterable, List, Optional, Sequence

from ..models import Branch, Commit
from .base import RepositoryReader


class InMemoryRepository(RepositoryReader):
    """Reader over commits, branches and tags that are already in memory.

    Args:
        commits: Commits of the repository, in any order.
        branches: Branches in listing order.
        tags: Mapping of commit id to tag names.
        head: Name of the checked-out branch.
    """

    def __init__(
        self,
        commits: Iterable[Commit],
        branches: Sequence[Branch],
        tags: Optional[Dict[str, List[str]]] = None,
        head: Optional[str] = None,
    ):
        self._commits = {commit.id: commit for commit in commits}
        self._branches = list(branches)
        self._tags = {sha: list(names) for sha, names in (tags or {}).items()}
        self._head = head

    def list_branches(self) -> Sequence[Branch]:
        return list(self._branches)

    def list_tags(self) -> Dict[str, List[str]]:
        return {sha: list(names) for sha, names in self._tags.items()}

    def get_commit(self, commit_id: str) -> Optional[Commit]:
        return self._commits.get(commit_id)

    def head_branch(self) -> Optional[str]:
        return self._head
