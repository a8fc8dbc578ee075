"""GitPython backed repository reader."""

import logging
from typing import Dict, List, Optional, Sequence

from git import Repo

from ..models import Branch, Commit
from ..utils import git_utils
from .base import RepositoryReader

log = logging.getLogger(__name__)


class GitRepositoryReader(RepositoryReader):
    """Reads branches, tags and commits from a git repository.

    Commits are loaded lazily in a single batch `git log` call on first
    access and kept for the lifetime of the reader, so the reader is a
    consistent snapshot as long as the repository is not modified while a
    calculation runs.

    Args:
        repo: GitPython Repo object.
        include_remotes: Also list remote-tracking branches (without their
            remote prefix) that have no local branch of the same name.
    """

    def __init__(self, repo: Repo, include_remotes: bool = False):
        self._repo = repo
        self._include_remotes = include_remotes
        self._commits: Optional[Dict[str, Commit]] = None
        self._branches: Optional[List[Branch]] = None
        self._tags: Optional[Dict[str, List[str]]] = None

    @property
    def repo(self) -> Repo:
        return self._repo

    def list_branches(self) -> Sequence[Branch]:
        if self._branches is None:
            self._branches = self._read_branches()
        return list(self._branches)

    def list_tags(self) -> Dict[str, List[str]]:
        if self._tags is None:
            self._tags = git_utils.list_tag_targets(self._repo)
        return {sha: list(names) for sha, names in self._tags.items()}

    def get_commit(self, commit_id: str) -> Optional[Commit]:
        if self._commits is None:
            self._commits = git_utils.load_commits(
                self._repo, include_remotes=self._include_remotes
            )

        commit = self._commits.get(commit_id)
        if commit is None:
            # Not reachable from any ref, e.g. a SHA given explicitly
            commit = git_utils.get_commit(self._repo, commit_id)
            if commit is not None:
                self._commits[commit.id] = commit
        return commit

    def head_branch(self) -> Optional[str]:
        return git_utils.get_current_branch(self._repo)

    def _read_branches(self) -> List[Branch]:
        branches = [
            Branch(name=head.name, tip=head.commit.hexsha) for head in self._repo.heads
        ]
        if not self._include_remotes:
            return branches

        names = {branch.name for branch in branches}
        for remote in self._repo.remotes:
            for ref in remote.refs:
                if ref.remote_head == "HEAD" or ref.remote_head in names:
                    continue
                log.debug(f"Using remote branch {ref.name} as {ref.remote_head}")
                branches.append(Branch(name=ref.remote_head, tip=ref.commit.hexsha))
                names.add(ref.remote_head)
        return branches
