"""Helpers for scratch git repositories."""

import git


def git_commit(repo: git.Repo, message: str) -> str:
    """Create an empty commit on the checked-out branch and return its sha."""
    repo.git.commit("--allow-empty", "-m", message)
    return repo.head.commit.hexsha
