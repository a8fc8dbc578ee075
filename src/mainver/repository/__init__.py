"""Repository readers producing in-memory snapshots for the engine.

Example usage:
    from mainver.repository import GitRepositoryReader

    reader = GitRepositoryReader(git.Repo("."))
    graph = CommitGraph.load(reader)
"""

from .base import RepositoryReader
from .git_reader import GitRepositoryReader
from .memory import InMemoryRepository

__all__ = [
    "RepositoryReader",
    "GitRepositoryReader",
    "InMemoryRepository",
]
