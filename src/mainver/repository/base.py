"""Base class for repository readers."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from ..models import Branch, Commit


class RepositoryReader(ABC):
    """Read-only access to one snapshot of a repository.

    A reader must return consistent data for the whole duration of a
    calculation: the same branches, tags and commits on every call.
    """

    @abstractmethod
    def list_branches(self) -> Sequence[Branch]:
        """Return branches in a stable listing order."""
        pass

    @abstractmethod
    def list_tags(self) -> Dict[str, List[str]]:
        """Return a mapping of commit id to the tag names pointing at it."""
        pass

    @abstractmethod
    def get_commit(self, commit_id: str) -> Optional[Commit]:
        """Return the commit with the given id, or None if it is unknown."""
        pass

    def head_branch(self) -> Optional[str]:
        """Return the name of the checked-out branch, if the reader has one."""
        return None
