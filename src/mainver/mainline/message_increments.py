"""Increment directives in commit messages, e.g. "+semver: minor"."""

import re
from typing import Optional

from ..config import MessageIncrementConfig
from ..models import IncrementStrategy


class MessageIncrementParser:
    """Finds the increment a commit message asks for.

    When a message carries several directives the largest increment wins;
    "+semver: none" only counts when no other directive is present.
    """

    def __init__(self, config: Optional[MessageIncrementConfig] = None):
        config = config or MessageIncrementConfig()
        self.enabled = config.enabled
        self._patterns = [
            (IncrementStrategy.NONE, re.compile(config.none, re.IGNORECASE)),
            (IncrementStrategy.PATCH, re.compile(config.patch, re.IGNORECASE)),
            (IncrementStrategy.MINOR, re.compile(config.minor, re.IGNORECASE)),
            (IncrementStrategy.MAJOR, re.compile(config.major, re.IGNORECASE)),
        ]

    def parse(self, message: str) -> Optional[IncrementStrategy]:
        """Return the directive in message, or None if there is none."""
        if not self.enabled or not message:
            return None
        found = [s for s, pattern in self._patterns if pattern.search(message)]
        return max(found, key=lambda s: s.rank, default=None)
