"""Mainline version accumulation.

Example usage:
    from mainver.mainline import calculate_version

    result = calculate_version(reader, config, "develop")
    print(result.full_semver)
"""

from .accumulator import VersionAccumulator
from .calculator import RunContext, VersionCalculator, calculate_version
from .message_increments import MessageIncrementParser
from .tags import BaseVersion, find_base_version
from .walker import CommitEvent, MainlineWalker, MergeEvent, WalkState

__all__ = [
    "VersionAccumulator",
    "RunContext",
    "VersionCalculator",
    "calculate_version",
    "MessageIncrementParser",
    "BaseVersion",
    "find_base_version",
    "CommitEvent",
    "MainlineWalker",
    "MergeEvent",
    "WalkState",
]
