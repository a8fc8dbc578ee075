"""Value types shared by the version calculation engine.

Everything here is immutable and created fresh for each calculation run:

1. Repository snapshot: Commit, Branch
2. Policy: IncrementStrategy, CommitIncrementMode, EffectiveBranchConfiguration
3. Results: Version, VersionResult

Example usage:
    version = Version.parse("v1.2.3", tag_prefix="[vV]?")
    version = version.increment(IncrementStrategy.MINOR)
    str(version)  # "1.3.0"
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple, List, TYPE_CHECKING
import re

if TYPE_CHECKING:
    from .errors import CalculationWarning


class IncrementStrategy(str, Enum):
    """Which version component a branch, merge or commit bumps."""

    MAJOR = "Major"
    MINOR = "Minor"
    PATCH = "Patch"
    NONE = "None"

    @classmethod
    def parse(cls, value: str) -> "IncrementStrategy":
        """Parse an increment name case-insensitively.

        Raises:
            ValueError: If value is not one of Major, Minor, Patch, None.
        """
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(
            f"Invalid increment '{value}', expected one of "
            f"{', '.join(m.value for m in cls)}"
        )

    @property
    def rank(self) -> int:
        return _INCREMENT_RANK[self]


_INCREMENT_RANK = {
    IncrementStrategy.NONE: 0,
    IncrementStrategy.PATCH: 1,
    IncrementStrategy.MINOR: 2,
    IncrementStrategy.MAJOR: 3,
}


class CommitIncrementMode(str, Enum):
    """How a branch's own increment applies to its plain commits.

    ONCE: the increment is a fallback applied a single time per walk segment.
    PER_COMMIT: the increment is applied for every plain commit.
    """

    ONCE = "once"
    PER_COMMIT = "per_commit"

    @classmethod
    def parse(cls, value: str) -> "CommitIncrementMode":
        normalized = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(
            f"Invalid commit_increments '{value}', expected 'once' or 'per_commit'"
        )


@dataclass(frozen=True)
class Commit:
    """A node of the commit graph.

    Attributes:
        id: Unique commit identifier (full sha for git repositories).
        parents: Parent identifiers; the first one is the mainline parent.
        timestamp: Commit time in seconds since the epoch.
        message: Full commit message.
    """

    id: str
    parents: Tuple[str, ...] = ()
    timestamp: int = 0
    message: str = ""

    @property
    def is_merge(self) -> bool:
        return len(self.parents) >= 2

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def first_parent(self) -> Optional[str]:
        return self.parents[0] if self.parents else None

    @property
    def summary(self) -> str:
        return self.message.split("\n", 1)[0]


@dataclass(frozen=True)
class Branch:
    """A named pointer to a tip commit.

    Attributes:
        name: Branch name without any remote prefix (e.g. "feature/login").
        tip: Identifier of the commit the branch points at.
        is_main_branch: Whether the branch is a main-line branch.
        source_branches: Ordered source branch configuration keys.
    """

    name: str
    tip: str
    is_main_branch: bool = False
    source_branches: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EffectiveBranchConfiguration:
    """Resolved behaviour for one branch.

    Attributes:
        key: Configuration key the branch matched (e.g. "feature").
        increment: Increment the branch applies when merged or committed to.
        is_main_branch: Whether the branch is a main line.
        source_branches: Source configuration keys, in priority order.
        commit_increments: Once-per-walk or per-commit application of increment.
        label: Optional pre-release label, may contain "{BranchName}".
        regex: Branch name pattern the key was resolved with.
    """

    key: str
    increment: IncrementStrategy = IncrementStrategy.PATCH
    is_main_branch: bool = False
    source_branches: Tuple[str, ...] = ()
    commit_increments: CommitIncrementMode = CommitIncrementMode.ONCE
    label: Optional[str] = None
    regex: Optional[str] = None


_VERSION_RE = r"(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"


@dataclass(frozen=True, order=True)
class Version:
    """A major.minor.patch version with a commit counter.

    Only (major, minor, patch) take part in ordering. Every operation returns
    a new Version.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    commits_since_version_source: int = field(default=0, compare=False)

    def increment(self, strategy: IncrementStrategy) -> "Version":
        if strategy == IncrementStrategy.MAJOR:
            return replace(self, major=self.major + 1, minor=0, patch=0)
        if strategy == IncrementStrategy.MINOR:
            return replace(self, minor=self.minor + 1, patch=0)
        if strategy == IncrementStrategy.PATCH:
            return replace(self, patch=self.patch + 1)
        return self

    def with_commit(self) -> "Version":
        return replace(
            self, commits_since_version_source=self.commits_since_version_source + 1
        )

    @classmethod
    def parse(cls, text: str, tag_prefix: str = "[vV]?") -> Optional["Version"]:
        """Parse a version from a tag name.

        Args:
            text: Tag or version text, e.g. "v1.2.3" or "1.2".
            tag_prefix: Regular expression the tag must start with.

        Returns:
            Parsed Version, or None if the text is not a version.
        """
        match = re.fullmatch(f"(?:{tag_prefix}){_VERSION_RE}", text.strip())
        if not match:
            return None
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch") or 0),
        )

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass
class VersionResult:
    """Outcome of one version calculation.

    Attributes:
        version: Accumulated version.
        branch: Name of the branch the version was calculated for.
        sha: Tip commit of the branch.
        version_source_sha: Tagged commit the walk started after, if any.
        base_tag: Name of the tag that provided the base version, if any.
        label: Resolved pre-release label, if any.
        warnings: Recoverable conditions met during the calculation.
    """

    version: Version
    branch: str
    sha: str
    version_source_sha: Optional[str] = None
    base_tag: Optional[str] = None
    label: Optional[str] = None
    warnings: List["CalculationWarning"] = field(default_factory=list)

    @property
    def major_minor_patch(self) -> str:
        return str(self.version)

    @property
    def full_semver(self) -> str:
        if self.label:
            return (
                f"{self.version}-{self.label}."
                f"{self.version.commits_since_version_source}"
            )
        return str(self.version)

    def to_dict(self) -> dict:
        return {
            "major": self.version.major,
            "minor": self.version.minor,
            "patch": self.version.patch,
            "major_minor_patch": self.major_minor_patch,
            "full_semver": self.full_semver,
            "pre_release_label": self.label,
            "commits_since_version_source": self.version.commits_since_version_source,
            "branch_name": self.branch,
            "sha": self.sha,
            "version_source_sha": self.version_source_sha,
            "base_tag": self.base_tag,
            "warnings": [w.to_dict() for w in self.warnings],
        }
