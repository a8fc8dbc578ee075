"""Configuration file support for mainver.

This module handles loading and parsing the .mainver.yaml configuration file
and resolving branch names to their effective configuration.

Example:

    tag_prefix: "[vV]?"
    next_version: "1.0.0"
    commit_message_incrementing: enabled

    branches:
      main:
        regex: ^(master|main)$
        increment: Patch
        is_main_branch: true
        commit_increments: per_commit
      develop:
        regex: ^dev(elop)?(ment)?$
        increment: Minor
        source_branches: [main]
        label: alpha

Branch keys are matched in declaration order; the first regex that matches
a branch name wins. A `branches` section replaces the default branch set
entirely.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, List
import logging
import re
import yaml

from .models import (
    CommitIncrementMode,
    EffectiveBranchConfiguration,
    IncrementStrategy,
    Version,
)

log = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = ".mainver.yaml"
CONFIG_PATH_ENV = "MAINVER_CONFIG"
FALLBACK_BRANCH_KEY = "unknown"


@dataclass
class BranchConfig:
    """Configuration of one branch key.

    Attributes:
        key: Name of the section (e.g. "feature").
        regex: Pattern matched against branch names.
        increment: Increment applied when the branch is merged or committed to.
        is_main_branch: Whether branches of this key are main lines.
        source_branches: Keys of the branches these branches are created from,
            in priority order.
        commit_increments: "once" or "per_commit".
        label: Pre-release label; "{BranchName}" is substituted.
    """

    key: str
    regex: str
    increment: IncrementStrategy = IncrementStrategy.PATCH
    is_main_branch: bool = False
    source_branches: List[str] = field(default_factory=list)
    commit_increments: CommitIncrementMode = CommitIncrementMode.ONCE
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, key: str, data: dict) -> "BranchConfig":
        """Create a BranchConfig from a dictionary.

        Args:
            key: Section name.
            data: Dictionary with configuration values.

        Returns:
            BranchConfig instance.

        Raises:
            ValueError: If a value has the wrong type or an unknown name.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Branch '{key}' must be a mapping")

        regex = data.get("regex", f"^{re.escape(key)}$")
        sources = data.get("source_branches", [])
        if isinstance(sources, str):
            sources = [sources]
        if not isinstance(sources, list):
            raise ValueError(f"Branch '{key}': source_branches must be a list")

        return cls(
            key=key,
            regex=str(regex),
            increment=IncrementStrategy.parse(data.get("increment", "Patch")),
            is_main_branch=bool(data.get("is_main_branch", False)),
            source_branches=[str(s) for s in sources],
            commit_increments=CommitIncrementMode.parse(
                data.get("commit_increments", CommitIncrementMode.ONCE.value)
            ),
            label=data.get("label"),
        )

    def to_dict(self) -> dict:
        return {
            "regex": self.regex,
            "increment": self.increment.value,
            "is_main_branch": self.is_main_branch,
            "source_branches": list(self.source_branches),
            "commit_increments": self.commit_increments.value,
            "label": self.label,
        }

    def effective(self) -> EffectiveBranchConfiguration:
        return EffectiveBranchConfiguration(
            key=self.key,
            increment=self.increment,
            is_main_branch=self.is_main_branch,
            source_branches=tuple(self.source_branches),
            commit_increments=self.commit_increments,
            label=self.label,
            regex=self.regex,
        )


def default_branches() -> Dict[str, BranchConfig]:
    return {
        "main": BranchConfig(
            key="main",
            regex=r"^(master|main)$",
            increment=IncrementStrategy.PATCH,
            is_main_branch=True,
            commit_increments=CommitIncrementMode.PER_COMMIT,
        ),
        "develop": BranchConfig(
            key="develop",
            regex=r"^dev(elop)?(ment)?$",
            increment=IncrementStrategy.MINOR,
            source_branches=["main"],
            label="alpha",
        ),
        "release": BranchConfig(
            key="release",
            regex=r"^releases?[/-](?P<BranchName>.+)",
            increment=IncrementStrategy.MINOR,
            source_branches=["main", "develop"],
            label="beta",
        ),
        "feature": BranchConfig(
            key="feature",
            regex=r"^features?[/-](?P<BranchName>.+)",
            increment=IncrementStrategy.MINOR,
            source_branches=["develop", "main", "release"],
            label="{BranchName}",
        ),
        "hotfix": BranchConfig(
            key="hotfix",
            regex=r"^hotfix(es)?[/-](?P<BranchName>.+)",
            increment=IncrementStrategy.PATCH,
            source_branches=["main"],
            label="beta",
        ),
    }


@dataclass
class MessageIncrementConfig:
    """Commit message directives.

    Attributes:
        enabled: Whether commit messages can bump the version at all.
        major: Pattern of a major bump directive.
        minor: Pattern of a minor bump directive.
        patch: Pattern of a patch bump directive.
        none: Pattern of a directive suppressing the default increment.
    """

    enabled: bool = True
    major: str = r"\+semver:\s?(breaking|major)"
    minor: str = r"\+semver:\s?(feature|minor)"
    patch: str = r"\+semver:\s?(fix|patch)"
    none: str = r"\+semver:\s?(none|skip)"

    @classmethod
    def from_dict(cls, data: dict) -> "MessageIncrementConfig":
        mode = str(data.get("commit_message_incrementing", "enabled")).lower()
        if mode not in ("enabled", "disabled"):
            raise ValueError(
                f"Invalid commit_message_incrementing '{mode}', "
                "expected 'enabled' or 'disabled'"
            )
        return cls(
            enabled=mode == "enabled",
            major=data.get("major_version_bump_message", cls.major),
            minor=data.get("minor_version_bump_message", cls.minor),
            patch=data.get("patch_version_bump_message", cls.patch),
            none=data.get("no_bump_message", cls.none),
        )


@dataclass
class MainverConfig:
    """Configuration settings for mainver.

    All settings are optional and have sensible defaults.

    Attributes:
        tag_prefix: Regex a version tag must start with.
        next_version: Base version used when no tag is found.
        messages: Commit message directive settings.
        max_seconds: Optional wall-clock budget for one calculation.
        branches: Branch configurations in matching order.
    """

    tag_prefix: str = "[vV]?"
    next_version: Optional[str] = None
    messages: MessageIncrementConfig = field(default_factory=MessageIncrementConfig)
    max_seconds: Optional[float] = None
    branches: Dict[str, BranchConfig] = field(default_factory=default_branches)

    def base_version(self) -> Version:
        """Version used as the starting point when no tag is reachable."""
        if not self.next_version:
            return Version()
        version = Version.parse(str(self.next_version))
        if version is None:
            raise ValueError(f"Invalid next_version '{self.next_version}'")
        return version

    @classmethod
    def from_dict(cls, data: dict) -> "MainverConfig":
        """Create a MainverConfig from a dictionary.

        Args:
            data: Dictionary with configuration values.

        Returns:
            MainverConfig instance with values from data, using defaults for
            missing keys.

        Raises:
            ValueError: If a value is invalid.
        """
        branches_data = data.get("branches")
        if branches_data is None:
            branches = default_branches()
        elif isinstance(branches_data, dict):
            branches = {
                str(key): BranchConfig.from_dict(str(key), value or {})
                for key, value in branches_data.items()
            }
        else:
            raise ValueError("'branches' must be a mapping of branch keys")

        max_seconds = data.get("max_seconds")
        config = cls(
            tag_prefix=str(data.get("tag_prefix", cls.tag_prefix)),
            next_version=data.get("next_version"),
            messages=MessageIncrementConfig.from_dict(data),
            max_seconds=float(max_seconds) if max_seconds is not None else None,
            branches=branches,
        )
        # Fail early on a bad fallback version
        config.base_version()
        return config

    def to_dict(self) -> dict:
        return {
            "tag_prefix": self.tag_prefix,
            "next_version": self.next_version,
            "commit_message_incrementing": (
                "enabled" if self.messages.enabled else "disabled"
            ),
            "major_version_bump_message": self.messages.major,
            "minor_version_bump_message": self.messages.minor,
            "patch_version_bump_message": self.messages.patch,
            "no_bump_message": self.messages.none,
            "max_seconds": self.max_seconds,
            "branches": {key: b.to_dict() for key, b in self.branches.items()},
        }


def load_config(config_path: Optional[str] = None) -> MainverConfig:
    """Read a MainverConfig from YAML.

    Without config_path the default .mainver.yaml is tried, and the
    built-in defaults are used when it is absent. A file named explicitly
    must exist. An empty file also yields the defaults.

    Raises:
        FileNotFoundError: config_path was given but does not exist.
        yaml.YAMLError: The file is not valid YAML.
        ValueError: The top level is not a mapping, or a value is invalid.
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not path.is_file():
        if config_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        log.debug(f"No {path}, using default configuration")
        return MainverConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"{path} is not valid YAML: {e}") from e

    if data is None:
        return MainverConfig()
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a YAML mapping")
    return MainverConfig.from_dict(data)


def _python_pattern(pattern: str) -> str:
    # Accept .NET style named groups, (?<name>...), as written in GitVersion configs
    return re.sub(r"\(\?<(?=[A-Za-z_])", "(?P<", pattern)


class BranchConfigResolver:
    """Maps branch names to their effective configuration.

    Resolution is a pure function of the branch name: results are memoised
    and the underlying MainverConfig is never modified.
    """

    def __init__(self, config: MainverConfig):
        self.config = config
        self._patterns = [
            (branch, re.compile(_python_pattern(branch.regex)))
            for branch in config.branches.values()
        ]
        self._memo: Dict[str, Optional[EffectiveBranchConfiguration]] = {}

    def resolve(self, branch_name: str) -> Optional[EffectiveBranchConfiguration]:
        """Return the configuration of the first key matching branch_name."""
        if branch_name in self._memo:
            return self._memo[branch_name]

        result = None
        for branch, pattern in self._patterns:
            if pattern.search(branch_name):
                result = branch.effective()
                break
        self._memo[branch_name] = result
        return result

    def resolve_or_default(self, branch_name: str) -> EffectiveBranchConfiguration:
        """Like resolve(), but unmatched names get a fallback configuration."""
        resolved = self.resolve(branch_name)
        if resolved is not None:
            return resolved
        return EffectiveBranchConfiguration(
            key=FALLBACK_BRANCH_KEY,
            increment=IncrementStrategy.PATCH,
            source_branches=tuple(
                b.key for b in self.config.branches.values() if b.is_main_branch
            ),
        )

    def resolve_label(
        self, branch_name: str, config: EffectiveBranchConfiguration
    ) -> Optional[str]:
        """Expand the pre-release label of a branch.

        "{BranchName}" becomes the BranchName group of the branch regex, or
        the branch name itself, reduced to characters valid in a semver
        pre-release identifier.
        """
        if not config.label:
            return None

        label = config.label
        if "{BranchName}" in label:
            name = branch_name
            if config.regex:
                match = re.search(_python_pattern(config.regex), branch_name)
                if match and "BranchName" in match.groupdict():
                    name = match.group("BranchName") or branch_name
            label = label.replace("{BranchName}", name)

        label = re.sub(r"[^0-9A-Za-z-]+", "-", label).strip("-")
        return label or None
