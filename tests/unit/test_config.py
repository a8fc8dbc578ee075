"""Tests for configuration loading and branch resolution."""

from pathlib import Path

import pytest
import yaml

from mainver.config import (
    FALLBACK_BRANCH_KEY,
    BranchConfig,
    BranchConfigResolver,
    MainverConfig,
    MessageIncrementConfig,
    load_config,
)
from mainver.models import CommitIncrementMode, IncrementStrategy, Version


# ============================================================================
# Loading
# ============================================================================


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_default_file_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert list(config.branches) == ["main", "develop", "release", "feature", "hotfix"]

    def test_missing_explicit_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_empty_file_returns_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("# nothing configured\n")
        assert load_config(str(path)) == MainverConfig()

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("branches: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(str(path))

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- main\n- develop\n")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_config(str(path))

    def test_full_file(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text(
            """
tag_prefix: "release-"
next_version: "2.0"
commit_message_incrementing: disabled
max_seconds: 30
branches:
  trunk:
    regex: ^trunk$
    increment: patch
    is_main_branch: true
    commit_increments: per_commit
  topic:
    regex: ^topic/(?<BranchName>.+)$
    increment: Minor
    source_branches: trunk
    label: "{BranchName}"
"""
        )

        config = load_config(str(path))

        assert config.tag_prefix == "release-"
        assert config.base_version() == Version(2, 0, 0)
        assert config.messages.enabled is False
        assert config.max_seconds == 30.0
        assert list(config.branches) == ["trunk", "topic"]
        trunk = config.branches["trunk"]
        assert trunk.is_main_branch
        assert trunk.commit_increments == CommitIncrementMode.PER_COMMIT
        assert config.branches["topic"].source_branches == ["trunk"]

    def test_invalid_increment_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("branches:\n  main:\n    increment: Huge\n")
        with pytest.raises(ValueError, match="Huge"):
            load_config(str(path))

    def test_invalid_next_version_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("next_version: banana\n")
        with pytest.raises(ValueError, match="next_version"):
            load_config(str(path))

    def test_round_trips_through_to_dict(self):
        config = MainverConfig(next_version="1.0.0")
        assert MainverConfig.from_dict(config.to_dict()) == config


class TestBranchConfig:
    def test_regex_defaults_to_key(self):
        branch = BranchConfig.from_dict("support", {})
        assert branch.regex == "^support$"
        assert branch.increment == IncrementStrategy.PATCH
        assert branch.commit_increments == CommitIncrementMode.ONCE

    def test_rejects_non_mapping(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            BranchConfig.from_dict("main", "Patch")

    def test_effective_is_immutable_snapshot(self):
        branch = BranchConfig.from_dict("develop", {"source_branches": ["main"]})
        effective = branch.effective()
        branch.source_branches.append("release")
        assert effective.source_branches == ("main",)


class TestMessageIncrementConfig:
    def test_rejects_unknown_mode(self):
        with pytest.raises(ValueError, match="commit_message_incrementing"):
            MessageIncrementConfig.from_dict({"commit_message_incrementing": "sometimes"})

    def test_custom_patterns(self):
        config = MessageIncrementConfig.from_dict({"major_version_bump_message": "BREAKING"})
        assert config.major == "BREAKING"
        assert config.minor == MessageIncrementConfig().minor


# ============================================================================
# Resolution
# ============================================================================


class TestBranchConfigResolver:
    """Tests for mapping branch names to configuration keys."""

    @pytest.fixture
    def resolver(self) -> BranchConfigResolver:
        return BranchConfigResolver(MainverConfig())

    @pytest.mark.parametrize(
        "name,key",
        [
            ("main", "main"),
            ("master", "main"),
            ("develop", "develop"),
            ("dev", "develop"),
            ("release/1.2", "release"),
            ("feature/login", "feature"),
            ("features-search", "feature"),
            ("hotfix/crash", "hotfix"),
        ],
    )
    def test_default_keys(self, resolver, name, key):
        assert resolver.resolve(name).key == key

    def test_unmatched_name(self, resolver):
        assert resolver.resolve("experiment") is None

    def test_first_declared_key_wins(self):
        config = MainverConfig(
            branches={
                "specific": BranchConfig(key="specific", regex="^feature/big-"),
                "feature": BranchConfig(key="feature", regex="^feature/"),
            }
        )
        resolver = BranchConfigResolver(config)
        assert resolver.resolve("feature/big-rewrite").key == "specific"
        assert resolver.resolve("feature/small").key == "feature"

    def test_resolution_is_memoised(self, resolver):
        assert resolver.resolve("feature/login") is resolver.resolve("feature/login")

    def test_fallback_uses_main_lines_as_sources(self, resolver):
        fallback = resolver.resolve_or_default("experiment")
        assert fallback.key == FALLBACK_BRANCH_KEY
        assert fallback.increment == IncrementStrategy.PATCH
        assert fallback.source_branches == ("main",)

    def test_dotnet_named_groups(self):
        config = MainverConfig(
            branches={
                "topic": BranchConfig(
                    key="topic", regex=r"^topic/(?<BranchName>.+)$", label="{BranchName}"
                )
            }
        )
        resolver = BranchConfigResolver(config)
        topic = resolver.resolve("topic/search")
        assert resolver.resolve_label("topic/search", topic) == "search"


class TestResolveLabel:
    @pytest.fixture
    def resolver(self) -> BranchConfigResolver:
        return BranchConfigResolver(MainverConfig())

    def test_branch_name_placeholder(self, resolver):
        config = resolver.resolve("feature/login")
        assert resolver.resolve_label("feature/login", config) == "login"

    def test_label_is_sanitised(self, resolver):
        config = resolver.resolve("feature/JIRA_12/search box")
        assert resolver.resolve_label("feature/JIRA_12/search box", config) == "JIRA-12-search-box"

    def test_static_label(self, resolver):
        assert resolver.resolve_label("develop", resolver.resolve("develop")) == "alpha"

    def test_no_label(self, resolver):
        assert resolver.resolve_label("main", resolver.resolve("main")) is None
