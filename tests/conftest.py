"""
Shared pytest fixtures and configuration for mainver tests.

Fixture Organization
--------------------
- **repo**: Empty in-memory repository builder
- **convergence_config**: main / develop / feature setup where features
  bump Patch, used by the canonical convergence scenario
- **gitflow_config**: Same setup with Minor features
- **converged_repo**: develop with two merged feature branches
- **git_repo**: Scratch git repository driven through GitPython
"""

import shutil
from pathlib import Path
from typing import Generator

import git
import pytest

from fixtures import RepositoryFixture, main_develop_feature
from mainver.config import MainverConfig
from mainver.models import IncrementStrategy


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def convergence_config() -> MainverConfig:
    return main_develop_feature(IncrementStrategy.PATCH)


@pytest.fixture
def gitflow_config() -> MainverConfig:
    return main_develop_feature(IncrementStrategy.MINOR)


# ============================================================================
# Repository Fixtures
# ============================================================================


@pytest.fixture
def repo() -> RepositoryFixture:
    return RepositoryFixture()


@pytest.fixture
def converged_repo(repo: RepositoryFixture) -> RepositoryFixture:
    """develop with feature-1 and feature-2 merged back in.

    Creates:
        main:      A
        develop:   A - B ------ M1 ------ M2
        feature-1:       \\- C -/
        feature-2:                \\- D -/
    """
    repo.make_a_commit("Initial commit")
    repo.branch_to("develop")
    repo.make_a_commit("Develop commit")
    repo.branch_to("feature-1")
    repo.make_a_commit("Feature 1 commit")
    repo.checkout("develop")
    repo.merge_no_ff("feature-1")
    repo.branch_to("feature-2")
    repo.make_a_commit("Feature 2 commit")
    repo.checkout("develop")
    repo.merge_no_ff("feature-2")
    return repo


@pytest.fixture
def git_repo(tmp_path: Path) -> Generator[git.Repo, None, None]:
    """Scratch git repository with a committer identity, on branch main."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    repo = git.Repo.init(tmp_path)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")
        writer.set_value("tag", "gpgsign", "false")
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    yield repo
    repo.close()
