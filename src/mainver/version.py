"""Version handling for mainver itself.

The version is primarily obtained from package metadata (set at install
time). When running from a source checkout without installation, mainver
versions its own repository: the checked-out branch is run through the
same mainline calculation it offers to everyone else.
"""

import logging
from importlib.metadata import version, PackageNotFoundError
from pathlib import Path

log = logging.getLogger(__name__)


def get_version() -> str:
    """Get the mainver version.

    Returns:
        Version string, e.g. "0.3.1", or "unknown" if it cannot be
        determined.
    """
    try:
        return version("mainver")
    except PackageNotFoundError:
        return _get_version_from_checkout()


def _get_version_from_checkout() -> str:
    """Calculate the version of the source checkout this module lives in.

    Returns:
        The calculated full semver, or "unknown" outside of a git checkout
        or when the calculation fails.
    """
    import git

    from .errors import CalculationError
    from .mainline import calculate_version
    from .repository import GitRepositoryReader

    try:
        repo = git.Repo(Path(__file__).parent, search_parent_directories=True)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError):
        return "unknown"

    try:
        return calculate_version(GitRepositoryReader(repo)).full_semver
    except (CalculationError, git.GitCommandError, ValueError) as e:
        log.debug(f"Cannot calculate version of {repo.working_dir}: {e}")
        return "unknown"
