import git
import logging
from pathlib import Path
from typing import Optional

from .budget import CalculationBudget
from .config import DEFAULT_CONFIG_PATH, MainverConfig, load_config
from .graph import CommitGraph
from .mainline import VersionCalculator
from .repository import GitRepositoryReader

log = logging.getLogger(__name__)


class AppContext:
    """State shared by the CLI commands of one invocation.

    The repository and configuration are opened lazily so that commands
    and tests can adjust repo_path / config_path first.
    """

    def __init__(
        self,
        repo_path: str = ".",
        config_path: Optional[str] = None,
        include_remotes: bool = False,
    ):
        self.repo_path = repo_path
        self.config_path = config_path
        self.include_remotes = include_remotes
        self._repo: Optional[git.Repo] = None
        self._config: Optional[MainverConfig] = None

    @property
    def repo(self) -> git.Repo:
        if self._repo is None:
            self._repo = git.Repo(self.repo_path, search_parent_directories=True)
        return self._repo

    @property
    def config(self) -> MainverConfig:
        if self._config is None:
            self._config = load_config(self._config_file())
        return self._config

    def _config_file(self) -> Optional[str]:
        if self.config_path is not None:
            return self.config_path
        try:
            root = self.repo.working_tree_dir or self.repo_path
        except (git.InvalidGitRepositoryError, git.NoSuchPathError):
            # Not a repository: fall back to the working directory
            return None
        candidate = Path(root) / DEFAULT_CONFIG_PATH
        return str(candidate) if candidate.exists() else None

    def get_reader(self) -> GitRepositoryReader:
        return GitRepositoryReader(self.repo, include_remotes=self.include_remotes)

    def get_calculator(self) -> VersionCalculator:
        budget = CalculationBudget(self.config.max_seconds)
        graph = CommitGraph.load(self.get_reader(), budget)
        log.debug(f"Commit graph of {self.repo.working_tree_dir}: {len(graph)} commits")
        return VersionCalculator(graph, self.config)

    def current_branch(self) -> Optional[str]:
        return self.get_reader().head_branch()
