from .configs import main_develop_feature, make_config
from .gitrepo import git_commit
from .repository import RepositoryFixture

__all__ = [
    "RepositoryFixture",
    "git_commit",
    "main_develop_feature",
    "make_config",
]
