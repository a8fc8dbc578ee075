"""mainver: semantic versions from the mainline of a git commit graph."""

from .config import BranchConfigResolver, MainverConfig, load_config
from .errors import (
    BranchNotFoundError,
    BudgetExceededError,
    CalculationError,
    CalculationWarning,
    GraphInconsistencyError,
    WalkerStateError,
)
from .graph import CommitGraph
from .mainline import VersionCalculator, calculate_version
from .models import (
    Branch,
    Commit,
    CommitIncrementMode,
    EffectiveBranchConfiguration,
    IncrementStrategy,
    Version,
    VersionResult,
)

__all__ = [
    "BranchConfigResolver",
    "MainverConfig",
    "load_config",
    "BranchNotFoundError",
    "BudgetExceededError",
    "CalculationError",
    "CalculationWarning",
    "GraphInconsistencyError",
    "WalkerStateError",
    "CommitGraph",
    "VersionCalculator",
    "calculate_version",
    "Branch",
    "Commit",
    "CommitIncrementMode",
    "EffectiveBranchConfiguration",
    "IncrementStrategy",
    "Version",
    "VersionResult",
]
