from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CalculationErrorType(str, Enum):
    GRAPH_INCONSISTENCY = "Commit graph is inconsistent"
    BRANCH_NOT_FOUND = "Branch not found"
    BUDGET_EXCEEDED = "Calculation budget exceeded"
    WALKER_STATE = "Invalid walker state"


class CalculationError(Exception):
    def __init__(self, error_type: CalculationErrorType, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(f"{error_type.value}: {message}")


class GraphInconsistencyError(CalculationError):
    def __init__(self, commit_id: str, missing_parent: str):
        self.commit_id = commit_id
        self.missing_parent = missing_parent
        super().__init__(
            CalculationErrorType.GRAPH_INCONSISTENCY,
            f"commit {commit_id} references missing parent {missing_parent}",
        )


class BranchNotFoundError(CalculationError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(CalculationErrorType.BRANCH_NOT_FOUND, f"'{name}'")


class BudgetExceededError(CalculationError):
    def __init__(self, max_seconds: float):
        self.max_seconds = max_seconds
        super().__init__(
            CalculationErrorType.BUDGET_EXCEEDED,
            f"aborted after {max_seconds:g}s",
        )


class WalkerStateError(CalculationError):
    def __init__(self, message: str):
        super().__init__(CalculationErrorType.WALKER_STATE, message)


class WarningKind(str, Enum):
    NO_DIVERGENCE_SOURCE = "no divergence source"
    AMBIGUOUS_MERGE = "ambiguous merge attribution"
    UNCONFIGURED_BRANCH = "unconfigured branch"


@dataclass(frozen=True)
class CalculationWarning:
    """A recoverable condition met during a calculation.

    Attributes:
        kind: Category of the condition.
        message: Human readable description.
        commit: Commit the condition relates to, if any.
    """

    kind: WarningKind
    message: str
    commit: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "commit": self.commit,
        }
