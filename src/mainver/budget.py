import time
from typing import Optional

from .errors import BudgetExceededError


class CalculationBudget:
    """Wall-clock budget a caller can impose on one calculation.

    Traversals call poll() as they go; once the deadline has passed the
    calculation is aborted with BudgetExceededError.
    """

    # Number of polls between clock reads
    CHECK_EVERY = 1024

    def __init__(self, max_seconds: Optional[float] = None):
        self.max_seconds = max_seconds
        self._deadline = (
            time.monotonic() + max_seconds if max_seconds is not None else None
        )
        self._polls = 0

    def poll(self):
        if self._deadline is None:
            return
        self._polls += 1
        if self._polls % self.CHECK_EVERY:
            return
        if time.monotonic() > self._deadline:
            raise BudgetExceededError(self.max_seconds)

    @classmethod
    def unlimited(cls) -> "CalculationBudget":
        return cls(None)
