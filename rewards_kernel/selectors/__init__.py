"""Read-only query selectors."""

from rewards_kernel.selectors.goal_selector import GoalCatalog
from rewards_kernel.selectors.submission_selector import SubmissionLedger

__all__ = [
    "GoalCatalog",
    "SubmissionLedger",
]
