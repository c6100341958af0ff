"""ORM models for goals, submissions and contestations."""

from rewards_kernel.models.contestation import ContestationModel
from rewards_kernel.models.goal import SectorGoalModel
from rewards_kernel.models.submission import SubmissionModel

__all__ = [
    "ContestationModel",
    "SectorGoalModel",
    "SubmissionModel",
    "import_all_models",
]


def import_all_models() -> tuple[type, ...]:
    """Make sure every model is registered on ``Base.metadata``."""
    return (SectorGoalModel, SubmissionModel, ContestationModel)
