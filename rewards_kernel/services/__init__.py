"""Kernel services (write side and contestation ledger)."""

from rewards_kernel.services.contestation_service import ContestationLedger
from rewards_kernel.services.goal_service import GoalService
from rewards_kernel.services.submission_service import ProofUploader, SubmissionService

__all__ = [
    "ContestationLedger",
    "GoalService",
    "ProofUploader",
    "SubmissionService",
]
