"""
Pure calculation engines.

Engines take domain objects and return frozen results.  They never open
sessions, read configuration or consult the clock.
"""

from rewards_engines.completion import (
    EVALUATORS,
    completion_ratio,
    parse_answer_number,
)
from rewards_engines.rewards import (
    GoalReward,
    RewardEngine,
    RewardStats,
    RewardStatus,
    RewardSummary,
)
from rewards_engines.tracer import traced_engine

__all__ = [
    "EVALUATORS",
    "GoalReward",
    "RewardEngine",
    "RewardStats",
    "RewardStatus",
    "RewardSummary",
    "completion_ratio",
    "parse_answer_number",
    "traced_engine",
]
