"""
Module: rewards_engines.completion
Responsibility:
    Measure how completely one submission satisfies one goal, as a Decimal
    ratio in [0, 1].  One evaluator per goal type, selected through
    ``EVALUATORS``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Imports only rewards_kernel.domain.

Invariants enforced:
    - Every evaluator returns a Decimal in [0, 1].
    - A missing or unparsable answer counts as 0, never as an error.
    - A non-positive numeric target with an answer present counts as 1.
    - No binary floating point: numeric answers are converted with
      ``Decimal(repr(x))``.

Rules:
    NUMERIC            min(1, max(0, reported / target))
    PERCENTAGE         min(1, max(0, reported / 100)); the target is ignored
    TASK_COMPLETION    1 if the answer is true, else 0
    BOOLEAN_CHECKLIST  items answered true / number of items
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from rewards_kernel.domain.goals import GoalType, SectorGoal
from rewards_kernel.domain.submissions import Submission, checklist_item_key

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

Evaluator = Callable[[SectorGoal, Submission], Decimal]


def parse_answer_number(value: Any) -> Decimal | None:
    """Numeric value of an answer, or None.  Booleans are not numbers."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, Decimal):
            number = value
        elif isinstance(value, int):
            number = Decimal(value)
        elif isinstance(value, float):
            number = Decimal(repr(value))
        elif isinstance(value, str):
            text = value.strip()
            if "," in text and "." not in text:
                text = text.replace(",", ".")
            number = Decimal(text)
        else:
            return None
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def _clamp(ratio: Decimal) -> Decimal:
    if ratio < ZERO:
        return ZERO
    if ratio > ONE:
        return ONE
    return ratio


def evaluate_numeric(goal: SectorGoal, submission: Submission) -> Decimal:
    reported = parse_answer_number(submission.answer_for(goal.id))
    if reported is None:
        return ZERO
    if goal.target_value <= 0:
        return ONE
    return _clamp(reported / goal.target_value)


def evaluate_percentage(goal: SectorGoal, submission: Submission) -> Decimal:
    reported = parse_answer_number(submission.answer_for(goal.id))
    if reported is None:
        return ZERO
    return _clamp(reported / HUNDRED)


def evaluate_task_completion(goal: SectorGoal, submission: Submission) -> Decimal:
    return ONE if submission.answer_for(goal.id) is True else ZERO


def evaluate_checklist(goal: SectorGoal, submission: Submission) -> Decimal:
    """
    Fraction of items answered true.

    Answers live under ``"<goal_id>:<index>"``.  When no item key is
    present but the goal itself has a boolean answer, that answer stands
    for the whole checklist.
    """
    items = goal.checklist_items
    item_answers = [
        submission.answer_for(checklist_item_key(goal.id, index))
        for index in range(len(items))
    ]
    if not items or all(answer is None for answer in item_answers):
        return evaluate_task_completion(goal, submission)

    checked = sum(1 for answer in item_answers if answer is True)
    return Decimal(checked) / Decimal(len(items))


EVALUATORS: dict[GoalType, Evaluator] = {
    GoalType.NUMERIC: evaluate_numeric,
    GoalType.PERCENTAGE: evaluate_percentage,
    GoalType.TASK_COMPLETION: evaluate_task_completion,
    GoalType.BOOLEAN_CHECKLIST: evaluate_checklist,
}


def completion_ratio(goal: SectorGoal, submission: Submission) -> Decimal:
    """Completion of ``goal`` in ``submission``, in [0, 1]."""
    return EVALUATORS[goal.type](goal, submission)


def answers_goal(goal: SectorGoal, submission: Submission) -> bool:
    """Whether the submission carries any answer for the goal."""
    goal_key = str(goal.id)
    prefix = goal_key + ":"
    return any(
        key == goal_key or key.startswith(prefix)
        for key in submission.checklist_answers
    )
