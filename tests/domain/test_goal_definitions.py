"""Tests for goal value objects, snapshots and definition validation."""

from decimal import Decimal
from uuid import uuid4

import pytest

from rewards_kernel.domain.goals import (
    GoalScope,
    GoalSnapshot,
    GoalType,
    SectorGoal,
    validate_goal_definition,
)
from rewards_kernel.domain.labels import format_period_display, sector_label
from rewards_kernel.domain.periods import GoalPeriod
from rewards_kernel.domain.submissions import (
    Submission,
    checklist_item_key,
    parse_submission_date,
)
from rewards_kernel.exceptions import GoalValidationError, SubmissionValidationError


def _goal(**overrides) -> SectorGoal:
    fields = dict(
        id=uuid4(),
        sector_id="vendas",
        type=GoalType.NUMERIC,
        title="Vendas",
        target_value=Decimal("100"),
        period=GoalPeriod.DAILY,
        reward_amount_cents=5000,
    )
    fields.update(overrides)
    return SectorGoal(**fields)


class TestSectorGoal:
    def test_enum_values_coerced(self):
        goal = _goal(type="percentage", period="weekly", scope="sector")
        assert goal.type is GoalType.PERCENTAGE
        assert goal.period is GoalPeriod.WEEKLY
        assert goal.scope is GoalScope.SECTOR

    @pytest.mark.parametrize("goal_type", [GoalType.BOOLEAN_CHECKLIST, GoalType.TASK_COMPLETION])
    def test_unit_types_force_target_one(self, goal_type):
        goal = _goal(type=goal_type, target_value=Decimal("40"), checklist_items=("a",))
        assert goal.target_value == Decimal("1")

    def test_sector_goal_applies_to_everyone(self):
        assert _goal().applies_to("anyone")

    def test_individual_goal_applies_to_assignee_only(self):
        goal = _goal(scope=GoalScope.INDIVIDUAL, assigned_collaborator_id="collab-1")
        assert goal.applies_to("collab-1")
        assert not goal.applies_to("collab-2")

    def test_snapshot_round_trip_through_dict(self):
        goal = _goal(target_value=Decimal("12.5"))
        snapshot = goal.snapshot()
        assert GoalSnapshot.from_dict(snapshot.to_dict()) == snapshot
        assert snapshot.to_dict()["target_value"] == "12.5"

    def test_with_snapshot_restores_old_definition(self):
        old = _goal(target_value=Decimal("50"), reward_amount_cents=1000)
        edited = _goal(id=old.id, target_value=Decimal("200"), reward_amount_cents=9000)
        restored = edited.with_snapshot(old.snapshot())
        assert restored.target_value == Decimal("50")
        assert restored.reward_amount_cents == 1000
        assert restored.title == edited.title


class TestValidateGoalDefinition:
    def test_valid_numeric(self):
        validate_goal_definition(GoalType.NUMERIC, 10, 5000, title="Vendas")

    def test_valid_checklist(self):
        validate_goal_definition(
            GoalType.BOOLEAN_CHECKLIST, 1, 1000, ("Limpar", "Organizar"), title="Rotina"
        )

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            (dict(goal_type="bogus"), "type"),
            (dict(scope="team"), "scope"),
            (dict(title="  "), "title"),
            (dict(target_value=0), "target_value"),
            (dict(target_value="abc"), "target_value"),
            (dict(reward_amount_cents=-1), "reward_amount_cents"),
            (dict(reward_amount_cents=100_000_000), "reward_amount_cents"),
            (dict(reward_amount_cents=10.5), "reward_amount_cents"),
            (dict(scope=GoalScope.INDIVIDUAL), "assigned_collaborator_id"),
        ],
    )
    def test_rejections(self, kwargs, field):
        definition = dict(
            goal_type=GoalType.NUMERIC,
            target_value=10,
            reward_amount_cents=5000,
            title="Vendas",
        )
        definition.update(kwargs)
        with pytest.raises(GoalValidationError) as exc_info:
            validate_goal_definition(**definition)
        assert exc_info.value.field == field

    def test_checklist_needs_items(self):
        with pytest.raises(GoalValidationError):
            validate_goal_definition(GoalType.BOOLEAN_CHECKLIST, 1, 1000, (), title="Rotina")

    def test_checklist_rejects_blank_item(self):
        with pytest.raises(GoalValidationError):
            validate_goal_definition(
                GoalType.BOOLEAN_CHECKLIST, 1, 1000, ("Limpar", " "), title="Rotina"
            )


class TestSubmissionHelpers:
    def test_item_key(self):
        goal_id = uuid4()
        assert checklist_item_key(goal_id, 2) == f"{goal_id}:2"

    @pytest.mark.parametrize(
        "value", ["2025-07-15", "2025-07-15T23:59:00", "2025-07-15 08:00"]
    )
    def test_parse_submission_date_strings(self, value):
        from datetime import date

        assert parse_submission_date(value) == date(2025, 7, 15)

    def test_parse_submission_date_rejects_garbage(self):
        with pytest.raises(SubmissionValidationError):
            parse_submission_date("yesterday")

    def test_sort_key_treats_missing_created_at_as_oldest(self):
        from datetime import date, datetime, timezone

        day = date(2025, 7, 15)
        early = Submission(uuid4(), "c", "s", day)
        late = Submission(
            uuid4(), "c", "s", day,
            created_at=datetime(2025, 7, 15, 8, tzinfo=timezone.utc),
        )
        assert sorted([late, early], key=lambda s: s.sort_key) == [early, late]


class TestLabels:
    def test_sector_label(self):
        assert sector_label("TI") == "Tecnologia da Informação"
        assert sector_label("UNKNOWN") == "UNKNOWN"

    def test_period_display(self):
        assert format_period_display("monthly") == "Mensal"
        assert format_period_display("fortnightly") == "fortnightly"
