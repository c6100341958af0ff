"""Tests for GoalService: creation, edits, activation and authorization."""

from decimal import Decimal
from uuid import uuid4

import pytest

from rewards_kernel.domain.access import CallerContext, Role
from rewards_kernel.domain.goals import GoalScope, GoalType
from rewards_kernel.domain.periods import GoalPeriod
from rewards_kernel.exceptions import (
    GoalNotFoundError,
    GoalValidationError,
    SectorAccessDeniedError,
)
from rewards_kernel.services.goal_service import GoalService

SECTOR = "vendas"


def _create(goal_service, **overrides):
    fields = dict(
        sector_id=SECTOR,
        goal_type=GoalType.NUMERIC,
        title="Vendas do dia",
        period=GoalPeriod.DAILY,
        reward_amount_cents=5000,
        target_value=100,
    )
    fields.update(overrides)
    return goal_service.create_goal(**fields)


class TestCreateGoal:
    def test_creates_active_goal(self, goal_service, goal_catalog, deterministic_clock):
        goal = _create(goal_service, unit="vendas", category="Comercial")

        stored = goal_catalog.get_goal(goal.id)
        assert stored.is_active
        assert stored.type is GoalType.NUMERIC
        assert stored.target_value == Decimal("100")
        assert stored.reward_amount_cents == 5000
        assert stored.unit == "vendas"
        assert goal.created_at == deterministic_clock.now()

    def test_checklist_goal_target_is_one(self, goal_service):
        goal = _create(
            goal_service,
            goal_type=GoalType.BOOLEAN_CHECKLIST,
            checklist_items=[" Limpar ", "Organizar"],
            target_value=30,
        )
        assert goal.target_value == Decimal("1")
        assert goal.checklist_items == ("Limpar", "Organizar")

    def test_sector_goal_drops_assignee(self, goal_service):
        goal = _create(goal_service, assigned_collaborator_id="collab-1")
        assert goal.scope is GoalScope.SECTOR
        assert goal.assigned_collaborator_id is None

    def test_individual_goal(self, goal_service):
        goal = _create(
            goal_service, scope=GoalScope.INDIVIDUAL, assigned_collaborator_id="collab-1"
        )
        assert goal.applies_to("collab-1")
        assert not goal.applies_to("collab-2")

    def test_invalid_period(self, goal_service):
        with pytest.raises(GoalValidationError) as exc_info:
            _create(goal_service, period="fortnightly")
        assert exc_info.value.field == "period"

    def test_invalid_definition(self, goal_service):
        with pytest.raises(GoalValidationError):
            _create(goal_service, target_value=0)

    def test_configured_reward_ceiling(self, session, deterministic_clock):
        service = GoalService(session, clock=deterministic_clock, max_reward_cents=10_000)
        with pytest.raises(GoalValidationError) as exc_info:
            _create(service, reward_amount_cents=10_001)
        assert exc_info.value.field == "reward_amount_cents"

    def test_manager_of_sector(self, goal_service, manager):
        assert _create(goal_service, caller=manager).sector_id == SECTOR

    def test_manager_of_other_sector_denied(self, goal_service):
        outsider = CallerContext(Role.MANAGER, "estoque", "manager-9")
        with pytest.raises(SectorAccessDeniedError):
            _create(goal_service, caller=outsider)

    def test_collaborator_denied(self, goal_service, collaborator):
        with pytest.raises(SectorAccessDeniedError):
            _create(goal_service, caller=collaborator)

    def test_logs_creation(self, goal_service, captured_logs):
        goal = _create(goal_service)
        events = [r for r in captured_logs() if r["message"] == "goal_created"]
        assert events and events[0]["goal_id"] == str(goal.id)


class TestUpdateGoal:
    def test_updates_fields(self, goal_service, deterministic_clock):
        goal = _create(goal_service)
        deterministic_clock.advance(60)

        updated = goal_service.update_goal(
            goal.id, {"title": "Vendas", "target_value": 120, "period": GoalPeriod.WEEKLY}
        )

        assert updated.title == "Vendas"
        assert updated.target_value == Decimal("120")
        assert updated.period is GoalPeriod.WEEKLY

    def test_unknown_field(self, goal_service):
        goal = _create(goal_service)
        with pytest.raises(GoalValidationError):
            goal_service.update_goal(goal.id, {"sector_id": "estoque"})

    def test_merged_definition_validated(self, goal_service):
        goal = _create(goal_service)
        with pytest.raises(GoalValidationError):
            goal_service.update_goal(goal.id, {"scope": GoalScope.INDIVIDUAL})

    def test_switch_to_sector_scope_clears_assignee(self, goal_service):
        goal = _create(
            goal_service, scope=GoalScope.INDIVIDUAL, assigned_collaborator_id="collab-1"
        )
        updated = goal_service.update_goal(goal.id, {"scope": "sector"})
        assert updated.assigned_collaborator_id is None

    def test_unknown_goal(self, goal_service):
        with pytest.raises(GoalNotFoundError):
            goal_service.update_goal(uuid4(), {"title": "x"})


class TestActivation:
    def test_deactivated_goal_leaves_active_list(self, goal_service, goal_catalog):
        goal = _create(goal_service)
        goal_service.set_active(goal.id, False)

        assert goal_catalog.list_active_goals(SECTOR) == []
        assert [g.id for g in goal_catalog.list_goals(SECTOR)] == [goal.id]

    def test_reactivate(self, goal_service, goal_catalog, captured_logs):
        goal = _create(goal_service)
        goal_service.set_active(goal.id, False)
        goal_service.set_active(goal.id, True)

        assert [g.id for g in goal_catalog.list_active_goals(SECTOR)] == [goal.id]
        messages = [r["message"] for r in captured_logs()]
        assert "goal_deactivated" in messages and "goal_activated" in messages
