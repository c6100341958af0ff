"""Tests for GoalCatalog queries, visibility rules and schema errors."""

from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError, ProgrammingError

from rewards_kernel.db.engine import get_session, init_engine_from_url, reset_engine
from rewards_kernel.domain.access import CallerContext, Role
from rewards_kernel.domain.goals import GoalScope, GoalType
from rewards_kernel.domain.periods import GoalPeriod
from rewards_kernel.exceptions import (
    CatalogNotConfiguredError,
    GoalNotFoundError,
    SectorAccessDeniedError,
)
from rewards_kernel.selectors.base import is_schema_error
from rewards_kernel.selectors.goal_selector import GoalCatalog

SECTOR = "vendas"


@pytest.fixture
def goals(goal_service, deterministic_clock):
    """Sector goal, two individual goals, an inactive goal and another sector's goal."""

    def create(title, sector_id=SECTOR, **kwargs):
        deterministic_clock.advance(1)
        return goal_service.create_goal(
            sector_id=sector_id,
            goal_type=GoalType.TASK_COMPLETION,
            title=title,
            period=GoalPeriod.DAILY,
            reward_amount_cents=1000,
            **kwargs,
        )

    created = {
        "shared": create("Limpeza"),
        "mine": create(
            "Relatório", scope=GoalScope.INDIVIDUAL, assigned_collaborator_id="collab-1"
        ),
        "theirs": create(
            "Inventário", scope=GoalScope.INDIVIDUAL, assigned_collaborator_id="collab-2"
        ),
        "retired": create("Antiga"),
        "elsewhere": create("Estoque", sector_id="estoque"),
    }
    goal_service.set_active(created["retired"].id, False)
    return created


def _ids(goals):
    return [g.id for g in goals]


class TestListActiveGoals:
    def test_for_collaborator(self, goal_catalog, goals):
        result = goal_catalog.list_active_goals(SECTOR, "collab-1")
        assert _ids(result) == [goals["shared"].id, goals["mine"].id]

    def test_manager_view_lists_every_active_goal(self, goal_catalog, goals):
        result = goal_catalog.list_active_goals(SECTOR)
        assert _ids(result) == [goals["shared"].id, goals["mine"].id, goals["theirs"].id]

    def test_collaborator_caller_narrowed_to_self(self, goal_catalog, goals, collaborator):
        result = goal_catalog.list_active_goals(SECTOR, caller=collaborator)
        assert _ids(result) == [goals["shared"].id, goals["mine"].id]

    def test_collaborator_cannot_read_peer(self, goal_catalog, goals, collaborator):
        with pytest.raises(SectorAccessDeniedError):
            goal_catalog.list_active_goals(SECTOR, "collab-2", caller=collaborator)

    def test_other_sector_denied(self, goal_catalog, goals, manager):
        with pytest.raises(SectorAccessDeniedError):
            goal_catalog.list_active_goals("estoque", caller=manager)

    def test_admin_reads_other_sector(self, goal_catalog, goals, admin):
        result = goal_catalog.list_active_goals("estoque", caller=admin)
        assert _ids(result) == [goals["elsewhere"].id]


class TestOtherQueries:
    def test_list_goals_includes_inactive(self, goal_catalog, goals):
        assert goals["retired"].id in _ids(goal_catalog.list_goals(SECTOR))
        assert goals["retired"].id not in _ids(
            goal_catalog.list_goals(SECTOR, include_inactive=False)
        )

    def test_list_individual_goals(self, goal_catalog, goals):
        assert _ids(goal_catalog.list_individual_goals("collab-2")) == [goals["theirs"].id]

    def test_individual_goals_of_peer_denied(self, goal_catalog, goals, collaborator):
        with pytest.raises(SectorAccessDeniedError):
            goal_catalog.list_individual_goals("collab-2", caller=collaborator)

    def test_manager_reads_individual_goals_in_sector(self, goal_catalog, goals, manager):
        result = goal_catalog.list_individual_goals(
            "collab-2", caller=manager, collaborator_sector_id=SECTOR
        )
        assert _ids(result) == [goals["theirs"].id]

    def test_get_goal(self, goal_catalog, goals):
        assert goal_catalog.get_goal(goals["shared"].id).title == "Limpeza"

    def test_get_goal_missing(self, goal_catalog, goals):
        with pytest.raises(GoalNotFoundError):
            goal_catalog.get_goal(uuid4())

    def test_get_goals(self, goal_catalog, goals):
        missing = uuid4()
        found = goal_catalog.get_goals([goals["shared"].id, missing])
        assert set(found) == {str(goals["shared"].id)}
        assert goal_catalog.get_goals([]) == {}


class TestCatalogNotConfigured:
    @pytest.fixture
    def bare_session(self):
        init_engine_from_url("sqlite://")
        sess = get_session()
        yield sess
        sess.close()
        reset_engine()

    def test_missing_table(self, bare_session, captured_logs):
        with pytest.raises(CatalogNotConfiguredError) as exc_info:
            GoalCatalog(bare_session).list_active_goals(SECTOR)

        assert exc_info.value.code == "CATALOG_NOT_CONFIGURED"
        assert any(r["message"] == "catalog_not_configured" for r in captured_logs())

    def test_distinct_from_not_found(self, bare_session):
        with pytest.raises(CatalogNotConfiguredError):
            GoalCatalog(bare_session).get_goal(uuid4())


class _PgError(Exception):
    def __init__(self, message, pgcode):
        super().__init__(message)
        self.pgcode = pgcode


class TestStoreFailuresPropagate:
    def _failing_execute(self, monkeypatch, session, exc):
        def execute(*args, **kwargs):
            raise exc

        monkeypatch.setattr(session, "execute", execute)

    def test_lock_is_not_a_configuration_error(self, session, monkeypatch, captured_logs):
        lock = OperationalError("SELECT 1", {}, Exception("database is locked"))
        self._failing_execute(monkeypatch, session, lock)

        with pytest.raises(OperationalError) as exc_info:
            GoalCatalog(session).list_active_goals(SECTOR)

        assert exc_info.value is lock
        assert not isinstance(exc_info.value, CatalogNotConfiguredError)
        assert not any(r["message"] == "catalog_not_configured" for r in captured_logs())

    def test_dropped_connection_propagates(self, session, monkeypatch):
        dropped = OperationalError("SELECT 1", {}, Exception("server closed the connection"))
        self._failing_execute(monkeypatch, session, dropped)

        with pytest.raises(OperationalError):
            GoalCatalog(session).list_goals(SECTOR)

    def test_missing_column_is_a_configuration_error(self, session, monkeypatch):
        outdated = OperationalError("SELECT 1", {}, Exception("no such column: sector_goals.unit"))
        self._failing_execute(monkeypatch, session, outdated)

        with pytest.raises(CatalogNotConfiguredError):
            GoalCatalog(session).list_active_goals(SECTOR)

    @pytest.mark.parametrize(
        ("pgcode", "expected"),
        [("42P01", True), ("42703", True), ("40P01", False), ("57014", False)],
    )
    def test_postgres_sqlstates(self, pgcode, expected):
        exc = ProgrammingError("SELECT 1", {}, _PgError("driver message", pgcode))
        assert is_schema_error(exc) is expected
