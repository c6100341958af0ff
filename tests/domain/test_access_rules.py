"""Tests for role and sector access checks."""

import pytest

from rewards_kernel.domain.access import (
    CallerContext,
    Role,
    ensure_can_manage_sector,
    ensure_collaborator_access,
    ensure_sector_access,
)
from rewards_kernel.exceptions import SectorAccessDeniedError

ADMIN = CallerContext(Role.ADMIN, None, "admin-1")
MANAGER = CallerContext(Role.MANAGER, "vendas", "manager-1")
COLLABORATOR = CallerContext("collaborator", "vendas", "collab-1")


class TestSectorAccess:
    def test_admin_reads_any_sector(self):
        ensure_sector_access(ADMIN, "estoque")

    def test_member_reads_own_sector(self):
        ensure_sector_access(COLLABORATOR, "vendas")
        ensure_sector_access(MANAGER, "vendas")

    def test_other_sector_denied(self):
        with pytest.raises(SectorAccessDeniedError) as exc_info:
            ensure_sector_access(MANAGER, "estoque")
        assert exc_info.value.code == "SECTOR_ACCESS_DENIED"


class TestCollaboratorAccess:
    def test_self(self):
        ensure_collaborator_access(COLLABORATOR, "collab-1")

    def test_peer_denied(self):
        with pytest.raises(SectorAccessDeniedError):
            ensure_collaborator_access(COLLABORATOR, "collab-2", "vendas")

    def test_manager_of_same_sector(self):
        ensure_collaborator_access(MANAGER, "collab-2", "vendas")

    def test_manager_needs_known_sector(self):
        with pytest.raises(SectorAccessDeniedError):
            ensure_collaborator_access(MANAGER, "collab-2")

    def test_manager_of_other_sector_denied(self):
        with pytest.raises(SectorAccessDeniedError):
            ensure_collaborator_access(MANAGER, "collab-9", "estoque")

    def test_admin(self):
        ensure_collaborator_access(ADMIN, "collab-9")


class TestManageSector:
    def test_manager_manages_own_sector(self):
        ensure_can_manage_sector(MANAGER, "vendas")

    def test_collaborator_cannot_manage(self):
        with pytest.raises(SectorAccessDeniedError):
            ensure_can_manage_sector(COLLABORATOR, "vendas")

    def test_admin_manages_everything(self):
        ensure_can_manage_sector(ADMIN, "estoque")

    def test_role_coerced(self):
        assert COLLABORATOR.role is Role.COLLABORATOR
        assert not COLLABORATOR.is_manager
