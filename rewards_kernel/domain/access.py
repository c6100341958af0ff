"""
Caller scope checks.

Role and sector come from the authentication layer; this module only
decides whether a caller may read or write a sector's or a collaborator's
data.

    collaborator  own records only
    manager       records of their own sector
    admin         everything
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rewards_kernel.exceptions import SectorAccessDeniedError


class Role(str, Enum):
    COLLABORATOR = "collaborator"
    MANAGER = "manager"
    ADMIN = "admin"


@dataclass(frozen=True)
class CallerContext:
    """Who is asking: role, sector and profile id as resolved by auth."""

    role: Role
    sector_id: str | None
    profile_id: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER


def ensure_sector_access(caller: CallerContext, sector_id: str) -> None:
    """Read access to a sector's goals."""
    if caller.is_admin or caller.sector_id == sector_id:
        return
    raise SectorAccessDeniedError(
        caller.role.value, f"sector {sector_id}", "caller belongs to another sector"
    )


def ensure_collaborator_access(
    caller: CallerContext,
    collaborator_id: str,
    collaborator_sector_id: str | None = None,
) -> None:
    """Read access to one collaborator's submissions and rewards."""
    if caller.is_admin or caller.profile_id == collaborator_id:
        return
    if (
        caller.is_manager
        and collaborator_sector_id is not None
        and caller.sector_id == collaborator_sector_id
    ):
        return
    raise SectorAccessDeniedError(
        caller.role.value, f"collaborator {collaborator_id}"
    )


def ensure_can_manage_sector(caller: CallerContext, sector_id: str) -> None:
    """Write access: goal definitions and contestations."""
    if caller.is_admin:
        return
    if caller.is_manager and caller.sector_id == sector_id:
        return
    raise SectorAccessDeniedError(
        caller.role.value, f"sector {sector_id}", "managers and admins only"
    )
