# app/services/permission_oracle.py
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Forbidden, NotFound
from app.core.permissions import ROLE_PERMISSIONS, Permission, Role
from app.models.workspace import Member, Workspace

logger = logging.getLogger(__name__)


class PermissionOracle:
    """
    Decides whether a caller may act inside a workspace.

    Responsibilities
    ----------------
    - Resolve the caller's role from workspace membership.
    - Check a role against the permissions an operation requires.

    The role table is injected so tests (or a different deployment) can
    supply their own mapping; by default the static ROLE_PERMISSIONS table
    is used.
    """

    def __init__(
        self,
        role_permissions: Mapping[Role, frozenset[Permission]] = ROLE_PERMISSIONS,
    ) -> None:
        self._role_permissions = role_permissions

    async def get_member_role(
        self,
        db: AsyncSession,
        user_id: str,
        workspace_id: str,
    ) -> Role:
        """
        Return the role of `user_id` in `workspace_id`.

        Raises
        ------
        NotFound
            The workspace does not exist.
        Forbidden
            The caller is not a member of the workspace.
        """
        workspace = await db.get(Workspace, workspace_id)
        if workspace is None:
            raise NotFound("Workspace not found")

        result = await db.execute(
            select(Member.role).where(
                Member.user_id == user_id,
                Member.workspace_id == workspace_id,
            )
        )
        role = result.scalar_one_or_none()
        if role is None:
            logger.warning(
                "User %s is not a member of workspace %s", user_id, workspace_id
            )
            raise Forbidden("You are not a member of this workspace")

        return Role(role)

    def role_guard(self, role: Role, required: Iterable[Permission]) -> None:
        """
        Raise Forbidden unless `role` holds every permission in `required`.
        """
        granted = self._role_permissions.get(role, frozenset())
        missing = [p for p in required if p not in granted]
        if missing:
            logger.warning(
                "Role %s lacks %s", role.value, ", ".join(p.value for p in missing)
            )
            raise Forbidden()

    async def authorize(
        self,
        db: AsyncSession,
        user_id: str,
        workspace_id: str,
        required: Iterable[Permission],
    ) -> Role:
        """
        Resolve the caller's role and check it in one step.
        """
        role = await self.get_member_role(db, user_id, workspace_id)
        self.role_guard(role, required)
        return role


# Simple singleton-style accessor used as a FastAPI dependency
_oracle_instance: Optional[PermissionOracle] = None


def get_permission_oracle() -> PermissionOracle:
    """
    Lazily construct the process-wide PermissionOracle.

    Endpoints depend on this accessor, so tests can swap the oracle through
    `app.dependency_overrides`.
    """
    global _oracle_instance
    if _oracle_instance is None:
        _oracle_instance = PermissionOracle()
    return _oracle_instance
