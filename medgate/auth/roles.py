"""
Role assignment for Medgate.

Reads and edits the user_roles table that maps auth users to roles.
"""

from typing import TYPE_CHECKING, FrozenSet, List, Union
from uuid import UUID

from loguru import logger

from ..errors import StoreUnavailable
from ..rbac.models import Role, as_role
from ..utils.supabase import execute
from .models import UserRoleAssignment

if TYPE_CHECKING:
    from ..client import Medgate


class RoleAssignmentManager:
    """
    Manager for the roles assigned to users.

    A user may hold several roles at once. Assignments persist until an
    administrator revokes them.

    Example:
        ```python
        roles = await medgate.roles.get_roles(user_id)
        await medgate.roles.assign(user_id, Role.NURSE)
        ```
    """

    def __init__(self, medgate: "Medgate") -> None:
        self.medgate = medgate
        self.client = medgate.client
        self.table_name = medgate.config.user_roles_table

    def _table(self):
        return self.client.table(self.table_name)

    async def get_roles(self, user_id: UUID) -> FrozenSet[Role]:
        """
        Get the roles assigned to a user.

        Role names outside the known set are ignored.

        Args:
            user_id: Auth user UUID

        Returns:
            Frozen set of roles (empty when none are assigned)

        Raises:
            StoreUnavailable: If the user_roles table cannot be read
        """
        result = await execute(
            self._table().select("role").eq("user_id", str(user_id)),
            "get_roles",
        )

        roles = set()
        for item in result.data or []:
            try:
                roles.add(Role(item["role"]))
            except (KeyError, ValueError):
                logger.warning(f"Ignoring unknown role {item.get('role')!r} for user {user_id}")
        return frozenset(roles)

    async def assign(self, user_id: UUID, role: Union[Role, str]) -> UserRoleAssignment:
        """
        Assign a role to a user. Assigning a role the user already holds is a no-op.

        Raises:
            StoreUnavailable: If the assignment could not be written
        """
        role = as_role(role)
        existing = await execute(
            self._table().select("*").eq("user_id", str(user_id)).eq("role", role.value),
            "assign_role",
        )
        if existing.data:
            return self._parse_assignment(existing.data[0])

        result = await execute(
            self._table().insert({"user_id": str(user_id), "role": role.value}),
            "assign_role",
        )
        if not result.data:
            raise StoreUnavailable(
                f"Role {role.value} was not assigned to {user_id}", operation="assign_role"
            )

        logger.info(f"Assigned role {role.value} to user {user_id}")
        return self._parse_assignment(result.data[0])

    async def revoke(self, user_id: UUID, role: Union[Role, str]) -> bool:
        """
        Revoke a role from a user.

        Returns:
            True if an assignment was removed, False if the user did not hold the role
        """
        role = as_role(role)
        result = await execute(
            self._table().delete().eq("user_id", str(user_id)).eq("role", role.value),
            "revoke_role",
        )
        removed = bool(result.data)
        if removed:
            logger.info(f"Revoked role {role.value} from user {user_id}")
        return removed

    async def list_users(self, role: Union[Role, str]) -> List[UUID]:
        """List the users holding a role."""
        role = as_role(role)
        result = await execute(
            self._table().select("user_id").eq("role", role.value),
            "list_users",
        )
        return [UUID(item["user_id"]) for item in result.data or []]

    def _parse_assignment(self, data: dict) -> UserRoleAssignment:
        """Parse database row into UserRoleAssignment model."""
        return UserRoleAssignment.model_validate(data)
