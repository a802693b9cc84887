"""
Permission administration for Medgate.

Administrative writes on behalf of a signed-in user. Every write requires the
acting user to hold edit rights on the user management module.
"""

from typing import TYPE_CHECKING, Dict, Optional, Union
from uuid import UUID

from loguru import logger

from ..decorators import require_permission
from ..errors import StoreUnavailable
from .models import Action, Module, PermissionEntry, Role, RoleTemplate, as_role
from .resolver import PermissionResolver

if TYPE_CHECKING:
    from ..auth.models import UserRoleAssignment
    from ..client import Medgate


class PermissionAdministrator:
    """
    Gated facade over the permission store and role assignments.

    After a change that affects the acting user's own roles or permissions
    the acting user's resolver is refreshed, so the change is visible to
    their next permission check. Other live sessions observe it on their own
    next refresh(). A reload failure after a successful write is logged and
    does not fail the write; the acting resolver is left FAILED and denying.

    Example:
        ```python
        admin = medgate.administrator(resolver)
        await admin.set_permission(Role.NURSE, Module.PHARMACY, Action.EDIT, True)
        await admin.assign_role(user_id, Role.DOCTOR)
        ```
    """

    def __init__(self, medgate: "Medgate", resolver: PermissionResolver) -> None:
        """
        Initialize PermissionAdministrator.

        Args:
            medgate: Medgate client instance
            resolver: Resolver of the acting user's session
        """
        self.medgate = medgate
        self.resolver = resolver

    @require_permission(Module.USER_MANAGEMENT, Action.EDIT)
    async def set_permission(
        self,
        role: Union[Role, str],
        module: Union[Module, str],
        action: Union[Action, str],
        allowed: bool,
    ) -> PermissionEntry:
        """Set a permission entry (see RolePermissionStore.set_permission)."""
        entry = await self.medgate.permissions.set_permission(role, module, action, allowed)
        await self._refresh_if_held(entry.role)
        return entry

    @require_permission(Module.USER_MANAGEMENT, Action.EDIT)
    async def delete_permission(
        self,
        role: Union[Role, str],
        module: Union[Module, str],
        action: Union[Action, str],
    ) -> None:
        """Remove a permission entry (see RolePermissionStore.delete_permission)."""
        role = as_role(role)
        await self.medgate.permissions.delete_permission(role, module, action)
        await self._refresh_if_held(role)

    @require_permission(Module.USER_MANAGEMENT, Action.EDIT)
    async def assign_role(self, user_id: UUID, role: Union[Role, str]) -> "UserRoleAssignment":
        """Assign a role to a user."""
        assignment = await self.medgate.roles.assign(user_id, role)
        await self._refresh_if_self(user_id)
        return assignment

    @require_permission(Module.USER_MANAGEMENT, Action.EDIT)
    async def revoke_role(self, user_id: UUID, role: Union[Role, str]) -> bool:
        """Revoke a role from a user."""
        removed = await self.medgate.roles.revoke(user_id, role)
        if removed:
            await self._refresh_if_self(user_id)
        return removed

    @require_permission(Module.USER_MANAGEMENT, Action.EDIT)
    async def seed_defaults(
        self,
        templates: Optional[Dict[Role, RoleTemplate]] = None,
        overwrite: bool = False,
    ) -> int:
        """Write the default role templates."""
        written = await self.medgate.permissions.seed_defaults(templates, overwrite=overwrite)
        if written:
            await self._refresh()
        return written

    async def _refresh_if_held(self, role: Role) -> None:
        if role in self.resolver.roles:
            await self._refresh()

    async def _refresh_if_self(self, user_id: UUID) -> None:
        if user_id == self.resolver.user_id:
            await self._refresh()

    async def _refresh(self) -> None:
        try:
            await self.resolver.refresh()
        except StoreUnavailable as e:
            logger.warning(f"Permissions of user {self.resolver.user_id} not reloaded after write: {e}")
