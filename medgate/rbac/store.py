"""
Role-permission store for Medgate.

Durable source of truth for permission entries, kept in the role_permissions
table (one row per role and module, one boolean column per action).
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Set, Union

from loguru import logger
from pydantic import ValidationError

from ..errors import StoreUnavailable
from ..utils.supabase import execute
from .defaults import DEFAULT_ROLE_TEMPLATES
from .models import (
    Action,
    Grant,
    Module,
    ModulePermissions,
    PermissionEntry,
    Role,
    RolePermissionRow,
    RoleTemplate,
    as_action,
    as_module,
    as_role,
)

if TYPE_CHECKING:
    from ..client import Medgate


class RolePermissionStore:
    """
    Manager for permission entries.

    Reads never fail for an unknown role: it simply has no grants. Backend
    failures surface as StoreUnavailable. The store does no authorisation of
    its own; administrative writes are gated by PermissionAdministrator.

    Example:
        ```python
        medgate = await Medgate.create()

        grants = await medgate.permissions.get_permissions(Role.NURSE)
        # {(Module.PATIENTS, Action.VIEW), (Module.PATIENTS, Action.EDIT), ...}

        await medgate.permissions.set_permission(
            Role.RECEPTIONIST, Module.BILLING, Action.CREATE, True
        )
        ```
    """

    def __init__(self, medgate: "Medgate") -> None:
        """
        Initialize RolePermissionStore.

        Args:
            medgate: Medgate client instance
        """
        self.medgate = medgate
        self.client = medgate.client
        self.config = medgate.config
        self.table_name = medgate.config.permissions_table

    def _table(self):
        return self.client.table(self.table_name)

    async def get_permissions(self, role: Union[Role, str]) -> Set[Grant]:
        """
        Get every (module, action) pair allowed for a role.

        Args:
            role: Role to look up

        Returns:
            Set of granted (module, action) pairs, empty for unknown roles

        Raises:
            StoreUnavailable: If the permission table cannot be read
        """
        try:
            role = as_role(role)
        except ValueError:
            logger.debug(f"Unknown role {role!r} has no permissions")
            return set()

        query = self._table().select("*").eq("role", role.value)
        result = await execute(query, "get_permissions")

        grants: Set[Grant] = set()
        for row in self._parse_rows(result.data):
            grants |= row.grants()
        return grants

    async def get_permissions_for_roles(self, roles: Iterable[Role]) -> Set[Grant]:
        """
        Get the union of grants of several roles in one query.

        Args:
            roles: Roles held by a user

        Returns:
            Set of (module, action) pairs allowed by at least one role
        """
        role_values = sorted({as_role(role).value for role in roles})
        if not role_values:
            return set()

        query = self._table().select("*").in_("role", role_values)
        result = await execute(query, "get_permissions_for_roles")

        grants: Set[Grant] = set()
        for row in self._parse_rows(result.data):
            grants |= row.grants()
        return grants

    async def get_all_permissions(self) -> Dict[Role, Set[Grant]]:
        """
        Get the grants of every role.

        Returns:
            Mapping of each role to its granted (module, action) pairs
        """
        result = await execute(self._table().select("*"), "get_all_permissions")

        permissions: Dict[Role, Set[Grant]] = {role: set() for role in Role}
        for row in self._parse_rows(result.data):
            permissions[row.role] |= row.grants()
        return permissions

    async def list_entries(self, role: Optional[Union[Role, str]] = None) -> List[PermissionEntry]:
        """
        List stored permission entries, optionally for a single role.

        Args:
            role: Restrict to this role

        Returns:
            Entries for every action of every stored row
        """
        query = self._table().select("*")
        if role is not None:
            query = query.eq("role", as_role(role).value)

        result = await execute(query.order("role").order("module"), "list_entries")

        entries: List[PermissionEntry] = []
        for row in self._parse_rows(result.data):
            entries.extend(row.entries())
        return entries

    async def get_role_matrix(self, role: Union[Role, str]) -> Dict[Module, ModulePermissions]:
        """
        Get the permission grid of a role over every module.

        Modules without a stored row are reported as fully denied.
        """
        grants = await self.get_permissions(role)
        return {
            module: ModulePermissions.from_actions(
                action for granted_module, action in grants if granted_module == module
            )
            for module in Module
        }

    async def set_permission(
        self,
        role: Union[Role, str],
        module: Union[Module, str],
        action: Union[Action, str],
        allowed: bool,
    ) -> PermissionEntry:
        """
        Set a single permission entry.

        Idempotent: when the stored value already matches nothing is written.

        Args:
            role: Role to change
            module: Module the entry applies to
            action: Action to allow or deny
            allowed: New value

        Returns:
            The resulting PermissionEntry

        Raises:
            ValueError: If the role's permissions are locked
            StoreUnavailable: If the write could not be applied

        Example:
            ```python
            await medgate.permissions.set_permission("nurse", "pharmacy", "edit", True)
            ```
        """
        role, module, action = as_role(role), as_module(module), as_action(action)
        self._check_writable(role)
        entry = PermissionEntry(role=role, module=module, action=action, allowed=allowed)

        existing = await self._get_row(role, module)

        if existing is None:
            # No row already means "not allowed"
            if not allowed:
                return entry
            result = await execute(
                self._table().insert(
                    {"role": role.value, "module": module.value, action.column: True}
                ),
                "set_permission",
            )
            if not result.data:
                raise StoreUnavailable(
                    f"Permission entry was not created: {role.value}/{module.value}/{action.value}",
                    operation="set_permission",
                )
            logger.info(f"Granted {module.value}:{action.value} to role {role.value}")
            return entry

        if existing.allows(action) == allowed:
            return entry

        await self._update_row(role, module, {action.column: allowed}, "set_permission")
        verb = "Granted" if allowed else "Revoked"
        logger.info(f"{verb} {module.value}:{action.value} for role {role.value}")
        return entry

    async def delete_permission(
        self,
        role: Union[Role, str],
        module: Union[Module, str],
        action: Union[Action, str],
    ) -> None:
        """
        Remove a permission entry.

        The row is deleted once none of its actions is granted any more.

        Raises:
            ValueError: If the role's permissions are locked
            StoreUnavailable: If the write could not be applied
        """
        role, module, action = as_role(role), as_module(module), as_action(action)
        self._check_writable(role)

        existing = await self._get_row(role, module)
        if existing is None or not existing.allows(action):
            return

        remaining = existing.grants() - {(module, action)}
        if remaining:
            await self._update_row(role, module, {action.column: False}, "delete_permission")
        else:
            result = await execute(
                self._table().delete().eq("role", role.value).eq("module", module.value),
                "delete_permission",
            )
            if not result.data:
                raise StoreUnavailable(
                    f"Permission row was not deleted: {role.value}/{module.value}",
                    operation="delete_permission",
                )
        logger.info(f"Removed {module.value}:{action.value} from role {role.value}")

    async def seed_defaults(
        self,
        templates: Optional[Dict[Role, RoleTemplate]] = None,
        overwrite: bool = False,
    ) -> int:
        """
        Write default role templates.

        Rows that already exist are left untouched unless overwrite is set.
        Provisioning is allowed to write the admin role.

        Args:
            templates: Templates per role (defaults to DEFAULT_ROLE_TEMPLATES)
            overwrite: Replace existing rows with the template values

        Returns:
            Number of rows written
        """
        templates = DEFAULT_ROLE_TEMPLATES if templates is None else templates

        result = await execute(self._table().select("*"), "seed_defaults")
        existing = {(row.role, row.module) for row in self._parse_rows(result.data)}

        inserts = []
        written = 0
        for role, modules in templates.items():
            for module, actions in modules.items():
                values = {action.column: action in actions for action in Action}
                if (role, module) in existing:
                    if overwrite:
                        await self._update_row(role, module, values, "seed_defaults")
                        written += 1
                    continue
                inserts.append({"role": role.value, "module": module.value, **values})

        if inserts:
            result = await execute(self._table().insert(inserts), "seed_defaults")
            if not result.data:
                raise StoreUnavailable(
                    "Default permission rows were not created", operation="seed_defaults"
                )
            written += len(inserts)

        logger.info(f"Seeded {written} default permission rows")
        return written

    async def _get_row(self, role: Role, module: Module) -> Optional[RolePermissionRow]:
        result = await execute(
            self._table().select("*").eq("role", role.value).eq("module", module.value),
            "get_row",
        )
        rows = self._parse_rows(result.data)
        return rows[0] if rows else None

    async def _update_row(self, role: Role, module: Module, values: dict, operation: str) -> None:
        update_data = {**values, "updated_at": datetime.now(timezone.utc).isoformat()}
        result = await execute(
            self._table().update(update_data).eq("role", role.value).eq("module", module.value),
            operation,
        )
        if not result.data:
            raise StoreUnavailable(
                f"Permission row was not updated: {role.value}/{module.value}",
                operation=operation,
            )

    def _check_writable(self, role: Role) -> None:
        if role == Role.ADMIN and self.config.lock_admin_permissions:
            raise ValueError("Cannot modify permissions of the admin role")

    def _parse_rows(self, data: Optional[List[dict]]) -> List[RolePermissionRow]:
        """Parse database rows, skipping roles or modules outside the closed sets."""
        rows = []
        for item in data or []:
            try:
                rows.append(RolePermissionRow.model_validate(item))
            except ValidationError:
                logger.warning(
                    f"Skipping unrecognised permission row: role={item.get('role')!r} "
                    f"module={item.get('module')!r}"
                )
        return rows
