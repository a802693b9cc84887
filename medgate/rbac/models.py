"""
Medgate RBAC models.

Closed enumerations for roles, modules and actions, and pydantic models for
the rows of the role_permissions table.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Set, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Role(str, Enum):
    """Job functions a user can hold (the app_role Postgres enum)."""

    ADMIN = "admin"
    DOCTOR = "doctor"
    NURSE = "nurse"
    RECEPTIONIST = "receptionist"
    LAB_TECHNICIAN = "lab_technician"
    PHARMACIST = "pharmacist"


class Module(str, Enum):
    """Functional areas of the hospital application."""

    DASHBOARD = "dashboard"
    PATIENTS = "patients"
    APPOINTMENTS = "appointments"
    LABORATORY = "laboratory"
    PHARMACY = "pharmacy"
    BILLING = "billing"
    REPORTS = "reports"
    GENERATE_REPORTS = "generate_reports"
    ACCOUNTS = "accounts"
    STAFF = "staff"
    STAFF_SCHEDULE = "staff_schedule"
    USER_MANAGEMENT = "user_management"


class Action(str, Enum):
    """Verbs a permission entry can allow."""

    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"

    @property
    def column(self) -> str:
        """Name of the role_permissions column storing this action."""
        return f"can_{self.value}"


Grant = Tuple[Module, Action]


def as_role(value: Union[Role, str]) -> Role:
    """Coerce a role name; unknown names raise ValueError."""
    return value if isinstance(value, Role) else Role(value)


def as_module(value: Union[Module, str]) -> Module:
    """Coerce a module name; unknown names raise ValueError."""
    return value if isinstance(value, Module) else Module(value)


def as_action(value: Union[Action, str]) -> Action:
    """Coerce an action name; unknown names raise ValueError."""
    return value if isinstance(value, Action) else Action(value)


class PermissionEntry(BaseModel):
    """
    A single (role, module, action -> allowed) fact.

    At most one entry exists per (role, module, action): the storage keeps one
    row per (role, module) with one boolean column per action.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    module: Module
    action: Action
    allowed: bool = False

    @property
    def grant(self) -> Grant:
        return (self.module, self.action)


class RolePermissionRow(BaseModel):
    """
    Row of the role_permissions table.

    Example:
        ```python
        row = RolePermissionRow(
            role="nurse",
            module="patients",
            can_view=True,
            can_edit=True,
        )
        row.grants()  # {(Module.PATIENTS, Action.VIEW), (Module.PATIENTS, Action.EDIT)}
        ```
    """

    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    role: Role
    module: Module

    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def allows(self, action: Action) -> bool:
        return bool(getattr(self, action.column))

    def grants(self) -> Set[Grant]:
        """Return the (module, action) pairs this row allows."""
        return {(self.module, action) for action in Action if self.allows(action)}

    def entries(self) -> Iterable[PermissionEntry]:
        for action in Action:
            yield PermissionEntry(
                role=self.role,
                module=self.module,
                action=action,
                allowed=self.allows(action),
            )


class ModulePermissions(BaseModel):
    """Effective permissions of a user for one module."""

    model_config = ConfigDict(frozen=True)

    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False

    def allows(self, action: Action) -> bool:
        return bool(getattr(self, action.column))

    @classmethod
    def from_actions(cls, actions: Iterable[Action]) -> "ModulePermissions":
        return cls(**{action.column: True for action in actions})

    @classmethod
    def full(cls) -> "ModulePermissions":
        return cls.from_actions(Action)


class SessionIdentity(BaseModel):
    """
    The authenticated user and the roles they held when the identity was read.

    Read-only for the lifetime of a session; an administrator changing the
    user's roles requires the identity to be fetched again.
    """

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    roles: FrozenSet[Role] = Field(default_factory=frozenset)
    email: Optional[EmailStr] = None

    def has_role(self, role: Role) -> bool:
        return role in self.roles


RoleTemplate = Dict[Module, FrozenSet[Action]]
