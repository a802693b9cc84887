"""
Medgate RBAC module.

Role-permission store, permission resolver and administration.
"""

from .admin import PermissionAdministrator
from .defaults import DEFAULT_ROLE_TEMPLATES
from .models import (
    Action,
    Grant,
    Module,
    ModulePermissions,
    PermissionEntry,
    Role,
    RolePermissionRow,
)
from .resolver import PermissionResolver, PermissionSnapshot, ResolverState
from .store import RolePermissionStore

__all__ = [
    # Managers
    "RolePermissionStore",
    "PermissionResolver",
    "PermissionAdministrator",
    # Models
    "Role",
    "Module",
    "Action",
    "Grant",
    "PermissionEntry",
    "RolePermissionRow",
    "ModulePermissions",
    "PermissionSnapshot",
    "ResolverState",
    "DEFAULT_ROLE_TEMPLATES",
]
