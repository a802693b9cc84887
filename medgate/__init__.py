"""
Medgate - role-based access control for hospital management apps on Supabase.

Permission entries live in YOUR Supabase tables; Medgate resolves them per
session and gates every protected action.

Example:
    ```python
    from medgate import AccessGate, Action, Medgate, Module

    medgate = await Medgate.create()

    # Session
    identity = await medgate.sessions.sign_in_with_password(email, password)
    resolver = medgate.resolver()
    await resolver.initialize(identity.user_id)

    # Decisions
    resolver.has_permission(Module.BILLING, Action.CREATE)
    resolver.can_access_module(Module.LABORATORY)

    # Gate a call site
    gate = AccessGate(resolver, Module.PATIENTS, Action.CREATE, content=add_patient_button)
    gate.render()

    # Administration (requires user_management:edit)
    admin = medgate.administrator(resolver)
    await admin.set_permission(Role.NURSE, Module.PHARMACY, Action.EDIT, True)
    ```
"""

from .client import Medgate
from .auth import RoleAssignmentManager, SessionIdentity, SessionManager
from .config import MedgateConfig, load_config
from .decorators import require_permission
from .errors import AccessDenied, MedgateError, StoreUnavailable
from .gate import AccessGate, GateState
from .utils.logging import disable_logging, enable_logging
from .rbac import (
    DEFAULT_ROLE_TEMPLATES,
    Action,
    Module,
    ModulePermissions,
    PermissionAdministrator,
    PermissionEntry,
    PermissionResolver,
    ResolverState,
    Role,
    RolePermissionStore,
)

__version__ = "0.1.0"

disable_logging()

__all__ = [
    # Main client
    "Medgate",
    "MedgateConfig",
    "load_config",
    # Identities
    "SessionManager",
    "RoleAssignmentManager",
    "SessionIdentity",
    # RBAC
    "Role",
    "Module",
    "Action",
    "PermissionEntry",
    "ModulePermissions",
    "RolePermissionStore",
    "PermissionResolver",
    "ResolverState",
    "PermissionAdministrator",
    "DEFAULT_ROLE_TEMPLATES",
    # Gating
    "AccessGate",
    "GateState",
    "require_permission",
    # Errors
    "MedgateError",
    "StoreUnavailable",
    "AccessDenied",
    # Logging
    "enable_logging",
    "disable_logging",
]
