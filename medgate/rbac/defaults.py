"""
Default role templates written at provisioning time.

Every role can view the dashboard; the admin role gets the full grid.
"""

from typing import Dict

from .models import Action, Module, Role, RoleTemplate

VIEW = frozenset({Action.VIEW})
VIEW_CREATE = frozenset({Action.VIEW, Action.CREATE})
VIEW_CREATE_EDIT = frozenset({Action.VIEW, Action.CREATE, Action.EDIT})
VIEW_EDIT = frozenset({Action.VIEW, Action.EDIT})
ALL = frozenset(Action)


DEFAULT_ROLE_TEMPLATES: Dict[Role, RoleTemplate] = {
    Role.ADMIN: {module: ALL for module in Module},
    Role.DOCTOR: {
        Module.DASHBOARD: VIEW,
        Module.PATIENTS: VIEW_CREATE_EDIT,
        Module.APPOINTMENTS: VIEW_CREATE_EDIT,
        Module.LABORATORY: VIEW_CREATE,
        Module.PHARMACY: VIEW,
        Module.REPORTS: VIEW,
        Module.GENERATE_REPORTS: VIEW_CREATE,
        Module.STAFF: VIEW,
        Module.STAFF_SCHEDULE: VIEW,
    },
    Role.NURSE: {
        Module.DASHBOARD: VIEW,
        Module.PATIENTS: VIEW_EDIT,
        Module.APPOINTMENTS: VIEW,
        Module.LABORATORY: VIEW,
        Module.PHARMACY: VIEW,
        Module.GENERATE_REPORTS: VIEW_CREATE,
        Module.STAFF_SCHEDULE: VIEW,
    },
    Role.RECEPTIONIST: {
        Module.DASHBOARD: VIEW,
        Module.PATIENTS: VIEW_CREATE_EDIT,
        Module.APPOINTMENTS: VIEW_CREATE_EDIT,
        Module.BILLING: VIEW_CREATE,
        Module.STAFF: VIEW,
    },
    Role.LAB_TECHNICIAN: {
        Module.DASHBOARD: VIEW,
        Module.PATIENTS: VIEW,
        Module.LABORATORY: VIEW_CREATE_EDIT,
        Module.GENERATE_REPORTS: VIEW_CREATE,
    },
    Role.PHARMACIST: {
        Module.DASHBOARD: VIEW,
        Module.PATIENTS: VIEW,
        Module.PHARMACY: VIEW_CREATE_EDIT,
        Module.BILLING: VIEW,
        Module.GENERATE_REPORTS: VIEW_CREATE,
    },
}
