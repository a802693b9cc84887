"""
Medgate authentication module.

Handles sessions and the roles assigned to users.
"""

from .models import SessionIdentity, UserRoleAssignment
from .roles import RoleAssignmentManager
from .sessions import SessionManager

__all__ = [
    "SessionManager",
    "RoleAssignmentManager",
    "SessionIdentity",
    "UserRoleAssignment",
]
