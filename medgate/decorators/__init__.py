"""
Medgate decorators module.

Provides decorators for authorization.
"""

from .permissions import require_permission

__all__ = [
    "require_permission",
]
