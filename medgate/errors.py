"""
Medgate exceptions.

Every failure of the permission layer resolves to "denied"; these exceptions
only carry the reason to callers and operators.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .rbac.models import Action, Module


class MedgateError(Exception):
    """Base class for Medgate errors."""


class StoreUnavailable(MedgateError):
    """
    The permission persistence layer could not be reached or returned an error.

    Reads that fail with this error must be treated as "deny". Writes that fail
    with it did not take effect.
    """

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


class AccessDenied(MedgateError, PermissionError):
    """Raised when a gated action is invoked without the required permission."""

    def __init__(self, module: "Module", action: "Action") -> None:
        super().__init__(
            f"Permission denied. Required: {module.value}:{action.value}"
        )
        self.module = module
        self.action = action
