"""
Medgate auth models.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..rbac.models import Role, SessionIdentity


class UserRoleAssignment(BaseModel):
    """Row of the user_roles table."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[UUID] = None
    user_id: UUID
    role: Role
    created_at: Optional[datetime] = None


__all__ = ["SessionIdentity", "UserRoleAssignment"]
