"""
Profile and role schemas for user management.
"""

from typing import Optional

from pydantic import Field

from complaint_desk.schemas.common.base import BaseResponseSchema, BaseSchema
from complaint_desk.schemas.common.enums import AppRole

__all__ = ["ProfileResponse", "UserWithRole", "RoleUpdate"]


class ProfileResponse(BaseResponseSchema):
    full_name: str
    email: str
    batch: Optional[str] = None
    phone: Optional[str] = None


class UserWithRole(ProfileResponse):
    """Profile joined with its effective role."""

    role: AppRole = Field(
        default=AppRole.STUDENT,
        description="Highest-privilege role held; student when none is stored",
    )


class RoleUpdate(BaseSchema):
    role: AppRole = Field(..., description="New role for the user")
