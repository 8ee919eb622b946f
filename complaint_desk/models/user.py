"""
Profile and role tables.
"""

from typing import Optional

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from complaint_desk.models.base import BaseModel, CreatedAtMixin, TimestampMixin

__all__ = ["Profile", "UserRole"]


class Profile(BaseModel, TimestampMixin):
    """
    Public profile of an authenticated user.

    The id is shared with the identity provider's user id.
    """

    __tablename__ = "profiles"

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    batch: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)


class UserRole(BaseModel, CreatedAtMixin):
    """Role granted to a user."""

    __tablename__ = "user_roles"
    __table_args__ = (
        CheckConstraint(
            "role IN ('student', 'admin', 'super_admin')",
            name="check_user_role",
        ),
    )

    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="student")
