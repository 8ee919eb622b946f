"""
Core complaint schemas.

Creation is validated locally before any remote call; status, assignment
and resolution updates are admin-only payloads.
"""

from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from pydantic import Field, field_validator

from complaint_desk.config.settings import settings
from complaint_desk.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
)
from complaint_desk.schemas.common.enums import ComplaintStatus, Priority

__all__ = [
    "ComplaintCreate",
    "ComplaintStatusUpdate",
    "ComplaintAssign",
    "ComplaintResolve",
    "ComplaintResponse",
]


class ComplaintCreate(BaseCreateSchema):
    """
    New complaint submitted by a student.

    The owning student is taken from the actor, never from the payload.
    """

    title: str = Field(
        ...,
        description="Brief complaint title/summary",
    )
    description: str = Field(
        ...,
        description="Detailed complaint description",
    )
    category_id: Union[str, None] = Field(
        default=None,
        validate_default=True,
        description="Category identifier",
    )
    priority: Priority = Field(
        default=Priority.MEDIUM,
        description="Complaint priority level (defaults to medium)",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if len(v) < settings.COMPLAINT_TITLE_MIN_LENGTH:
            raise ValueError(
                f"Title must be at least {settings.COMPLAINT_TITLE_MIN_LENGTH} characters"
            )
        if len(v) > settings.COMPLAINT_TITLE_MAX_LENGTH:
            raise ValueError("Title too long")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        if len(v) < settings.COMPLAINT_DESCRIPTION_MIN_LENGTH:
            raise ValueError(
                f"Description must be at least {settings.COMPLAINT_DESCRIPTION_MIN_LENGTH} characters"
            )
        if len(v) > settings.COMPLAINT_DESCRIPTION_MAX_LENGTH:
            raise ValueError("Description too long")
        return v

    @field_validator("category_id")
    @classmethod
    def validate_category_id(cls, v: Union[str, None]) -> str:
        """Category must be chosen; identifiers are UUIDs."""
        if not v:
            raise ValueError("Please select a category")
        try:
            UUID(v)
        except ValueError:
            raise ValueError("Please select a category") from None
        return v


class ComplaintStatusUpdate(BaseSchema):
    """Admin status change."""

    status: ComplaintStatus = Field(..., description="New complaint status")


class ComplaintAssign(BaseSchema):
    """Admin assignment change; None unassigns."""

    assigned_to: Optional[str] = Field(
        default=None,
        description="User ID of the assignee",
    )


class ComplaintResolve(BaseSchema):
    """Admin resolution with a summary for the student."""

    resolution_summary: str = Field(
        ...,
        description="What was done to resolve the complaint",
    )

    @field_validator("resolution_summary")
    @classmethod
    def validate_resolution_summary(cls, v: str) -> str:
        if not v:
            raise ValueError("Resolution summary cannot be empty")
        if len(v) > settings.COMPLAINT_DESCRIPTION_MAX_LENGTH:
            raise ValueError("Resolution summary too long")
        return v


class ComplaintResponse(BaseResponseSchema):
    """Complaint as rendered in lists and detail views."""

    title: str
    description: str
    status: ComplaintStatus
    priority: Priority
    student_id: str
    category_id: Optional[str] = None
    category_name: Optional[str] = Field(
        default=None,
        description="Joined category name",
    )
    student_name: Optional[str] = Field(
        default=None,
        description="Joined owner display name",
    )
    assigned_to: Optional[str] = None
    resolution_summary: Optional[str] = None
    updated_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
