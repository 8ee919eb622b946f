"""
Complaint discussion schemas.

Public comments are visible to everyone on the complaint; internal notes
are admin-only.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from complaint_desk.config.settings import settings
from complaint_desk.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    PendingMixin,
)

__all__ = [
    "CommentCreate",
    "CommentResponse",
]


class CommentCreate(BaseCreateSchema):
    """Create comment on complaint."""

    comment: str = Field(
        ...,
        description="Comment text content",
    )
    is_internal: bool = Field(
        default=False,
        description="Internal note (admin only) vs public comment",
    )

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v: str) -> str:
        if not v:
            raise ValueError("Comment cannot be empty")
        if len(v) > settings.COMMENT_MAX_LENGTH:
            raise ValueError(
                f"Comment must be less than {settings.COMMENT_MAX_LENGTH} characters"
            )
        return v


class CommentResponse(BaseResponseSchema, PendingMixin):
    """Comment with its author's display name."""

    complaint_id: str
    user_id: str
    comment: str
    is_internal: bool = False
    author_name: Optional[str] = None
