"""
List envelopes returned by the complaint endpoints.
"""
from typing import List

from pydantic import Field

from complaint_desk.schemas.common.base import BaseSchema
from complaint_desk.schemas.complaint.complaint_analytics import ComplaintStats
from complaint_desk.schemas.complaint.complaint_base import ComplaintResponse
from complaint_desk.schemas.complaint.complaint_comments import CommentResponse

__all__ = ["ComplaintListResponse", "CommentListResponse"]


class ComplaintListResponse(BaseSchema):
    items: List[ComplaintResponse] = Field(default_factory=list)
    stats: ComplaintStats = Field(default_factory=ComplaintStats)


class CommentListResponse(BaseSchema):
    items: List[CommentResponse] = Field(default_factory=list)
    can_comment: bool = Field(
        default=True,
        description="False once the complaint is resolved or closed",
    )
