from complaint_desk.schemas.complaint.category import CategoryResponse
from complaint_desk.schemas.complaint.complaint_analytics import ComplaintStats
from complaint_desk.schemas.complaint.complaint_base import (
    ComplaintAssign,
    ComplaintCreate,
    ComplaintResolve,
    ComplaintResponse,
    ComplaintStatusUpdate,
)
from complaint_desk.schemas.complaint.complaint_comments import CommentCreate, CommentResponse
from complaint_desk.schemas.complaint.complaint_filters import ALL, ComplaintFilterParams
from complaint_desk.schemas.complaint.complaint_response import (
    CommentListResponse,
    ComplaintListResponse,
)

__all__ = [
    "ALL",
    "CategoryResponse",
    "CommentCreate",
    "CommentListResponse",
    "CommentResponse",
    "ComplaintAssign",
    "ComplaintCreate",
    "ComplaintFilterParams",
    "ComplaintListResponse",
    "ComplaintResolve",
    "ComplaintResponse",
    "ComplaintStats",
    "ComplaintStatusUpdate",
]
