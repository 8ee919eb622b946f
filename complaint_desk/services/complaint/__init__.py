from complaint_desk.services.complaint.category_service import CategoryService
from complaint_desk.services.complaint.complaint_comment_service import (
    CommentThread,
    CommentThreadService,
)
from complaint_desk.services.complaint.complaint_service import ComplaintService

__all__ = [
    "CategoryService",
    "CommentThread",
    "CommentThreadService",
    "ComplaintService",
]
