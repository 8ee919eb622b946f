"""
Application services. Every public method returns a ServiceResult.
"""

from complaint_desk.services.admin import UserRoleService
from complaint_desk.services.base import BaseService, ErrorCode, ServiceResult
from complaint_desk.services.communication import ChatService, ChatSession
from complaint_desk.services.complaint import (
    CategoryService,
    CommentThread,
    CommentThreadService,
    ComplaintService,
)

__all__ = [
    "BaseService",
    "CategoryService",
    "ChatService",
    "ChatSession",
    "CommentThread",
    "CommentThreadService",
    "ComplaintService",
    "ErrorCode",
    "ServiceResult",
    "UserRoleService",
]
