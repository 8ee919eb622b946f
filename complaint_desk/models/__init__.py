from complaint_desk.backend.client import (
    CHAT_MESSAGES,
    COMPLAINT_CATEGORIES,
    COMPLAINT_COMMENTS,
    COMPLAINTS,
    PROFILES,
    USER_ROLES,
)
from complaint_desk.models.base import Base, BaseModel
from complaint_desk.models.complaint import Complaint, ComplaintCategory
from complaint_desk.models.discussion import ChatMessage, ComplaintComment
from complaint_desk.models.user import Profile, UserRole

# Collection name -> mapped model
MODELS = {
    COMPLAINTS: Complaint,
    COMPLAINT_CATEGORIES: ComplaintCategory,
    COMPLAINT_COMMENTS: ComplaintComment,
    CHAT_MESSAGES: ChatMessage,
    PROFILES: Profile,
    USER_ROLES: UserRole,
}

__all__ = [
    "Base",
    "BaseModel",
    "Complaint",
    "ComplaintCategory",
    "ComplaintComment",
    "ChatMessage",
    "Profile",
    "UserRole",
    "MODELS",
]
