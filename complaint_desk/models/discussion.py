"""
Complaint discussion tables: comments and live chat messages.
"""

from sqlalchemy import Boolean, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from complaint_desk.models.base import BaseModel, CreatedAtMixin

__all__ = ["ComplaintComment", "ChatMessage"]


class ComplaintComment(BaseModel, CreatedAtMixin):
    """
    Comment on a complaint.

    Immutable once written; internal comments are meant for administrators.
    """

    __tablename__ = "complaint_comments"
    __table_args__ = (
        Index("ix_complaint_comments_complaint_created", "complaint_id", "created_at"),
    )

    complaint_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    is_internal: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ChatMessage(BaseModel, CreatedAtMixin):
    """Live chat message on a complaint."""

    __tablename__ = "chat_messages"
    __table_args__ = (
        Index("ix_chat_messages_complaint_created", "complaint_id", "created_at"),
    )

    complaint_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("complaints.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
