"""
Complaint and category tables.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from complaint_desk.models.base import BaseModel, TimestampMixin

__all__ = ["Complaint", "ComplaintCategory"]


class ComplaintCategory(BaseModel, TimestampMixin):
    """
    Reference data for classifying complaints.

    Only active categories are offered when a complaint is raised.
    """

    __tablename__ = "complaint_categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Complaint(BaseModel, TimestampMixin):
    """
    Complaint raised by a student and worked by administrators.

    Attributes:
        student_id: Owning student (profile id)
        title: Brief complaint summary
        description: Detailed complaint description
        status: Lifecycle status
        priority: Priority level
        category_id: Optional category reference
        assigned_to: Administrator currently working the complaint
        resolution_summary: Resolution notes recorded by an administrator
        resolved_at: Set while the complaint sits in resolved/closed
    """

    __tablename__ = "complaints"
    __table_args__ = (
        Index("ix_complaints_student_id", "student_id"),
        Index("ix_complaints_status_priority", "status", "priority"),
        CheckConstraint(
            "status IN ('submitted', 'in_review', 'in_progress', 'resolved', 'closed')",
            name="check_complaint_status",
        ),
        CheckConstraint(
            "priority IN ('low', 'medium', 'high')",
            name="check_complaint_priority",
        ),
    )

    student_id: Mapped[str] = mapped_column(String(36), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="submitted")
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    category_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("complaint_categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    assigned_to: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    resolution_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
