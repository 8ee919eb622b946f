"""
Enumerations shared by schemas, models and services.
"""

from enum import Enum

__all__ = [
    "AppRole",
    "ComplaintStatus",
    "Priority",
    "PENDING_STATUSES",
    "OPEN_STATUSES",
    "RESOLVED_STATUSES",
    "ADMIN_ROLES",
    "ROLE_RANK",
]


class AppRole(str, Enum):
    """User role enumeration."""

    STUDENT = "student"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class ComplaintStatus(str, Enum):
    """Complaint status enumeration, in lifecycle order."""

    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class Priority(str, Enum):
    """Priority level enumeration."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return self.value.title()


PENDING_STATUSES = frozenset({ComplaintStatus.SUBMITTED, ComplaintStatus.IN_REVIEW})
RESOLVED_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED})
# Statuses that still accept comments and clear resolved_at when re-entered
OPEN_STATUSES = frozenset(
    {ComplaintStatus.SUBMITTED, ComplaintStatus.IN_REVIEW, ComplaintStatus.IN_PROGRESS}
)

ADMIN_ROLES = frozenset({AppRole.ADMIN, AppRole.SUPER_ADMIN})
ROLE_RANK = {AppRole.STUDENT: 0, AppRole.ADMIN: 1, AppRole.SUPER_ADMIN: 2}
