from complaint_desk.schemas.common.base import (
    BaseCreateSchema,
    BaseFilterSchema,
    BaseResponseSchema,
    BaseSchema,
    CreatedAtMixin,
    PendingMixin,
    UUIDMixin,
)
from complaint_desk.schemas.common.enums import (
    ADMIN_ROLES,
    OPEN_STATUSES,
    PENDING_STATUSES,
    RESOLVED_STATUSES,
    ROLE_RANK,
    AppRole,
    ComplaintStatus,
    Priority,
)

__all__ = [
    "BaseCreateSchema",
    "BaseFilterSchema",
    "BaseResponseSchema",
    "BaseSchema",
    "CreatedAtMixin",
    "PendingMixin",
    "UUIDMixin",
    "ADMIN_ROLES",
    "OPEN_STATUSES",
    "PENDING_STATUSES",
    "RESOLVED_STATUSES",
    "ROLE_RANK",
    "AppRole",
    "ComplaintStatus",
    "Priority",
]
