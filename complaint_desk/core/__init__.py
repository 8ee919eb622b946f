from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import (
    AuthorizationError,
    BaseAppException,
    BusinessRuleViolation,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "ActorContext",
    "AuthorizationError",
    "BaseAppException",
    "BusinessRuleViolation",
    "NotFoundError",
    "ValidationError",
]
