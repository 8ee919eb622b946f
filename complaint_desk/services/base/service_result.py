"""
Outcome of a service call.

Services never raise to their callers: they return a ServiceResult that
is either a success carrying data (plus optional metadata such as list
stats) or a failure carrying a ServiceError. The API layer turns the
error code into an HTTP status; the websocket turns it into an error
frame.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


class ErrorCode(str, Enum):
    """Failure categories a caller can branch on."""

    # Input rejected before anything was sent
    VALIDATION_ERROR = "VALIDATION_ERROR"
    # Actor's role does not allow the operation
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"
    # Complaint, user or category does not exist
    NOT_FOUND = "NOT_FOUND"
    # Allowed in general, refused in the current state (closed thread, self-delete)
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    # Collection backend unreachable or rejected the call
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorSeverity(str, Enum):
    """How loudly a failure is reported; user mistakes are warnings."""

    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class ServiceError:
    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    field: Optional[str] = None
    details: Dict[str, Any] = dataclass_field(default_factory=dict)
    occurred_at: datetime = dataclass_field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "severity": self.severity.value,
            "field": self.field,
            "details": self.details,
            "occurred_at": self.occurred_at.isoformat(),
        }


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Success or failure of one service operation.

    Truthy on success, so callers can write `if not result: return result`
    to pass a failure through unchanged.
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    metadata: Dict[str, Any] = dataclass_field(default_factory=dict)

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message, metadata=dict(metadata or {}))

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def validation_failure(
        cls,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        """Rejected input; `message` is shown to the user as is."""
        return cls.failure(
            ServiceError(
                code=ErrorCode.VALIDATION_ERROR,
                message=message,
                severity=ErrorSeverity.WARNING,
                field=field,
                details=dict(details or {}),
            )
        )

    @classmethod
    def forbidden(cls, action: str, required_role: Optional[str] = None) -> "ServiceResult[TData]":
        return cls.failure(
            ServiceError(
                code=ErrorCode.INSUFFICIENT_PERMISSIONS,
                message=f"Not allowed to {action}",
                severity=ErrorSeverity.WARNING,
                details={"action": action, "required_role": required_role},
            )
        )

    @classmethod
    def rule_violation(cls, rule_name: str, message: str) -> "ServiceResult[TData]":
        return cls.failure(
            ServiceError(
                code=ErrorCode.BUSINESS_RULE_VIOLATION,
                message=message,
                severity=ErrorSeverity.WARNING,
                details={"rule": rule_name},
            )
        )

    @classmethod
    def not_found(cls, resource_type: str, resource_id: Optional[str] = None) -> "ServiceResult[TData]":
        suffix = f" (ID: {resource_id})" if resource_id else ""
        return cls.failure(
            ServiceError(
                code=ErrorCode.NOT_FOUND,
                message=f"{resource_type} not found{suffix}",
                severity=ErrorSeverity.WARNING,
                details={"resource_type": resource_type, "resource_id": resource_id},
            )
        )

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    def unwrap(self) -> TData:
        """
        Raises:
            ValueError: If the result is a failure
        """
        if not self.is_success:
            reason = self.error.message if self.error else "unknown error"
            raise ValueError(f"Cannot unwrap failed result: {reason}")
        return self.data

    def __bool__(self) -> bool:
        return self.is_success

    def __repr__(self) -> str:
        if self.is_success:
            return f"ServiceResult(success, message={self.message!r})"
        code = self.error.code.value if self.error else None
        return f"ServiceResult(failure, code={code}, message={self.message!r})"


__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
