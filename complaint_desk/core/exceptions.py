"""
Application exceptions.

Raised by the synchronisation layer and by service internals; service
methods convert them into ServiceResult failures before they reach the
API layer.
"""
from __future__ import annotations

from typing import Any, Optional


class BaseAppException(Exception):
    """Base exception for all application-level errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(BaseAppException):
    """Raised when local, pre-flight validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


class AuthorizationError(BaseAppException):
    """Raised when the current actor lacks the role for an action."""

    def __init__(
        self,
        message: str = "Authorization failed",
        required_role: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.required_role = required_role


class NotFoundError(BaseAppException):
    """Raised when a referenced resource does not exist."""

    def __init__(
        self,
        resource_type: str,
        identifier: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class BusinessRuleViolation(BaseAppException):
    """Raised when a business rule is violated."""

    def __init__(
        self,
        rule_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.rule_name = rule_name


def validation_error_from_pydantic(exc: Any) -> ValidationError:
    """
    Convert a pydantic ValidationError into a field-scoped ValidationError
    carrying the first error's message.
    """
    errors = exc.errors()
    if not errors:
        return ValidationError("Invalid input")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or None
    ctx_error = (first.get("ctx") or {}).get("error")
    message = str(ctx_error) if ctx_error is not None else first.get("msg", "Invalid input")
    return ValidationError(message, field=field, details={"errors": len(errors)})
