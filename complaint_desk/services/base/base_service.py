"""
Base class for complaint desk services.

Subclasses wrap each public operation in try/except and hand anything
raised to `_handle_exception`, which turns it into a failed
ServiceResult. Expected failures (bad input, wrong role, closed thread,
missing record) become quiet warnings; backend and programming errors
are logged with a traceback.
"""

from typing import Any, Dict, Optional, Tuple, Type

from complaint_desk.backend import (
    BackendAuthorizationError,
    BackendConstraintError,
    BackendError,
    CollectionClient,
)
from complaint_desk.config.logging import get_logger
from complaint_desk.core.context import ActorContext
from complaint_desk.core.exceptions import (
    AuthorizationError,
    BusinessRuleViolation,
    NotFoundError,
    ValidationError,
)
from complaint_desk.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

# First match wins, so subclasses precede BackendError
ERROR_CODES: Tuple[Tuple[Type[BaseException], ErrorCode], ...] = (
    (ValidationError, ErrorCode.VALIDATION_ERROR),
    (AuthorizationError, ErrorCode.INSUFFICIENT_PERMISSIONS),
    (BusinessRuleViolation, ErrorCode.BUSINESS_RULE_VIOLATION),
    (NotFoundError, ErrorCode.NOT_FOUND),
    (BackendAuthorizationError, ErrorCode.INSUFFICIENT_PERMISSIONS),
    (BackendConstraintError, ErrorCode.VALIDATION_ERROR),
    (BackendError, ErrorCode.EXTERNAL_SERVICE_ERROR),
)


class BaseService:
    """
    Holds the collection client and a module logger, converts exceptions
    into ServiceResults and provides role guards.
    """

    def __init__(self, client: CollectionClient):
        self.client = client
        self._logger = get_logger(self.__class__.__module__)

    # -------------------------------------------------------------------------
    # Error handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Args:
            exception: What the operation raised
            operation: Human phrase, e.g. "resolve complaint"
            entity_ref: Complaint or user id the operation was about
            additional_context: Extra fields for the error log record
        """
        if isinstance(exception, ValidationError):
            return ServiceResult.validation_failure(
                exception.message, field=exception.field, details=exception.details
            )
        if isinstance(exception, AuthorizationError):
            self._logger.warning(f"Denied {operation}: {exception.message}")
            return ServiceResult.forbidden(operation, required_role=exception.required_role)
        if isinstance(exception, BusinessRuleViolation):
            return ServiceResult.rule_violation(exception.rule_name, exception.message)
        if isinstance(exception, NotFoundError):
            return ServiceResult.not_found(exception.resource_type, exception.identifier)

        ref = str(entity_ref) if entity_ref is not None else None
        context = {"operation": operation, "entity_ref": ref, "exception_type": type(exception).__name__}
        context.update(additional_context or {})
        self._logger.error(f"Error during {operation}: {exception}", exc_info=True, extra=context)

        return ServiceResult.failure(
            ServiceError(
                code=self._map_exception_to_error_code(exception),
                message=f"Failed to {operation}",
                severity=ErrorSeverity.ERROR,
                details={"error": str(exception), "entity_ref": ref},
            )
        )

    def _map_exception_to_error_code(self, exception: BaseException) -> ErrorCode:
        for exc_type, error_code in ERROR_CODES:
            if isinstance(exception, exc_type):
                return error_code
        return ErrorCode.INTERNAL_ERROR

    # -------------------------------------------------------------------------
    # Role guards
    # -------------------------------------------------------------------------

    def _require_admin(self, actor: ActorContext, action: str) -> None:
        if not actor.is_admin:
            raise AuthorizationError(f"Only administrators may {action}", required_role="admin")

    def _require_super_admin(self, actor: ActorContext, action: str) -> None:
        if not actor.is_super_admin:
            raise AuthorizationError(
                f"Only super administrators may {action}", required_role="super_admin"
            )

    def _require_student(self, actor: ActorContext, action: str) -> None:
        if not actor.is_student:
            raise AuthorizationError(f"Only students may {action}", required_role="student")
