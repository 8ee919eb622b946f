"""
ServiceResult to HTTP translation.
"""

from typing import Any, Dict

from fastapi import HTTPException, status

from complaint_desk.services.base import ErrorCode, ServiceResult

ERROR_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INSUFFICIENT_PERMISSIONS: status.HTTP_403_FORBIDDEN,
    ErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.BUSINESS_RULE_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_detail(result: ServiceResult) -> Dict[str, Any]:
    error = result.error
    return {
        "code": error.code.value if error else ErrorCode.INTERNAL_ERROR.value,
        "message": result.message,
        "field": error.field if error else None,
    }


def unwrap_or_raise(result: ServiceResult) -> Any:
    """Return the result data or raise the matching HTTPException."""
    if result.is_success:
        return result.data
    code = result.error.code if result.error else ErrorCode.INTERNAL_ERROR
    raise HTTPException(
        status_code=ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error_detail(result),
    )
