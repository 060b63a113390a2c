# core/errors.py

from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from models.enums import BaseStrEnum


class ErrorCode(BaseStrEnum):
    """Stable error codes returned in the `error` field of failure payloads."""

    missing_field = "missing_field"
    invalid_value = "invalid_value"
    nothing_to_update = "nothing_to_update"
    weak_password = "weak_password"
    not_found = "not_found"
    forbidden = "forbidden"
    plan_limit_exceeded = "plan_limit_exceeded"
    conflict = "conflict"
    rate_limited = "rate_limited"
    email_not_verified = "email_not_verified"
    invalid_token = "invalid_token"
    invalid_credentials = "invalid_credentials"
    unauthorized = "unauthorized"
    provider_not_configured = "provider_not_configured"
    internal_error = "internal_error"


# Default HTTP status for each code. Callers may override.
STATUS_FOR_CODE = {
    ErrorCode.missing_field: 400,
    ErrorCode.invalid_value: 400,
    ErrorCode.nothing_to_update: 400,
    ErrorCode.weak_password: 400,
    ErrorCode.invalid_token: 400,
    ErrorCode.invalid_credentials: 401,
    ErrorCode.unauthorized: 401,
    ErrorCode.forbidden: 403,
    ErrorCode.plan_limit_exceeded: 403,
    ErrorCode.email_not_verified: 403,
    ErrorCode.not_found: 404,
    ErrorCode.conflict: 409,
    ErrorCode.rate_limited: 429,
    ErrorCode.provider_not_configured: 500,
    ErrorCode.internal_error: 500,
}

DEFAULT_MESSAGES = {
    ErrorCode.missing_field: "Required field missing",
    ErrorCode.invalid_value: "Invalid value",
    ErrorCode.nothing_to_update: "No updatable fields supplied",
    ErrorCode.weak_password: "Password too short",
    ErrorCode.not_found: "Resource not found",
    ErrorCode.forbidden: "You do not have access to this resource",
    ErrorCode.plan_limit_exceeded: "Plan limit reached",
    ErrorCode.conflict: "Conflicting value",
    ErrorCode.rate_limited: "Too many attempts, try again later",
    ErrorCode.email_not_verified: "Email address not verified",
    ErrorCode.invalid_token: "Invalid or expired token",
    ErrorCode.invalid_credentials: "Invalid email or password",
    ErrorCode.unauthorized: "Invalid or expired authentication token",
    ErrorCode.provider_not_configured: "Identity provider not configured",
    ErrorCode.internal_error: "Internal server error",
}


class ApiError(HTTPException):
    """
    HTTPException carrying a stable ErrorCode.

    `detail` is the human-readable message; `field` optionally names the
    offending input. Rendered by the handlers in main.create_app as
    {"error": code, "detail": message[, "field": field]}.
    """

    def __init__(
        self,
        code: ErrorCode,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        field: Optional[str] = None,
        headers: Optional[dict] = None,
    ):
        self.code = code
        self.field = field
        super().__init__(
            status_code=status_code or STATUS_FOR_CODE.get(code, 400),
            detail=detail or DEFAULT_MESSAGES.get(code, str(code)),
            headers=headers,
        )

    def to_payload(self) -> dict:
        payload = {"error": self.code.value, "detail": self.detail}
        if self.field:
            payload["field"] = self.field
        return payload


def error_code_for_status(status_code: int) -> ErrorCode:
    """Best-effort code for plain HTTPExceptions raised by FastAPI/Starlette."""
    if status_code == 401:
        return ErrorCode.unauthorized
    if status_code == 403:
        return ErrorCode.forbidden
    if status_code == 404:
        return ErrorCode.not_found
    if status_code == 409:
        return ErrorCode.conflict
    if status_code == 429:
        return ErrorCode.rate_limited
    if status_code >= 500:
        return ErrorCode.internal_error
    return ErrorCode.invalid_value


def handle_db_error(error: Exception, operation: str = "Database operation") -> ApiError:
    """
    Convert persistence errors into ApiError.
    Returns (doesn't raise) so the caller can re-raise with `raise ... from`.

    Integrity violations (duplicate unique value, dangling or still-referenced
    foreign key) become `conflict`; everything else is an internal error whose
    detail is logged but not exposed.
    """
    from core.logging_config import logger

    if isinstance(error, IntegrityError):
        logger.warning(f"{operation}: integrity violation: {error.orig}")
        return ApiError(ErrorCode.conflict, f"{operation}: conflicting or still-referenced record")

    logger.error(f"{operation}: {error}", exc_info=error)
    return ApiError(ErrorCode.internal_error)
