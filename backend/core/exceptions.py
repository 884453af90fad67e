"""
Domain exceptions for the Community Operations backend.

All exceptions follow the standard error format:
{
    "error": {
        "code": "ERROR_CODE",
        "message": "Human-readable description",
        "details": {}
    }
"""

from rest_framework import exceptions as drf_exceptions
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger(__name__)


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, code, message, details=None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DomainError):
    """Validation error - request body or parameters fail validation."""

    def __init__(self, message, details=None):
        super().__init__("VALIDATION_ERROR", message, details)


class InvalidStateError(DomainError):
    """Entity is not in the required state for the operation."""

    def __init__(self, message, details=None):
        super().__init__("INVALID_STATE", message, details)


class NotFoundError(DomainError):
    """Requested resource does not exist (or must look like it does not)."""

    def __init__(self, message, details=None):
        super().__init__("NOT_FOUND", message, details)


class AuthenticationRequiredError(DomainError):
    """Caller is anonymous and the action needs an identity."""

    def __init__(self, message="Authentication required", details=None):
        super().__init__("UNAUTHORIZED", message, details)


class PermissionDeniedError(DomainError):
    """Authenticated user lacks the required role or ownership."""

    def __init__(self, message, details=None):
        super().__init__("FORBIDDEN", message, details)


class ConflictError(DomainError):
    """Request conflicts with existing state."""

    def __init__(self, message, details=None, code="CONFLICT"):
        super().__init__(code, message, details)


class AlreadyRegisteredError(ConflictError):
    """An active registration already exists for the (subject, actor) pair."""

    def __init__(self, message, details=None):
        super().__init__(message, details, code="ALREADY_REGISTERED")


class CapacityExceededError(DomainError):
    """Admission denied because the capacity ceiling is reached."""

    def __init__(self, message, details=None):
        super().__init__("CAPACITY_EXCEEDED", message, details)


class IntegrityViolationError(DomainError):
    """Stored state contradicts an invariant (e.g. decrementing a zero counter)."""

    def __init__(self, message, details=None):
        super().__init__("INTEGRITY_VIOLATION", message, details)


class StorageError(DomainError):
    """Transaction could not commit. Reads are safe to retry."""

    def __init__(self, message, details=None):
        details = {"retryable": True, **(details or {})}
        super().__init__("STORAGE_FAILURE", message, details)


STATUS_CODE_MAP = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "ALREADY_REGISTERED": status.HTTP_409_CONFLICT,
    "CAPACITY_EXCEEDED": status.HTTP_409_CONFLICT,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "INTEGRITY_VIOLATION": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "STORAGE_FAILURE": status.HTTP_503_SERVICE_UNAVAILABLE,
}

# DRF's own exceptions, folded into the same envelope
DRF_CODE_MAP = {
    drf_exceptions.ValidationError: "VALIDATION_ERROR",
    drf_exceptions.ParseError: "VALIDATION_ERROR",
    drf_exceptions.NotAuthenticated: "UNAUTHORIZED",
    drf_exceptions.AuthenticationFailed: "UNAUTHORIZED",
    drf_exceptions.PermissionDenied: "FORBIDDEN",
    drf_exceptions.NotFound: "NOT_FOUND",
    drf_exceptions.MethodNotAllowed: "METHOD_NOT_ALLOWED",
    drf_exceptions.Throttled: "THROTTLED",
}


def error_body(code, message, details=None):
    return {"error": {"code": code, "message": message, "details": details or {}}}


def domain_exception_handler(exc, context):
    """
    Custom exception handler for domain exceptions.

    Returns standard error format:
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable description",
            "details": {}
        }
    }
    """
    if isinstance(exc, DomainError):
        status_code = STATUS_CODE_MAP.get(exc.code, status.HTTP_400_BAD_REQUEST)
        if status_code >= 500:
            logger.error(
                "domain_error",
                extra={"code": exc.code, "error_message": exc.message},
            )
        return Response(
            error_body(exc.code, exc.message, exc.details), status=status_code
        )

    response = exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled exception", exc_info=exc)
        return Response(
            error_body("INTERNAL_ERROR", "An internal error occurred"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = "INTERNAL_ERROR"
    for exc_class, mapped in DRF_CODE_MAP.items():
        if isinstance(exc, exc_class):
            code = mapped
            break

    if isinstance(response.data, dict) and "detail" in response.data:
        response.data = error_body(code, str(response.data["detail"]))
    else:
        response.data = error_body(code, "Request validation failed", response.data)

    return response
