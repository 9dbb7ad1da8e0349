"""
Base exception classes for application-wide error handling.

This module provides the exception hierarchy shared by every billing
component. Each exception carries:
- A human-readable message (safe to show to the caller)
- A machine-readable error code
- The HTTP status the API layer responds with

Exception Hierarchy:
    BaseApplicationError (base, 400)
    ├── ValidationError - Invalid input (400)
    ├── UnauthenticatedError - Missing or invalid credentials (401)
    ├── PermissionDeniedError - Role or ownership mismatch (403)
    ├── NotFoundError - Resource not found (404)
    └── InfrastructureError - Database/configuration failures (500)

Usage:
    from core.exceptions import ValidationError, NotFoundError

    # Raise with message only
    raise ValidationError("Amount must be a valid number")

    # Raise with error code and details
    raise NotFoundError(
        "No Stripe account found",
        error_code="ACCOUNT_NOT_FOUND",
        details={"user_id": str(user.id)},
    )

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=e.status_code)

Note:
    api_exception_handler is registered as DRF's EXCEPTION_HANDLER so an
    escaped BaseApplicationError renders as {error, error_code} with its
    own status instead of a 500.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any

    from rest_framework.response import Response

logger = logging.getLogger(__name__)


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (never includes secrets)
        status_code: HTTP status used when rendered by the API layer

    Example:
        try:
            WithdrawalService.process_withdrawal(user, amount)
        except BaseApplicationError as e:
            logger.warning(f"Withdrawal rejected: {e.error_code}")
            return Response(e.to_dict(), status=e.status_code)
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and (when present) details keys

        Example:
            {
                "error": "Minimum withdrawal is $20",
                "error_code": "INVALID_INPUT",
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when request input is invalid.

    Use for:
    - Unknown credit package ids
    - Withdrawal amounts that are non-numeric or out of bounds
    - Malformed payment intent ids
    - Empty or oversized message content

    Example:
        raise ValidationError(
            "Invalid package. Must be one of: starter, popular, premium, vip",
            details={"package_id": package_id},
        )
    """

    default_error_code: str = "INVALID_INPUT"
    status_code: int = 400


class UnauthenticatedError(BaseApplicationError):
    """
    Raised when the caller could not be identified.

    Use for missing/invalid bearer tokens on machine endpoints. User
    endpoints rely on DRF's JWTAuthentication, which raises its own
    NotAuthenticated/AuthenticationFailed.
    """

    default_error_code: str = "UNAUTHORIZED"
    status_code: int = 401


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when the caller is identified but not allowed.

    Use for:
    - Updating the payout schedule of an account the caller does not own
    - Bulk operations restricted to admins
    - Sending into a conversation the caller is not part of

    Example:
        if not user.is_admin:
            raise PermissionDeniedError("Admin access required")
    """

    default_error_code: str = "FORBIDDEN"
    status_code: int = 403


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Example:
        account = ConnectedAccount.objects.filter(user=user).first()
        if not account:
            raise NotFoundError("No Stripe account found")
    """

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404


class InfrastructureError(BaseApplicationError):
    """
    Raised for database or configuration failures.

    Machine endpoints render these with a generic message; the
    underlying cause is only logged server-side.
    """

    default_error_code: str = "SERVER_ERROR"
    status_code: int = 500


def api_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """
    DRF exception handler that understands BaseApplicationError.

    Application errors become {error, error_code[, details]} with the
    exception's status. DRF's own exceptions (serializer errors,
    NotAuthenticated, MethodNotAllowed) keep their status but are
    reshaped into the same body.

    Args:
        exc: The raised exception
        context: DRF handler context (view, request, args, kwargs)

    Returns:
        Response, or None to let Django produce a 500
    """
    # rest_framework.views loads the auth classes; not importable while apps load
    from rest_framework import exceptions as drf_exceptions
    from rest_framework.response import Response
    from rest_framework.views import exception_handler

    if isinstance(exc, BaseApplicationError):
        if exc.status_code >= 500:
            logger.error(
                "Unhandled application error",
                extra={
                    "error_code": exc.error_code,
                    "view": context.get("view").__class__.__name__,
                },
                exc_info=exc,
            )
            return Response(
                {"error": "Internal server error", "error_code": exc.error_code},
                status=exc.status_code,
            )
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    # Reshape DRF's own errors into {error, error_code}
    if isinstance(exc, drf_exceptions.ValidationError):
        response.data = {
            "error": _first_message(exc.detail) or "Invalid input",
            "error_code": "INVALID_INPUT",
            "errors": exc.detail,
        }
    elif isinstance(exc, drf_exceptions.APIException):
        response.data = {
            "error": str(exc.detail),
            "error_code": DRF_ERROR_CODES.get(response.status_code, "API_ERROR"),
        }
    return response


DRF_ERROR_CODES = {
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    415: "UNSUPPORTED_MEDIA_TYPE",
    429: "RATE_LIMITED",
}


def _first_message(detail: Any) -> str | None:
    """Return the first error string nested in a DRF ValidationError detail."""
    if isinstance(detail, dict):
        for value in detail.values():
            message = _first_message(value)
            if message:
                return message
        return None
    if isinstance(detail, list):
        for value in detail:
            message = _first_message(value)
            if message:
                return message
        return None
    return str(detail) if detail else None
