"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, business rules)
    - Exceptions: Use for unexpected failures (database errors, bugs)

Usage:
    from core.services import BaseService, ServiceResult

    class WithdrawalService(BaseService):
        @classmethod
        def process_withdrawal(cls, user, amount) -> ServiceResult[dict]:
            if amount < 20:
                return ServiceResult.failure(
                    "Minimum withdrawal is $20",
                    error_code="INVALID_INPUT",
                )
            ...
            return ServiceResult.success({"transferId": transfer.id})

    # In view
    result = WithdrawalService.process_withdrawal(request.user, amount)
    if result.success:
        return Response(result.data)
    return Response(result.to_response(), status=result.status_code)

Related:
    - core.exceptions: Exception hierarchy converted by from_exception()
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        status_code: HTTP status the API layer should respond with
        errors: Field-level errors for validation failures

    Usage:
        # Success case
        return ServiceResult.success({"processed": 3})

        # Failure case
        return ServiceResult.failure(
            "Insufficient balance. Available: $15.00",
            error_code="INSUFFICIENT_BALANCE",
        )

        # Check result
        result = CreditPurchaseService.confirm_payment(user, intent_id)
        if result.success:
            balance = result.data["newBalance"]
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    status_code: int = 200
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        status_code: int = 400,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            status_code: HTTP status for the API response (default 400)
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            status_code=status_code,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their message, code and status. Any
        other exception becomes a generic 500 so internals never leak.

        Args:
            exc: The caught exception
            error_code: Optional override for the error code

        Returns:
            ServiceResult with error details from exception
        """
        if isinstance(exc, BaseApplicationError):
            return cls(
                success=False,
                error=exc.message,
                error_code=error_code or exc.error_code,
                status_code=exc.status_code,
            )
        return cls(
            success=False,
            error="Internal server error",
            error_code=error_code or "SERVER_ERROR",
            status_code=500,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert a failed result to the API error body.

        Returns:
            Dict with error and error_code (plus field errors if any)
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {"error": self.error}
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception handling patterns

    Design Notes:
        - Use @classmethod (no instance state)
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        Thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.

        Example:
            with cls.atomic():
                WalletLedger.debit_balance(user, credits, ...)
                Message.objects.create(...)
                # If message creation fails, the debit is rolled back
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert exception to ServiceResult with logging.

        Application errors are logged at the given level without a
        traceback; anything else is logged with one.

        Args:
            exc: The caught exception
            context: Step name included in the log message
            log_level: Logging level (default ERROR)

        Returns:
            ServiceResult with error details
        """
        logger = cls.get_logger()
        message = f"{context}: {exc}" if context else str(exc)
        logger.log(
            log_level,
            message,
            exc_info=not isinstance(exc, BaseApplicationError),
        )
        return ServiceResult.from_exception(exc)
