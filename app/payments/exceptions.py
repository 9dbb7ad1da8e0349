"""
Payment-specific exceptions for billing operations.

Exception Hierarchy:
    PaymentError (base for payment domain, 400)
    ├── AccountNotReadyError - Payout account missing or not onboarded (400)
    ├── PaymentSystemUnavailableError - Stripe not configured (503)
    └── PaymentProcessingError - Processor failures (502)
        └── StripeError - Base for all Stripe errors
            ├── StripeCardDeclinedError - Card declined (permanent)
            ├── StripeInsufficientFundsError - Platform balance too low (permanent)
            ├── StripeInvalidAccountError - Invalid connected account (permanent)
            ├── StripeInvalidRequestError - Invalid request params (permanent)
            ├── StripeRateLimitError - Rate limited (transient, retry)
            ├── StripeAPIUnavailableError - API unavailable (transient, retry)
            └── StripeTimeoutError - Request timeout (transient, retry)

Usage:
    from payments.exceptions import AccountNotReadyError, StripeError

    if not account or not account.is_ready_for_payouts:
        raise AccountNotReadyError("Please complete bank account setup first")

    try:
        StripeAdapter.create_transfer(...)
    except StripeError as e:
        if e.is_retryable:
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """
    Base exception for all payment operations.

    Inherits from BaseApplicationError so views and the DRF exception
    handler render it as {error, error_code} with its status.
    """

    default_error_code: str = "PAYMENT_ERROR"


class AccountNotReadyError(PaymentError):
    """
    Raised when an earner cannot receive money yet.

    Covers a missing ConnectedAccount and one whose onboarding is not
    complete.
    """

    default_error_code: str = "ACCOUNT_NOT_READY"
    status_code: int = 400


class PaymentSystemUnavailableError(PaymentError):
    """
    Raised when the payment processor is not configured.

    The message shown to callers is always "Payment system not configured";
    which setting is missing is only logged.
    """

    default_error_code: str = "PAYMENT_SYSTEM_UNAVAILABLE"
    status_code: int = 503


class PaymentProcessingError(PaymentError):
    """
    Raised when the payment processor rejects or fails an operation.

    Rendered as 502: the request was valid but the upstream call failed.
    """

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"
    status_code: int = 502


# =============================================================================
# Stripe-Specific Exceptions
# =============================================================================


class StripeError(PaymentProcessingError):
    """
    Base exception for all Stripe-related errors.

    Attributes:
        stripe_code: Stripe's error code, when present
        decline_code: Card decline code, when present
        is_retryable: True for transient errors that are safe to retry
            with the same idempotency key
    """

    default_error_code: str = "STRIPE_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class StripeCardDeclinedError(StripeError):
    """Card was declined by the issuing bank."""

    default_error_code: str = "CARD_DECLINED"


class StripeInsufficientFundsError(StripeError):
    """
    Not enough funds for the operation.

    For transfers this means the platform's Stripe balance cannot
    cover the payout; it needs operator action, not a retry.
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"


class StripeInvalidAccountError(StripeError):
    """
    The destination connected account cannot receive transfers.

    Disabled, restricted or deleted accounts end up here.
    """

    default_error_code: str = "INVALID_STRIPE_ACCOUNT"


class StripeInvalidRequestError(StripeError):
    """
    Stripe rejected the request parameters.

    Usually a bug on our side (unknown id, bad amount). Logged for
    investigation; never retried.
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class StripeRateLimitError(StripeError):
    """Rate limited by the Stripe API."""

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """Network failure or Stripe 5xx."""

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


class StripeTimeoutError(StripeError):
    """
    Stripe API call timed out.

    The operation may have succeeded on Stripe's side; retries must
    reuse the same idempotency key.
    """

    default_error_code: str = "STRIPE_TIMEOUT"
    is_retryable: bool = True


__all__ = [
    "PaymentError",
    "AccountNotReadyError",
    "PaymentSystemUnavailableError",
    "PaymentProcessingError",
    "StripeError",
    "StripeCardDeclinedError",
    "StripeInsufficientFundsError",
    "StripeInvalidAccountError",
    "StripeInvalidRequestError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
    "StripeTimeoutError",
]
