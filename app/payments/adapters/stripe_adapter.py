"""
Stripe API adapter with timeout, error handling, and idempotency support.

This module is the single point of contact with Stripe for the billing
service. It provides:
- Timeouts on every API call
- Translation of Stripe SDK errors into payments.exceptions classes
- Idempotency key generation for safe retries of money movement
- Structured logging with timing metrics

Operations:
    find_or_create_customer: Resolve the Stripe customer for an email
    create_payment_intent: Start a credit purchase
    retrieve_payment_intent: Read back an intent to confirm a purchase
    create_transfer: Pay an earner's connected account
    update_payout_schedule: Set a connected account's automatic payouts
    create_connected_account: Open an Express account for an earner
    retrieve_account: Read an account's onboarding state
    create_account_link: Hosted onboarding URL for an account
    construct_webhook_event: Verify and parse a webhook payload

Usage:
    from payments.adapters.stripe_adapter import (
        CreatePaymentIntentParams,
        IdempotencyKeyGenerator,
        StripeAdapter,
    )

    result = StripeAdapter.create_payment_intent(
        CreatePaymentIntentParams(
            amount_cents=5000,
            customer_id="cus_123",
            metadata={"user_id": str(user.id), "package_id": "starter", "credits": "500"},
        )
    )
    result.client_secret

Error Handling:
    All Stripe SDK errors are translated to domain exceptions:
    - stripe.CardError -> StripeCardDeclinedError or StripeInsufficientFundsError
    - stripe.InvalidRequestError -> StripeInvalidRequestError or StripeInvalidAccountError
    - stripe.RateLimitError -> StripeRateLimitError (retryable)
    - stripe.APIConnectionError -> StripeAPIUnavailableError (retryable)
    - stripe.APIError -> StripeAPIUnavailableError (retryable)
    - stripe.AuthenticationError -> StripeInvalidRequestError
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings

from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeCardDeclinedError,
    StripeInsufficientFundsError,
    StripeInvalidAccountError,
    StripeInvalidRequestError,
    StripeRateLimitError,
)

# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class CreatePaymentIntentParams:
    """
    Parameters for creating a Stripe PaymentIntent.

    Attributes:
        amount_cents: Amount in smallest currency unit (cents for USD)
        currency: Three-letter ISO currency code (default: 'usd')
        customer_id: Stripe customer the intent is created for
        metadata: String key/value pairs echoed back on the intent
        idempotency_key: Optional key for safe retries
    """

    amount_cents: int
    currency: str = "usd"
    customer_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    idempotency_key: str | None = None

    def __post_init__(self):
        if self.amount_cents <= 0:
            raise ValueError("amount_cents must be positive")
        if not self.currency:
            raise ValueError("currency is required")


@dataclass
class PaymentIntentResult:
    """
    Result from Stripe PaymentIntent operations.

    Attributes:
        id: Stripe PaymentIntent ID (pi_xxx)
        status: PaymentIntent status (succeeded, requires_payment_method, ...)
        amount_cents: Amount in cents
        currency: Currency code
        client_secret: Secret for client-side confirmation (only on create)
        metadata: Metadata attached to the intent
        raw_response: Full Stripe response for debugging
    """

    id: str
    status: str
    amount_cents: int
    currency: str
    client_secret: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@dataclass
class TransferResult:
    """
    Result from Stripe Transfer operations.

    Attributes:
        id: Stripe Transfer ID (tr_xxx)
        amount_cents: Amount transferred in cents
        currency: Currency code
        destination_account: Connected account ID (acct_xxx)
        metadata: Metadata attached to the transfer
        raw_response: Full Stripe response for debugging
    """

    id: str
    amount_cents: int
    currency: str
    destination_account: str
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class ConnectAccountStatus:
    """
    Onboarding state of a Stripe Connect account.

    Attributes:
        id: Stripe Account ID (acct_xxx)
        details_submitted: Whether the earner finished the onboarding form
        payouts_enabled: Whether Stripe allows payouts to the account
        charges_enabled: Whether the account can accept charges
        raw_response: Full Stripe response for debugging
    """

    id: str
    details_submitted: bool = False
    payouts_enabled: bool = False
    charges_enabled: bool = False
    raw_response: dict[str, Any] = field(default_factory=dict)

    @property
    def onboarding_complete(self) -> bool:
        return self.details_submitted and self.payouts_enabled

    @classmethod
    def from_stripe(cls, account: Any) -> ConnectAccountStatus:
        """Build from a Stripe Account object or an account.updated payload dict."""
        data = account if isinstance(account, dict) else account.to_dict()
        return cls(
            id=data.get("id"),
            details_submitted=bool(data.get("details_submitted")),
            payouts_enabled=bool(data.get("payouts_enabled")),
            charges_enabled=bool(data.get("charges_enabled")),
            raw_response=data,
        )


# =============================================================================
# Idempotency Key Generation
# =============================================================================


class IdempotencyKeyGenerator:
    """
    Generate idempotency keys for Stripe operations.

    Format: {operation}:{entity_id}:{attempt}:{short_hash}

    The same inputs always produce the same key, so a retried transfer for
    one withdrawal can never pay twice. Bump attempt only when a new
    charge is intended.

    Example:
        key = IdempotencyKeyGenerator.generate(
            operation="withdrawal_transfer",
            entity_id=withdrawal.id,
        )
        # "withdrawal_transfer:550e8400-e29b-41d4-a716-446655440000:1:a1b2c3d4"
    """

    @staticmethod
    def generate(
        operation: str,
        entity_id: uuid.UUID | str,
        attempt: int = 1,
    ) -> str:
        """
        Generate a deterministic idempotency key.

        Args:
            operation: The Stripe operation (withdrawal_transfer, ...)
            entity_id: The domain entity ID (withdrawal id, ...)
            attempt: Attempt number (default: 1)

        Returns:
            Formatted idempotency key string
        """
        entity_str = str(entity_id)
        hash_input = f"{operation}:{entity_str}:{attempt}:{settings.SECRET_KEY}"
        short_hash = hashlib.sha256(hash_input.encode()).hexdigest()[:8]

        return f"{operation}:{entity_str}:{attempt}:{short_hash}"


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are class methods; no instance state is kept, so the
    adapter is safe to use from request handlers and Celery workers alike.

    Configuration (via settings):
    - STRIPE_SECRET_KEY: Stripe API secret key
    - STRIPE_WEBHOOK_SECRET: Signing secret for webhook payloads
    - STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def is_configured() -> bool:
        """Whether a Stripe secret key is set."""
        return bool(getattr(settings, "STRIPE_SECRET_KEY", ""))

    @staticmethod
    def _configure_stripe() -> None:
        """Configure Stripe client with API key and timeout."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Customers
    # =========================================================================

    @classmethod
    def find_or_create_customer(cls, email: str, user_id: str) -> str:
        """
        Return the id of the Stripe customer for email, creating one if needed.

        Args:
            email: Customer email used for lookup
            user_id: Our user id, stored in customer metadata on create

        Returns:
            Stripe customer ID (cus_xxx)
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": "find_or_create_customer", "user_id": user_id}

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            existing = stripe.Customer.list(email=email, limit=1)
            if existing.data:
                customer_id = existing.data[0].id
                created = False
            else:
                customer = stripe.Customer.create(
                    email=email,
                    metadata={"user_id": user_id},
                )
                customer_id = customer.id
                created = True

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "customer_id": customer_id,
                    "customer_created": created,
                    "duration_ms": duration_ms,
                },
            )
            return customer_id

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Payment Intents
    # =========================================================================

    @classmethod
    def create_payment_intent(cls, params: CreatePaymentIntentParams) -> PaymentIntentResult:
        """
        Create a Stripe PaymentIntent with automatic payment methods.

        Args:
            params: Parameters for creating the PaymentIntent

        Returns:
            PaymentIntentResult including client_secret

        Raises:
            StripeInvalidRequestError: Invalid parameters
            StripeAPIUnavailableError: Stripe service unavailable
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_payment_intent",
            "amount_cents": params.amount_cents,
            "currency": params.currency,
            "customer_id": params.customer_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            create_params: dict[str, Any] = {
                "amount": params.amount_cents,
                "currency": params.currency,
                "customer": params.customer_id,
                "automatic_payment_methods": {"enabled": True},
                "metadata": params.metadata,
            }
            if params.idempotency_key:
                create_params["idempotency_key"] = params.idempotency_key

            intent = stripe.PaymentIntent.create(**create_params)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "payment_intent_id": intent.id,
                    "status": intent.status,
                    "duration_ms": duration_ms,
                },
            )

            return cls._intent_result(intent)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_payment_intent(cls, payment_intent_id: str) -> PaymentIntentResult:
        """
        Retrieve a PaymentIntent by ID.

        Args:
            payment_intent_id: Stripe PaymentIntent ID (pi_xxx)

        Returns:
            PaymentIntentResult with current status and metadata

        Raises:
            StripeInvalidRequestError: PaymentIntent not found
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "retrieve_payment_intent",
            "payment_intent_id": payment_intent_id,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            intent = stripe.PaymentIntent.retrieve(payment_intent_id)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "status": intent.status,
                    "duration_ms": duration_ms,
                },
            )

            return cls._intent_result(intent)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Connect
    # =========================================================================

    @classmethod
    def create_transfer(
        cls,
        amount_cents: int,
        destination_account: str,
        idempotency_key: str,
        currency: str = "usd",
        metadata: dict[str, str] | None = None,
    ) -> TransferResult:
        """
        Create a transfer to a connected Stripe account.

        Args:
            amount_cents: Amount to transfer in cents
            destination_account: Stripe Connect account ID (acct_xxx)
            idempotency_key: Unique key for idempotent transfer
            currency: Currency code (default: 'usd')
            metadata: Optional metadata dict

        Returns:
            TransferResult with transfer details

        Raises:
            StripeInvalidAccountError: Invalid destination account
            StripeInsufficientFundsError: Insufficient platform balance
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_transfer",
            "amount_cents": amount_cents,
            "destination_account": destination_account,
            "idempotency_key": idempotency_key,
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            transfer = stripe.Transfer.create(
                amount=amount_cents,
                currency=currency,
                destination=destination_account,
                metadata=metadata or {},
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "transfer_id": transfer.id,
                    "duration_ms": duration_ms,
                },
            )

            return TransferResult(
                id=transfer.id,
                amount_cents=transfer.amount,
                currency=transfer.currency,
                destination_account=transfer.destination,
                metadata=dict(transfer.metadata or {}),
                raw_response=transfer.to_dict(),
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def update_payout_schedule(
        cls,
        account_id: str,
        schedule: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Set the automatic payout schedule of a connected account.

        Args:
            account_id: Stripe Connect account ID (acct_xxx)
            schedule: Stripe payout schedule, e.g.
                {"interval": "weekly", "weekly_anchor": "friday", "delay_days": 2}

        Returns:
            The schedule Stripe reports back for the account
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "update_payout_schedule",
            "account_id": account_id,
            "interval": schedule.get("interval"),
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            account = stripe.Account.modify(
                account_id,
                settings={"payouts": {"schedule": schedule}},
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )

            try:
                applied = account.settings.payouts.schedule.to_dict()
            except AttributeError:
                applied = dict(schedule)
            return applied

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def create_connected_account(
        cls,
        email: str,
        user_id: str,
        idempotency_key: str,
    ) -> ConnectAccountStatus:
        """
        Create an Express connected account for an earner.

        Args:
            email: Earner email prefilled on the Stripe form
            user_id: Our user id, stored in account metadata
            idempotency_key: Key so a retried onboarding never opens two accounts

        Returns:
            ConnectAccountStatus of the new account
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": "create_connected_account", "user_id": user_id}

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            account = stripe.Account.create(
                type="express",
                email=email,
                metadata={"user_id": user_id},
                capabilities={
                    "card_payments": {"requested": True},
                    "transfers": {"requested": True},
                },
                idempotency_key=idempotency_key,
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "account_id": account.id, "duration_ms": duration_ms},
            )
            return ConnectAccountStatus.from_stripe(account)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def retrieve_account(cls, account_id: str) -> ConnectAccountStatus:
        """Read the onboarding state of a connected account."""
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": "retrieve_account", "account_id": account_id}

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            account = stripe.Account.retrieve(account_id)

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "details_submitted": account.details_submitted,
                    "payouts_enabled": account.payouts_enabled,
                    "duration_ms": duration_ms,
                },
            )
            return ConnectAccountStatus.from_stripe(account)

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    @classmethod
    def create_account_link(
        cls,
        account_id: str,
        refresh_url: str,
        return_url: str,
    ) -> str:
        """
        Create a hosted onboarding link for a connected account.

        Returns:
            The single-use onboarding URL
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": "create_account_link", "account_id": account_id}

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            link = stripe.AccountLink.create(
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )
            return link.url

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    @classmethod
    def construct_webhook_event(
        cls,
        payload: bytes,
        signature: str,
    ) -> dict[str, Any]:
        """
        Verify and parse a Stripe webhook event.

        Args:
            payload: Raw webhook payload bytes
            signature: Stripe-Signature header value

        Returns:
            Parsed event data dict

        Raises:
            StripeInvalidRequestError: Invalid signature or payload
        """
        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                settings.STRIPE_WEBHOOK_SECRET,
            )
        except stripe.SignatureVerificationError as e:
            raise StripeInvalidRequestError(
                "Invalid webhook signature",
                stripe_code="signature_verification_failed",
                details={"error": str(e)},
            )
        except ValueError as e:
            raise StripeInvalidRequestError(
                "Invalid webhook payload",
                stripe_code="invalid_payload",
                details={"error": str(e)},
            )
        return event.to_dict()

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _intent_result(intent: Any) -> PaymentIntentResult:
        return PaymentIntentResult(
            id=intent.id,
            status=intent.status,
            amount_cents=intent.amount,
            currency=intent.currency,
            client_secret=intent.client_secret,
            metadata=dict(intent.metadata or {}),
            raw_response=intent.to_dict(),
        )

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Args:
            error: The Stripe exception
            log_context: Logging context dict
            duration_ms: Operation duration for logging

        Raises:
            StripeCardDeclinedError: Card was declined
            StripeInsufficientFundsError: Insufficient funds
            StripeInvalidAccountError: Invalid Connect account
            StripeInvalidRequestError: Invalid request parameters
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: API unavailable or unknown failure
        """
        logger = cls.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "decline_code": decline_code},
            )

            if decline_code == "insufficient_funds":
                raise StripeInsufficientFundsError(
                    str(error.user_message or error),
                    stripe_code=error.code,
                    decline_code=decline_code,
                )

            raise StripeCardDeclinedError(
                str(error.user_message or error),
                stripe_code=error.code,
                decline_code=decline_code,
            )

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )

            if error.code == "balance_insufficient":
                raise StripeInsufficientFundsError(
                    "Platform balance is too low for this transfer",
                    stripe_code=error.code,
                )

            if "account" in str(error).lower():
                raise StripeInvalidAccountError(
                    str(error.user_message or error),
                    stripe_code=error.code,
                )

            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            )

        elif isinstance(error, stripe.RateLimitError):
            logger.warning("Rate limited by Stripe", extra=log_context)
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            )

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            )

        elif isinstance(error, stripe.APIError):
            logger.error("Stripe API error", extra=log_context, exc_info=True)
            raise StripeAPIUnavailableError(
                "Stripe service error. Please retry.",
                stripe_code="api_error",
            )

        elif isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeInvalidRequestError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            )

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                "Unexpected Stripe error",
                stripe_code="unknown_error",
            )
