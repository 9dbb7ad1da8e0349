"""
Payment adapters for external services.

All Stripe calls go through StripeAdapter so error handling, timeouts,
idempotency and logging stay consistent.

Usage:
    from payments.adapters import StripeAdapter, CreatePaymentIntentParams

    result = StripeAdapter.create_payment_intent(
        CreatePaymentIntentParams(amount_cents=5000, customer_id="cus_123")
    )
"""

from payments.adapters.stripe_adapter import (
    ConnectAccountStatus,
    CreatePaymentIntentParams,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    StripeAdapter,
    TransferResult,
)

__all__ = [
    "ConnectAccountStatus",
    "CreatePaymentIntentParams",
    "IdempotencyKeyGenerator",
    "PaymentIntentResult",
    "StripeAdapter",
    "TransferResult",
]
