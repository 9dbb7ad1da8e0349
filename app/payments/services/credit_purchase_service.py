"""
Credit purchase service: Stripe payment intents in, credits out.

This module handles the two steps of buying a credit package:
1. create_payment_intent: Price the package and open a Stripe PaymentIntent
2. confirm_payment: Verify the intent succeeded and credit the wallet

Crediting is idempotent on the PaymentIntent id. The unique
stripe_payment_id column on Transaction is the barrier: whichever of the
confirm endpoint and the webhook arrives second sees the existing row (or
loses the insert race) and reports "Payment already processed".

Usage:
    from payments.services import CreditPurchaseService

    result = CreditPurchaseService.create_payment_intent(user, "popular")
    result.data  # {"clientSecret": "...", "packageName": "Popular Pack", ...}

    result = CreditPurchaseService.confirm_payment(user, "pi_123")
    result.data  # {"success": True, "newBalance": 1100, "creditsAdded": 1100}
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import IntegrityError

from core.cache import ServiceCache
from core.services import BaseService, ServiceResult

from payments.adapters import CreatePaymentIntentParams, StripeAdapter
from payments.exceptions import PaymentSystemUnavailableError, StripeError
from payments.ledger.models import Transaction, TransactionType
from payments.ledger.services import WalletLedger
from payments.ledger.types import to_usd

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User

PAYMENT_INTENT_ID_PATTERN = re.compile(r"^pi_[a-zA-Z0-9_]+$")

ALREADY_PROCESSED = {"success": True, "message": "Payment already processed"}


class CreditPurchaseService(BaseService):
    """
    Service for buying credit packages.

    Methods:
        create_payment_intent: Open a PaymentIntent for a package
        confirm_payment: Credit the wallet for a succeeded PaymentIntent
        record_purchase: Idempotently credit a verified purchase
        get_package: Look up a credit package by id
    """

    # Stripe customer ids by email; owned here instead of at module level
    customer_cache = ServiceCache("stripe_customers", default_ttl=24 * 60 * 60)

    @classmethod
    def get_package(cls, package_id: Any) -> dict | None:
        if not isinstance(package_id, str):
            return None
        return settings.CREDIT_PACKAGES.get(package_id)

    @classmethod
    def package_ids(cls) -> list[str]:
        return list(settings.CREDIT_PACKAGES)

    @classmethod
    def create_payment_intent(cls, user: User, package_id: Any) -> ServiceResult[dict]:
        """
        Create a Stripe PaymentIntent for a credit package.

        Args:
            user: Buyer
            package_id: One of the CREDIT_PACKAGES ids

        Returns:
            ServiceResult with {clientSecret, packageName, credits, amount}

        Error codes:
            INVALID_INPUT: Unknown package
            PAYMENT_SYSTEM_UNAVAILABLE: Stripe is not configured
            STRIPE_*: Stripe rejected or failed the call
        """
        logger = cls.get_logger()

        package = cls.get_package(package_id)
        if package is None:
            return ServiceResult.failure(
                f"Invalid package. Must be one of: {', '.join(cls.package_ids())}",
                error_code="INVALID_INPUT",
            )

        try:
            cls._require_stripe()
            customer_id = cls.resolve_customer(user)
            intent = StripeAdapter.create_payment_intent(
                CreatePaymentIntentParams(
                    amount_cents=package["price"],
                    currency="usd",
                    customer_id=customer_id,
                    metadata={
                        "user_id": str(user.pk),
                        "package_id": package_id,
                        "credits": str(package["credits"]),
                    },
                )
            )
        except (PaymentSystemUnavailableError, StripeError) as e:
            return cls.handle_exception(e, "Payment intent creation failed")

        logger.info(
            "Payment intent created",
            extra={
                "user_id": str(user.pk),
                "package_id": package_id,
                "payment_intent_id": intent.id,
            },
        )

        return ServiceResult.success(
            {
                "clientSecret": intent.client_secret,
                "packageName": package["name"],
                "credits": package["credits"],
                "amount": package["price"] / 100,
            }
        )

    @classmethod
    def confirm_payment(cls, user: User, payment_intent_id: Any) -> ServiceResult[dict]:
        """
        Credit the caller's wallet for a succeeded PaymentIntent.

        Credits come from the package table keyed by the intent's
        package_id metadata, never from client input.

        Returns:
            ServiceResult with {success, newBalance, creditsAdded}, or
            {success, message} when the intent was already credited
        """
        if not isinstance(payment_intent_id, str):
            return ServiceResult.failure(
                "Payment intent ID must be a string",
                error_code="INVALID_INPUT",
            )
        if not (10 <= len(payment_intent_id) <= 100) or not PAYMENT_INTENT_ID_PATTERN.match(
            payment_intent_id
        ):
            return ServiceResult.failure(
                "Invalid payment intent ID format",
                error_code="INVALID_INPUT",
            )

        try:
            cls._require_stripe()
            intent = StripeAdapter.retrieve_payment_intent(payment_intent_id)
        except (PaymentSystemUnavailableError, StripeError) as e:
            return cls.handle_exception(e, "Payment intent lookup failed")

        if not intent.succeeded:
            return ServiceResult.failure(
                f"Payment not successful. Status: {intent.status}",
                error_code="PAYMENT_NOT_SUCCEEDED",
            )

        if intent.metadata.get("user_id") != str(user.pk):
            cls.get_logger().warning(
                "Payment user mismatch",
                extra={"user_id": str(user.pk), "payment_intent_id": payment_intent_id},
            )
            return ServiceResult.failure(
                "Payment user mismatch",
                error_code="FORBIDDEN",
                status_code=403,
            )

        return cls.record_purchase(
            user,
            payment_intent_id=intent.id,
            package_id=intent.metadata.get("package_id"),
            amount_cents=intent.amount_cents,
        )

    @classmethod
    def record_purchase(
        cls,
        user: User,
        payment_intent_id: str,
        package_id: Any,
        amount_cents: int,
    ) -> ServiceResult[dict]:
        """
        Credit a verified purchase exactly once.

        Shared by confirm_payment and the Stripe webhook.
        """
        logger = cls.get_logger()

        package = cls.get_package(package_id)
        if package is None:
            logger.error(
                "Payment intent has unknown package",
                extra={"payment_intent_id": payment_intent_id, "package_id": package_id},
            )
            return ServiceResult.failure(
                "Unknown credit package",
                error_code="INVALID_INPUT",
            )

        if Transaction.objects.filter(stripe_payment_id=payment_intent_id).exists():
            logger.info(
                "Payment already processed",
                extra={"payment_intent_id": payment_intent_id},
            )
            return ServiceResult.success(dict(ALREADY_PROCESSED))

        credits = package["credits"]
        usd_amount = to_usd(Decimal(amount_cents) / 100)

        try:
            with cls.atomic():
                WalletLedger.credit_balance(
                    user,
                    credits,
                    TransactionType.CREDIT_PURCHASE,
                    description=f"Purchased {credits} credits for ${usd_amount}",
                    stripe_payment_id=payment_intent_id,
                    usd_amount=usd_amount,
                )
        except IntegrityError:
            logger.info(
                "Payment credited concurrently",
                extra={"payment_intent_id": payment_intent_id},
            )
            return ServiceResult.success(dict(ALREADY_PROCESSED))

        new_balance = WalletLedger.get_wallet(user).credit_balance
        logger.info(
            "Credits purchased",
            extra={
                "user_id": str(user.pk),
                "payment_intent_id": payment_intent_id,
                "credits": credits,
                "new_balance": new_balance,
            },
        )

        return ServiceResult.success(
            {"success": True, "newBalance": new_balance, "creditsAdded": credits}
        )

    @classmethod
    def resolve_customer(cls, user: User) -> str:
        """Return the Stripe customer id for user's email, cached."""
        customer_id = cls.customer_cache.get(user.email)
        if customer_id:
            return customer_id

        customer_id = StripeAdapter.find_or_create_customer(user.email, str(user.pk))
        cls.customer_cache.put(user.email, customer_id)
        return customer_id

    @classmethod
    def _require_stripe(cls) -> None:
        if not StripeAdapter.is_configured():
            cls.get_logger().error("STRIPE_SECRET_KEY is not set")
            raise PaymentSystemUnavailableError("Payment system not configured")
