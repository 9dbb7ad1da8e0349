"""
Stripe Connect onboarding for earners.

An earner can only be paid once they own a connected account whose
onboarding Stripe reports as finished (details submitted and payouts
enabled). This service opens the account on first use, refreshes its
readiness from Stripe and hands back a hosted onboarding link while it
is still incomplete.

Readiness is also pushed by the account.updated webhook
(payments.webhooks.handlers), which calls sync_account_status.

Usage:
    from payments.services import ConnectOnboardingService

    result = ConnectOnboardingService.start_onboarding(user, origin="https://app.lynxxclub.com")
    result.data
    # {"success": True, "onboardingComplete": False,
    #  "onboardingUrl": "https://connect.stripe.com/...", "accountId": "acct_..."}
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService, ServiceResult

from payments.adapters import ConnectAccountStatus, IdempotencyKeyGenerator, StripeAdapter
from payments.exceptions import StripeError
from payments.models import ConnectedAccount

if TYPE_CHECKING:
    from authentication.models import User


class ConnectOnboardingService(BaseService):
    """Open, link and track earners' Stripe Connect accounts."""

    @classmethod
    def start_onboarding(cls, user: User, origin: str | None = None) -> ServiceResult[dict]:
        """
        Ensure the caller has a connected account and report its onboarding.

        Args:
            user: The earner onboarding
            origin: Request Origin; used for the return/refresh URLs when allow-listed

        Returns:
            ServiceResult with {success, onboardingComplete, accountId} and,
            while incomplete, onboardingUrl

        Error codes:
            PAYMENT_SYSTEM_UNAVAILABLE: Stripe is not configured (503)
            STRIPE_*: Stripe rejected or failed a call
        """
        logger = cls.get_logger()

        if not StripeAdapter.is_configured():
            return ServiceResult.failure(
                "Payment system not configured",
                error_code="PAYMENT_SYSTEM_UNAVAILABLE",
                status_code=503,
            )

        try:
            account = cls._get_or_open_account(user)
            status = StripeAdapter.retrieve_account(account.stripe_account_id)
            cls.sync_account_status(status)

            if status.onboarding_complete:
                return ServiceResult.success(
                    {
                        "success": True,
                        "onboardingComplete": True,
                        "accountId": account.stripe_account_id,
                    }
                )

            base = cls.resolve_origin(origin)
            onboarding_url = StripeAdapter.create_account_link(
                account.stripe_account_id,
                refresh_url=f"{base}/dashboard?stripe_refresh=true",
                return_url=f"{base}/dashboard?stripe_success=true",
            )
        except StripeError as e:
            return cls.handle_exception(e, "Stripe Connect onboarding failed")

        logger.info(
            "Onboarding link generated",
            extra={"user_id": str(user.pk), "account_id": account.stripe_account_id},
        )
        return ServiceResult.success(
            {
                "success": True,
                "onboardingComplete": False,
                "onboardingUrl": onboarding_url,
                "accountId": account.stripe_account_id,
            }
        )

    @classmethod
    def sync_account_status(cls, status: ConnectAccountStatus) -> ConnectedAccount | None:
        """
        Store Stripe's view of an account's readiness.

        Onboarding can also be revoked: Stripe disabling payouts makes the
        account ineligible again.

        Returns:
            The updated ConnectedAccount, or None when the account is not ours
        """
        account = ConnectedAccount.objects.filter(stripe_account_id=status.id).first()
        if account is None:
            return None

        complete = status.onboarding_complete
        if account.onboarding_complete != complete:
            account.onboarding_complete = complete
            account.save(update_fields=["onboarding_complete", "updated_at"])
            cls.get_logger().info(
                "Connected account onboarding changed",
                extra={
                    "account_id": status.id,
                    "user_id": str(account.user_id),
                    "onboarding_complete": complete,
                },
            )
        return account

    @classmethod
    def resolve_origin(cls, origin: str | None) -> str:
        """Return origin if it is an allowed CORS origin, else the default."""
        if origin:
            if origin in settings.CORS_ALLOWED_ORIGINS:
                return origin
            if any(re.match(pattern, origin) for pattern in settings.CORS_ALLOWED_ORIGIN_REGEXES):
                return origin
        return settings.STRIPE_CONNECT_DEFAULT_ORIGIN

    @classmethod
    def _get_or_open_account(cls, user: User) -> ConnectedAccount:
        account = ConnectedAccount.objects.filter(user=user).first()
        if account is not None:
            return account

        # Same key per user: a retried or concurrent first call gets the same Stripe account
        created = StripeAdapter.create_connected_account(
            email=user.email,
            user_id=str(user.pk),
            idempotency_key=IdempotencyKeyGenerator.generate("connect_account", user.pk),
        )
        account, _ = ConnectedAccount.objects.get_or_create(
            user=user, defaults={"stripe_account_id": created.id}
        )

        cls.get_logger().info(
            "Connected account opened",
            extra={"user_id": str(user.pk), "account_id": account.stripe_account_id},
        )
        return account
