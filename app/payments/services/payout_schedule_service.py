"""
Payout schedule service for Stripe Connect accounts.

Sets the automatic payout cadence (settings.PAYOUT_SCHEDULE, weekly on
Fridays with a two-day delay) on one connected account or, for admins,
on every connected account.

Usage:
    from payments.services import PayoutScheduleService

    result = PayoutScheduleService.update_schedule(user)
    result.data  # {"success": True, "accountId": "acct_...", "schedule": {...}}

    result = PayoutScheduleService.update_all(admin_user)
    result.data  # {"success": True, "results": {"updated": 10, "failed": 1, ...}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService, ServiceResult

from payments.adapters import StripeAdapter
from payments.exceptions import StripeError
from payments.models import ConnectedAccount

if TYPE_CHECKING:
    from authentication.models import User


class PayoutScheduleService(BaseService):
    """Apply settings.PAYOUT_SCHEDULE to connected accounts."""

    @classmethod
    def get_schedule(cls) -> dict:
        return dict(settings.PAYOUT_SCHEDULE)

    @classmethod
    def update_schedule(cls, user: User, account_id: str | None = None) -> ServiceResult[dict]:
        """
        Update the payout schedule of one connected account.

        Args:
            user: Caller; must own the account unless admin
            account_id: Stripe account id, defaulting to the caller's

        Returns:
            ServiceResult with {success, accountId, schedule}

        Error codes:
            ACCOUNT_NOT_FOUND: No account id given and caller has none
            FORBIDDEN: Caller neither owns the account nor is admin
            STRIPE_*: Stripe rejected the update
        """
        logger = cls.get_logger()

        if not StripeAdapter.is_configured():
            return ServiceResult.failure(
                "Payment system not configured",
                error_code="PAYMENT_SYSTEM_UNAVAILABLE",
                status_code=503,
            )

        own_account = ConnectedAccount.objects.filter(user=user).first()
        own_account_id = own_account.stripe_account_id if own_account else None

        target_account_id = account_id or own_account_id
        if not target_account_id:
            return ServiceResult.failure(
                "No Stripe account found",
                error_code="ACCOUNT_NOT_FOUND",
            )

        if not user.is_admin and target_account_id != own_account_id:
            logger.warning(
                "Payout schedule update denied",
                extra={"user_id": str(user.pk), "account_id": target_account_id},
            )
            return ServiceResult.failure(
                "Unauthorized",
                error_code="FORBIDDEN",
                status_code=403,
            )

        schedule = cls.get_schedule()
        try:
            StripeAdapter.update_payout_schedule(target_account_id, schedule)
        except StripeError as e:
            return cls.handle_exception(e, "Payout schedule update failed")

        logger.info(
            "Payout schedule updated",
            extra={"account_id": target_account_id, "user_id": str(user.pk)},
        )

        return ServiceResult.success(
            {"success": True, "accountId": target_account_id, "schedule": schedule}
        )

    @classmethod
    def update_all(cls, user: User) -> ServiceResult[dict]:
        """
        Update the payout schedule of every connected account (admin only).

        Per-account failures are collected, never abort the batch.

        Returns:
            ServiceResult with {success, results: {updated, failed, errors}}
        """
        logger = cls.get_logger()

        if not user.is_admin:
            return ServiceResult.failure(
                "Admin access required",
                error_code="FORBIDDEN",
                status_code=403,
            )

        if not StripeAdapter.is_configured():
            return ServiceResult.failure(
                "Payment system not configured",
                error_code="PAYMENT_SYSTEM_UNAVAILABLE",
                status_code=503,
            )

        schedule = cls.get_schedule()
        results = {"updated": 0, "failed": 0, "errors": []}

        account_ids = (
            ConnectedAccount.objects.exclude(stripe_account_id="")
            .order_by("created_at")
            .values_list("stripe_account_id", flat=True)
        )
        for account_id in account_ids:
            try:
                StripeAdapter.update_payout_schedule(account_id, schedule)
            except StripeError as e:
                results["failed"] += 1
                results["errors"].append(f"{account_id}: {e.message}")
                logger.warning(
                    "Failed to update account",
                    extra={"account_id": account_id, "error_code": e.error_code},
                )
                continue
            results["updated"] += 1

        logger.info(
            "Bulk payout schedule update finished",
            extra={"updated": results["updated"], "failed": results["failed"]},
        )

        return ServiceResult.success({"success": True, "results": results})
