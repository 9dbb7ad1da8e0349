"""
Weekly payout executor.

Every Friday the whole available balance of each eligible earner is
paid out to their connected account. Eligible means:
- connected account ready for payouts (account id, onboarding complete)
- not on payout_hold
- available earnings of at least settings.PAYOUT_MINIMUM_USD ($25)
- no withdrawal still PENDING (a previous run was interrupted)

Each payout uses WithdrawalService.execute_payout (reserve -> transfer
-> record) with source WEEKLY. Failures are isolated per account.

Tasks:
- run_weekly_payouts: Periodic task (Fridays 12:00 UTC via celery-beat)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from celery import shared_task
from django.conf import settings

from payments.adapters import StripeAdapter
from payments.models import ConnectedAccount, Withdrawal
from payments.services import WithdrawalService
from payments.state_machines import WithdrawalSource, WithdrawalStatus

logger = logging.getLogger(__name__)


@dataclass
class WeeklyPayoutResult:
    """processed counts successful payouts; total_paid is their sum."""

    processed: int = 0
    failed: int = 0
    total_paid: Decimal = field(default_factory=lambda: Decimal("0.00"))

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "failed": self.failed,
            "total_paid": str(self.total_paid),
        }


class WeeklyPayoutExecutor:
    """Pay out available earnings to every eligible connected account."""

    @classmethod
    def eligible_accounts(cls):
        minimum = Decimal(str(settings.PAYOUT_MINIMUM_USD))
        pending_users = Withdrawal.objects.filter(status=WithdrawalStatus.PENDING).values(
            "user_id"
        )
        return (
            ConnectedAccount.objects.filter(
                onboarding_complete=True,
                payout_hold=False,
                user__wallet__available_earnings__gte=minimum,
            )
            .exclude(stripe_account_id="")
            .exclude(user_id__in=pending_users)
            .select_related("user", "user__wallet")
            .order_by("created_at")
        )

    @classmethod
    def run(cls) -> WeeklyPayoutResult:
        result = WeeklyPayoutResult()

        if not StripeAdapter.is_configured():
            logger.error("Weekly payouts skipped: STRIPE_SECRET_KEY is not set")
            return result

        accounts = list(cls.eligible_accounts())
        logger.info("Weekly payout run started", extra={"eligible": len(accounts)})

        for account in accounts:
            amount = account.user.wallet.available_earnings
            try:
                outcome = WithdrawalService.execute_payout(
                    account.user,
                    account,
                    amount,
                    WithdrawalSource.WEEKLY,
                )
            except Exception:
                result.failed += 1
                logger.error(
                    "Weekly payout failed",
                    extra={
                        "user_id": str(account.user_id),
                        "account_id": account.stripe_account_id,
                        "amount": str(amount),
                    },
                    exc_info=True,
                )
                continue

            result.processed += 1
            result.total_paid += outcome.withdrawal.amount

        logger.info("Weekly payout run finished", extra=result.to_dict())
        return result


@shared_task(bind=True)
def run_weekly_payouts(self) -> dict:
    """
    Pay out eligible earners.

    Runs Fridays at 12:00 UTC via celery-beat.
    """
    return WeeklyPayoutExecutor.run().to_dict()
