"""
Earnings maturation sweep.

Earner shares are held as pending for settings.EARNINGS_HOLD_HOURS (48h)
so refunds can still take them back. After that, each EARNING row is
promoted to available earnings exactly once; the EarningsRelease marker
written by WalletLedger.mature_pending_to_available is the per-row guard.

Tasks:
- process_pending_earnings: Periodic task (hourly via celery-beat)

Usage:
    from payments.workers.earnings_maturation import EarningsMaturation

    matured = EarningsMaturation.run()
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from payments.ledger.models import Transaction, TransactionStatus, TransactionType
from payments.ledger.services import WalletLedger

if TYPE_CHECKING:
    from datetime import datetime

    from django.db.models import QuerySet

logger = logging.getLogger(__name__)

BATCH_SIZE = 500


class EarningsMaturation:
    """Promote pending earnings past their hold period to available."""

    @classmethod
    def due(cls, now: datetime | None = None) -> QuerySet[Transaction]:
        """Earnings whose hold has ended and that have no release marker."""
        now = now or timezone.now()
        cutoff = now - timedelta(hours=settings.EARNINGS_HOLD_HOURS)
        return (
            Transaction.objects.filter(
                transaction_type=TransactionType.EARNING,
                usd_amount__gt=0,
                status=TransactionStatus.COMPLETED,
                created_at__lte=cutoff,
                release__isnull=True,
            )
            .select_related("user")
            .order_by("created_at", "id")
        )

    @classmethod
    def run(cls, now: datetime | None = None, batch_size: int = BATCH_SIZE) -> int:
        """
        Mature every due earning.

        Returns:
            Number of earnings this run matured
        """
        due_ids = list(cls.due(now).values_list("id", flat=True))
        logger.info("Earnings maturation started", extra={"candidates": len(due_ids)})

        matured = 0
        failed = 0
        for start in range(0, len(due_ids), batch_size):
            chunk = due_ids[start : start + batch_size]
            for earning in Transaction.objects.filter(id__in=chunk).select_related("user"):
                try:
                    if WalletLedger.mature_pending_to_available(earning):
                        matured += 1
                except Exception:
                    failed += 1
                    logger.error(
                        "Failed to mature earning",
                        extra={"transaction_id": str(earning.pk)},
                        exc_info=True,
                    )

        logger.info(
            "Earnings maturation finished",
            extra={"matured": matured, "failed": failed},
        )
        return matured


@shared_task(bind=True)
def process_pending_earnings(self) -> dict:
    """
    Move pending earnings older than the hold period to available.

    Runs hourly via celery-beat.
    """
    return {"processed": EarningsMaturation.run()}
