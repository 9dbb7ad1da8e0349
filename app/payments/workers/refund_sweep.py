"""
Refund sweep for unanswered billable messages.

Billable messages whose reply deadline has passed without resolution are
settled one by one:
- answered after all (a reply exists): resolved as REPLIED, no money moves
- unanswered: resolved as REFUNDED; the payer (the sending seeker unless
  the conversation names another payer) gets the credits back and the
  earner's pending earnings lose the held share (clamped at 0)

The REFUNDED transition, the payer credit and the earner release
commit in one database transaction. The transition is a conditional
UPDATE on refund_status IS NULL, so concurrent sweeps and a racing reply
resolve each message exactly once.

Tasks:
- process_message_refunds: Periodic task (every 15 minutes via celery-beat)

Usage:
    from payments.workers.refund_sweep import RefundSweep

    result = RefundSweep.run()
    result.to_dict()  # {"processed": 3, "replied": 1, "refunded": 2, "failed": 0}
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from celery import shared_task
from django.db import transaction
from django.utils import timezone

from chat.models import Message, RefundStatus
from chat.state_machines import MessageDeadline
from payments.ledger.models import TransactionType
from payments.ledger.services import WalletLedger
from payments.signals import publish_message_resolved

if TYPE_CHECKING:
    from datetime import datetime

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Messages loaded per batch
BATCH_SIZE = 100


@dataclass
class RefundSweepResult:
    """Counts from one sweep; processed == replied + refunded."""

    processed: int = 0
    replied: int = 0
    refunded: int = 0
    failed: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class RefundSweep:
    """Resolve expired billable messages to REPLIED or REFUNDED."""

    @classmethod
    def run(cls, now: datetime | None = None, batch_size: int = BATCH_SIZE) -> RefundSweepResult:
        """
        Sweep every expired, unresolved billable message.

        Per-message failures are logged and counted; the sweep moves on.
        Errors loading the candidate set propagate to the caller.
        """
        now = now or timezone.now()
        result = RefundSweepResult()

        candidate_ids = list(MessageDeadline.expired_pending(now).values_list("id", flat=True))
        logger.info(
            "Refund sweep started",
            extra={"candidates": len(candidate_ids), "now": now.isoformat()},
        )

        for start in range(0, len(candidate_ids), batch_size):
            batch = Message.objects.filter(id__in=candidate_ids[start : start + batch_size]).order_by(
                "reply_deadline", "id"
            )
            for message in batch:
                try:
                    outcome = cls.resolve(message, now)
                except Exception:
                    result.failed += 1
                    logger.error(
                        "Failed to resolve expired message",
                        extra={"message_id": str(message.pk)},
                        exc_info=True,
                    )
                    continue

                if outcome == RefundStatus.REPLIED:
                    result.replied += 1
                elif outcome == RefundStatus.REFUNDED:
                    result.refunded += 1

        result.processed = result.replied + result.refunded
        logger.info("Refund sweep finished", extra=result.to_dict())
        return result

    @classmethod
    def resolve(cls, message: Message, now: datetime) -> str | None:
        """
        Settle one expired message.

        Returns:
            RefundStatus.REPLIED or REFUNDED if this call resolved the
            message, None if someone else already had
        """
        message.refresh_from_db()
        if not MessageDeadline.is_refund_eligible(message, now):
            return None

        if MessageDeadline.find_reply(message) is not None:
            if not MessageDeadline.mark_replied(message):
                return None
            publish_message_resolved(
                RefundSweep,
                message_id=message.pk,
                refund_status=RefundStatus.REPLIED,
            )
            logger.info("Late reply found", extra={"message_id": str(message.pk)})
            return RefundStatus.REPLIED

        # Read before mark_refunded zeroes them
        credits = message.credits_cost
        earner_amount = message.earner_amount
        conversation = message.conversation
        payer = conversation.payer or conversation.seeker

        with transaction.atomic():
            if not MessageDeadline.mark_refunded(message, now):
                return None

            WalletLedger.credit_balance(
                payer,
                credits,
                TransactionType.MESSAGE_REFUND,
                description="Refund: no reply within 24 hours",
                message=message,
            )
            if earner_amount > 0:
                WalletLedger.release_earner_amount(
                    conversation.earner,
                    earner_amount,
                    message=message,
                    description="Earning reversed: message refunded",
                )
            publish_message_resolved(
                RefundSweep,
                message_id=message.pk,
                refund_status=RefundStatus.REFUNDED,
            )

        logger.info(
            "Message refunded",
            extra={
                "message_id": str(message.pk),
                "credits": credits,
                "earner_amount": str(earner_amount),
            },
        )
        return RefundStatus.REFUNDED


# =============================================================================
# Periodic Task
# =============================================================================


@shared_task(bind=True)
def process_message_refunds(self) -> dict:
    """
    Refund unanswered billable messages.

    Runs every 15 minutes via celery-beat. Idempotent: a second run with
    no newly expired messages processes nothing.

    Returns:
        Dict with processed, replied, refunded and failed counts
    """
    result = RefundSweep.run()
    return result.to_dict()
