"""
Reply-deadline state machine for billable messages.

State Flow:
    PENDING -> REPLIED   (recipient answered; charge stands)
    PENDING -> REFUNDED  (deadline passed unanswered; charge returned)

REPLIED and REFUNDED are terminal. Transitions are single conditional
UPDATEs on refund_status IS NULL; the affected-row count tells the
caller whether it won. A concurrent sweep, or a sweep racing a reply,
therefore resolves each message exactly once.

Balance changes that accompany REFUNDED live in the refund sweep; this
module only moves the message row.

Usage:
    from chat.state_machines import DeadlineState, MessageDeadline

    if MessageDeadline.is_refund_eligible(message, now):
        reply = MessageDeadline.find_reply(message)
        if reply:
            MessageDeadline.mark_replied(message)
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from django.utils import timezone

from chat.models import Message, RefundStatus

if TYPE_CHECKING:
    from datetime import datetime

    from django.db.models import QuerySet


class DeadlineState(str, Enum):
    """Derived deadline state of a message."""

    NOT_BILLABLE = "not_billable"
    PENDING = "pending"
    REPLIED = "replied"
    REFUNDED = "refunded"


class MessageDeadline:
    """Queries and transitions of the reply-deadline state machine."""

    @staticmethod
    def state_of(message: Message) -> DeadlineState:
        if message.refund_status == RefundStatus.REPLIED:
            return DeadlineState.REPLIED
        if message.refund_status == RefundStatus.REFUNDED:
            return DeadlineState.REFUNDED
        if message.is_billable_volley and message.reply_deadline is not None:
            return DeadlineState.PENDING
        return DeadlineState.NOT_BILLABLE

    @staticmethod
    def is_refund_eligible(message: Message, now: datetime | None = None) -> bool:
        """
        Check whether the deadline of message has expired unresolved.

        The comparison is strict: a deadline equal to now has not expired.
        """
        now = now or timezone.now()
        return (
            message.is_billable_volley
            and message.reply_deadline is not None
            and message.reply_deadline < now
            and message.refund_status is None
            and message.credits_cost > 0
        )

    @staticmethod
    def expired_pending(now: datetime | None = None) -> QuerySet[Message]:
        """Messages is_refund_eligible() would accept, oldest deadline first."""
        now = now or timezone.now()
        return Message.objects.filter(
            is_billable_volley=True,
            reply_deadline__isnull=False,
            reply_deadline__lt=now,
            refund_status__isnull=True,
            credits_cost__gt=0,
        ).order_by("reply_deadline", "id")

    @staticmethod
    def find_reply(message: Message) -> Message | None:
        """
        Return the first answer to message, if any.

        An answer is a message from the original recipient in the same
        conversation created strictly after message. Follow-ups from the
        original sender never count.
        """
        return (
            Message.objects.filter(
                conversation_id=message.conversation_id,
                sender_id=message.recipient_id,
                created_at__gt=message.created_at,
            )
            .order_by("created_at")
            .first()
        )

    @staticmethod
    def mark_replied(message: Message) -> bool:
        """
        Resolve message as REPLIED.

        Returns:
            True if this call made the transition
        """
        updated = Message.objects.filter(
            pk=message.pk,
            refund_status__isnull=True,
        ).update(refund_status=RefundStatus.REPLIED)
        if updated:
            message.refund_status = RefundStatus.REPLIED
        return updated == 1

    @staticmethod
    def mark_refunded(message: Message, now: datetime | None = None) -> bool:
        """
        Resolve message as REFUNDED and zero its billing fields.

        Callers must read credits_cost and earner_amount before calling;
        after a successful transition they are 0 in the database.

        Returns:
            True if this call made the transition
        """
        now = now or timezone.now()
        updated = Message.objects.filter(
            pk=message.pk,
            refund_status__isnull=True,
        ).update(
            refund_status=RefundStatus.REFUNDED,
            refunded_at=now,
            credits_cost=0,
            earner_amount=Decimal("0.00"),
            platform_fee=Decimal("0.00"),
        )
        return updated == 1

    @staticmethod
    def pending_addressed_to(conversation_id, recipient_id) -> QuerySet[Message]:
        """Unresolved billable messages in a conversation sent to recipient_id."""
        return Message.objects.filter(
            conversation_id=conversation_id,
            recipient_id=recipient_id,
            is_billable_volley=True,
            refund_status__isnull=True,
        ).order_by("created_at")
