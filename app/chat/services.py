"""
Chat service layer for billed messaging.

This module provides the business logic for sending messages between
seekers and earners, including volley billing and reply detection.

Services:
    MessageService: Send a message, charging the payer when it opens a
        new paid exchange and resolving pending deadlines it answers

Design Principles:
    - Services are stateless (use class methods)
    - Expected failures return ServiceResult.failure()
    - Unexpected failures raise exceptions
    - Charging, holding the earner share and inserting the message
      commit together or not at all

Usage:
    from chat.services import MessageService

    result = MessageService.send_message(
        sender=seeker,
        recipient_id=earner.id,
        content="Hi there!",
    )
    if result.success:
        result.data["billing"]  # {"charged": True, "creditsSpent": 1, ...}
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.exceptions import (
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService, ServiceResult

from authentication.models import UserType
from chat.models import Conversation, Message, MessageType, RefundStatus
from chat.state_machines import MessageDeadline
from payments.ledger.models import TransactionType
from payments.ledger.services import WalletLedger
from payments.ledger.types import EarningsSplit
from payments.signals import publish_message_resolved

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User

# C0 control characters and DEL, minus tab/newline/carriage return
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_content(content: Any) -> str:
    """Strip surrounding whitespace and control characters from message text."""
    if not isinstance(content, str):
        return ""
    return CONTROL_CHARS.sub("", content).strip()


@dataclass
class BillingOutcome:
    """What a send cost the payer."""

    charged: bool
    credits_spent: int
    new_balance: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "charged": self.charged,
            "creditsSpent": self.credits_spent,
            "newBalance": self.new_balance,
        }


class MessageService(BaseService):
    """
    Service for sending billed messages.

    Methods:
        send_message: Validate, bill and store a message
        is_billable_volley: Decide whether a message opens a paid exchange
        credits_for: Credit price of a message type
        resolve_replied: Mark deadlines answered by a new message
    """

    @classmethod
    def credits_for(cls, message_type: str) -> int:
        costs = settings.MESSAGE_CREDIT_COSTS
        return int(costs.get(message_type, costs[MessageType.TEXT]))

    @classmethod
    def send_message(
        cls,
        sender: User,
        recipient_id: Any,
        content: Any,
        message_type: str = MessageType.TEXT,
        conversation_id: Any = None,
    ) -> ServiceResult[dict]:
        """
        Send a message, billing it when it opens a paid exchange.

        Args:
            sender: Authenticated user sending the message
            recipient_id: UUID of the other participant
            content: Raw message text
            message_type: text or image
            conversation_id: Existing conversation, or None to find/create one

        Returns:
            ServiceResult with {message, billing, conversation_id}

        Error codes:
            INVALID_INPUT: Bad recipient, empty/oversized content, bad type
            NOT_FOUND: Recipient or conversation does not exist
            FORBIDDEN: Sender is not part of the conversation
            INSUFFICIENT_CREDITS: Payer cannot cover the message
        """
        logger = cls.get_logger()

        try:
            recipient_uuid = uuid.UUID(str(recipient_id))
        except (TypeError, ValueError):
            return ServiceResult.failure("Invalid recipientId", error_code="INVALID_INPUT")

        if recipient_uuid == sender.pk:
            return ServiceResult.failure(
                "Cannot send message to yourself",
                error_code="INVALID_INPUT",
            )

        content = sanitize_content(content)
        if not content:
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code="INVALID_INPUT",
            )

        max_length = settings.MESSAGE_MAX_LENGTH
        if len(content) > max_length:
            return ServiceResult.failure(
                f"Message too long (max {max_length} chars)",
                error_code="INVALID_INPUT",
            )

        if message_type not in MessageType.values:
            return ServiceResult.failure("Invalid message type", error_code="INVALID_INPUT")

        recipient = get_user_model().objects.filter(pk=recipient_uuid, is_active=True).first()
        if recipient is None:
            return ServiceResult.failure(
                "Recipient not found",
                error_code="NOT_FOUND",
                status_code=404,
            )

        try:
            with transaction.atomic():
                conversation = cls._resolve_conversation(sender, recipient, conversation_id)
                message, billing = cls._store_message(
                    conversation, sender, recipient, content, message_type
                )
                resolved = cls.resolve_replied(conversation, sender)
        except BaseApplicationError as e:
            logger.info(
                "Message rejected",
                extra={"sender_id": str(sender.pk), "error_code": e.error_code},
            )
            return ServiceResult.from_exception(e)

        logger.info(
            "Message sent",
            extra={
                "message_id": str(message.pk),
                "conversation_id": str(conversation.pk),
                "charged": billing.charged,
                "credits_spent": billing.credits_spent,
                "replied_resolved": resolved,
            },
        )

        return ServiceResult.success(
            {
                "message": message,
                "billing": billing.to_dict(),
                "conversation_id": conversation.pk,
            }
        )

    @classmethod
    def is_billable_volley(cls, conversation: Conversation, sender: User) -> bool:
        """
        Decide whether a message from sender opens a new paid exchange.

        Only seekers pay. The first seeker message is billable; after
        that, a seeker message is billable again only once the earner
        has answered the latest billable one.
        """
        if sender.pk != conversation.seeker_id:
            return False

        last_billable = (
            Message.objects.filter(conversation=conversation, is_billable_volley=True)
            .order_by("-created_at")
            .first()
        )
        if last_billable is None:
            return True

        return Message.objects.filter(
            conversation=conversation,
            sender_id=conversation.earner_id,
            created_at__gt=last_billable.created_at,
        ).exists()

    @classmethod
    def resolve_replied(cls, conversation: Conversation, sender: User) -> int:
        """
        Mark pending billable messages addressed to sender as replied.

        Runs on every send, before or after the deadline, so an answer
        always wins over a refund that has not happened yet.

        Returns:
            Number of messages this call resolved
        """
        resolved = 0
        for pending in MessageDeadline.pending_addressed_to(conversation.pk, sender.pk):
            if MessageDeadline.mark_replied(pending):
                resolved += 1
                publish_message_resolved(
                    MessageService,
                    message_id=pending.pk,
                    refund_status=RefundStatus.REPLIED,
                )
        return resolved

    # ==========================================================================
    # Internals
    # ==========================================================================

    @classmethod
    def _resolve_conversation(
        cls,
        sender: User,
        recipient: User,
        conversation_id: Any,
    ) -> Conversation:
        if conversation_id:
            try:
                conversation = Conversation.objects.get(pk=conversation_id)
            except (Conversation.DoesNotExist, DjangoValidationError, ValueError):
                raise NotFoundError("Conversation not found")

            if not conversation.is_participant(sender):
                cls.get_logger().warning(
                    "Sender not part of conversation",
                    extra={
                        "sender_id": str(sender.pk),
                        "conversation_id": str(conversation.pk),
                    },
                )
                raise PermissionDeniedError("Forbidden")
            if conversation.other_participant_id(sender) != recipient.pk:
                raise ValidationError("Recipient is not part of this conversation")
            return conversation

        if sender.user_type == UserType.EARNER:
            seeker, earner = recipient, sender
        else:
            seeker, earner = sender, recipient

        existing = Conversation.objects.filter(seeker=seeker, earner=earner).first()
        if existing is not None:
            return existing

        try:
            with transaction.atomic():
                return Conversation.objects.create(seeker=seeker, earner=earner, payer=seeker)
        except IntegrityError:
            return Conversation.objects.get(seeker=seeker, earner=earner)

    @classmethod
    def _store_message(
        cls,
        conversation: Conversation,
        sender: User,
        recipient: User,
        content: str,
        message_type: str,
    ) -> tuple[Message, BillingOutcome]:
        now = timezone.now()
        billable = cls.is_billable_volley(conversation, sender)

        if billable:
            split = EarningsSplit.for_credits(cls.credits_for(message_type))
            deadline = now + timedelta(hours=settings.REPLY_DEADLINE_HOURS)
        else:
            split = EarningsSplit.zero()
            deadline = None

        message = Message.objects.create(
            conversation=conversation,
            sender=sender,
            recipient=recipient,
            content=content,
            message_type=message_type,
            is_billable_volley=billable,
            credits_cost=split.credits,
            earner_amount=split.earner_amount,
            platform_fee=split.platform_fee,
            reply_deadline=deadline,
            billed_at=now if billable else None,
        )

        billing = BillingOutcome(
            charged=False,
            credits_spent=0,
            new_balance=WalletLedger.get_or_create_wallet(sender).credit_balance,
        )
        if billable:
            payer = conversation.payer or conversation.seeker
            WalletLedger.debit_balance(
                payer,
                split.credits,
                TransactionType.MESSAGE_SENT,
                description=f"Message to {recipient.email}",
                message=message,
            )
            WalletLedger.hold_earner_amount(
                conversation.earner,
                split.earner_amount,
                message=message,
                description="Message earning (pending)",
            )
            billing = BillingOutcome(
                charged=True,
                credits_spent=split.credits,
                new_balance=WalletLedger.get_wallet(payer).credit_balance,
            )

        Conversation.objects.filter(pk=conversation.pk).update(last_message_at=now)
        return message, billing
