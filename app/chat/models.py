"""
Chat models carrying message billing.

This module defines the subset of the chat system the billing core owns:
- Direct conversations between one seeker and one earner
- Messages with their billing fields and reply-deadline state

Models:
    Conversation: Pair of seeker and earner, with the paying user
    Message: One message; billable volleys carry cost, split and deadline

Design Decisions:
    - A conversation is unique per (seeker, earner) pair
    - The payer defaults to the seeker and is the wallet charged for volleys
    - refund_status moves from NULL to REPLIED or REFUNDED exactly once;
      see chat.state_machines for the transitions
    - Refunded messages keep no residual cost: credits_cost, earner_amount
      and platform_fee are zeroed by the refund update itself
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

if TYPE_CHECKING:
    from authentication.models import User


class MessageType(models.TextChoices):
    """
    Type of message content.

    TEXT: Text message (1 credit when billable)
    IMAGE: Image message (2 credits when billable)
    """

    TEXT = "text", "Text"
    IMAGE = "image", "Image"


class RefundStatus(models.TextChoices):
    """
    Terminal resolution of a billable message.

    NULL (no value) means the deadline is still pending.
    """

    REPLIED = "replied", "Replied"
    REFUNDED = "refunded", "Refunded"


class Conversation(UUIDPrimaryKeyMixin, BaseModel):
    """
    A direct conversation between a seeker and an earner.

    Fields:
        seeker: Paying side of the conversation
        earner: Paid side of the conversation
        payer: Wallet charged for billable volleys (defaults to seeker)
        last_message_at: Timestamp of most recent message (for sorting)

    Constraints:
        - One conversation per (seeker, earner)
    """

    seeker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="seeker_conversations",
        help_text="Seeker participant",
    )
    earner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="earner_conversations",
        help_text="Earner participant",
    )
    payer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="paid_conversations",
        help_text="User charged for billable messages (seeker when empty)",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message (for sorting conversation lists)",
    )

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-last_message_at", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["seeker", "earner"],
                name="chat_conv_unique_pair",
            ),
        ]

    def __str__(self) -> str:
        return f"Conversation({self.seeker_id} -> {self.earner_id})"

    def is_participant(self, user: User) -> bool:
        """Check if user is the seeker or the earner of this conversation."""
        return user.pk in (self.seeker_id, self.earner_id)

    def other_participant_id(self, user: User):
        """Return the id of the participant who is not user."""
        return self.earner_id if user.pk == self.seeker_id else self.seeker_id


class Message(UUIDPrimaryKeyMixin, BaseModel):
    """
    A message within a conversation.

    Billable volleys (a seeker message opening a new paid exchange) carry
    the credits charged, the earner/platform split and a reply deadline.
    Non-billable messages carry zero cost and no deadline.

    Fields:
        conversation: Conversation this message belongs to
        sender: Author
        recipient: Addressee (the other participant)
        content: Sanitized text, or an image reference for IMAGE messages
        message_type: text or image
        is_billable_volley: Whether this message was charged
        credits_cost: Credits charged (0 for free messages and after refund)
        earner_amount: USD held for the recipient
        platform_fee: USD kept by the platform
        reply_deadline: When an unanswered volley becomes refundable
        billed_at: When the sender was charged
        refund_status: NULL (pending), replied or refunded
        refunded_at: When the refund was applied

    Deadline states:
        PENDING: billable, cost > 0, refund_status NULL
        REPLIED: recipient answered (cost kept)
        REFUNDED: deadline passed unanswered (cost zeroed)
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Conversation this message belongs to",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sent_messages",
        help_text="User who sent this message",
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_messages",
        help_text="User this message is addressed to",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Type of message (text or image)",
    )
    content = models.TextField(
        help_text="Message text (or image reference for image messages)",
    )

    # ==========================================================================
    # Billing
    # ==========================================================================

    is_billable_volley = models.BooleanField(
        default=False,
        help_text="Whether this message opened a paid exchange",
    )
    credits_cost = models.PositiveIntegerField(
        default=0,
        help_text="Credits charged to the payer",
    )
    earner_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="USD held as pending earnings for the recipient",
    )
    platform_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="USD retained by the platform",
    )
    billed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the payer was charged",
    )

    # ==========================================================================
    # Reply deadline
    # ==========================================================================

    reply_deadline = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Refund becomes due if no reply arrives before this time",
    )
    refund_status = models.CharField(
        max_length=10,
        choices=RefundStatus.choices,
        null=True,
        blank=True,
        help_text="Resolution of the deadline (empty while pending)",
    )
    refunded_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the refund was applied",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["conversation", "created_at"],
                name="chat_msg_conv_created_idx",
            ),
            # Refund sweep candidates
            models.Index(
                fields=["reply_deadline"],
                name="chat_msg_pending_deadline_idx",
                condition=Q(is_billable_volley=True, refund_status__isnull=True),
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(earner_amount__gte=0),
                name="chat_msg_earner_amount_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(platform_fee__gte=0),
                name="chat_msg_platform_fee_non_negative",
            ),
        ]

    def __str__(self) -> str:
        preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"User {self.sender_id}: {preview}"

    @property
    def is_resolved(self) -> bool:
        return self.refund_status is not None
