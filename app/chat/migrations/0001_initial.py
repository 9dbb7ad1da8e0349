"""
Create Conversation and Message with billing and reply-deadline fields.

Changes:
    - Conversation unique per (seeker, earner)
    - Message billing columns with non-negative split constraints
    - Partial index over pending billable volleys for the refund sweep
"""

import uuid
from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Conversation",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "last_message_at",
                    models.DateTimeField(
                        blank=True,
                        db_index=True,
                        help_text="Timestamp of most recent message (for sorting conversation lists)",
                        null=True,
                    ),
                ),
                (
                    "earner",
                    models.ForeignKey(
                        help_text="Earner participant",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="earner_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "payer",
                    models.ForeignKey(
                        blank=True,
                        help_text="User charged for billable messages (seeker when empty)",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="paid_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seeker",
                    models.ForeignKey(
                        help_text="Seeker participant",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="seeker_conversations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_conversation",
                "ordering": ["-last_message_at", "-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("seeker", "earner"),
                        name="chat_conv_unique_pair",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Message",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "message_type",
                    models.CharField(
                        choices=[("text", "Text"), ("image", "Image")],
                        default="text",
                        help_text="Type of message (text or image)",
                        max_length=10,
                    ),
                ),
                (
                    "content",
                    models.TextField(
                        help_text="Message text (or image reference for image messages)",
                    ),
                ),
                (
                    "is_billable_volley",
                    models.BooleanField(
                        default=False,
                        help_text="Whether this message opened a paid exchange",
                    ),
                ),
                (
                    "credits_cost",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Credits charged to the payer",
                    ),
                ),
                (
                    "earner_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="USD held as pending earnings for the recipient",
                        max_digits=10,
                    ),
                ),
                (
                    "platform_fee",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="USD retained by the platform",
                        max_digits=10,
                    ),
                ),
                (
                    "billed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the payer was charged",
                        null=True,
                    ),
                ),
                (
                    "reply_deadline",
                    models.DateTimeField(
                        blank=True,
                        help_text="Refund becomes due if no reply arrives before this time",
                        null=True,
                    ),
                ),
                (
                    "refund_status",
                    models.CharField(
                        blank=True,
                        choices=[("replied", "Replied"), ("refunded", "Refunded")],
                        help_text="Resolution of the deadline (empty while pending)",
                        max_length=10,
                        null=True,
                    ),
                ),
                (
                    "refunded_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the refund was applied",
                        null=True,
                    ),
                ),
                (
                    "conversation",
                    models.ForeignKey(
                        help_text="Conversation this message belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="messages",
                        to="chat.conversation",
                    ),
                ),
                (
                    "recipient",
                    models.ForeignKey(
                        help_text="User this message is addressed to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="received_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "sender",
                    models.ForeignKey(
                        help_text="User who sent this message",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sent_messages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "chat_message",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(
                        fields=["conversation", "created_at"],
                        name="chat_msg_conv_created_idx",
                    ),
                    models.Index(
                        condition=models.Q(
                            ("is_billable_volley", True), ("refund_status__isnull", True)
                        ),
                        fields=["reply_deadline"],
                        name="chat_msg_pending_deadline_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("earner_amount__gte", 0)),
                        name="chat_msg_earner_amount_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("platform_fee__gte", 0)),
                        name="chat_msg_platform_fee_non_negative",
                    ),
                ],
            },
        ),
    ]
