"""
Add video date billing.

Changes:
    - VideoDate with FSM status and settlement columns
    - video_date and video_date_refund transaction types
"""

import uuid

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0002_billing_beat_schedules"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AlterField(
            model_name="transaction",
            name="transaction_type",
            field=models.CharField(
                choices=[
                    ("credit_purchase", "Credit Purchase"),
                    ("message_sent", "Message Sent"),
                    ("message_refund", "Message Refund"),
                    ("earning", "Earning"),
                    ("earning_reversal", "Earning Reversal"),
                    ("earnings_matured", "Earnings Matured"),
                    ("launch_bonus", "Launch Bonus"),
                    ("payout", "Payout"),
                    ("video_date", "Video Date"),
                    ("video_date_refund", "Video Date Refund"),
                    ("video_extension", "Video Extension"),
                    ("adjustment", "Adjustment"),
                ],
                db_index=True,
                help_text="Category of this movement",
                max_length=30,
            ),
        ),
        migrations.CreateModel(
            name="VideoDate",
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
                    "scheduled_start",
                    models.DateTimeField(help_text="When the call is booked to start"),
                ),
                (
                    "scheduled_duration",
                    models.PositiveIntegerField(help_text="Booked minutes, including extensions"),
                ),
                (
                    "credits_reserved",
                    models.PositiveIntegerField(
                        help_text="Credits reserved from the seeker for the booked minutes"
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("in_progress", "In progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="scheduled",
                        help_text="Current state of the video date (managed by FSM)",
                        max_length=50,
                    ),
                ),
                (
                    "actual_start",
                    models.DateTimeField(blank=True, help_text="When the call connected", null=True),
                ),
                (
                    "actual_end",
                    models.DateTimeField(
                        blank=True, help_text="When the call was settled", null=True
                    ),
                ),
                (
                    "billed_minutes",
                    models.PositiveIntegerField(
                        blank=True, help_text="Minutes charged to the seeker", null=True
                    ),
                ),
                (
                    "credits_charged",
                    models.PositiveIntegerField(
                        blank=True, help_text="Credits kept out of the reservation", null=True
                    ),
                ),
                (
                    "earner_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="USD share held for the earner",
                        max_digits=12,
                        null=True,
                    ),
                ),
                (
                    "platform_fee",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="USD kept by the platform",
                        max_digits=12,
                        null=True,
                    ),
                ),
                (
                    "cancel_reason",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Why the reservation was returned in full",
                        max_length=100,
                    ),
                ),
                (
                    "earner",
                    models.ForeignKey(
                        help_text="Earner being paid for the call",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="video_dates_hosted",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seeker",
                    models.ForeignKey(
                        help_text="Seeker paying for the call",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="video_dates_booked",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Video Date",
                "verbose_name_plural": "Video Dates",
                "ordering": ["-scheduled_start"],
                "indexes": [
                    models.Index(
                        fields=["seeker", "status"],
                        name="videodate_seeker_status_idx",
                    ),
                    models.Index(
                        fields=["earner", "status"],
                        name="videodate_earner_status_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("scheduled_duration__gt", 0)),
                        name="videodate_duration_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("seeker", models.F("earner")), _negated=True),
                        name="videodate_distinct_participants",
                    ),
                ],
            },
        ),
    ]
