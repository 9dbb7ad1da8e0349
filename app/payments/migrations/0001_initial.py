"""
Create the billing ledger and payout models.

Changes:
    - Wallet with non-negative balance constraints
    - Append-only Transaction log (unique stripe_payment_id)
    - EarningsRelease markers, one per resolved earning
    - ConnectedAccount, Withdrawal (FSM status) and LaunchPromotion
"""

import uuid
from decimal import Decimal

import django.db.models.deletion
import django_fsm
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("chat", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # ======================================================================
        # Ledger
        # ======================================================================
        migrations.CreateModel(
            name="Wallet",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
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
                    "credit_balance",
                    models.PositiveIntegerField(default=0, help_text="Spendable credits"),
                ),
                (
                    "pending_earnings",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="USD earnings still inside the hold period",
                        max_digits=12,
                    ),
                ),
                (
                    "available_earnings",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="USD earnings available for withdrawal",
                        max_digits=12,
                    ),
                ),
                (
                    "paid_out_total",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0.00"),
                        help_text="Cumulative USD paid out to the user's bank",
                        max_digits=12,
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        help_text="User that owns this wallet",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="wallet",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("credit_balance__gte", 0)),
                        name="wallet_credit_balance_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("pending_earnings__gte", 0)),
                        name="wallet_pending_earnings_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("available_earnings__gte", 0)),
                        name="wallet_available_earnings_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("paid_out_total__gte", 0)),
                        name="wallet_paid_out_total_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=[
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
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("credit_purchase", "Credit Purchase"),
                            ("message_sent", "Message Sent"),
                            ("message_refund", "Message Refund"),
                            ("earning", "Earning"),
                            ("earning_reversal", "Earning Reversal"),
                            ("earnings_matured", "Earnings Matured"),
                            ("launch_bonus", "Launch Bonus"),
                            ("payout", "Payout"),
                            ("video_extension", "Video Extension"),
                            ("adjustment", "Adjustment"),
                        ],
                        db_index=True,
                        help_text="Category of this movement",
                        max_length=30,
                    ),
                ),
                (
                    "credits_amount",
                    models.IntegerField(default=0, help_text="Signed credit delta"),
                ),
                (
                    "usd_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Signed USD delta",
                        max_digits=12,
                        null=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("completed", "Completed"),
                            ("processing", "Processing"),
                            ("failed", "Failed"),
                        ],
                        default="completed",
                        help_text="Processing status",
                        max_length=20,
                    ),
                ),
                (
                    "description",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Human-readable description",
                        max_length=255,
                    ),
                ),
                (
                    "stripe_payment_id",
                    models.CharField(
                        blank=True,
                        help_text="Stripe PaymentIntent id (pi_xxx) for credit purchases",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="When this movement was recorded",
                    ),
                ),
                (
                    "message",
                    models.ForeignKey(
                        blank=True,
                        help_text="Chat message this movement belongs to",
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="chat.message",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User whose balance changed",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["user", "-created_at"],
                        name="txn_user_created_idx",
                    ),
                    models.Index(
                        fields=["transaction_type", "status", "created_at"],
                        name="txn_type_status_created_idx",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="EarningsRelease",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "outcome",
                    models.CharField(
                        choices=[("matured", "Matured"), ("reversed", "Reversed")],
                        help_text="Whether the earning matured or was reversed",
                        max_length=10,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, help_text="When the hold ended"),
                ),
                (
                    "transaction",
                    models.OneToOneField(
                        help_text="The EARNING transaction whose hold ended",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="release",
                        to="payments.transaction",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        # ======================================================================
        # Payouts
        # ======================================================================
        migrations.CreateModel(
            name="ConnectedAccount",
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
                    "stripe_account_id",
                    models.CharField(
                        help_text="Stripe Account ID (acct_xxx)",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "onboarding_complete",
                    models.BooleanField(
                        default=False,
                        help_text="Whether Stripe Connect onboarding has finished",
                    ),
                ),
                (
                    "payout_hold",
                    models.BooleanField(
                        default=False,
                        help_text="Skip this account in scheduled payouts (manual review)",
                    ),
                ),
                (
                    "user",
                    models.OneToOneField(
                        help_text="Earner this connected account belongs to",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="connected_account",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Connected Account",
                "verbose_name_plural": "Connected Accounts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Withdrawal",
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
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Withdrawal amount in USD",
                        max_digits=12,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the withdrawal (managed by FSM)",
                        max_length=50,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[("manual", "Manual"), ("weekly", "Weekly")],
                        default="manual",
                        help_text="Whether the earner or the weekly sweep initiated this",
                        max_length=10,
                    ),
                ),
                (
                    "stripe_transfer_id",
                    models.CharField(
                        blank=True,
                        help_text="Stripe Transfer ID (tr_xxx)",
                        max_length=255,
                        null=True,
                        unique=True,
                    ),
                ),
                (
                    "failure_reason",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Processor error if the withdrawal failed",
                    ),
                ),
                (
                    "processed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the Stripe transfer was created",
                        null=True,
                    ),
                ),
                (
                    "failed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the withdrawal failed",
                        null=True,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="Earner receiving the funds",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="withdrawals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Withdrawal",
                "verbose_name_plural": "Withdrawals",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["user", "status"],
                        name="withdrawal_user_status_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="withdrawal_amount_positive",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LaunchPromotion",
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
                    "promotion_type",
                    models.CharField(
                        choices=[
                            ("launch_bonus_500", "Launch bonus (500 credits)"),
                            ("launch_featured_30d", "Launch featured (30 days)"),
                        ],
                        db_index=True,
                        help_text="Promotion claimed",
                        max_length=30,
                    ),
                ),
                (
                    "user_type",
                    models.CharField(
                        help_text="seeker or earner at claim time",
                        max_length=10,
                    ),
                ),
                (
                    "bonus_credits",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Bonus credits granted by this promotion",
                    ),
                ),
                (
                    "featured_until",
                    models.DateTimeField(
                        blank=True,
                        help_text="End of featured placement",
                        null=True,
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        help_text="User who claimed the promotion",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="launch_promotions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Launch Promotion",
                "verbose_name_plural": "Launch Promotions",
                "ordering": ["created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "promotion_type"),
                        name="launch_promotion_unique_per_user",
                    ),
                ],
            },
        ),
    ]
