"""
Ledger models for wallet balances and the transaction log.

This module defines the storage beneath every billing operation:
- Wallet: Per-user balances (credits, pending/available earnings, payouts)
- Transaction: Append-only log, one row per user-visible balance change
- EarningsRelease: Marker closing the hold period of one earning

Balances live in denormalized columns on Wallet and are only ever
changed with single-statement F() updates issued by WalletLedger. The
Transaction log is the audit trail; it is never rewritten.

Usage:
    from payments.ledger.models import Wallet, Transaction, TransactionType

    wallet = Wallet.objects.get(user=user)
    wallet.credit_balance  # 120

    history = Transaction.objects.filter(user=user)
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Q

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class TransactionType(models.TextChoices):
    """
    Categories of ledger movements.

    Values:
        CREDIT_PURCHASE: Credits bought through Stripe
        MESSAGE_SENT: Credits spent on a billable message
        MESSAGE_REFUND: Credits returned for an unanswered message
        EARNING: Earner share held as pending (negative usd for withdrawals)
        EARNING_REVERSAL: Pending earning released by a refund
        EARNINGS_MATURED: Pending earning moved to available
        LAUNCH_BONUS: Promotional credits
        PAYOUT: Weekly automatic payout
        VIDEO_DATE: Credits reserved when a video date is booked
        VIDEO_DATE_REFUND: Reserved video credits returned (unused or cancelled)
        VIDEO_EXTENSION: Credits spent extending a video date
        ADJUSTMENT: Manual correction
    """

    CREDIT_PURCHASE = "credit_purchase", "Credit Purchase"
    MESSAGE_SENT = "message_sent", "Message Sent"
    MESSAGE_REFUND = "message_refund", "Message Refund"
    EARNING = "earning", "Earning"
    EARNING_REVERSAL = "earning_reversal", "Earning Reversal"
    EARNINGS_MATURED = "earnings_matured", "Earnings Matured"
    LAUNCH_BONUS = "launch_bonus", "Launch Bonus"
    PAYOUT = "payout", "Payout"
    VIDEO_DATE = "video_date", "Video Date"
    VIDEO_DATE_REFUND = "video_date_refund", "Video Date Refund"
    VIDEO_EXTENSION = "video_extension", "Video Extension"
    ADJUSTMENT = "adjustment", "Adjustment"


class TransactionStatus(models.TextChoices):
    """Processing status of a Transaction row."""

    COMPLETED = "completed", "Completed"
    PROCESSING = "processing", "Processing"
    FAILED = "failed", "Failed"


class ReleaseOutcome(models.TextChoices):
    """How the hold period of an earning ended."""

    MATURED = "matured", "Matured"
    REVERSED = "reversed", "Reversed"


class Wallet(BaseModel):
    """
    Per-user balances.

    Fields:
        user: Owner (one wallet per user, created on signup)
        credit_balance: Spendable credits
        pending_earnings: Earner revenue still inside the hold period
        available_earnings: Withdrawable earner revenue
        paid_out_total: Cumulative payouts (never decreases)

    Constraints:
        - All four balances are non-negative

    Note:
        Never assign balances and call save(). Use WalletLedger, which
        issues conditional UPDATE ... SET x = x +/- n statements.
    """

    # ==========================================================================
    # Owner
    # ==========================================================================

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="wallet",
        help_text="User that owns this wallet",
    )

    # ==========================================================================
    # Balances
    # ==========================================================================

    credit_balance = models.PositiveIntegerField(
        default=0,
        help_text="Spendable credits",
    )
    pending_earnings = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="USD earnings still inside the hold period",
    )
    available_earnings = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="USD earnings available for withdrawal",
    )
    paid_out_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Cumulative USD paid out to the user's bank",
    )

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(credit_balance__gte=0),
                name="wallet_credit_balance_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(pending_earnings__gte=0),
                name="wallet_pending_earnings_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(available_earnings__gte=0),
                name="wallet_available_earnings_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(paid_out_total__gte=0),
                name="wallet_paid_out_total_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"Wallet({self.user_id}, credits={self.credit_balance})"

    @property
    def earnings_balance(self) -> Decimal:
        """Alias used by the withdrawal API."""
        return self.available_earnings


class Transaction(UUIDPrimaryKeyMixin, models.Model):
    """
    One user-visible balance change.

    Rows are append-only: save() refuses to update an existing row.
    Corrections are new ADJUSTMENT rows.

    Fields:
        user: Whose balance changed
        transaction_type: Category (see TransactionType)
        credits_amount: Signed credit delta (0 for USD-only movements)
        usd_amount: Signed USD delta, or null for credit-only movements
        status: completed/processing/failed
        description: Human-readable summary shown in the wallet history
        stripe_payment_id: PaymentIntent id for purchases (unique)
        message: Originating chat message for message charges and earnings
        created_at: When the change was recorded

    Constraints:
        - stripe_payment_id is unique, which makes crediting a purchase
          idempotent across the confirm endpoint and the webhook
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="transactions",
        help_text="User whose balance changed",
    )
    transaction_type = models.CharField(
        max_length=30,
        choices=TransactionType.choices,
        db_index=True,
        help_text="Category of this movement",
    )
    credits_amount = models.IntegerField(
        default=0,
        help_text="Signed credit delta",
    )
    usd_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Signed USD delta",
    )
    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.COMPLETED,
        help_text="Processing status",
    )
    description = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Human-readable description",
    )
    stripe_payment_id = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text="Stripe PaymentIntent id (pi_xxx) for credit purchases",
    )
    message = models.ForeignKey(
        "chat.Message",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="transactions",
        help_text="Chat message this movement belongs to",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="When this movement was recorded",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="txn_user_created_idx"),
            models.Index(
                fields=["transaction_type", "status", "created_at"],
                name="txn_type_status_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_transaction_type_display()}: {self.credits_amount} credits / {self.usd_amount} usd"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Transactions are append-only and cannot be modified")
        super().save(*args, **kwargs)


class EarningsRelease(models.Model):
    """
    Marks the end of an earning's hold period.

    Exactly one marker exists per resolved EARNING transaction. The
    maturation sweep inserts MATURED; a message refund inserts REVERSED
    so the reversed amount is never promoted to available earnings.
    The unique transaction column is what makes maturation safe to run
    concurrently.
    """

    transaction = models.OneToOneField(
        Transaction,
        on_delete=models.PROTECT,
        related_name="release",
        help_text="The EARNING transaction whose hold ended",
    )
    outcome = models.CharField(
        max_length=10,
        choices=ReleaseOutcome.choices,
        help_text="Whether the earning matured or was reversed",
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the hold ended",
    )

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"EarningsRelease({self.transaction_id}, {self.outcome})"
