"""
Withdrawal model for tracking earner payouts.

A Withdrawal is one movement of available earnings to an earner's
connected account, either requested by the earner or made by the weekly
payout sweep.

Usage:
    from payments.models import Withdrawal

    withdrawal = Withdrawal.objects.create(user=earner, amount=Decimal("50.00"))

    # After the Stripe transfer is created
    withdrawal.begin_processing(transfer_id="tr_123")
    withdrawal.save()

    # If the transfer was rejected
    withdrawal.fail(reason="No such destination account")
    withdrawal.save()
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

from payments.state_machines import WithdrawalSource, WithdrawalStatus


class Withdrawal(UUIDPrimaryKeyMixin, BaseModel):
    """
    A transfer of available earnings to a connected account.

    State Flow:
        PENDING -> PROCESSING -> COMPLETED
        PENDING -> FAILED
        PROCESSING, COMPLETED -> FAILED   (transfer.failed / reversed webhook)

    The row is created in PENDING in the same database transaction that
    reserves the amount from available earnings. Its id seeds the Stripe
    idempotency key, so the transfer for one withdrawal is created at
    most once.

    Fields:
        user: Earner being paid
        amount: USD amount (2 decimal places)
        status: Current FSM state
        source: manual request or weekly sweep
        stripe_transfer_id: Stripe Transfer ID (tr_xxx) once created
        failure_reason: Processor error message if failed
        processed_at: When the transfer was created
        failed_at: When the withdrawal failed
    """

    # ==========================================================================
    # Relationships
    # ==========================================================================

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="withdrawals",
        help_text="Earner receiving the funds",
    )

    # ==========================================================================
    # Amount & State
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Withdrawal amount in USD",
    )

    status = FSMField(
        default=WithdrawalStatus.PENDING,
        choices=WithdrawalStatus.choices,
        db_index=True,
        help_text="Current state of the withdrawal (managed by FSM)",
    )

    source = models.CharField(
        max_length=10,
        choices=WithdrawalSource.choices,
        default=WithdrawalSource.MANUAL,
        help_text="Whether the earner or the weekly sweep initiated this",
    )

    # ==========================================================================
    # Stripe Integration
    # ==========================================================================

    stripe_transfer_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Stripe Transfer ID (tr_xxx)",
    )

    # ==========================================================================
    # Timestamps & Error Info
    # ==========================================================================

    failure_reason = models.TextField(
        blank=True,
        default="",
        help_text="Processor error if the withdrawal failed",
    )

    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the Stripe transfer was created",
    )

    failed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the withdrawal failed",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Withdrawal"
        verbose_name_plural = "Withdrawals"
        indexes = [
            models.Index(fields=["user", "status"], name="withdrawal_user_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="withdrawal_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"Withdrawal({self.id}, {self.status}, ${self.amount})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=WithdrawalStatus.PENDING,
        target=WithdrawalStatus.PROCESSING,
    )
    def begin_processing(self, transfer_id: str):
        """
        Record the Stripe transfer.

        Transition: PENDING -> PROCESSING
        """
        self.stripe_transfer_id = transfer_id
        self.processed_at = timezone.now()

    @transition(
        field=status,
        source=WithdrawalStatus.PROCESSING,
        target=WithdrawalStatus.COMPLETED,
    )
    def complete(self):
        """
        Mark the funds as delivered.

        Transition: PROCESSING -> COMPLETED
        """
        pass

    @transition(
        field=status,
        source=WithdrawalStatus.PENDING,
        target=WithdrawalStatus.FAILED,
    )
    def fail(self, reason: str = ""):
        """
        Mark the withdrawal as failed.

        Transition: PENDING -> FAILED

        The caller restores the reserved earnings in the same transaction.
        """
        self.failed_at = timezone.now()
        self.failure_reason = reason

    @transition(
        field=status,
        source=[WithdrawalStatus.PROCESSING, WithdrawalStatus.COMPLETED],
        target=WithdrawalStatus.FAILED,
    )
    def fail_transfer(self, reason: str = ""):
        """
        Record a transfer Stripe failed or reversed after creating it.

        Transition: PROCESSING | COMPLETED -> FAILED

        Balances are left alone; the payout was already recorded and the
        earnings need manual reconciliation.
        """
        self.failed_at = timezone.now()
        self.failure_reason = reason

    @property
    def is_terminal(self) -> bool:
        return self.status in (WithdrawalStatus.COMPLETED, WithdrawalStatus.FAILED)
