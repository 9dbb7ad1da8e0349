"""
ConnectedAccount model for Stripe Connect payouts.

Each earner who can be paid has one ConnectedAccount holding their
Stripe Connect account id and onboarding state.

Usage:
    from payments.models import ConnectedAccount

    account = ConnectedAccount.objects.filter(user=user).first()
    if account and account.is_ready_for_payouts:
        StripeAdapter.create_transfer(
            amount_cents=2500,
            destination_account=account.stripe_account_id,
            idempotency_key=key,
        )
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel


class ConnectedAccount(UUIDPrimaryKeyMixin, BaseModel):
    """
    An earner's Stripe Connect account.

    Fields:
        user: Earner this account pays out to
        stripe_account_id: Unique Stripe Account ID (acct_xxx)
        onboarding_complete: Whether Stripe onboarding has finished
        payout_hold: Excludes the account from the weekly payout sweep

    Properties:
        is_ready_for_payouts: Account id present and onboarding complete

    Note:
        user uses PROTECT so an earner with payout history cannot be
        deleted by accident.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="connected_account",
        help_text="Earner this connected account belongs to",
    )

    stripe_account_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Account ID (acct_xxx)",
    )

    onboarding_complete = models.BooleanField(
        default=False,
        help_text="Whether Stripe Connect onboarding has finished",
    )

    payout_hold = models.BooleanField(
        default=False,
        help_text="Skip this account in scheduled payouts (manual review)",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Connected Account"
        verbose_name_plural = "Connected Accounts"

    def __str__(self) -> str:
        status = "ready" if self.is_ready_for_payouts else "onboarding"
        return f"ConnectedAccount({self.stripe_account_id}, {status})"

    @property
    def is_ready_for_payouts(self) -> bool:
        """
        Check if account can receive transfers.

        Returns:
            True when a Stripe account id exists and onboarding is complete
        """
        return bool(self.stripe_account_id) and self.onboarding_complete
