"""
Payments app configuration.

This app provides the billing settlement core:
- Wallet ledger (credits, pending and available earnings)
- Stripe credit purchases, withdrawals and payout schedules
- Refund, earnings maturation and weekly payout sweeps
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
