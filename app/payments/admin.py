"""
Payment admin configuration.

This file imports admin configurations from the ledger submodule
and registers payout, promotion and video date models with the Django admin.
"""

from django.contrib import admin

from payments.ledger.admin import EarningsReleaseAdmin, TransactionAdmin, WalletAdmin
from payments.models import ConnectedAccount, LaunchPromotion, VideoDate, Withdrawal

__all__ = [
    "WalletAdmin",
    "TransactionAdmin",
    "EarningsReleaseAdmin",
    "ConnectedAccountAdmin",
    "WithdrawalAdmin",
    "LaunchPromotionAdmin",
    "VideoDateAdmin",
]


@admin.register(ConnectedAccount)
class ConnectedAccountAdmin(admin.ModelAdmin):
    """
    Admin configuration for ConnectedAccount.

    payout_hold is the lever for pulling an earner out of the weekly
    payout sweep during manual review.
    """

    list_display = [
        "id",
        "user",
        "stripe_account_id",
        "onboarding_complete",
        "payout_hold",
        "created_at",
    ]
    list_filter = ["onboarding_complete", "payout_hold"]
    list_editable = ["payout_hold"]
    search_fields = ["id", "stripe_account_id", "user__email"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "user", "stripe_account_id"),
            },
        ),
        (
            "Status",
            {
                "fields": ("onboarding_complete", "payout_hold"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


@admin.register(Withdrawal)
class WithdrawalAdmin(admin.ModelAdmin):
    """
    Admin configuration for Withdrawal.

    Withdrawals are read-only here: the status is driven by the
    withdrawal service and Stripe transfer webhooks.
    """

    list_display = [
        "id",
        "user",
        "amount_display",
        "status",
        "source",
        "stripe_transfer_id",
        "created_at",
    ]
    list_filter = ["status", "source", "created_at"]
    search_fields = ["id", "stripe_transfer_id", "user__email"]
    readonly_fields = [
        "id",
        "user",
        "amount",
        "status",
        "source",
        "stripe_transfer_id",
        "failure_reason",
        "processed_at",
        "failed_at",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "user", "status", "source"),
            },
        ),
        (
            "Amount",
            {
                "fields": ("amount",),
            },
        ),
        (
            "Stripe",
            {
                "fields": ("stripe_transfer_id", "processed_at"),
            },
        ),
        (
            "Failure Info",
            {
                "fields": ("failed_at", "failure_reason"),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def amount_display(self, obj: Withdrawal) -> str:
        """Display the amount formatted as currency."""
        return f"${obj.amount:,.2f} USD"

    amount_display.short_description = "Amount"

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for withdrawals (audit trail)."""
        return False


@admin.register(LaunchPromotion)
class LaunchPromotionAdmin(admin.ModelAdmin):
    """Admin configuration for LaunchPromotion claims."""

    list_display = [
        "user",
        "promotion_type",
        "user_type",
        "bonus_credits",
        "featured_until",
        "created_at",
    ]
    list_filter = ["promotion_type", "user_type"]
    search_fields = ["user__email"]
    readonly_fields = [
        "id",
        "user",
        "promotion_type",
        "user_type",
        "bonus_credits",
        "featured_until",
        "created_at",
        "updated_at",
    ]
    ordering = ["created_at"]

    def has_add_permission(self, request) -> bool:
        return False


@admin.register(VideoDate)
class VideoDateAdmin(admin.ModelAdmin):
    """
    Admin configuration for VideoDate.

    Read-only: reservations and settlements move wallet balances and are
    only driven through VideoDateBillingService.
    """

    list_display = [
        "id",
        "seeker",
        "earner",
        "status",
        "scheduled_start",
        "scheduled_duration",
        "credits_reserved",
        "credits_charged",
    ]
    list_filter = ["status", "scheduled_start"]
    search_fields = ["id", "seeker__email", "earner__email"]
    readonly_fields = [field.name for field in VideoDate._meta.fields]
    date_hierarchy = "scheduled_start"
    ordering = ["-scheduled_start"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
