"""
Django admin configuration for ledger models.

Wallets are visible but read-only: balances only move through
WalletLedger. Transactions are append-only, so the admin can neither
edit nor delete them.
"""

from django.contrib import admin

from .models import EarningsRelease, Transaction, Wallet


@admin.register(Wallet)
class WalletAdmin(admin.ModelAdmin):
    """Read-only view of per-user balances."""

    list_display = [
        "user",
        "credit_balance",
        "pending_earnings",
        "available_earnings",
        "paid_out_total",
        "updated_at",
    ]
    search_fields = ["user__email"]
    readonly_fields = [
        "user",
        "credit_balance",
        "pending_earnings",
        "available_earnings",
        "paid_out_total",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request) -> bool:
        """Wallets are created by the user post_save signal."""
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    """
    Admin configuration for Transaction.

    Corrections are made with new ADJUSTMENT rows through WalletLedger,
    never by editing history.
    """

    list_display = [
        "id",
        "created_at",
        "user",
        "transaction_type",
        "credits_amount",
        "usd_amount",
        "status",
    ]
    list_filter = ["transaction_type", "status", "created_at"]
    search_fields = ["id", "user__email", "stripe_payment_id", "description"]
    readonly_fields = [
        "id",
        "created_at",
        "user",
        "transaction_type",
        "credits_amount",
        "usd_amount",
        "status",
        "description",
        "stripe_payment_id",
        "message",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_delete_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_add_permission(self, request) -> bool:
        return False


@admin.register(EarningsRelease)
class EarningsReleaseAdmin(admin.ModelAdmin):
    list_display = ["transaction", "outcome", "created_at"]
    list_filter = ["outcome"]
    readonly_fields = ["transaction", "outcome", "created_at"]

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_add_permission(self, request) -> bool:
        return False
