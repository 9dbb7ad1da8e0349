"""
Django admin configuration for chat models.

Billing fields are read-only: charges and refunds only move through
MessageService and the refund sweep.
"""

from django.contrib import admin

from chat.models import Conversation, Message


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = ["id", "seeker", "earner", "payer", "created_at", "last_message_at"]
    search_fields = ["id", "seeker__email", "earner__email"]
    readonly_fields = ["created_at", "updated_at", "last_message_at"]
    raw_id_fields = ["seeker", "earner", "payer"]
    ordering = ["-created_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "message_type",
        "content_preview",
        "is_billable_volley",
        "credits_cost",
        "refund_status",
        "reply_deadline",
        "created_at",
    ]
    list_filter = ["message_type", "is_billable_volley", "refund_status", "created_at"]
    search_fields = ["id", "sender__email", "recipient__email"]
    readonly_fields = [
        "created_at",
        "updated_at",
        "is_billable_volley",
        "credits_cost",
        "earner_amount",
        "platform_fee",
        "billed_at",
        "reply_deadline",
        "refund_status",
        "refunded_at",
    ]
    raw_id_fields = ["conversation", "sender", "recipient"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
