"""
Serializers for the chat API.

Request serializers only map the camelCase wire names onto Python
arguments; the content rules (sanitizing, length, billing) live in
MessageService so every caller gets the same error messages.
"""

from __future__ import annotations

from rest_framework import serializers

from chat.models import Message, MessageType


class SendMessageSerializer(serializers.Serializer):
    """
    Payload for POST /api/v1/chat/messages/send/.

    Fields:
        recipientId: UUID of the other participant
        content: Message text (1-5000 chars after sanitizing)
        messageType: text (default) or image
        conversationId: Existing conversation (optional)
    """

    recipientId = serializers.CharField(
        required=False,
        allow_blank=True,
        help_text="UUID of the recipient",
    )
    content = serializers.CharField(
        required=False,
        allow_blank=True,
        trim_whitespace=False,
        help_text="Message content (max 5,000 characters after sanitizing)",
    )
    messageType = serializers.CharField(
        required=False,
        default=MessageType.TEXT,
        help_text="Message type: text or image",
    )
    conversationId = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        help_text="Existing conversation id (optional)",
    )


class MessageSerializer(serializers.ModelSerializer):
    """Read serializer for a stored message, including its billing fields."""

    conversation_id = serializers.UUIDField(read_only=True)
    sender_id = serializers.UUIDField(read_only=True)
    recipient_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sender_id",
            "recipient_id",
            "content",
            "message_type",
            "is_billable_volley",
            "credits_cost",
            "earner_amount",
            "platform_fee",
            "reply_deadline",
            "billed_at",
            "refund_status",
            "created_at",
        ]
        read_only_fields = fields


class SendMessageResponseSerializer(serializers.Serializer):
    """Schema of a successful send."""

    success = serializers.BooleanField()
    message = MessageSerializer()
    billing = serializers.DictField()
    conversationId = serializers.UUIDField()
