"""
Chat application configuration.

This app provides seeker/earner conversations with:
- Volley billing on message send
- The reply-deadline state machine driving refunds
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
