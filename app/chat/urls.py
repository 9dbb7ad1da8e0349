"""
URL configuration for chat API.

URL Structure:
    /messages/send/    POST

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import path

from chat.views import SendMessageView

app_name = "chat"

urlpatterns = [
    path("messages/send/", SendMessageView.as_view(), name="message-send"),
]
