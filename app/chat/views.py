"""
Views for the chat API.

URL Structure:
    /api/v1/chat/messages/send/    POST

Design Decisions:
    - Views handle HTTP only; MessageService validates, bills and stores
    - Failed ServiceResults are returned as {error, error_code}
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.serializers import (
    MessageSerializer,
    SendMessageResponseSerializer,
    SendMessageSerializer,
)
from chat.services import MessageService


class SendMessageView(APIView):
    """
    Send a message to another user.

    POST /api/v1/chat/messages/send/

    Payload:
        recipientId: UUID of the recipient
        content: Message text
        messageType: "text" | "image" (default "text")
        conversationId: Optional existing conversation

    When the sender is the seeker and the message opens a new exchange,
    the payer is charged (1 credit text, 2 credits image) and the
    earner's share is held as pending earnings until the 24h reply
    deadline resolves.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_message",
        summary="Send a message",
        request=SendMessageSerializer,
        responses={
            200: SendMessageResponseSerializer,
            400: OpenApiResponse(description="Invalid input or insufficient credits"),
            403: OpenApiResponse(description="Sender is not part of the conversation"),
            404: OpenApiResponse(description="Recipient or conversation not found"),
        },
        tags=["Chat - Messages"],
    )
    def post(self, request):
        """Send a message, billing it when it opens a paid exchange."""
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = MessageService.send_message(
            sender=request.user,
            recipient_id=data.get("recipientId"),
            content=data.get("content", ""),
            message_type=data.get("messageType"),
            conversation_id=data.get("conversationId"),
        )

        if not result.success:
            return Response(result.to_response(), status=result.status_code)

        return Response(
            {
                "success": True,
                "message": MessageSerializer(result.data["message"]).data,
                "billing": result.data["billing"],
                "conversationId": str(result.data["conversation_id"]),
            },
            status=status.HTTP_200_OK,
        )
