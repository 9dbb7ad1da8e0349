"""
Tests for the chat API views.

Tests follow pattern: test_<scenario>_<expected_outcome>
"""

from rest_framework import status

from chat.models import Message

SEND_URL = "/api/v1/chat/messages/send/"


class TestSendMessageView:
    def test_unauthenticated_returns_401(self, api_client, earner):
        response = api_client.post(
            SEND_URL, {"recipientId": str(earner.id), "content": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_billed_send_returns_message_and_billing(self, seeker_client, earner):
        response = seeker_client.post(
            SEND_URL, {"recipientId": str(earner.id), "content": "Hello!"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["billing"] == {"charged": True, "creditsSpent": 1, "newBalance": 9}
        assert body["message"]["content"] == "Hello!"
        assert body["message"]["is_billable_volley"] is True
        assert body["message"]["reply_deadline"] is not None
        assert body["conversationId"] == str(Message.objects.get().conversation_id)

    def test_image_message_type(self, seeker_client, earner):
        response = seeker_client.post(
            SEND_URL,
            {"recipientId": str(earner.id), "content": "photo", "messageType": "image"},
            format="json",
        )

        assert response.json()["billing"]["creditsSpent"] == 2

    def test_validation_error_body(self, seeker_client, earner):
        response = seeker_client.post(
            SEND_URL, {"recipientId": str(earner.id), "content": "   "}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {
            "error": "Message content cannot be empty",
            "error_code": "INVALID_INPUT",
        }

    def test_insufficient_credits(self, auth_client, seeker, earner):
        response = auth_client(seeker).post(
            SEND_URL, {"recipientId": str(earner.id), "content": "Hi"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "INSUFFICIENT_CREDITS"

    def test_missing_recipient(self, seeker_client):
        response = seeker_client.post(SEND_URL, {"content": "Hi"}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Invalid recipientId"

    def test_earner_reply_in_conversation(self, seeker_client, earner_client, funded_seeker, earner):
        first = seeker_client.post(
            SEND_URL, {"recipientId": str(earner.id), "content": "Hello"}, format="json"
        ).json()

        response = earner_client.post(
            SEND_URL,
            {
                "recipientId": str(funded_seeker.id),
                "content": "Hi back",
                "conversationId": first["conversationId"],
            },
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["billing"]["charged"] is False
        assert Message.objects.get(pk=first["message"]["id"]).refund_status == "replied"
