"""
Pytest fixtures for webhook tests.

Provides Stripe event payload builders and a patched signature check.
"""

import json
from unittest.mock import patch

import pytest
from django.test import RequestFactory

from payments.tests.factories import WithdrawalFactory
from payments.state_machines import WithdrawalStatus


# =============================================================================
# Event Payloads
# =============================================================================


@pytest.fixture
def payment_intent_succeeded_event(seeker):
    """payment_intent.succeeded for the popular package bought by seeker."""
    return {
        "id": "evt_pi_succeeded_1",
        "type": "payment_intent.succeeded",
        "data": {
            "object": {
                "id": "pi_webhook_popular_1",
                "object": "payment_intent",
                "amount": 10000,
                "amount_received": 10000,
                "currency": "usd",
                "status": "succeeded",
                "metadata": {
                    "user_id": str(seeker.pk),
                    "package_id": "popular",
                    "credits": "1100",
                },
            }
        },
    }


@pytest.fixture
def processing_withdrawal(db):
    """Manual withdrawal whose transfer tr_webhook_1 was created."""
    withdrawal = WithdrawalFactory()
    withdrawal.begin_processing(transfer_id="tr_webhook_1")
    withdrawal.save()
    assert withdrawal.status == WithdrawalStatus.PROCESSING
    return withdrawal


def transfer_event(event_type: str, transfer_id: str = "tr_webhook_1") -> dict:
    return {
        "id": f"evt_{event_type.replace('.', '_')}",
        "type": event_type,
        "data": {"object": {"id": transfer_id, "object": "transfer", "amount": 5000}},
    }


# =============================================================================
# Request Helpers
# =============================================================================


@pytest.fixture
def rf():
    """Request factory for creating test requests."""
    return RequestFactory()


@pytest.fixture
def make_webhook_request(rf):
    """Build a signed-looking POST to the webhook endpoint."""

    def _make(payload: dict, signature: str = "t=1,v1=test_sig"):
        kwargs = {"HTTP_STRIPE_SIGNATURE": signature} if signature else {}
        return rf.post(
            "/api/v1/billing/webhooks/stripe/",
            data=json.dumps(payload),
            content_type="application/json",
            **kwargs,
        )

    return _make


@pytest.fixture
def mock_construct_event():
    """Skip real signature verification; return the posted payload."""
    with patch("payments.webhooks.views.StripeAdapter.construct_webhook_event") as mock:
        mock.side_effect = lambda payload, signature: json.loads(payload)
        yield mock
