"""
Test configuration and fixtures for chat tests.

This module provides:
- A seeker/earner conversation and a funded seeker
- An authenticated client for the send endpoint

Usage:
    def test_example(funded_seeker, earner, seeker_client):
        response = seeker_client.post(
            "/api/v1/chat/messages/send/",
            {"recipientId": str(earner.id), "content": "Hi"},
            format="json",
        )
        assert response.status_code == 200
"""

import pytest

from chat.tests.factories import ConversationFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def funded_seeker(seeker, fund_wallet):
    """Seeker holding 10 credits."""
    fund_wallet(seeker, credits=10)
    return seeker


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def conversation(funded_seeker, earner):
    """Conversation between funded_seeker and earner; seeker pays."""
    return ConversationFactory(seeker=funded_seeker, earner=earner)


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def seeker_client(auth_client, funded_seeker):
    """API client authenticated as funded_seeker."""
    return auth_client(funded_seeker)


@pytest.fixture
def earner_client(auth_client, earner):
    """API client authenticated as earner."""
    return auth_client(earner)
