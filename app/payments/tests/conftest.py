"""
Pytest fixtures for payment tests.

This module provides payout-ready earners and patched StripeAdapter
calls so services and views run without network access.

Usage:
    def test_withdraw(ready_earner, mock_stripe, auth_client):
        response = auth_client(ready_earner).post(...)
        mock_stripe.create_transfer.assert_called_once()
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from payments.adapters import ConnectAccountStatus, PaymentIntentResult, TransferResult
from payments.tests.factories import ConnectedAccountFactory

ADAPTER = "payments.adapters.stripe_adapter.StripeAdapter"
ONBOARDING_URL = "https://connect.stripe.com/setup/e/acct_new123/onboard"


# =============================================================================
# Earner Fixtures
# =============================================================================


@pytest.fixture
def connected_account(db):
    """Payout-ready Stripe Connect account owned by a new earner."""
    return ConnectedAccountFactory()


@pytest.fixture
def ready_earner(connected_account, fund_wallet):
    """Earner with a ready account and $100.00 available."""
    fund_wallet(connected_account.user, available="100.00")
    return connected_account.user


# =============================================================================
# Stripe Fixtures
# =============================================================================


def make_intent(
    id="pi_test_popular_1",
    status="succeeded",
    amount_cents=10000,
    metadata=None,
    client_secret=None,
) -> PaymentIntentResult:
    return PaymentIntentResult(
        id=id,
        status=status,
        amount_cents=amount_cents,
        currency="usd",
        client_secret=client_secret,
        metadata=metadata or {},
    )


def _transfer(amount_cents, destination_account, idempotency_key=None, metadata=None):
    return TransferResult(
        id=f"tr_{destination_account}",
        amount_cents=amount_cents,
        currency="usd",
        destination_account=destination_account,
        metadata=metadata or {},
    )


@pytest.fixture
def mock_stripe(stripe_configured):
    """
    Patch every StripeAdapter network call.

    Defaults:
        find_or_create_customer -> "cus_test123"
        create_payment_intent -> intent with client secret
        create_transfer -> TransferResult "tr_<account id>"
        update_payout_schedule -> {}
        retrieve_payment_intent: set return_value per test (make_intent)
        create_connected_account -> ConnectAccountStatus "acct_new123"
        retrieve_account -> onboarding not finished for the given id
        create_account_link -> hosted onboarding URL
    """
    with (
        patch(f"{ADAPTER}.find_or_create_customer", return_value="cus_test123") as customer,
        patch(f"{ADAPTER}.create_payment_intent") as create_intent,
        patch(f"{ADAPTER}.retrieve_payment_intent") as retrieve_intent,
        patch(f"{ADAPTER}.create_transfer", side_effect=_transfer) as create_transfer,
        patch(f"{ADAPTER}.update_payout_schedule", return_value={}) as update_schedule,
        patch(
            f"{ADAPTER}.create_connected_account",
            return_value=ConnectAccountStatus(id="acct_new123"),
        ) as create_account,
        patch(f"{ADAPTER}.retrieve_account", side_effect=ConnectAccountStatus) as retrieve_account,
        patch(
            f"{ADAPTER}.create_account_link",
            return_value=ONBOARDING_URL,
        ) as create_link,
    ):
        create_intent.return_value = make_intent(
            id="pi_test_new_1",
            status="requires_payment_method",
            client_secret="pi_test_new_1_secret_abc",
        )
        yield SimpleNamespace(
            find_or_create_customer=customer,
            create_payment_intent=create_intent,
            retrieve_payment_intent=retrieve_intent,
            create_transfer=create_transfer,
            update_payout_schedule=update_schedule,
            create_connected_account=create_account,
            retrieve_account=retrieve_account,
            create_account_link=create_link,
        )
