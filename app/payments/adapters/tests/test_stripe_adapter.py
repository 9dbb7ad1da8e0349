"""
Tests for Stripe adapter.

Tests cover:
- Parameter validation
- Idempotency key generation
- Error translation for each exception type
- Successful API operations
- Webhook signature verification
"""

import logging
import uuid
from unittest.mock import Mock

import pytest
import stripe
from django.test import override_settings

from payments.adapters import (
    CreatePaymentIntentParams,
    IdempotencyKeyGenerator,
    PaymentIntentResult,
    StripeAdapter,
    TransferResult,
)
from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeCardDeclinedError,
    StripeInsufficientFundsError,
    StripeInvalidAccountError,
    StripeInvalidRequestError,
    StripeRateLimitError,
)

from .conftest import MockStripeList, MockStripeObject

# =============================================================================
# CreatePaymentIntentParams Tests
# =============================================================================


class TestCreatePaymentIntentParams:
    """Tests for CreatePaymentIntentParams dataclass."""

    def test_defaults(self):
        params = CreatePaymentIntentParams(amount_cents=5000)

        assert params.currency == "usd"
        assert params.customer_id is None
        assert params.metadata == {}
        assert params.idempotency_key is None

    @pytest.mark.parametrize("amount", [0, -100])
    def test_amount_must_be_positive(self, amount):
        with pytest.raises(ValueError, match="amount_cents must be positive"):
            CreatePaymentIntentParams(amount_cents=amount)

    def test_currency_required(self):
        with pytest.raises(ValueError, match="currency is required"):
            CreatePaymentIntentParams(amount_cents=5000, currency="")


# =============================================================================
# IdempotencyKeyGenerator Tests
# =============================================================================


class TestIdempotencyKeyGenerator:
    """Tests for IdempotencyKeyGenerator."""

    def test_generate_key_format(self):
        entity_id = uuid.uuid4()

        key = IdempotencyKeyGenerator.generate("withdrawal_transfer", entity_id)

        parts = key.split(":")
        assert len(parts) == 4
        assert parts[0] == "withdrawal_transfer"
        assert parts[1] == str(entity_id)
        assert parts[2] == "1"
        assert len(parts[3]) == 8

    def test_same_inputs_produce_same_key(self):
        entity_id = uuid.uuid4()

        key1 = IdempotencyKeyGenerator.generate("withdrawal_transfer", entity_id)
        key2 = IdempotencyKeyGenerator.generate("withdrawal_transfer", entity_id)

        assert key1 == key2

    def test_different_attempts_produce_different_keys(self):
        entity_id = uuid.uuid4()

        key1 = IdempotencyKeyGenerator.generate("withdrawal_transfer", entity_id, 1)
        key2 = IdempotencyKeyGenerator.generate("withdrawal_transfer", entity_id, 2)

        assert key1 != key2

    def test_key_depends_on_secret(self):
        entity_id = "fixed"

        with override_settings(SECRET_KEY="first-secret"):
            key1 = IdempotencyKeyGenerator.generate("op", entity_id)
        with override_settings(SECRET_KEY="second-secret"):
            key2 = IdempotencyKeyGenerator.generate("op", entity_id)

        assert key1 != key2


# =============================================================================
# Error Translation Tests
# =============================================================================


class TestStripeAdapterErrorTranslation:
    """Tests for Stripe error translation to domain exceptions."""

    def test_card_declined_error(self, mock_stripe_payment_intent, card_error):
        mock_stripe_payment_intent.create.side_effect = card_error()

        with pytest.raises(StripeCardDeclinedError) as exc_info:
            StripeAdapter.create_payment_intent(CreatePaymentIntentParams(amount_cents=5000))

        assert exc_info.value.decline_code == "generic_decline"
        assert exc_info.value.is_retryable is False

    def test_card_insufficient_funds(self, mock_stripe_payment_intent, card_error):
        mock_stripe_payment_intent.create.side_effect = card_error(
            message="Your card has insufficient funds.",
            decline_code="insufficient_funds",
        )

        with pytest.raises(StripeInsufficientFundsError) as exc_info:
            StripeAdapter.create_payment_intent(CreatePaymentIntentParams(amount_cents=5000))

        assert exc_info.value.decline_code == "insufficient_funds"

    def test_invalid_request_error(self, mock_stripe_payment_intent, invalid_request_error):
        mock_stripe_payment_intent.retrieve.side_effect = invalid_request_error()

        with pytest.raises(StripeInvalidRequestError) as exc_info:
            StripeAdapter.retrieve_payment_intent("pi_missing")

        assert exc_info.value.stripe_code == "resource_missing"
        assert exc_info.value.status_code == 502

    def test_invalid_account_error(self, mock_stripe_transfer, invalid_request_error):
        mock_stripe_transfer.create.side_effect = invalid_request_error(
            message="No such destination account: 'acct_invalid'",
            param="destination",
            code="resource_missing",
        )

        with pytest.raises(StripeInvalidAccountError):
            StripeAdapter.create_transfer(
                amount_cents=2500,
                destination_account="acct_invalid",
                idempotency_key="key",
            )

    def test_platform_balance_insufficient(self, mock_stripe_transfer, invalid_request_error):
        mock_stripe_transfer.create.side_effect = invalid_request_error(
            message="You have insufficient funds in your Stripe account.",
            param=None,
            code="balance_insufficient",
        )

        with pytest.raises(StripeInsufficientFundsError):
            StripeAdapter.create_transfer(
                amount_cents=2500,
                destination_account="acct_dest123",
                idempotency_key="key",
            )

    def test_rate_limit_error(self, mock_stripe_payment_intent, rate_limit_error):
        mock_stripe_payment_intent.create.side_effect = rate_limit_error

        with pytest.raises(StripeRateLimitError) as exc_info:
            StripeAdapter.create_payment_intent(CreatePaymentIntentParams(amount_cents=5000))

        assert exc_info.value.is_retryable is True

    def test_api_connection_error(self, mock_stripe_payment_intent, api_connection_error):
        mock_stripe_payment_intent.create.side_effect = api_connection_error

        with pytest.raises(StripeAPIUnavailableError) as exc_info:
            StripeAdapter.create_payment_intent(CreatePaymentIntentParams(amount_cents=5000))

        assert exc_info.value.is_retryable is True
        assert exc_info.value.stripe_code == "api_connection_error"

    def test_api_error(self, mock_stripe_payment_intent, api_error):
        mock_stripe_payment_intent.create.side_effect = api_error

        with pytest.raises(StripeAPIUnavailableError) as exc_info:
            StripeAdapter.create_payment_intent(CreatePaymentIntentParams(amount_cents=5000))

        assert exc_info.value.stripe_code == "api_error"

    def test_authentication_error(self, mock_stripe_payment_intent, authentication_error):
        mock_stripe_payment_intent.create.side_effect = authentication_error

        with pytest.raises(StripeInvalidRequestError) as exc_info:
            StripeAdapter.create_payment_intent(CreatePaymentIntentParams(amount_cents=5000))

        assert exc_info.value.stripe_code == "authentication_error"

    def test_unknown_error_hides_details(self, mock_stripe_payment_intent):
        mock_stripe_payment_intent.create.side_effect = RuntimeError("socket exploded")

        with pytest.raises(StripeAPIUnavailableError) as exc_info:
            StripeAdapter.create_payment_intent(CreatePaymentIntentParams(amount_cents=5000))

        assert "socket exploded" not in exc_info.value.message
        assert exc_info.value.stripe_code == "unknown_error"


# =============================================================================
# Operation Tests
# =============================================================================


class TestStripeAdapterCustomers:
    """Tests for StripeAdapter.find_or_create_customer."""

    def test_returns_existing_customer(self, mock_stripe_customer):
        mock_stripe_customer.list.return_value = MockStripeList(
            items=[MockStripeObject({"id": "cus_existing"})]
        )

        customer_id = StripeAdapter.find_or_create_customer("a@example.com", "user-1")

        assert customer_id == "cus_existing"
        mock_stripe_customer.list.assert_called_once_with(email="a@example.com", limit=1)
        mock_stripe_customer.create.assert_not_called()

    def test_creates_customer_with_user_metadata(self, mock_stripe_customer):
        customer_id = StripeAdapter.find_or_create_customer("b@example.com", "user-2")

        assert customer_id == "cus_new123"
        mock_stripe_customer.create.assert_called_once_with(
            email="b@example.com",
            metadata={"user_id": "user-2"},
        )

    def test_completion_log_reports_whether_customer_was_created(self, mock_stripe_customer):
        handler = logging.Handler()
        handler.emit = Mock()
        logger = StripeAdapter.get_logger()
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        try:
            StripeAdapter.find_or_create_customer("c@example.com", "user-3")
        finally:
            logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

        records = [call.args[0] for call in handler.emit.call_args_list]
        completed = [r for r in records if r.getMessage() == "Stripe operation completed"]
        assert len(completed) == 1
        assert completed[0].customer_created is True
        assert completed[0].customer_id == "cus_new123"


class TestStripeAdapterPaymentIntents:
    """Tests for payment intent creation and retrieval."""

    def test_create_payment_intent_success(self, mock_stripe_payment_intent, mock_payment_intent):
        mock_stripe_payment_intent.create.return_value = mock_payment_intent(
            id="pi_test123",
            metadata={"package_id": "starter"},
        )

        result = StripeAdapter.create_payment_intent(
            CreatePaymentIntentParams(
                amount_cents=5000,
                customer_id="cus_abc",
                metadata={"user_id": "u1", "package_id": "starter", "credits": "500"},
            )
        )

        assert isinstance(result, PaymentIntentResult)
        assert result.id == "pi_test123"
        assert result.client_secret == "pi_test123456_secret_abc123"
        assert result.metadata == {"package_id": "starter"}
        assert result.succeeded is False

        call_kwargs = mock_stripe_payment_intent.create.call_args.kwargs
        assert call_kwargs["amount"] == 5000
        assert call_kwargs["currency"] == "usd"
        assert call_kwargs["customer"] == "cus_abc"
        assert call_kwargs["automatic_payment_methods"] == {"enabled": True}
        assert call_kwargs["metadata"]["credits"] == "500"
        assert "idempotency_key" not in call_kwargs

    def test_create_payment_intent_passes_idempotency_key(self, mock_stripe_payment_intent):
        StripeAdapter.create_payment_intent(
            CreatePaymentIntentParams(amount_cents=5000, idempotency_key="intent-key")
        )

        call_kwargs = mock_stripe_payment_intent.create.call_args.kwargs
        assert call_kwargs["idempotency_key"] == "intent-key"

    def test_retrieve_payment_intent(self, mock_stripe_payment_intent):
        result = StripeAdapter.retrieve_payment_intent("pi_test123456")

        assert result.succeeded is True
        mock_stripe_payment_intent.retrieve.assert_called_once_with("pi_test123456")


class TestStripeAdapterConnect:
    """Tests for transfers, payout schedules and connected accounts."""

    def test_create_transfer_success(self, mock_stripe_transfer):
        result = StripeAdapter.create_transfer(
            amount_cents=2500,
            destination_account="acct_dest123",
            idempotency_key="transfer-key",
            metadata={"withdrawal_type": "earner_payout"},
        )

        assert isinstance(result, TransferResult)
        assert result.id == "tr_test123456"
        assert result.amount_cents == 2500
        assert result.destination_account == "acct_dest123"

        mock_stripe_transfer.create.assert_called_once_with(
            amount=2500,
            currency="usd",
            destination="acct_dest123",
            metadata={"withdrawal_type": "earner_payout"},
            idempotency_key="transfer-key",
        )

    def test_update_payout_schedule(self, mock_stripe_account):
        schedule = {"interval": "weekly", "weekly_anchor": "friday", "delay_days": 2}

        applied = StripeAdapter.update_payout_schedule("acct_dest123", schedule)

        assert applied == schedule
        mock_stripe_account.modify.assert_called_once_with(
            "acct_dest123",
            settings={"payouts": {"schedule": schedule}},
        )

    def test_update_payout_schedule_translates_errors(
        self, mock_stripe_account, invalid_request_error
    ):
        mock_stripe_account.modify.side_effect = invalid_request_error(
            message="No such account: 'acct_gone'",
            param="account",
        )

        with pytest.raises(StripeInvalidAccountError):
            StripeAdapter.update_payout_schedule("acct_gone", {"interval": "weekly"})

    def test_create_connected_account_requests_express_with_transfers(self, mock_stripe_account):
        status = StripeAdapter.create_connected_account(
            email="earner@example.com", user_id="user-9", idempotency_key="acct-key"
        )

        assert status.id == "acct_new123"
        assert status.onboarding_complete is False
        mock_stripe_account.create.assert_called_once_with(
            type="express",
            email="earner@example.com",
            metadata={"user_id": "user-9"},
            capabilities={
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            idempotency_key="acct-key",
        )

    def test_retrieve_account_reports_onboarding(self, mock_stripe_account):
        status = StripeAdapter.retrieve_account("acct_dest123")

        assert status.onboarding_complete is True
        mock_stripe_account.retrieve.assert_called_once_with("acct_dest123")

    def test_create_account_link(self, mock_stripe_account_link):
        url = StripeAdapter.create_account_link(
            "acct_dest123",
            refresh_url="https://lynxxclub.com/dashboard?stripe_refresh=true",
            return_url="https://lynxxclub.com/dashboard?stripe_success=true",
        )

        assert url == "https://connect.stripe.com/setup/e/acct_dest123/abc"
        assert mock_stripe_account_link.create.call_args.kwargs["type"] == "account_onboarding"

    def test_retrieve_account_translates_errors(self, mock_stripe_account, api_connection_error):
        mock_stripe_account.retrieve.side_effect = api_connection_error

        with pytest.raises(StripeAPIUnavailableError):
            StripeAdapter.retrieve_account("acct_dest123")


class TestStripeAdapterWebhooks:
    """Tests for construct_webhook_event."""

    @override_settings(STRIPE_WEBHOOK_SECRET="whsec_test")
    def test_valid_signature(self, mock_stripe_webhook):
        event = StripeAdapter.construct_webhook_event(b"{}", "t=1,v1=abc")

        assert event["type"] == "payment_intent.succeeded"
        mock_stripe_webhook.construct_event.assert_called_once_with(
            b"{}", "t=1,v1=abc", "whsec_test"
        )

    def test_invalid_signature(self, mock_stripe_webhook):
        mock_stripe_webhook.construct_event.side_effect = stripe.SignatureVerificationError(
            "Unable to verify webhook signature.", "bad"
        )

        with pytest.raises(StripeInvalidRequestError) as exc_info:
            StripeAdapter.construct_webhook_event(b"{}", "bad")

        assert exc_info.value.stripe_code == "signature_verification_failed"

    def test_invalid_payload(self, mock_stripe_webhook):
        mock_stripe_webhook.construct_event.side_effect = ValueError("Invalid JSON")

        with pytest.raises(StripeInvalidRequestError) as exc_info:
            StripeAdapter.construct_webhook_event(b"not json", "t=1,v1=abc")

        assert exc_info.value.stripe_code == "invalid_payload"
