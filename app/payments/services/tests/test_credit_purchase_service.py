"""
Tests for CreditPurchaseService.

Tests cover:
- Package lookup and payment intent creation
- Confirmation checks (format, status, ownership)
- Idempotent crediting shared with the webhook
"""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
from django.db import IntegrityError

from payments.exceptions import StripeAPIUnavailableError
from payments.ledger.models import Transaction, TransactionType, Wallet
from payments.services import CreditPurchaseService
from payments.tests.conftest import make_intent


class TestCreatePaymentIntent:
    def test_prices_package_from_server_table(self, seeker, mock_stripe):
        result = CreditPurchaseService.create_payment_intent(seeker, "vip")

        assert result.success
        assert result.data["credits"] == 6500
        assert result.data["amount"] == 500
        params = mock_stripe.create_payment_intent.call_args.args[0]
        assert params.amount_cents == 50000
        assert params.customer_id == "cus_test123"
        assert params.metadata == {
            "user_id": str(seeker.pk),
            "package_id": "vip",
            "credits": "6500",
        }

    @pytest.mark.parametrize("package_id", ["superdeluxe", "", None, 5, ["popular"]])
    def test_rejects_unknown_packages(self, seeker, mock_stripe, package_id):
        result = CreditPurchaseService.create_payment_intent(seeker, package_id)

        assert not result.success
        assert result.error == "Invalid package. Must be one of: starter, popular, premium, vip"
        assert result.error_code == "INVALID_INPUT"

    def test_stripe_outage_is_a_502(self, seeker, mock_stripe):
        mock_stripe.create_payment_intent.side_effect = StripeAPIUnavailableError("down")

        result = CreditPurchaseService.create_payment_intent(seeker, "starter")

        assert result.status_code == 502
        assert result.error_code == "STRIPE_UNAVAILABLE"

    def test_unconfigured_stripe_is_a_503(self, seeker, settings):
        settings.STRIPE_SECRET_KEY = ""

        result = CreditPurchaseService.create_payment_intent(seeker, "starter")

        assert result.status_code == 503


@pytest.mark.usefixtures("stripe_configured")
class TestCreatePaymentIntentThroughSdk:
    """Runs the real adapter with only the stripe SDK resources patched."""

    @pytest.fixture
    def sdk(self, seeker):
        CreditPurchaseService.customer_cache.invalidate(seeker.email)
        intent = Mock(
            id="pi_sdk_1",
            status="requires_payment_method",
            amount=5000,
            currency="usd",
            client_secret="pi_sdk_1_secret_xyz",
            metadata={},
        )
        intent.to_dict.return_value = {"id": "pi_sdk_1"}
        with (
            patch("stripe.RequestsClient"),
            patch("stripe.Customer") as customer,
            patch("stripe.PaymentIntent") as payment_intent,
        ):
            customer.list.return_value = SimpleNamespace(data=[])
            customer.create.return_value = SimpleNamespace(id="cus_sdk_new")
            payment_intent.create.return_value = intent
            yield SimpleNamespace(customer=customer, payment_intent=payment_intent)
        CreditPurchaseService.customer_cache.invalidate(seeker.email)

    def test_new_customer_is_created_and_intent_returned(self, seeker, sdk):
        result = CreditPurchaseService.create_payment_intent(seeker, "starter")

        assert result.success, result.error
        assert result.data["clientSecret"] == "pi_sdk_1_secret_xyz"
        sdk.customer.create.assert_called_once_with(
            email=seeker.email, metadata={"user_id": str(seeker.pk)}
        )
        assert sdk.payment_intent.create.call_args.kwargs["customer"] == "cus_sdk_new"

    def test_existing_customer_is_reused(self, seeker, sdk):
        sdk.customer.list.return_value = SimpleNamespace(data=[SimpleNamespace(id="cus_known")])

        result = CreditPurchaseService.create_payment_intent(seeker, "popular")

        assert result.success, result.error
        sdk.customer.create.assert_not_called()
        assert sdk.payment_intent.create.call_args.kwargs["customer"] == "cus_known"

    def test_customer_id_is_cached_between_purchases(self, seeker, sdk):
        CreditPurchaseService.create_payment_intent(seeker, "starter")
        CreditPurchaseService.create_payment_intent(seeker, "starter")

        sdk.customer.list.assert_called_once()


class TestConfirmPayment:
    @pytest.mark.parametrize("intent_id", ["pi_short", "ch_1234567890abc", "pi_" + "a" * 100, 42])
    def test_rejects_malformed_ids(self, seeker, mock_stripe, intent_id):
        result = CreditPurchaseService.confirm_payment(seeker, intent_id)

        assert result.error_code == "INVALID_INPUT"
        mock_stripe.retrieve_payment_intent.assert_not_called()

    def test_rejects_unsucceeded_intent(self, seeker, mock_stripe):
        mock_stripe.retrieve_payment_intent.return_value = make_intent(
            status="processing",
            metadata={"user_id": str(seeker.pk), "package_id": "popular"},
        )

        result = CreditPurchaseService.confirm_payment(seeker, "pi_test_popular_1")

        assert result.error == "Payment not successful. Status: processing"

    def test_credits_from_package_not_metadata(self, seeker, mock_stripe):
        mock_stripe.retrieve_payment_intent.return_value = make_intent(
            metadata={"user_id": str(seeker.pk), "package_id": "starter", "credits": "99999"}
        )

        result = CreditPurchaseService.confirm_payment(seeker, "pi_test_popular_1")

        assert result.data == {"success": True, "newBalance": 500, "creditsAdded": 500}
        tx = Transaction.objects.get(stripe_payment_id="pi_test_popular_1")
        assert tx.transaction_type == TransactionType.CREDIT_PURCHASE
        assert tx.usd_amount == Decimal("100.00")


class TestRecordPurchase:
    def test_second_call_reports_already_processed(self, seeker):
        CreditPurchaseService.record_purchase(seeker, "pi_record_1", "popular", 10000)

        result = CreditPurchaseService.record_purchase(seeker, "pi_record_1", "popular", 10000)

        assert result.data == {"success": True, "message": "Payment already processed"}
        assert Wallet.objects.get(user=seeker).credit_balance == 1100

    def test_lost_insert_race_reports_already_processed(self, seeker, monkeypatch):
        from payments.ledger.services import WalletLedger

        def racing_credit(*args, **kwargs):
            raise IntegrityError("duplicate key value violates unique constraint")

        monkeypatch.setattr(WalletLedger, "credit_balance", staticmethod(racing_credit))

        result = CreditPurchaseService.record_purchase(seeker, "pi_record_2", "popular", 10000)

        assert result.success
        assert result.data["message"] == "Payment already processed"

    def test_unknown_package_is_rejected(self, seeker):
        result = CreditPurchaseService.record_purchase(seeker, "pi_record_3", "mega", 10000)

        assert not result.success
        assert not Transaction.objects.exists()
