"""
Tests for WithdrawalService.

Tests cover:
- Amount parsing and bounds
- Reserve -> transfer -> record phases
- Reservation restore when the transfer fails
"""

from decimal import Decimal

import pytest

from payments.exceptions import StripeInvalidAccountError
from payments.ledger.models import Transaction, TransactionType, Wallet
from payments.models import Withdrawal
from payments.services import WithdrawalService
from payments.state_machines import WithdrawalSource, WithdrawalStatus


class TestParseAmount:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (20, Decimal("20.00")),
            (20.005, Decimal("20.01")),
            (Decimal("99.994"), Decimal("99.99")),
        ],
    )
    def test_rounds_half_up_to_cents(self, raw, expected):
        assert WithdrawalService.parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["50", True, None, float("nan"), float("inf"), [50]])
    def test_rejects_non_numbers(self, raw):
        assert WithdrawalService.parse_amount(raw) is None


class TestProcessWithdrawal:
    @pytest.mark.parametrize(
        "amount,message",
        [
            (19.99, "Minimum withdrawal is $20"),
            (10000.01, "Maximum withdrawal is $10,000 per transaction"),
            ("abc", "Amount must be a valid number"),
        ],
    )
    def test_bounds(self, ready_earner, mock_stripe, amount, message):
        result = WithdrawalService.process_withdrawal(ready_earner, amount)

        assert result.error == message
        assert result.status_code == 400
        mock_stripe.create_transfer.assert_not_called()

    def test_success_reserves_transfers_and_records(self, ready_earner, mock_stripe):
        result = WithdrawalService.process_withdrawal(ready_earner, 40)

        assert result.success
        assert result.data["newBalance"] == Decimal("60.00")
        assert result.data["message"].startswith("Withdrawal initiated!")

        wallet = Wallet.objects.get(user=ready_earner)
        assert wallet.available_earnings == Decimal("60.00")
        assert wallet.paid_out_total == Decimal("40.00")

        withdrawal = Withdrawal.objects.get(user=ready_earner)
        assert withdrawal.status == WithdrawalStatus.PROCESSING
        assert withdrawal.source == WithdrawalSource.MANUAL

        kwargs = mock_stripe.create_transfer.call_args.kwargs
        assert kwargs["amount_cents"] == 4000
        assert kwargs["metadata"]["withdrawal_type"] == "earner_payout"
        assert str(withdrawal.id) in kwargs["idempotency_key"]

        payout_row = Transaction.objects.get(user=ready_earner, usd_amount__lt=0)
        assert payout_row.transaction_type == TransactionType.EARNING
        assert payout_row.usd_amount == Decimal("-40.00")

    def test_insufficient_balance(self, ready_earner, mock_stripe):
        result = WithdrawalService.process_withdrawal(ready_earner, 100.01)

        assert result.error_code == "INSUFFICIENT_BALANCE"
        assert not Withdrawal.objects.exists()
        mock_stripe.create_transfer.assert_not_called()

    def test_transfer_failure_restores_reservation(self, ready_earner, mock_stripe):
        mock_stripe.create_transfer.side_effect = StripeInvalidAccountError(
            "Destination account is restricted"
        )

        result = WithdrawalService.process_withdrawal(ready_earner, 40)

        assert result.status_code == 502
        assert result.error_code == "INVALID_STRIPE_ACCOUNT"
        assert Wallet.objects.get(user=ready_earner).available_earnings == Decimal("100.00")
        withdrawal = Withdrawal.objects.get(user=ready_earner)
        assert withdrawal.status == WithdrawalStatus.FAILED
        assert withdrawal.failure_reason == "Destination account is restricted"

    def test_incomplete_onboarding(self, connected_account, fund_wallet, mock_stripe):
        connected_account.onboarding_complete = False
        connected_account.save()
        fund_wallet(connected_account.user, available="100.00")

        result = WithdrawalService.process_withdrawal(connected_account.user, 50)

        assert result.error == "Please complete bank account setup first"

    def test_unconfigured_stripe(self, ready_earner, settings):
        settings.STRIPE_SECRET_KEY = ""

        result = WithdrawalService.process_withdrawal(ready_earner, 50)

        assert result.status_code == 503


class TestExecutePayoutWeekly:
    def test_weekly_payout_completes_immediately(self, ready_earner, mock_stripe):
        account = ready_earner.connected_account

        outcome = WithdrawalService.execute_payout(
            ready_earner, account, Decimal("100.00"), WithdrawalSource.WEEKLY
        )

        assert outcome.new_balance == Decimal("0.00")
        assert outcome.withdrawal.status == WithdrawalStatus.COMPLETED
        assert Transaction.objects.filter(
            user=ready_earner, transaction_type=TransactionType.PAYOUT
        ).exists()
