"""
Withdrawal service for moving available earnings to connected accounts.

The service reserves funds before talking to Stripe, so a crash between
the transfer and the bookkeeping can never pay out money the wallet
still shows as available:

1. Phase 1 (one DB transaction): debit available earnings with a
   conditional UPDATE and create a PENDING Withdrawal
2. Phase 2 (outside any transaction): create the Stripe transfer with an
   idempotency key derived from the withdrawal id
3. Phase 3 (one DB transaction): Withdrawal -> PROCESSING, increment
   paid_out_total and append the payout Transaction

If phase 2 fails, the reservation is restored and the Withdrawal is
marked FAILED in one transaction.

Usage:
    from payments.services import WithdrawalService

    result = WithdrawalService.process_withdrawal(user, 50)
    if result.success:
        result.data["transferId"]
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService, ServiceResult

from payments.adapters import IdempotencyKeyGenerator, StripeAdapter
from payments.exceptions import (
    AccountNotReadyError,
    PaymentSystemUnavailableError,
    StripeError,
)
from payments.ledger.exceptions import InsufficientBalance
from payments.ledger.models import TransactionStatus, TransactionType
from payments.ledger.services import WalletLedger
from payments.ledger.types import to_cents, to_usd
from payments.models import ConnectedAccount, Withdrawal
from payments.state_machines import WithdrawalSource

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class PayoutOutcome:
    """
    Result of a completed reserve -> transfer -> record run.

    Attributes:
        withdrawal: The Withdrawal, now PROCESSING or COMPLETED
        transfer_id: Stripe Transfer ID
        new_balance: Available earnings after the reservation
    """

    withdrawal: Withdrawal
    transfer_id: str
    new_balance: Decimal


# =============================================================================
# Withdrawal Service
# =============================================================================


class WithdrawalService(BaseService):
    """
    Service for earner withdrawals.

    Methods:
        process_withdrawal: Validate and execute a manual withdrawal
        execute_payout: Reserve, transfer and record (shared with the
            weekly payout sweep)
        parse_amount: Validate a raw JSON amount
    """

    @classmethod
    def parse_amount(cls, raw: Any) -> Decimal | None:
        """
        Return raw as a cents-rounded Decimal, or None if it is not a number.

        Booleans and strings are rejected even though Python could
        coerce them.
        """
        if isinstance(raw, bool) or not isinstance(raw, (int, float, Decimal)):
            return None
        if isinstance(raw, float) and not math.isfinite(raw):
            return None
        try:
            amount = to_usd(raw)
        except (InvalidOperation, ValueError):
            return None
        if not amount.is_finite():
            return None
        return amount

    @classmethod
    def process_withdrawal(cls, user: User, raw_amount: Any) -> ServiceResult[dict]:
        """
        Withdraw available earnings to the user's connected account.

        Args:
            user: Earner requesting the withdrawal
            raw_amount: Amount in USD as received from the client

        Returns:
            ServiceResult with {success, transferId, newBalance, message}

        Error codes:
            INVALID_INPUT: Not a number, or outside the allowed bounds
            ACCOUNT_NOT_READY: No connected account or onboarding incomplete
            INSUFFICIENT_BALANCE: Available earnings below the amount
            STRIPE_*: Transfer failed (reservation restored)
        """
        amount = cls.parse_amount(raw_amount)
        if amount is None:
            return ServiceResult.failure(
                "Amount must be a valid number",
                error_code="INVALID_INPUT",
            )

        minimum = Decimal(str(settings.WITHDRAWAL_MIN_USD))
        maximum = Decimal(str(settings.WITHDRAWAL_MAX_USD))
        if amount < minimum:
            return ServiceResult.failure(
                f"Minimum withdrawal is ${minimum:,.0f}",
                error_code="INVALID_INPUT",
            )
        if amount > maximum:
            return ServiceResult.failure(
                f"Maximum withdrawal is ${maximum:,.0f} per transaction",
                error_code="INVALID_INPUT",
            )

        try:
            if not StripeAdapter.is_configured():
                raise PaymentSystemUnavailableError("Payment system not configured")
            account = cls.get_ready_account(user)
            outcome = cls.execute_payout(user, account, amount, WithdrawalSource.MANUAL)
        except (
            AccountNotReadyError,
            InsufficientBalance,
            PaymentSystemUnavailableError,
            StripeError,
        ) as e:
            cls.get_logger().info(
                "Withdrawal rejected",
                extra={"user_id": str(user.pk), "error_code": e.error_code},
            )
            return ServiceResult.from_exception(e)

        return ServiceResult.success(
            {
                "success": True,
                "transferId": outcome.transfer_id,
                "newBalance": outcome.new_balance,
                "message": "Withdrawal initiated! Funds will arrive in 2-3 business days.",
            }
        )

    @classmethod
    def get_ready_account(cls, user: User) -> ConnectedAccount:
        """
        Raises:
            AccountNotReadyError: No account, or onboarding not complete
        """
        account = ConnectedAccount.objects.filter(user=user).first()
        if account is None or not account.is_ready_for_payouts:
            raise AccountNotReadyError("Please complete bank account setup first")
        return account

    @classmethod
    def execute_payout(
        cls,
        user: User,
        account: ConnectedAccount,
        amount: Decimal,
        source: str,
    ) -> PayoutOutcome:
        """
        Reserve earnings, create the Stripe transfer, record the payout.

        Raises:
            InsufficientBalance: Available earnings below amount (no
                Stripe call is made)
            StripeError: Transfer failed; reservation restored and
                the Withdrawal marked FAILED
        """
        logger = cls.get_logger()
        amount = to_usd(amount)

        # Phase 1: reserve
        with cls.atomic():
            new_balance = WalletLedger.debit_earnings(user, amount)
            withdrawal = Withdrawal.objects.create(user=user, amount=amount, source=source)

        logger.info(
            "Phase 1: Earnings reserved",
            extra={
                "withdrawal_id": str(withdrawal.id),
                "user_id": str(user.pk),
                "amount": str(amount),
                "source": source,
            },
        )

        # Phase 2: transfer (outside transaction)
        try:
            transfer = StripeAdapter.create_transfer(
                amount_cents=to_cents(amount),
                destination_account=account.stripe_account_id,
                idempotency_key=IdempotencyKeyGenerator.generate(
                    "withdrawal_transfer", withdrawal.id
                ),
                metadata={
                    "user_id": str(user.pk),
                    "withdrawal_type": "earner_payout",
                    "withdrawal_id": str(withdrawal.id),
                },
            )
        except StripeError as e:
            logger.error(
                "Phase 2: Transfer failed, restoring reservation",
                extra={
                    "withdrawal_id": str(withdrawal.id),
                    "error_code": e.error_code,
                    "is_retryable": e.is_retryable,
                },
            )
            with cls.atomic():
                WalletLedger.restore_earnings(user, amount)
                withdrawal.fail(reason=e.message)
                withdrawal.save()
            raise

        # Phase 3: record
        with cls.atomic():
            withdrawal.begin_processing(transfer_id=transfer.id)
            if source == WithdrawalSource.WEEKLY:
                withdrawal.complete()
            withdrawal.save()

            if source == WithdrawalSource.WEEKLY:
                description = f"Weekly automated payout of ${amount}"
                transaction_type = TransactionType.PAYOUT
            else:
                description = f"Withdrawal of ${amount}"
                transaction_type = TransactionType.EARNING
            WalletLedger.record_payout(
                user,
                amount,
                transaction_type=transaction_type,
                description=description,
                status=TransactionStatus.COMPLETED,
            )

        logger.info(
            "Phase 3: Payout recorded",
            extra={
                "withdrawal_id": str(withdrawal.id),
                "transfer_id": transfer.id,
                "new_balance": str(new_balance),
            },
        )

        return PayoutOutcome(
            withdrawal=withdrawal,
            transfer_id=transfer.id,
            new_balance=new_balance,
        )
