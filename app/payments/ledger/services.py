"""
Ledger service layer for wallet mutations.

This module provides the WalletLedger class which encapsulates every
write to a Wallet. All balance changes go through it so that:
- each change is one atomic UPDATE with an F() expression (no
  read-modify-write races)
- debits are conditional (WHERE balance >= amount) and fail cleanly
- each user-visible change appends exactly one Transaction row
- balance_changed is published after commit

Usage:
    from payments.ledger.services import WalletLedger
    from payments.ledger.models import TransactionType

    WalletLedger.credit_balance(
        user,
        500,
        TransactionType.CREDIT_PURCHASE,
        description="Purchased Starter Pack",
        stripe_payment_id="pi_123",
        usd_amount=Decimal("50.00"),
    )

    try:
        WalletLedger.debit_balance(user, 2, TransactionType.MESSAGE_SENT)
    except InsufficientFunds as e:
        print(e.message)  # "Insufficient credits. Need 2, have 1"
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.db.models import DecimalField, F, Value
from django.db.models.functions import Greatest

from core.exceptions import ValidationError
from payments.signals import publish_balance_changed

from .exceptions import InsufficientBalance, InsufficientFunds, WalletNotFound
from .models import (
    EarningsRelease,
    ReleaseOutcome,
    Transaction,
    TransactionStatus,
    TransactionType,
    Wallet,
)
from .types import WalletSnapshot, to_usd

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User
    from chat.models import Message

logger = logging.getLogger(__name__)

ZERO_USD = Value(Decimal("0.00"), output_field=DecimalField(max_digits=12, decimal_places=2))


class WalletLedger:
    """
    Service class for wallet operations.

    All methods are static - no instance state is maintained. Callers
    that need several mutations to commit together (message billing,
    refunds) wrap them in their own transaction.atomic(); the inner
    atomic blocks here become savepoints.
    """

    # ==========================================================================
    # Wallet lookup
    # ==========================================================================

    @staticmethod
    def get_or_create_wallet(user: User) -> Wallet:
        """
        Get the user's wallet, creating a zero-balance one if missing.

        Safe under concurrent creation: a losing insert falls back to
        reading the winner's row.
        """
        try:
            return Wallet.objects.get(user=user)
        except Wallet.DoesNotExist:
            pass

        try:
            with transaction.atomic():
                return Wallet.objects.create(user=user)
        except IntegrityError:
            return Wallet.objects.get(user=user)

    @staticmethod
    def get_wallet(user: User) -> Wallet:
        """
        Get the user's wallet.

        Raises:
            WalletNotFound: If the user has no wallet
        """
        try:
            return Wallet.objects.get(user=user)
        except Wallet.DoesNotExist:
            raise WalletNotFound(
                "Wallet not found",
                details={"user_id": str(user.pk)},
            )

    # ==========================================================================
    # Credits
    # ==========================================================================

    @staticmethod
    def credit_balance(
        user: User,
        credits: int,
        transaction_type: str,
        description: str = "",
        stripe_payment_id: str | None = None,
        usd_amount: Decimal | None = None,
        message: Message | None = None,
    ) -> Transaction:
        """
        Add credits to a wallet and record the movement.

        Args:
            user: Wallet owner
            credits: Positive number of credits to add
            transaction_type: TransactionType of the log row
            description: Wallet history text
            stripe_payment_id: PaymentIntent id; unique across the log
            usd_amount: Money received, for purchases
            message: Originating message, for refunds

        Returns:
            The new Transaction

        Raises:
            ValidationError: If credits is not positive
            IntegrityError: If stripe_payment_id was already recorded
                (nothing is written in that case)
        """
        if not isinstance(credits, int) or isinstance(credits, bool) or credits <= 0:
            raise ValidationError("Credit amount must be a positive integer")

        with transaction.atomic():
            WalletLedger.get_or_create_wallet(user)
            Wallet.objects.filter(user=user).update(
                credit_balance=F("credit_balance") + credits,
            )
            tx = WalletLedger._record(
                user,
                transaction_type,
                credits_amount=credits,
                usd_amount=usd_amount,
                description=description,
                stripe_payment_id=stripe_payment_id,
                message=message,
            )

        logger.info(
            "Credits added",
            extra={
                "user_id": str(user.pk),
                "credits": credits,
                "transaction_type": transaction_type,
            },
        )
        return tx

    @staticmethod
    def debit_balance(
        user: User,
        credits: int,
        transaction_type: str,
        description: str = "",
        message: Message | None = None,
    ) -> Transaction:
        """
        Spend credits if the balance covers them.

        The UPDATE only matches when credit_balance >= credits, so two
        concurrent debits can never overdraw the wallet.

        Raises:
            ValidationError: If credits is not positive
            InsufficientFunds: If the balance is too low (nothing written)
        """
        if not isinstance(credits, int) or isinstance(credits, bool) or credits <= 0:
            raise ValidationError("Credit amount must be a positive integer")

        with transaction.atomic():
            updated = Wallet.objects.filter(
                user=user,
                credit_balance__gte=credits,
            ).update(credit_balance=F("credit_balance") - credits)

            if updated == 0:
                wallet = WalletLedger.get_or_create_wallet(user)
                raise InsufficientFunds(
                    required=credits,
                    available=wallet.credit_balance,
                )

            return WalletLedger._record(
                user,
                transaction_type,
                credits_amount=-credits,
                description=description,
                message=message,
            )

    # ==========================================================================
    # Earnings hold
    # ==========================================================================

    @staticmethod
    def hold_earner_amount(
        user: User,
        usd_amount: Decimal,
        message: Message | None = None,
        description: str = "",
    ) -> Transaction:
        """
        Add an earner's share to pending earnings.

        The EARNING row written here is what the maturation sweep later
        promotes to available earnings.
        """
        usd_amount = to_usd(usd_amount)
        if usd_amount <= 0:
            raise ValidationError("Earning amount must be positive")

        with transaction.atomic():
            WalletLedger.get_or_create_wallet(user)
            Wallet.objects.filter(user=user).update(
                pending_earnings=F("pending_earnings") + usd_amount,
            )
            return WalletLedger._record(
                user,
                TransactionType.EARNING,
                usd_amount=usd_amount,
                description=description,
                message=message,
            )

    @staticmethod
    def release_earner_amount(
        user: User,
        usd_amount: Decimal,
        message: Message | None = None,
        description: str = "",
    ) -> Transaction:
        """
        Take a refunded share back from the earner.

        The message's EARNING row gets a REVERSED release marker so it can
        never mature. If maturation already won (a refund resolved more
        than the hold period after billing), the share is taken from
        available earnings instead. Either balance is clamped at zero;
        anything already withdrawn is not recovered.
        """
        usd_amount = to_usd(usd_amount)

        with transaction.atomic():
            balance_field = "pending_earnings"
            if message is not None and WalletLedger._earning_matured(user, message):
                balance_field = "available_earnings"

            Wallet.objects.filter(user=user).update(
                **{balance_field: Greatest(F(balance_field) - usd_amount, ZERO_USD)}
            )

            if balance_field == "available_earnings":
                logger.warning(
                    "Refund clawed back matured earnings",
                    extra={
                        "user_id": str(user.pk),
                        "message_id": str(message.pk),
                        "amount": str(usd_amount),
                    },
                )

            return WalletLedger._record(
                user,
                TransactionType.EARNING_REVERSAL,
                usd_amount=-usd_amount,
                description=description,
                message=message,
            )

    @staticmethod
    def _earning_matured(user: User, message: Message) -> bool:
        """
        Mark the message's earning REVERSED, or report that it already matured.

        The marker insert races the maturation sweep on the one-to-one
        constraint; whichever inserts first decides the outcome.
        """
        earning = (
            Transaction.objects.filter(
                user=user,
                message=message,
                transaction_type=TransactionType.EARNING,
                usd_amount__gt=0,
            )
            .order_by("created_at")
            .first()
        )
        if earning is None:
            return False

        try:
            with transaction.atomic():
                EarningsRelease.objects.create(
                    transaction=earning,
                    outcome=ReleaseOutcome.REVERSED,
                )
        except IntegrityError:
            return EarningsRelease.objects.filter(
                transaction=earning, outcome=ReleaseOutcome.MATURED
            ).exists()
        return False

    @staticmethod
    def mature_pending_to_available(earning: Transaction) -> bool:
        """
        Move one held earning from pending to available.

        The release marker insert and the wallet update commit together.
        A marker that already exists means another run (or a refund)
        resolved this earning first.

        Returns:
            True if this call matured the earning, False otherwise
        """
        amount = to_usd(earning.usd_amount)

        try:
            with transaction.atomic():
                EarningsRelease.objects.create(
                    transaction=earning,
                    outcome=ReleaseOutcome.MATURED,
                )
                Wallet.objects.filter(user_id=earning.user_id).update(
                    available_earnings=F("available_earnings") + amount,
                    pending_earnings=Greatest(F("pending_earnings") - amount, ZERO_USD),
                )
                WalletLedger._record(
                    earning.user,
                    TransactionType.EARNINGS_MATURED,
                    usd_amount=amount,
                    description="Earnings now available for withdrawal",
                    message_id=earning.message_id,
                )
        except IntegrityError:
            return False
        return True

    # ==========================================================================
    # Available earnings and payouts
    # ==========================================================================

    @staticmethod
    def debit_earnings(user: User, usd_amount: Decimal) -> Decimal:
        """
        Reserve available earnings for a transfer.

        Returns:
            The available balance after the debit

        Raises:
            InsufficientBalance: If available earnings are too low
        """
        usd_amount = to_usd(usd_amount)

        with transaction.atomic():
            updated = Wallet.objects.filter(
                user=user,
                available_earnings__gte=usd_amount,
            ).update(available_earnings=F("available_earnings") - usd_amount)

            wallet = WalletLedger.get_or_create_wallet(user)
            if updated == 0:
                raise InsufficientBalance(
                    required=usd_amount,
                    available=wallet.available_earnings,
                )
        return wallet.available_earnings

    @staticmethod
    def restore_earnings(user: User, usd_amount: Decimal) -> Decimal:
        """Undo debit_earnings after a failed transfer."""
        usd_amount = to_usd(usd_amount)

        with transaction.atomic():
            Wallet.objects.filter(user=user).update(
                available_earnings=F("available_earnings") + usd_amount,
            )
            wallet = WalletLedger.get_wallet(user)

        logger.warning(
            "Reserved earnings restored",
            extra={"user_id": str(user.pk), "amount": str(usd_amount)},
        )
        return wallet.available_earnings

    @staticmethod
    def record_payout(
        user: User,
        usd_amount: Decimal,
        transaction_type: str = TransactionType.EARNING,
        description: str = "",
        status: str = TransactionStatus.PROCESSING,
    ) -> Transaction:
        """
        Record money leaving for the user's bank.

        Increments paid_out_total and appends a negative-usd row. The
        available balance was already reduced by debit_earnings.
        """
        usd_amount = to_usd(usd_amount)

        with transaction.atomic():
            Wallet.objects.filter(user=user).update(
                paid_out_total=F("paid_out_total") + usd_amount,
            )
            return WalletLedger._record(
                user,
                transaction_type,
                usd_amount=-usd_amount,
                description=description,
                status=status,
            )

    # ==========================================================================
    # Internals
    # ==========================================================================

    @staticmethod
    def _record(user: User, transaction_type: str, **fields: Any) -> Transaction:
        """Append a Transaction row and publish the new balances on commit."""
        tx = Transaction.objects.create(
            user=user,
            transaction_type=transaction_type,
            **fields,
        )
        wallet = Wallet.objects.get(user=user)
        publish_balance_changed(
            WalletLedger,
            user_id=user.pk,
            wallet=WalletSnapshot.from_wallet(wallet),
            transaction=tx,
        )
        return tx
