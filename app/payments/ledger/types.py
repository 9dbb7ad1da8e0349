"""
Data types for ledger operations.

This module defines small value types used throughout the billing code
for type-safe data transfer between layers.

Types:
    EarningsSplit: Gross value of a credit charge split into earner/platform
    WalletSnapshot: Read-only copy of a wallet's balances

Helpers:
    to_usd: Quantize any numeric value to cents, rounding half up

Usage:
    from payments.ledger.types import EarningsSplit, to_usd

    split = EarningsSplit.for_credits(2)
    split.gross_usd       # Decimal("0.20")
    split.earner_amount   # Decimal("0.14")
    split.platform_fee    # Decimal("0.06")

    to_usd("20.005")      # Decimal("20.01")
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from django.conf import settings

if TYPE_CHECKING:
    from typing import Any

    from payments.ledger.models import Wallet

CENTS = Decimal("0.01")


def to_usd(value: Any) -> Decimal:
    """
    Quantize a value to whole cents, rounding half up.

    Floats go through str() first so 20.005 stays 20.005 instead of
    its binary approximation.
    """
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_cents(value: Any) -> int:
    """Convert a USD amount to integer cents for Stripe."""
    return int((to_usd(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class EarningsSplit:
    """
    Split of a credit charge into earner share and platform fee.

    Attributes:
        credits: Credits charged
        gross_usd: credits * CREDIT_TO_USD
        earner_amount: EARNER_SHARE of gross, rounded to cents
        platform_fee: Remainder of gross

    Invariant:
        earner_amount + platform_fee == gross_usd
    """

    credits: int
    gross_usd: Decimal
    earner_amount: Decimal
    platform_fee: Decimal

    @classmethod
    def for_credits(cls, credits: int) -> EarningsSplit:
        rate = Decimal(str(settings.CREDIT_TO_USD))
        share = Decimal(str(settings.EARNER_SHARE))

        gross = to_usd(Decimal(credits) * rate)
        earner = to_usd(gross * share)
        return cls(
            credits=credits,
            gross_usd=gross,
            earner_amount=earner,
            platform_fee=gross - earner,
        )

    @classmethod
    def zero(cls) -> EarningsSplit:
        return cls(
            credits=0,
            gross_usd=Decimal("0.00"),
            earner_amount=Decimal("0.00"),
            platform_fee=Decimal("0.00"),
        )


@dataclass(frozen=True)
class WalletSnapshot:
    """
    Balances read after a ledger mutation.

    Handed to balance_changed subscribers so they never need to hit
    the database again.
    """

    user_id: Any
    credit_balance: int
    pending_earnings: Decimal
    available_earnings: Decimal
    paid_out_total: Decimal

    @classmethod
    def from_wallet(cls, wallet: Wallet) -> WalletSnapshot:
        return cls(
            user_id=wallet.user_id,
            credit_balance=wallet.credit_balance,
            pending_earnings=wallet.pending_earnings,
            available_earnings=wallet.available_earnings,
            paid_out_total=wallet.paid_out_total,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": str(self.user_id),
            "credit_balance": self.credit_balance,
            "pending_earnings": str(self.pending_earnings),
            "available_earnings": str(self.available_earnings),
            "paid_out_total": str(self.paid_out_total),
        }
