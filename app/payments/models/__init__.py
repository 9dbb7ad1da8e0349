"""
Payments domain models.

- Wallet, Transaction, EarningsRelease: the ledger (payments.ledger.models)
- ConnectedAccount: Stripe Connect accounts for earners
- Withdrawal: Transfers of available earnings to connected accounts
- LaunchPromotion: Claimed early-adopter promotions
- VideoDate: Booked video calls and their settled charge
"""

from payments.ledger.models import (
    EarningsRelease,
    ReleaseOutcome,
    Transaction,
    TransactionStatus,
    TransactionType,
    Wallet,
)
from payments.models.connected_account import ConnectedAccount
from payments.models.launch_promotion import LaunchPromotion
from payments.models.video_date import VideoDate
from payments.models.withdrawal import Withdrawal

__all__ = [
    "ConnectedAccount",
    "EarningsRelease",
    "LaunchPromotion",
    "ReleaseOutcome",
    "Transaction",
    "TransactionStatus",
    "TransactionType",
    "VideoDate",
    "Wallet",
    "Withdrawal",
]
