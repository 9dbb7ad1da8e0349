"""
Django signals published by the billing core.

Signals:
    balance_changed: A wallet was mutated (credits, earnings or payouts)
    message_resolved: A billable message reached replied or refunded

Both are sent only after the surrounding database transaction commits,
so subscribers never observe state that is later rolled back.
Subscribers (realtime UI fan-out, notifications) live outside the
billing core and connect with the usual @receiver decorator.

Related files:
    - ledger/services.py: Sends balance_changed
    - chat/services.py: Sends message_resolved

Usage:
    from django.dispatch import receiver
    from payments.signals import balance_changed

    @receiver(balance_changed)
    def push_balance(sender, user_id, wallet, transaction, **kwargs):
        realtime.publish(f"wallet:{user_id}", wallet.to_dict())
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.db import transaction as db_transaction
from django.dispatch import Signal

if TYPE_CHECKING:
    from payments.ledger.models import Transaction
    from payments.ledger.types import WalletSnapshot

logger = logging.getLogger(__name__)

# Arguments: user_id, wallet (WalletSnapshot), transaction (Transaction | None)
balance_changed = Signal()

# Arguments: message_id, refund_status
message_resolved = Signal()


def _log_failed_receivers(signal_name: str, responses, **context) -> None:
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.warning(
                f"{signal_name} receiver failed",
                extra={"receiver": repr(receiver), **context},
                exc_info=response,
            )


def publish_balance_changed(
    sender: type,
    user_id,
    wallet: WalletSnapshot,
    transaction: Transaction | None = None,
) -> None:
    """Queue balance_changed for after the current transaction commits."""

    def _send():
        responses = balance_changed.send_robust(
            sender=sender,
            user_id=user_id,
            wallet=wallet,
            transaction=transaction,
        )
        _log_failed_receivers("balance_changed", responses, user_id=str(user_id))

    db_transaction.on_commit(_send)


def publish_message_resolved(sender: type, message_id, refund_status: str) -> None:
    """Queue message_resolved for after the current transaction commits."""

    def _send():
        responses = message_resolved.send_robust(
            sender=sender,
            message_id=message_id,
            refund_status=refund_status,
        )
        _log_failed_receivers("message_resolved", responses, message_id=str(message_id))

    db_transaction.on_commit(_send)
