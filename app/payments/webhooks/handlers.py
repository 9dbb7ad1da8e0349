"""
Webhook event handlers for Stripe events.

This module provides a handler registry and implementations for the
Stripe events billing reacts to:
- payment_intent.succeeded: credit the purchased package
- transfer.paid: withdrawal PROCESSING -> COMPLETED
- transfer.failed / transfer.reversed: withdrawal -> FAILED (balances
  untouched; reconciled manually)
- account.updated: refresh a connected account's onboarding readiness

Every handler is idempotent: Stripe delivers at least once.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    @register_handler("custom.event")
    def handle_custom_event(event: dict) -> ServiceResult:
        ...

    result = dispatch_webhook(event)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction

from core.services import ServiceResult

from payments.adapters import ConnectAccountStatus
from payments.models import Withdrawal
from payments.services import ConnectOnboardingService, CreditPurchaseService
from payments.state_machines import WithdrawalStatus

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)


# =============================================================================
# Handler Registry
# =============================================================================


# Maps event type strings to handler functions
WEBHOOK_HANDLERS: dict[str, Callable[[dict], ServiceResult]] = {}


def register_handler(*event_types: str) -> Callable:
    """
    Decorator to register a webhook event handler.

    Usage:
        @register_handler("transfer.failed", "transfer.reversed")
        def handle_transfer_failed(event: dict) -> ServiceResult:
            ...
    """

    def decorator(func: Callable[[dict], ServiceResult]) -> Callable:
        for event_type in event_types:
            WEBHOOK_HANDLERS[event_type] = func
            logger.debug(f"Registered webhook handler for {event_type}")
        return func

    return decorator


def dispatch_webhook(event: dict[str, Any]) -> ServiceResult:
    """
    Dispatch a verified event to its handler.

    Unknown event types are acknowledged with success so Stripe does
    not keep retrying them.
    """
    event_type = event.get("type", "")
    handler = WEBHOOK_HANDLERS.get(event_type)

    if not handler:
        logger.info(
            f"No handler registered for event type: {event_type}",
            extra={"stripe_event_id": event.get("id")},
        )
        return ServiceResult.success({"received": True, "ignored": True})

    logger.info(
        f"Dispatching {event_type} to handler",
        extra={"stripe_event_id": event.get("id")},
    )
    return handler(event)


def _event_object(event: dict[str, Any]) -> dict[str, Any]:
    return (event.get("data") or {}).get("object") or {}


# =============================================================================
# Payment Intent Handlers
# =============================================================================


@register_handler("payment_intent.succeeded")
def handle_payment_intent_succeeded(event: dict[str, Any]) -> ServiceResult:
    """
    Credit the package bought with this PaymentIntent.

    Shares CreditPurchaseService.record_purchase with the confirm-payment
    endpoint; whichever arrives second sees "Payment already processed".
    """
    intent = _event_object(event)
    metadata = intent.get("metadata") or {}
    user_id = metadata.get("user_id")
    package_id = metadata.get("package_id")

    if not intent.get("id") or not user_id or not package_id:
        logger.warning(
            "PaymentIntent missing billing metadata",
            extra={"stripe_event_id": event.get("id"), "payment_intent_id": intent.get("id")},
        )
        return ServiceResult.failure("Missing metadata", error_code="INVALID_INPUT")

    try:
        user = get_user_model().objects.filter(pk=user_id).first()
    except (DjangoValidationError, ValueError):
        user = None
    if user is None:
        logger.error(
            "PaymentIntent user not found",
            extra={"payment_intent_id": intent["id"], "user_id": user_id},
        )
        return ServiceResult.failure("User not found", error_code="NOT_FOUND", status_code=404)

    amount_cents = intent.get("amount_received") or intent.get("amount") or 0
    result = CreditPurchaseService.record_purchase(user, intent["id"], package_id, amount_cents)
    if not result.success:
        return result
    return ServiceResult.success({"received": True, "creditsAdded": result.data.get("creditsAdded", 0)})


# =============================================================================
# Transfer Handlers
# =============================================================================


@register_handler("transfer.paid")
def handle_transfer_paid(event: dict[str, Any]) -> ServiceResult:
    """Mark the withdrawal behind this transfer as completed."""
    transfer_id = _event_object(event).get("id")

    with transaction.atomic():
        withdrawal = (
            Withdrawal.objects.select_for_update().filter(stripe_transfer_id=transfer_id).first()
        )
        if withdrawal is None:
            logger.info("No matching withdrawal", extra={"transfer_id": transfer_id})
            return ServiceResult.success({"received": True, "message": "No matching withdrawal"})

        if withdrawal.status != WithdrawalStatus.PROCESSING:
            logger.info(
                "Withdrawal already settled; skipping",
                extra={"withdrawal_id": str(withdrawal.id), "status": withdrawal.status},
            )
            return ServiceResult.success({"received": True, "skipped": True})

        withdrawal.complete()
        withdrawal.save()

    logger.info(
        "Withdrawal marked as completed",
        extra={"withdrawal_id": str(withdrawal.id), "transfer_id": transfer_id},
    )
    return ServiceResult.success({"received": True})


@register_handler("transfer.failed", "transfer.reversed")
def handle_transfer_failed(event: dict[str, Any]) -> ServiceResult:
    """
    Mark the withdrawal behind this transfer as failed.

    The payout was already recorded in the ledger; balances are left for
    manual reconciliation.
    """
    transfer_id = _event_object(event).get("id")
    event_type = event.get("type")

    with transaction.atomic():
        withdrawal = (
            Withdrawal.objects.select_for_update().filter(stripe_transfer_id=transfer_id).first()
        )
        if withdrawal is None:
            logger.info("No matching withdrawal", extra={"transfer_id": transfer_id})
            return ServiceResult.success({"received": True, "message": "No matching withdrawal"})

        if withdrawal.status == WithdrawalStatus.FAILED:
            return ServiceResult.success({"received": True, "skipped": True})

        withdrawal.fail_transfer(reason=f"Stripe {event_type}")
        withdrawal.save()

    logger.warning(
        "Withdrawal transfer failed; manual review required",
        extra={
            "withdrawal_id": str(withdrawal.id),
            "user_id": str(withdrawal.user_id),
            "amount": str(withdrawal.amount),
            "event_type": event_type,
        },
    )
    return ServiceResult.success({"received": True})


# =============================================================================
# Connected Account Handler
# =============================================================================


@register_handler("account.updated")
def handle_account_updated(event: dict[str, Any]) -> ServiceResult:
    """
    Refresh a connected account's payout readiness.

    Fired when onboarding finishes or Stripe changes the account's
    capabilities. Onboarding is complete once details are submitted and
    payouts are enabled; losing either makes the account ineligible again.
    """
    data_object = _event_object(event)
    if not data_object.get("id"):
        logger.error(
            "account.updated: Could not extract account_id",
            extra={"stripe_event_id": event.get("id")},
        )
        return ServiceResult.failure("Missing account id", error_code="INVALID_INPUT")

    status = ConnectAccountStatus.from_stripe(data_object)
    account = ConnectOnboardingService.sync_account_status(status)
    if account is None:
        logger.info(
            "ConnectedAccount not found, may be external account",
            extra={"account_id": status.id, "stripe_event_id": event.get("id")},
        )
        return ServiceResult.success({"received": True, "message": "No matching account"})

    logger.info(
        "ConnectedAccount updated",
        extra={
            "account_id": status.id,
            "onboarding_complete": account.onboarding_complete,
            "payouts_enabled": status.payouts_enabled,
            "charges_enabled": status.charges_enabled,
        },
    )
    return ServiceResult.success({"received": True})
