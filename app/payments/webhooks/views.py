"""
Webhook endpoint view for Stripe.

The view verifies the signature, dispatches the event synchronously to
its handler and answers with {"received": true}. Handlers are
idempotent, so Stripe retries after a non-2xx answer are safe.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe-webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.adapters import StripeAdapter
from payments.exceptions import StripeInvalidRequestError
from payments.webhooks.handlers import dispatch_webhook

logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive a Stripe webhook event.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        JsonResponse with status:
        - 200: Event handled, duplicate, or ignored
        - 400: Missing/invalid signature or payload, bad metadata
        - 404: Event references an unknown user
        - 500: Webhook secret not configured, or handler crashed
    """
    if not StripeAdapter.is_configured() or not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("Stripe webhook received but Stripe is not configured")
        return JsonResponse({"error": "Webhook not configured"}, status=500)

    signature = request.headers.get("Stripe-Signature", "")
    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return JsonResponse({"error": "Missing signature"}, status=400)

    try:
        event = StripeAdapter.construct_webhook_event(request.body, signature)
    except StripeInvalidRequestError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"error": str(e)},
        )
        return JsonResponse({"error": "Signature verification failed"}, status=400)

    logger.info(
        f"Received Stripe webhook: {event.get('type')}",
        extra={"stripe_event_id": event.get("id"), "event_type": event.get("type")},
    )

    try:
        result = dispatch_webhook(event)
    except Exception:
        logger.error(
            "Webhook handler failed",
            extra={"stripe_event_id": event.get("id"), "event_type": event.get("type")},
            exc_info=True,
        )
        return JsonResponse({"error": "Internal server error"}, status=500)

    if not result.success:
        return JsonResponse(result.to_response(), status=result.status_code)

    return JsonResponse(result.data or {"received": True})
