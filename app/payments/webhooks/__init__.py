"""
Webhook handling for Stripe events.

Events are verified by signature and handled synchronously; see
handlers.py for the supported event types.

Usage:
    # In urls.py
    from payments.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe-webhook"),
    ]
"""
