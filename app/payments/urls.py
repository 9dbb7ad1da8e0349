"""
URL configuration for the billing API.

All URLs are prefixed with /api/v1/billing/ in the main URL configuration.
"""

from django.urls import path

from payments import views
from payments.webhooks.views import stripe_webhook

app_name = "payments"

urlpatterns = [
    # Credits
    path(
        "create-payment-intent/",
        views.CreatePaymentIntentView.as_view(),
        name="create-payment-intent",
    ),
    path("confirm-payment/", views.ConfirmPaymentView.as_view(), name="confirm-payment"),
    # Payouts
    path(
        "process-withdrawal/",
        views.ProcessWithdrawalView.as_view(),
        name="process-withdrawal",
    ),
    path(
        "update-payout-schedule/",
        views.UpdatePayoutScheduleView.as_view(),
        name="update-payout-schedule",
    ),
    path(
        "stripe-connect-onboard/",
        views.StripeConnectOnboardView.as_view(),
        name="stripe-connect-onboard",
    ),
    # Video dates
    path(
        "video-dates/<uuid:video_date_id>/start/",
        views.StartVideoDateView.as_view(),
        name="video-date-start",
    ),
    path(
        "video-dates/<uuid:video_date_id>/extend/",
        views.ExtendVideoDateView.as_view(),
        name="video-date-extend",
    ),
    path(
        "video-dates/<uuid:video_date_id>/complete/",
        views.CompleteVideoDateView.as_view(),
        name="video-date-complete",
    ),
    path(
        "video-dates/<uuid:video_date_id>/cancel/",
        views.CancelVideoDateView.as_view(),
        name="video-date-cancel",
    ),
    # Promotions
    path(
        "launch-promotion/claim/",
        views.ClaimLaunchPromotionView.as_view(),
        name="launch-promotion-claim",
    ),
    # Sweep triggers
    path(
        "process-message-refunds/",
        views.process_message_refunds_view,
        name="process-message-refunds",
    ),
    path(
        "process-pending-earnings/",
        views.process_pending_earnings_view,
        name="process-pending-earnings",
    ),
    # Webhooks
    path("webhooks/stripe/", stripe_webhook, name="stripe-webhook"),
]
