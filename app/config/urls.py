"""
URL configuration for the billing service.

URL Structure:
    /admin/                                  - Django admin interface
    /health/                                 - Health check endpoint (load balancers, Docker)
    /api/schema/                             - OpenAPI schema (YAML)
    /api/docs/                               - Swagger UI
    /api/v1/billing/                         - Billing endpoints
        create-payment-intent/               - Start a credit purchase (JWT)
        confirm-payment/                     - Credit a succeeded purchase (JWT)
        process-withdrawal/                  - Transfer available earnings (JWT)
        update-payout-schedule/              - Apply the payout cadence (JWT)
        launch-promotion/claim/              - Claim a launch promotion (JWT)
        process-message-refunds/             - Refund sweep trigger (service role key)
        process-pending-earnings/            - Maturation trigger (x-cron-secret)
        webhooks/stripe/                     - Stripe webhook endpoint (signature)
    /api/v1/chat/                            - Chat endpoints
        messages/send/                       - Send a (possibly billable) message (JWT)
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("billing/", include("payments.urls")),
    path("chat/", include("chat.urls")),
]

urlpatterns = [
    # Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="schema"),
        name="swagger-ui",
    ),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Lynxx Club Billing"
admin.site.site_title = "Billing Admin"
admin.site.index_title = "Wallets, withdrawals and promotions"
