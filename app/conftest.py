"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each app's tests/conftest.py.
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken


def pytest_configure():
    """Adjust Django settings before tests run."""
    from django.conf import settings

    # Disable throttling during tests to prevent rate limit failures
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_CLASSES"] = []
    settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"] = {}

    # Use fast password hasher for tests (PBKDF2 is too slow with 870K iterations)
    settings.PASSWORD_HASHERS = [
        "django.contrib.auth.hashers.MD5PasswordHasher",
    ]

    # The test client speaks plain HTTP
    settings.SECURE_SSL_REDIRECT = False


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_integration.py → e2e (full money-flow journeys)
    - test_views.py, test_services.py, workers, webhooks → integration
    - test_models.py, test_state_machines.py, test_types.py, etc. → unit
    - Unmatched files → integration (safe default for Django)

    Explicit markers on test functions/classes take precedence.
    """
    e2e_patterns = ["test_integration.py"]

    integration_patterns = [
        "test_views.py",
        "test_services.py",
        "test_webhooks.py",
        "test_refund_sweep.py",
        "test_earnings_maturation.py",
        "test_payout_executor.py",
        "test_withdrawal_service.py",
        "test_credit_purchase_service.py",
        "test_payout_schedule_service.py",
        "test_promotion_service.py",
        "test_health.py",
    ]

    unit_patterns = [
        "test_models.py",
        "test_serializers.py",
        "test_managers.py",
        "test_signals.py",
        "test_types.py",
        "test_state_machines.py",
        "test_stripe_adapter.py",
        "test_exceptions.py",
        "test_cache.py",
        "test_auth.py",
    ]

    for item in items:
        # Skip if test already has unit/integration/e2e marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration", "e2e"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in e2e_patterns):
            item.add_marker(pytest.mark.e2e)
        elif any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        elif any(pattern in filename for pattern in unit_patterns):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def seeker(db):
    """A seeker with an empty wallet (created by signal)."""
    from authentication.tests.factories import UserFactory

    return UserFactory()


@pytest.fixture
def earner(db):
    """An earner with an empty wallet."""
    from authentication.tests.factories import UserFactory

    return UserFactory(earner=True)


@pytest.fixture
def admin_user(db):
    """A staff user (admin role)."""
    from authentication.tests.factories import UserFactory

    return UserFactory(admin=True)


@pytest.fixture
def fund_wallet(db):
    """
    Set wallet balances directly, bypassing the ledger.

    Usage:
        fund_wallet(seeker, credits=100)
        fund_wallet(earner, pending="7.00", available="40.00")
    """
    from decimal import Decimal

    from payments.ledger.models import Wallet

    def _fund(user, credits=0, pending="0.00", available="0.00", paid_out="0.00"):
        Wallet.objects.filter(user=user).update(
            credit_balance=credits,
            pending_earnings=Decimal(pending),
            available_earnings=Decimal(available),
            paid_out_total=Decimal(paid_out),
        )
        return Wallet.objects.get(user=user)

    return _fund


@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def auth_client():
    """
    Factory returning an APIClient carrying a JWT for the given user.

    Usage:
        client = auth_client(seeker)
        client.post("/api/v1/billing/create-payment-intent/", {...})
    """

    def _make(user):
        client = APIClient()
        token = AccessToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _make


@pytest.fixture
def stripe_configured(settings):
    """Settings with a (fake) Stripe secret key so gateway paths run."""
    settings.STRIPE_SECRET_KEY = "sk_test_fake"
    settings.STRIPE_WEBHOOK_SECRET = "whsec_test_fake"
    return settings
