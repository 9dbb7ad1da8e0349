"""
Pytest fixtures for payment service tests.

Reuses the Stripe mocks and payout-ready earners of payments/tests.
"""

from payments.tests.conftest import (  # noqa: F401
    connected_account,
    mock_stripe,
    ready_earner,
)
