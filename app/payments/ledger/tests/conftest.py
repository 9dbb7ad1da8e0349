"""
Pytest fixtures for ledger tests.

Sections:
    - Wallet Fixtures: Users with pre-set balances
    - Signal Fixtures: Capture balance_changed publications
"""

import pytest

from payments.signals import balance_changed


# ==========================================================================
# Wallet Fixtures
# ==========================================================================


@pytest.fixture
def funded_seeker(seeker, fund_wallet):
    """Seeker holding 10 credits."""
    fund_wallet(seeker, credits=10)
    return seeker


@pytest.fixture
def earner_with_pending(earner, fund_wallet):
    """Earner with $7.00 pending and $20.00 available."""
    fund_wallet(earner, pending="7.00", available="20.00")
    return earner


# ==========================================================================
# Signal Fixtures
# ==========================================================================


@pytest.fixture
def balance_events():
    """
    Collect balance_changed publications.

    Signals fire on commit; wrap the call under test in
    django_capture_on_commit_callbacks(execute=True).
    """
    received = []

    def _receiver(sender, **kwargs):
        received.append(kwargs)

    balance_changed.connect(_receiver, weak=False)
    yield received
    balance_changed.disconnect(_receiver)
