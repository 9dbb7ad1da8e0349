"""
Tests for payments app.

This package contains test modules for:
- test_models.py: ConnectedAccount, Withdrawal, LaunchPromotion model tests
- test_auth.py: Machine endpoint credential checks
- test_views.py: Billing API endpoint tests

Ledger, adapter, service, webhook and worker tests live in the tests/
package of each subpackage.

Usage:
    pytest app/payments/
    pytest app/payments/tests/test_views.py
"""
