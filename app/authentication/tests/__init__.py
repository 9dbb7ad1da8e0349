"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager tests
- test_models.py: User role and field tests
- test_signals.py: Wallet creation signal tests

Usage:
    pytest app/authentication/tests/
"""
