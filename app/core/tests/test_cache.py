"""
Tests for ServiceCache.
"""

import pytest
from django.core.cache import cache

from core.cache import ServiceCache


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


class TestServiceCache:
    def test_put_then_get(self):
        customers = ServiceCache("stripe_customers")

        customers.put("seeker@example.com", "cus_123")

        assert customers.get("seeker@example.com") == "cus_123"

    def test_missing_key_is_none(self):
        assert ServiceCache("stripe_customers").get("nobody@example.com") is None

    def test_namespaces_do_not_collide(self):
        ServiceCache("a").put("key", 1)

        assert ServiceCache("b").get("key") is None

    def test_invalidate(self):
        customers = ServiceCache("stripe_customers")
        customers.put("seeker@example.com", "cus_123")

        customers.invalidate("seeker@example.com")

        assert customers.get("seeker@example.com") is None

    def test_keys_are_hashed_and_prefixed(self):
        key = ServiceCache("stripe_customers")._key("a very long email address@example.com")

        assert key.startswith("stripe_customers:")
        assert len(key) == len("stripe_customers:") + 32
