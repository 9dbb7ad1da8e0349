"""
Namespaced cache owned by a service instance.

ServiceCache wraps one Django cache alias behind a small interface so a
service can hold its own cache instead of relying on module-level dicts.
Keys are prefixed with the namespace, which keeps unrelated services from
colliding on the same backend (Redis in deployments, local memory in
development and tests).

Usage:
    from core.cache import ServiceCache

    class CustomerDirectory:
        def __init__(self):
            self.cache = ServiceCache("stripe_customers", default_ttl=3600)

        def lookup(self, email):
            customer_id = self.cache.get(email)
            if customer_id is None:
                customer_id = fetch_from_stripe(email)
                self.cache.put(email, customer_id)
            return customer_id
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

from django.core.cache import caches

if TYPE_CHECKING:
    from typing import Any

    from django.core.cache.backends.base import BaseCache


class ServiceCache:
    """
    get/put/invalidate over a Django cache alias.

    Attributes:
        namespace: Prefix applied to every key
        default_ttl: Seconds used when put() gets no ttl
        alias: Django CACHES alias (default "default")
    """

    def __init__(self, namespace: str, default_ttl: int = 300, alias: str = "default"):
        self.namespace = namespace
        self.default_ttl = default_ttl
        self.alias = alias

    @property
    def backend(self) -> BaseCache:
        return caches[self.alias]

    def _key(self, key: str) -> str:
        # Hash raw keys so emails and other user input stay within
        # memcached/redis key limits and character rules.
        digest = hashlib.sha256(str(key).encode()).hexdigest()[:32]
        return f"{self.namespace}:{digest}"

    def get(self, key: str) -> Any:
        """Return the cached value or None."""
        return self.backend.get(self._key(key))

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store value for ttl seconds (namespace default when omitted)."""
        self.backend.set(self._key(key), value, timeout=ttl or self.default_ttl)

    def invalidate(self, key: str) -> None:
        """Drop a key; missing keys are ignored."""
        self.backend.delete(self._key(key))
