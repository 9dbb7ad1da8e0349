"""
Shared-secret checks for the machine-to-machine billing endpoints.

The sweep triggers are called by a scheduler, not by users:
- process-message-refunds expects "Authorization: Bearer <SERVICE_ROLE_KEY>"
- process-pending-earnings expects "x-cron-secret: <CRON_SECRET>"

Both compare with hmac.compare_digest. An unset secret never matches.
"""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING

from django.conf import settings

if TYPE_CHECKING:
    from django.http import HttpRequest

BEARER_PREFIX = "Bearer "


def _matches(provided: str | None, expected: str | None) -> bool:
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


def bearer_token(request: HttpRequest) -> str | None:
    """Return the token of an "Authorization: Bearer ..." header, if any."""
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None


def has_service_role(request: HttpRequest) -> bool:
    return _matches(bearer_token(request), getattr(settings, "SERVICE_ROLE_KEY", ""))


def cron_secret_configured() -> bool:
    return bool(getattr(settings, "CRON_SECRET", ""))


def has_cron_secret(request: HttpRequest) -> bool:
    return _matches(request.headers.get("x-cron-secret"), getattr(settings, "CRON_SECRET", ""))
