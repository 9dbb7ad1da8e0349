"""
Infrastructure endpoints that sit outside the billing domain.

The health check is polled by load balancers and the container runtime.
"""

import logging

from django.db import connection
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from core.cache import ServiceCache

logger = logging.getLogger(__name__)

health_cache = ServiceCache("health", default_ttl=5)


@require_GET
def health_check(request):
    """
    Report database and cache connectivity.

    The database is required: without it the response is 503. A cache
    outage only degrades the report, since every cached value has a
    database or Stripe fallback.

    Example Response:
        {
            "status": "healthy",
            "database": "connected",
            "cache": "connected"
        }
    """
    health_status = {
        "status": "healthy",
        "database": "unknown",
        "cache": "unknown",
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        health_status["database"] = "connected"
    except Exception:
        logger.error("Health check: database unreachable", exc_info=True)
        health_status["database"] = "disconnected"
        health_status["status"] = "unhealthy"

    try:
        health_cache.put("ping", "ok")
        ok = health_cache.get("ping") == "ok"
    except Exception:
        logger.warning("Health check: cache unreachable", exc_info=True)
        ok = False
    health_status["cache"] = "connected" if ok else "disconnected"

    status_code = 200 if health_status["status"] == "healthy" else 503
    return JsonResponse(health_status, status=status_code)
