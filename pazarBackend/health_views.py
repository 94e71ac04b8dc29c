"""
Health Check Endpoints

Kubernetes-compatible health probes for liveness and readiness checks.
"""

import logging

from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse

from infrastructure.container import container

logger = logging.getLogger(__name__)


def health_live(request):
    """
    Liveness probe: Is the process alive?

    **Always returns 200** unless the process is completely dead.
    """
    return JsonResponse({"status": "ok"}, status=200)


def health_ready(request):
    """
    Readiness probe: Can the service handle requests?

    Checks the database, the cache and, when it is Redis backed, the event bus.

    Returns:
        JsonResponse: Status and check details
        Status Code: 200 (ready) or 503 (not ready)
    """
    checks = {"database": check_database(), "cache": check_cache(), "event_bus": check_event_bus()}

    all_ok = all(checks.values())
    status_code = 200 if all_ok else 503

    return JsonResponse({"status": "ready" if all_ok else "not_ready", "checks": checks}, status=status_code)


def check_database():
    try:
        connection.ensure_connection()
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


def check_cache():
    try:
        cache.set("health_check", "ok", timeout=1)
        return cache.get("health_check") == "ok"
    except Exception as e:
        logger.error(f"Cache health check failed: {e}")
        return False


def check_event_bus():
    """Ping Redis when the event bus uses it; the in-memory bus is always ready."""
    try:
        event_bus = container.event_bus()
        if not hasattr(event_bus, "redis_client"):
            return True
        if event_bus.redis_client is None:
            return False
        event_bus.redis_client.ping()
        return True
    except Exception as e:
        logger.error(f"Event bus health check failed: {e}")
        return False
