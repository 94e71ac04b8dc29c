"""
Prometheus Metrics

Defines the Prometheus metrics for authentication and seller onboarding.
Metrics are exposed together with the marketplace ones at /api/marketplace/metrics/.
"""

from prometheus_client import Counter

# ===== Login Metrics =====

login_total = Counter("auth_login_total", "Total login attempts", ["status"])
"""
Total login attempts counter.
Labels: status (success/failed)

Example:
    login_total.labels(status='success').inc()
"""


# ===== Registration Metrics =====

registration_total = Counter("auth_registration_total", "Total registration attempts", ["status"])
"""
Total registration attempts.
Labels: status (success/failed)
"""

registration_failed = Counter("auth_registration_failed", "Failed registration attempts", ["reason"])
"""
Failed registrations counter.
Labels: reason (registration_closed, validation_error, etc.)
"""


# ===== Seller Application Metrics =====

seller_applications_total = Counter("auth_seller_applications_total", "Total seller applications", ["status"])
"""
Seller applications counter.
Labels: status (submitted, approved, rejected)
"""


# ===== Helper Functions =====


def record_login_attempt(success: bool):
    login_total.labels(status="success" if success else "failed").inc()


def record_registration_attempt(success: bool, reason: str = None):
    """
    Record registration attempt metrics.

    Args:
        success: Whether registration was successful
        reason: Failure reason (if failed)
    """
    status = "success" if success else "failed"
    registration_total.labels(status=status).inc()

    if not success and reason:
        registration_failed.labels(reason=reason).inc()


def record_seller_application(status: str):
    """
    Record seller application metrics.

    Args:
        status: Application status (submitted/approved/rejected)
    """
    seller_applications_total.labels(status=status).inc()
