"""
Observability Infrastructure

Prometheus metrics for authentication and seller onboarding.
"""

from .metrics import (
    login_total,
    record_login_attempt,
    record_registration_attempt,
    record_seller_application,
    registration_total,
    seller_applications_total,
)

__all__ = [
    "login_total",
    "registration_total",
    "seller_applications_total",
    "record_login_attempt",
    "record_registration_attempt",
    "record_seller_application",
]
