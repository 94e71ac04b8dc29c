"""
Celery Configuration for Pazar Backend

Configures Celery for asynchronous notification emails and the periodic
expiry of stale unpaid orders.
"""

import os

from celery import Celery


# Set the default Django settings module for the 'celery' program.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pazarBackend.settings")

app = Celery("pazarBackend")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Celery Beat configuration for periodic tasks
app.conf.beat_schedule = {
    # Cancel unpaid orders that were never completed
    "expire-stale-orders": {
        "task": "marketplace.tasks.expire_stale_orders",
        "schedule": 60.0 * 60.0,  # Every hour
        "options": {"expires": 15.0 * 60.0, "queue": "marketplace_tasks"},
    },
}

app.conf.update(
    task_routes={
        "marketplace.tasks.*": {"queue": "marketplace_tasks"},
        "notifications.tasks.*": {"queue": "notification_tasks"},
    },
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    result_expires=60 * 60 * 24,  # Results expire after 24 hours
    worker_max_tasks_per_child=1000,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=10 * 60,
    task_soft_time_limit=8 * 60,
)
