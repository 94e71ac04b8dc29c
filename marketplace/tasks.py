"""
Celery tasks for the marketplace app.
"""

import logging

from celery import shared_task


logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, queue="marketplace_tasks")
def expire_stale_orders(self, older_than_hours=None):
    """
    Cancel unpaid orders older than ORDER_PENDING_EXPIRY_HOURS and restore their stock.

    Scheduled hourly by celery beat.

    Returns:
        dict: Number and ids of the expired orders
    """
    from infrastructure.container import container

    result = container.order_service().expire_stale_orders(older_than_hours=older_than_hours)
    if not result.ok:
        logger.error(f"Stale order sweep failed: {result.error_detail}")
        raise self.retry(exc=RuntimeError(result.error_detail), countdown=300)

    expired = result.value["expired"]
    if expired:
        logger.info(f"Stale order sweep cancelled {expired} orders")
    return {"success": True, "expired": expired, "order_ids": [str(order_id) for order_id in result.value["order_ids"]]}
