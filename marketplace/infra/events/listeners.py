import logging

from infrastructure.events import get_event_bus


logger = logging.getLogger(__name__)


def register_marketplace_listeners():
    """
    Register event listeners for the marketplace context.
    Called when Django app starts.
    """
    event_bus = get_event_bus()

    event_bus.subscribe("product.submitted", log_product_submitted)
    event_bus.subscribe("product.approved", log_product_moderated)
    event_bus.subscribe("product.rejected", log_product_moderated)
    event_bus.subscribe("order.status_changed", log_order_status_changed)
    event_bus.subscribe("order.cancelled", log_order_cancelled)

    logger.info("Marketplace event listeners registered")


def log_product_submitted(event):
    payload = event.get("payload", {})
    logger.info(f"[LISTENER] Product {payload.get('product_id')} submitted for review by {payload.get('seller_id')}")


def log_product_moderated(event):
    """Audit trail of moderation decisions."""
    payload = event.get("payload", {})
    decision = event.get("event_type", "").split(".")[-1]
    logger.info(f"[LISTENER] Product {payload.get('product_id')} {decision} by admin {payload.get('admin_id')}")


def log_order_status_changed(event):
    payload = event.get("payload", {})
    logger.info(
        f"[LISTENER] Order {payload.get('order_id')}: {payload.get('old_status')} -> {payload.get('new_status')}"
    )


def log_order_cancelled(event):
    payload = event.get("payload", {})
    logger.info(f"[LISTENER] Order {payload.get('order_id')} cancelled")
