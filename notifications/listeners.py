import logging

from infrastructure.events import get_event_bus


logger = logging.getLogger(__name__)


def register_notification_listeners():
    """
    Register event listeners that turn domain events into emails.
    Called when Django app starts.
    """
    event_bus = get_event_bus()

    event_bus.subscribe("order.placed", handle_order_placed)
    event_bus.subscribe("seller_application.reviewed", log_seller_application_reviewed)

    logger.info("Notification event listeners registered")


def handle_order_placed(event):
    """Queue the buyer's order confirmation email."""
    from notifications.tasks import send_order_confirmation_email

    payload = event.get("payload", {})
    order_id = payload.get("order_id")
    if not order_id:
        logger.warning("order.placed event without order_id ignored")
        return

    logger.info(f"[LISTENER] Order placed: {order_id}. Queueing confirmation email")
    try:
        send_order_confirmation_email.delay(order_id)
    except Exception as e:
        logger.error(f"Could not queue confirmation email for order {order_id}: {e}", exc_info=True)


def log_seller_application_reviewed(event):
    payload = event.get("payload", {})
    logger.info(
        f"[LISTENER] Seller application {payload.get('application_id')} {payload.get('status')} "
        f"by {payload.get('admin_id')}"
    )
