import logging

from infrastructure.events import get_event_bus
from utils.logging_utils import mask_value

logger = logging.getLogger(__name__)


def register_authentication_listeners():
    """
    Register all event listeners for authentication context.
    Called when Django app starts.
    """
    event_bus = get_event_bus()

    event_bus.subscribe("user.registered", log_user_registration)
    event_bus.subscribe("seller_application.submitted", log_seller_application_submitted)

    logger.info("Authentication event listeners registered")


def log_user_registration(event):
    """Log user registration event."""
    # event is the full envelope including 'payload'
    payload = event.get("payload", {})
    logger.info(f"[LISTENER] User registered: {mask_value(payload.get('email'))} ({payload.get('user_id')})")


def log_seller_application_submitted(event):
    payload = event.get("payload", {})
    logger.info(
        f"[LISTENER] Seller application {payload.get('application_id')} submitted by {payload.get('user_id')}"
    )
