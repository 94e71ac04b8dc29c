"""
Celery tasks for notification delivery.
"""

import logging

from celery import shared_task
from django.conf import settings


logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, queue="notification_tasks")
def send_notification_email(self, notification_id):
    """
    Send the email copy of an in-app notification.

    Args:
        notification_id: Primary key of the Notification

    Returns:
        dict: Delivery outcome
    """
    from infrastructure.container import container
    from infrastructure.email import EmailException, EmailMessage
    from notifications.metrics import notification_emails_total
    from notifications.models import Notification

    try:
        notification = Notification.objects.select_related("user").get(id=notification_id)
    except Notification.DoesNotExist:
        logger.warning(f"Notification {notification_id} not found, email skipped")
        return {"success": False, "error": "Notification not found", "notification_id": notification_id}

    recipient = notification.user.email
    if not recipient:
        return {"success": False, "error": "Recipient has no email", "notification_id": notification_id}

    body = notification.message
    if notification.action_url:
        body = f"{body}\n\n{settings.FRONTEND_URL.rstrip('/')}{notification.action_url}"

    message = EmailMessage(
        subject=notification.title,
        body=body,
        to=[recipient],
        tags=[notification.type, f"notification:{notification.id}"],
    )

    try:
        container.email().send(message)
    except EmailException as e:
        notification_emails_total.labels(status="failed").inc()
        logger.error(f"Email for notification {notification_id} failed: {e}")
        raise self.retry(exc=e, countdown=60 * (self.request.retries + 1))

    notification_emails_total.labels(status="sent").inc()
    logger.info(f"Email sent for notification {notification_id} ({notification.type})")
    return {"success": True, "notification_id": notification_id}


@shared_task(bind=True, max_retries=3, queue="notification_tasks")
def send_order_confirmation_email(self, order_id):
    """Email the buyer a summary of a freshly placed order."""
    from infrastructure.container import container
    from infrastructure.email import EmailException, EmailMessage
    from marketplace.models import Order

    try:
        order = Order.objects.select_related("buyer", "store").prefetch_related("items").get(id=order_id)
    except Order.DoesNotExist:
        logger.warning(f"Order {order_id} not found, confirmation email skipped")
        return {"success": False, "error": "Order not found", "order_id": order_id}

    lines = [f"- {item.quantity} x {item.product_name}: {item.total_price}" for item in order.items.all()]
    body = "\n".join(
        [
            f"Thank you for your order from {order.store.name}.",
            "",
            *lines,
            "",
            f"Shipping: {order.shipping_fee}",
            f"Discount: {order.discount_amount}",
            f"Total: {order.total_amount}",
            "",
            f"Ship to: {order.shipping_address}",
        ]
    )
    message = EmailMessage(
        subject=f"Order {str(order.id)[:8]} received",
        body=body,
        to=[order.buyer.email],
        tags=["order_confirmation", f"order:{order.id}"],
    )

    try:
        container.email().send(message)
    except EmailException as e:
        logger.error(f"Confirmation email for order {order_id} failed: {e}")
        raise self.retry(exc=e, countdown=60 * (self.request.retries + 1))

    logger.info(f"Confirmation email sent for order {order_id}")
    return {"success": True, "order_id": order_id}
