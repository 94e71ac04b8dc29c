import logging

from django.apps import AppConfig


logger = logging.getLogger(__name__)


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"

    def ready(self):
        # Register event listeners
        try:
            from infrastructure.events import get_event_bus
            from notifications.listeners import register_notification_listeners

            register_notification_listeners()

            # Last context to subscribe: the Redis bus can open its channels now
            get_event_bus().start_listening()
        except Exception as e:
            logger.error(f"Failed to register notification listeners: {e}")
