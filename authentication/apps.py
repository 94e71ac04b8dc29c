import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class AuthenticationConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "authentication"

    def ready(self):
        # Register Event Bus Listeners
        try:
            from authentication.infra.events.listeners import register_authentication_listeners

            register_authentication_listeners()
        except Exception as e:
            logger.warning(f"Failed to initialize Event Bus listeners: {e}")
