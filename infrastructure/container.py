"""
Dependency Injection Container
================================

Simple service locator pattern for managing infrastructure dependencies and
the domain services built on top of them.

Usage:
    from infrastructure.container import container

    # In your view
    result = container.order_service().place_order(request.user, data)

    # In your service
    storage = container.storage()
    email = container.email()
"""

import logging
from typing import Optional

from .email import EmailFactory, EmailServiceInterface
from .events import EventBus, get_event_bus
from .storage import StorageFactory, StorageInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for infrastructure dependencies and domain services.

    Implements lazy initialization and caching of service instances.
    Singleton: every import shares the same instance.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._clear()
            self._initialized = True
            logger.info("Service container initialized")

    def _clear(self):
        self._storage: Optional[StorageInterface] = None
        self._email: Optional[EmailServiceInterface] = None
        self._event_bus: Optional[EventBus] = None

        # Domain Services
        self._notification_service = None
        self._inventory_service = None
        self._pricing_service = None
        self._cart_service = None
        self._address_service = None
        self._seller_service = None
        self._catalog_service = None
        self._approval_service = None
        self._review_service = None
        self._question_service = None
        self._order_service = None
        self._coupon_service = None
        self._announcement_service = None
        self._platform_settings_service = None
        self._backoffice_service = None

    # ===== Infrastructure =====

    def storage(self) -> StorageInterface:
        """
        Get storage service instance (S3/MinIO or local disk).

        Returns:
            StorageInterface implementation (cached)
        """
        if self._storage is None:
            self._storage = StorageFactory.create()
            logger.debug(f"Created storage service: {type(self._storage).__name__}")

        return self._storage

    def email(self, backend: Optional[str] = None) -> EmailServiceInterface:
        """
        Get email service instance.

        Args:
            backend: Email backend type ('smtp' or 'mock')
                    If None, uses configuration from settings

        Returns:
            EmailServiceInterface implementation (cached)
        """
        if self._email is None or backend is not None:
            self._email = EmailFactory.create(backend)
            logger.debug(f"Created email service: {type(self._email).__name__}")

        return self._email

    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            self._event_bus = get_event_bus()
        return self._event_bus

    # ===== Domain services =====

    def notification_service(self):
        """Get NotificationService instance."""
        if self._notification_service is None:
            from notifications.services import NotificationService

            self._notification_service = NotificationService()
            logger.debug("Created NotificationService")
        return self._notification_service

    def inventory_service(self):
        """Get InventoryService instance."""
        if self._inventory_service is None:
            from marketplace.services import InventoryService

            self._inventory_service = InventoryService()
            logger.debug("Created InventoryService")
        return self._inventory_service

    def pricing_service(self):
        """Get PricingService instance."""
        if self._pricing_service is None:
            from marketplace.services import PricingService

            self._pricing_service = PricingService()
            logger.debug("Created PricingService")
        return self._pricing_service

    def cart_service(self):
        """Get CartService instance."""
        if self._cart_service is None:
            from marketplace.services import CartService

            # CartService depends on InventoryService and PricingService
            self._cart_service = CartService(
                inventory_service=self.inventory_service(), pricing_service=self.pricing_service()
            )
            logger.debug("Created CartService")
        return self._cart_service

    def address_service(self):
        if self._address_service is None:
            from authentication.domain.services import AddressService

            self._address_service = AddressService()
        return self._address_service

    def seller_service(self):
        if self._seller_service is None:
            from authentication.domain.services import SellerService

            self._seller_service = SellerService(
                notification_service=self.notification_service(), event_bus=self.event_bus()
            )
        return self._seller_service

    def catalog_service(self):
        """Get CatalogService instance."""
        if self._catalog_service is None:
            from marketplace.services import CatalogService

            self._catalog_service = CatalogService(
                storage=self._storage,
                notification_service=self.notification_service(),
                event_bus=self.event_bus(),
            )
            logger.debug("Created CatalogService")
        return self._catalog_service

    def approval_service(self):
        """Get ApprovalService instance."""
        if self._approval_service is None:
            from marketplace.services import ApprovalService

            self._approval_service = ApprovalService(
                notification_service=self.notification_service(), event_bus=self.event_bus()
            )
            logger.debug("Created ApprovalService")
        return self._approval_service

    def review_service(self):
        """Get ReviewService instance."""
        if self._review_service is None:
            from marketplace.services import ReviewService

            self._review_service = ReviewService()
            logger.debug("Created ReviewService")
        return self._review_service

    def question_service(self):
        if self._question_service is None:
            from marketplace.services import QuestionService

            self._question_service = QuestionService(notification_service=self.notification_service())
        return self._question_service

    def order_service(self):
        """Get OrderService instance."""
        if self._order_service is None:
            from marketplace.services import OrderService

            self._order_service = OrderService(
                inventory_service=self.inventory_service(),
                pricing_service=self.pricing_service(),
                address_service=self.address_service(),
                notification_service=self.notification_service(),
                event_bus=self.event_bus(),
                coupon_service=self.coupon_service(),
            )
            logger.debug("Created OrderService")
        return self._order_service

    def coupon_service(self):
        if self._coupon_service is None:
            from marketplace.services import CouponService

            self._coupon_service = CouponService()
        return self._coupon_service

    def platform_settings_service(self):
        if self._platform_settings_service is None:
            from backoffice.services import PlatformSettingsService

            self._platform_settings_service = PlatformSettingsService()
        return self._platform_settings_service

    def backoffice_service(self):
        if self._backoffice_service is None:
            from backoffice.services import BackofficeService

            self._backoffice_service = BackofficeService()
        return self._backoffice_service

    def announcement_service(self):
        if self._announcement_service is None:
            from backoffice.services import AnnouncementService

            self._announcement_service = AnnouncementService()
        return self._announcement_service

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._clear()
        logger.info("Service container reset")

    def configure_for_testing(self):
        """
        Configure container with test-friendly adapters.

        Sets up:
            - Storage from the (test) settings, normally local disk
            - Mock email service (instead of SMTP)
            - Whatever event bus the settings select, normally in-memory
        """
        self._clear()
        self._storage = StorageFactory.create()
        self._email = EmailFactory.create("mock")
        logger.info("Service container configured for testing")


# Global singleton instance
container = ServiceContainer()


# Convenience functions for quick access
def get_storage() -> StorageInterface:
    """Get storage service from global container."""
    return container.storage()


def get_email() -> EmailServiceInterface:
    """Get email service from global container."""
    return container.email()
