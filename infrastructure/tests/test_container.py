"""
Service Container Tests
========================

The container hands out cached adapters and domain services wired to them.
"""

from unittest.mock import MagicMock, patch

from django.test import TestCase, override_settings

from infrastructure.container import ServiceContainer, container, get_email, get_storage
from infrastructure.email import MockEmailService
from infrastructure.events import InMemoryEventBus
from infrastructure.storage import LocalStorageAdapter, S3StorageAdapter


class ServiceContainerTest(TestCase):
    def setUp(self):
        container.reset()

    def tearDown(self):
        container.reset()

    def test_container_is_singleton(self):
        self.assertIs(ServiceContainer(), ServiceContainer())
        self.assertIs(ServiceContainer(), container)

    @override_settings(INFRASTRUCTURE={"STORAGE_BACKEND": "s3"})
    @patch("infrastructure.storage.s3_adapter.S3Boto3Storage")
    def test_storage_is_cached(self, mock_storage):
        mock_storage.return_value = MagicMock()

        storage = container.storage()

        self.assertIsInstance(storage, S3StorageAdapter)
        self.assertIs(container.storage(), storage)

    @override_settings(EMAIL_SERVICE_BACKEND="mock")
    def test_email_is_cached(self):
        email = container.email()

        self.assertIsInstance(email, MockEmailService)
        self.assertIs(container.email(), email)

    def test_explicit_email_backend_replaces_cache(self):
        first = container.email("mock")
        second = container.email("mock")

        self.assertIsNot(first, second)

    def test_event_bus_follows_settings(self):
        # Test settings select the in-memory bus
        self.assertIsInstance(container.event_bus(), InMemoryEventBus)

    def test_order_service_shares_collaborators(self):
        order_service = container.order_service()

        self.assertIs(order_service.inventory_service, container.inventory_service())
        self.assertIs(order_service.notification_service, container.notification_service())
        self.assertIs(container.order_service(), order_service)

    def test_reset_drops_cached_services(self):
        cart_service = container.cart_service()
        email = container.email("mock")

        container.reset()

        self.assertIsNot(container.cart_service(), cart_service)
        self.assertIsNot(container.email(), email)

    def test_configure_for_testing(self):
        container.configure_for_testing()

        self.assertIsInstance(container.storage(), LocalStorageAdapter)
        self.assertIsInstance(container.email(), MockEmailService)


class ConvenienceFunctionsTest(TestCase):
    def setUp(self):
        container.reset()

    def test_get_storage(self):
        self.assertIsInstance(get_storage(), LocalStorageAdapter)

    def test_get_email(self):
        self.assertIsInstance(get_email(), MockEmailService)
