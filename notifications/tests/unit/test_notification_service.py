from unittest.mock import patch

import pytest

from authentication.tests.factories import AdminFactory, UserFactory
from infrastructure.container import container
from notifications.models import Notification
from notifications.services import NotificationService
from notifications.tasks import send_notification_email
from notifications.tests.factories import NotificationFactory
from utils.service_base import ErrorCodes


@pytest.fixture
def service():
    return NotificationService(send_emails=False)


@pytest.mark.unit
@pytest.mark.django_db
class TestNotificationService:
    def test_notify_user(self, service):
        user = UserFactory()

        result = service.notify_user(
            user, type="order_status_changed", title="Order shipped", message="On its way", related_id=42
        )

        assert result.ok
        assert result.value.related_id == "42"
        assert result.value.is_read is False
        assert Notification.objects.filter(user=user).count() == 1

    def test_notify_without_recipient(self, service):
        result = service.notify_user(None, type="system", title="Hi", message="Hello")

        assert result.error == ErrorCodes.USER_NOT_FOUND

    def test_notify_admins_reaches_every_active_admin(self, service):
        AdminFactory()
        AdminFactory()
        AdminFactory(is_active=False)
        superuser = UserFactory(is_superuser=True)
        UserFactory()

        result = service.notify_admins(type="new_product", title="New product", message="Review it")

        assert result.ok
        assert len(result.value) == 3
        assert Notification.objects.filter(user=superuser, type="new_product").exists()

    def test_list_with_unread_count(self, service):
        user = UserFactory()
        NotificationFactory(user=user)
        NotificationFactory(user=user, is_read=True)
        NotificationFactory()

        result = service.list_for_user(user)
        assert result.value["count"] == 2
        assert result.value["unread_count"] == 1

        result = service.list_for_user(user, unread_only=True)
        assert result.value["count"] == 1

    def test_mark_read(self, service):
        notification = NotificationFactory()

        result = service.mark_read(notification.user, notification.id)

        assert result.ok
        notification.refresh_from_db()
        assert notification.is_read is True
        assert notification.read_at is not None
        assert service.unread_count(notification.user).value == 0

    def test_other_users_notification_is_not_found(self, service):
        notification = NotificationFactory()
        stranger = UserFactory()

        assert service.mark_read(stranger, notification.id).error == ErrorCodes.NOTIFICATION_NOT_FOUND
        assert service.delete(stranger, notification.id).error == ErrorCodes.NOTIFICATION_NOT_FOUND
        assert Notification.objects.filter(id=notification.id).exists()

    def test_mark_all_read(self, service):
        user = UserFactory()
        NotificationFactory.create_batch(3, user=user)
        other = NotificationFactory()

        result = service.mark_all_read(user)

        assert result.value == 3
        other.refresh_from_db()
        assert other.is_read is False

    def test_delete(self, service):
        notification = NotificationFactory()

        assert service.delete(notification.user, notification.id).ok
        assert not Notification.objects.filter(id=notification.id).exists()

    @patch("notifications.tasks.send_notification_email")
    def test_email_copy_is_queued(self, mock_task):
        user = UserFactory()

        result = NotificationService(send_emails=True).notify_user(user, type="system", title="Hi", message="Hello")

        mock_task.delay.assert_called_once_with(result.value.id)

    @patch("notifications.tasks.send_notification_email")
    def test_queue_failure_keeps_notification(self, mock_task):
        mock_task.delay.side_effect = ConnectionError("broker down")
        user = UserFactory()

        result = NotificationService(send_emails=True).notify_user(user, type="system", title="Hi", message="Hello")

        assert result.ok
        assert Notification.objects.filter(user=user).exists()


@pytest.mark.unit
@pytest.mark.django_db
class TestNotificationEmailTask:
    def setup_method(self):
        container.configure_for_testing()

    def teardown_method(self):
        container.reset()

    def test_sends_email_with_action_link(self, settings):
        settings.FRONTEND_URL = "https://pazar.example/"
        notification = NotificationFactory(title="Order shipped", action_url="/orders/1")

        outcome = send_notification_email(notification.id)

        assert outcome["success"] is True
        message = container.email().get_last_message()
        assert message.subject == "Order shipped"
        assert message.to == [notification.user.email]
        assert message.body.endswith("https://pazar.example/orders/1")

    def test_missing_notification(self):
        outcome = send_notification_email(999999)

        assert outcome["success"] is False
        assert container.email().get_sent_count() == 0
