from unittest.mock import MagicMock

import pytest

from infrastructure.events.in_memory_event_bus import InMemoryEventBus
from marketplace.models import Product
from marketplace.services import ApprovalService
from marketplace.tests.factories import AdminFactory, PendingProductFactory, ProductFactory, UserFactory
from notifications.models import Notification
from notifications.services import NotificationService
from utils.service_base import ErrorCodes, service_err


@pytest.mark.unit
@pytest.mark.django_db
class TestApprovalService:
    def setup_method(self):
        self.event_bus = InMemoryEventBus()
        self.service = ApprovalService(
            notification_service=NotificationService(send_emails=False), event_bus=self.event_bus
        )
        self.admin = AdminFactory()
        self.product = PendingProductFactory()

    def test_approve_makes_product_live(self):
        result = self.service.approve_product(self.product.id, self.admin)

        assert result.ok
        product = Product.objects.get(id=self.product.id)
        assert product.approval_status == "approved"
        assert product.is_active is True
        assert product.approved_by_id == self.admin.id
        assert product.approved_at is not None
        assert Notification.objects.filter(user=product.seller, type="product_approved").exists()
        assert self.event_bus.events_of_type("product.approved")[0]["payload"]["admin_id"] == str(self.admin.id)

    def test_approve_twice_changes_nothing(self):
        self.service.approve_product(self.product.id, self.admin)
        self.event_bus.clear()

        result = self.service.approve_product(self.product.id, self.admin)

        assert result.ok
        assert self.event_bus.published == []
        assert Notification.objects.filter(type="product_approved").count() == 1

    def test_non_admin_cannot_moderate(self):
        seller = self.product.store.owner

        assert self.service.approve_product(self.product.id, seller).error == ErrorCodes.PERMISSION_DENIED
        assert self.service.reject_product(self.product.id, seller, "Bad photos").error == (
            ErrorCodes.PERMISSION_DENIED
        )

    def test_unknown_product(self):
        result = self.service.approve_product("00000000-0000-0000-0000-000000000000", self.admin)

        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND

    def test_reject_requires_meaningful_reason(self):
        result = self.service.reject_product(self.product.id, self.admin, "  no ")

        assert result.error == ErrorCodes.REJECTION_REASON_REQUIRED
        assert Product.objects.get(id=self.product.id).approval_status == "pending"

    def test_reject_records_reason(self):
        result = self.service.reject_product(self.product.id, self.admin, "  Photos are blurry  ")

        assert result.ok
        product = Product.objects.get(id=self.product.id)
        assert product.approval_status == "rejected"
        assert product.is_active is False
        assert product.reject_reason == "Photos are blurry"
        assert product.rejected_by_id == self.admin.id
        notice = Notification.objects.get(user=product.seller, type="product_rejected")
        assert "Photos are blurry" in notice.message
        assert len(self.event_bus.events_of_type("product.rejected")) == 1

    def test_reject_approved_product_hides_it(self):
        live = ProductFactory()

        self.service.reject_product(live.id, self.admin, "Counterfeit brand")

        assert Product.objects.get(id=live.id).is_publicly_visible is False

    def test_bulk_approve_reports_each_outcome(self):
        other = PendingProductFactory()
        missing = "00000000-0000-0000-0000-000000000000"

        result = self.service.bulk_approve([self.product.id, other.id, missing], self.admin)

        assert result.ok
        assert result.value["succeeded"] == 2
        assert result.value["failed"] == 1
        failed = [outcome for outcome in result.value["results"] if not outcome["ok"]]
        assert failed[0]["id"] == missing
        assert failed[0]["error"] == ErrorCodes.PRODUCT_NOT_FOUND

    def test_bulk_reject(self):
        other = PendingProductFactory()

        result = self.service.bulk_reject([self.product.id, other.id], self.admin, "Missing description")

        assert result.value["succeeded"] == 2
        assert Product.objects.filter(approval_status="rejected").count() == 2

    def test_bulk_requires_ids(self):
        assert self.service.bulk_approve([], self.admin).error == ErrorCodes.VALIDATION_ERROR

    def test_feature_only_approved_products(self):
        assert self.service.set_featured(self.product.id, self.admin).error == ErrorCodes.INVALID_INPUT

        live = ProductFactory()
        result = self.service.set_featured(live.id, self.admin)
        assert result.ok
        assert Product.objects.get(id=live.id).is_featured is True

        result = self.service.set_featured(live.id, self.admin, is_featured=False)
        assert Product.objects.get(id=live.id).is_featured is False

    def test_featured_limit(self):
        from backoffice.models import PlatformSettings

        PlatformSettings.objects.create(featured_product_limit=1)
        ProductFactory(is_featured=True)

        result = self.service.set_featured(ProductFactory().id, self.admin)

        assert result.error == ErrorCodes.VALIDATION_ERROR

    def test_feature_requires_admin(self):
        live = ProductFactory()

        assert self.service.set_featured(live.id, UserFactory()).error == ErrorCodes.PERMISSION_DENIED


@pytest.mark.unit
@pytest.mark.django_db
class TestApprovalNotificationFailures:
    def setup_method(self):
        self.notification_service = MagicMock()
        self.event_bus = InMemoryEventBus()
        self.service = ApprovalService(notification_service=self.notification_service, event_bus=self.event_bus)
        self.admin = AdminFactory()
        self.product = PendingProductFactory()

    def test_approve_survives_notification_error(self):
        self.notification_service.notify_user.side_effect = ConnectionError("database gone")

        result = self.service.approve_product(self.product.id, self.admin)

        assert result.ok
        assert Product.objects.get(id=self.product.id).approval_status == "approved"
        assert len(self.event_bus.events_of_type("product.approved")) == 1

    def test_approve_survives_failed_notification_result(self):
        self.notification_service.notify_user.return_value = service_err(ErrorCodes.USER_NOT_FOUND, "No seller")

        result = self.service.approve_product(self.product.id, self.admin)

        assert result.ok
        assert Product.objects.get(id=self.product.id).approval_status == "approved"

    def test_reject_survives_notification_error(self):
        self.notification_service.notify_user.side_effect = ConnectionError("database gone")

        result = self.service.reject_product(self.product.id, self.admin, "Photos are blurry")

        assert result.ok
        product = Product.objects.get(id=self.product.id)
        assert product.approval_status == "rejected"
        assert product.reject_reason == "Photos are blurry"

    def test_reject_survives_failed_notification_result(self):
        self.notification_service.notify_user.return_value = service_err(ErrorCodes.USER_NOT_FOUND, "No seller")

        result = self.service.reject_product(self.product.id, self.admin, "Photos are blurry")

        assert result.ok
        assert Product.objects.get(id=self.product.id).approval_status == "rejected"
