import pytest

from authentication.domain.services import SellerService
from authentication.models import SellerApplication
from authentication.tests.factories import AdminFactory, SellerApplicationFactory, SellerFactory, UserFactory
from infrastructure.events.in_memory_event_bus import InMemoryEventBus
from notifications.models import Notification
from notifications.services import NotificationService
from utils.service_base import ErrorCodes


APPLICATION = {
    "store_name": "Ege Seramik",
    "store_description": "Handmade ceramics from İzmir",
    "contact_email": "hello@egeseramik.example",
    "city": "İzmir",
    "country": "Türkiye",
}


@pytest.mark.unit
@pytest.mark.django_db
class TestSellerService:
    def setup_method(self):
        self.event_bus = InMemoryEventBus()
        self.service = SellerService(
            notification_service=NotificationService(send_emails=False), event_bus=self.event_bus
        )
        self.user = UserFactory()
        self.admin = AdminFactory()

    def test_submit_application_notifies_admins(self):
        result = self.service.submit_application(self.user, APPLICATION)

        assert result.ok
        application = result.value
        assert application.status == "pending"
        assert application.slug == "ege-seramik"
        assert Notification.objects.filter(user=self.admin, type="new_seller_application").exists()
        submitted = self.event_bus.events_of_type("seller_application.submitted")
        assert submitted[0]["payload"]["is_resubmission"] is False

    def test_pending_application_blocks_new_one(self):
        SellerApplicationFactory(user=self.user)

        result = self.service.submit_application(self.user, APPLICATION)

        assert result.error == ErrorCodes.APPLICATION_EXISTS

    def test_sellers_cannot_apply(self):
        result = self.service.submit_application(SellerFactory(), APPLICATION)

        assert result.error == ErrorCodes.ALREADY_SELLER

    def test_applications_closed(self):
        from backoffice.models import PlatformSettings

        PlatformSettings.objects.create(allow_seller_applications=False)

        assert self.service.submit_application(self.user, APPLICATION).error == ErrorCodes.APPLICATIONS_CLOSED

    def test_rejected_application_is_resubmitted_in_place(self):
        rejected = SellerApplicationFactory(user=self.user, status="rejected", rejection_reason="Missing tax id")

        result = self.service.submit_application(self.user, {**APPLICATION, "tax_id": "1234567890"})

        assert result.ok
        assert result.value.id == rejected.id
        assert result.value.status == "pending"
        assert result.value.rejection_reason == ""
        assert SellerApplication.objects.filter(user=self.user).count() == 1

    def test_application_status(self):
        assert self.service.get_application_status(self.user).value is None

        application = SellerApplicationFactory(user=self.user)
        assert self.service.get_application_status(self.user).value == application

    def test_list_applications_by_status(self):
        SellerApplicationFactory()
        SellerApplicationFactory(status="approved")

        assert len(self.service.list_applications().value) == 2
        assert len(self.service.list_applications("pending").value) == 1

    def test_approve_opens_store_and_promotes_user(self):
        application = SellerApplicationFactory(user=self.user, store_name="Ege Seramik")

        result = self.service.approve_application(application.id, self.admin)

        assert result.ok
        store = result.value["store"]
        assert store.owner_id == self.user.id
        assert store.name == "Ege Seramik"
        self.user.refresh_from_db()
        assert self.user.role == "seller"
        application.refresh_from_db()
        assert application.status == "approved"
        assert application.reviewed_by_id == self.admin.id
        assert Notification.objects.filter(user=self.user, type="seller_application_approved").exists()

    def test_approve_twice_rejected(self):
        application = SellerApplicationFactory(user=self.user)
        self.service.approve_application(application.id, self.admin)

        result = self.service.approve_application(application.id, self.admin)

        assert result.error == ErrorCodes.INVALID_INPUT

    def test_approve_unknown_application(self):
        assert self.service.approve_application(999999, self.admin).error == ErrorCodes.APPLICATION_NOT_FOUND

    def test_reject_requires_reason(self):
        application = SellerApplicationFactory(user=self.user)

        assert self.service.reject_application(application.id, self.admin, " ").error == (
            ErrorCodes.REJECTION_REASON_REQUIRED
        )

    def test_reject(self):
        application = SellerApplicationFactory(user=self.user)

        result = self.service.reject_application(application.id, self.admin, "Missing tax id")

        assert result.ok
        application.refresh_from_db()
        assert application.status == "rejected"
        assert application.rejection_reason == "Missing tax id"
        reviewed = self.event_bus.events_of_type("seller_application.reviewed")
        assert reviewed[0]["payload"]["status"] == "rejected"
