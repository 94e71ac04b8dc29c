"""
SellerService - Seller Application Business Logic.

Extracts the seller onboarding workflow from views into a testable,
reusable service layer. Handles submission, approval, rejection, and status queries.
"""

from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from authentication.domain.events import SellerApplicationReviewedEvent, SellerApplicationSubmittedEvent
from authentication.infra.observability import record_seller_application
from authentication.models import SellerApplication
from infrastructure.events import get_event_bus
from utils.rbac import ROLE_SELLER
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


APPLICATION_FIELDS = (
    "store_name",
    "store_description",
    "contact_email",
    "contact_phone",
    "address",
    "city",
    "country",
    "tax_id",
    "website",
    "owner_name",
    "business_address",
)


class SellerService(BaseService):
    """
    Seller application service encapsulating seller workflow business logic.

    Handles application submission, approval/rejection, and status queries.
    """

    def __init__(self, notification_service=None, event_bus=None):
        """
        Initialize SellerService with injected dependencies.

        Args:
            notification_service: NotificationService used for admin and applicant notices
            event_bus: Event bus for publishing domain events
        """
        super().__init__()
        if notification_service is None:
            from notifications.services import NotificationService

            notification_service = NotificationService()
        self.notification_service = notification_service
        self.event_bus = event_bus or get_event_bus()

    @BaseService.log_performance
    @transaction.atomic
    def submit_application(self, user, application_data: Dict[str, Any]) -> ServiceResult[SellerApplication]:
        """
        Submit new seller application or resubmit rejected one.

        Business Logic:
        1. Refuse when the platform has seller applications switched off
        2. Refuse users that already own a store or have the seller role
        3. Refuse when a pending application exists
        4. Resubmit a rejected application in place, else create a new one
        5. Notify every admin and publish ``seller_application.submitted``
        """
        from backoffice.models import PlatformSettings
        from marketplace.models import Store

        platform_settings = PlatformSettings.load()
        if platform_settings is not None and not platform_settings.allow_seller_applications:
            return service_err(ErrorCodes.APPLICATIONS_CLOSED, "Seller applications are currently closed")

        if user.role == ROLE_SELLER or Store.objects.filter(owner=user).exists():
            return service_err(ErrorCodes.ALREADY_SELLER, "You already have a store")

        existing = SellerApplication.objects.filter(user=user).order_by("-submitted_at").first()
        if existing and existing.status == "pending":
            return service_err(ErrorCodes.APPLICATION_EXISTS, "You already have a seller application in progress")

        fields = {name: application_data.get(name) or "" for name in APPLICATION_FIELDS}
        fields["slug"] = slugify(fields["store_name"])

        try:
            if existing and existing.status == "rejected":
                application = self._resubmit_application(existing, fields)
                is_resubmission = True
            else:
                application = SellerApplication.objects.create(user=user, status="pending", **fields)
                is_resubmission = False
        except Exception as e:
            self.logger.error(f"Seller application submission error for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(
            f"Seller application {application.id} {'resubmitted' if is_resubmission else 'created'} for user {user.id}"
        )
        record_seller_application("submitted")

        self.notification_service.notify_admins(
            type="new_seller_application",
            title="New seller application",
            message=f"{user.display_name} applied to open the store '{application.store_name}'.",
            related_id=application.id,
            related_type="seller_application",
            action_url=f"/admin/seller-applications/{application.id}",
        )

        event = SellerApplicationSubmittedEvent(
            application_id=application.id,
            user_id=str(user.id),
            store_name=application.store_name,
            is_resubmission=is_resubmission,
        )
        self.event_bus.publish(event.event_type, event.payload)

        return service_ok(application)

    def _resubmit_application(self, existing: SellerApplication, fields: Dict[str, Any]) -> SellerApplication:
        """Resubmit a previously rejected application."""
        for name, value in fields.items():
            setattr(existing, name, value)
        existing.status = "pending"
        existing.rejection_reason = ""
        existing.reviewed_at = None
        existing.reviewed_by = None
        existing.submitted_at = timezone.now()
        existing.save()
        return existing

    def get_application_status(self, user) -> ServiceResult[Optional[SellerApplication]]:
        """The caller's latest application, or None when they never applied."""
        application = SellerApplication.objects.filter(user=user).order_by("-submitted_at").first()
        return service_ok(application)

    def list_applications(self, status: str = None) -> ServiceResult[list]:
        queryset = SellerApplication.objects.select_related("user", "reviewed_by").order_by("-submitted_at")
        if status:
            queryset = queryset.filter(status=status)
        return service_ok(list(queryset))

    @BaseService.log_performance
    def approve_application(self, application_id, admin_user) -> ServiceResult[Dict[str, Any]]:
        """
        Approve a pending application.

        Creates the Store, promotes the applicant to the seller role and
        notifies them.

        Returns:
            ServiceResult with ``application`` and ``store``
        """
        from marketplace.models import Store

        try:
            application = SellerApplication.objects.select_related("user").get(id=application_id)
        except (SellerApplication.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.APPLICATION_NOT_FOUND, f"Application {application_id} not found")

        if application.status != "pending":
            return service_err(
                ErrorCodes.INVALID_INPUT, f"Application is already {application.status} and cannot be approved"
            )

        applicant = application.user
        try:
            with transaction.atomic():
                store = Store.objects.create(
                    owner=applicant,
                    name=application.store_name,
                    slug=Store.build_unique_slug(application.slug or application.store_name),
                    description=application.store_description,
                    contact_email=application.contact_email,
                    contact_phone=application.contact_phone,
                    address=application.address,
                    city=application.city,
                    country=application.country,
                    tax_id=application.tax_id,
                )

                if applicant.role not in ("seller", "admin"):
                    applicant.role = ROLE_SELLER
                    applicant.save(update_fields=["role"])

                application.mark_approved(admin_user)
        except Exception as e:
            self.logger.error(f"Error approving seller application {application_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Seller application {application_id} approved by {admin_user.id}, store {store.id}")
        record_seller_application("approved")

        self.notification_service.notify_user(
            applicant,
            type="seller_application_approved",
            title="Your store is open",
            message=f"Your application for '{store.name}' was approved. You can start adding products.",
            related_id=store.id,
            related_type="store",
            action_url="/seller/dashboard",
        )

        event = SellerApplicationReviewedEvent(
            application_id=application.id,
            user_id=str(applicant.id),
            status="approved",
            admin_id=str(admin_user.id),
            store_id=str(store.id),
        )
        self.event_bus.publish(event.event_type, event.payload)

        return service_ok({"application": application, "store": store})

    @BaseService.log_performance
    def reject_application(self, application_id, admin_user, reason: str) -> ServiceResult[SellerApplication]:
        reason = (reason or "").strip()
        if not reason:
            return service_err(ErrorCodes.REJECTION_REASON_REQUIRED, "A rejection reason is required")

        try:
            application = SellerApplication.objects.select_related("user").get(id=application_id)
        except (SellerApplication.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.APPLICATION_NOT_FOUND, f"Application {application_id} not found")

        if application.status != "pending":
            return service_err(
                ErrorCodes.INVALID_INPUT, f"Application is already {application.status} and cannot be rejected"
            )

        application.mark_rejected(admin_user, reason)
        self.logger.info(f"Seller application {application_id} rejected by {admin_user.id}")
        record_seller_application("rejected")

        self.notification_service.notify_user(
            application.user,
            type="seller_application_rejected",
            title="Seller application rejected",
            message=f"Your application for '{application.store_name}' was rejected: {reason}",
            related_id=application.id,
            related_type="seller_application",
            action_url="/seller/apply",
        )

        event = SellerApplicationReviewedEvent(
            application_id=application.id,
            user_id=str(application.user_id),
            status="rejected",
            admin_id=str(admin_user.id),
        )
        self.event_bus.publish(event.event_type, event.payload)

        return service_ok(application)
