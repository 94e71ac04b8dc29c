"""
ApprovalService - Product moderation.

Admins approve or reject products submitted by sellers. Every decision
notifies the seller and publishes a domain event. A failed notification is
logged and never undoes the status transition.
"""

from typing import Any, Dict, Iterable, List

from django.core.exceptions import ValidationError
from django.utils import timezone

from infrastructure.events import get_event_bus
from marketplace.catalog.domain.models import Product
from marketplace.domain.events import ProductApprovedEvent, ProductRejectedEvent
from marketplace.infra.observability.metrics import product_moderation_total
from utils.rbac import is_admin
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


MIN_REJECTION_REASON_LENGTH = 5


class ApprovalService(BaseService):
    """
    Service for the product approval workflow.

    Responsibilities:
    - Approve / reject a single product
    - Bulk approve / reject with per-id outcomes
    - Feature / unfeature approved products
    """

    def __init__(self, notification_service=None, event_bus=None):
        super().__init__()
        if notification_service is None:
            from notifications.services import NotificationService

            notification_service = NotificationService()
        self.notification_service = notification_service
        self.event_bus = event_bus or get_event_bus()

    @BaseService.log_performance
    def approve_product(self, product_id, admin_user) -> ServiceResult[Product]:
        """
        Approve a product and make it visible in the storefront.

        Approving an already approved product succeeds without changes.

        Returns:
            ServiceResult with the Product
        """
        if not is_admin(admin_user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can approve products")

        result = self._load(product_id)
        if not result.ok:
            return result
        product = result.value

        if product.approval_status == "approved":
            self.logger.info(f"Product {product.id} already approved, nothing to do")
            return service_ok(product)

        product.approval_status = "approved"
        product.is_active = True
        product.reject_reason = ""
        product.approved_at = timezone.now()
        product.approved_by = admin_user
        try:
            product.save(
                update_fields=[
                    "approval_status", "is_active", "reject_reason", "approved_at", "approved_by", "updated_at"
                ]
            )
        except Exception as e:
            self.logger.error(f"Error approving product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Product {product.id} approved by admin {admin_user.id}")
        product_moderation_total.labels(decision="approved").inc()

        self._notify_seller(
            product,
            type="product_approved",
            title="Product approved",
            message=f"Your product '{product.name}' was approved and is now live.",
            action_url=f"/urun/{product.id}",
        )

        event = ProductApprovedEvent(
            product_id=str(product.id), seller_id=str(product.seller_id), admin_id=str(admin_user.id)
        )
        self.event_bus.publish(event.event_type, event.payload)

        return service_ok(product)

    @BaseService.log_performance
    def reject_product(self, product_id, admin_user, reason: str) -> ServiceResult[Product]:
        """
        Reject a product with a reason the seller can act on.

        Args:
            product_id: Product UUID
            admin_user: Admin making the decision
            reason: At least 5 characters once trimmed

        Returns:
            ServiceResult with the Product
        """
        if not is_admin(admin_user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can reject products")

        reason = (reason or "").strip()
        if len(reason) < MIN_REJECTION_REASON_LENGTH:
            return service_err(
                ErrorCodes.REJECTION_REASON_REQUIRED,
                f"A rejection reason of at least {MIN_REJECTION_REASON_LENGTH} characters is required",
            )

        result = self._load(product_id)
        if not result.ok:
            return result
        product = result.value

        product.approval_status = "rejected"
        product.is_active = False
        product.reject_reason = reason
        product.rejected_at = timezone.now()
        product.rejected_by = admin_user
        try:
            product.save(
                update_fields=[
                    "approval_status", "is_active", "reject_reason", "rejected_at", "rejected_by", "updated_at"
                ]
            )
        except Exception as e:
            self.logger.error(f"Error rejecting product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Product {product.id} rejected by admin {admin_user.id}")
        product_moderation_total.labels(decision="rejected").inc()

        self._notify_seller(
            product,
            type="product_rejected",
            title="Product rejected",
            message=f"Your product '{product.name}' was rejected: {reason}",
            action_url=f"/seller/products/{product.id}/edit",
        )

        event = ProductRejectedEvent(
            product_id=str(product.id),
            seller_id=str(product.seller_id),
            admin_id=str(admin_user.id),
            reason=reason,
        )
        self.event_bus.publish(event.event_type, event.payload)

        return service_ok(product)

    def bulk_approve(self, product_ids: Iterable, admin_user) -> ServiceResult[Dict[str, Any]]:
        return self._bulk(product_ids, lambda product_id: self.approve_product(product_id, admin_user))

    def bulk_reject(self, product_ids: Iterable, admin_user, reason: str) -> ServiceResult[Dict[str, Any]]:
        return self._bulk(product_ids, lambda product_id: self.reject_product(product_id, admin_user, reason))

    def _bulk(self, product_ids: Iterable, operation) -> ServiceResult[Dict[str, Any]]:
        """Run ``operation`` per id; one failure never stops the rest."""
        product_ids = list(product_ids or [])
        if not product_ids:
            return service_err(ErrorCodes.VALIDATION_ERROR, "At least one product id is required")

        outcomes: List[Dict[str, Any]] = []
        for product_id in product_ids:
            result = operation(product_id)
            outcomes.append(
                {"id": str(product_id), "ok": result.ok, "error": result.error, "detail": result.error_detail}
            )

        succeeded = sum(1 for outcome in outcomes if outcome["ok"])
        self.logger.info(f"Bulk moderation finished: {succeeded}/{len(outcomes)} succeeded")
        return service_ok({"results": outcomes, "succeeded": succeeded, "failed": len(outcomes) - succeeded})

    @BaseService.log_performance
    def set_featured(self, product_id, admin_user, is_featured: bool = True) -> ServiceResult[Product]:
        """Toggle ``is_featured``; only approved products can be featured."""
        from backoffice.models import PlatformSettings

        if not is_admin(admin_user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can feature products")

        result = self._load(product_id)
        if not result.ok:
            return result
        product = result.value

        if is_featured and product.approval_status != "approved":
            return service_err(ErrorCodes.INVALID_INPUT, "Only approved products can be featured")

        if is_featured and not product.is_featured:
            platform_settings = PlatformSettings.load()
            limit = platform_settings.featured_product_limit if platform_settings else None
            if limit is not None and Product.objects.filter(is_featured=True).count() >= limit:
                return service_err(ErrorCodes.VALIDATION_ERROR, f"At most {limit} products can be featured")

        product.is_featured = is_featured
        product.save(update_fields=["is_featured", "updated_at"])
        self.logger.info(f"Product {product.id} featured={is_featured} by admin {admin_user.id}")
        return service_ok(product)

    def _load(self, product_id) -> ServiceResult[Product]:
        try:
            return service_ok(Product.objects.select_related("store", "seller").get(id=product_id))
        except (Product.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

    def _notify_seller(self, product: Product, type: str, title: str, message: str, action_url: str):
        try:
            result = self.notification_service.notify_user(
                product.seller,
                type=type,
                title=title,
                message=message,
                related_id=product.id,
                related_type="product",
                action_url=action_url,
            )
        except Exception as e:
            self.logger.error(f"{type} notification for product {product.id} raised: {e}", exc_info=True)
            return
        if not result.ok:
            self.logger.warning(f"{type} notification for product {product.id} failed: {result.error_detail}")
