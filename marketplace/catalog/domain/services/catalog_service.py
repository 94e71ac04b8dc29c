"""
CatalogService - Product CRUD & Browsing

Handles role-filtered product listings, product CRUD for store owners,
category and store browsing, and image uploads through the storage
abstraction.
"""

import logging
import uuid
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db import transaction
from django.db.models.deletion import ProtectedError
from django.utils import timezone

from infrastructure.container import container
from infrastructure.events import get_event_bus
from infrastructure.observability import tracer
from infrastructure.storage import StorageException
from marketplace.catalog.domain.models import Category, Product, ProductImage, Store
from marketplace.domain.events import ProductSubmittedEvent
from marketplace.filters import ProductFilter, with_effective_price
from utils.rbac import is_admin, owns_store
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


logger = logging.getLogger(__name__)

ADMIN_STATUS_FILTERS = ("new", "pending", "approved", "rejected")

EDITABLE_FIELDS = ("name", "description", "brand", "price", "discount_price", "stock_quantity")

TRUTHY = ("1", "true", "yes", "on")


def paginate(queryset, page, page_size) -> Dict[str, Any]:
    """Page a queryset into the listing dict every catalog endpoint returns."""
    paginator = Paginator(queryset, page_size)
    try:
        page_obj = paginator.page(page)
    except EmptyPage:
        page_obj = paginator.page(paginator.num_pages or 1)

    return {
        "results": list(page_obj.object_list),
        "count": paginator.count,
        "page": page_obj.number,
        "page_size": page_size,
        "num_pages": paginator.num_pages,
        "has_next": page_obj.has_next(),
        "has_previous": page_obj.has_previous(),
    }


class CatalogService(BaseService):
    """
    Service for managing product catalog operations.

    Responsibilities:
    - List products with role-based visibility, filtering and pagination
    - Get product details by slug
    - Create products (store owner only)
    - Update products (owner only); editing a rejected product resubmits it
    - Delete products (owner or admin)
    - Upload product images via the storage abstraction
    - Browse categories and stores

    All operations validate permissions and return ServiceResult.
    """

    def __init__(self, storage=None, notification_service=None, event_bus=None):
        """
        Initialize CatalogService.

        Args:
            storage: Storage abstraction (resolved from the container on first use)
            notification_service: NotificationService for admin notices
            event_bus: Event bus for ``product.submitted``
        """
        super().__init__()
        self._storage = storage
        if notification_service is None:
            from notifications.services import NotificationService

            notification_service = NotificationService()
        self.notification_service = notification_service
        self.event_bus = event_bus or get_event_bus()

    @property
    def storage(self):
        if self._storage is None:
            self._storage = container.storage()
        return self._storage

    # ===== Listing =====

    @BaseService.log_performance
    def list_products(
        self,
        user=None,
        params: Optional[Dict[str, Any]] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> ServiceResult[Dict[str, Any]]:
        """
        List products visible to ``user``.

        Visibility:
        - anonymous users and buyers: approved and active products only
        - ``mine=true``: every product of the caller's own stores
        - admins: everything, narrowed by ``status`` (new, pending, approved, rejected)

        Args:
            user: Caller (may be anonymous)
            params: Query parameters (category, store, price_min, price_max, in_stock,
                is_featured, search, ordering, mine, status)
            page: Page number (1-indexed)
            page_size: Items per page

        Returns:
            ServiceResult with paginated product list

        Example:
            >>> result = catalog_service.list_products(request.user, {"category": "lighting"})
            >>> if result.ok:
            ...     products = result.value["results"]
        """
        with tracer.start_as_current_span("catalog_list_products") as span:
            params = params or {}
            span.set_attribute("page", page)

            try:
                queryset = Product.objects.select_related("store", "seller", "category").prefetch_related("images")

                mine = str(params.get("mine", "")).lower() in TRUTHY
                status = params.get("status") or ""
                admin = is_admin(user) if user is not None else False

                if mine and getattr(user, "is_authenticated", False):
                    queryset = queryset.filter(store__owner=user)
                    if status in ("pending", "approved", "rejected"):
                        queryset = queryset.filter(approval_status=status)
                elif admin:
                    if status and status not in ADMIN_STATUS_FILTERS:
                        return service_err(ErrorCodes.VALIDATION_ERROR, f"Unknown status filter '{status}'")
                    queryset = self._apply_admin_status(queryset, status)
                else:
                    queryset = queryset.filter(approval_status="approved", is_active=True)

                span.set_attribute("scope", "mine" if mine else "admin" if admin else "public")

                filterset = ProductFilter(params, queryset=with_effective_price(queryset))
                if not filterset.is_valid():
                    return service_err(ErrorCodes.VALIDATION_ERROR, str(dict(filterset.errors)))

                queryset = filterset.qs
                if not queryset.ordered:
                    queryset = queryset.order_by("-created_at")

                listing = paginate(queryset, page, page_size)
                span.set_attribute("results.count", listing["count"])
                return service_ok(listing)

            except Exception as e:
                self.logger.error(f"Error listing products: {e}", exc_info=True)
                return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @staticmethod
    def _apply_admin_status(queryset, status: str):
        if status == "new":
            window = getattr(settings, "NEW_PRODUCT_WINDOW_HOURS", 24)
            since = timezone.now() - timedelta(hours=window)
            return queryset.filter(approval_status="pending", submitted_at__gte=since)
        if status:
            return queryset.filter(approval_status=status)
        return queryset

    @BaseService.log_performance
    def get_product_by_slug(self, slug: str, user=None) -> ServiceResult[Product]:
        """
        Get product details.

        Products that are not approved and active are only visible to the
        owner of their store and to admins.
        """
        try:
            product = (
                Product.objects.select_related("store", "seller", "category")
                .prefetch_related("images")
                .get(slug=slug)
            )
        except Product.DoesNotExist:
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product '{slug}' not found")

        if product.is_publicly_visible:
            return service_ok(product)

        if user is not None and (owns_store(user, product.store) or is_admin(user)):
            return service_ok(product)

        return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product '{slug}' not found")

    def get_product(self, product_id) -> ServiceResult[Product]:
        try:
            return service_ok(Product.objects.select_related("store", "seller").get(id=product_id))
        except (Product.DoesNotExist, ValidationError, ValueError):
            return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")

    # ===== Product CRUD =====

    @BaseService.log_performance
    @transaction.atomic
    def create_product(self, user, data: Dict[str, Any]) -> ServiceResult[Product]:
        """
        Create a product in one of the caller's stores.

        The product starts ``pending`` and inactive until an admin approves it.
        Every admin is notified and ``product.submitted`` is published.

        Args:
            user: Store owner
            data: name, description, brand, price, discount_price, stock_quantity,
                store_id, category_id

        Returns:
            ServiceResult with created Product
        """
        from backoffice.models import PlatformSettings

        try:
            store = Store.objects.get(id=data.get("store_id"), is_active=True)
        except (Store.DoesNotExist, ValidationError, ValueError):
            return service_err(ErrorCodes.STORE_NOT_FOUND, f"Store {data.get('store_id')} not found")

        if not owns_store(user, store):
            self.logger.warning(f"User {user.id} tried to add a product to store {store.id}")
            return service_err(ErrorCodes.NOT_STORE_OWNER, "You can only add products to your own store")

        platform_settings = PlatformSettings.load()
        if platform_settings is not None and store.products.count() >= platform_settings.max_products_per_store:
            return service_err(
                ErrorCodes.VALIDATION_ERROR,
                f"Stores may list at most {platform_settings.max_products_per_store} products",
            )

        fields = self._clean_fields(data)
        if not fields.ok:
            return fields
        fields = fields.value

        if not fields.get("name"):
            return service_err(ErrorCodes.VALIDATION_ERROR, "Product name is required")
        if fields.get("price") is None:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Product price is required")

        category = self._resolve_category(data)
        if not category.ok:
            return category

        try:
            product = Product.objects.create(
                store=store,
                seller=user,
                category=category.value,
                approval_status="pending",
                is_active=False,
                submitted_at=timezone.now(),
                **fields,
            )
        except Exception as e:
            self.logger.error(f"Error creating product in store {store.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Created product: {product.name} (id={product.id}) in store {store.id}")
        self._announce_submission(product, is_resubmission=False)
        return service_ok(product)

    @BaseService.log_performance
    @transaction.atomic
    def update_product(self, product_id, user, data: Dict[str, Any]) -> ServiceResult[Product]:
        """
        Update an existing product (store owner or admin).

        Editing a rejected product sends it back to the moderation queue.
        """
        result = self.get_product(product_id)
        if not result.ok:
            return result
        product = result.value

        if not (owns_store(user, product.store) or is_admin(user)):
            return service_err(ErrorCodes.NOT_STORE_OWNER, "You can only edit products of your own store")

        fields = self._clean_fields(data, partial=True)
        if not fields.ok:
            return fields

        if "category_id" in data or "category" in data:
            category = self._resolve_category(data)
            if not category.ok:
                return category
            product.category = category.value

        for name, value in fields.value.items():
            setattr(product, name, value)

        if product.discount_price is not None and product.discount_price > product.price:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Discount price cannot exceed the price")

        resubmitted = product.approval_status == "rejected"
        if resubmitted:
            product.approval_status = "pending"
            product.submitted_at = timezone.now()
            product.reject_reason = ""
            product.rejected_at = None
            product.rejected_by = None

        try:
            product.save()
        except Exception as e:
            self.logger.error(f"Error updating product {product_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Updated product {product.id} by user {user.id} (resubmitted={resubmitted})")
        if resubmitted:
            self._announce_submission(product, is_resubmission=True)
        return service_ok(product)

    @BaseService.log_performance
    def delete_product(self, product_id, user) -> ServiceResult[Dict[str, bool]]:
        """
        Delete a product, or deactivate it when orders still reference it.

        Order items keep a protected link to their product, so a product with
        order history is taken off the storefront (``is_active=False``) and
        its images are kept for the order pages.

        Returns:
            ServiceResult with ``{"deleted": bool, "deactivated": bool}``
        """
        result = self.get_product(product_id)
        if not result.ok:
            return result
        product = result.value

        if not (owns_store(user, product.store) or is_admin(user)):
            return service_err(ErrorCodes.NOT_STORE_OWNER, "You can only delete products of your own store")

        if product.order_items.exists():
            return self._deactivate_ordered_product(product, user)

        image_keys = list(product.images.values_list("storage_key", flat=True))
        try:
            product.delete()
        except ProtectedError:
            # An order referenced the product after the check above
            return self._deactivate_ordered_product(product, user)

        for key in image_keys:
            try:
                self.storage.delete(key)
            except StorageException as e:
                self.logger.warning(f"Could not delete image {key} of product {product_id}: {e}")

        self.logger.info(f"Deleted product {product_id} by user {user.id}")
        return service_ok({"deleted": True, "deactivated": False})

    def _deactivate_ordered_product(self, product, user) -> ServiceResult[Dict[str, bool]]:
        Product.objects.filter(id=product.id).update(is_active=False, updated_at=timezone.now())
        self.logger.info(f"Product {product.id} has order history; deactivated instead of deleted by user {user.id}")
        return service_ok({"deleted": False, "deactivated": True})

    @BaseService.log_performance
    def upload_image(
        self, product_id, user, image_file, alt_text: str = "", is_primary: bool = False
    ) -> ServiceResult[ProductImage]:
        """
        Upload a product image using the storage abstraction.

        The first image of a product becomes primary. Marking an image
        primary clears the flag on the others.
        """
        result = self.get_product(product_id)
        if not result.ok:
            return result
        product = result.value

        if not owns_store(user, product.store):
            return service_err(ErrorCodes.NOT_STORE_OWNER, "You can only add images to your own products")

        filename = getattr(image_file, "name", None) or "image"
        content_type = getattr(image_file, "content_type", None) or "image/jpeg"
        key = f"products/{product.store_id}/{product.id}/{uuid.uuid4().hex[:12]}-{filename}"

        try:
            self.storage.upload(file=image_file, path=key, content_type=content_type)
        except StorageException as e:
            self.logger.error(f"Failed to upload image {filename} for product {product.id}: {e}")
            return service_err(ErrorCodes.INTERNAL_ERROR, f"Image upload failed: {e}")

        with transaction.atomic():
            existing = product.images.count()
            make_primary = is_primary or existing == 0
            if make_primary:
                product.images.update(is_primary=False)

            image = ProductImage.objects.create(
                product=product,
                storage_key=key,
                original_filename=filename,
                file_size=getattr(image_file, "size", None),
                content_type=content_type,
                alt_text=alt_text,
                is_primary=make_primary,
                order=existing,
            )

        self.logger.info(f"Uploaded image {image.id} for product {product.id}")
        return service_ok(image)

    def _clean_fields(self, data: Dict[str, Any], partial: bool = False) -> ServiceResult[Dict[str, Any]]:
        fields = {name: data[name] for name in EDITABLE_FIELDS if name in data}

        try:
            if "price" in fields:
                fields["price"] = Decimal(str(fields["price"]))
                if fields["price"] <= 0:
                    return service_err(ErrorCodes.VALIDATION_ERROR, "Price must be positive")

            if "discount_price" in fields:
                if fields["discount_price"] in (None, ""):
                    fields["discount_price"] = None
                else:
                    fields["discount_price"] = Decimal(str(fields["discount_price"]))
                    if fields["discount_price"] <= 0:
                        return service_err(ErrorCodes.VALIDATION_ERROR, "Discount price must be positive")

            if "stock_quantity" in fields:
                fields["stock_quantity"] = int(fields["stock_quantity"])
                if fields["stock_quantity"] < 0:
                    return service_err(ErrorCodes.VALIDATION_ERROR, "Stock cannot be negative")
        except (InvalidOperation, TypeError, ValueError):
            return service_err(ErrorCodes.VALIDATION_ERROR, "Price and stock must be numbers")

        price = fields.get("price")
        discount = fields.get("discount_price")
        if not partial and price is not None and discount is not None and discount > price:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Discount price cannot exceed the price")

        return service_ok(fields)

    def _resolve_category(self, data: Dict[str, Any]) -> ServiceResult[Optional[Category]]:
        category_id = data.get("category_id")
        category_slug = data.get("category")
        if not category_id and not category_slug:
            return service_ok(None)

        try:
            if category_id:
                return service_ok(Category.objects.get(id=category_id, is_active=True))
            return service_ok(Category.objects.get(slug=category_slug, is_active=True))
        except (Category.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {category_id or category_slug} not found")

    def _announce_submission(self, product: Product, is_resubmission: bool):
        verb = "resubmitted" if is_resubmission else "submitted"
        result = self.notification_service.notify_admins(
            type="new_product",
            title="New product awaiting approval",
            message=f"'{product.name}' from {product.store.name} was {verb} for approval.",
            related_id=product.id,
            related_type="product",
            action_url=f"/admin/products/{product.id}",
        )
        if not result.ok:
            self.logger.warning(f"Admin notification for product {product.id} failed: {result.error_detail}")

        event = ProductSubmittedEvent(
            product_id=str(product.id),
            store_id=str(product.store_id),
            seller_id=str(product.seller_id),
            is_resubmission=is_resubmission,
        )
        self.event_bus.publish(event.event_type, event.payload)

    # ===== Categories & stores =====

    def list_categories(self, active_only: bool = True) -> ServiceResult[list]:
        queryset = Category.objects.select_related("parent")
        if active_only:
            queryset = queryset.filter(is_active=True)
        return service_ok(list(queryset.order_by("name")))

    def get_category(self, slug: str) -> ServiceResult[Category]:
        try:
            return service_ok(Category.objects.get(slug=slug, is_active=True))
        except Category.DoesNotExist:
            return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category '{slug}' not found")

    def list_stores(self, page: int = 1, page_size: int = 20) -> ServiceResult[Dict[str, Any]]:
        queryset = Store.objects.filter(is_active=True).order_by("-is_featured", "name")
        return service_ok(paginate(queryset, page, page_size))

    def get_store_by_slug(self, slug: str) -> ServiceResult[Store]:
        try:
            return service_ok(Store.objects.get(slug=slug, is_active=True))
        except Store.DoesNotExist:
            return service_err(ErrorCodes.STORE_NOT_FOUND, f"Store '{slug}' not found")
