"""
Back-office services.

PlatformSettingsService edits the singleton settings row. AnnouncementService manages
the site-wide banners. BackofficeService
covers the rest of the admin panel: dashboard figures, stores, users and
categories. Product moderation, seller applications and orders reuse the
marketplace and authentication services.
"""

from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db import IntegrityError, transaction
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from authentication.models import SellerApplication
from backoffice.models import Announcement, PlatformSettings
from marketplace.models import Category, Order, OrderItem, Product, Store
from utils.rbac import ROLE_ADMIN, ROLE_SELLER, ROLES
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


SETTINGS_FIELDS = (
    "site_name",
    "site_description",
    "contact_email",
    "contact_phone",
    "maintenance_mode",
    "allow_registrations",
    "allow_seller_applications",
    "commission_rate",
    "min_order_amount",
    "max_products_per_store",
    "featured_product_limit",
)

STORE_ADMIN_FIELDS = ("name", "description", "is_active", "is_verified", "is_featured", "commission_rate")

CATEGORY_FIELDS = ("name", "description", "is_active")

ANNOUNCEMENT_FIELDS = (
    "title",
    "content",
    "type",
    "position",
    "start_date",
    "end_date",
    "is_active",
    "background_color",
    "text_color",
)

MONEY = DecimalField(max_digits=14, decimal_places=2)


def _paginate(queryset, page, page_size) -> Dict[str, Any]:
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


class PlatformSettingsService(BaseService):
    def get_settings(self) -> ServiceResult[PlatformSettings]:
        return service_ok(PlatformSettings.load_or_create())

    @BaseService.log_performance
    def update_settings(self, data: Dict[str, Any], admin_user=None) -> ServiceResult[PlatformSettings]:
        """
        Update the platform settings row.

        ``commission_rate`` is a fraction between 0 and 1.
        """
        instance = PlatformSettings.load_or_create()
        changed = []

        for name in SETTINGS_FIELDS:
            if name not in data:
                continue
            value = data[name]
            if name == "commission_rate":
                try:
                    value = Decimal(str(value))
                except (InvalidOperation, TypeError, ValueError):
                    return service_err(ErrorCodes.VALIDATION_ERROR, "commission_rate must be a number")
                if not Decimal("0") <= value <= Decimal("1"):
                    return service_err(ErrorCodes.VALIDATION_ERROR, "commission_rate must be between 0 and 1")
            setattr(instance, name, value)
            changed.append(name)

        try:
            instance.full_clean()
        except ValidationError as e:
            return service_err(ErrorCodes.VALIDATION_ERROR, str(e.message_dict))

        instance.save()
        actor = getattr(admin_user, "id", None)
        self.logger.info(f"Platform settings updated by {actor}: {', '.join(changed) or 'no fields'}")
        return service_ok(instance)


class BackofficeService(BaseService):
    """
    Admin panel operations that do not belong to a single marketplace service.

    Responsibilities:
    - Dashboard statistics
    - Store administration (list, create with owner, update flags)
    - User administration (list, change role)
    - Category administration
    """

    @BaseService.log_performance
    def dashboard_stats(self) -> ServiceResult[Dict[str, Any]]:
        """
        Headline figures for the admin dashboard.

        Revenue and commission only count orders that were not cancelled or
        refunded. Commission is the sum of ``total_price - seller_amount``.
        """
        User = get_user_model()
        try:
            users = User.objects.aggregate(
                total=Count("id"),
                sellers=Count("id", filter=Q(role=ROLE_SELLER)),
                admins=Count("id", filter=Q(role=ROLE_ADMIN) | Q(is_superuser=True)),
            )

            window = getattr(settings, "NEW_PRODUCT_WINDOW_HOURS", 24)
            products = Product.objects.aggregate(
                total=Count("id"),
                pending=Count("id", filter=Q(approval_status="pending")),
                approved=Count("id", filter=Q(approval_status="approved")),
                rejected=Count("id", filter=Q(approval_status="rejected")),
                new=Count(
                    "id",
                    filter=Q(
                        approval_status="pending",
                        submitted_at__gte=timezone.now() - timedelta(hours=window),
                    ),
                ),
            )

            status_rows = Order.objects.order_by().values("status").annotate(count=Count("id"))
            orders_by_status = {row["status"]: row["count"] for row in status_rows}

            counted_orders = Order.objects.exclude(status__in=("cancelled", "refunded"))
            revenue = counted_orders.aggregate(value=Coalesce(Sum("total_amount"), Decimal("0"), output_field=MONEY))
            commission = (
                OrderItem.objects.filter(order__in=counted_orders)
                .annotate(platform_cut=ExpressionWrapper(F("total_price") - F("seller_amount"), output_field=MONEY))
                .aggregate(value=Coalesce(Sum("platform_cut"), Decimal("0"), output_field=MONEY))
            )

            stats = {
                "users": users,
                "stores": {
                    "total": Store.objects.count(),
                    "active": Store.objects.filter(is_active=True).count(),
                },
                "products": products,
                "orders": {"total": sum(orders_by_status.values()), "by_status": orders_by_status},
                "pending_seller_applications": SellerApplication.objects.filter(status="pending").count(),
                "gross_revenue": revenue["value"],
                "platform_commission": commission["value"],
            }
            return service_ok(stats)

        except Exception as e:
            self.logger.error(f"Error building dashboard stats: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    # ===== Stores =====

    def list_stores(self, search: str = None, page: int = 1, page_size: int = 20) -> ServiceResult[Dict[str, Any]]:
        queryset = Store.objects.select_related("owner").annotate(product_count=Count("products"))
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(owner__email__icontains=search))
        return service_ok(_paginate(queryset.order_by("-created_at"), page, page_size))

    @BaseService.log_performance
    def create_store(self, data: Dict[str, Any], admin_user) -> ServiceResult:
        """Create a store for an existing user; the owner becomes a seller."""
        User = get_user_model()
        try:
            owner = User.objects.get(id=data.get("owner_id"))
        except (User.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.USER_NOT_FOUND, f"User {data.get('owner_id')} not found")

        name = (data.get("name") or "").strip()
        if not name:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Store name is required")

        with transaction.atomic():
            store = Store.objects.create(
                owner=owner,
                name=name,
                slug=Store.build_unique_slug(data.get("slug") or name),
                description=data.get("description") or "",
                contact_email=data.get("contact_email") or owner.email,
                contact_phone=data.get("contact_phone") or "",
                address=data.get("address") or "",
                city=data.get("city") or "",
                country=data.get("country") or "",
                is_verified=bool(data.get("is_verified", False)),
            )
            if owner.role not in (ROLE_SELLER, ROLE_ADMIN):
                owner.role = ROLE_SELLER
                owner.save(update_fields=["role"])

        self.logger.info(f"Store {store.id} created for user {owner.id} by admin {admin_user.id}")
        return service_ok(store)

    @BaseService.log_performance
    def update_store(self, store_id, data: Dict[str, Any], admin_user) -> ServiceResult:
        try:
            store = Store.objects.get(id=store_id)
        except (Store.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.STORE_NOT_FOUND, f"Store {store_id} not found")

        for name in STORE_ADMIN_FIELDS:
            if name in data:
                setattr(store, name, data[name])

        try:
            store.full_clean(exclude=["owner", "slug"])
        except ValidationError as e:
            return service_err(ErrorCodes.VALIDATION_ERROR, str(e.message_dict))

        store.save()
        self.logger.info(f"Store {store.id} updated by admin {admin_user.id}")
        return service_ok(store)

    # ===== Users =====

    def list_users(
        self, role: str = None, search: str = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict[str, Any]]:
        User = get_user_model()
        queryset = User.objects.all()
        if role:
            queryset = queryset.filter(role=role)
        if search:
            queryset = queryset.filter(
                Q(email__icontains=search) | Q(username__icontains=search) | Q(full_name__icontains=search)
            )
        return service_ok(_paginate(queryset.order_by("-date_joined"), page, page_size))

    @BaseService.log_performance
    def change_role(self, user_id, role: str, admin_user) -> ServiceResult:
        if role not in ROLES:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Role must be one of {', '.join(ROLES)}")

        User = get_user_model()
        try:
            target = User.objects.get(id=user_id)
        except (User.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.USER_NOT_FOUND, f"User {user_id} not found")

        if target.id == admin_user.id:
            return service_err(ErrorCodes.VALIDATION_ERROR, "You cannot change your own role")

        old_role = target.role
        target.role = role
        target.save(update_fields=["role"])
        self.logger.info(f"Role of user {target.id} changed {old_role} -> {role} by admin {admin_user.id}")
        return service_ok(target)

    # ===== Categories =====

    @BaseService.log_performance
    def create_category(self, data: Dict[str, Any]) -> ServiceResult:
        name = (data.get("name") or "").strip()
        if not name:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Category name is required")

        parent = None
        if data.get("parent_id"):
            try:
                parent = Category.objects.get(id=data["parent_id"])
            except (Category.DoesNotExist, ValueError, TypeError):
                return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {data['parent_id']} not found")

        try:
            with transaction.atomic():
                category = Category.objects.create(
                    name=name,
                    description=data.get("description") or "",
                    parent=parent,
                    is_active=data.get("is_active", True),
                )
        except IntegrityError:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Category '{name}' already exists")

        return service_ok(category)

    @BaseService.log_performance
    def update_category(self, category_id, data: Dict[str, Any]) -> ServiceResult:
        try:
            category = Category.objects.get(id=category_id)
        except (Category.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {category_id} not found")

        for name in CATEGORY_FIELDS:
            if name in data:
                setattr(category, name, data[name])

        try:
            with transaction.atomic():
                category.save()
        except IntegrityError:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Category '{category.name}' already exists")

        return service_ok(category)

    def delete_category(self, category_id) -> ServiceResult[None]:
        try:
            deleted, _ = Category.objects.filter(id=category_id).delete()
        except (ValueError, TypeError):
            deleted = 0
        if not deleted:
            return service_err(ErrorCodes.CATEGORY_NOT_FOUND, f"Category {category_id} not found")
        self.logger.info(f"Category {category_id} deleted")
        return service_ok()


class AnnouncementService(BaseService):
    """Site-wide announcement banners."""

    def list_active(self) -> ServiceResult[list]:
        """Announcements visible right now, newest first."""
        now = timezone.now()
        visible = Announcement.objects.filter(is_active=True, start_date__lte=now).filter(
            Q(end_date__isnull=True) | Q(end_date__gt=now)
        )
        return service_ok(list(visible.order_by("-created_at")))

    def list_announcements(self, is_active=None, page: int = 1, page_size: int = 20) -> ServiceResult[Dict[str, Any]]:
        queryset = Announcement.objects.select_related("created_by")
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return service_ok(_paginate(queryset.order_by("-created_at"), page, page_size))

    def get_announcement(self, announcement_id) -> ServiceResult[Announcement]:
        try:
            return service_ok(Announcement.objects.get(id=announcement_id))
        except (Announcement.DoesNotExist, ValueError, TypeError):
            return service_err(ErrorCodes.ANNOUNCEMENT_NOT_FOUND, f"Announcement {announcement_id} not found")

    @BaseService.log_performance
    def create_announcement(self, admin_user, data: Dict[str, Any]) -> ServiceResult[Announcement]:
        announcement = Announcement(created_by=admin_user)
        return self._save(announcement, data)

    @BaseService.log_performance
    def update_announcement(self, announcement_id, data: Dict[str, Any]) -> ServiceResult[Announcement]:
        found = self.get_announcement(announcement_id)
        if not found.ok:
            return found
        return self._save(found.value, data)

    def toggle_announcement(self, announcement_id) -> ServiceResult[Announcement]:
        found = self.get_announcement(announcement_id)
        if not found.ok:
            return found
        announcement = found.value
        announcement.is_active = not announcement.is_active
        announcement.save(update_fields=["is_active", "updated_at"])
        self.logger.info(f"Announcement {announcement.id} is_active={announcement.is_active}")
        return service_ok(announcement)

    def delete_announcement(self, announcement_id) -> ServiceResult[None]:
        try:
            deleted, _ = Announcement.objects.filter(id=announcement_id).delete()
        except (ValueError, TypeError):
            deleted = 0
        if not deleted:
            return service_err(ErrorCodes.ANNOUNCEMENT_NOT_FOUND, f"Announcement {announcement_id} not found")
        self.logger.info(f"Announcement {announcement_id} deleted")
        return service_ok()

    def _save(self, announcement: Announcement, data: Dict[str, Any]) -> ServiceResult[Announcement]:
        for name in ANNOUNCEMENT_FIELDS:
            if name in data:
                setattr(announcement, name, data[name])

        if announcement.end_date and announcement.start_date and announcement.end_date <= announcement.start_date:
            return service_err(ErrorCodes.VALIDATION_ERROR, "end_date must be after start_date")

        try:
            announcement.full_clean(exclude=["created_by"])
        except ValidationError as e:
            return service_err(ErrorCodes.VALIDATION_ERROR, str(e.message_dict))

        announcement.save()
        self.logger.info(f"Saved announcement {announcement.id}: {announcement.title}")
        return service_ok(announcement)
