"""
CouponService - Discount Coupons

Admins manage coupons; buyers add them to their account and redeem them at
checkout. Order placement asks this service for the discount a code gives on
the priced order lines, then records the redemption once stock is taken.

Usage counters are moved with conditional ``F()`` updates so two checkouts
cannot both take the last use of a limited coupon.
"""

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from django.core.exceptions import ValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db import IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from marketplace.cart.domain.services.pricing_service import PricingService, to_money
from marketplace.catalog.domain.models import Category, Product
from marketplace.promotions.domain.models import Coupon, CouponRedemption, UserCoupon
from utils.rbac import is_admin
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


COUPON_FIELDS = (
    "code",
    "description",
    "discount_type",
    "discount_value",
    "min_purchase_amount",
    "expiry_date",
    "max_uses",
    "uses_per_user",
    "applicable_to",
    "is_active",
)

DISCOUNT_TYPES = {choice for choice, _ in Coupon.DISCOUNT_TYPE_CHOICES}
APPLICABLE_TO = {choice for choice, _ in Coupon.APPLICABLE_TO_CHOICES}


def normalize_code(code) -> str:
    return (code or "").strip().upper()


class CouponService(BaseService):
    """
    Service for coupon administration, the buyer's coupon list and checkout discounts.

    Responsibilities:
    - Admin CRUD with validation of discount type, value and targeting
    - Claiming a coupon into the buyer's account
    - Quoting the discount of a code for a set of priced order lines
    - Recording and releasing redemptions against orders
    """

    def __init__(self, pricing_service: PricingService = None):
        super().__init__()
        self.pricing_service = pricing_service or PricingService()

    # ===== Administration =====

    def list_coupons(
        self, search: str = None, is_active: Optional[bool] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict[str, Any]]:
        queryset = Coupon.objects.all()
        if search:
            queryset = queryset.filter(Q(code__icontains=search) | Q(description__icontains=search))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)

        paginator = Paginator(queryset.order_by("-created_at"), page_size)
        try:
            page_obj = paginator.page(page)
        except EmptyPage:
            page_obj = paginator.page(paginator.num_pages or 1)
        return service_ok(
            {
                "results": list(page_obj.object_list),
                "count": paginator.count,
                "page": page_obj.number,
                "page_size": page_size,
                "num_pages": paginator.num_pages,
                "has_next": page_obj.has_next(),
                "has_previous": page_obj.has_previous(),
            }
        )

    def get_coupon(self, coupon_id) -> ServiceResult[Coupon]:
        try:
            return service_ok(Coupon.objects.get(id=coupon_id))
        except (Coupon.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.COUPON_NOT_FOUND, f"Coupon {coupon_id} not found")

    @BaseService.log_performance
    def create_coupon(self, admin_user, data: Dict[str, Any]) -> ServiceResult[Coupon]:
        """
        Create a coupon.

        Args:
            admin_user: Admin creating the coupon
            data: Coupon fields plus optional ``product_ids`` / ``category_ids``
                for targeted coupons

        Returns:
            ServiceResult with the created Coupon
        """
        if not is_admin(admin_user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can manage coupons")

        coupon = Coupon(created_by=admin_user)
        return self._save(coupon, data, partial=False)

    @BaseService.log_performance
    def update_coupon(self, coupon_id, admin_user, data: Dict[str, Any]) -> ServiceResult[Coupon]:
        if not is_admin(admin_user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can manage coupons")

        found = self.get_coupon(coupon_id)
        if not found.ok:
            return found
        return self._save(found.value, data, partial=True)

    def delete_coupon(self, coupon_id, admin_user) -> ServiceResult[None]:
        if not is_admin(admin_user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can manage coupons")

        found = self.get_coupon(coupon_id)
        if not found.ok:
            return found
        found.value.delete()
        self.logger.info(f"Coupon {coupon_id} deleted by admin {admin_user.id}")
        return service_ok()

    def _save(self, coupon: Coupon, data: Dict[str, Any], partial: bool) -> ServiceResult[Coupon]:
        cleaned = self._clean(coupon, data, partial)
        if not cleaned.ok:
            return cleaned
        values, products, categories = cleaned.value

        for name, value in values.items():
            setattr(coupon, name, value)

        try:
            with transaction.atomic():
                coupon.save()
                if products is not None:
                    coupon.applicable_products.set(products)
                if categories is not None:
                    coupon.applicable_categories.set(categories)
        except IntegrityError:
            return service_err(ErrorCodes.COUPON_EXISTS, f"Coupon code '{coupon.code}' already exists")

        self.logger.info(f"Saved coupon {coupon.code} ({coupon.discount_type} {coupon.discount_value})")
        return service_ok(coupon)

    def _clean(self, coupon: Coupon, data: Dict[str, Any], partial: bool) -> ServiceResult:
        values = {name: data[name] for name in COUPON_FIELDS if name in data}

        if "code" in values or not partial:
            values["code"] = normalize_code(values.get("code"))
            if not values["code"]:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Coupon code is required")

        discount_type = values.get("discount_type", coupon.discount_type)
        if discount_type not in DISCOUNT_TYPES:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"discount_type must be one of {sorted(DISCOUNT_TYPES)}")

        if "discount_value" in values or not partial:
            try:
                values["discount_value"] = to_money(values.get("discount_value"))
            except (InvalidOperation, TypeError, ValueError):
                return service_err(ErrorCodes.VALIDATION_ERROR, "discount_value must be a number")
        discount_value = values.get("discount_value", coupon.discount_value)
        if discount_value is None or discount_value <= 0:
            return service_err(ErrorCodes.VALIDATION_ERROR, "discount_value must be positive")
        if discount_type == "percentage" and discount_value > 100:
            return service_err(ErrorCodes.VALIDATION_ERROR, "A percentage discount cannot exceed 100")

        if values.get("min_purchase_amount") is not None:
            try:
                values["min_purchase_amount"] = to_money(values["min_purchase_amount"])
            except (InvalidOperation, TypeError, ValueError):
                return service_err(ErrorCodes.VALIDATION_ERROR, "min_purchase_amount must be a number")

        applicable_to = values.get("applicable_to", coupon.applicable_to)
        if applicable_to not in APPLICABLE_TO:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"applicable_to must be one of {sorted(APPLICABLE_TO)}")

        products = categories = None
        if "product_ids" in data:
            products = list(Product.objects.filter(id__in=data.get("product_ids") or []))
            if len(products) != len(set(str(pid) for pid in data.get("product_ids") or [])):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, "One or more products do not exist")
        if "category_ids" in data:
            categories = list(Category.objects.filter(id__in=data.get("category_ids") or []))
            if len(categories) != len(set(data.get("category_ids") or [])):
                return service_err(ErrorCodes.CATEGORY_NOT_FOUND, "One or more categories do not exist")

        saved = not coupon._state.adding
        if applicable_to == "specific_products":
            if products is not None:
                has_targets = bool(products)
            else:
                has_targets = saved and coupon.applicable_products.exists()
            if not has_targets:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Choose at least one product for this coupon")
        if applicable_to == "specific_categories":
            if categories is not None:
                has_targets = bool(categories)
            else:
                has_targets = saved and coupon.applicable_categories.exists()
            if not has_targets:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Choose at least one category for this coupon")

        return service_ok((values, products, categories))

    # ===== Buyer's coupons =====

    @BaseService.log_performance
    def claim_coupon(self, user, code: str) -> ServiceResult[UserCoupon]:
        """Add an active coupon to the user's account by its code."""
        coupon = Coupon.objects.filter(code=normalize_code(code), is_active=True).first()
        if coupon is None or self._is_expired(coupon):
            return service_err(ErrorCodes.COUPON_INVALID, "Invalid or inactive coupon code")

        try:
            with transaction.atomic():
                user_coupon = UserCoupon.objects.create(user=user, coupon=coupon)
        except IntegrityError:
            return service_err(ErrorCodes.COUPON_ALREADY_CLAIMED, "This coupon is already in your account")

        self.logger.info(f"User {user.id} claimed coupon {coupon.code}")
        return service_ok(user_coupon)

    def list_user_coupons(self, user) -> ServiceResult[list]:
        user_coupons = UserCoupon.objects.filter(user=user).select_related("coupon").order_by("-created_at")
        return service_ok(list(user_coupons))

    # ===== Checkout =====

    def quote_discount(self, user, code: str, lines: Iterable[Dict[str, Any]]) -> ServiceResult[Dict[str, Any]]:
        """
        Work out the discount a coupon gives on priced order lines.

        Args:
            user: Buyer the order is placed for
            code: Coupon code, case-insensitive
            lines: Dicts with ``product`` and ``total_price``

        Returns:
            ServiceResult with ``{"coupon": Coupon, "discount": Decimal}``
        """
        coupon = Coupon.objects.filter(code=normalize_code(code)).first()
        if coupon is None:
            return service_err(ErrorCodes.COUPON_INVALID, f"Coupon '{normalize_code(code)}' does not exist")

        usable = self._check_usable(coupon, user)
        if not usable.ok:
            return usable

        lines = list(lines)
        order_subtotal = sum((line["total_price"] for line in lines), Decimal("0"))
        if coupon.min_purchase_amount is not None and order_subtotal < coupon.min_purchase_amount:
            return service_err(
                ErrorCodes.COUPON_NOT_APPLICABLE,
                f"Coupon {coupon.code} needs a purchase of at least {coupon.min_purchase_amount}",
            )

        eligible_lines = [line for line in lines if self._applies_to(coupon, line["product"])]
        eligible = sum((line["total_price"] for line in eligible_lines), Decimal("0"))
        if eligible <= 0:
            return service_err(ErrorCodes.COUPON_NOT_APPLICABLE, f"Coupon {coupon.code} does not apply to these items")

        if coupon.discount_type == "percentage":
            discount = to_money(eligible * coupon.discount_value / Decimal("100"))
        else:
            discount = to_money(min(coupon.discount_value, eligible))

        return service_ok({"coupon": coupon, "discount": discount})

    def preview_discount(self, user, code: str, items: List[Dict[str, Any]]) -> ServiceResult[Dict[str, Any]]:
        """Quote a coupon for ``[{product_id, quantity}]`` at current prices, before checkout."""
        quantities = {}
        for item in items:
            try:
                product_id = uuid.UUID(str(item["product_id"]))
            except (KeyError, ValueError):
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {item.get('product_id')} not found")
            quantities[product_id] = quantities.get(product_id, 0) + int(item.get("quantity") or 1)

        products = Product.objects.in_bulk(list(quantities))
        lines = []
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None or not product.is_publicly_visible:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {product_id} not found")
            price = self.pricing_service.effective_price(product)
            lines.append({"product": product, "total_price": self.pricing_service.line_total(price, quantity)})

        quote = self.quote_discount(user, code, lines)
        if not quote.ok:
            return quote

        subtotal = to_money(sum((line["total_price"] for line in lines), Decimal("0")))
        return service_ok(
            {
                "code": quote.value["coupon"].code,
                "subtotal": subtotal,
                "discount": quote.value["discount"],
                "total": subtotal - quote.value["discount"],
            }
        )

    def redeem(self, coupon: Coupon, user, order, amount: Decimal) -> ServiceResult[CouponRedemption]:
        """Take one use of the coupon for an order."""
        with transaction.atomic():
            taken = (
                Coupon.objects.filter(id=coupon.id, is_active=True)
                .filter(Q(max_uses__isnull=True) | Q(current_uses__lt=F("max_uses")))
                .update(current_uses=F("current_uses") + 1)
            )
            if not taken:
                return service_err(ErrorCodes.COUPON_USAGE_LIMIT, f"Coupon {coupon.code} has no uses left")
            redemption = CouponRedemption.objects.create(coupon=coupon, user=user, order=order, amount=amount)

        self.logger.info(f"Coupon {coupon.code} redeemed on order {order.id} for {amount}")
        return service_ok(redemption)

    def release(self, order) -> ServiceResult[bool]:
        """Give back the coupon use of an order. Orders without a coupon are a no-op."""
        redemption = CouponRedemption.objects.filter(order_id=order.id).first()
        if redemption is None:
            return service_ok(False)

        with transaction.atomic():
            redemption.delete()
            Coupon.objects.filter(id=redemption.coupon_id, current_uses__gt=0).update(
                current_uses=F("current_uses") - 1
            )
        self.logger.info(f"Released coupon {redemption.coupon_id} of order {order.id}")
        return service_ok(True)

    # ===== Helpers =====

    @staticmethod
    def _is_expired(coupon: Coupon) -> bool:
        return coupon.expiry_date is not None and coupon.expiry_date <= timezone.now()

    def _check_usable(self, coupon: Coupon, user) -> ServiceResult[None]:
        if not coupon.is_active or self._is_expired(coupon):
            return service_err(ErrorCodes.COUPON_INVALID, f"Coupon {coupon.code} is no longer valid")

        if coupon.max_uses is not None and coupon.current_uses >= coupon.max_uses:
            return service_err(ErrorCodes.COUPON_USAGE_LIMIT, f"Coupon {coupon.code} has no uses left")

        used = CouponRedemption.objects.filter(coupon=coupon, user=user).count()
        if used >= coupon.uses_per_user:
            return service_err(ErrorCodes.COUPON_USAGE_LIMIT, f"You have already used coupon {coupon.code}")

        return service_ok()

    @staticmethod
    def _applies_to(coupon: Coupon, product: Product) -> bool:
        if coupon.applicable_to == "specific_products":
            return coupon.applicable_products.filter(id=product.id).exists()
        if coupon.applicable_to == "specific_categories":
            return product.category_id is not None and coupon.applicable_categories.filter(
                id=product.category_id
            ).exists()
        return True
