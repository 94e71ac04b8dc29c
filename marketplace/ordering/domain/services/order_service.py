"""
OrderService - Order Lifecycle Management

Handles order placement, listing, updates, deletion and the expiry of stale
unpaid orders. Orchestrates inventory, pricing, addresses and notifications.

Order placement is a best-effort sequence rather than one database
transaction: every step commits on its own and a failure after the order row
exists is undone by compensating actions (restore stock, delete items, delete
the order).
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.paginator import EmptyPage, Paginator
from django.db import transaction
from django.utils import timezone

from infrastructure.events import get_event_bus
from infrastructure.observability import tracer
from marketplace.cart.domain.models import CartItem
from marketplace.cart.domain.services.inventory_service import InventoryService
from marketplace.cart.domain.services.pricing_service import PricingService, to_money
from marketplace.catalog.domain.models import Product, Store
from marketplace.domain.events import OrderCancelledEvent, OrderPlacedEvent, OrderStatusChangedEvent
from marketplace.infra.observability.metrics import (
    order_status_changes_total,
    order_value,
    orders_expired_total,
    orders_placed_total,
)
from marketplace.ordering.domain.models.order import Order, OrderItem
from marketplace.promotions.domain.services.coupon_service import CouponService, normalize_code
from utils.rbac import is_admin
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


logger = logging.getLogger(__name__)

# Fields an admin or the store owner may change on an order
MANAGER_UPDATE_FIELDS = ("status", "payment_status", "tracking_number", "shipping_carrier", "order_note")

VALID_STATUSES = {choice for choice, _ in Order.STATUS_CHOICES}
VALID_PAYMENT_STATUSES = {choice for choice, _ in Order.PAYMENT_STATUS_CHOICES}

# Orders in these states are final
TERMINAL_STATUSES = ("cancelled", "refunded")


class OrderService(BaseService):
    """
    Service for managing order lifecycle.

    Dependencies:
    - InventoryService: atomic stock decrement / restore
    - PricingService: effective prices, totals and seller amounts
    - AddressService: ownership check and formatting of saved addresses
    - NotificationService: store owner and buyer notifications
    - CouponService: coupon discounts and their redemption
    """

    def __init__(
        self,
        inventory_service: InventoryService = None,
        pricing_service: PricingService = None,
        address_service=None,
        notification_service=None,
        event_bus=None,
        coupon_service: CouponService = None,
    ):
        super().__init__()
        if address_service is None:
            from authentication.domain.services import AddressService

            address_service = AddressService()
        if notification_service is None:
            from notifications.services import NotificationService

            notification_service = NotificationService()

        self.inventory_service = inventory_service or InventoryService()
        self.pricing_service = pricing_service or PricingService()
        self.address_service = address_service
        self.notification_service = notification_service
        self.event_bus = event_bus or get_event_bus()
        self.coupon_service = coupon_service or CouponService()

    # ===== Placement =====

    @BaseService.log_performance
    def place_order(self, user, data: Dict[str, Any]) -> ServiceResult[Order]:
        """
        Place an order for a single store.

        Args:
            user: Authenticated caller
            data: Dict with:
                - store_id: Store UUID
                - order_items: list of {product_id, quantity, price}
                - total_amount, shipping_fee (default 0), discount_amount (default 0)
                - coupon_code (optional): the discount is then computed from the coupon
                - address_id or shipping_address_full
                - billing_address_full, order_note, payment_method (optional)
                - user_id: place the order for another user (admins only)

        Sequence:
            1. Duplicate-order guard
            2. Validate every line against current product state
            3. Resolve the shipping address
            4. Insert the order and its items
            5. Decrement stock per item
            6. Redeem the coupon, if any
            7. On failure in 4-6, compensate and return the original error

        Returns:
            ServiceResult with the created Order
        """
        with tracer.start_as_current_span("order_place") as span:
            span.set_attribute("user.id", str(user.id))

            buyer_result = self._resolve_buyer(user, data.get("user_id"))
            if not buyer_result.ok:
                return self._placement_failed(buyer_result)
            buyer = buyer_result.value

            store_id = data.get("store_id")
            try:
                store = Store.objects.get(id=store_id, is_active=True)
            except (Store.DoesNotExist, ValidationError, ValueError, TypeError):
                return self._placement_failed(service_err(ErrorCodes.STORE_NOT_FOUND, f"Store {store_id} not found"))
            span.set_attribute("store.id", str(store.id))

            lines_result = self._parse_lines(data.get("order_items"))
            if not lines_result.ok:
                return self._placement_failed(lines_result)
            lines = lines_result.value
            product_ids = [line["product_id"] for line in lines]

            amounts_result = self._parse_amounts(data)
            if not amounts_result.ok:
                return self._placement_failed(amounts_result)
            total_amount, shipping_fee, discount_amount = amounts_result.value

            # Step 1: duplicate-order guard
            with tracer.start_as_current_span("order_duplicate_guard"):
                duplicate = OrderItem.objects.filter(
                    order__buyer=buyer, order__status__in=Order.OPEN_STATUSES, product_id__in=product_ids
                ).exists()
                if duplicate:
                    return self._placement_failed(
                        service_err(
                            ErrorCodes.ORDER_ALREADY_EXISTS,
                            "You already have an open order for one of these products",
                        )
                    )

            # Step 2: validate lines against current product state
            with tracer.start_as_current_span("order_validate_items"):
                validation = self._validate_lines(lines, store)
                if not validation.ok:
                    return self._placement_failed(validation)
                priced_lines = validation.value

            # Step 3: resolve the shipping address
            with tracer.start_as_current_span("order_resolve_address"):
                address_result = self._resolve_address(buyer, data)
                if not address_result.ok:
                    return self._placement_failed(address_result)
                address, shipping_address = address_result.value
                billing_address = (data.get("billing_address_full") or "").strip() or shipping_address

            coupon = None
            coupon_code = normalize_code(data.get("coupon_code"))
            if coupon_code:
                quote = self.coupon_service.quote_discount(buyer, coupon_code, priced_lines)
                if not quote.ok:
                    return self._placement_failed(quote)
                coupon = quote.value["coupon"]
                if discount_amount and discount_amount != quote.value["discount"]:
                    return self._placement_failed(
                        service_err(
                            ErrorCodes.VALIDATION_ERROR,
                            f"Coupon {coupon_code} gives {quote.value['discount']}, not {discount_amount}",
                        )
                    )
                discount_amount = quote.value["discount"]
                span.set_attribute("order.coupon", coupon_code)

            # Totals: the server-side item sum must equal total - shipping + discount
            subtotal = self.pricing_service.order_subtotal(total_amount, shipping_fee, discount_amount)
            items_sum = to_money(sum((line["total_price"] for line in priced_lines), Decimal("0")))
            if items_sum != subtotal:
                return self._placement_failed(
                    service_err(
                        ErrorCodes.TOTAL_MISMATCH,
                        f"Order total does not match its items (items {items_sum}, expected subtotal {subtotal})",
                    )
                )

            # Steps 4-6: insert, decrement, compensate on failure
            commission_rate = self.pricing_service.commission_rate()
            order = None
            created_items: List[OrderItem] = []
            decremented: List[Tuple[Any, int]] = []

            try:
                with tracer.start_as_current_span("order_insert"):
                    order = Order.objects.create(
                        buyer=buyer,
                        store=store,
                        status="pending",
                        payment_status="pending",
                        payment_method=data.get("payment_method") or "",
                        subtotal_amount=subtotal,
                        shipping_fee=shipping_fee,
                        discount_amount=discount_amount,
                        coupon_code=coupon_code,
                        total_amount=total_amount,
                        address=address,
                        shipping_address=shipping_address,
                        billing_address=billing_address,
                        order_note=data.get("order_note") or "",
                    )
                    for line in priced_lines:
                        created_items.append(
                            OrderItem.objects.create(
                                order=order,
                                product=line["product"],
                                quantity=line["quantity"],
                                price=line["price"],
                                total_price=line["total_price"],
                                seller_amount=self.pricing_service.seller_amount(
                                    line["price"], line["quantity"], commission_rate
                                ),
                                product_name=line["product"].name,
                            )
                        )

                with tracer.start_as_current_span("order_decrement_stock"):
                    for line in priced_lines:
                        product = line["product"]
                        decrement = self.inventory_service.decrement_stock(product.id, line["quantity"])
                        if not decrement.ok:
                            self.logger.warning(
                                f"Stock decrement failed for product {product.id} on order {order.id}: "
                                f"{decrement.error_detail}"
                            )
                            self._compensate(order, created_items, decremented)
                            return self._placement_failed(decrement)
                        decremented.append((product.id, line["quantity"]))

                if coupon is not None:
                    redeemed = self.coupon_service.redeem(coupon, buyer, order, discount_amount)
                    if not redeemed.ok:
                        self._compensate(order, created_items, decremented)
                        return self._placement_failed(redeemed)

            except Exception as e:
                self.logger.error(f"Error placing order for user {buyer.id}: {e}", exc_info=True)
                span.record_exception(e)
                self._compensate(order, created_items, decremented)
                return self._placement_failed(service_err(ErrorCodes.INTERNAL_ERROR, str(e)))

            span.set_attribute("order.id", str(order.id))
            span.set_attribute("order.total", str(order.total_amount))
            self._after_placement(order, buyer, priced_lines)

            return service_ok(order)

    def _resolve_buyer(self, user, requested_user_id) -> ServiceResult:
        if not requested_user_id or str(requested_user_id) == str(user.id):
            return service_ok(user)

        if not is_admin(user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can place orders for other users")

        from django.contrib.auth import get_user_model

        User = get_user_model()
        try:
            return service_ok(User.objects.get(id=requested_user_id, is_active=True))
        except (User.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.USER_NOT_FOUND, f"User {requested_user_id} not found")

    def _parse_lines(self, raw_items) -> ServiceResult[List[Dict[str, Any]]]:
        if not raw_items:
            return service_err(ErrorCodes.CART_EMPTY, "An order needs at least one item")
        if not isinstance(raw_items, (list, tuple)):
            return service_err(ErrorCodes.VALIDATION_ERROR, "order_items must be a list")

        lines = []
        seen = set()
        for raw in raw_items:
            if not isinstance(raw, Mapping):
                return service_err(ErrorCodes.VALIDATION_ERROR, "Every item must be an object")
            if not raw.get("product_id"):
                return service_err(ErrorCodes.VALIDATION_ERROR, "Every item needs a product_id")
            try:
                product_id = uuid.UUID(str(raw["product_id"]))
            except ValueError:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {raw['product_id']} not found")
            if str(product_id) in seen:
                return service_err(ErrorCodes.VALIDATION_ERROR, f"Product {product_id} appears more than once")
            seen.add(str(product_id))

            try:
                quantity = int(raw.get("quantity"))
            except (TypeError, ValueError):
                return service_err(ErrorCodes.INVALID_QUANTITY, f"Invalid quantity for product {product_id}")
            if quantity <= 0:
                return service_err(ErrorCodes.INVALID_QUANTITY, f"Quantity for product {product_id} must be positive")

            try:
                client_price = to_money(raw.get("price"))
            except (InvalidOperation, TypeError, ValueError):
                return service_err(ErrorCodes.VALIDATION_ERROR, f"Invalid price for product {product_id}")

            lines.append({"product_id": product_id, "quantity": quantity, "client_price": client_price})
        return service_ok(lines)

    def _parse_amounts(self, data) -> ServiceResult[Tuple[Decimal, Decimal, Decimal]]:
        try:
            total_amount = to_money(data.get("total_amount"))
            shipping_fee = to_money(data.get("shipping_fee") or 0)
            discount_amount = to_money(data.get("discount_amount") or 0)
        except (InvalidOperation, TypeError, ValueError):
            return service_err(ErrorCodes.VALIDATION_ERROR, "Order amounts must be numbers")

        if total_amount < 0 or shipping_fee < 0 or discount_amount < 0:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Amounts cannot be negative")
        return service_ok((total_amount, shipping_fee, discount_amount))

    def _validate_lines(self, lines, store) -> ServiceResult[List[Dict[str, Any]]]:
        """Check every line against the current product row; the first failure rejects the request."""
        products = Product.objects.in_bulk([line["product_id"] for line in lines])
        products_by_id = {str(pk): product for pk, product in products.items()}
        priced = []
        for line in lines:
            product = products_by_id.get(str(line["product_id"]))
            if product is None:
                return service_err(ErrorCodes.PRODUCT_NOT_FOUND, f"Product {line['product_id']} not found")
            if not product.is_publicly_visible:
                return service_err(ErrorCodes.PRODUCT_INACTIVE, f"{product.name} is not available for sale")
            if product.store_id != store.id:
                return service_err(ErrorCodes.STORE_MISMATCH, f"{product.name} is not sold by {store.name}")
            if product.stock_quantity < line["quantity"]:
                return service_err(
                    ErrorCodes.INSUFFICIENT_STOCK,
                    f"Insufficient stock for {product.name}. Available: {product.stock_quantity}, "
                    f"requested: {line['quantity']}",
                )

            server_price = self.pricing_service.effective_price(product)
            if not self.pricing_service.prices_match(line["client_price"], server_price):
                return service_err(
                    ErrorCodes.PRICE_MISMATCH,
                    f"Price of {product.name} changed: expected {server_price}, got {line['client_price']}",
                )

            priced.append(
                {
                    "product": product,
                    "quantity": line["quantity"],
                    "price": server_price,
                    "total_price": self.pricing_service.line_total(server_price, line["quantity"]),
                }
            )
        return service_ok(priced)

    def _resolve_address(self, buyer, data) -> ServiceResult:
        """Return (Address or None, single-line shipping address)."""
        address_id = data.get("address_id")
        if address_id:
            result = self.address_service.get_owned_address(buyer, address_id)
            if not result.ok:
                return result
            return service_ok((result.value, self.address_service.format_address(result.value)))

        inline = (data.get("shipping_address_full") or "").strip()
        if inline:
            return service_ok((None, inline))

        return service_err(ErrorCodes.ADDRESS_REQUIRED, "A shipping address is required")

    def _compensate(self, order: Optional[Order], created_items: List[OrderItem], decremented: List[Tuple[Any, int]]):
        """Undo a partially placed order: restore stock, release the coupon, delete items, delete the order."""
        with tracer.start_as_current_span("order_compensate"):
            if order is not None and order.pk and order.coupon_code:
                try:
                    self.coupon_service.release(order)
                except Exception as e:
                    self.logger.error(f"Compensation could not release coupon of order {order.id}: {e}", exc_info=True)

            for product_id, quantity in decremented:
                result = self.inventory_service.restore_stock(product_id, quantity, reason="order_placement_rollback")
                if not result.ok:
                    self.logger.error(
                        f"Compensation could not restore {quantity} units of product {product_id}: {result.error}"
                    )

            if created_items:
                try:
                    OrderItem.objects.filter(id__in=[item.id for item in created_items]).delete()
                except Exception as e:
                    self.logger.error(f"Compensation could not delete order items: {e}", exc_info=True)

            if order is not None and order.pk:
                try:
                    Order.objects.filter(id=order.id).delete()
                except Exception as e:
                    self.logger.error(f"Compensation could not delete order {order.id}: {e}", exc_info=True)

            self.logger.warning(
                f"Compensated order placement: restored={len(decremented)} items={len(created_items)} "
                f"order={order.id if order else None}"
            )

    def _placement_failed(self, result: ServiceResult) -> ServiceResult:
        orders_placed_total.labels(status="failure").inc()
        return result

    def _after_placement(self, order: Order, buyer, priced_lines):
        """Side effects of a placed order. None of them can undo the order."""
        orders_placed_total.labels(status="success").inc()
        order_value.observe(float(order.total_amount))

        self.logger.info(
            f"Created order {order.id} for user {buyer.id} in store {order.store_id}: "
            f"{len(priced_lines)} items, total {order.total_amount}"
        )

        ordered_ids = [line["product"].id for line in priced_lines]
        try:
            CartItem.objects.filter(cart__user=buyer, product_id__in=ordered_ids).delete()
        except Exception as e:
            self.logger.warning(f"Failed to clear ordered items from cart of user {buyer.id}: {e}")

        event = OrderPlacedEvent(
            order_id=str(order.id),
            user_id=str(buyer.id),
            store_id=str(order.store_id),
            total_amount=order.total_amount,
            item_count=len(priced_lines),
        )
        try:
            self.event_bus.publish(event.event_type, event.payload)
        except Exception as e:
            self.logger.error(f"Failed to publish OrderPlacedEvent for {order.id}: {e}")

        result = self.notification_service.notify_user(
            order.store.owner,
            type="new_order",
            title="New order",
            message=f"You received a new order of {order.total_amount} from {buyer.display_name}.",
            related_id=order.id,
            related_type="order",
            action_url=f"/seller/orders/{order.id}",
        )
        if not result.ok:
            self.logger.warning(f"New order notification failed for order {order.id}: {result.error_detail}")

    # ===== Reading =====

    @BaseService.log_performance
    def list_orders(
        self, user, scope: str = None, status: Optional[str] = None, page: int = 1, page_size: int = 20
    ) -> ServiceResult[Dict]:
        """
        List orders visible to the user.

        Args:
            user: Caller
            scope: "seller" for orders of the caller's stores, "buyer" for their own
                purchases; admins see every order when no scope is given
            status: Optional status filter
            page: Page number
            page_size: Items per page

        Returns:
            ServiceResult with paginated order list
        """
        try:
            queryset = Order.objects.select_related("buyer", "store").prefetch_related("items")

            if scope == "seller":
                queryset = queryset.filter(store__owner=user)
            elif scope == "buyer" or not is_admin(user):
                queryset = queryset.filter(buyer=user)

            if status:
                queryset = queryset.filter(status=status)

            paginator = Paginator(queryset.order_by("-created_at"), page_size)
            try:
                page_obj = paginator.page(page)
            except EmptyPage:
                page_obj = paginator.page(paginator.num_pages or 1)

            self.logger.info(f"Listed orders for user {user.id} (scope={scope}): {paginator.count} total")

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

        except Exception as e:
            self.logger.error(f"Error listing orders for user {user.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    @BaseService.log_performance
    def get_order(self, order_id, user) -> ServiceResult[Order]:
        """
        Get order details (buyer, store owner or admin).

        Example:
            >>> result = order_service.get_order(order_id, user)
            >>> if result.ok:
            ...     order = result.value
        """
        result = self._load_order(order_id)
        if not result.ok:
            return result
        order = result.value

        if self._access_role(order, user) is None:
            return service_err(ErrorCodes.NOT_ORDER_OWNER, "You do not have access to this order")

        return service_ok(order)

    # ===== Updates =====

    @BaseService.log_performance
    def update_order(self, order_id, user, data: Dict[str, Any]) -> ServiceResult[Order]:
        """
        Update an order.

        Admins and the store owner may change status, payment status, tracking
        number, carrier and note. A buyer may only ask to cancel: their
        ``status=cancelled`` becomes ``cancellation_requested``.
        """
        result = self._load_order(order_id)
        if not result.ok:
            return result
        order = result.value

        role = self._access_role(order, user)
        if role is None:
            return service_err(ErrorCodes.NOT_ORDER_OWNER, "You do not have access to this order")

        if role == "buyer":
            return self._buyer_cancellation_request(order, user, data)
        return self._manager_update(order, user, data)

    def _buyer_cancellation_request(self, order: Order, user, data) -> ServiceResult[Order]:
        requested = {key for key in MANAGER_UPDATE_FIELDS if key in data}
        if requested != {"status"} or data.get("status") != "cancelled":
            return service_err(ErrorCodes.PERMISSION_DENIED, "Buyers can only request a cancellation")

        if order.status not in Order.BUYER_CANCELLABLE_STATUSES:
            return service_err(ErrorCodes.ORDER_CANNOT_CANCEL, f"Cannot cancel order in status '{order.status}'")

        old_status = order.status
        order.status = "cancellation_requested"
        order.cancellation_reason = (data.get("cancellation_reason") or "").strip()
        order.save(update_fields=["status", "cancellation_reason", "updated_at"])

        self.logger.info(f"Cancellation requested for order {order.id} by buyer {user.id}")
        self._publish_status_change(order, old_status, user)

        result = self.notification_service.notify_user(
            order.store.owner,
            type="order_status_changed",
            title="Cancellation requested",
            message=f"The buyer asked to cancel order {str(order.id)[:8]}.",
            related_id=order.id,
            related_type="order",
            action_url=f"/seller/orders/{order.id}",
        )
        if not result.ok:
            self.logger.warning(f"Cancellation request notification failed for order {order.id}")

        return service_ok(order)

    def _manager_update(self, order: Order, user, data) -> ServiceResult[Order]:
        new_status = data.get("status")
        if new_status is not None and new_status not in VALID_STATUSES:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Unknown order status '{new_status}'")

        payment_status = data.get("payment_status")
        if payment_status is not None and payment_status not in VALID_PAYMENT_STATUSES:
            return service_err(ErrorCodes.VALIDATION_ERROR, f"Unknown payment status '{payment_status}'")

        old_status = order.status
        status_changed = new_status is not None and new_status != old_status
        if status_changed and old_status in TERMINAL_STATUSES:
            return service_err(ErrorCodes.INVALID_ORDER_STATE, f"Order is already {old_status}")

        update_fields = ["updated_at"]
        for name in ("payment_status", "tracking_number", "shipping_carrier", "order_note"):
            if name in data and data[name] is not None:
                setattr(order, name, data[name])
                update_fields.append(name)

        if status_changed:
            order.status = new_status
            update_fields.append("status")
            now = timezone.now()
            if new_status == "shipped":
                order.shipped_at = now
                update_fields.append("shipped_at")
            elif new_status == "delivered":
                order.delivered_at = now
                update_fields.append("delivered_at")
            elif new_status == "cancelled":
                order.cancelled_at = now
                update_fields.append("cancelled_at")
                if data.get("cancellation_reason"):
                    order.cancellation_reason = data["cancellation_reason"]
                    update_fields.append("cancellation_reason")

        try:
            # Stock and coupon uses come back only together with a saved cancellation
            with transaction.atomic():
                order.save(update_fields=update_fields)
                if status_changed and new_status == "cancelled":
                    self._restore_order_stock(order, reason=f"order_cancelled_{order.id}")
                    self._release_coupon(order)
        except Exception as e:
            self.logger.error(f"Error updating order {order.id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Order {order.id} updated by {user.id}: fields={update_fields}")

        if status_changed:
            self._publish_status_change(order, old_status, user)
            result = self.notification_service.notify_user(
                order.buyer,
                type="order_status_changed",
                title="Order status updated",
                message=f"Your order {str(order.id)[:8]} is now {order.get_status_display()}.",
                related_id=order.id,
                related_type="order",
                action_url=f"/orders/{order.id}",
            )
            if not result.ok:
                self.logger.warning(f"Status notification failed for order {order.id}: {result.error_detail}")

        return service_ok(order)

    def _publish_status_change(self, order: Order, old_status: str, actor):
        order_status_changes_total.labels(status=order.status).inc()
        try:
            event = OrderStatusChangedEvent(
                order_id=str(order.id),
                user_id=str(order.buyer_id),
                old_status=old_status,
                new_status=order.status,
                changed_by=str(actor.id) if actor else "system",
            )
            self.event_bus.publish(event.event_type, event.payload)

            if order.status == "cancelled":
                cancelled = OrderCancelledEvent(
                    order_id=str(order.id),
                    user_id=str(order.buyer_id),
                    reason=order.cancellation_reason,
                    payment_status=order.payment_status,
                )
                self.event_bus.publish(cancelled.event_type, cancelled.payload)
        except Exception as e:
            self.logger.error(f"Failed to publish status change for order {order.id}: {e}")

    def _restore_order_stock(self, order: Order, reason: str):
        for item in order.items.all():
            result = self.inventory_service.restore_stock(item.product_id, item.quantity, reason=reason)
            if not result.ok:
                # Continue with the remaining items even if one restore fails
                self.logger.error(
                    f"Failed to restore stock for product {item.product_id} of order {order.id}: {result.error}"
                )

    def _release_coupon(self, order: Order):
        if not order.coupon_code:
            return
        result = self.coupon_service.release(order)
        if not result.ok:
            self.logger.error(f"Failed to release coupon {order.coupon_code} of order {order.id}: {result.error}")

    # ===== Deletion and expiry =====

    @BaseService.log_performance
    def delete_order(self, order_id, user) -> ServiceResult[None]:
        """Delete an order and its items (admin only)."""
        if not is_admin(user):
            return service_err(ErrorCodes.PERMISSION_DENIED, "Only admins can delete orders")

        result = self._load_order(order_id)
        if not result.ok:
            return result
        order = result.value

        try:
            OrderItem.objects.filter(order=order).delete()
            order.delete()
        except Exception as e:
            self.logger.error(f"Error deleting order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

        self.logger.info(f"Order {order_id} deleted by admin {user.id}")
        return service_ok()

    @BaseService.log_performance
    def expire_stale_orders(self, older_than_hours: int = None) -> ServiceResult[Dict[str, Any]]:
        """
        Cancel unpaid orders older than ORDER_PENDING_EXPIRY_HOURS and restore their stock.

        Returns:
            ServiceResult with ``expired`` count and ``order_ids``
        """
        hours = older_than_hours or getattr(settings, "ORDER_PENDING_EXPIRY_HOURS", 48)
        cutoff = timezone.now() - timedelta(hours=hours)

        stale = Order.objects.filter(
            status__in=Order.OPEN_STATUSES, payment_status="pending", created_at__lt=cutoff
        ).prefetch_related("items")

        expired_ids = []
        for order in stale:
            # Skip orders that changed state since the query ran
            claimed = Order.objects.filter(id=order.id, status__in=Order.OPEN_STATUSES).update(
                status="cancelled",
                cancellation_reason=f"Payment not received within {hours} hours",
                cancelled_at=timezone.now(),
            )
            if not claimed:
                continue

            old_status = order.status
            order.refresh_from_db()
            self._restore_order_stock(order, reason="order_expired")
            self._release_coupon(order)
            self._publish_status_change(order, old_status, None)
            expired_ids.append(str(order.id))

        if expired_ids:
            orders_expired_total.inc(len(expired_ids))
        self.logger.info(f"Expired {len(expired_ids)} stale orders older than {hours}h")
        return service_ok({"expired": len(expired_ids), "order_ids": expired_ids})

    # ===== Helpers =====

    def _load_order(self, order_id) -> ServiceResult[Order]:
        try:
            order = (
                Order.objects.select_related("buyer", "store", "store__owner")
                .prefetch_related("items__product")
                .get(id=order_id)
            )
            return service_ok(order)
        except (Order.DoesNotExist, ValidationError, ValueError, TypeError):
            return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} not found")
        except Exception as e:
            self.logger.error(f"Error loading order {order_id}: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def _access_role(self, order: Order, user) -> Optional[str]:
        """'manager' for admins and the store owner, 'buyer' for the buyer, else None."""
        if is_admin(user) or str(order.store.owner_id) == str(user.id):
            return "manager"
        if str(order.buyer_id) == str(user.id):
            return "buyer"
        return None
