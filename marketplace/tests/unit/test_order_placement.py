from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from django.utils import timezone

from authentication.tests.factories import AddressFactory
from infrastructure.events.in_memory_event_bus import InMemoryEventBus
from marketplace.models import CartItem, Coupon, CouponRedemption, Order, OrderItem, Product
from marketplace.services import InventoryService, OrderService
from marketplace.tests.factories import (
    AdminFactory,
    CartFactory,
    CartItemFactory,
    CouponFactory,
    OrderFactory,
    OrderItemFactory,
    PendingProductFactory,
    ProductFactory,
    StoreFactory,
    UserFactory,
)
from notifications.models import Notification
from notifications.services import NotificationService
from utils.service_base import ErrorCodes, service_err


def order_payload(store, lines, total=None, **extra):
    items = [
        {"product_id": str(product.id), "quantity": quantity, "price": str(product.price)}
        for product, quantity in lines
    ]
    if total is None:
        total = sum((product.price * quantity for product, quantity in lines), Decimal("0"))
    payload = {
        "store_id": str(store.id),
        "order_items": items,
        "total_amount": str(total),
        "shipping_address_full": "Ayşe Yılmaz, Moda Cad. 1, Kadıköy, İstanbul",
    }
    payload.update(extra)
    return payload


@pytest.mark.unit
@pytest.mark.django_db
class TestOrderPlacement:
    def setup_method(self):
        self.event_bus = InMemoryEventBus()
        self.service = OrderService(
            notification_service=NotificationService(send_emails=False), event_bus=self.event_bus
        )
        self.buyer = UserFactory()
        self.store = StoreFactory()
        self.product = ProductFactory(store=self.store, price=Decimal("100.00"), stock_quantity=10)

    def test_place_order_success(self):
        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 2)]))

        assert result.ok, result.error_detail
        order = result.value
        assert order.status == "pending"
        assert order.total_amount == Decimal("200.00")
        assert order.subtotal_amount == Decimal("200.00")

        item = OrderItem.objects.get(order=order)
        assert item.quantity == 2
        assert item.price == Decimal("100.00")
        assert item.total_price == Decimal("200.00")
        assert item.seller_amount == Decimal("180.00")

        self.product.refresh_from_db()
        assert self.product.stock_quantity == 8

    def test_place_order_notifies_store_owner_and_publishes_event(self):
        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 1)]))

        assert result.ok
        assert Notification.objects.filter(user=self.store.owner, type="new_order").count() == 1
        placed = self.event_bus.events_of_type("order.placed")
        assert len(placed) == 1
        assert placed[0]["payload"]["order_id"] == str(result.value.id)

    def test_place_order_clears_ordered_items_from_cart(self):
        other = ProductFactory(store=self.store)
        cart = CartFactory(user=self.buyer)
        CartItemFactory(cart=cart, product=self.product, quantity=1)
        CartItemFactory(cart=cart, product=other, quantity=1)

        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 1)]))

        assert result.ok
        remaining = list(CartItem.objects.filter(cart=cart).values_list("product_id", flat=True))
        assert remaining == [other.id]

    def test_shipping_and_discount_are_part_of_total(self):
        payload = order_payload(
            self.store, [(self.product, 1)], total=Decimal("95.00"), shipping_fee="15.00", discount_amount="20.00"
        )

        result = self.service.place_order(self.buyer, payload)

        assert result.ok
        assert result.value.subtotal_amount == Decimal("100.00")
        assert result.value.total_amount == Decimal("95.00")

    def test_discount_price_is_charged(self):
        self.product.discount_price = Decimal("80.00")
        self.product.save()
        payload = order_payload(self.store, [(self.product, 1)], total=Decimal("80.00"))
        payload["order_items"][0]["price"] = "80.00"

        result = self.service.place_order(self.buyer, payload)

        assert result.ok
        assert OrderItem.objects.get(order=result.value).price == Decimal("80.00")

    def test_commission_rate_from_platform_settings(self):
        from backoffice.models import PlatformSettings

        PlatformSettings.objects.create(commission_rate=Decimal("0.1500"))

        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 3)]))

        assert result.ok
        assert OrderItem.objects.get(order=result.value).seller_amount == Decimal("255.00")

    def test_empty_items_rejected(self):
        result = self.service.place_order(self.buyer, order_payload(self.store, []))

        assert not result.ok
        assert result.error == ErrorCodes.CART_EMPTY

    def test_unknown_store_rejected(self):
        payload = order_payload(self.store, [(self.product, 1)])
        payload["store_id"] = "00000000-0000-0000-0000-000000000000"

        result = self.service.place_order(self.buyer, payload)

        assert not result.ok
        assert result.error == ErrorCodes.STORE_NOT_FOUND

    def test_inactive_store_rejected(self):
        self.store.is_active = False
        self.store.save()

        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 1)]))

        assert result.error == ErrorCodes.STORE_NOT_FOUND

    def test_duplicate_product_line_rejected(self):
        result = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.product, 1), (self.product, 1)])
        )

        assert result.error == ErrorCodes.VALIDATION_ERROR

    def test_zero_quantity_rejected(self):
        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 0)]))

        assert result.error == ErrorCodes.INVALID_QUANTITY

    def test_malformed_items_rejected(self):
        payload = order_payload(self.store, [(self.product, 1)])

        payload["order_items"] = ["junk"]
        assert self.service.place_order(self.buyer, payload).error == ErrorCodes.VALIDATION_ERROR

        payload["order_items"] = "junk"
        assert self.service.place_order(self.buyer, payload).error == ErrorCodes.VALIDATION_ERROR
        assert not Order.objects.exists()

    def test_open_order_for_same_product_rejected(self):
        open_order = OrderFactory(buyer=self.buyer, store=self.store, status="pending")
        OrderItemFactory(order=open_order, product=self.product)

        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 1)]))

        assert result.error == ErrorCodes.ORDER_ALREADY_EXISTS
        assert Order.objects.filter(buyer=self.buyer).count() == 1

    def test_closed_order_for_same_product_allowed(self):
        delivered = OrderFactory(buyer=self.buyer, store=self.store, status="delivered")
        OrderItemFactory(order=delivered, product=self.product)

        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 1)]))

        assert result.ok

    def test_unknown_product_rejected(self):
        payload = order_payload(self.store, [(self.product, 1)])
        payload["order_items"][0]["product_id"] = "11111111-1111-1111-1111-111111111111"

        result = self.service.place_order(self.buyer, payload)

        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND

    def test_unapproved_product_rejected(self):
        pending = PendingProductFactory(store=self.store)

        result = self.service.place_order(self.buyer, order_payload(self.store, [(pending, 1)]))

        assert result.error == ErrorCodes.PRODUCT_INACTIVE

    def test_product_from_other_store_rejected(self):
        foreign = ProductFactory()

        result = self.service.place_order(self.buyer, order_payload(self.store, [(foreign, 1)]))

        assert result.error == ErrorCodes.STORE_MISMATCH

    def test_insufficient_stock_rejected(self):
        result = self.service.place_order(self.buyer, order_payload(self.store, [(self.product, 11)]))

        assert result.error == ErrorCodes.INSUFFICIENT_STOCK
        self.product.refresh_from_db()
        assert self.product.stock_quantity == 10

    def test_stale_client_price_rejected(self):
        payload = order_payload(self.store, [(self.product, 1)], total=Decimal("90.00"))
        payload["order_items"][0]["price"] = "90.00"

        result = self.service.place_order(self.buyer, payload)

        assert result.error == ErrorCodes.PRICE_MISMATCH

    def test_total_mismatch_rejected(self):
        result = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.product, 1)], total=Decimal("150.00"))
        )

        assert result.error == ErrorCodes.TOTAL_MISMATCH
        assert not Order.objects.exists()

    def test_address_required(self):
        payload = order_payload(self.store, [(self.product, 1)])
        del payload["shipping_address_full"]

        result = self.service.place_order(self.buyer, payload)

        assert result.error == ErrorCodes.ADDRESS_REQUIRED

    def test_saved_address_is_formatted_into_order(self):
        address = AddressFactory(user=self.buyer, address_line1="Moda Cad. 1")
        payload = order_payload(self.store, [(self.product, 1)], address_id=address.id)
        del payload["shipping_address_full"]

        result = self.service.place_order(self.buyer, payload)

        assert result.ok
        assert result.value.address_id == address.id
        assert "Moda Cad. 1" in result.value.shipping_address
        assert result.value.billing_address == result.value.shipping_address

    def test_someone_elses_address_rejected(self):
        address = AddressFactory()
        payload = order_payload(self.store, [(self.product, 1)], address_id=address.id)

        result = self.service.place_order(self.buyer, payload)

        assert result.error == ErrorCodes.NOT_ADDRESS_OWNER
        assert not Order.objects.exists()

    def test_admin_places_order_for_another_user(self):
        admin = AdminFactory()

        result = self.service.place_order(
            admin, order_payload(self.store, [(self.product, 1)], user_id=str(self.buyer.id))
        )

        assert result.ok
        assert result.value.buyer_id == self.buyer.id

    def test_regular_user_cannot_order_for_another_user(self):
        other = UserFactory()

        result = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.product, 1)], user_id=str(other.id))
        )

        assert result.error == ErrorCodes.PERMISSION_DENIED


@pytest.mark.unit
@pytest.mark.django_db
class TestOrderPlacementCompensation:
    def setup_method(self):
        self.buyer = UserFactory()
        self.store = StoreFactory()
        self.first = ProductFactory(store=self.store, stock_quantity=10)
        self.second = ProductFactory(store=self.store, stock_quantity=10)

        real_inventory = InventoryService()
        self.inventory = MagicMock(wraps=real_inventory)

        def flaky_decrement(product_id, quantity):
            if str(product_id) == str(self.second.id):
                return service_err(ErrorCodes.INSUFFICIENT_STOCK, "Sold out in the meantime")
            return real_inventory.decrement_stock(product_id, quantity)

        self.inventory.decrement_stock.side_effect = flaky_decrement
        self.service = OrderService(
            inventory_service=self.inventory,
            notification_service=NotificationService(send_emails=False),
            event_bus=InMemoryEventBus(),
        )

    def test_failed_decrement_restores_stock_and_removes_order(self):
        result = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.first, 3), (self.second, 1)])
        )

        assert not result.ok
        assert result.error == ErrorCodes.INSUFFICIENT_STOCK
        assert not Order.objects.exists()
        assert not OrderItem.objects.exists()

        assert Product.objects.get(id=self.first.id).stock_quantity == 10
        assert Product.objects.get(id=self.second.id).stock_quantity == 10
        self.inventory.restore_stock.assert_called_once_with(self.first.id, 3, reason="order_placement_rollback")

    def test_failed_placement_sends_no_notification(self):
        self.service.place_order(self.buyer, order_payload(self.store, [(self.first, 1), (self.second, 1)]))

        assert not Notification.objects.filter(type="new_order").exists()


@pytest.mark.unit
@pytest.mark.django_db
class TestOrderPlacementWithCoupon:
    def setup_method(self):
        self.service = OrderService(
            notification_service=NotificationService(send_emails=False), event_bus=InMemoryEventBus()
        )
        self.buyer = UserFactory()
        self.store = StoreFactory()
        self.product = ProductFactory(store=self.store, price=Decimal("100.00"), stock_quantity=10)
        self.coupon = CouponFactory(code="TEN", discount_value=Decimal("10.00"), max_uses=5)

    def test_coupon_discount_is_computed_and_redeemed(self):
        payload = order_payload(self.store, [(self.product, 2)], total=Decimal("180.00"), coupon_code="ten")

        result = self.service.place_order(self.buyer, payload)

        assert result.ok, result.error_detail
        order = result.value
        assert order.discount_amount == Decimal("20.00")
        assert order.subtotal_amount == Decimal("200.00")
        assert order.coupon_code == "TEN"
        assert CouponRedemption.objects.get(order=order).amount == Decimal("20.00")
        assert Coupon.objects.get(id=self.coupon.id).current_uses == 1

    def test_client_discount_must_match_coupon(self):
        payload = order_payload(
            self.store, [(self.product, 1)], total=Decimal("50.00"), coupon_code="TEN", discount_amount="50.00"
        )

        result = self.service.place_order(self.buyer, payload)

        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert not Order.objects.exists()

    def test_total_without_coupon_discount_rejected(self):
        payload = order_payload(self.store, [(self.product, 1)], coupon_code="TEN")

        result = self.service.place_order(self.buyer, payload)

        assert result.error == ErrorCodes.TOTAL_MISMATCH
        assert Coupon.objects.get(id=self.coupon.id).current_uses == 0

    def test_used_up_coupon_rejected_before_order_exists(self):
        Coupon.objects.filter(id=self.coupon.id).update(current_uses=5)

        result = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.product, 1)], total=Decimal("90.00"), coupon_code="TEN")
        )

        assert result.error == ErrorCodes.COUPON_USAGE_LIMIT
        assert not Order.objects.exists()
        assert Product.objects.get(id=self.product.id).stock_quantity == 10

    def test_lost_race_for_last_use_compensates(self):
        coupons = MagicMock(wraps=self.service.coupon_service)
        coupons.redeem.return_value = service_err(ErrorCodes.COUPON_USAGE_LIMIT, "No uses left")
        self.service.coupon_service = coupons

        result = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.product, 3)], total=Decimal("270.00"), coupon_code="TEN")
        )

        assert result.error == ErrorCodes.COUPON_USAGE_LIMIT
        assert not Order.objects.exists()
        assert Product.objects.get(id=self.product.id).stock_quantity == 10

    def test_cancellation_gives_coupon_use_back(self):
        placed = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.product, 1)], total=Decimal("90.00"), coupon_code="TEN")
        )

        result = self.service.update_order(placed.value.id, AdminFactory(), {"status": "cancelled"})

        assert result.ok
        assert Coupon.objects.get(id=self.coupon.id).current_uses == 0
        assert not CouponRedemption.objects.exists()
        assert Product.objects.get(id=self.product.id).stock_quantity == 10

    def test_expired_order_gives_coupon_use_back(self):
        placed = self.service.place_order(
            self.buyer, order_payload(self.store, [(self.product, 1)], total=Decimal("90.00"), coupon_code="TEN")
        )
        Order.objects.filter(id=placed.value.id).update(created_at=timezone.now() - timedelta(hours=72))

        result = self.service.expire_stale_orders(older_than_hours=48)

        assert result.value["expired"] == 1
        assert Coupon.objects.get(id=self.coupon.id).current_uses == 0
