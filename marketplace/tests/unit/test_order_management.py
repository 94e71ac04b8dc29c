from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone

from infrastructure.events.in_memory_event_bus import InMemoryEventBus
from marketplace.models import Order, OrderItem
from marketplace.services import OrderService
from marketplace.tests.factories import (
    AdminFactory,
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    StoreFactory,
    UserFactory,
)
from notifications.models import Notification
from notifications.services import NotificationService
from utils.service_base import ErrorCodes


@pytest.mark.unit
@pytest.mark.django_db
class TestOrderManagement:
    def setup_method(self):
        self.event_bus = InMemoryEventBus()
        self.service = OrderService(
            notification_service=NotificationService(send_emails=False), event_bus=self.event_bus
        )
        self.buyer = UserFactory()
        self.store = StoreFactory()
        self.seller = self.store.owner
        self.product = ProductFactory(store=self.store, stock_quantity=5)
        self.order = OrderFactory(buyer=self.buyer, store=self.store)
        OrderItemFactory(order=self.order, product=self.product, quantity=2, price=Decimal("100.00"))

    # ===== Reading =====

    def test_buyer_lists_only_own_orders(self):
        OrderFactory(store=self.store)

        result = self.service.list_orders(self.buyer)

        assert result.ok
        assert result.value["count"] == 1
        assert result.value["results"][0].id == self.order.id

    def test_seller_scope_lists_store_orders(self):
        OrderFactory(store=self.store)
        OrderFactory()

        result = self.service.list_orders(self.seller, scope="seller")

        assert result.value["count"] == 2

    def test_admin_lists_every_order(self):
        OrderFactory()

        result = self.service.list_orders(AdminFactory())

        assert result.value["count"] == 2

    def test_status_filter(self):
        OrderFactory(buyer=self.buyer, status="shipped")

        result = self.service.list_orders(self.buyer, status="shipped")

        assert result.value["count"] == 1

    def test_get_order_access(self):
        assert self.service.get_order(self.order.id, self.buyer).ok
        assert self.service.get_order(self.order.id, self.seller).ok
        assert self.service.get_order(self.order.id, AdminFactory()).ok

        result = self.service.get_order(self.order.id, UserFactory())
        assert result.error == ErrorCodes.NOT_ORDER_OWNER

    def test_get_unknown_order(self):
        result = self.service.get_order("not-a-uuid", self.buyer)

        assert result.error == ErrorCodes.ORDER_NOT_FOUND

    # ===== Updates =====

    def test_seller_ships_order(self):
        result = self.service.update_order(
            self.order.id, self.seller, {"status": "shipped", "tracking_number": "TR123", "shipping_carrier": "Aras"}
        )

        assert result.ok
        order = Order.objects.get(id=self.order.id)
        assert order.status == "shipped"
        assert order.shipped_at is not None
        assert order.tracking_number == "TR123"
        assert Notification.objects.filter(user=self.buyer, type="order_status_changed").exists()
        changed = self.event_bus.events_of_type("order.status_changed")
        assert changed[0]["payload"]["new_status"] == "shipped"

    def test_cancellation_by_manager_restores_stock(self):
        result = self.service.update_order(self.order.id, AdminFactory(), {"status": "cancelled"})

        assert result.ok
        self.product.refresh_from_db()
        assert self.product.stock_quantity == 7
        assert result.value.cancelled_at is not None
        assert len(self.event_bus.events_of_type("order.cancelled")) == 1

    def test_failed_cancellation_save_keeps_stock(self):
        with patch.object(Order, "save", side_effect=DatabaseError("database is locked")):
            result = self.service.update_order(self.order.id, AdminFactory(), {"status": "cancelled"})

        assert result.error == ErrorCodes.INTERNAL_ERROR
        self.product.refresh_from_db()
        assert self.product.stock_quantity == 5
        assert Order.objects.get(id=self.order.id).status == "pending"
        assert self.event_bus.events_of_type("order.cancelled") == []

    def test_unknown_status_rejected(self):
        result = self.service.update_order(self.order.id, self.seller, {"status": "teleported"})

        assert result.error == ErrorCodes.VALIDATION_ERROR

    def test_terminal_order_cannot_change_status(self):
        self.order.status = "cancelled"
        self.order.save()

        result = self.service.update_order(self.order.id, self.seller, {"status": "processing"})

        assert result.error == ErrorCodes.INVALID_ORDER_STATE

    def test_buyer_cancellation_becomes_request(self):
        result = self.service.update_order(
            self.order.id, self.buyer, {"status": "cancelled", "cancellation_reason": "Ordered by mistake"}
        )

        assert result.ok
        order = Order.objects.get(id=self.order.id)
        assert order.status == "cancellation_requested"
        assert order.cancellation_reason == "Ordered by mistake"
        self.product.refresh_from_db()
        assert self.product.stock_quantity == 5
        assert Notification.objects.filter(user=self.seller, type="order_status_changed").exists()

    def test_buyer_cannot_change_other_fields(self):
        result = self.service.update_order(self.order.id, self.buyer, {"status": "delivered"})

        assert result.error == ErrorCodes.PERMISSION_DENIED

        result = self.service.update_order(self.order.id, self.buyer, {"tracking_number": "X"})
        assert result.error == ErrorCodes.PERMISSION_DENIED

    def test_buyer_cannot_cancel_shipped_order(self):
        self.order.status = "shipped"
        self.order.save()

        result = self.service.update_order(self.order.id, self.buyer, {"status": "cancelled"})

        assert result.error == ErrorCodes.ORDER_CANNOT_CANCEL

    def test_stranger_cannot_update(self):
        result = self.service.update_order(self.order.id, UserFactory(), {"status": "shipped"})

        assert result.error == ErrorCodes.NOT_ORDER_OWNER

    # ===== Deletion and expiry =====

    def test_only_admin_deletes(self):
        result = self.service.delete_order(self.order.id, self.seller)
        assert result.error == ErrorCodes.PERMISSION_DENIED

        result = self.service.delete_order(self.order.id, AdminFactory())
        assert result.ok
        assert not Order.objects.filter(id=self.order.id).exists()
        assert not OrderItem.objects.filter(order_id=self.order.id).exists()

    def test_expire_stale_orders(self):
        Order.objects.filter(id=self.order.id).update(created_at=timezone.now() - timedelta(hours=72))
        fresh = OrderFactory(buyer=self.buyer, store=self.store)

        result = self.service.expire_stale_orders(older_than_hours=48)

        assert result.ok
        assert result.value["expired"] == 1
        assert result.value["order_ids"] == [str(self.order.id)]
        assert Order.objects.get(id=self.order.id).status == "cancelled"
        assert Order.objects.get(id=fresh.id).status == "pending"
        self.product.refresh_from_db()
        assert self.product.stock_quantity == 7

    def test_expire_skips_paid_orders(self):
        Order.objects.filter(id=self.order.id).update(
            created_at=timezone.now() - timedelta(hours=72), payment_status="paid"
        )

        result = self.service.expire_stale_orders(older_than_hours=48)

        assert result.value["expired"] == 0
