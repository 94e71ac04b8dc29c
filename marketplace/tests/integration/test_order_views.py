from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from authentication.tests.factories import AddressFactory
from infrastructure.container import container
from marketplace.models import CartItem, Order, Product
from marketplace.tests.factories import (
    AdminFactory,
    CartFactory,
    CartItemFactory,
    OrderFactory,
    OrderItemFactory,
    ProductFactory,
    StoreFactory,
    UserFactory,
)
from notifications.models import Notification


class OrderViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        container.event_bus().clear()

        self.buyer = UserFactory()
        self.store = StoreFactory()
        self.seller = self.store.owner
        self.lamp = ProductFactory(store=self.store, price=Decimal("10.00"), stock_quantity=10)
        self.shade = ProductFactory(store=self.store, price=Decimal("20.00"), stock_quantity=5)

        self.cart = CartFactory(user=self.buyer)
        CartItemFactory(cart=self.cart, product=self.lamp, quantity=2)
        CartItemFactory(cart=self.cart, product=self.shade, quantity=1)

        self.order_list_url = reverse("marketplace:order-list")

    def order_body(self, **overrides):
        body = {
            "store_id": str(self.store.id),
            "order_items": [
                {"product_id": str(self.lamp.id), "quantity": 2, "price": "10.00"},
                {"product_id": str(self.shade.id), "quantity": 1, "price": "20.00"},
            ],
            "total_amount": "45.00",
            "shipping_fee": "5.00",
            "shipping_address_full": "Ayşe Yılmaz, Moda Cad. 1, Kadıköy, İstanbul",
        }
        body.update(overrides)
        return body

    def test_create_order_success(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(self.order_list_url, self.order_body(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], "pending")
        self.assertEqual(response.data["total_amount"], "45.00")
        self.assertEqual(response.data["subtotal_amount"], "40.00")
        self.assertEqual(len(response.data["items"]), 2)

        self.assertEqual(Product.objects.get(id=self.lamp.id).stock_quantity, 8)
        self.assertEqual(Product.objects.get(id=self.shade.id).stock_quantity, 4)
        self.assertFalse(CartItem.objects.filter(cart=self.cart).exists())
        self.assertTrue(Notification.objects.filter(user=self.seller, type="new_order").exists())
        self.assertEqual(len(container.event_bus().events_of_type("order.placed")), 1)

    def test_create_order_with_saved_address(self):
        address = AddressFactory(user=self.buyer)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(
            self.order_list_url, self.order_body(address_id=address.id, shipping_address_full=""), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["address"], address.id)

    def test_create_order_requires_authentication(self):
        response = self.client.post(self.order_list_url, self.order_body(), format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_total_mismatch(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(self.order_list_url, self.order_body(total_amount="99.00"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "total_mismatch")

    def test_malformed_items_rejected_before_placement(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(
            self.order_list_url, self.order_body(order_items=["junk"], total_amount="1"), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("order_items", response.data)
        self.assertFalse(Order.objects.exists())
        self.assertEqual(Product.objects.get(id=self.lamp.id).stock_quantity, 10)

    def test_non_numeric_total_rejected(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(self.order_list_url, self.order_body(total_amount="lots"), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("total_amount", response.data)
        self.assertFalse(Order.objects.exists())

    def test_insufficient_stock(self):
        self.client.force_authenticate(user=self.buyer)
        body = self.order_body(total_amount="125.00")
        body["order_items"][1]["quantity"] = 6

        response = self.client.post(self.order_list_url, body, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "insufficient_stock")
        self.assertEqual(Product.objects.get(id=self.lamp.id).stock_quantity, 10)

    def test_open_order_conflict(self):
        self.client.force_authenticate(user=self.buyer)
        self.client.post(self.order_list_url, self.order_body(), format="json")

        response = self.client.post(self.order_list_url, self.order_body(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "order_already_exists")

    def test_foreign_address_forbidden(self):
        self.client.force_authenticate(user=self.buyer)

        response = self.client.post(
            self.order_list_url, self.order_body(address_id=AddressFactory().id), format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["code"], "not_address_owner")

    def test_list_orders_as_buyer_and_seller(self):
        order = OrderFactory(buyer=self.buyer, store=self.store)
        OrderItemFactory(order=order, product=self.lamp)
        OrderFactory(store=self.store)

        self.client.force_authenticate(user=self.buyer)
        response = self.client.get(self.order_list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["id"], str(order.id))

        self.client.force_authenticate(user=self.seller)
        response = self.client.get(self.order_list_url, {"as": "seller"})
        self.assertEqual(response.data["count"], 2)

    def test_retrieve_other_users_order_forbidden(self):
        order = OrderFactory(store=self.store)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.get(reverse("marketplace:order-detail", kwargs={"pk": order.id}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_seller_marks_order_shipped(self):
        order = OrderFactory(buyer=self.buyer, store=self.store, status="processing")
        self.client.force_authenticate(user=self.seller)

        response = self.client.patch(
            reverse("marketplace:order-detail", kwargs={"pk": order.id}),
            {"status": "shipped", "tracking_number": "TR-1"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "shipped")
        self.assertIsNotNone(response.data["shipped_at"])

    def test_buyer_requests_cancellation(self):
        order = OrderFactory(buyer=self.buyer, store=self.store)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.patch(
            reverse("marketplace:order-detail", kwargs={"pk": order.id}), {"status": "cancelled"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "cancellation_requested")

    def test_buyer_cancellation_keeps_reason(self):
        order = OrderFactory(buyer=self.buyer, store=self.store)
        self.client.force_authenticate(user=self.buyer)

        response = self.client.patch(
            reverse("marketplace:order-detail", kwargs={"pk": order.id}),
            {"status": "cancelled", "cancellation_reason": "Found it cheaper"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.cancellation_reason, "Found it cheaper")

    def test_only_admin_deletes(self):
        order = OrderFactory(buyer=self.buyer, store=self.store)
        url = reverse("marketplace:order-detail", kwargs={"pk": order.id})

        self.client.force_authenticate(user=self.buyer)
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=AdminFactory())
        self.assertEqual(self.client.delete(url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Order.objects.filter(id=order.id).exists())
