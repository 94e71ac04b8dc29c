from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.models import CartItem
from marketplace.tests.factories import (
    CartFactory,
    CartItemFactory,
    PendingProductFactory,
    ProductFactory,
    UserFactory,
)


class CartViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = UserFactory()
        self.product = ProductFactory(price=Decimal("30.00"), stock_quantity=4)
        self.client.force_authenticate(user=self.user)

        self.cart_url = reverse("marketplace:cart-list")
        self.add_url = reverse("marketplace:cart-add-item")
        self.update_url = reverse("marketplace:cart-update-item")
        self.remove_url = reverse("marketplace:cart-remove-item")
        self.clear_url = reverse("marketplace:cart-clear")

    def test_cart_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.client.get(self.cart_url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_get_empty_cart(self):
        response = self.client.get(self.cart_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["items_count"], 0)

    def test_add_item(self):
        response = self.client.post(self.add_url, {"product_id": str(self.product.id), "quantity": 2}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["items_count"], 1)
        self.assertEqual(response.data["items"][0]["line_total"], "60.00")

    def test_add_more_than_stock(self):
        response = self.client.post(self.add_url, {"product_id": str(self.product.id), "quantity": 5}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "insufficient_stock")

    def test_add_unapproved_product(self):
        pending = PendingProductFactory()

        response = self.client.post(self.add_url, {"product_id": str(pending.id)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "product_inactive")

    def test_update_item_quantity(self):
        CartItemFactory(cart=CartFactory(user=self.user), product=self.product, quantity=1)

        response = self.client.patch(
            self.update_url, {"product_id": str(self.product.id), "quantity": 3}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(CartItem.objects.get(cart__user=self.user).quantity, 3)

    def test_remove_missing_item(self):
        response = self.client.delete(self.remove_url, {"product_id": str(self.product.id)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "item_not_in_cart")

    def test_clear(self):
        cart = CartFactory(user=self.user)
        CartItemFactory(cart=cart, product=self.product)

        response = self.client.delete(self.clear_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["removed"], 1)
