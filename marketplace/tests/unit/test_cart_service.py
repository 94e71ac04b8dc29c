from decimal import Decimal

import pytest

from marketplace.models import CartItem
from marketplace.services import CartService
from marketplace.tests.factories import (
    CartFactory,
    CartItemFactory,
    PendingProductFactory,
    ProductFactory,
    UserFactory,
)
from utils.service_base import ErrorCodes


MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.mark.unit
@pytest.mark.django_db
class TestCartService:
    def setup_method(self):
        self.service = CartService()
        self.user = UserFactory()
        self.product = ProductFactory(price=Decimal("25.00"), stock_quantity=5)

    def test_get_cart_creates_empty_cart(self):
        result = self.service.get_cart(self.user)

        assert result.ok
        assert result.value["items"] == []
        assert result.value["items_count"] == 0
        assert result.value["totals"] == {"subtotal": Decimal("0.00"), "item_count": 0}

    def test_get_cart_prices_with_discount(self):
        discounted = ProductFactory(price=Decimal("40.00"), discount_price=Decimal("30.00"))
        cart = CartFactory(user=self.user)
        CartItemFactory(cart=cart, product=self.product, quantity=2)
        CartItemFactory(cart=cart, product=discounted, quantity=1)

        cart_data = self.service.get_cart(self.user).value

        assert cart_data["items_count"] == 2
        assert cart_data["totals"]["subtotal"] == Decimal("80.00")
        lines = {item["product"].id: item for item in cart_data["items"]}
        assert lines[discounted.id]["unit_price"] == Decimal("30.00")
        assert lines[self.product.id]["line_total"] == Decimal("50.00")

    def test_add_to_cart(self):
        result = self.service.add_to_cart(self.user, self.product.id, 2)

        assert result.ok
        assert result.value["items"][0]["quantity"] == 2

    def test_adding_again_accumulates_quantity(self):
        self.service.add_to_cart(self.user, self.product.id, 2)

        result = self.service.add_to_cart(self.user, self.product.id, 3)

        assert result.ok
        assert CartItem.objects.get(cart__user=self.user).quantity == 5

    def test_cumulative_quantity_checked_against_stock(self):
        self.service.add_to_cart(self.user, self.product.id, 4)

        result = self.service.add_to_cart(self.user, self.product.id, 2)

        assert result.error == ErrorCodes.INSUFFICIENT_STOCK
        assert CartItem.objects.get(cart__user=self.user).quantity == 4

    def test_hidden_product_cannot_be_added(self):
        result = self.service.add_to_cart(self.user, PendingProductFactory().id, 1)

        assert result.error == ErrorCodes.PRODUCT_INACTIVE

    def test_add_unknown_product(self):
        assert self.service.add_to_cart(self.user, MISSING_ID, 1).error == ErrorCodes.PRODUCT_NOT_FOUND

    def test_add_non_positive_quantity(self):
        assert self.service.add_to_cart(self.user, self.product.id, 0).error == ErrorCodes.INVALID_QUANTITY

    def test_update_quantity(self):
        CartItemFactory(cart=CartFactory(user=self.user), product=self.product, quantity=1)

        result = self.service.update_quantity(self.user, self.product.id, 3)

        assert result.ok
        assert CartItem.objects.get(cart__user=self.user).quantity == 3

    def test_update_quantity_beyond_stock(self):
        CartItemFactory(cart=CartFactory(user=self.user), product=self.product, quantity=1)

        result = self.service.update_quantity(self.user, self.product.id, 6)

        assert result.error == ErrorCodes.INSUFFICIENT_STOCK

    def test_update_item_not_in_cart(self):
        result = self.service.update_quantity(self.user, self.product.id, 1)

        assert result.error == ErrorCodes.ITEM_NOT_IN_CART

    def test_remove_from_cart(self):
        CartItemFactory(cart=CartFactory(user=self.user), product=self.product)

        result = self.service.remove_from_cart(self.user, self.product.id)

        assert result.ok
        assert result.value["items_count"] == 0

    def test_remove_item_not_in_cart(self):
        assert self.service.remove_from_cart(self.user, self.product.id).error == ErrorCodes.ITEM_NOT_IN_CART

    def test_clear_cart_returns_removed_count(self):
        cart = CartFactory(user=self.user)
        CartItemFactory(cart=cart, product=self.product)
        CartItemFactory(cart=cart)

        result = self.service.clear_cart(self.user)

        assert result.value == 2
        assert not CartItem.objects.filter(cart=cart).exists()
