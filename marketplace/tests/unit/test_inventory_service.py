from unittest.mock import patch

import pytest

from marketplace.models import Product
from marketplace.services import InventoryService
from marketplace.tests.factories import ProductFactory
from utils.service_base import ErrorCodes


MISSING_ID = "00000000-0000-0000-0000-000000000000"


@pytest.mark.unit
@pytest.mark.django_db
class TestInventoryService:
    def setup_method(self):
        self.service = InventoryService()

    def stock_of(self, product):
        return Product.objects.get(id=product.id).stock_quantity

    def test_check_availability(self):
        product = ProductFactory(stock_quantity=3)

        assert self.service.check_availability(product.id, 3).value is True
        assert self.service.check_availability(product.id, 4).value is False

    def test_check_availability_missing_product(self):
        result = self.service.check_availability(MISSING_ID, 1)

        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND

    def test_get_stock_level(self):
        product = ProductFactory(stock_quantity=7)

        assert self.service.get_stock_level(product.id).value == 7

    def test_decrement_stock(self):
        product = ProductFactory(stock_quantity=5)

        result = self.service.decrement_stock(product.id, 2)

        assert result.ok
        assert result.value == 2
        assert self.stock_of(product) == 3

    def test_decrement_to_zero(self):
        product = ProductFactory(stock_quantity=2)

        assert self.service.decrement_stock(product.id, 2).ok
        assert self.stock_of(product) == 0

    def test_decrement_insufficient_leaves_stock_untouched(self):
        product = ProductFactory(stock_quantity=1)

        result = self.service.decrement_stock(product.id, 2)

        assert result.error == ErrorCodes.INSUFFICIENT_STOCK
        assert self.stock_of(product) == 1

    def test_decrement_missing_product(self):
        result = self.service.decrement_stock(MISSING_ID, 1)

        assert result.error == ErrorCodes.PRODUCT_NOT_FOUND

    def test_decrement_rejects_non_positive_quantity(self):
        product = ProductFactory()

        assert self.service.decrement_stock(product.id, 0).error == ErrorCodes.INVALID_QUANTITY

    @patch("marketplace.cart.domain.services.inventory_service.stock_decrement_failures")
    def test_failed_decrement_is_counted(self, mock_counter):
        product = ProductFactory(stock_quantity=0)

        self.service.decrement_stock(product.id, 1)

        mock_counter.inc.assert_called_once()

    def test_restore_stock(self):
        product = ProductFactory(stock_quantity=4)

        result = self.service.restore_stock(product.id, 3, reason="order_cancelled")

        assert result.ok
        assert self.stock_of(product) == 7

    def test_restore_missing_product(self):
        assert self.service.restore_stock(MISSING_ID, 1).error == ErrorCodes.PRODUCT_NOT_FOUND

    def test_update_stock_set_and_add(self):
        product = ProductFactory(stock_quantity=4)

        assert self.service.update_stock(product.id, 10, "set").value == 10
        assert self.service.update_stock(product.id, 5, "add").value == 15

    def test_update_stock_validation(self):
        product = ProductFactory()

        assert self.service.update_stock(product.id, 1, "multiply").error == ErrorCodes.INVALID_INPUT
        assert self.service.update_stock(product.id, -1, "set").error == ErrorCodes.INVALID_QUANTITY
