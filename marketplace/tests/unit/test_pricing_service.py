from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from marketplace.cart.domain.services.pricing_service import to_money
from marketplace.services import PricingService


@pytest.mark.unit
class TestPricingServiceUnit:
    def setup_method(self):
        self.service = PricingService()

    def test_effective_price_prefers_discount(self):
        product = Mock(price=Decimal("100.00"), discount_price=Decimal("79.90"))

        assert self.service.effective_price(product) == Decimal("79.90")

    def test_effective_price_without_discount(self):
        product = Mock(price=Decimal("100"), discount_price=None)

        assert self.service.effective_price(product) == Decimal("100.00")

    def test_line_total(self):
        assert self.service.line_total(Decimal("19.99"), 3) == Decimal("59.97")

    def test_seller_amount_rounds_half_up(self):
        # 33.33 * 0.85 = 28.3305
        assert self.service.seller_amount(Decimal("33.33"), 1, Decimal("0.15")) == Decimal("28.33")
        # 0.05 * 0.90 = 0.045
        assert self.service.seller_amount(Decimal("0.05"), 1, Decimal("0.10")) == Decimal("0.05")

    def test_seller_amount_zero_commission(self):
        assert self.service.seller_amount(Decimal("50.00"), 2, Decimal("0")) == Decimal("100.00")

    @patch("backoffice.models.PlatformSettings.load", return_value=None)
    def test_commission_rate_defaults_without_settings(self, mock_load):
        assert self.service.commission_rate() == Decimal("0.10")

    @patch("backoffice.models.PlatformSettings.load")
    def test_commission_rate_from_settings(self, mock_load):
        mock_load.return_value = Mock(commission_rate=Decimal("0.2500"))

        assert self.service.commission_rate() == Decimal("0.25")

    @patch("backoffice.models.PlatformSettings.load")
    def test_commission_rate_out_of_range_falls_back(self, mock_load):
        mock_load.return_value = Mock(commission_rate=Decimal("1.5"))

        assert self.service.commission_rate() == Decimal("0.10")

    @patch("backoffice.models.PlatformSettings.load", side_effect=RuntimeError("no table"))
    def test_commission_rate_load_failure_falls_back(self, mock_load):
        assert self.service.commission_rate() == Decimal("0.10")

    def test_prices_match_compares_cents(self):
        assert self.service.prices_match("100", Decimal("100.00"))
        assert self.service.prices_match(99.999, Decimal("100.00"))
        assert not self.service.prices_match("99.98", Decimal("100.00"))
        assert not self.service.prices_match("abc", Decimal("100.00"))

    def test_calculate_cart_total(self):
        items = [
            Mock(product=Mock(price=Decimal("10.00"), discount_price=None), quantity=2),
            Mock(product=Mock(price=Decimal("50.00"), discount_price=Decimal("45.50")), quantity=1),
        ]

        result = self.service.calculate_cart_total(items)

        assert result.ok
        assert result.value == {"subtotal": Decimal("65.50"), "item_count": 3}

    def test_order_subtotal(self):
        assert self.service.order_subtotal("95.00", "15.00", "20.00") == Decimal("100.00")

    def test_to_money(self):
        assert to_money("1.005") == Decimal("1.01")
        assert to_money(3) == Decimal("3.00")
