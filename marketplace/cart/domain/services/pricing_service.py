"""
PricingService - Price Calculations

Handles effective prices, line totals, commission and seller payout amounts.
All calculations use Decimal for precision (no floating point errors).
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Iterable

from django.conf import settings

from marketplace.catalog.domain.models.catalog import Product
from utils.service_base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok


logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert a number or numeric string to a Decimal quantized to 2 dp."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class PricingService(BaseService):
    """
    Service for calculating prices, totals and seller payouts.

    Responsibilities:
    - Resolve the effective price of a product (discount price wins)
    - Calculate line, cart and order totals
    - Read the platform commission rate and split line totals into seller amounts

    The calculation methods are pure functions of their inputs; only
    ``commission_rate`` touches the database.
    """

    def __init__(self):
        super().__init__()
        self.default_commission_rate = Decimal(str(getattr(settings, "ORDER_DEFAULT_COMMISSION_RATE", "0.10")))

    def effective_price(self, product: Product) -> Decimal:
        """
        Price the buyer pays for one unit.

        Example:
            >>> product.price, product.discount_price = Decimal("100.00"), Decimal("80.00")
            >>> pricing_service.effective_price(product)
            Decimal('80.00')
        """
        price = product.discount_price if product.discount_price is not None else product.price
        return to_money(price)

    def line_total(self, unit_price, quantity: int) -> Decimal:
        return to_money(Decimal(str(unit_price)) * quantity)

    def seller_amount(self, unit_price, quantity: int, commission_rate=None) -> Decimal:
        """
        Amount owed to the seller for one order line.

        seller_amount = price * quantity * (1 - commission_rate), rounded half up to cents.

        Args:
            unit_price: Unit price paid by the buyer
            quantity: Number of units
            commission_rate: Platform share as a fraction; defaults to ``commission_rate()``
        """
        rate = self.commission_rate() if commission_rate is None else Decimal(str(commission_rate))
        gross = Decimal(str(unit_price)) * quantity
        return (gross * (Decimal("1") - rate)).quantize(CENT, rounding=ROUND_HALF_UP)

    def commission_rate(self) -> Decimal:
        """
        Platform commission rate as a fraction.

        Read from the PlatformSettings row; falls back to ORDER_DEFAULT_COMMISSION_RATE
        when the row does not exist or holds no usable value.
        """
        from backoffice.models import PlatformSettings

        try:
            platform_settings = PlatformSettings.load()
        except Exception as e:
            self.logger.warning(f"Could not load platform settings, using default commission: {e}")
            return self.default_commission_rate

        if platform_settings is None or platform_settings.commission_rate is None:
            return self.default_commission_rate

        try:
            rate = Decimal(str(platform_settings.commission_rate))
        except InvalidOperation:
            return self.default_commission_rate

        if rate < 0 or rate > 1:
            self.logger.warning(f"Commission rate {rate} out of range, using default")
            return self.default_commission_rate
        return rate

    def prices_match(self, client_price, server_price) -> bool:
        """Compare two prices after quantizing both to cents."""
        try:
            return to_money(client_price) == to_money(server_price)
        except (InvalidOperation, TypeError, ValueError):
            return False

    @BaseService.log_performance
    def calculate_cart_total(self, cart_items: Iterable) -> ServiceResult[Dict[str, Decimal]]:
        """
        Calculate the total for a shopping cart.

        Args:
            cart_items: CartItem instances (product loaded)

        Returns:
            ServiceResult with ``subtotal`` and ``item_count``
        """
        try:
            subtotal = Decimal("0.00")
            item_count = 0
            for item in cart_items:
                subtotal += self.line_total(self.effective_price(item.product), item.quantity)
                item_count += item.quantity

            return service_ok({"subtotal": to_money(subtotal), "item_count": item_count})

        except Exception as e:
            self.logger.error(f"Error calculating cart total: {e}", exc_info=True)
            return service_err(ErrorCodes.INTERNAL_ERROR, str(e))

    def order_subtotal(self, total_amount, shipping_fee=0, discount_amount=0) -> Decimal:
        """Subtotal implied by a client total: total - shipping + discount."""
        return to_money(Decimal(str(total_amount)) - Decimal(str(shipping_fee)) + Decimal(str(discount_amount)))
